import pytest

from joyeria.errors import ErrorType
from joyeria.exceptions import AppException
from joyeria.services import auth_service


class TestPasswords:
    """Tests for bcrypt password hashing."""

    def test_hash_and_verify(self):
        password_hash = auth_service.hash_password("plata-925-segura")

        assert password_hash != "plata-925-segura"
        assert auth_service.verify_password("plata-925-segura", password_hash)
        assert not auth_service.verify_password("otra-clave-123", password_hash)

    def test_short_password_rejected(self):
        with pytest.raises(AppException) as exc_info:
            auth_service.hash_password("corta")

        assert exc_info.value.error_type == ErrorType.VALIDATION

    def test_verify_against_garbage_hash(self):
        assert not auth_service.verify_password("plata-925-segura", "not-a-bcrypt-hash")


class TestTokens:

    def test_tokens_are_random_hex(self):
        token = auth_service.generate_token()

        assert len(token) == 64
        assert token != auth_service.generate_token()

    def test_token_hash_is_stable(self):
        token = auth_service.generate_token()

        assert auth_service.hash_token(token) == auth_service.hash_token(token)
        assert auth_service.hash_token(token) != token
