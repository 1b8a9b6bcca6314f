import pytest

TEST_EMAIL = "vendedora@aivi.mx"


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/api/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["service"] == "AIVI Silver House API"
        assert data["timestamp"].endswith("Z")


class TestAuthAPI:
    """Tests for sign-up, sign-in, sign-out and protected routes."""

    @pytest.mark.asyncio
    async def test_protected_route_requires_token(self, client):
        response = await client.get("/api/v1/products")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token_rejected(self, client):
        response = await client.get(
            "/api/v1/products",
            headers={"Authorization": "Bearer not-a-real-token"}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_sign_up_defaults(self, client):
        response = await client.post(
            "/api/v1/auth/sign-up",
            json={"email": "Joyera@Aivi.MX", "password": "plata-925-segura"}
        )

        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "joyera@aivi.mx"
        assert data["name"] == "joyera"
        assert data["role"] == "administrador"
        assert "password_hash" not in data

    @pytest.mark.asyncio
    async def test_duplicate_email(self, client, auth_headers):
        response = await client.post(
            "/api/v1/auth/sign-up",
            json={"email": TEST_EMAIL, "password": "otra-clave-larga"}
        )

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_short_password(self, client):
        response = await client.post(
            "/api/v1/auth/sign-up",
            json={"email": "nueva@aivi.mx", "password": "123"}
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_wrong_password(self, client, auth_headers):
        response = await client.post(
            "/api/v1/auth/sign-in",
            json={"email": TEST_EMAIL, "password": "incorrecta-123"}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_me(self, client, auth_headers):
        response = await client.get("/api/v1/auth/me", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["user"]["email"] == TEST_EMAIL

        anonymous = await client.get("/api/v1/auth/me")
        assert anonymous.status_code == 200
        assert anonymous.json()["user"] is None

    @pytest.mark.asyncio
    async def test_sign_out_revokes_token(self, client, auth_headers):
        response = await client.post("/api/v1/auth/sign-out", headers=auth_headers)
        assert response.status_code == 204

        response = await client.get("/api/v1/products", headers=auth_headers)
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_logins_are_audited(self, client, auth_headers):
        await client.post(
            "/api/v1/auth/sign-in",
            json={"email": TEST_EMAIL, "password": "incorrecta-123"},
            headers={"User-Agent": "Mozilla/5.0 (iPhone) Mobile"}
        )

        response = await client.get("/api/v1/audit?type=login", headers=auth_headers)

        assert response.status_code == 200
        entries = response.json()
        assert len(entries) == 2
        outcomes = sorted(e["details"]["success"] for e in entries)
        assert outcomes == [False, True]
        failed = next(e for e in entries if not e["details"]["success"])
        assert failed["details"]["device"] == "Mobile"
        assert failed["user_email"] == TEST_EMAIL
