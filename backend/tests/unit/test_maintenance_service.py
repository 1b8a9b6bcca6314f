import asyncio
import pytest
from unittest.mock import patch, AsyncMock, MagicMock

from joyeria.config import Config
from joyeria.main import app, lifespan
from joyeria.schemas.maintenance import SweepResult
from joyeria.services.maintenance_service import run_periodic_sweep


class TestPeriodicSweep:
    """Tests for the background expiry sweep loop."""

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_the_loop(self):
        session_factory = MagicMock()
        expire = AsyncMock(side_effect=[
            RuntimeError("database is down"),
            SweepResult(installments=1, plans=0, reservations=0),
        ])
        sleep = AsyncMock(side_effect=[None, asyncio.CancelledError()])

        with patch("joyeria.services.maintenance_service.expire_overdue", expire), \
             patch("joyeria.services.maintenance_service.asyncio.sleep", sleep):
            with pytest.raises(asyncio.CancelledError):
                await run_periodic_sweep(session_factory, 60)

        assert expire.await_count == 2
        sleep.assert_awaited_with(60)


class TestLifespan:
    """Tests for app startup and shutdown."""

    @pytest.mark.asyncio
    async def test_starts_and_cancels_sweep(self, monkeypatch):
        monkeypatch.setattr(Config, "EXPIRY_SWEEP_INTERVAL_SECONDS", 5)
        started = asyncio.Event()
        cancelled = asyncio.Event()

        async def fake_sweep(session_factory, interval_seconds):
            assert interval_seconds == 5
            started.set()
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.set()
                raise

        with patch("joyeria.main.db") as mock_db, \
             patch("joyeria.main.run_periodic_sweep", fake_sweep):
            mock_db.connect = AsyncMock()
            mock_db.create_all = AsyncMock()
            mock_db.disconnect = AsyncMock()

            async with lifespan(app):
                await asyncio.wait_for(started.wait(), timeout=1)

            mock_db.connect.assert_awaited_once()
            mock_db.create_all.assert_awaited_once()
            mock_db.disconnect.assert_awaited_once()

        assert cancelled.is_set()

    @pytest.mark.asyncio
    async def test_sweep_disabled(self):
        with patch("joyeria.main.db") as mock_db, \
             patch("joyeria.main.run_periodic_sweep") as sweep:
            mock_db.connect = AsyncMock()
            mock_db.create_all = AsyncMock()
            mock_db.disconnect = AsyncMock()

            async with lifespan(app):
                pass

        sweep.assert_not_called()
