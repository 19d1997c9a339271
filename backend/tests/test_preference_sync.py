"""Tests for debounced preference persistence and loading."""

import asyncio
from unittest.mock import MagicMock

import pytest

from models.criteria import Weights
from models.result import Err, ErrorCode, Ok
from services.debouncer import Debouncer
from services.oracle_client import MalformedResponseError
from services.preference_sync import LOGIN_PROMPT_FALLBACK, PreferenceSync


def _sync(oracle, on_auth=None, delay_ms=10):
    return PreferenceSync(oracle, Debouncer(), on_auth or MagicMock(), delay_ms=delay_ms)


class TestSchedule:
    @pytest.mark.timing
    @pytest.mark.asyncio
    async def test_slider_drag_saves_once(self, fake_oracle):
        sync = _sync(fake_oracle)
        for value in (0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0):
            sync.schedule(Weights(weight_tuition=value))
            await asyncio.sleep(0.001)

        await asyncio.sleep(0.06)
        await sync._debouncer.drain()
        assert len(fake_oracle.saved) == 1
        assert fake_oracle.saved[0]["weight_tuition"] == 1.0

    @pytest.mark.timing
    @pytest.mark.asyncio
    async def test_close_cancels_pending_save(self, fake_oracle):
        sync = _sync(fake_oracle)
        sync.schedule(Weights(weight_program=0.9))
        sync.close()
        await asyncio.sleep(0.04)
        assert fake_oracle.saved == []


class TestSync:
    @pytest.mark.asyncio
    async def test_login_required_reaches_callback(self, fake_oracle):
        on_auth = MagicMock()
        fake_oracle.save_result = Err(ErrorCode.LOGIN_REQUIRED, message=None, status=401)
        sync = _sync(fake_oracle, on_auth)

        await sync.sync(Weights())

        on_auth.assert_called_once()
        decision = on_auth.call_args.args[0]
        assert decision.code == ErrorCode.LOGIN_REQUIRED
        assert decision.message == LOGIN_PROMPT_FALLBACK

    @pytest.mark.asyncio
    async def test_other_failures_are_only_logged(self, fake_oracle, caplog):
        on_auth = MagicMock()
        fake_oracle.save_result = Err(ErrorCode.TRANSIENT, message="timeout")
        sync = _sync(fake_oracle, on_auth)

        await sync.sync(Weights())

        on_auth.assert_not_called()
        assert "Failed to save preferences" in caplog.text

    @pytest.mark.asyncio
    async def test_unreadable_response_is_swallowed(self, fake_oracle):
        async def broken(weights):
            raise MalformedResponseError("not json")

        fake_oracle.save_preferences = broken
        await _sync(fake_oracle).sync(Weights())

    @pytest.mark.asyncio
    async def test_login_gate_after_close_is_dropped(self, fake_oracle):
        on_auth = MagicMock()
        fake_oracle.save_result = Err(ErrorCode.LOGIN_REQUIRED, message="Log in")
        sync = _sync(fake_oracle, on_auth)
        sync.close()

        await sync.sync(Weights())
        on_auth.assert_not_called()


class TestLoad:
    @pytest.mark.asyncio
    async def test_stored_values_fill_missing_from_defaults(self, fake_oracle):
        fake_oracle.preferences_result = Ok({"weight_tuition": 0.9, "weight_program": None, "id": 7})
        weights = await _sync(fake_oracle).load()
        assert weights.weight_tuition == 0.9
        assert weights.weight_program == 0.5
        assert weights.weight_language == 0.5

    @pytest.mark.asyncio
    async def test_nothing_stored(self, fake_oracle):
        fake_oracle.preferences_result = Ok(None)
        assert await _sync(fake_oracle).load() == Weights()

    @pytest.mark.asyncio
    async def test_anonymous_falls_back_to_defaults(self, fake_oracle):
        fake_oracle.preferences_result = Err(ErrorCode.LOGIN_REQUIRED, status=401)
        assert await _sync(fake_oracle).load() == Weights()

    @pytest.mark.asyncio
    async def test_invalid_values_fall_back_to_defaults(self, fake_oracle):
        fake_oracle.preferences_result = Ok({"weight_tuition": "lots"})
        assert await _sync(fake_oracle).load() == Weights()
