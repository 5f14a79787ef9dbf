"""Unit tests for the refresh prompt decision and dismissal bookkeeping."""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from sahwsync.cache.manager import classify_freshness
from sahwsync.refresh.models import DismissalDuration, PromptFrequency, RefreshPreferences
from sahwsync.refresh.policy import RefreshPolicy, should_show_refresh_prompt


@pytest.fixture
def policy(cache_manager, network_monitor, fake_clock):
    return RefreshPolicy(cache_manager, network_monitor, clock=fake_clock)


class TestDecisionRule:
    """Test the pure should_show_refresh_prompt function."""

    @pytest.mark.parametrize("hours", [0, 13, 30, 100, float("inf")])
    @pytest.mark.parametrize("frequency", list(PromptFrequency))
    def test_never_prompts_offline(self, fake_clock, hours, frequency):
        preferences = RefreshPreferences(prompt_frequency=frequency)

        assert not should_show_refresh_prompt(
            classify_freshness(hours), False, preferences, fake_clock.now
        )

    def test_normal_prompts_for_outdated(self, fake_clock):
        assert should_show_refresh_prompt(
            classify_freshness(30), True, RefreshPreferences(), fake_clock.now
        )

    def test_normal_does_not_prompt_for_stale(self, fake_clock):
        assert not should_show_refresh_prompt(
            classify_freshness(12), True, RefreshPreferences(), fake_clock.now
        )

    def test_conservative_ignores_merely_outdated(self, fake_clock):
        preferences = RefreshPreferences(prompt_frequency=PromptFrequency.CONSERVATIVE)

        assert not should_show_refresh_prompt(
            classify_freshness(30), True, preferences, fake_clock.now
        )
        assert should_show_refresh_prompt(
            classify_freshness(72), True, preferences, fake_clock.now
        )

    def test_aggressive_prompts_after_twelve_hours(self, fake_clock):
        preferences = RefreshPreferences(prompt_frequency=PromptFrequency.AGGRESSIVE)

        assert should_show_refresh_prompt(
            classify_freshness(13), True, preferences, fake_clock.now
        )
        assert not should_show_refresh_prompt(
            classify_freshness(12), True, preferences, fake_clock.now
        )

    def test_disabled_auto_prompts_suppress(self, fake_clock):
        preferences = RefreshPreferences(enable_auto_prompts=False)

        assert not should_show_refresh_prompt(
            classify_freshness(float("inf")), True, preferences, fake_clock.now
        )

    def test_dismissal_is_strict(self, fake_clock):
        preferences = RefreshPreferences(dismissed_until=fake_clock.now + timedelta(hours=8))
        freshness = classify_freshness(30)

        assert not should_show_refresh_prompt(
            freshness, True, preferences, fake_clock.now + timedelta(hours=7, minutes=59)
        )
        assert should_show_refresh_prompt(
            freshness, True, preferences, fake_clock.now + timedelta(hours=8)
        )


class TestRefreshPolicy:
    """Test RefreshPolicy persistence and end-to-end decisions."""

    @pytest.mark.asyncio
    async def test_outdated_online_normal_prompts(self, policy, cache_manager, fake_clock):
        await cache_manager.update_last_sync()
        fake_clock.advance(hours=30)

        assert await policy.should_show_refresh_prompt() is True

    @pytest.mark.asyncio
    async def test_outdated_offline_does_not_prompt(
        self, policy, cache_manager, network_monitor, fake_clock
    ):
        await cache_manager.update_last_sync()
        fake_clock.advance(hours=30)
        await network_monitor.handle_offline()

        assert await policy.should_show_refresh_prompt() is False

    @pytest.mark.asyncio
    async def test_falls_back_to_persisted_flag_without_monitor(self, cache_manager, fake_clock):
        policy = RefreshPolicy(cache_manager, clock=fake_clock)
        await cache_manager.set_network_status("offline")

        assert await policy.should_show_refresh_prompt() is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "duration,hours",
        [("temporary", 2), ("session", 8), ("extended", 24), (DismissalDuration.SESSION, 8)],
    )
    async def test_record_prompt_dismissal_windows(
        self, policy, cache_manager, fake_clock, duration, hours
    ):
        until = await policy.record_prompt_dismissal(duration)

        assert until == fake_clock.now + timedelta(hours=hours)
        preferences = await cache_manager.get_refresh_preferences()
        assert preferences.dismissed_until == until

    @pytest.mark.asyncio
    async def test_session_dismissal_suppresses_for_eight_hours(
        self, policy, cache_manager, fake_clock
    ):
        await cache_manager.update_last_sync()
        fake_clock.advance(hours=30)
        await policy.record_prompt_dismissal()

        fake_clock.advance(hours=7)
        assert await policy.should_show_refresh_prompt() is False

        fake_clock.advance(hours=1, seconds=1)
        assert await policy.should_show_refresh_prompt() is True

    @pytest.mark.asyncio
    async def test_unknown_dismissal_duration_raises(self, policy):
        with pytest.raises(ValueError):
            await policy.record_prompt_dismissal("forever")

    @pytest.mark.asyncio
    async def test_update_preferences_keeps_dismissal(self, policy, fake_clock):
        until = await policy.record_prompt_dismissal("extended")

        updated = await policy.update_refresh_preferences(False, "conservative")

        assert updated.enable_auto_prompts is False
        assert updated.prompt_frequency is PromptFrequency.CONSERVATIVE
        assert updated.dismissed_until == until
        assert await policy.get_refresh_preferences() == updated

    @pytest.mark.asyncio
    async def test_errors_suppress_prompt(self, policy, cache_manager):
        cache_manager.get_refresh_preferences = AsyncMock(side_effect=RuntimeError("boom"))

        assert await policy.should_show_refresh_prompt() is False
