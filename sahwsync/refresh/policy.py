"""Decides when to ask the user to refresh stale data."""

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Optional, Union

from ..cache.models import CacheFreshness
from ..utils.helpers import Clock, utc_now
from .models import DismissalDuration, PromptFrequency, RefreshPreferences

if TYPE_CHECKING:
    from ..cache.manager import CacheManager
    from ..network.monitor import NetworkMonitor

logger = logging.getLogger(__name__)

AGGRESSIVE_PROMPT_HOURS = 12


def should_show_refresh_prompt(
    freshness: CacheFreshness,
    is_online: bool,
    preferences: RefreshPreferences,
    now: datetime,
) -> bool:
    """Apply the prompt rules to a freshness snapshot.

    Offline never prompts. Disabled auto prompts and an active dismissal
    window suppress the prompt. Otherwise the prompt frequency decides:
    conservative only for critically outdated data, normal whenever the
    freshness tier asks for a refresh, aggressive once data is older than
    12 hours.

    Args:
        freshness: Current cache freshness
        is_online: Whether the device is online
        preferences: User refresh preferences
        now: Current time

    Returns:
        True if the refresh prompt should be shown
    """
    if not is_online:
        return False
    if not preferences.enable_auto_prompts:
        return False
    if preferences.is_dismissed(now):
        return False

    frequency = preferences.prompt_frequency
    if frequency is PromptFrequency.CONSERVATIVE:
        return freshness.critically_outdated
    if frequency is PromptFrequency.AGGRESSIVE:
        return freshness.hours_old > AGGRESSIVE_PROMPT_HOURS
    return freshness.should_prompt_refresh


class RefreshPolicy:
    """Persisted refresh preferences plus the prompt decision."""

    def __init__(
        self,
        cache_manager: "CacheManager",
        network_monitor: Optional["NetworkMonitor"] = None,
        clock: Optional[Clock] = None,
    ):
        """Initialize refresh policy.

        Args:
            cache_manager: Cache manager holding freshness and preferences
            network_monitor: Live connectivity source; the persisted network
                flag is used when omitted
            clock: Callable returning the current aware datetime
        """
        self.cache_manager = cache_manager
        self.network_monitor = network_monitor
        self._clock = clock or utc_now

    async def _is_online(self) -> bool:
        if self.network_monitor is not None:
            return self.network_monitor.is_online
        return await self.cache_manager.get_network_status() == "online"

    async def get_refresh_preferences(self) -> RefreshPreferences:
        return await self.cache_manager.get_refresh_preferences()

    async def update_refresh_preferences(
        self,
        enable_auto_prompts: bool,
        prompt_frequency: Union[PromptFrequency, str],
    ) -> RefreshPreferences:
        """Persist new prompt settings, keeping any active dismissal window.

        Raises:
            ValueError: If ``prompt_frequency`` is not a known frequency
        """
        current = await self.cache_manager.get_refresh_preferences()
        updated = RefreshPreferences(
            enable_auto_prompts=enable_auto_prompts,
            prompt_frequency=PromptFrequency(prompt_frequency),
            dismissed_until=current.dismissed_until,
        )
        await self.cache_manager.save_refresh_preferences(updated)
        logger.info(
            f"Refresh preferences updated: auto prompts "
            f"{'on' if enable_auto_prompts else 'off'}, frequency {updated.prompt_frequency.value}"
        )
        return updated

    async def record_prompt_dismissal(
        self, duration: Union[DismissalDuration, str] = DismissalDuration.SESSION
    ) -> datetime:
        """Hide the prompt for the dismissal window.

        Args:
            duration: ``temporary`` (2h), ``session`` (8h) or ``extended`` (24h)

        Returns:
            The time until which the prompt stays hidden

        Raises:
            ValueError: If ``duration`` is not a known dismissal window
        """
        window = DismissalDuration(duration)
        dismissed_until = self._clock() + window.duration

        current = await self.cache_manager.get_refresh_preferences()
        await self.cache_manager.save_refresh_preferences(
            current.model_copy(update={"dismissed_until": dismissed_until})
        )

        logger.info(
            f"Refresh prompt dismissed ({window.value}) until {dismissed_until.isoformat()}"
        )
        return dismissed_until

    async def should_show_refresh_prompt(self, freshness: Optional[CacheFreshness] = None) -> bool:
        """Decide whether to surface the refresh prompt right now.

        Args:
            freshness: Freshness snapshot to evaluate; read from the cache when omitted

        Returns:
            True if the prompt should be shown, False otherwise or on error
        """
        try:
            if freshness is None:
                freshness = await self.cache_manager.get_cache_freshness()
            return should_show_refresh_prompt(
                freshness,
                await self._is_online(),
                await self.cache_manager.get_refresh_preferences(),
                self._clock(),
            )
        except Exception:
            logger.exception("Error evaluating refresh prompt")
            return False
