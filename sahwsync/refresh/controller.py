"""Keeps the refresh prompt decision current while the app is running."""

import asyncio
import logging
from typing import TYPE_CHECKING, Callable, List, Optional, Set, Union

from pydantic import BaseModel

from ..cache.models import CacheFreshness
from ..utils.helpers import format_duration
from .models import DismissalDuration, PromptFrequency
from .policy import RefreshPolicy

if TYPE_CHECKING:
    from ..network.models import NetworkStatus
    from ..network.monitor import NetworkMonitor

logger = logging.getLogger(__name__)

DEFAULT_CHECK_INTERVAL = 30 * 60


class RefreshState(BaseModel):
    """What the UI needs to render the refresh prompt."""

    should_show_prompt: bool = False
    cache_freshness: Optional[CacheFreshness] = None
    is_online: bool = True
    loading: bool = True


StateListener = Callable[[RefreshState], None]


class SmartRefreshController:
    """Re-evaluates the refresh prompt on start, on reconnect and periodically."""

    def __init__(
        self,
        policy: RefreshPolicy,
        network_monitor: Optional["NetworkMonitor"] = None,
        check_interval: float = DEFAULT_CHECK_INTERVAL,
    ):
        """Initialize smart refresh controller.

        Args:
            policy: Refresh policy used for every check
            network_monitor: Monitor whose transitions trigger re-checks
            check_interval: Seconds between periodic checks
        """
        self.policy = policy
        self.network_monitor = network_monitor
        self.check_interval = check_interval

        self.running = False
        self.shutdown_event = asyncio.Event()

        self._state = RefreshState(
            is_online=network_monitor.is_online if network_monitor is not None else True
        )
        self._listeners: List[StateListener] = []
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._periodic_task: Optional["asyncio.Task[None]"] = None
        self._pending: Set["asyncio.Task[None]"] = set()

    @property
    def state(self) -> RefreshState:
        return self._state.model_copy()

    def add_listener(self, callback: StateListener) -> Callable[[], None]:
        """Subscribe to state changes; returns the unsubscribe function."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _set_state(self, **changes: object) -> None:
        new_state = self._state.model_copy(update=changes)
        if new_state == self._state:
            return
        self._state = new_state

        for listener in list(self._listeners):
            try:
                listener(self.state)
            except Exception:
                logger.exception("Error in refresh state listener")

    async def start(self) -> None:
        """Subscribe to connectivity, run the first check and start the timer."""
        if self.running:
            return

        self.running = True
        self.shutdown_event.clear()

        if self.network_monitor is not None:
            self._unsubscribe = self.network_monitor.add_listener(self._on_network_status)

        await self.check_refresh_status()
        self._periodic_task = asyncio.create_task(self._run_periodic_checks())

        interval = format_duration(int(self.check_interval))
        logger.info(f"Smart refresh started (interval: {interval})")

    async def stop(self) -> None:
        """Cancel the timer and unsubscribe from connectivity changes."""
        self.running = False
        self.shutdown_event.set()

        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

        tasks = list(self._pending)
        if self._periodic_task is not None:
            tasks.append(self._periodic_task)
            self._periodic_task = None

        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._pending.clear()

        logger.info("Smart refresh stopped")

    async def _run_periodic_checks(self) -> None:
        while self.running and not self.shutdown_event.is_set():
            try:
                # Wait for next check interval or shutdown signal
                await asyncio.wait_for(self.shutdown_event.wait(), timeout=self.check_interval)
                break
            except asyncio.TimeoutError:
                if self.running:
                    await self.check_refresh_status()

    def _on_network_status(self, status: "NetworkStatus") -> None:
        was_online = self._state.is_online

        if not status.is_online:
            self._set_state(is_online=False, should_show_prompt=False)
            return

        self._set_state(is_online=True)
        if not was_online and self.running:
            task = asyncio.get_running_loop().create_task(self.check_refresh_status())
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    async def check_refresh_status(self) -> None:
        """Refresh the freshness snapshot and the prompt decision."""
        self._set_state(loading=True)
        try:
            freshness = await self.policy.cache_manager.get_cache_freshness()
            should_show = await self.policy.should_show_refresh_prompt(freshness)

            self._set_state(
                cache_freshness=freshness,
                should_show_prompt=should_show and self._state.is_online,
                loading=False,
            )
            logger.debug(
                f"Refresh check: {freshness.status.value}, prompt "
                f"{'shown' if self._state.should_show_prompt else 'hidden'}"
            )
        except Exception:
            logger.exception("Error checking refresh status")
            self._set_state(loading=False)

    async def dismiss_prompt(
        self, duration: Union[DismissalDuration, str] = DismissalDuration.SESSION
    ) -> None:
        try:
            await self.policy.record_prompt_dismissal(duration)
        except Exception:
            logger.exception("Error dismissing prompt")
            return
        self._set_state(should_show_prompt=False)

    async def update_refresh_preferences(
        self,
        enable_auto_prompts: bool,
        prompt_frequency: Union[PromptFrequency, str],
    ) -> None:
        """Persist new preferences and re-check the prompt."""
        try:
            await self.policy.update_refresh_preferences(enable_auto_prompts, prompt_frequency)
        except Exception:
            logger.exception("Error updating refresh preferences")
            return
        await self.check_refresh_status()
