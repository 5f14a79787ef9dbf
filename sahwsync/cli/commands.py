"""Implementations of the diagnostic subcommands."""

import argparse
import logging

from ..context import SyncContext
from ..utils.helpers import format_time_ago

logger = logging.getLogger(__name__)


async def show_status(context: SyncContext) -> int:
    """Print freshness, cache sizes, the network flag and the prompt decision."""
    cache = context.cache_manager

    freshness = await cache.get_cache_freshness()
    stats = await cache.get_cache_stats()
    network_status = await cache.get_network_status()
    should_prompt = await context.refresh_policy.should_show_refresh_prompt(freshness)
    preferences = await cache.get_refresh_preferences()

    print(f"Network: {network_status}")
    if freshness.last_sync is None:
        print("Last sync: never")
    else:
        ago = format_time_ago(freshness.last_sync, cache.now())
        print(f"Last sync: {freshness.last_sync.isoformat()} ({ago})")
    print(f"Freshness: {freshness.status.value}")
    print(f"Refresh prompt: {'show' if should_prompt else 'hidden'}")
    print(
        f"Preferences: auto prompts {'on' if preferences.enable_auto_prompts else 'off'}, "
        f"frequency {preferences.prompt_frequency.value}"
    )
    if preferences.dismissed_until is not None:
        print(f"Dismissed until: {preferences.dismissed_until.isoformat()}")

    print("Cache sizes:")
    for name, size in stats.sizes.items():
        print(f"  {name:<18} {size:>8} bytes")
    print(f"  {'total':<18} {stats.total_size:>8} bytes")
    return 0


async def run_probe(context: SyncContext) -> int:
    """Probe connectivity and record a sync when it succeeds."""
    print(f"Probing {context.network_monitor.probe.url} ...")
    if not await context.network_monitor.test_connectivity():
        print("Offline: probe failed")
        return 1

    await context.cache_manager.sync_when_online()
    print("Online: sync marker updated")
    return 0


async def clear_cache(context: SyncContext) -> int:
    await context.cache_manager.clear_all_cache()
    print("Cache cleared")
    return 0


async def dismiss_prompt(context: SyncContext, duration: str) -> int:
    until = await context.refresh_policy.record_prompt_dismissal(duration)
    print(f"Refresh prompt dismissed until {until.isoformat()}")
    return 0


async def update_prefs(context: SyncContext, args: argparse.Namespace) -> int:
    """Update refresh preferences from the given options, then print them."""
    policy = context.refresh_policy
    current = await policy.get_refresh_preferences()

    if args.auto_prompts is not None or args.frequency is not None:
        enable = current.enable_auto_prompts if args.auto_prompts is None else args.auto_prompts
        frequency = args.frequency or current.prompt_frequency
        current = await policy.update_refresh_preferences(enable, frequency)

    print(f"Auto prompts: {'on' if current.enable_auto_prompts else 'off'}")
    print(f"Prompt frequency: {current.prompt_frequency.value}")
    return 0
