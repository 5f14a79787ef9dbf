"""Command-line interface for SahwSync."""

import logging
from typing import Optional, Sequence

from ..config.settings import SahwSyncSettings
from ..context import SyncContext
from ..utils.logging import apply_command_line_overrides, setup_logging
from .commands import clear_cache, dismiss_prompt, run_probe, show_status, update_prefs
from .parser import create_parser

logger = logging.getLogger(__name__)


async def main_entry(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point with argument parsing.

    Args:
        argv: Arguments to parse, defaults to ``sys.argv[1:]``

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    settings = SahwSyncSettings()
    if args.memory:
        settings.store_backend = "memory"
    apply_command_line_overrides(settings, args)
    setup_logging(settings)

    try:
        context = SyncContext.create(settings)
    except (ValueError, OSError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    try:
        await context.initialize()

        if args.command == "status":
            return await show_status(context)
        if args.command == "probe":
            return await run_probe(context)
        if args.command == "clear":
            return await clear_cache(context)
        if args.command == "dismiss":
            return await dismiss_prompt(context, args.duration)
        if args.command == "prefs":
            return await update_prefs(context, args)

        parser.error(f"Unknown command: {args.command}")
        return 1
    except Exception:
        logger.exception(f"Command '{args.command}' failed")
        return 1
    finally:
        await context.close()


__all__ = ["create_parser", "main_entry"]
