"""Command-line argument parsing for SahwSync."""

import argparse

from ..refresh.models import DismissalDuration, PromptFrequency

LOG_LEVELS = ["DEBUG", "VERBOSE", "INFO", "WARNING", "ERROR", "CRITICAL"]


def create_parser() -> argparse.ArgumentParser:
    """Create the command line argument parser.

    Returns:
        argparse.ArgumentParser: Parser with one subcommand per diagnostic
            operation and the shared logging options

    Example:
        >>> parser = create_parser()
        >>> args = parser.parse_args(["--memory", "dismiss", "extended"])
        >>> args.duration
        'extended'
    """
    parser = argparse.ArgumentParser(
        prog="sahwsync",
        description="SahwSync - offline cache and synchronization diagnostics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s status                      # Show cache freshness, sizes and prompt decision
  %(prog)s probe                       # Test connectivity and record a sync on success
  %(prog)s clear                       # Remove all cached data
  %(prog)s dismiss extended            # Hide the refresh prompt for 24 hours
  %(prog)s prefs --frequency aggressive
        """,
    )

    parser.add_argument(
        "--memory",
        action="store_true",
        help="Use an in-memory store instead of the configured backend",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    subparsers.add_parser("status", help="Show cache freshness, stats and network flag")
    subparsers.add_parser("probe", help="Run the connectivity probe and sync on success")
    subparsers.add_parser("clear", help="Clear all cached data and the sync marker")

    dismiss = subparsers.add_parser("dismiss", help="Dismiss the refresh prompt")
    dismiss.add_argument(
        "duration",
        nargs="?",
        default=DismissalDuration.SESSION.value,
        choices=[d.value for d in DismissalDuration],
        help="Dismissal window: temporary (2h), session (8h) or extended (24h)",
    )

    prefs = subparsers.add_parser("prefs", help="Show or update refresh prompt preferences")
    prefs.add_argument(
        "--auto-prompts",
        dest="auto_prompts",
        action="store_true",
        default=None,
        help="Enable automatic refresh prompts",
    )
    prefs.add_argument(
        "--no-auto-prompts",
        dest="auto_prompts",
        action="store_false",
        help="Disable automatic refresh prompts",
    )
    prefs.add_argument(
        "--frequency",
        choices=[f.value for f in PromptFrequency],
        help="How eagerly to prompt for a refresh",
    )

    logging_group = parser.add_argument_group("logging", "Logging configuration options")

    logging_group.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        help="Set both console and file log levels",
    )

    logging_group.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging (sets level to VERBOSE)",
    )

    logging_group.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Only show errors on console (sets console level to ERROR)",
    )

    logging_group.add_argument(
        "--no-log-colors", action="store_true", help="Disable colored console output"
    )

    return parser
