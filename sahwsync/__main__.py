"""Main entry point for the sahwsync package.

This module enables running SahwSync as a package with ``python -m sahwsync``.
"""

import asyncio
import sys

from sahwsync.cli import main_entry


def main() -> None:
    """Entry point for python -m sahwsync and the console script."""
    try:
        exit_code = asyncio.run(main_entry())
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("Operation cancelled by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
