"""Store-specific exceptions."""

from typing import Optional


class StoreError(Exception):
    """Raised by key-value store implementations when an operation fails."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.key = key
