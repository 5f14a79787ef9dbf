"""SahwSync - offline cache and synchronization layer for a prayer assistant."""

__version__ = "1.0.0"
__author__ = "SahwSync Team"
__description__ = "Offline cache, connectivity monitoring and refresh prompts"

__all__ = [
    "__author__",
    "__description__",
    "__version__",
]
