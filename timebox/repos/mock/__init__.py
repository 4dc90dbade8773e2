"""Mock repositories with sample data for demos and tests."""

from .directory import MockDirectoryRepository

__all__ = [
    "MockDirectoryRepository",
]
