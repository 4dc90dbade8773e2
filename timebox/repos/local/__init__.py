"""Local storage implementations of timebox repositories."""

from .directory import LocalDirectoryRepository
from .user_document import LocalUserDocumentRepository

__all__ = [
    "LocalDirectoryRepository",
    "LocalUserDocumentRepository",
]
