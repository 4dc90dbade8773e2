"""In-memory implementations of timebox repositories."""

from .user_document import MemoryUserDocumentRepository

__all__ = [
    "MemoryUserDocumentRepository",
]
