"""Repositories for the timebox domain."""

from .memory.user_document import MemoryUserDocumentRepository

__all__ = [
    "MemoryUserDocumentRepository",
]
