"""Minio implementations of timebox repositories."""

from .user_document import MinioUserDocumentRepository

__all__ = [
    "MinioUserDocumentRepository",
]
