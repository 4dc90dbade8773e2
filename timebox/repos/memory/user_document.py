"""
Memory implementation of UserDocumentRepository.

Documents are kept as deep copies in a dictionary so callers can never
mutate stored state by accident. All operations stay async to keep the
protocol shape.
"""

import copy
import logging
from typing import Any, Dict, Optional

from timebox.repositories import UserDocumentRepository

logger = logging.getLogger(__name__)


class MemoryUserDocumentRepository(UserDocumentRepository):
    """Dictionary-backed document store, mainly for tests and demos."""

    def __init__(
        self, documents: Optional[Dict[str, Dict[str, Any]]] = None
    ) -> None:
        self.storage_dict: Dict[str, Dict[str, Any]] = copy.deepcopy(
            documents or {}
        )
        logger.debug("Initializing MemoryUserDocumentRepository")

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        document = self.storage_dict.get(key)
        if document is None:
            logger.debug("Document not found", extra={"key": key})
            return None
        return copy.deepcopy(document)

    async def upsert(
        self, key: str, document: Dict[str, Any], merge: bool = True
    ) -> None:
        existing = self.storage_dict.get(key)
        if merge and existing is not None:
            stored = {**existing, **copy.deepcopy(document)}
        else:
            stored = copy.deepcopy(document)
        self.storage_dict[key] = stored
        logger.debug(
            "Document stored",
            extra={
                "key": key,
                "merge": merge,
                "created": existing is None,
            },
        )
