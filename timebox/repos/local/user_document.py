"""
Local file-based implementation of the UserDocumentRepository protocol.
Stores one JSON document per principal on the local filesystem.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import quote

from timebox.repositories import UserDocumentRepository

logger = logging.getLogger(__name__)


class LocalUserDocumentRepository(UserDocumentRepository):
    """
    A document store keeping each principal's document as
    ``<base_path>/users/<quoted key>.json``.
    """

    def __init__(self, base_path: str):
        self._base_path = Path(base_path).expanduser()

    def _get_users_path(self) -> Path:
        """Returns the path to the users subdirectory."""
        return self._base_path / "users"

    def _get_document_path(self, key: str) -> Path:
        """Returns the path to a specific user document file."""
        return self._get_users_path() / f"{quote(key, safe='')}.json"

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Reads a user document, None when no file exists."""
        document_path = self._get_document_path(key)
        if not document_path.exists():
            return None
        try:
            with open(document_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (IOError, json.JSONDecodeError):
            logger.warning(
                f"Could not read or parse user document: {document_path}",
                exc_info=True,
            )
            raise
        if not isinstance(data, dict):
            raise ValueError(
                f"User document is not a JSON object: {document_path}"
            )
        return data

    async def upsert(
        self, key: str, document: Dict[str, Any], merge: bool = True
    ) -> None:
        """Writes a user document, shallow-merging over the stored one."""
        os.makedirs(self._get_users_path(), exist_ok=True)
        document_path = self._get_document_path(key)

        stored = document
        if merge:
            existing = await self.get(key)
            if existing is not None:
                stored = {**existing, **document}

        tmp_path = document_path.with_suffix(".json.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(stored, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, document_path)
        except IOError:
            logger.error(
                f"Failed to write user document: {document_path}",
                exc_info=True,
            )
            raise
        logger.debug(
            "User document written",
            extra={"key": key, "path": str(document_path), "merge": merge},
        )
