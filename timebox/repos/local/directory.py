"""
Local YAML-based implementation of DirectoryRepository.

Expected layout::

    supervisors:
      "1050028": [Gudino]
    scopes:
      - scope_id: Charly
        identities:
          - {credentialSecret: "1001", displayName: John Smith}
        categories:
          - {id: 1, name: Sales}
          - {id: 2, name: Calls, parentId: 1}
"""

import logging
from pathlib import Path
from typing import Any, Dict, List

import yaml
from pydantic import ValidationError

from timebox.domain import CategoryRow, DirectoryIdentity
from timebox.repositories import DirectoryRepository

logger = logging.getLogger(__name__)


def _parse_parent_id(value: Any) -> int:
    """Blank or non-numeric parent ids mark a root row."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class LocalDirectoryRepository(DirectoryRepository):
    """
    Local YAML file implementation of DirectoryRepository.

    The file is read on every call; rows that cannot be parsed are skipped
    with a warning.
    """

    def __init__(
        self, config_path: str = "~/.config/timebox/directory.yaml"
    ):
        """
        Initialize with path to the directory file.

        Args:
            config_path: Path to YAML directory file, supports ~ expansion
        """
        self.config_path = Path(config_path).expanduser()
        logger.debug(
            f"Initialized LocalDirectoryRepository with path: "
            f"{self.config_path}"
        )

    def _read(self) -> Dict[str, Any]:
        if not self.config_path.exists():
            logger.warning(f"Directory file not found: {self.config_path}")
            return {}

        with open(self.config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            logger.error(
                f"Directory file must contain a YAML dictionary: "
                f"{self.config_path}"
            )
            return {}
        return data

    def _scope_entries(self) -> List[Dict[str, Any]]:
        scopes = self._read().get("scopes") or []
        if not isinstance(scopes, list):
            logger.error(
                f"'scopes' must be a list in directory file: "
                f"{self.config_path}"
            )
            return []
        return [
            entry
            for entry in scopes
            if isinstance(entry, dict) and entry.get("scope_id")
        ]

    def _scope(self, scope_id: str) -> Dict[str, Any]:
        for entry in self._scope_entries():
            if str(entry["scope_id"]) == scope_id:
                return entry
        logger.debug(f"Scope not found: {scope_id}")
        return {}

    async def list_scopes(self) -> List[str]:
        return [str(entry["scope_id"]) for entry in self._scope_entries()]

    async def get_identities(self, scope_id: str) -> List[DirectoryIdentity]:
        identities = []
        for row in self._scope(scope_id).get("identities") or []:
            try:
                identities.append(
                    DirectoryIdentity(
                        credential_secret=str(
                            row.get("credentialSecret", "")
                        ),
                        display_name=str(row.get("displayName", "")),
                        scope_id=scope_id,
                    )
                )
            except (AttributeError, ValidationError) as e:
                logger.warning(
                    f"Skipping malformed identity row in {scope_id}: {e}"
                )
        return identities

    async def get_category_rows(self, scope_id: str) -> List[CategoryRow]:
        rows = []
        for row in self._scope(scope_id).get("categories") or []:
            try:
                rows.append(
                    CategoryRow(
                        id=int(row["id"]),
                        name=str(row["name"]),
                        parent_id=_parse_parent_id(row.get("parentId")),
                    )
                )
            except (
                AttributeError,
                KeyError,
                TypeError,
                ValueError,
            ) as e:
                logger.warning(
                    f"Skipping malformed category row in {scope_id}: {e}"
                )
        return [row for row in rows if row.name]

    async def get_supervisor_scopes(self) -> Dict[str, List[str]]:
        supervisors = self._read().get("supervisors") or {}
        if not isinstance(supervisors, dict):
            logger.error(
                f"'supervisors' must be a mapping in directory file: "
                f"{self.config_path}"
            )
            return {}
        return {
            str(secret): [str(scope) for scope in (scopes or [])]
            for secret, scopes in supervisors.items()
        }
