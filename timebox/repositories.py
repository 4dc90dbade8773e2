"""
Defines the repository protocols the planner core depends on.
"""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from .domain import CategoryRow, DirectoryIdentity


@runtime_checkable
class DirectoryRepository(Protocol):
    """
    Protocol for the pull-only identity/category provider.

    The provider is partitioned into named scopes; each scope has a table of
    identities and a table of flat category rows.
    """

    async def list_scopes(self) -> List[str]:
        """List the names of all scopes, in source order."""
        ...

    async def get_identities(self, scope_id: str) -> List[DirectoryIdentity]:
        """Retrieve the identity rows of a scope."""
        ...

    async def get_category_rows(self, scope_id: str) -> List[CategoryRow]:
        """Retrieve the flat category rows of a scope, in source order."""
        ...

    async def get_supervisor_scopes(self) -> Dict[str, List[str]]:
        """
        Map of supervisor credential secrets to the scopes each supervisor
        may browse.
        """
        ...


@runtime_checkable
class UserDocumentRepository(Protocol):
    """
    Protocol for the key-value document store holding one document per
    principal, keyed by the normalized display name.
    """

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Fetch a document, or None when it does not exist."""
        ...

    async def upsert(
        self, key: str, document: Dict[str, Any], merge: bool = True
    ) -> None:
        """
        Write a document, creating it when absent.

        With ``merge`` the write is a shallow merge: top-level fields of the
        stored document that are missing from ``document`` are kept, fields
        present in ``document`` replace the stored ones. Without ``merge``
        the stored document is replaced.
        """
        ...
