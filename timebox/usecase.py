"""
Defines the use cases for loading, saving and seeding planner documents.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from .categories import build_hierarchy
from .domain import (
    DEFAULT_END_HOUR,
    DEFAULT_START_HOUR,
    Directory,
    Role,
    UserRecord,
    normalize_key,
)
from .errors import MalformedDocumentError, PersistenceError
from .repositories import DirectoryRepository, UserDocumentRepository

logger = logging.getLogger(__name__)

TIME_BOX_FIELD = "timeBox"


def _is_hour(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def merge_user_documents(
    remote: Optional[Mapping[str, Any]], local: Mapping[str, Any]
) -> Dict[str, Any]:
    """
    Combine the stored document with the local one for a merge-write.

    The time box is the union of both maps, the local DayRecord winning
    wholesale for dates present in both. Every other top-level field is a
    shallow union where local values win.
    """
    remote = dict(remote or {})
    remote_time_box = remote.get(TIME_BOX_FIELD)
    if not isinstance(remote_time_box, dict):
        remote_time_box = {}
    local_time_box = local.get(TIME_BOX_FIELD) or {}

    merged_time_box = {**remote_time_box, **local_time_box}
    return {**remote, **local, TIME_BOX_FIELD: merged_time_box}


class LoadUserRecordUseCase:
    """
    Overlays the stored document of a principal onto its seed record.

    Stored top-level fields win over the seed. The time box defaults to an
    empty map and the default hours are backfilled when they are missing or
    not numeric.
    """

    def __init__(self, document_repo: UserDocumentRepository):
        self.document_repo = document_repo

    async def execute(self, seed: UserRecord) -> UserRecord:
        key = seed.document_key
        logger.info("Loading user record", extra={"key": key})

        try:
            remote = await self.document_repo.get(key)
        except Exception as e:
            logger.error(
                "Failed to fetch user document",
                extra={"key": key, "error": str(e)},
                exc_info=True,
            )
            raise PersistenceError(key, "load", str(e)) from e

        if remote is None:
            logger.warning("No stored document found", extra={"key": key})
            return seed

        document = {**seed.to_document(), **remote}
        if not isinstance(document.get(TIME_BOX_FIELD), dict):
            document[TIME_BOX_FIELD] = {}
        if not _is_hour(document.get("defaultStartHour")):
            document["defaultStartHour"] = DEFAULT_START_HOUR
        if not _is_hour(document.get("defaultEndHour")):
            document["defaultEndHour"] = DEFAULT_END_HOUR

        try:
            record = UserRecord.model_validate(document)
        except ValidationError as e:
            logger.error(
                "Stored user document is malformed",
                extra={"key": key, "error_count": e.error_count()},
            )
            raise MalformedDocumentError(key, "load", str(e)) from e

        logger.info(
            "User record loaded",
            extra={"key": key, "day_count": len(record.time_box)},
        )
        return record


class SaveUserRecordUseCase:
    """
    Merge-writes a principal's record so that dates stored by other
    sessions are never dropped.

    1. Fetches the current stored document.
    2. Merges the time boxes, local wins per date.
    3. Shallow-merges the remaining top-level fields, local wins.
    4. Upserts the result.

    The fetch and the write are not atomic: two writers touching the same
    date race and the last write wins.
    """

    def __init__(self, document_repo: UserDocumentRepository):
        self.document_repo = document_repo

    async def execute(
        self, key: str, local_document: Mapping[str, Any]
    ) -> Dict[str, Any]:
        """
        Merge ``local_document`` into the stored document under ``key``.

        Raises:
            PersistenceError: when the fetch or the write fails. A failed
                fetch aborts the write.
        """
        try:
            remote = await self.document_repo.get(key)
        except Exception as e:
            logger.error(
                "Failed to fetch user document before save, aborting write",
                extra={"key": key, "error": str(e)},
                exc_info=True,
            )
            raise PersistenceError(key, "save", str(e)) from e

        final_document = merge_user_documents(remote, local_document)

        try:
            await self.document_repo.upsert(key, final_document, merge=True)
        except Exception as e:
            logger.error(
                "Failed to write user document",
                extra={"key": key, "error": str(e)},
                exc_info=True,
            )
            raise PersistenceError(key, "save", str(e)) from e

        logger.info(
            "User document saved",
            extra={
                "key": key,
                "created": remote is None,
                "day_count": len(final_document[TIME_BOX_FIELD]),
            },
        )
        return final_document

    async def save_record(self, user: UserRecord) -> Dict[str, Any]:
        return await self.execute(user.document_key, user.to_document())


class LoadDirectoryUseCase:
    """
    Reads the identity/category provider once and builds the startup
    Directory.

    Identities whose credential secret is in the provider's supervisor map
    become supervisors of the mapped scopes; everyone else owns the scope
    they were read from. A scope that cannot be read contributes nothing.
    """

    def __init__(self, directory_repo: DirectoryRepository):
        self.directory_repo = directory_repo

    async def execute(self) -> Directory:
        directory = Directory()
        try:
            scopes = await self.directory_repo.list_scopes()
        except Exception as e:
            logger.error(
                "Failed to list directory scopes, using empty directory",
                extra={"error": str(e)},
                exc_info=True,
            )
            return directory

        try:
            supervisor_scopes = (
                await self.directory_repo.get_supervisor_scopes()
            )
        except Exception as e:
            logger.error(
                "Failed to read supervisor scopes, treating all as owners",
                extra={"error": str(e)},
            )
            supervisor_scopes = {}

        for scope_id in scopes:
            await self._load_users(directory, scope_id, supervisor_scopes)
            await self._load_categories(directory, scope_id)

        logger.info(
            "Directory loaded",
            extra={
                "scope_count": len(scopes),
                "user_count": len(directory.users),
                "supervisor_count": sum(
                    1 for u in directory.users.values() if u.is_supervisor
                ),
            },
        )
        return directory

    async def _load_users(
        self,
        directory: Directory,
        scope_id: str,
        supervisor_scopes: Mapping[str, List[str]],
    ) -> None:
        try:
            identities = await self.directory_repo.get_identities(scope_id)
        except Exception as e:
            logger.error(
                "Failed to read identities for scope",
                extra={"scope_id": scope_id, "error": str(e)},
            )
            return

        for identity in identities:
            if not identity.display_name:
                continue
            key = normalize_key(identity.display_name)
            if key in directory.users:
                continue

            allowed = supervisor_scopes.get(identity.credential_secret)
            directory.users[key] = UserRecord(
                role=Role.SUPERVISOR if allowed is not None else Role.OWNER,
                credential_secret=identity.credential_secret,
                display_name=identity.display_name,
                scope_id=scope_id,
                allowed_scopes=list(allowed) if allowed is not None else None,
            )

    async def _load_categories(
        self, directory: Directory, scope_id: str
    ) -> None:
        try:
            rows = await self.directory_repo.get_category_rows(scope_id)
        except Exception as e:
            logger.error(
                "Failed to read categories for scope",
                extra={"scope_id": scope_id, "error": str(e)},
            )
            rows = []
        directory.categories[scope_id] = build_hierarchy(rows)


class SeedUserDocumentsUseCase:
    """
    Makes sure every directory principal has a stored document.

    Only identity fields are merge-written, so existing history and
    preferences such as default hours survive every seeding run.
    """

    def __init__(self, document_repo: UserDocumentRepository):
        self.save_use_case = SaveUserRecordUseCase(document_repo)

    async def seed_one(self, user: UserRecord) -> bool:
        try:
            await self.save_use_case.execute(
                user.document_key, user.identity_document()
            )
        except PersistenceError as e:
            logger.warning(
                "Could not seed user document",
                extra={"key": user.document_key, "error": str(e)},
            )
            return False
        return True

    async def execute(self, directory: Directory) -> int:
        seeded = 0
        for user in directory.users.values():
            if await self.seed_one(user):
                seeded += 1
        logger.info(
            "Seeded user documents",
            extra={"seeded": seeded, "total": len(directory.users)},
        )
        return seeded
