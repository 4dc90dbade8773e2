"""
Activities for directory seeding.

Activities handle the repository I/O that must not run inside workflows.
"""

import logging
from typing import List

from temporalio import activity

from .domain import UserRecord
from .repositories import DirectoryRepository, UserDocumentRepository
from .usecase import LoadDirectoryUseCase, SeedUserDocumentsUseCase

logger = logging.getLogger(__name__)

LOAD_SEED_RECORDS_ACTIVITY = "timebox.directory_sync.load_seed_records"
SEED_USER_DOCUMENT_ACTIVITY = "timebox.directory_sync.seed_user_document"


class DirectorySyncActivities:
    """
    Directory seeding activities. This class is instantiated on the worker
    with concrete repositories and its methods are registered as activities.
    """

    def __init__(
        self,
        directory_repo: DirectoryRepository,
        document_repo: UserDocumentRepository,
    ):
        self._load_directory = LoadDirectoryUseCase(directory_repo)
        self._seed_documents = SeedUserDocumentsUseCase(document_repo)

    @activity.defn(name=LOAD_SEED_RECORDS_ACTIVITY)
    async def load_seed_records(self) -> List[UserRecord]:
        """Read the directory and return one seed record per principal."""
        directory = await self._load_directory.execute()
        logger.info(
            "Loaded seed records",
            extra={"user_count": len(directory.users)},
        )
        return list(directory.users.values())

    @activity.defn(name=SEED_USER_DOCUMENT_ACTIVITY)
    async def seed_user_document(self, user: UserRecord) -> bool:
        """Merge-write one principal's identity fields into the store."""
        return await self._seed_documents.seed_one(user)
