"""
Temporal workflows for timebox operations.

Workflows orchestrate activities in a deterministic manner; all repository
I/O happens inside the activities.
"""

import logging
from datetime import timedelta
from typing import List

from temporalio import workflow

with workflow.unsafe.imports_passed_through():
    from .activities import (
        LOAD_SEED_RECORDS_ACTIVITY,
        SEED_USER_DOCUMENT_ACTIVITY,
    )
    from .domain import UserRecord

logger = logging.getLogger(__name__)

ACTIVITY_TIMEOUT = timedelta(seconds=30)


@workflow.defn
class SyncDirectoryWorkflow:
    """
    Seeds a stored document for every principal in the directory.

    Each principal is seeded by its own activity so one failing write does
    not stop the others.
    """

    @workflow.run
    async def run(self) -> int:
        """
        Executes the directory sync.

        Returns:
            Number of principals seeded, 0 when the directory could not be
            loaded.
        """
        logger.info("Starting SyncDirectoryWorkflow")

        try:
            users = await workflow.execute_activity(
                LOAD_SEED_RECORDS_ACTIVITY,
                start_to_close_timeout=ACTIVITY_TIMEOUT,
                result_type=List[UserRecord],
            )
        except Exception as e:
            logger.error(
                "SyncDirectoryWorkflow could not load the directory",
                extra={"error": str(e)},
                exc_info=True,
            )
            return 0

        seeded = 0
        for user in users:
            result = await workflow.execute_activity(
                SEED_USER_DOCUMENT_ACTIVITY,
                user,
                start_to_close_timeout=ACTIVITY_TIMEOUT,
            )
            if result:
                seeded += 1

        logger.info(
            "SyncDirectoryWorkflow completed",
            extra={"seeded": seeded, "total": len(users)},
        )
        return seeded
