"""
Temporal worker for timebox operations.

This module sets up the Temporal worker that runs the directory sync
workflow and its activities, and optionally schedules the sync to run
periodically.
"""

import asyncio
import logging
from datetime import timedelta
from typing import Any, Callable, Optional, Sequence, cast

from temporalio.client import (
    Client,
    Schedule,
    ScheduleActionStartWorkflow,
    ScheduleIntervalSpec,
    ScheduleSpec,
)
from temporalio.contrib.pydantic import pydantic_data_converter
from temporalio.service import RPCError
from temporalio.worker import Worker

from .activities import DirectorySyncActivities
from .config import TimeboxSettings, build_document_repository, setup_logging
from .repos.local.directory import LocalDirectoryRepository
from .workflows import SyncDirectoryWorkflow

logger = logging.getLogger(__name__)


async def get_temporal_client_with_retries(
    endpoint: str, attempts: int = 10, delay: int = 5
) -> Client:
    """Attempt to connect to Temporal with retries."""
    logger.debug(
        "Attempting to connect to Temporal",
        extra={
            "endpoint": endpoint,
            "max_attempts": attempts,
            "delay_seconds": delay,
        },
    )

    for attempt in range(attempts):
        try:
            client = await Client.connect(
                endpoint,
                namespace="default",
                data_converter=pydantic_data_converter,
            )
            logger.info(
                "Successfully connected to Temporal",
                extra={"endpoint": endpoint, "attempt": attempt + 1},
            )
            return client
        except RPCError as e:
            logger.warning(
                "Failed to connect to Temporal",
                extra={
                    "endpoint": endpoint,
                    "attempt": attempt + 1,
                    "max_attempts": attempts,
                    "error": str(e),
                    "retry_in_seconds": delay,
                },
            )
            if attempt + 1 == attempts:
                logger.error(
                    "All connection attempts to Temporal failed",
                    extra={"endpoint": endpoint, "total_attempts": attempts},
                )
                raise
            await asyncio.sleep(delay)

    raise RuntimeError("Unexpected exit from retry loop")


async def schedule_directory_sync(
    client: Client, task_queue: str, interval_minutes: int
) -> None:
    """Create a Temporal schedule that reruns the directory sync."""
    schedule_id = "timebox-directory-sync"
    schedule = Schedule(
        action=ScheduleActionStartWorkflow(
            SyncDirectoryWorkflow.run,
            id="timebox-directory-sync-{{.ScheduledTime.Unix}}",
            task_queue=task_queue,
        ),
        spec=ScheduleSpec(
            intervals=[
                ScheduleIntervalSpec(every=timedelta(minutes=interval_minutes))
            ]
        ),
    )
    try:
        await client.create_schedule(schedule_id, schedule)
        logger.info(
            "Created directory sync schedule",
            extra={
                "schedule_id": schedule_id,
                "interval_minutes": interval_minutes,
            },
        )
    except Exception as e:
        logger.warning(f"Failed to create directory sync schedule: {e}")


async def run_worker(settings: Optional[TimeboxSettings] = None) -> None:
    """
    Run the Temporal worker for timebox operations.

    Args:
        settings: Runtime settings, read from the environment when omitted
    """
    setup_logging()
    settings = settings or TimeboxSettings.from_env()

    logger.info(
        "Starting timebox worker",
        extra={
            "temporal_address": settings.temporal_address,
            "task_queue": settings.task_queue,
            "store": settings.store,
        },
    )

    client = await get_temporal_client_with_retries(settings.temporal_address)

    directory_repo = LocalDirectoryRepository(
        config_path=settings.directory_path
    )
    document_repo = build_document_repository(settings)
    sync_activities = DirectorySyncActivities(
        directory_repo=directory_repo, document_repo=document_repo
    )
    activities = [
        sync_activities.load_seed_records,
        sync_activities.seed_user_document,
    ]

    if settings.sync_interval_minutes:
        await schedule_directory_sync(
            client, settings.task_queue, settings.sync_interval_minutes
        )

    worker = Worker(
        client,
        task_queue=settings.task_queue,
        workflows=[SyncDirectoryWorkflow],
        activities=cast(Sequence[Callable[..., Any]], activities),
    )

    logger.info(
        "Starting worker execution",
        extra={"activity_count": len(activities)},
    )
    await worker.run()


def main() -> None:
    """Entry point for the timebox worker."""
    asyncio.run(run_worker())


if __name__ == "__main__":
    main()
