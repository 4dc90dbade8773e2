"""
Tests for timebox workflows and activities.

Workflow tests verify the orchestration of activities, not the business
logic of seeding, which is covered in the use case tests.
"""

from datetime import timedelta
from typing import List
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from timebox.activities import (
    LOAD_SEED_RECORDS_ACTIVITY,
    SEED_USER_DOCUMENT_ACTIVITY,
    DirectorySyncActivities,
)
from timebox.config import TimeboxSettings
from timebox.domain import UserRecord
from timebox.repos.memory.user_document import MemoryUserDocumentRepository
from timebox.repos.mock.directory import MockDirectoryRepository
from timebox.tests.factories import minimal_user_record
from timebox.worker import run_worker
from timebox.workflows import SyncDirectoryWorkflow


class TestSyncDirectoryWorkflow:
    @pytest.mark.asyncio
    async def test_seeds_each_principal_and_counts_successes(
        self, mock_workflow_activities
    ) -> None:
        users = [
            minimal_user_record("Ana Lopez", "1001"),
            minimal_user_record("Ben Ortiz", "1002"),
        ]
        patcher = mock_workflow_activities["patch_execute_activity"]

        with patcher([users, True, False]) as mock_execute_activity:
            result = await SyncDirectoryWorkflow().run()

        assert result == 1
        assert mock_execute_activity.call_count == 3
        first = mock_execute_activity.call_args_list[0]
        assert first.args == (LOAD_SEED_RECORDS_ACTIVITY,)
        assert first.kwargs["result_type"] == List[UserRecord]
        second = mock_execute_activity.call_args_list[1]
        assert second.args == (SEED_USER_DOCUMENT_ACTIVITY, users[0])
        assert second.kwargs["start_to_close_timeout"] == timedelta(
            seconds=30
        )

    @pytest.mark.asyncio
    async def test_directory_load_failure_returns_zero(
        self, mock_workflow_activities
    ) -> None:
        patcher = mock_workflow_activities["patch_execute_activity"]

        with patcher([RuntimeError("directory down")]) as mock_execute:
            result = await SyncDirectoryWorkflow().run()

        assert result == 0
        mock_execute.assert_called_once()


class TestDirectorySyncActivities:
    @pytest.mark.asyncio
    async def test_load_seed_records_returns_directory_users(self) -> None:
        activities = DirectorySyncActivities(
            directory_repo=MockDirectoryRepository(),
            document_repo=MemoryUserDocumentRepository(),
        )

        users = await activities.load_seed_records()

        names = {user.display_name for user in users}
        assert "Ana Lopez" in names
        supervisors = {u.display_name for u in users if u.is_supervisor}
        assert supervisors == {"Carla Diaz", "Eva Cruz"}

    @pytest.mark.asyncio
    async def test_seed_user_document_writes_identity(self) -> None:
        document_repo = MemoryUserDocumentRepository()
        activities = DirectorySyncActivities(
            directory_repo=AsyncMock(), document_repo=document_repo
        )

        assert await activities.seed_user_document(minimal_user_record())

        stored = document_repo.storage_dict["ana lopez"]
        assert stored["credentialSecret"] == "1001"
        assert stored["timeBox"] == {}


class TestRunWorker:
    async def _run(self, settings: TimeboxSettings) -> AsyncMock:
        worker = MagicMock()
        worker.run = AsyncMock()
        with patch(
            "timebox.worker.get_temporal_client_with_retries",
            new=AsyncMock(),
        ), patch("timebox.worker.setup_logging"), patch(
            "timebox.worker.Worker", return_value=worker
        ), patch(
            "timebox.worker.schedule_directory_sync", new=AsyncMock()
        ) as schedule:
            await run_worker(settings)
        worker.run.assert_awaited_once()
        return schedule

    @pytest.mark.asyncio
    async def test_no_schedule_without_interval(self, tmp_path) -> None:
        schedule = await self._run(
            TimeboxSettings.from_env(
                {
                    "TIMEBOX_DATA_DIR": str(tmp_path),
                    "TIMEBOX_SYNC_INTERVAL_MINUTES": "soon",
                }
            )
        )

        schedule.assert_not_called()

    @pytest.mark.asyncio
    async def test_schedule_uses_configured_interval(self, tmp_path) -> None:
        schedule = await self._run(
            TimeboxSettings(data_dir=str(tmp_path), sync_interval_minutes=30)
        )

        schedule.assert_awaited_once()
        assert schedule.await_args.args[1:] == ("timebox-task-queue", 30)
