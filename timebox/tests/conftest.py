from typing import Any, Dict, List
from unittest.mock import patch

import pytest

from timebox.domain import Directory
from timebox.repos.memory.user_document import MemoryUserDocumentRepository
from timebox.tests.factories import sample_directory


@pytest.fixture
def directory() -> Directory:
    """Provide the sample directory used by session tests."""
    return sample_directory()


@pytest.fixture
def document_repo() -> MemoryUserDocumentRepository:
    """Provide an empty in-memory document store."""
    return MemoryUserDocumentRepository()


@pytest.fixture
def mock_workflow_activities() -> Dict[str, Any]:
    """Provide utilities for mocking workflow activities in unit tests."""

    def patch_execute_activity(activity_responses: List[Any]) -> Any:
        """
        Patch workflow.execute_activity with a sequence of responses.

        Args:
            activity_responses: List of return values for activities in call
                order
        """
        return patch(
            "temporalio.workflow.execute_activity",
            side_effect=activity_responses,
        )

    return {"patch_execute_activity": patch_execute_activity}
