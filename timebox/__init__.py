"""
Timebox daily planner.

This package provides the planner domain (day records, quarter-hour
schedules, category trees), merge-safe persistence of per-principal
documents, reporting, and the session object the CLI drives.
"""

from .domain import (
    CategoryNode,
    CategoryRow,
    ChecklistItem,
    DayRecord,
    Directory,
    DirectoryIdentity,
    RepeatFrequency,
    Role,
    ScheduleSlot,
    UserRecord,
)
from .errors import PersistenceError, ReadOnlySessionError, TimeboxError
from .repositories import DirectoryRepository, UserDocumentRepository
from .session import PlannerSession
from .usecase import (
    LoadDirectoryUseCase,
    LoadUserRecordUseCase,
    SaveUserRecordUseCase,
    SeedUserDocumentsUseCase,
)

__all__ = [
    # Domain models
    "CategoryNode",
    "CategoryRow",
    "ChecklistItem",
    "DayRecord",
    "Directory",
    "DirectoryIdentity",
    "RepeatFrequency",
    "Role",
    "ScheduleSlot",
    "UserRecord",
    # Errors
    "TimeboxError",
    "PersistenceError",
    "ReadOnlySessionError",
    # Repository protocols
    "DirectoryRepository",
    "UserDocumentRepository",
    # Use cases and session
    "LoadDirectoryUseCase",
    "LoadUserRecordUseCase",
    "SaveUserRecordUseCase",
    "SeedUserDocumentsUseCase",
    "PlannerSession",
]
