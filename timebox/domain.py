"""
Timebox domain models.

These models describe a principal's planner state as it is stored in the
remote document store. Python attributes are snake_case; documents use the
camelCase field names the stored data already carries (``timeBox``,
``startHour``, ``brainDump`` ...), so every model is configured with a camel
alias generator and accepts either spelling on input.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

DEFAULT_START_HOUR = 7
DEFAULT_END_HOUR = 23


def normalize_key(display_name: str) -> str:
    """Document store key for a principal: trimmed, lower-cased name."""
    return display_name.strip().lower()


class _DocumentModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Enums ---


class Role(str, Enum):
    """Role of a principal in the planner."""

    OWNER = "owner"
    SUPERVISOR = "supervisor"


class RepeatFrequency(str, Enum):
    """Repeat tag attached to a schedule slot.

    Only DAILY and WEEKLY are propagated forward; MONTHLY is recognised but
    never copied by the recurrence engine.
    """

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


# --- Categories ---


class CategoryRow(_DocumentModel):
    """One flat row from the category source. parent_id 0 marks a root."""

    id: int
    name: str
    parent_id: int = 0

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()


class CategoryNode(BaseModel):
    """A node of a category tree."""

    name: str
    children: List["CategoryNode"] = Field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return not self.children


# --- Day records ---


class ScheduleSlot(_DocumentModel):
    """The content of one quarter-hour slot."""

    text: str = ""
    repeat: RepeatFrequency = RepeatFrequency.NONE

    @field_validator("repeat", mode="before")
    @classmethod
    def empty_repeat_is_none(cls, v: Any) -> Any:
        if v is None or v == "":
            return RepeatFrequency.NONE
        return v

    @property
    def is_empty(self) -> bool:
        return not self.text


class ChecklistItem(_DocumentModel):
    """A priority or brain-dump entry."""

    text: str = ""
    completed: bool = False


class DayRecord(_DocumentModel):
    """
    Complete planner state for one principal on one calendar date.

    start_hour and end_hour are hour-of-day integers; they are not validated
    against each other, an inverted range simply produces no slots.
    """

    start_hour: int = DEFAULT_START_HOUR
    end_hour: int = DEFAULT_END_HOUR
    priorities: List[ChecklistItem] = Field(default_factory=list)
    brain_dump: List[ChecklistItem] = Field(default_factory=list)
    schedule: Dict[str, ScheduleSlot] = Field(default_factory=dict)
    home_office: bool = False
    confetti_shown: bool = False

    @property
    def incomplete_count(self) -> int:
        return sum(
            1
            for item in [*self.priorities, *self.brain_dump]
            if not item.completed
        )


# --- Principals ---


class UserRecord(_DocumentModel):
    """
    A principal and its complete planner history.

    Top-level fields that are unknown to this model but present in a stored
    document are kept as extras and written back unchanged.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    role: Role = Role.OWNER
    credential_secret: str = ""
    display_name: str
    scope_id: str = ""
    allowed_scopes: Optional[List[str]] = None
    default_start_hour: int = DEFAULT_START_HOUR
    default_end_hour: int = DEFAULT_END_HOUR
    time_box: Dict[str, DayRecord] = Field(default_factory=dict)

    @property
    def document_key(self) -> str:
        return normalize_key(self.display_name)

    @property
    def is_supervisor(self) -> bool:
        return self.role == Role.SUPERVISOR

    def permitted_scopes(self) -> List[str]:
        """Scopes whose categories (and owners) this principal may see."""
        if self.is_supervisor:
            return list(self.allowed_scopes or [])
        return [self.scope_id] if self.scope_id else []

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the stored document shape."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)

    def identity_document(self) -> Dict[str, Any]:
        """Only the identity fields, as written when seeding the store."""
        document = self.model_dump(
            by_alias=True,
            mode="json",
            exclude_none=True,
            include={
                "role",
                "credential_secret",
                "display_name",
                "scope_id",
                "allowed_scopes",
            },
        )
        document["timeBox"] = {}
        return document


# --- Directory ---


class DirectoryIdentity(_DocumentModel):
    """One identity row read from a directory scope."""

    credential_secret: str
    display_name: str
    scope_id: str

    @field_validator("credential_secret", "display_name")
    @classmethod
    def strip_value(cls, v: str) -> str:
        return v.strip()


class Directory(BaseModel):
    """
    Startup snapshot of the identity/category provider: seed user records
    keyed by document key and category forests keyed by scope.
    """

    users: Dict[str, UserRecord] = Field(default_factory=dict)
    categories: Dict[str, List[CategoryNode]] = Field(default_factory=dict)

    def seed_record(self, username: str) -> Optional[UserRecord]:
        """Return a private copy of a known principal's seed record."""
        user = self.users.get(normalize_key(username))
        if user is None:
            return None
        return user.model_copy(deep=True)

    def category_tree_for(self, user: UserRecord) -> List[CategoryNode]:
        """Owners see their scope's forest; supervisors see the
        concatenation of the forests of every permitted scope."""
        tree: List[CategoryNode] = []
        for scope_id in user.permitted_scopes():
            tree.extend(self.categories.get(scope_id, []))
        return tree

    def owners_in_scopes(self, scopes: List[str]) -> List[UserRecord]:
        return [
            user
            for user in self.users.values()
            if user.role == Role.OWNER and user.scope_id in scopes
        ]
