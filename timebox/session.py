"""
The planner session: an explicit context object carrying the logged-in
principal, the principal being viewed, the read-only flag and the current
date through every planner operation.
"""

import logging
from datetime import date
from typing import List, Optional

from .day_records import (
    DayRecordStore,
    add_item,
    mark_confetti_shown,
    remove_item,
    set_end_hour,
    set_item_text,
    set_slot,
    set_start_hour,
    toggle_home_office,
    toggle_item,
)
from .domain import (
    CategoryNode,
    ChecklistItem,
    DayRecord,
    Directory,
    RepeatFrequency,
    ScheduleSlot,
    UserRecord,
    normalize_key,
)
from .errors import (
    MalformedDocumentError,
    PersistenceError,
    ReadOnlySessionError,
)
from .recurrence import propagate_repeating_slots
from .reporting import PlannerReport, ReportRange, build_report
from .repositories import UserDocumentRepository
from .slots import format_date, shift_days
from .usecase import LoadUserRecordUseCase, SaveUserRecordUseCase

logger = logging.getLogger(__name__)


class PlannerSession:
    """
    One open planner session.

    Owners edit their own days. Supervisors can additionally open owners of
    their permitted scopes in read-only mode; nothing is ever written for a
    record opened that way. Every edit is followed by a merge-write of the
    active record; a failed write is logged and reported in ``messages``
    while the local state stays authoritative. When the own stored record
    could not be read, saves are suspended so it is never overwritten.
    """

    def __init__(
        self,
        directory: Directory,
        document_repo: UserDocumentRepository,
        current_date: Optional[date] = None,
    ):
        self.directory = directory
        self.load_use_case = LoadUserRecordUseCase(document_repo)
        self.save_use_case = SaveUserRecordUseCase(document_repo)

        self.logged_in_user: Optional[UserRecord] = None
        self.viewed_user: Optional[UserRecord] = None
        self.credential_verified = False
        self.saves_suspended = False
        self.current_date = current_date or date.today()
        self.category_tree: List[CategoryNode] = []
        self.messages: List[str] = []

    # --- Session state ---

    @property
    def read_only(self) -> bool:
        return self.viewed_user is not None

    @property
    def active_user(self) -> Optional[UserRecord]:
        if self.viewed_user is not None:
            return self.viewed_user
        return self.logged_in_user

    def _require_active(self) -> UserRecord:
        user = self.active_user
        if user is None:
            raise RuntimeError("No principal is logged in")
        return user

    @property
    def store(self) -> DayRecordStore:
        return DayRecordStore(self._require_active())

    def _note(self, message: str) -> None:
        self.messages.append(message)

    async def _load(
        self, seed: UserRecord, own_record: bool = False
    ) -> UserRecord:
        """
        Load a principal's stored record over its seed.

        When the stored document of the session's own principal exists but
        is malformed, automatic saves are suspended: writing the seed back
        would replace stored days that could not be read.
        """
        try:
            record = await self.load_use_case.execute(seed)
        except MalformedDocumentError as e:
            logger.error(
                "Stored record unreadable, suspending saves",
                extra={"key": seed.document_key, "error": str(e)},
            )
            if own_record:
                self.saves_suspended = True
            self._note(
                "Stored data could not be read, changes will not be saved."
            )
            return seed
        except PersistenceError as e:
            logger.warning(
                "Falling back to local record",
                extra={"key": seed.document_key, "error": str(e)},
            )
            self._note("Could not fetch stored data, using local fallback.")
            return seed

        if own_record:
            self.saves_suspended = False
        return record

    # --- Identity ---

    async def login(self, username: str, credential_secret: str) -> bool:
        """
        Open the planner of a directory principal.

        A credential mismatch does not block the session; it proceeds with
        ``credential_verified`` unset and a warning message.
        """
        seed = self.directory.seed_record(username)
        if seed is None:
            logger.info(
                "Unknown principal", extra={"username": normalize_key(username)}
            )
            self._note(f"User '{username}' is not recognized.")
            return False

        user = await self._load(seed, own_record=True)
        self.logged_in_user = user
        self.viewed_user = None
        self.category_tree = self.directory.category_tree_for(user)
        self.credential_verified = user.credential_secret == credential_secret
        if not self.credential_verified:
            logger.warning(
                "Credential mismatch, continuing unverified",
                extra={"key": user.document_key},
            )
            self._note("Incorrect credential (or blank if brand-new user).")

        logger.info(
            "Session opened",
            extra={
                "key": user.document_key,
                "role": user.role.value,
                "verified": self.credential_verified,
            },
        )
        await self.open_current_day()
        return True

    def browsable_principals(self) -> List[UserRecord]:
        """Owners a supervisor may open, from their permitted scopes."""
        user = self.logged_in_user
        if user is None or not user.is_supervisor:
            return []
        return self.directory.owners_in_scopes(user.permitted_scopes())

    async def view_principal(self, username: str) -> bool:
        """Open another principal's planner read-only (supervisors only)."""
        supervisor = self.logged_in_user
        if supervisor is None or not supervisor.is_supervisor:
            self._note("Only supervisors can view other planners.")
            return False

        key = normalize_key(username)
        allowed = {u.document_key for u in self.browsable_principals()}
        if key not in allowed:
            logger.info(
                "Principal outside permitted scopes",
                extra={"supervisor": supervisor.document_key, "target": key},
            )
            self._note(f"'{username}' is not within your permitted scopes.")
            return False

        seed = self.directory.seed_record(username)
        assert seed is not None  # For MyPy
        self.viewed_user = await self._load(seed)
        self.category_tree = self.directory.category_tree_for(
            self.viewed_user
        )
        self._note(f"Loaded agenda for {self.viewed_user.display_name}")
        return True

    def back_to_own_agenda(self) -> None:
        self.viewed_user = None
        if self.logged_in_user is not None:
            self.category_tree = self.directory.category_tree_for(
                self.logged_in_user
            )
        self._note("Back to your agenda.")

    # --- Date navigation ---

    def current_day(self) -> DayRecord:
        """The record shown for the current date, never inserted here."""
        return self.store.peek(self.current_date)

    async def open_current_day(self) -> DayRecord:
        """
        Materialize the current date and pull in repeating slots, saving
        when anything changed. Read-only views only peek.
        """
        if self.read_only:
            return self.current_day()

        user = self._require_active()
        record, created = self.store.ensure(self.current_date)
        filled = propagate_repeating_slots(user.time_box, self.current_date)
        if created or filled:
            await self._persist()
        return record

    async def go_to(self, day: date) -> DayRecord:
        self.current_date = day
        return await self.open_current_day()

    async def next_day(self) -> DayRecord:
        return await self.go_to(shift_days(self.current_date, 1))

    async def previous_day(self) -> DayRecord:
        return await self.go_to(shift_days(self.current_date, -1))

    # --- Editing ---

    def _editable_day(self) -> DayRecord:
        if self.read_only:
            raise ReadOnlySessionError(
                f"Viewing {self._require_active().display_name} read-only"
            )
        user = self._require_active()
        record, created = self.store.ensure(self.current_date)
        if created:
            propagate_repeating_slots(user.time_box, self.current_date)
        return record

    async def _persist(self) -> bool:
        if self.read_only:
            return False
        user = self._require_active()
        if self.saves_suspended:
            logger.warning(
                "Saves suspended, keeping change local",
                extra={"key": user.document_key},
            )
            return False
        try:
            await self.save_use_case.save_record(user)
        except PersistenceError as e:
            logger.warning(
                "Save failed, keeping local state",
                extra={"key": user.document_key, "error": str(e)},
            )
            self._note("Could not save changes, they are kept locally.")
            return False
        return True

    async def add_priority(self, text: str = "") -> ChecklistItem:
        item = add_item(self._editable_day().priorities, text)
        await self._persist()
        return item

    async def toggle_priority(self, index: int) -> ChecklistItem:
        item = toggle_item(self._editable_day().priorities, index)
        await self._persist()
        return item

    async def set_priority_text(self, index: int, text: str) -> ChecklistItem:
        item = set_item_text(self._editable_day().priorities, index, text)
        await self._persist()
        return item

    async def remove_priority(self, index: int) -> ChecklistItem:
        item = remove_item(self._editable_day().priorities, index)
        await self._persist()
        return item

    async def add_brain_dump_item(self, text: str = "") -> ChecklistItem:
        item = add_item(self._editable_day().brain_dump, text)
        await self._persist()
        return item

    async def toggle_brain_dump_item(self, index: int) -> ChecklistItem:
        item = toggle_item(self._editable_day().brain_dump, index)
        await self._persist()
        return item

    async def set_brain_dump_text(
        self, index: int, text: str
    ) -> ChecklistItem:
        item = set_item_text(self._editable_day().brain_dump, index, text)
        await self._persist()
        return item

    async def remove_brain_dump_item(self, index: int) -> ChecklistItem:
        item = remove_item(self._editable_day().brain_dump, index)
        await self._persist()
        return item

    async def set_slot(
        self,
        label: str,
        text: Optional[str] = None,
        repeat: Optional[RepeatFrequency] = None,
    ) -> ScheduleSlot:
        slot = set_slot(self._editable_day(), label, text=text, repeat=repeat)
        await self._persist()
        return slot

    async def set_start_hour(self, hour: int) -> DayRecord:
        record = self._editable_day()
        set_start_hour(record, hour)
        await self._persist()
        return record

    async def set_end_hour(self, hour: int) -> DayRecord:
        record = self._editable_day()
        set_end_hour(record, hour)
        await self._persist()
        return record

    async def toggle_home_office(self) -> bool:
        value = toggle_home_office(self._editable_day())
        await self._persist()
        return value

    async def mark_confetti_shown(self) -> bool:
        changed = mark_confetti_shown(self._editable_day())
        if changed:
            await self._persist()
        return changed

    # --- Reporting ---

    def report(
        self,
        report_range: ReportRange = ReportRange.DAILY,
        today: Optional[date] = None,
    ) -> PlannerReport:
        user = self._require_active()
        logger.debug(
            "Building report",
            extra={
                "key": user.document_key,
                "range": ReportRange(report_range).value,
                "current_date": format_date(self.current_date),
            },
        )
        return build_report(
            user.time_box,
            report_range,
            current_day=self.current_date,
            today=today or date.today(),
        )
