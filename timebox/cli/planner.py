#!/usr/bin/env python3
"""
CLI for the timebox planner.

Opens a planner session for a directory principal and runs one operation
against it: showing a day, editing a slot or priority, toggling home office
or printing a usage report. ``sync-directory`` seeds a stored document for
every principal, either in-process or through the Temporal worker.
"""

import asyncio
import logging
import sys
from datetime import date
from typing import List, Optional, Tuple

import click

from timebox.config import (
    TimeboxSettings,
    build_document_repository,
    setup_logging,
)
from timebox.domain import DayRecord, RepeatFrequency
from timebox.errors import ReadOnlySessionError
from timebox.path_selector import OTHER_OPTION, HierarchicalPathSelector
from timebox.reporting import ReportRange, sorted_usage
from timebox.repos.local.directory import LocalDirectoryRepository
from timebox.repos.mock.directory import MockDirectoryRepository
from timebox.repositories import DirectoryRepository
from timebox.session import PlannerSession
from timebox.slots import format_date, parse_date, slot_labels
from timebox.usecase import LoadDirectoryUseCase, SeedUserDocumentsUseCase

logger = logging.getLogger(__name__)


def _parse_day(value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    day = parse_date(value)
    if day is None:
        raise click.BadParameter(f"Expected YYYY-MM-DD, got '{value}'")
    return day


def _format_ratio(value: Optional[float]) -> str:
    if value is None:
        return "n/a"
    return f"{value:.0%}"


def create_directory_repository(
    settings: TimeboxSettings, use_mock: bool
) -> DirectoryRepository:
    """Factory function for the identity/category provider."""
    if use_mock:
        return MockDirectoryRepository()
    return LocalDirectoryRepository(config_path=settings.directory_path)


async def _open_session(
    ctx: click.Context,
    username: str,
    secret: str,
    day: Optional[date],
    target: Optional[str] = None,
) -> PlannerSession:
    settings: TimeboxSettings = ctx.obj["settings"]
    directory_repo = create_directory_repository(settings, ctx.obj["mock"])
    directory = await LoadDirectoryUseCase(directory_repo).execute()

    session = PlannerSession(
        directory=directory,
        document_repo=build_document_repository(settings),
        current_date=day,
    )
    ok = await session.login(username, secret)
    if ok and target:
        ok = await session.view_principal(target)

    for message in session.messages:
        click.echo(message, err=True)
    session.messages.clear()
    if not ok:
        sys.exit(1)
    return session


def _echo_messages(session: PlannerSession) -> None:
    for message in session.messages:
        click.echo(message, err=True)


def _echo_day(session: PlannerSession, record: DayRecord) -> None:
    user = session.active_user
    assert user is not None  # For MyPy
    suffix = " (read-only)" if session.read_only else ""
    click.echo(
        f"{user.display_name} - {format_date(session.current_date)}{suffix}"
    )
    click.echo(
        f"Hours: {record.start_hour}:00 - {record.end_hour}:00"
        f"{'  [home office]' if record.home_office else ''}"
    )
    click.echo()

    click.echo("Priorities:")
    for index, item in enumerate(record.priorities):
        mark = "x" if item.completed else " "
        click.echo(f"  {index}. [{mark}] {item.text}")
    click.echo("Brain dump:")
    for index, item in enumerate(record.brain_dump):
        mark = "x" if item.completed else " "
        click.echo(f"  {index}. [{mark}] {item.text}")
    click.echo()

    click.echo("Schedule:")
    for label in slot_labels(record.start_hour, record.end_hour):
        slot = record.schedule.get(label)
        text = slot.text if slot else ""
        repeat = ""
        if slot and slot.repeat != RepeatFrequency.NONE:
            repeat = f" ({slot.repeat.value})"
        click.echo(f"  {label:>8}  {text}{repeat}")


# --- Commands ---


@click.group()
@click.option(
    "--store",
    type=click.Choice(["local", "minio"]),
    default=None,
    help="Document store (defaults to TIMEBOX_STORE or local)",
)
@click.option(
    "--data-dir",
    default=None,
    help="Directory for the local document store",
)
@click.option(
    "--directory",
    "directory_path",
    default=None,
    help="Path to the directory YAML file",
)
@click.option(
    "--mock",
    is_flag=True,
    help="Use the built-in sample directory instead of the YAML file",
)
@click.option("--log-level", default=None, help="Logging level")
@click.pass_context
def main(
    ctx: click.Context,
    store: Optional[str],
    data_dir: Optional[str],
    directory_path: Optional[str],
    mock: bool,
    log_level: Optional[str],
) -> None:
    """Timebox daily planner."""
    setup_logging(log_level or "WARNING")
    settings = TimeboxSettings.from_env()
    overrides = {
        "store": store,
        "data_dir": data_dir,
        "directory_path": directory_path,
    }
    settings = settings.model_copy(
        update={k: v for k, v in overrides.items() if v is not None}
    )
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["mock"] = mock


async def _sync_directory(ctx: click.Context) -> int:
    settings: TimeboxSettings = ctx.obj["settings"]
    directory_repo = create_directory_repository(settings, ctx.obj["mock"])
    directory = await LoadDirectoryUseCase(directory_repo).execute()
    seeded = await SeedUserDocumentsUseCase(
        build_document_repository(settings)
    ).execute(directory)
    click.echo(f"Seeded {seeded} of {len(directory.users)} principals")
    return seeded


async def _trigger_sync(settings: TimeboxSettings) -> None:
    from timebox.worker import get_temporal_client_with_retries
    from timebox.workflows import SyncDirectoryWorkflow

    click.echo(f"Connecting to Temporal at {settings.temporal_address}...")
    client = await get_temporal_client_with_retries(
        settings.temporal_address, attempts=1
    )
    handle = await client.start_workflow(
        SyncDirectoryWorkflow.run,
        id=f"timebox-directory-sync-{date.today().isoformat()}",
        task_queue=settings.task_queue,
    )
    click.echo(f"Workflow ID: {handle.id}")
    seeded = await handle.result()
    click.echo(f"Seeded {seeded} principals")


@main.command("sync-directory")
@click.option(
    "--temporal",
    is_flag=True,
    help="Run the sync as a Temporal workflow instead of in-process",
)
@click.pass_context
def sync_directory(ctx: click.Context, temporal: bool) -> None:
    """Seed a stored document for every directory principal."""
    try:
        if temporal:
            asyncio.run(_trigger_sync(ctx.obj["settings"]))
        else:
            asyncio.run(_sync_directory(ctx))
    except Exception as e:
        logger.error(f"Directory sync failed: {str(e)}", exc_info=True)
        click.echo(f"Directory sync failed: {str(e)}", err=True)
        sys.exit(1)


def _session_options(func):
    func = click.option(
        "--date", "day", default=None, help="Date to open (YYYY-MM-DD)"
    )(func)
    func = click.option(
        "--secret", default="", help="Credential secret of the principal"
    )(func)
    func = click.option(
        "--user", "username", required=True, help="Display name to log in as"
    )(func)
    return func


async def _show_day(
    ctx: click.Context,
    username: str,
    secret: str,
    day: Optional[date],
    target: Optional[str],
) -> None:
    session = await _open_session(ctx, username, secret, day, target)
    _echo_day(session, session.current_day())
    _echo_messages(session)


@main.command("show-day")
@_session_options
@click.option(
    "--target", default=None, help="Owner to view read-only (supervisors)"
)
@click.pass_context
def show_day(
    ctx: click.Context,
    username: str,
    secret: str,
    day: Optional[str],
    target: Optional[str],
) -> None:
    """Print priorities, brain dump and schedule of one day."""
    asyncio.run(_show_day(ctx, username, secret, _parse_day(day), target))


def _slot_value(
    session: PlannerSession, categories: Tuple[str, ...], text: Optional[str]
) -> str:
    selector = HierarchicalPathSelector(session.category_tree)
    if text is not None:
        selector.choose(0, OTHER_OPTION)
        return selector.set_freeform_text(text)
    for level, name in enumerate(categories):
        selector.choose(level, name)
    return selector.value


async def _set_slot(
    ctx: click.Context,
    username: str,
    secret: str,
    day: Optional[date],
    label: str,
    categories: Tuple[str, ...],
    text: Optional[str],
    repeat: Optional[str],
) -> None:
    session = await _open_session(ctx, username, secret, day)
    record = session.current_day()
    labels: List[str] = list(slot_labels(record.start_hour, record.end_hour))
    if label not in labels:
        click.echo(f"'{label}' is not a slot of this day", err=True)
        sys.exit(1)

    try:
        value = _slot_value(session, categories, text)
    except ValueError as e:
        click.echo(str(e), err=True)
        sys.exit(1)

    slot = await session.set_slot(
        label,
        text=value if (categories or text is not None) else None,
        repeat=RepeatFrequency(repeat) if repeat else None,
    )
    click.echo(f"{label}: {slot.text} ({slot.repeat.value})")
    _echo_messages(session)


@main.command("set-slot")
@_session_options
@click.argument("label")
@click.option(
    "--category",
    "categories",
    multiple=True,
    help="Category name per level, outermost first (repeatable)",
)
@click.option("--text", default=None, help="Freeform slot text")
@click.option(
    "--repeat",
    type=click.Choice([r.value for r in RepeatFrequency]),
    default=None,
    help="Repeat tag for the slot",
)
@click.pass_context
def set_slot(
    ctx: click.Context,
    username: str,
    secret: str,
    day: Optional[str],
    label: str,
    categories: Tuple[str, ...],
    text: Optional[str],
    repeat: Optional[str],
) -> None:
    """Set the text and/or repeat tag of the slot at LABEL (e.g. "9:15 AM")."""
    if categories and text is not None:
        raise click.UsageError("Use either --category or --text, not both")
    asyncio.run(
        _set_slot(
            ctx,
            username,
            secret,
            _parse_day(day),
            label,
            categories,
            text,
            repeat,
        )
    )


async def _add_priority(
    ctx: click.Context,
    username: str,
    secret: str,
    day: Optional[date],
    text: str,
    brain_dump: bool,
) -> None:
    session = await _open_session(ctx, username, secret, day)
    if brain_dump:
        item = await session.add_brain_dump_item(text)
    else:
        item = await session.add_priority(text)
    click.echo(f"Added: {item.text}")
    _echo_messages(session)


@main.command("add-priority")
@_session_options
@click.argument("text")
@click.option(
    "--brain-dump", is_flag=True, help="Add to the brain dump list instead"
)
@click.pass_context
def add_priority(
    ctx: click.Context,
    username: str,
    secret: str,
    day: Optional[str],
    text: str,
    brain_dump: bool,
) -> None:
    """Add a checklist item to the day's priorities."""
    asyncio.run(
        _add_priority(ctx, username, secret, _parse_day(day), text, brain_dump)
    )


async def _toggle_home_office(
    ctx: click.Context, username: str, secret: str, day: Optional[date]
) -> None:
    session = await _open_session(ctx, username, secret, day)
    try:
        value = await session.toggle_home_office()
    except ReadOnlySessionError as e:
        click.echo(str(e), err=True)
        sys.exit(1)
    click.echo(f"Home office: {'yes' if value else 'no'}")
    _echo_messages(session)


@main.command("toggle-home-office")
@_session_options
@click.pass_context
def toggle_home_office(
    ctx: click.Context, username: str, secret: str, day: Optional[str]
) -> None:
    """Flip the home-office flag of the day."""
    asyncio.run(_toggle_home_office(ctx, username, secret, _parse_day(day)))


async def _report(
    ctx: click.Context,
    username: str,
    secret: str,
    day: Optional[date],
    report_range: str,
    target: Optional[str],
    today: Optional[date],
) -> None:
    session = await _open_session(ctx, username, secret, day, target)
    report = session.report(ReportRange(report_range), today=today)
    usage = report.usage

    click.echo(f"Report: {report.report_range.value} ({usage.day_count} days)")
    click.echo(
        f"Free: {usage.free_hours:.2f}h ({_format_ratio(usage.free_ratio)})  "
        f"Busy: {usage.busy_hours:.2f}h ({_format_ratio(usage.busy_ratio)})"
    )
    for text, hours in sorted_usage(usage.usage_map):
        share = _format_ratio(usage.usage_share(text))
        click.echo(f"  {text}: {hours:.2f}h ({share})")

    home = report.home_office
    click.echo(
        f"Home office: {home.home_office_days} days, office: "
        f"{home.office_days} days "
        f"({_format_ratio(home.home_office_ratio)} home office)"
    )
    _echo_messages(session)


@main.command("report")
@_session_options
@click.option(
    "--range",
    "report_range",
    type=click.Choice([r.value for r in ReportRange]),
    default=ReportRange.DAILY.value,
    help="Report window",
)
@click.option(
    "--target", default=None, help="Owner to report on (supervisors)"
)
@click.option(
    "--today",
    default=None,
    help="Anchor date of the trailing windows (YYYY-MM-DD)",
)
@click.pass_context
def report(
    ctx: click.Context,
    username: str,
    secret: str,
    day: Optional[str],
    report_range: str,
    target: Optional[str],
    today: Optional[str],
) -> None:
    """Print free/busy time, per-category usage and home-office counts."""
    asyncio.run(
        _report(
            ctx,
            username,
            secret,
            _parse_day(day),
            report_range,
            target,
            _parse_day(today),
        )
    )


if __name__ == "__main__":
    main()
