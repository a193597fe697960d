from collections.abc import Iterable

from rich.console import Console
from rich.table import Table

from ..models import CalendarEvent, MeetingInstance


def _format_bound(value) -> str:
    if value is None:
        return ""
    if hasattr(value, "hour"):
        return value.strftime("%Y-%m-%d %H:%M")
    return value.isoformat()


def build_events_table(events: Iterable[CalendarEvent]) -> Table:
    """One row per event: kind, start, end, all-day flag and title."""
    table = Table(show_header=True, header_style="bold magenta")
    for column in ("Type", "Start", "End", "All day", "Title"):
        table.add_column(column)
    for event in events:
        table.add_row(
            event.type.value,
            _format_bound(event.start),
            _format_bound(event.end),
            "yes" if event.all_day else "",
            event.title,
        )
    return table


def build_meetings_table(meetings: Iterable[MeetingInstance]) -> Table:
    table = Table(show_header=True, header_style="bold magenta")
    for column in ("Id", "Date", "Time", "Room", "Lecturer"):
        table.add_column(column)
    for meeting in meetings:
        table.add_row(
            meeting.id,
            meeting.date.isoformat(),
            f"{meeting.start_hour}-{meeting.end_hour}",
            meeting.room_code or "",
            meeting.lecturer_id or "",
        )
    return table


def print_table(table: Table) -> None:
    Console().print(table)
