#!/usr/bin/env python3
import asyncio
import functools
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import click
from dotenv import load_dotenv

from .aggregator import VisibilityAggregator
from .config import Config, EngineSettings, StoreSettings
from .exceptions import CoursecalError
from .firestore import FirestoreDocumentStore
from .http_httpx import HttpxHttpClient
from .models import EventKind
from .regeneration import RegenerationCoordinator
from .store import MemoryDocumentStore
from .utils.output import print_empty, print_error, print_heading
from .utils.table import build_events_table, build_meetings_table, print_table

# Load environment variables from .env file
load_dotenv()


# Decorator to run async functions within Click commands
def async_cmd(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        return asyncio.run(func(*args, **kwargs))

    return wrapper


@asynccontextmanager
async def open_store(ctx: click.Context):
    """Yield the configured store; snapshot stores are written back on exit."""
    data_file: Optional[Path] = ctx.obj.get("DATA_FILE")
    if data_file is not None:
        store = MemoryDocumentStore.from_json_file(data_file)
        yield store
        if ctx.obj.get("WRITE_BACK"):
            store.save_json_file(data_file)
        return

    settings = StoreSettings.from_config(ctx.obj["CONFIG"])
    if not settings.project_id:
        raise click.UsageError(
            "No store configured: pass --data-file or set COURSECAL_PROJECT_ID"
        )
    store = FirestoreDocumentStore(
        HttpxHttpClient(bearer_token=settings.id_token),
        project_id=settings.project_id,
        database=settings.database,
    )
    try:
        yield store
    finally:
        await store.close()


@click.group()
@click.option(
    "--data-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="JSON snapshot of the collections to use instead of Firestore.",
)
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory holding config.yaml (defaults to ~/.config/coursecal).",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity: -v for INFO, -vv for DEBUG.",
)
@click.pass_context
def cli(ctx, data_file: Optional[Path], config_dir: Optional[Path], verbose: int):
    """Generate course meetings and inspect the unified calendar."""
    log_level = logging.WARNING
    if verbose == 1:
        log_level = logging.INFO
    elif verbose >= 2:
        log_level = logging.DEBUG

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )
    if log_level < logging.WARNING:
        for lib_name in ["httpx", "httpcore", "asyncio"]:
            logging.getLogger(lib_name).setLevel(logging.WARNING)

    ctx.ensure_object(dict)
    config = Config(config_dir)
    ctx.obj["CONFIG"] = config
    try:
        ctx.obj["SETTINGS"] = EngineSettings.from_config(config)
    except CoursecalError as e:
        raise click.ClickException(f"Invalid configuration in {config.config_file}: {e}") from e
    ctx.obj["DATA_FILE"] = data_file


@cli.command()
@click.argument("course_code")
@click.pass_context
@async_cmd
async def preview(ctx, course_code: str):
    """Show the meetings a course would get, without writing anything."""
    async with open_store(ctx) as store:
        coordinator = RegenerationCoordinator(store, ctx.obj["SETTINGS"])
        try:
            meetings = await coordinator.build_meetings(course_code)
        except CoursecalError as e:
            print_error(str(e))
            ctx.exit(1)

    print_heading(f"Meetings for {course_code}")
    if not meetings:
        print_empty("meetings")
        return
    print_table(build_meetings_table(meetings))
    click.echo(f"{len(meetings)} meetings")


@cli.command()
@click.argument("course_codes", nargs=-1)
@click.option("--semester", "semester_code", help="Regenerate every course of this semester.")
@click.option("--all", "all_courses", is_flag=True, help="Regenerate every course.")
@click.pass_context
@async_cmd
async def regenerate(ctx, course_codes: tuple, semester_code: Optional[str], all_courses: bool):
    """Regenerate and store the meetings of one or more courses."""
    if not course_codes and not semester_code and not all_courses:
        raise click.UsageError("Give course codes, --semester or --all")

    ctx.obj["WRITE_BACK"] = True
    async with open_store(ctx) as store:
        coordinator = RegenerationCoordinator(store, ctx.obj["SETTINGS"])
        results = []
        if all_courses:
            results.extend(await coordinator.regenerate_all())
        if semester_code:
            results.extend(await coordinator.regenerate_semester(semester_code))
        if course_codes:
            results.extend(await coordinator.regenerate_many(list(course_codes)))

    failed = 0
    for result in results:
        if result.success:
            click.echo(f"{result.course_code}: {result.written} meetings, {result.deleted} stale removed")
        else:
            failed += 1
            print_error(f"{result.course_code}: {result.error} (retry needed)")
    if failed:
        ctx.exit(1)


@cli.command("remove-course")
@click.argument("course_code")
@click.pass_context
@async_cmd
async def remove_course(ctx, course_code: str):
    """Delete all stored meetings of a course."""
    ctx.obj["WRITE_BACK"] = True
    async with open_store(ctx) as store:
        coordinator = RegenerationCoordinator(store, ctx.obj["SETTINGS"])
        try:
            deleted = await coordinator.remove_course(course_code)
        except CoursecalError as e:
            print_error(str(e))
            ctx.exit(1)
    click.echo(f"Deleted {deleted} meetings of {course_code}")


def _report_failures(aggregator: VisibilityAggregator) -> None:
    for failure in aggregator.last_failures:
        click.echo(f"Warning: {failure}", err=True)


@cli.command()
@click.option("--principal", help="User id whose personal events are included.")
@click.option(
    "--kind",
    "kinds",
    multiple=True,
    type=click.Choice([k.value for k in EventKind]),
    help="Only show these event kinds (can be used multiple times).",
)
@click.pass_context
@async_cmd
async def events(ctx, principal: Optional[str], kinds: tuple):
    """List every event visible to a user."""
    async with open_store(ctx) as store:
        aggregator = VisibilityAggregator(store, settings=ctx.obj["SETTINGS"])
        visible = await aggregator.get_visible_events(principal)
    _report_failures(aggregator)

    if kinds:
        visible = [e for e in visible if e.type.value in kinds]
    if not visible:
        print_empty("events")
        return
    print_table(build_events_table(visible))


@cli.command("range")
@click.argument("start", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.argument("end", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.option("--principal", help="User id whose personal events are included.")
@click.pass_context
@async_cmd
async def range_(ctx, start, end, principal: Optional[str]):
    """List events between two dates (YYYY-MM-DD, inclusive)."""
    async with open_store(ctx) as store:
        aggregator = VisibilityAggregator(store, settings=ctx.obj["SETTINGS"])
        try:
            selected = await aggregator.get_events_in_range(principal, start.date(), end.date())
        except CoursecalError as e:
            print_error(str(e))
            ctx.exit(1)
    _report_failures(aggregator)

    print_heading(f"Events {start.date()} to {end.date()}")
    if not selected:
        print_empty("events")
        return
    print_table(build_events_table(selected))


if __name__ == "__main__":
    cli()
