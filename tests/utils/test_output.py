"""Tests for coursecal.utils.output."""

import click
from click.testing import CliRunner

from coursecal.utils.output import format_heading_lines, print_empty, print_error, print_heading


class TestFormatHeadingLines:
    def test_returns_title_and_underline(self):
        assert format_heading_lines("Meetings") == ["Meetings", "========"]

    def test_strips_whitespace(self):
        assert format_heading_lines("  Events  ") == ["Events", "======"]


def _run(func, *args):
    @click.command()
    def command():
        func(*args)

    return CliRunner().invoke(command)


def test_print_heading():
    assert _run(print_heading, "Events").output == "Events\n======\n"


def test_print_empty():
    assert _run(print_empty, "meetings").output == "No meetings found.\n"


def test_print_error():
    assert "Error: store offline" in _run(print_error, "store offline").output
