"""Shared helpers for consistent human-readable CLI output."""

import click


def format_heading_lines(title: str) -> list[str]:
    """Return heading lines with a title and matching underline."""
    normalized = title.strip()
    return [normalized, "=" * len(normalized)]


def print_heading(title: str) -> None:
    """Print a consistent heading block."""
    for line in format_heading_lines(title):
        click.echo(line)


def print_empty(resource: str) -> None:
    """Print the shared empty-state sentence."""
    click.echo(f"No {resource} found.")


def print_error(message: str) -> None:
    """Print the shared error sentence."""
    click.echo(f"Error: {message}", err=True)
