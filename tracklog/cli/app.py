"""Main Typer application — registers the tracklog commands.

Entry point: ``tracklog`` (configured via pyproject.toml scripts).

Commands: init, add, commit, log, status, checkout, verify.
Every command maps a ``TracklogError`` to exit code 1.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import Any, TypeVar

import typer
from rich.console import Console
from rich.markup import escape

from tracklog import __version__
from tracklog.cli.render import Renderer
from tracklog.config import settings
from tracklog.core.errors import TracklogError
from tracklog.core.repository import Repository

app = typer.Typer(
    name="tracklog",
    help="tracklog: a minimal content-addressed version control system.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

F = TypeVar("F", bound=Callable[..., Any])


def _reports_errors(func: F) -> F:
    """Print a ``TracklogError`` in red and exit with status 1."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except TracklogError as exc:
            err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
            raise typer.Exit(code=1) from exc

    return wrapper  # type: ignore[return-value]


def _repo_filename(repo: Repository, name: str) -> str:
    """Express a user-supplied path relative to the repository root."""
    return Path(os.path.relpath(os.path.abspath(name), repo.root)).as_posix()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"tracklog {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """tracklog: a minimal content-addressed version control system."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format="%(levelname)s:%(name)s:%(message)s",
    )


@app.command(name="init", help="Initialize a repository in the current directory.")
@_reports_errors
def init_cmd() -> None:
    result = Repository(Path.cwd()).init()
    if result.created:
        console.print("[green]Repository initialized.[/green]")
    else:
        console.print("[yellow]Repository already exists.[/yellow]")


@app.command(name="add", help="Add a file to the staging index.")
@_reports_errors
def add_cmd(
    filename: str = typer.Argument(..., help="File to stage."),
) -> None:
    repo = Repository.open(Path.cwd())
    name = _repo_filename(repo, filename)
    repo.add(name)
    console.print(f"[green]Added {escape(name)}[/green]")


@app.command(name="commit", help="Commit the staged files.")
@_reports_errors
def commit_cmd(
    message: str = typer.Argument(..., help="Commit message."),
) -> None:
    commit = Repository.open(Path.cwd()).commit(message)
    console.print(f"[cyan]Committed as {commit.commit_id}[/cyan]")


@app.command(name="log", help="Show the commit history.")
@_reports_errors
def log_cmd() -> None:
    repo = Repository.open(Path.cwd())
    Renderer(console).print_log(repo.history(), head=repo.head())


@app.command(name="status", help="Show staged files and their diffs.")
@_reports_errors
def status_cmd() -> None:
    repo = Repository.open(Path.cwd())
    Renderer(console).print_status(repo.status())


@app.command(name="checkout", help="Restore the files of a commit.")
@_reports_errors
def checkout_cmd(
    fragment: str = typer.Argument(..., help="Commit identifier or unique prefix."),
) -> None:
    report = Repository.open(Path.cwd()).checkout(fragment)
    Renderer(console).print_checkout(report)


@app.command(name="verify", help="Check the commit log chain and stored objects.")
@_reports_errors
def verify_cmd() -> None:
    report = Repository.open(Path.cwd()).verify()
    Renderer(console).print_verify(report)
    if not report.ok:
        raise typer.Exit(code=1)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
