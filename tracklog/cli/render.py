"""Rich terminal rendering for command results.

Color scheme
------------
- green   : success, added lines
- red     : errors, removed lines
- yellow  : warnings, line headers
- cyan    : commit identifiers and section titles
"""

from __future__ import annotations

from datetime import datetime

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from tracklog.core.history import CommitHistory
from tracklog.models.diff import ChangeKind, LineChange
from tracklog.models.reports import CheckoutReport, FileStatus, StatusReport, VerifyReport

_CHANGE_LABELS: dict[ChangeKind, str] = {
    ChangeKind.CHANGED: "changed",
    ChangeKind.ADDED: "added",
    ChangeKind.REMOVED: "removed",
}


def _local_time(ts: datetime) -> str:
    return ts.astimezone().strftime("%Y-%m-%d %H:%M:%S")


class Renderer:
    """Prints repository results to a Rich console.

    Parameters
    ----------
    console:
        Rich Console instance. A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    # ------------------------------------------------------------------
    # log
    # ------------------------------------------------------------------

    def log_table(self, history: CommitHistory, head: str | None = None) -> Table:
        table = Table(title="Commit History", show_lines=False)
        table.add_column("Commit", style="cyan", no_wrap=True)
        table.add_column("Date", style="dim")
        table.add_column("Files", justify="right")
        table.add_column("Message")
        for commit in history:
            marker = " [bold green](HEAD)[/bold green]" if commit.commit_id == head else ""
            table.add_row(
                f"{commit.commit_id}{marker}",
                _local_time(commit.timestamp),
                str(len(commit.files)),
                Text(commit.message),
            )
        return table

    def print_log(self, history: CommitHistory, head: str | None = None) -> None:
        if not history:
            self.console.print("[yellow]No commits yet.[/yellow]")
            return
        self.console.print(self.log_table(history, head))

    # ------------------------------------------------------------------
    # status
    # ------------------------------------------------------------------

    def print_changes(self, changes: tuple[LineChange, ...] | list[LineChange]) -> None:
        for change in changes:
            label = _CHANGE_LABELS[change.kind]
            self.console.print(f"[yellow]Line {change.line_number} {label}:[/yellow]")
            if change.old_line is not None:
                self.console.print(Text(f"- {change.old_line}", style="red"))
            if change.new_line is not None:
                self.console.print(Text(f"+ {change.new_line}", style="green"))

    def _print_file(self, status: FileStatus) -> None:
        digest = status.current_hash or "missing"
        self.console.print(Text(f"- {status.filename} : {digest}"))
        if status.is_missing:
            self.console.print(f"  [red]working file {escape(status.filename)} is missing[/red]")
        elif status.committed_object_missing:
            self.console.print(
                f"  [red]object {status.committed_hash} for {escape(status.filename)} "
                "not found; cannot diff[/red]"
            )
        elif status.changes:
            self.console.print(f"Diff for {escape(status.filename)}:")
            self.print_changes(status.changes)

    def print_status(self, report: StatusReport) -> None:
        self.console.print(f"HEAD: [cyan]{report.head or '(no commits)'}[/cyan]")
        if not report.has_pending_changes:
            self.console.print("[yellow]No changes to be committed.[/yellow]")
        else:
            self.console.print("[cyan]Changes to be committed:[/cyan]")
            for status in report.staged:
                self._print_file(status)

        if report.modified:
            self.console.print("\n[cyan]Modified (not staged):[/cyan]")
            for status in report.modified:
                self._print_file(status)

    # ------------------------------------------------------------------
    # checkout / verify
    # ------------------------------------------------------------------

    def print_checkout(self, report: CheckoutReport) -> None:
        for name in report.restored:
            self.console.print(Text(f"Restored {name}", style="green"))
        for missing in report.missing:
            self.console.print(
                Text(f"Object file {missing.content_hash} not found.", style="red")
            )
        style = "yellow" if report.is_partial else "green"
        suffix = " (partial)" if report.is_partial else ""
        self.console.print(
            Text(f"Checked out commit {report.commit_id}{suffix}", style=style)
        )

    def print_verify(self, report: VerifyReport) -> None:
        self.console.print(
            f"Verified [cyan]{report.commits_verified}[/cyan] commits and "
            f"[cyan]{report.objects_checked}[/cyan] objects."
        )
        for oid in report.missing_objects:
            self.console.print(f"[red]missing object {oid}[/red]")
        for oid in report.corrupt_objects:
            self.console.print(f"[bold red]corrupt object {oid}[/bold red]")
        if report.ok:
            self.console.print("[green]Repository is consistent.[/green]")
