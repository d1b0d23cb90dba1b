"""tracklog CLI — Typer-based command-line interface.

Provides the ``tracklog`` command with init, add, commit, log, status,
checkout and verify subcommands. All output uses Rich.
"""
