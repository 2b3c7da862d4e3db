"""Shared utility functions for mvnscaffold.

Provides async command execution, Rich-based console output and the logging
setup used by the CLI.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: int = 120,
    capture: bool = True,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously.

    Args:
        cmd: Program and arguments.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
        capture: Whether to capture stdout/stderr (if ``False`` they inherit
            the parent's streams).
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  If *capture* is ``False``
        the stdout/stderr strings will be empty.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    pipe = asyncio.subprocess.PIPE if capture else None
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=pipe,
            stderr=pipe,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
        )
    except FileNotFoundError:
        return (127, "", f"Command not found: {cmd[0]}")

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (-1, "", f"Command timed out after {timeout}s: {' '.join(cmd)}")

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def configure_logging(verbose: bool = False) -> None:
    """Route the ``mvnscaffold`` loggers through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )
