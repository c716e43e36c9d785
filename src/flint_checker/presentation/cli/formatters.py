"""Rich formatting utilities for the CLI.

Keeps all Rich rendering (tables, panels, syntax) in one module that
knows nothing about how results are produced.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from flint_checker.domain.models.enums import Verdict

if TYPE_CHECKING:
    from flint_checker.domain.models.result import CheckResult
    from flint_checker.infrastructure.formats.base import BaseFormat

console = Console()
err_console = Console(stderr=True)

_VERDICT_STYLE = {
    Verdict.PASSED: "green",
    Verdict.FAILED: "red",
    Verdict.ERRONEOUS: "yellow",
}


def verdict_markup(verdict: Verdict) -> str:
    return f"[{_VERDICT_STYLE[verdict]}]{verdict.value}[/]"


# ---------------------------------------------------------------------------
# Success / error panels
# ---------------------------------------------------------------------------


def success_panel(message: str, title: str = "Flint") -> None:
    """Print a green success panel."""
    console.print(Panel(message, title=title, border_style="green"))


def error_message(message: str) -> None:
    """Print a red error message."""
    err_console.print(f"[bold red]Error:[/] {message}")


# ---------------------------------------------------------------------------
# JSON / config rendering
# ---------------------------------------------------------------------------


def json_panel(raw_json: str, title: str = "Flint configuration") -> None:
    """Render JSON inside a syntax-highlighted panel."""
    console.print(
        Panel(
            Syntax(raw_json, "json", theme="monokai", line_numbers=True),
            title=title,
            border_style="blue",
        )
    )


# ---------------------------------------------------------------------------
# Formats table
# ---------------------------------------------------------------------------


def formats_table(formats: Sequence[BaseFormat]) -> None:
    """Print every available format with its mimetypes and categories."""
    table = Table(title="Available formats", show_header=True, border_style="blue")
    table.add_column("Format", style="cyan")
    table.add_column("Version")
    table.add_column("Mimetypes")
    table.add_column("Categories")
    table.add_column("Filter")

    for fmt in formats:
        active = fmt.pattern_filter
        table.add_row(
            fmt.format_name,
            fmt.version,
            "\n".join(sorted(fmt.accepted_mimetypes())),
            "\n".join(fmt.all_category_names()),
            "all patterns" if active is None else active.name,
        )
    console.print(table)


# ---------------------------------------------------------------------------
# Check results
# ---------------------------------------------------------------------------


def results_table(results: Sequence[CheckResult]) -> None:
    """Print one row per category of every result, plus a summary panel."""
    table = Table(title="Flint check results", show_header=True, border_style="blue")
    table.add_column("File", style="cyan")
    table.add_column("Format")
    table.add_column("Category")
    table.add_column("Result")
    table.add_column("Time (ms)", justify="right")

    for result in results:
        table.add_row(
            result.filename,
            "-" if result.is_unchecked else f"{result.format_name} {result.format_version}",
            "[bold]overall[/]",
            verdict_markup(result.verdict()),
            result.time_taken,
        )
        for name, cc in result.categories.items():
            verdict = Verdict.ERRONEOUS if cc is None else cc.verdict
            label = name if cc is not None else f"{name} (missing)"
            table.add_row("", "", label, verdict_markup(verdict), "")
    console.print(table)

    counts = {verdict: 0 for verdict in Verdict}
    for result in results:
        counts[result.verdict()] += 1
    color = "green"
    if counts[Verdict.ERRONEOUS]:
        color = "yellow"
    if counts[Verdict.FAILED]:
        color = "red"
    console.print(
        Panel(
            f"Checked: [bold]{len(results)}[/]  |  "
            f"Passed: {counts[Verdict.PASSED]}  |  "
            f"Failed: {counts[Verdict.FAILED]}  |  "
            f"Erroneous: {counts[Verdict.ERRONEOUS]}",
            title="Summary",
            border_style=color,
        )
    )
