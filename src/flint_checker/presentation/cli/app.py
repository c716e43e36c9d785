"""Thin CLI wrapper — Typer commands that delegate to the Container.

All checking is accessed through the Container (bootstrap.py).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.logging import RichHandler

from flint_checker.presentation.cli.formatters import (
    err_console,
    error_message,
    formats_table,
    json_panel,
    results_table,
    success_panel,
)

app = typer.Typer(
    name="flint",
    help="Flint: check PDF and EPUB files for well-formedness, DRM and policy conformance.",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

# Sub-app for config commands
config_app = typer.Typer(
    name="config",
    help="Inspect the Flint configuration",
    rich_markup_mode="rich",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to a JSON configuration file"),
]
PolicyDirOption = Annotated[
    Optional[Path],
    typer.Option("--policy-dir", "-p", help="Directory holding <FORMAT>-policy.json filters"),
]


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _container(config: Optional[Path], policy_dir: Optional[Path]):
    from flint_checker.bootstrap import Container
    from flint_checker.domain.errors import FlintError

    try:
        return Container(config_path=config, policy_dir=policy_dir)
    except (FileNotFoundError, FlintError) as e:
        error_message(str(e))
        raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# flint check
# ---------------------------------------------------------------------------


@app.command()
def check(
    path: Annotated[Path, typer.Argument(help="File or directory to check")],
    policy_dir: PolicyDirOption = None,
    config: ConfigOption = None,
    xml: Annotated[
        Optional[Path], typer.Option("--xml", help="Write the results as an XML report")
    ] = None,
    tsv: Annotated[
        Optional[Path], typer.Option("--tsv", help="Write a tab-separated summary")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output")] = False,
) -> None:
    """Check a file, or every file below a directory."""
    from flint_checker.application.report import write_tsv_report, write_xml_report

    _setup_logging(verbose)
    if not path.exists():
        error_message(f"File not found: {path}")
        raise typer.Exit(code=1)

    container = _container(config, policy_dir)
    results = container.check(path)
    if all(result.is_unchecked for result in results):
        error_message(f"Unable to check {path}: no format accepts it")
        raise typer.Exit(code=1)

    results_table(results)

    written = []
    if xml is not None:
        written.append(write_xml_report(results, xml))
    if tsv is not None:
        written.append(write_tsv_report(results, tsv))
    if written:
        success_panel(
            "\n".join(f"Report written to: [bold green]{p}[/]" for p in written),
            title="Reports",
        )


# ---------------------------------------------------------------------------
# flint formats
# ---------------------------------------------------------------------------


@app.command()
def formats(
    policy_dir: PolicyDirOption = None,
    config: ConfigOption = None,
) -> None:
    """List the available formats and the categories they produce."""
    container = _container(config, policy_dir)
    formats_table(container.formats)


# ---------------------------------------------------------------------------
# flint config show
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(config: ConfigOption = None) -> None:
    """Show the active configuration."""
    from flint_checker.config import get_config, load_config
    from flint_checker.domain.errors import ConfigurationError

    try:
        cfg = load_config(config) if config else get_config()
    except (FileNotFoundError, ConfigurationError) as e:
        error_message(str(e))
        raise typer.Exit(code=1)
    json_panel(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    app()
