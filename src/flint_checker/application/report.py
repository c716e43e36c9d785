"""Report writers for a list of ``CheckResult`` objects.

* ``render_xml`` / ``write_xml_report`` — one ``<flint>`` document holding
  a ``<checkedFile>`` element per result.
* ``write_tsv_report`` — one row per result: the fixed summary fields
  followed by every category name seen across the results.
"""

from __future__ import annotations

import csv
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from flint_checker.domain.models.result import FIXED_RESULT_FIELDS, CheckResult

XML_DECLARATION = "<?xml version='1.0' encoding='utf-8'?>\n"


def render_xml(results: Sequence[CheckResult], indent: str = "    ") -> str:
    """Render *results* as a complete XML document."""
    parts = [XML_DECLARATION, "<flint>\n"]
    parts.extend(result.to_xml(indent, indent) for result in results)
    parts.append("</flint>\n")
    return "".join(parts)


def write_xml_report(results: Sequence[CheckResult], output: Path) -> Path:
    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(render_xml(results), encoding="utf-8")
    return output


def summary_columns(results: Sequence[CheckResult]) -> list[str]:
    """Fixed fields, then category names in first-seen order."""
    columns = list(FIXED_RESULT_FIELDS)
    for result in results:
        for name in result.categories:
            if name not in columns:
                columns.append(name)
    return columns


def write_tsv(results: Sequence[CheckResult], stream: TextIO) -> None:
    writer = csv.DictWriter(
        stream,
        fieldnames=summary_columns(results),
        delimiter="\t",
        restval="",
        lineterminator="\n",
    )
    writer.writeheader()
    for result in results:
        writer.writerow(result.to_summary_map())


def write_tsv_report(results: Sequence[CheckResult], output: Path) -> Path:
    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open("w", encoding="utf-8", newline="") as fh:
        write_tsv(results, fh)
    return output
