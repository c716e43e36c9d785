"""Per-file check result.

A ``CheckResult`` aggregates the ``CheckCategory`` objects produced for one
file by one format checker.  It may be pre-seeded with the names of the
categories that are *expected*; those map to ``None`` until a category is
supplied.  An expected category that never arrives makes the whole result
erroneous, because the caller cannot tell whether that check would have
passed.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Optional

from flint_checker.domain.models.check import CheckCategory
from flint_checker.domain.models.enums import Verdict
from flint_checker.domain.models.markup import escape

# Keys that are always present in ``CheckResult.to_summary_map``
FIXED_RESULT_FIELDS: tuple[str, ...] = (
    "filename",
    "format",
    "version",
    "result",
    "timeTaken",
)


def _category_name(name: str) -> str:
    # Category verdicts share the summary map with the fixed fields
    if name in FIXED_RESULT_FIELDS:
        raise ValueError(f"{name!r} is a fixed result field and cannot name a category")
    return name


class CheckResult:
    """Outcome of all checks one format ran against one file.

    Usage::

        result = CheckResult("book.pdf", "PDF", "1.0", ["WELL_FORMED", "NO_DRM"])
        result.add_all(run_timed(task, path))
        result.set_time(elapsed_ms)
        result.verdict()   # Verdict.PASSED / FAILED / ERRONEOUS
    """

    def __init__(
        self,
        filename: str,
        format_name: str,
        format_version: str,
        expected_categories: Iterable[str] = (),
    ) -> None:
        self.filename = filename
        self.format_name = format_name
        self.format_version = format_version
        self.elapsed_ms: Optional[int] = None
        self._categories: dict[str, Optional[CheckCategory]] = {
            _category_name(name): None for name in expected_categories
        }

    @classmethod
    def unchecked(cls, filename: str) -> CheckResult:
        """The erroneous result for a file that no format accepts."""
        return cls(filename, "", "")

    @property
    def is_unchecked(self) -> bool:
        return not self.format_name

    # -- Population ------------------------------------------------------

    def add(self, category: CheckCategory) -> None:
        """Insert *category*, replacing any entry of the same name."""
        self._categories[_category_name(category.name)] = category

    def add_all(self, categories: Mapping[str, CheckCategory]) -> None:
        """Insert every category of *categories* under its mapping key."""
        for name in categories:
            _category_name(name)
        self._categories.update(categories)

    def set_time(self, elapsed_ms: Optional[int]) -> None:
        self.elapsed_ms = elapsed_ms

    # -- Queries ---------------------------------------------------------

    @property
    def categories(self) -> Mapping[str, Optional[CheckCategory]]:
        """Read-only view of all category slots; ``None`` marks an absent one."""
        return MappingProxyType(self._categories)

    def get(self, category_name: str) -> Optional[CheckCategory]:
        return self._categories.get(category_name)

    def missing_categories(self) -> list[str]:
        """Names of expected categories that were never supplied."""
        return [name for name, cc in self._categories.items() if cc is None]

    def is_erroneous(self) -> bool:
        """True if there are no categories, an expected one is absent,
        or any present category is erroneous."""
        if not self._categories:
            return True
        return any(cc is None or cc.is_erroneous() for cc in self._categories.values())

    def is_happy(self) -> Optional[bool]:
        """``None`` if erroneous, ``False`` if any category is unhappy, else ``True``."""
        if self.is_erroneous():
            return None
        return all(cc.is_happy() for cc in self._categories.values() if cc is not None)

    def verdict(self) -> Verdict:
        return Verdict.from_state(self.is_erroneous(), self.is_happy())

    @property
    def result(self) -> str:
        """The verdict as a plain string."""
        return self.verdict().value

    @property
    def time_taken(self) -> str:
        """Elapsed milliseconds as a string, empty while unset."""
        return "" if self.elapsed_ms is None else str(self.elapsed_ms)

    # -- Serialisation ---------------------------------------------------

    def to_summary_map(self) -> dict[str, str]:
        """Flatten into fixed fields plus one verdict string per category.

        Absent categories map to an empty string.
        """
        summary = {
            "filename": self.filename,
            "format": self.format_name,
            "version": self.format_version,
            "result": self.result,
            "timeTaken": self.time_taken,
        }
        for name, cc in self._categories.items():
            summary[name] = "" if cc is None else cc.verdict.value
        return summary

    def to_xml(self, shift: str = "", indent: str = "    ") -> str:
        """Render as a ``<checkedFile>`` element, skipping absent categories."""
        lines = [
            f"{shift}<checkedFile name='{escape(self.filename)}' "
            f"result='{self.result}' "
            f"format='{escape(self.format_name)}' "
            f"version='{escape(self.format_version)}' "
            f"totalCheckTime='{self.time_taken}'>\n"
        ]
        for cc in self._categories.values():
            if cc is not None:
                lines.append(cc.to_xml(shift + indent, indent))
        lines.append(f"{shift}</checkedFile>\n")
        return "".join(lines)

    def __str__(self) -> str:
        cats = ", ".join(str(cc) for cc in self._categories.values() if cc is not None)
        return (
            f"{self.format_name}: v{self.format_version}, {self.filename}, "
            f"{cats}, time: {self.time_taken} ms"
        )
