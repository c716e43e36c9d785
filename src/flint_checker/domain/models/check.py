"""Checks and check categories.

A ``CheckCheck`` is one atomic, named test outcome.  Its ``passed`` flag is
tri-state: ``True`` (determined and passed), ``False`` (determined and
failed) or ``None`` (could not be determined, i.e. *erroneous*).

A ``CheckCategory`` groups checks by name, in insertion order, and derives
its own happiness from them.  Derived state is recomputed on every call
because categories are enriched in place while a result is assembled.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional

from flint_checker.domain.models.enums import Verdict
from flint_checker.domain.models.markup import escape


@dataclass(frozen=True)
class CheckCheck:
    """Outcome of a single named check.

    ``occurrence_count`` records how many rule violations a failed policy
    check represents; binary checks leave it ``None``.
    """

    name: str
    passed: Optional[bool]
    occurrence_count: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("A check needs a non-empty name")
        if self.occurrence_count is not None and self.occurrence_count < 0:
            raise ValueError(
                f"Occurrence count of check {self.name!r} must be >= 0, "
                f"got {self.occurrence_count}"
            )

    def is_happy(self) -> Optional[bool]:
        return self.passed

    def is_erroneous(self) -> bool:
        return self.passed is None

    @property
    def verdict(self) -> Verdict:
        return Verdict.from_state(self.is_erroneous(), self.passed)

    def to_xml(self, shift: str = "") -> str:
        """Render as a single ``<check/>`` element line."""
        count = ""
        if self.occurrence_count is not None:
            count = f" errorCount='{self.occurrence_count}'"
        return (
            f"{shift}<check name='{escape(self.name)}' "
            f"result='{self.verdict.value}'{count}/>\n"
        )

    def __str__(self) -> str:
        if self.occurrence_count is None:
            return f"{self.name}: {self.verdict.value}"
        return f"{self.name}: {self.verdict.value} ({self.occurrence_count})"


class CheckCategory:
    """A named, ordered collection of ``CheckCheck`` objects.

    Checks are keyed by name; adding a check whose name already exists
    replaces the earlier one (last write wins).
    """

    def __init__(self, name: str) -> None:
        if not name:
            raise ValueError("A check category needs a non-empty name")
        self._name = name
        self._checks: dict[str, CheckCheck] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def checks(self) -> Mapping[str, CheckCheck]:
        """Read-only view of the checks, in insertion order."""
        return MappingProxyType(self._checks)

    def add(self, check: CheckCheck) -> None:
        self._checks[check.name] = check

    def get(self, check_name: str) -> Optional[CheckCheck]:
        return self._checks.get(check_name)

    # -- Aggregation -----------------------------------------------------

    def is_erroneous(self) -> bool:
        """True if any check is undetermined or the category has no checks."""
        if not self._checks:
            return True
        return any(c.is_erroneous() for c in self._checks.values())

    def is_happy(self) -> Optional[bool]:
        """``None`` if erroneous, ``False`` if any check failed, else ``True``."""
        if self.is_erroneous():
            return None
        return all(c.passed for c in self._checks.values())

    @property
    def verdict(self) -> Verdict:
        return Verdict.from_state(self.is_erroneous(), self.is_happy())

    # -- Rendering -------------------------------------------------------

    def to_xml(self, shift: str = "", indent: str = "    ") -> str:
        """Render as a ``<checkCategory>`` element with one child per check."""
        lines = [
            f"{shift}<checkCategory name='{escape(self._name)}' "
            f"result='{self.verdict.value}'>\n"
        ]
        lines.extend(c.to_xml(shift + indent) for c in self._checks.values())
        lines.append(f"{shift}</checkCategory>\n")
        return "".join(lines)

    # -- Dunder ----------------------------------------------------------

    def __len__(self) -> int:
        return len(self._checks)

    def __iter__(self) -> Iterator[CheckCheck]:
        return iter(self._checks.values())

    def __contains__(self, check_name: object) -> bool:
        return check_name in self._checks

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CheckCategory):
            return NotImplemented
        return self._name == other._name and list(self._checks.items()) == list(
            other._checks.items()
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"CheckCategory({self._name!r}, checks={list(self._checks.values())!r})"

    def __str__(self) -> str:
        inner = ", ".join(str(c) for c in self._checks.values())
        return f"{self._name} [{self.verdict.value}]: {{{inner}}}"
