"""Policy types consumed by the policy merge.

* ``ViolationReport`` — pattern name → assertion identifier → number of
  times the assertion fired.  Only assertions that fired are present.
* ``PatternCatalog`` — every ``(assertion, pattern)`` pair the active
  policy defines, whether or not it fired, in document order.
* ``PatternFilter`` — a named set of pattern names taking part in a run.
  A filter of ``None`` means every pattern is active.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import NamedTuple, Optional

from flint_checker.domain.errors import PolicyCatalogError

ViolationReport = Mapping[str, Mapping[str, int]]


class CatalogEntry(NamedTuple):
    """One assertion and the pattern it belongs to."""

    assertion: str
    pattern: str


class PatternCatalog:
    """Ordered, immutable sequence of ``CatalogEntry`` pairs."""

    def __init__(self, entries: Iterable[tuple[str, str]] = ()) -> None:
        checked: list[CatalogEntry] = []
        for position, pair in enumerate(entries):
            try:
                assertion, pattern = pair
            except (TypeError, ValueError) as exc:
                raise PolicyCatalogError(
                    f"Catalog entry #{position} is not an (assertion, pattern) pair: {pair!r}"
                ) from exc
            if not isinstance(assertion, str) or not assertion:
                raise PolicyCatalogError(f"Catalog entry #{position} has no assertion")
            if not isinstance(pattern, str) or not pattern:
                raise PolicyCatalogError(
                    f"Catalog entry #{position} ({assertion!r}) has no pattern name"
                )
            checked.append(CatalogEntry(assertion, pattern))
        self._entries = tuple(checked)

    @classmethod
    def from_mapping(cls, assertion_to_pattern: Mapping[str, str]) -> PatternCatalog:
        """Build a catalog from an ``assertion → pattern`` mapping."""
        return cls(assertion_to_pattern.items())

    def entries(self, pattern_filter: Optional[PatternFilter] = None) -> list[CatalogEntry]:
        """Entries whose pattern passes *pattern_filter*, in catalog order."""
        return [e for e in self._entries if is_selected(pattern_filter, e.pattern)]

    def pattern_names(self, pattern_filter: Optional[PatternFilter] = None) -> list[str]:
        """Distinct pattern names in first-seen order, restricted by the filter."""
        return list(dict.fromkeys(e.pattern for e in self.entries(pattern_filter)))

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PatternCatalog):
            return NotImplemented
        return self._entries == other._entries

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"PatternCatalog({list(self._entries)!r})"


@dataclass(frozen=True)
class PatternFilter:
    """A named set of pattern names that participate in a policy run."""

    patterns: frozenset[str]
    name: str = "custom"

    @classmethod
    def of(cls, patterns: Iterable[str], name: str = "custom") -> PatternFilter:
        return cls(frozenset(patterns), name)

    def __contains__(self, pattern_name: object) -> bool:
        return pattern_name in self.patterns

    def __len__(self) -> int:
        return len(self.patterns)


def is_selected(pattern_filter: Optional[PatternFilter], name: str) -> bool:
    """True if *name* takes part in a run under *pattern_filter*."""
    return pattern_filter is None or name in pattern_filter
