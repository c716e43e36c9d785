"""Policy merge — violation report + pattern catalog → categories.

The catalog, not the report, decides which checks exist: every
``(assertion, pattern)`` pair selected by the pattern filter becomes one
``CheckCheck`` in the category named after its pattern.  The check fails
with the reported occurrence count if the report lists that assertion
under that pattern, and passes otherwise.  Assertions that appear only in
the report are ignored, and a pattern with no selected catalog entries
yields no category at all.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from flint_checker.domain.models.check import CheckCategory, CheckCheck
from flint_checker.domain.models.policy import (
    PatternCatalog,
    PatternFilter,
    ViolationReport,
)

logger = logging.getLogger(__name__)


def merge_policy_report(
    report: ViolationReport,
    catalog: PatternCatalog,
    pattern_filter: Optional[PatternFilter] = None,
) -> dict[str, CheckCategory]:
    """Turn a violation *report* into one category per selected pattern.

    Args:
        report: pattern name → assertion → occurrence count, fired only.
        catalog: every (assertion, pattern) pair of the active policy.
        pattern_filter: restricts the patterns taking part; ``None`` = all.

    Returns:
        Categories keyed by pattern name, in first-seen catalog order.
    """
    categories: dict[str, CheckCategory] = {}
    for entry in catalog.entries(pattern_filter):
        cc = categories.get(entry.pattern)
        if cc is None:
            cc = CheckCategory(entry.pattern)
            categories[entry.pattern] = cc

        fired = report.get(entry.pattern, {})
        if entry.assertion in fired:
            cc.add(CheckCheck(entry.assertion, False, fired[entry.assertion]))
        else:
            cc.add(CheckCheck(entry.assertion, True))

    logger.debug(
        "merged policy report into %d categories (filter: %s)",
        len(categories),
        "none" if pattern_filter is None else pattern_filter.name,
    )
    return categories


@dataclass(frozen=True)
class PolicyContext:
    """The catalog and filter that govern one check run.

    Owned by the format checker for the duration of a run and passed by
    reference to the policy task; there is no process-wide state.
    """

    catalog: PatternCatalog
    pattern_filter: Optional[PatternFilter] = None

    def pattern_names(self) -> list[str]:
        return self.catalog.pattern_names(self.pattern_filter)

    def merge(self, report: ViolationReport) -> dict[str, CheckCategory]:
        return merge_policy_report(report, self.catalog, self.pattern_filter)
