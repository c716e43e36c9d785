"""Result data model: checks, categories, per-file results and policy types."""

from flint_checker.domain.models.check import CheckCategory, CheckCheck
from flint_checker.domain.models.enums import FixedCategory, Verdict
from flint_checker.domain.models.policy import (
    CatalogEntry,
    PatternCatalog,
    PatternFilter,
    ViolationReport,
    is_selected,
)
from flint_checker.domain.models.result import FIXED_RESULT_FIELDS, CheckResult

__all__ = [
    "CatalogEntry",
    "CheckCategory",
    "CheckCheck",
    "CheckResult",
    "FixedCategory",
    "FIXED_RESULT_FIELDS",
    "PatternCatalog",
    "PatternFilter",
    "Verdict",
    "ViolationReport",
    "is_selected",
]
