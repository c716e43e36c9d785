"""Enumerations shared by the result model."""

from __future__ import annotations

from enum import Enum


class Verdict(str, Enum):
    """Overall outcome of a check, a category or a whole result.

    ``ERRONEOUS`` takes precedence: something could not be determined,
    so neither a pass nor a fail can be claimed.
    """

    ERRONEOUS = "erroneous"
    PASSED = "passed"
    FAILED = "failed"

    @classmethod
    def from_state(cls, erroneous: bool, happy: bool | None) -> Verdict:
        """Derive the verdict from the two aggregation predicates."""
        if erroneous:
            return cls.ERRONEOUS
        return cls.PASSED if happy else cls.FAILED


class FixedCategory(str, Enum):
    """Category and task names that do not come from a policy document.

    ``POLICY_VALIDATION`` names the policy task itself; it only shows up
    as a category when that task fails as a whole.
    """

    WELL_FORMED = "WELL_FORMED"
    NO_DRM = "NO_DRM"
    WELL_FORMED_ZIP = "WELL_FORMED_ZIP"
    NO_DRM_RIGHTS_FILE = "NO_DRM_RIGHTS_FILE"
    NO_DRM_ENCRYPTION = "NO_DRM_ENCRYPTION"
    POLICY_VALIDATION = "POLICY_VALIDATION"
