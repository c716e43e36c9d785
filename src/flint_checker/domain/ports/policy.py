"""Port: Policy collaborators — catalog source and violation reporter."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Collection
from pathlib import Path
from typing import Optional

from flint_checker.domain.models.policy import PatternCatalog, ViolationReport


class PolicyCatalogPort(ABC):
    """Contract for supplying every (assertion, pattern) pair of a policy."""

    @abstractmethod
    def catalog(self) -> PatternCatalog:
        ...


class PolicyValidatorPort(ABC):
    """Contract for running a policy against a file.

    Implementations inspect the file, evaluate the policy rules and return
    only the assertions that fired, with how often each fired.
    """

    @abstractmethod
    def validate(
        self,
        file_path: Path,
        pattern_names: Optional[Collection[str]] = None,
    ) -> ViolationReport:
        """Evaluate the policy; *pattern_names* limits which patterns run."""
        ...
