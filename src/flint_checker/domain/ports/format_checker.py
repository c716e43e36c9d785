"""Port: Format checker — one pluggable checker per file format."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from flint_checker.domain.models.policy import PatternFilter
from flint_checker.domain.models.result import CheckResult


class FormatPort(ABC):
    """Contract for checking files of one format (PDF, EPUB, ...)."""

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Short upper-case name, e.g. ``"PDF"``."""
        ...

    @property
    @abstractmethod
    def version(self) -> str:
        """Version of this format checker, reported in every result."""
        ...

    @abstractmethod
    def accepted_mimetypes(self) -> frozenset[str]:
        """Mimetypes this checker is able to handle."""
        ...

    def can_check_mimetype(self, mimetype: Optional[str]) -> bool:
        return mimetype in self.accepted_mimetypes()

    def can_check(self, file_path: Path, mimetype: Optional[str]) -> bool:
        """Decide whether *file_path*, sniffed as *mimetype*, is handled here."""
        return self.can_check_mimetype(mimetype)

    @abstractmethod
    def fixed_categories(self) -> list[str]:
        """Names of the categories this format produces regardless of policy."""
        ...

    @abstractmethod
    def all_category_names(self) -> list[str]:
        """Names of every category a full check run is expected to produce."""
        ...

    @abstractmethod
    def check(self, file_path: Path) -> CheckResult:
        """Run every check against *file_path* and return the aggregate."""
        ...

    def __str__(self) -> str:
        return f"{self.format_name} v{self.version}"


class PolicyAwarePort(ABC):
    """Contract for format checkers that also run a policy validation."""

    @property
    @abstractmethod
    def pattern_filter(self) -> Optional[PatternFilter]:
        """The active pattern filter, ``None`` meaning all patterns."""
        ...

    @abstractmethod
    def set_pattern_filter(self, pattern_filter: Optional[PatternFilter]) -> None:
        ...

    @abstractmethod
    def policy_pattern_names(self) -> list[str]:
        """Pattern names of the policy, restricted by the active filter."""
        ...
