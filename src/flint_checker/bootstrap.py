"""Composition Root — Dependency Injection Container.

This module is the ONLY place where concrete infrastructure classes are
imported and wired together.  All other layers refer to ports (interfaces).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Optional

from flint_checker.application.report import render_xml
from flint_checker.application.use_cases.check_file import CheckFileUseCase, CheckManyUseCase
from flint_checker.config.loader import get_config, load_config
from flint_checker.config.models import FlintConfig
from flint_checker.domain.errors import UnsupportedFormatError
from flint_checker.domain.models.policy import PatternFilter
from flint_checker.domain.models.result import CheckResult
from flint_checker.domain.ports.mimetype_detector import MimetypeDetectorPort

from flint_checker.infrastructure.config.policy_filter_store import PolicyFilterStore
from flint_checker.infrastructure.detection.magic_detector import MagicMimetypeDetector
from flint_checker.infrastructure.formats.base import BaseFormat
from flint_checker.infrastructure.formats.registry import available_formats

logger = logging.getLogger(__name__)


class Container:
    """Simple dependency injection container and Flint facade.

    Wires the registered formats, the mimetype detector and the policy
    filter store, and provides pre-configured use cases.

    Usage::

        container = Container(policy_dir=Path("policies"))
        results = container.check(Path("books/"))
        print(container.to_xml(results))
    """

    def __init__(
        self,
        config_path: Optional[Path] = None,
        policy_dir: Optional[Path] = None,
    ) -> None:
        # -- Infrastructure singletons ---------------------------------------
        self._config: FlintConfig = load_config(config_path) if config_path else get_config()
        self._formats: list[BaseFormat] = available_formats(self._config)
        self._detector: MimetypeDetectorPort = MagicMimetypeDetector()

        self._policy_store = PolicyFilterStore(policy_dir or self._config.policy.policy_dir)
        self.apply_policy_store(self._policy_store)

        # -- Use cases -------------------------------------------------------
        self._check_file = CheckFileUseCase(self._formats, self._detector)
        self._check_many = CheckManyUseCase(self._check_file)

    # -- Accessors -----------------------------------------------------------

    @property
    def config(self) -> FlintConfig:
        return self._config

    @property
    def detector(self) -> MimetypeDetectorPort:
        return self._detector

    @property
    def policy_store(self) -> PolicyFilterStore:
        return self._policy_store

    @property
    def formats(self) -> list[BaseFormat]:
        return list(self._formats)

    def format_names(self) -> list[str]:
        return [fmt.format_name for fmt in self._formats]

    def get_format(self, name: str) -> BaseFormat:
        """Return the wired format registered under *name*.

        Raises:
            UnsupportedFormatError: If no such format is available.
        """
        for fmt in self._formats:
            if fmt.format_name == name.upper():
                return fmt
        raise UnsupportedFormatError(
            f"Unknown format {name!r}; available: {', '.join(self.format_names())}"
        )

    def accepted_mimetypes(self) -> frozenset[str]:
        """Union of the mimetypes of every available format."""
        accepted: set[str] = set()
        for fmt in self._formats:
            accepted |= fmt.accepted_mimetypes()
        return frozenset(accepted)

    # -- Policy filters ------------------------------------------------------

    def apply_policy_store(self, store: PolicyFilterStore) -> None:
        """Give every format the filter its ``<FORMAT>-policy.json`` defines."""
        for fmt in self._formats:
            fmt.set_pattern_filter(store.filter_for(fmt.format_name))

    def apply_pattern_filters(self, filters: Mapping[str, Optional[PatternFilter]]) -> None:
        """Set filters from an in-memory mapping of format name → filter.

        Formats absent from *filters* keep their current filter.
        """
        for name, pattern_filter in filters.items():
            self.get_format(name).set_pattern_filter(pattern_filter)

    # -- Use cases -----------------------------------------------------------

    @property
    def check_file(self) -> CheckFileUseCase:
        return self._check_file

    @property
    def check_many(self) -> CheckManyUseCase:
        return self._check_many

    def check(self, path: Path) -> list[CheckResult]:
        """Check a file, or every file below a directory."""
        return self._check_many.execute(path)

    @staticmethod
    def to_xml(results: list[CheckResult]) -> str:
        return render_xml(results)
