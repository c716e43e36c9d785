"""Shared machinery for format checkers.

A concrete format declares its name, version, mimetypes and fixed
categories, and builds one ``TimedTask`` per fixed category.  The base
class adds the policy task, seeds the ``CheckResult`` with every category
the run is expected to produce, runs each task through ``run_timed`` and
records the elapsed wall-clock time.

The pattern filter is applied to fixed categories as well as to policy
patterns: a fixed category whose name is not in the filter is neither
run nor expected.
"""

from __future__ import annotations

import logging
import threading
import time
from abc import abstractmethod
from pathlib import Path
from typing import Optional

from flint_checker.application.policy import PolicyContext
from flint_checker.application.timed_task import TimedTask, run_timed
from flint_checker.config.models import FlintConfig
from flint_checker.domain.models.check import CheckCategory
from flint_checker.domain.models.enums import FixedCategory
from flint_checker.domain.models.policy import PatternCatalog, PatternFilter, is_selected
from flint_checker.domain.models.result import CheckResult
from flint_checker.domain.ports.format_checker import FormatPort, PolicyAwarePort
from flint_checker.domain.ports.policy import PolicyValidatorPort

logger = logging.getLogger(__name__)


class BaseFormat(FormatPort, PolicyAwarePort):
    """Format checker with a Schematron-style policy task.

    Parameters
    ----------
    config : FlintConfig
        Timeouts and format switches.
    validator : PolicyValidatorPort
        Produces the violation report for a file.
    catalog : PatternCatalog
        Every (assertion, pattern) pair of the policy *validator* evaluates.
    """

    FORMAT_NAME: str = ""
    VERSION: str = ""
    MIMETYPES: frozenset[str] = frozenset()

    def __init__(
        self,
        config: FlintConfig,
        validator: PolicyValidatorPort,
        catalog: PatternCatalog,
    ) -> None:
        self._config = config
        self._validator = validator
        self._catalog = catalog
        self._pattern_filter: Optional[PatternFilter] = None

    # -- FormatPort ----------------------------------------------------------

    @property
    def format_name(self) -> str:
        return self.FORMAT_NAME

    @property
    def version(self) -> str:
        return self.VERSION

    def accepted_mimetypes(self) -> frozenset[str]:
        return self.MIMETYPES

    def all_category_names(self) -> list[str]:
        """Selected fixed categories followed by the selected policy patterns."""
        names = [n for n in self.fixed_categories() if is_selected(self._pattern_filter, n)]
        names.extend(n for n in self.policy_pattern_names() if n not in names)
        return names

    def check(self, file_path: Path) -> CheckResult:
        path = Path(file_path)
        logger.info("Checking %s as %s", path, self)
        start = time.monotonic()

        result = CheckResult(path.name, self.format_name, self.version, self.all_category_names())
        for task in self._tasks():
            result.add_all(run_timed(task, path))

        result.set_time(int((time.monotonic() - start) * 1000))
        logger.debug("%s", result)
        return result

    # -- PolicyAwarePort -----------------------------------------------------

    @property
    def pattern_filter(self) -> Optional[PatternFilter]:
        return self._pattern_filter

    def set_pattern_filter(self, pattern_filter: Optional[PatternFilter]) -> None:
        self._pattern_filter = pattern_filter

    def policy_pattern_names(self) -> list[str]:
        return self._catalog.pattern_names(self._pattern_filter)

    # -- Tasks ---------------------------------------------------------------

    @abstractmethod
    def _fixed_task(self, category: str, cancel_event: threading.Event) -> TimedTask:
        """Build the timed task that produces the fixed *category*."""
        ...

    def _tasks(self) -> list[TimedTask]:
        tasks = [
            self._fixed_task(name, threading.Event())
            for name in self.fixed_categories()
            if is_selected(self._pattern_filter, name)
        ]
        context = PolicyContext(self._catalog, self._pattern_filter)
        if context.pattern_names():
            tasks.append(self._policy_task(context))
        else:
            logger.debug("no policy patterns selected for %s", self.format_name)
        return tasks

    def _policy_task(self, context: PolicyContext) -> TimedTask:
        patterns = context.pattern_names()

        def work(path: Path) -> dict[str, CheckCategory]:
            report = self._validator.validate(path, patterns)
            return context.merge(report)

        return TimedTask(
            FixedCategory.POLICY_VALIDATION.value,
            self._config.timeouts.policy_seconds,
            work,
        )
