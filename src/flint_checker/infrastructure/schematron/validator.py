"""Schematron validator — inspect a file, then evaluate a policy over it."""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection
from pathlib import Path
from typing import Optional

from lxml import etree

from flint_checker.domain.models.policy import ViolationReport
from flint_checker.domain.ports.policy import PolicyValidatorPort
from flint_checker.infrastructure.schematron.policy import SchematronPolicy

logger = logging.getLogger(__name__)

Inspector = Callable[[Path], etree._ElementTree]


class SchematronValidator(PolicyValidatorPort):
    """Produce a violation report for a file.

    The *inspector* turns the file into an XML property report (what a
    third-party validator would emit); the *policy* is then evaluated
    against that report.
    """

    def __init__(self, inspector: Inspector, policy: SchematronPolicy) -> None:
        self._inspector = inspector
        self._policy = policy

    @property
    def policy(self) -> SchematronPolicy:
        return self._policy

    def validate(
        self,
        file_path: Path,
        pattern_names: Optional[Collection[str]] = None,
    ) -> ViolationReport:
        logger.info("Performing a policy validation on %s", file_path)
        document = self._inspector(file_path)
        return self._policy.evaluate(document, pattern_names)
