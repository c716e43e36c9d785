"""PDF format checker."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from flint_checker.application.timed_task import TimedTask, WorkFn
from flint_checker.config.models import FlintConfig
from flint_checker.domain.models.check import CheckCategory, CheckCheck
from flint_checker.domain.models.enums import FixedCategory
from flint_checker.infrastructure.formats.base import BaseFormat
from flint_checker.infrastructure.inspectors.pdf_inspector import (
    has_drm,
    inspect_pdf,
    is_valid_pdf,
)
from flint_checker.infrastructure.schematron.policy import SchematronPolicy
from flint_checker.infrastructure.schematron.validator import SchematronValidator

logger = logging.getLogger(__name__)

POLICY_FILE = "pdf-policy.sch"


class PdfFormat(BaseFormat):
    """Checks PDF files for well-formedness, DRM and the PDF policy.

    Categories:

    * ``WELL_FORMED`` — ``isValidPdfplumber``: every page parses.  Disabled
      by ``pdf.enable_pdfplumber``, which leaves the category empty and
      therefore erroneous.
    * ``NO_DRM`` — ``checkDRMPdfplumberAbsolute``: no encryption at all.
    * one category per pattern of ``pdf-policy.sch``.
    """

    FORMAT_NAME = "PDF"
    VERSION = "0.9.0"
    MIMETYPES = frozenset({"application/pdf"})

    def __init__(self, config: FlintConfig, policy: Optional[SchematronPolicy] = None) -> None:
        policy = policy or SchematronPolicy.bundled(POLICY_FILE)
        super().__init__(config, SchematronValidator(inspect_pdf, policy), policy.catalog())

    def fixed_categories(self) -> list[str]:
        return [FixedCategory.WELL_FORMED.value, FixedCategory.NO_DRM.value]

    def _fixed_task(self, category: str, cancel_event: threading.Event) -> TimedTask:
        timeouts = self._config.timeouts
        if category == FixedCategory.WELL_FORMED.value:
            work, timeout = self._wellformedness(cancel_event), timeouts.wellformedness_seconds
        elif category == FixedCategory.NO_DRM.value:
            work, timeout = self._drm, timeouts.drm_seconds
        else:
            raise ValueError(f"{self.format_name} has no fixed category {category!r}")
        return TimedTask(category, timeout, work, cancel_event)

    def _wellformedness(self, cancel_event: threading.Event) -> WorkFn:
        def work(path: Path) -> dict[str, CheckCategory]:
            logger.info("Adding additional well-formedness checks for %s", path)
            cc = CheckCategory(FixedCategory.WELL_FORMED.value)
            if self._config.pdf.enable_pdfplumber:
                cc.add(CheckCheck("isValidPdfplumber", is_valid_pdf(path, cancel_event.is_set)))
                logger.debug("%s", cc.get("isValidPdfplumber"))
            return {cc.name: cc}

        return work

    @staticmethod
    def _drm(path: Path) -> dict[str, CheckCategory]:
        logger.info("Adding specific DRM checks for %s to check-result", path)
        cc = CheckCategory(FixedCategory.NO_DRM.value)
        cc.add(CheckCheck("checkDRMPdfplumberAbsolute", not has_drm(path)))
        logger.debug("%s", cc.get("checkDRMPdfplumberAbsolute"))
        return {cc.name: cc}
