"""EPUB format checker."""

from __future__ import annotations

import functools
import logging
import threading
from pathlib import Path
from typing import Optional

from flint_checker.application.timed_task import TimedTask
from flint_checker.config.models import FlintConfig
from flint_checker.domain.errors import ValidatorError
from flint_checker.domain.models.check import CheckCategory, CheckCheck
from flint_checker.domain.models.enums import FixedCategory
from flint_checker.infrastructure.formats.base import BaseFormat
from flint_checker.infrastructure.inspectors.epub_inspector import (
    CONTAINER_ENTRY,
    EPUB_MIMETYPE,
    has_encryption,
    has_rights_file,
    inspect_epub,
    mimetype_entry_ok,
    open_epub,
    package_document,
)
from flint_checker.infrastructure.schematron.policy import SchematronPolicy
from flint_checker.infrastructure.schematron.validator import SchematronValidator

logger = logging.getLogger(__name__)

POLICY_FILE = "epub-policy.sch"


class EpubFormat(BaseFormat):
    """Checks EPUB files for container structure, DRM and the EPUB policy.

    Categories:

    * ``WELL_FORMED_ZIP`` — ``hasMimetypeEntry``, ``hasContainerXml`` and
      ``hasPackageDocument``.
    * ``NO_DRM_RIGHTS_FILE`` — ``checkForRightsFile``: no ``rights.xml``.
    * ``NO_DRM_ENCRYPTION`` — ``checkForEncryption``: nothing encrypted
      beyond font obfuscation (unless ``epub.font_obfuscation_is_drm``).
    * one category per pattern of ``epub-policy.sch``.
    """

    FORMAT_NAME = "EPUB"
    VERSION = "0.9.0"
    MIMETYPES = frozenset({EPUB_MIMETYPE})

    def __init__(self, config: FlintConfig, policy: Optional[SchematronPolicy] = None) -> None:
        policy = policy or SchematronPolicy.bundled(POLICY_FILE)
        inspector = functools.partial(
            inspect_epub, font_obfuscation_is_drm=config.epub.font_obfuscation_is_drm
        )
        super().__init__(config, SchematronValidator(inspector, policy), policy.catalog())

    def can_check(self, file_path: Path, mimetype: Optional[str]) -> bool:
        """EPUBs without a proper ``mimetype`` entry sniff as plain zip."""
        if self.can_check_mimetype(mimetype):
            return True
        return mimetype == "application/zip" and Path(file_path).suffix.lower() == ".epub"

    def fixed_categories(self) -> list[str]:
        return [
            FixedCategory.WELL_FORMED_ZIP.value,
            FixedCategory.NO_DRM_RIGHTS_FILE.value,
            FixedCategory.NO_DRM_ENCRYPTION.value,
        ]

    def _fixed_task(self, category: str, cancel_event: threading.Event) -> TimedTask:
        timeouts = self._config.timeouts
        if category == FixedCategory.WELL_FORMED_ZIP.value:
            work, timeout = self._wellformedness, timeouts.wellformedness_seconds
        elif category == FixedCategory.NO_DRM_RIGHTS_FILE.value:
            work, timeout = self._rights_file, timeouts.drm_seconds
        elif category == FixedCategory.NO_DRM_ENCRYPTION.value:
            work, timeout = self._encryption, timeouts.drm_seconds
        else:
            raise ValueError(f"{self.format_name} has no fixed category {category!r}")
        return TimedTask(category, timeout, work, cancel_event)

    @staticmethod
    def _wellformedness(path: Path) -> dict[str, CheckCategory]:
        logger.info("Adding container checks for %s", path)
        cc = CheckCategory(FixedCategory.WELL_FORMED_ZIP.value)
        try:
            archive = open_epub(path)
        except ValidatorError:
            logger.warning("%s cannot be opened as a zip archive", path)
            for name in ("hasMimetypeEntry", "hasContainerXml", "hasPackageDocument"):
                cc.add(CheckCheck(name, False))
            return {cc.name: cc}

        with archive:
            cc.add(CheckCheck("hasMimetypeEntry", mimetype_entry_ok(archive)))
            cc.add(CheckCheck("hasContainerXml", CONTAINER_ENTRY in archive.namelist()))
            cc.add(CheckCheck("hasPackageDocument", package_document(archive) is not None))
        for check in cc:
            logger.debug("%s", check)
        return {cc.name: cc}

    @staticmethod
    def _rights_file(path: Path) -> dict[str, CheckCategory]:
        cc = CheckCategory(FixedCategory.NO_DRM_RIGHTS_FILE.value)
        cc.add(CheckCheck("checkForRightsFile", not has_rights_file(path)))
        logger.debug("%s", cc.get("checkForRightsFile"))
        return {cc.name: cc}

    def _encryption(self, path: Path) -> dict[str, CheckCategory]:
        cc = CheckCategory(FixedCategory.NO_DRM_ENCRYPTION.value)
        drm = has_encryption(path, self._config.epub.font_obfuscation_is_drm)
        cc.add(CheckCheck("checkForEncryption", not drm))
        logger.debug("%s", cc.get("checkForEncryption"))
        return {cc.name: cc}
