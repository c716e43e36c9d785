"""Mimetype detector — sniffs leading bytes, falls back to the file extension."""

from __future__ import annotations

import logging
import mimetypes
import zipfile
from pathlib import Path
from typing import Optional

from flint_checker.domain.ports.mimetype_detector import MimetypeDetectorPort

logger = logging.getLogger(__name__)

# Enough to cover the PDF header and the stored EPUB mimetype entry
_SNIFF_BYTES = 1024

_PDF_MAGIC = b"%PDF-"
_ZIP_MAGIC = b"PK\x03\x04"

_PDF = "application/pdf"
_EPUB = "application/epub+zip"
_ZIP = "application/zip"


class MagicMimetypeDetector(MimetypeDetectorPort):
    """Detect PDF and EPUB files by content, anything else by name.

    The PDF header may be preceded by junk bytes, so it is searched for
    in the first kilobyte rather than only at offset zero.
    """

    def detect(self, file_path: Path) -> Optional[str]:
        path = Path(file_path)
        try:
            with path.open("rb") as fh:
                head = fh.read(_SNIFF_BYTES)
        except OSError as exc:
            logger.warning("cannot read %s for mimetype detection: %s", path, exc)
            return None

        if _PDF_MAGIC in head:
            return _PDF
        if head.startswith(_ZIP_MAGIC):
            return self._zip_mimetype(path)

        guessed, _ = mimetypes.guess_type(path.name)
        logger.debug("mimetype of %s guessed from its name: %s", path, guessed)
        return guessed

    @staticmethod
    def _zip_mimetype(path: Path) -> str:
        try:
            with zipfile.ZipFile(path) as archive:
                declared = archive.read("mimetype").decode("ascii", errors="replace").strip()
        except (KeyError, OSError, zipfile.BadZipFile):
            declared = ""
        if declared:
            return declared
        if path.suffix.lower() == ".epub":
            return _EPUB
        return _ZIP
