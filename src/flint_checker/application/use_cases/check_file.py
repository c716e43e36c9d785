"""Use Case: Check Files.

Sniffs a file's mimetype and runs every format checker that accepts it;
``CheckManyUseCase`` does the same for every file below a directory.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from pathlib import Path

from flint_checker.domain.models.result import CheckResult
from flint_checker.domain.ports.format_checker import FormatPort
from flint_checker.domain.ports.mimetype_detector import MimetypeDetectorPort

logger = logging.getLogger(__name__)


class CheckFileUseCase:
    """Check one file with every format able to handle it."""

    def __init__(self, formats: Sequence[FormatPort], detector: MimetypeDetectorPort) -> None:
        self._formats = list(formats)
        self._detector = detector

    def formats_for(self, file_path: Path) -> list[FormatPort]:
        """The formats that accept *file_path*, in registry order."""
        mimetype = self._detector.detect(file_path)
        logger.debug("%s sniffed as %s", file_path, mimetype)
        return [fmt for fmt in self._formats if fmt.can_check(file_path, mimetype)]

    def execute(self, file_path: Path) -> list[CheckResult]:
        """Run the checks on the given file.

        Args:
            file_path: Path to the file to check.

        Returns:
            One CheckResult per accepting format, or a single unchecked
            (erroneous) result if none accepts it.
        """
        path = Path(file_path)
        formats = self.formats_for(path)
        if not formats:
            logger.error("unable to check %s: no format accepts it", path)
            return [CheckResult.unchecked(path.name)]
        return [fmt.check(path) for fmt in formats]


class CheckManyUseCase:
    """Check a file, or every file below a directory in sorted order."""

    def __init__(self, check_file: CheckFileUseCase) -> None:
        self._check_file = check_file

    @staticmethod
    def iter_files(root: Path) -> Iterator[Path]:
        root = Path(root)
        if root.is_file():
            yield root
            return
        for path in sorted(root.rglob("*")):
            if path.is_file():
                yield path

    def execute(self, root: Path) -> list[CheckResult]:
        """Check *root* recursively.

        Raises:
            FileNotFoundError: If *root* does not exist.
        """
        root = Path(root)
        if not root.exists():
            raise FileNotFoundError(f"Path not found: {root}")
        results: list[CheckResult] = []
        for path in self.iter_files(root):
            results.extend(self._check_file.execute(path))
        return results
