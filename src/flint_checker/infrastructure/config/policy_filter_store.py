"""Policy filter store — reads per-format pattern filters from disk.

A policy directory holds one ``<FORMAT>-policy.json`` file per format,
mapping pattern names to ``true`` (take part) or ``false`` (skip)::

    {"NoEncryption": true, "HasMetadata": false}

When no directory is configured, the platform config directory
(``~/.config/flint_checker/policies`` on Linux, via ``platformdirs``) is
used if it exists.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import platformdirs
from pydantic import ValidationError

from flint_checker.config.models import PolicyFilterFile
from flint_checker.domain.errors import ConfigurationError
from flint_checker.domain.models.policy import PatternFilter

logger = logging.getLogger(__name__)

_APP_NAME = "flint_checker"
_POLICY_SUBDIR = "policies"
_FILE_SUFFIX = "-policy.json"


def default_policy_dir() -> Optional[Path]:
    """The per-user policy directory, or ``None`` if it does not exist."""
    candidate = Path(platformdirs.user_config_dir(_APP_NAME)) / _POLICY_SUBDIR
    return candidate if candidate.is_dir() else None


def load_pattern_filter(path: Path) -> PatternFilter:
    """Read one policy filter file into a ``PatternFilter``.

    Raises
    ------
    ConfigurationError
        If the file is not a JSON object of pattern name → boolean.
    """
    logger.debug("loading policy filter file: %s", path)
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        parsed = PolicyFilterFile.model_validate(raw)
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        raise ConfigurationError(f"Invalid policy filter file {path}: {exc}") from exc

    for name in parsed.disabled_patterns():
        logger.debug("found a de-activated pattern: %s", name)
    enabled = parsed.enabled_patterns()
    for name in enabled:
        logger.debug("adding pattern: %s", name)
    return PatternFilter.of(enabled, name=Path(path).stem)


class PolicyFilterStore:
    """Look up the pattern filter of a format in a policy directory.

    Parameters
    ----------
    policy_dir : Path | None
        Directory to search.  ``None`` falls back to ``default_policy_dir()``;
        if that does not exist either, every lookup returns ``None``.
    """

    def __init__(self, policy_dir: Optional[Path] = None) -> None:
        self._policy_dir = Path(policy_dir) if policy_dir is not None else default_policy_dir()
        if self._policy_dir is not None and not self._policy_dir.is_dir():
            raise ConfigurationError(f"Policy directory not found: {self._policy_dir}")

    @property
    def policy_dir(self) -> Optional[Path]:
        return self._policy_dir

    def path_for(self, format_name: str) -> Optional[Path]:
        """Path of the filter file for *format_name* if one exists."""
        if self._policy_dir is None:
            return None
        candidate = self._policy_dir / f"{format_name}{_FILE_SUFFIX}"
        return candidate if candidate.is_file() else None

    def filter_for(self, format_name: str) -> Optional[PatternFilter]:
        """The pattern filter for *format_name*, or ``None`` for all patterns."""
        path = self.path_for(format_name)
        if path is None:
            logger.debug("no policy filter for %s; all patterns are active", format_name)
            return None
        return load_pattern_filter(path)
