"""Mimetype detection."""

from flint_checker.infrastructure.detection.magic_detector import MagicMimetypeDetector

__all__ = ["MagicMimetypeDetector"]
