"""Domain errors — custom exceptions for Flint.

These exceptions signal contract violations and collaborator failures.
Failed *checks* are never exceptions: they are recorded as data in a
``CheckResult``.
"""


class FlintError(Exception):
    """Base exception for all Flint errors."""


class ConfigurationError(FlintError):
    """Raised when configuration or a policy filter file is invalid."""


class PolicyCatalogError(FlintError):
    """Raised when a policy (Schematron) document or catalog entry is malformed."""


class UnsupportedFormatError(FlintError):
    """Raised when a format name is not present in the registry."""


class ValidatorError(FlintError):
    """Raised when an external validator cannot produce its report."""
