"""Schematron policies — catalog extraction and rule evaluation (lxml)."""

from flint_checker.infrastructure.schematron.policy import SchematronPolicy
from flint_checker.infrastructure.schematron.validator import SchematronValidator

__all__ = ["SchematronPolicy", "SchematronValidator"]
