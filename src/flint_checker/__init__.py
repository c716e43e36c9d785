"""Flint — pluggable file-format conformance checker.

Runs independent checks (well-formedness, DRM absence, policy
conformance) against a file and aggregates them into a single
``CheckResult`` per applicable format.
"""

__version__ = "0.9.0"
