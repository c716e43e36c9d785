"""Schematron policy — catalog source and rule evaluation via lxml.

A policy is an ISO Schematron document.  Each ``<pattern>`` is named by
its ``name`` attribute, falling back to ``id`` and then to its
``<title>``.  Each ``<assert>`` inside it is identified by its ``test``
expression with whitespace collapsed.  A pattern declared ``is-a`` an
abstract pattern takes the abstract pattern's assertions, with its
``<param>`` values substituted into their tests.

Every assertion is stamped with a generated ``id`` when the policy is
loaded.  Failed assertions in the SVRL output are matched back to the
catalog through that id, never through the ``test`` attribute the
skeleton writes out, which is whitespace-normalised and may contain
evaluated ``{...}`` templates.

Evaluation compiles one validator per pattern, so every failed assertion
in the SVRL output is attributed to the pattern it came from even when
two patterns share an identical test expression.  Compilation happens per
call: compiled validators are not shared between the threads that timed
tasks run on.
"""

from __future__ import annotations

import copy
import logging
from collections import Counter
from collections.abc import Collection
from pathlib import Path
from typing import NamedTuple, Optional, Union

from lxml import etree, isoschematron

from flint_checker.domain.errors import PolicyCatalogError, ValidatorError
from flint_checker.domain.models.policy import PatternCatalog, ViolationReport
from flint_checker.domain.models.result import FIXED_RESULT_FIELDS
from flint_checker.domain.ports.policy import PolicyCatalogPort

logger = logging.getLogger(__name__)

SCH_NS = "http://purl.oclc.org/dsdl/schematron"
SVRL_NS = "http://purl.oclc.org/dsdl/svrl"
_NSMAP = {"sch": SCH_NS, "svrl": SVRL_NS}

# Bundled policies live next to this module
POLICY_DIR = Path(__file__).parent / "policies"

ASSERTION_ID_PREFIX = "flint-assert-"


def safe_parser() -> etree.XMLParser:
    """A parser that never fetches external resources or expands entities.

    A new parser is made per call; parsers are not shared between threads.
    """
    return etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)


def _parse_policy(source: Union[bytes, Path]) -> etree._ElementTree:
    try:
        if isinstance(source, bytes):
            return etree.ElementTree(etree.fromstring(source, safe_parser()))
        return etree.parse(str(source), safe_parser())
    except (OSError, etree.XMLSyntaxError) as exc:
        raise PolicyCatalogError(f"Cannot parse policy document: {exc}") from exc


def _pattern_name(pattern: etree._Element) -> Optional[str]:
    for attr in ("name", "id"):
        value = (pattern.get(attr) or "").strip()
        if value:
            return value
    title = pattern.find("sch:title", _NSMAP)
    if title is not None and (title.text or "").strip():
        return title.text.strip()
    return None


def _is_abstract(pattern: etree._Element) -> bool:
    return pattern.get("abstract") == "true"


def assertion_key(test: str) -> str:
    """Catalog identifier of an assertion: its test with whitespace collapsed."""
    return " ".join(test.split())


def _substitute_params(test: str, pattern: etree._Element) -> str:
    # Same order and textual replacement as the ISO abstract-pattern expansion
    for param in pattern.iterfind("sch:param", _NSMAP):
        name = param.get("name")
        if name:
            test = test.replace(f"${name}", param.get("value", ""))
    return test


class _PatternPlan(NamedTuple):
    """A concrete pattern, its position among the schema's patterns, and
    its assertion ids mapped to catalog keys."""

    position: int
    name: str
    assertions: dict[str, str]


class SchematronPolicy(PolicyCatalogPort):
    """An ISO Schematron policy loaded from a file or from bytes.

    Parameters
    ----------
    source : bytes | str | Path
        The Schematron document; bytes are parsed directly.

    Raises
    ------
    PolicyCatalogError
        If the document is not Schematron, a pattern has no name, an
        assertion has no test, or an ``is-a`` pattern names no abstract
        pattern of the schema.
    """

    def __init__(self, source: Union[bytes, str, Path]) -> None:
        self._source = source if isinstance(source, bytes) else Path(source)
        self._tree = _parse_policy(self._source)
        root = self._tree.getroot()
        if root.tag != f"{{{SCH_NS}}}schema":
            raise PolicyCatalogError(f"Not an ISO Schematron schema: root element is {root.tag}")
        for index, assertion in enumerate(root.iter(f"{{{SCH_NS}}}assert")):
            assertion.set("id", f"{ASSERTION_ID_PREFIX}{index}")
        self._plans = self._plan_patterns(root)
        self._catalog = PatternCatalog(
            (key, plan.name) for plan in self._plans for key in plan.assertions.values()
        )

    @classmethod
    def bundled(cls, filename: str) -> SchematronPolicy:
        """Load one of the policies shipped with the package."""
        return cls(POLICY_DIR / filename)

    # -- Catalog -----------------------------------------------------------

    @staticmethod
    def _plan_patterns(root: etree._Element) -> list[_PatternPlan]:
        patterns = list(root.iterfind("sch:pattern", _NSMAP))
        abstracts = {p.get("id"): p for p in patterns if _is_abstract(p) and p.get("id")}

        plans: list[_PatternPlan] = []
        for position, pattern in enumerate(patterns):
            if _is_abstract(pattern):
                continue
            name = _pattern_name(pattern)
            if name is None:
                raise PolicyCatalogError(
                    f"Pattern on line {pattern.sourceline} has no name, id or title"
                )
            if name in FIXED_RESULT_FIELDS:
                raise PolicyCatalogError(f"Pattern name {name!r} is reserved for a result field")

            source = pattern
            base = pattern.get("is-a")
            if base:
                source = abstracts.get(base)
                if source is None:
                    raise PolicyCatalogError(
                        f"Pattern {name!r} is-a {base!r}, which is no abstract pattern"
                    )

            assertions: dict[str, str] = {}
            for assertion in source.iterfind(".//sch:assert", _NSMAP):
                test = assertion.get("test") or ""
                if base:
                    test = _substitute_params(test, pattern)
                key = assertion_key(test)
                if not key:
                    raise PolicyCatalogError(
                        f"Assertion on line {assertion.sourceline} in pattern {name!r} has no test"
                    )
                assertions[assertion.get("id")] = key
            plans.append(_PatternPlan(position, name, assertions))
        return plans

    def catalog(self) -> PatternCatalog:
        return self._catalog

    def pattern_names(self) -> list[str]:
        return self._catalog.pattern_names()

    # -- Evaluation --------------------------------------------------------

    def _single_pattern_schema(self, position: int) -> etree._Element:
        """Copy of the schema holding only the pattern at *position*.

        Abstract patterns are kept so that ``is-a`` references still expand.
        """
        root = copy.deepcopy(self._tree.getroot())
        for index, pattern in enumerate(list(root.iterfind("sch:pattern", _NSMAP))):
            if index != position and not _is_abstract(pattern):
                root.remove(pattern)
        for phase in list(root.iterfind("sch:phase", _NSMAP)):
            root.remove(phase)
        return root

    def evaluate(
        self,
        document: etree._ElementTree,
        pattern_names: Optional[Collection[str]] = None,
    ) -> ViolationReport:
        """Run the policy over *document* and count failed assertions.

        Args:
            document: The XML to validate.
            pattern_names: Patterns to evaluate; ``None`` evaluates all.

        Returns:
            pattern name → assertion key → number of failures, for the
            assertions that failed at least once.

        Raises:
            ValidatorError: If a pattern cannot be compiled or run.
        """
        report: dict[str, dict[str, int]] = {}
        for plan in self._plans:
            if pattern_names is not None and plan.name not in pattern_names:
                continue

            try:
                validator = isoschematron.Schematron(
                    self._single_pattern_schema(plan.position),
                    store_report=True,
                    validate_schema=False,
                )
                validator.validate(document)
            except (etree.XSLTError, etree.SchematronError) as exc:
                raise ValidatorError(f"Cannot evaluate pattern {plan.name!r}: {exc}") from exc

            failed = Counter(
                plan.assertions.get(node.get("id", ""), assertion_key(node.get("test", "")))
                for node in validator.validation_report.iterfind(
                    ".//svrl:failed-assert", _NSMAP
                )
            )
            if failed:
                merged = report.setdefault(plan.name, {})
                for key, count in failed.items():
                    merged[key] = merged.get(key, 0) + count
                logger.debug(
                    "pattern %s: %d failed assertion(s)", plan.name, sum(failed.values())
                )
        return report
