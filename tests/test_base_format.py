"""Tests for the shared format machinery, using a minimal XML format."""

from __future__ import annotations

import threading
import time
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from lxml import etree

from flint_checker.application.timed_task import TimedTask
from flint_checker.config.models import FlintConfig, TimeoutSettings
from flint_checker.domain.errors import ValidatorError
from flint_checker.domain.models import CheckCategory, CheckCheck, PatternFilter, Verdict
from flint_checker.infrastructure.formats.base import BaseFormat
from flint_checker.infrastructure.schematron import SchematronPolicy, SchematronValidator

BODY_POLICY = b"""<?xml version='1.0'?>
<s:schema xmlns:s='http://purl.oclc.org/dsdl/schematron'>
  <s:pattern name='Body count'>
    <s:rule context='head'>
      <s:assert test='count(beard) = 1'>You shall be no beardless being</s:assert>
      <s:assert test='count(piercing) = 1'>You shall not be missing a piercing</s:assert>
    </s:rule>
    <s:rule context='body'>
      <s:assert test='count(belly) = 1'>A belly has to be</s:assert>
    </s:rule>
  </s:pattern>
  <s:pattern name='Feet'>
    <s:rule context='body'>
      <s:assert test='count(foot) = 2'>Two feet</s:assert>
    </s:rule>
  </s:pattern>
</s:schema>
"""


def _parse(path: Path) -> etree._ElementTree:
    return etree.parse(str(path))


class SimpleFormat(BaseFormat):
    """XML files checked against a body policy plus one fixed category."""

    FORMAT_NAME = "SIMPLE"
    VERSION = "0.1"
    MIMETYPES = frozenset({"application/xml"})

    def __init__(self, config=None, validator=None, fixed_work=None):
        policy = SchematronPolicy(BODY_POLICY)
        super().__init__(
            config or FlintConfig(),
            validator or SchematronValidator(_parse, policy),
            policy.catalog(),
        )
        self.fixed_work = fixed_work or self._parses

    def fixed_categories(self) -> list[str]:
        return ["WELL_FORMED"]

    def _fixed_task(self, category: str, cancel_event: threading.Event) -> TimedTask:
        return TimedTask(
            category, self._config.timeouts.wellformedness_seconds, self.fixed_work, cancel_event
        )

    @staticmethod
    def _parses(path: Path) -> dict[str, CheckCategory]:
        cc = CheckCategory("WELL_FORMED")
        try:
            etree.parse(str(path))
            cc.add(CheckCheck("isWellFormedXml", True))
        except etree.XMLSyntaxError:
            cc.add(CheckCheck("isWellFormedXml", False))
        return {cc.name: cc}


def _write(tmp_path: Path, xml: str) -> Path:
    path = tmp_path / "being.xml"
    path.write_text(xml, encoding="utf-8")
    return path


HAPPY = "<being><head><beard/><piercing/></head><body><belly/><foot/><foot/></body></being>"
BEARDLESS = "<being><head><piercing/></head><body><belly/><foot/><foot/></body></being>"


# ---------------------------------------------------------------------------
# Full runs
# ---------------------------------------------------------------------------


class TestSimpleFormat:
    def test_expected_categories(self):
        assert SimpleFormat().all_category_names() == ["WELL_FORMED", "Body count", "Feet"]

    def test_happy_document(self, tmp_path):
        result = SimpleFormat().check(_write(tmp_path, HAPPY))
        assert result.verdict() is Verdict.PASSED
        assert list(result.get("Body count").checks) == [
            "count(beard) = 1",
            "count(piercing) = 1",
            "count(belly) = 1",
        ]

    def test_beardless_document(self, tmp_path):
        result = SimpleFormat().check(_write(tmp_path, BEARDLESS))
        body = result.get("Body count")
        assert body.get("count(beard) = 1").passed is False
        assert body.get("count(beard) = 1").occurrence_count == 1
        assert body.get("count(piercing) = 1").passed is True
        assert result.get("Feet").is_happy() is True
        assert result.verdict() is Verdict.FAILED

    def test_filter_selects_patterns(self, tmp_path):
        fmt = SimpleFormat()
        fmt.set_pattern_filter(PatternFilter.of(["Feet"]))
        result = fmt.check(_write(tmp_path, BEARDLESS))
        assert list(result.categories) == ["Feet"]
        assert result.verdict() is Verdict.PASSED

    def test_validator_receives_selected_patterns(self, tmp_path):
        validator = MagicMock()
        validator.validate.return_value = {}
        fmt = SimpleFormat(validator=validator)
        fmt.set_pattern_filter(PatternFilter.of(["WELL_FORMED", "Feet"]))

        path = _write(tmp_path, HAPPY)
        fmt.check(path)

        validator.validate.assert_called_once_with(path, ["Feet"])

    def test_elapsed_time_is_recorded(self, tmp_path):
        result = SimpleFormat().check(_write(tmp_path, HAPPY))
        assert int(result.time_taken) >= 0


# ---------------------------------------------------------------------------
# Faults inside tasks
# ---------------------------------------------------------------------------


class TestTaskFaults:
    def test_validator_error_becomes_failed_policy_category(self, tmp_path):
        validator = MagicMock()
        validator.validate.side_effect = ValidatorError("validator unavailable")
        result = SimpleFormat(validator=validator).check(_write(tmp_path, HAPPY))

        policy = result.get("POLICY_VALIDATION")
        assert policy.get("POLICY_VALIDATION").passed is False
        assert result.get("Body count") is None
        assert result.missing_categories() == ["Body count", "Feet"]
        assert result.verdict() is Verdict.ERRONEOUS

    def test_slow_fixed_task_times_out(self, tmp_path):
        release = threading.Event()

        def slow(path: Path) -> dict[str, CheckCategory]:
            release.wait(20)
            return {}

        config = FlintConfig(timeouts=TimeoutSettings(wellformedness_seconds=1))
        fmt = SimpleFormat(config=config, fixed_work=slow)
        start = time.monotonic()
        try:
            result = fmt.check(_write(tmp_path, HAPPY))
        finally:
            release.set()

        assert time.monotonic() - start < 10
        assert result.get("WELL_FORMED").get("WELL_FORMED").passed is False
        assert result.get("Body count").is_happy() is True
        assert result.verdict() is Verdict.FAILED

    def test_malformed_input(self, tmp_path):
        result = SimpleFormat().check(_write(tmp_path, "<being><head>"))
        assert result.get("WELL_FORMED").get("isWellFormedXml").passed is False
        assert result.get("POLICY_VALIDATION").is_happy() is False
        assert result.verdict() is Verdict.ERRONEOUS

    @pytest.mark.parametrize("exc", [RuntimeError("x"), RecursionError("deep")])
    def test_any_exception_is_contained(self, tmp_path, exc):
        validator = MagicMock()
        validator.validate.side_effect = exc
        result = SimpleFormat(validator=validator).check(_write(tmp_path, HAPPY))
        assert result.get("POLICY_VALIDATION").is_happy() is False
