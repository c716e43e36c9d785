"""Tests for the Container (composition root and facade)."""

from __future__ import annotations

import json

import pytest
from conftest import write_epub, write_pdf

from flint_checker.bootstrap import Container
from flint_checker.domain.errors import ConfigurationError, UnsupportedFormatError
from flint_checker.domain.models import PatternFilter, Verdict
from flint_checker.infrastructure.config import policy_filter_store


@pytest.fixture(autouse=True)
def _no_user_policy_dir(monkeypatch):
    monkeypatch.setattr(policy_filter_store, "default_policy_dir", lambda: None)


class TestContainerWiring:
    def test_formats(self):
        container = Container()
        assert container.format_names() == ["PDF", "EPUB"]
        assert container.get_format("pdf").format_name == "PDF"

    def test_unknown_format(self):
        with pytest.raises(UnsupportedFormatError):
            Container().get_format("TIFF")

    def test_accepted_mimetypes(self):
        assert Container().accepted_mimetypes() == frozenset(
            {"application/pdf", "application/epub+zip"}
        )

    def test_custom_config(self, tmp_path):
        path = tmp_path / "flint.json"
        path.write_text(json.dumps({"timeouts": {"policy_seconds": 9}}), encoding="utf-8")
        assert Container(config_path=path).config.timeouts.policy_seconds == 9

    def test_missing_policy_dir(self, tmp_path):
        with pytest.raises(ConfigurationError):
            Container(policy_dir=tmp_path / "missing")


class TestPolicyFilters:
    def test_filters_from_policy_dir(self, tmp_path):
        (tmp_path / "PDF-policy.json").write_text(
            json.dumps({"NO_DRM": True, "HasPages": True, "HasMetadata": False}),
            encoding="utf-8",
        )
        container = Container(policy_dir=tmp_path)
        assert container.get_format("PDF").all_category_names() == ["NO_DRM", "HasPages"]
        assert container.get_format("EPUB").pattern_filter is None

    def test_policy_dir_from_config(self, tmp_path):
        policies = tmp_path / "policies"
        policies.mkdir()
        (policies / "EPUB-policy.json").write_text(json.dumps({"HasSpine": True}), "utf-8")
        config = tmp_path / "flint.json"
        config.write_text(json.dumps({"policy": {"policy_dir": str(policies)}}), "utf-8")

        container = Container(config_path=config)
        assert container.get_format("EPUB").all_category_names() == ["HasSpine"]

    def test_in_memory_filters(self):
        container = Container()
        container.apply_pattern_filters({"epub": PatternFilter.of(["NoRightsFile"])})
        assert container.get_format("EPUB").policy_pattern_names() == ["NoRightsFile"]
        assert container.get_format("PDF").pattern_filter is None


class TestContainerCheck:
    def test_check_directory(self, tmp_path):
        write_pdf(tmp_path / "a.pdf")
        write_epub(tmp_path / "b.epub")
        (tmp_path / "c.txt").write_text("not checkable", encoding="utf-8")

        results = Container().check(tmp_path)

        assert [(r.filename, r.format_name) for r in results] == [
            ("a.pdf", "PDF"),
            ("b.epub", "EPUB"),
            ("c.txt", ""),
        ]
        assert [r.verdict() for r in results] == [
            Verdict.PASSED,
            Verdict.PASSED,
            Verdict.ERRONEOUS,
        ]
        assert "<checkedFile name='c.txt' result='erroneous'" in Container.to_xml(results)

    def test_to_xml(self, tmp_path):
        container = Container()
        xml = container.to_xml(container.check(write_pdf(tmp_path / "a.pdf")))
        assert "<checkedFile name='a.pdf' result='passed' format='PDF'" in xml
