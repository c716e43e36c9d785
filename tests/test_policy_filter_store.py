"""Tests for reading <FORMAT>-policy.json pattern filters."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from flint_checker.domain.errors import ConfigurationError
from flint_checker.infrastructure.config import policy_filter_store
from flint_checker.infrastructure.config.policy_filter_store import (
    PolicyFilterStore,
    default_policy_dir,
    load_pattern_filter,
)


def _write(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestLoadPatternFilter:
    def test_only_enabled_patterns_are_kept(self, tmp_path):
        path = _write(tmp_path / "PDF-policy.json", {"NoEncryption": True, "HasMetadata": False})
        pattern_filter = load_pattern_filter(path)
        assert pattern_filter.patterns == frozenset({"NoEncryption"})
        assert pattern_filter.name == "PDF-policy"

    def test_empty_object_is_empty_filter(self, tmp_path):
        assert len(load_pattern_filter(_write(tmp_path / "x.json", {}))) == 0

    def test_not_an_object(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_pattern_filter(_write(tmp_path / "x.json", ["NoEncryption"]))

    def test_not_json(self, tmp_path):
        path = tmp_path / "x.json"
        path.write_text("NoEncryption=true", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_pattern_filter(path)


class TestPolicyFilterStore:
    def test_filter_for_format(self, tmp_path):
        _write(tmp_path / "EPUB-policy.json", {"HasSpine": True})
        store = PolicyFilterStore(tmp_path)
        assert store.path_for("EPUB") == tmp_path / "EPUB-policy.json"
        assert store.filter_for("EPUB").patterns == frozenset({"HasSpine"})

    def test_missing_file_means_all_patterns(self, tmp_path):
        store = PolicyFilterStore(tmp_path)
        assert store.path_for("PDF") is None
        assert store.filter_for("PDF") is None

    def test_missing_directory_rejected(self, tmp_path):
        with pytest.raises(ConfigurationError):
            PolicyFilterStore(tmp_path / "missing")

    def test_no_directory_at_all(self, monkeypatch):
        monkeypatch.setattr(policy_filter_store, "default_policy_dir", lambda: None)
        store = PolicyFilterStore()
        assert store.policy_dir is None
        assert store.filter_for("PDF") is None

    def test_default_directory_from_platformdirs(self, tmp_path, monkeypatch):
        monkeypatch.setattr(
            policy_filter_store.platformdirs, "user_config_dir", lambda app: str(tmp_path)
        )
        assert default_policy_dir() is None
        (tmp_path / "policies").mkdir()
        assert default_policy_dir() == tmp_path / "policies"
