from __future__ import annotations

import json
import logging

import pytest

from daypass.config import _env_flag, _load_persisted_settings, configure_logging


@pytest.mark.parametrize(
    "raw, expected",
    [(None, True), ("", True), ("0", False), ("false", False), ("YES", True), ("on", True)],
)
def test_env_flag(monkeypatch, raw, expected):
    if raw is None:
        monkeypatch.delenv("DAYPASS_TEST_FLAG", raising=False)
    else:
        monkeypatch.setenv("DAYPASS_TEST_FLAG", raw)
    assert _env_flag("DAYPASS_TEST_FLAG", True) is expected


def test_persisted_settings(tmp_path):
    assert _load_persisted_settings(tmp_path) == {}
    (tmp_path / "settings.json").write_text(json.dumps({"data_dir": "/srv/daypass"}), encoding="utf-8")
    assert _load_persisted_settings(tmp_path) == {"data_dir": "/srv/daypass"}
    (tmp_path / "settings.json").write_text("{broken", encoding="utf-8")
    assert _load_persisted_settings(tmp_path) == {}


def test_configure_logging_sets_package_level():
    configure_logging("debug")
    assert logging.getLogger("daypass").level == logging.DEBUG
    configure_logging("WARNING")
    assert logging.getLogger("daypass").level == logging.WARNING
