"""
Tests for the persistent config file.
"""

import json
import os
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import patch

import pytest

import gac.config
import gac.persistent_config
from gac.persistent_config import (
    DEFAULT_SETTINGS,
    PersistentConfig,
    coerce_value,
    get_config_path,
    resolve_config_dir,
)


class TestPersistentConfig(unittest.TestCase):
    """Test cases for PersistentConfig."""

    def setUp(self):
        self.temp_dir = TemporaryDirectory()
        self.config_file = Path(self.temp_dir.name) / "config.json"

    def tearDown(self):
        self.temp_dir.cleanup()

    def read_file(self):
        with open(self.config_file, "r", encoding="utf-8") as f:
            return json.load(f)

    def test_first_load_writes_defaults(self):
        settings = PersistentConfig(self.config_file)
        self.assertTrue(self.config_file.exists())
        self.assertEqual(self.read_file(), json.loads(json.dumps(DEFAULT_SETTINGS)))
        self.assertEqual(settings["model"], "gpt4all")
        self.assertEqual(settings["base_url"], "http://localhost:4891")

    def test_file_values_override_defaults(self):
        self.config_file.write_text(json.dumps({"model": "llama", "stream": False}), encoding="utf-8")
        settings = PersistentConfig(self.config_file)
        self.assertEqual(settings["model"], "llama")
        self.assertFalse(settings["stream"])
        self.assertEqual(settings["max_tokens"], 512)

    def test_corrupt_file_falls_back_to_defaults(self):
        self.config_file.write_text("{not json", encoding="utf-8")
        with patch("gac.persistent_config.wmsg") as mock_wmsg:
            settings = PersistentConfig(self.config_file)
        mock_wmsg.assert_called_once()
        self.assertEqual(dict(settings), DEFAULT_SETTINGS)
        self.assertEqual(self.config_file.read_text(encoding="utf-8"), "{not json")

    def test_non_object_file_falls_back_to_defaults(self):
        self.config_file.write_text("[1, 2]", encoding="utf-8")
        with patch("gac.persistent_config.wmsg"):
            settings = PersistentConfig(self.config_file)
        self.assertEqual(dict(settings), DEFAULT_SETTINGS)

    def test_set_value_saves(self):
        settings = PersistentConfig(self.config_file)
        result = settings.set_value("temperature", "0.2")
        self.assertIs(result, settings)
        self.assertEqual(self.read_file()["temperature"], 0.2)
        self.assertEqual(PersistentConfig(self.config_file)["temperature"], 0.2)

    def test_set_value_dotted_key(self):
        settings = PersistentConfig(self.config_file)
        settings.set_value("markdown_styles.code_border", "false")
        self.assertIs(settings["markdown_styles"]["code_border"], False)
        self.assertEqual(settings["markdown_styles"]["code_styles"], ["cyan"])
        self.assertIs(self.read_file()["markdown_styles"]["code_border"], False)

    def test_set_value_creates_missing_levels(self):
        settings = PersistentConfig(self.config_file)
        settings.set_value("extra.nested.key", "value")
        self.assertEqual(settings["extra"], {"nested": {"key": "value"}})

    def test_get_value(self):
        settings = PersistentConfig(self.config_file)
        self.assertEqual(settings.get_value("model"), "gpt4all")
        self.assertEqual(settings.get_value("markdown_styles.code_gutter"), "│ ")
        self.assertIsNone(settings.get_value("markdown_styles.nope"))
        self.assertIsNone(settings.get_value("model.deeper"))
        self.assertEqual(settings.get_value("missing", "fallback"), "fallback")

    def test_defaults_are_not_shared(self):
        settings = PersistentConfig(self.config_file)
        settings["markdown_styles"]["code_styles"].append("bold")
        self.assertEqual(DEFAULT_SETTINGS["markdown_styles"]["code_styles"], ["cyan"])

    def test_unwritable_file_keeps_changes_in_memory(self):
        settings = PersistentConfig(self.config_file)
        with patch("builtins.open", side_effect=PermissionError("read-only")):
            with patch("gac.persistent_config.wmsg") as mock_wmsg:
                settings.set_value("model", "other")
                settings.set_value("stream", "false")
        mock_wmsg.assert_called_once()
        self.assertEqual(settings["model"], "other")
        self.assertEqual(self.read_file()["model"], "gpt4all")


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("true", True),
        ("false", False),
        ("null", None),
        ("42", 42),
        ("-3", -3),
        ("0.5", 0.5),
        ("1.0", 1.0),
        ("1e3", 1000.0),
        ('["bold", "dim"]', ["bold", "dim"]),
        ('{"top": "="}', {"top": "="}),
        ("cyan", "cyan"),
        ("[not json", "[not json"),
        ("http://localhost:4891", "http://localhost:4891"),
        ("True", "True"),
    ],
)
def test_coerce_value(raw, expected):
    assert coerce_value(raw) == expected
    assert type(coerce_value(raw)) is type(expected)


def test_coerce_value_keeps_non_finite_numbers_as_text():
    assert coerce_value("nan") == "nan"
    assert coerce_value("inf") == "inf"
    assert coerce_value("-inf") == "-inf"


def test_default_config_path_uses_isolated_dir(isolated_config_dir):
    assert get_config_path() == isolated_config_dir / "config.json"
    settings = PersistentConfig()
    assert settings.config_file == isolated_config_dir / "config.json"
    assert settings.config_file.exists()


def test_config_dir_from_environment(tmp_path, monkeypatch):
    target = tmp_path / "custom"
    monkeypatch.setattr(gac.persistent_config, "_resolved_config_dir", None)
    monkeypatch.setattr(gac.config, "CONFIG_DIR", str(target))
    assert resolve_config_dir() == target
    assert target.is_dir()


def test_config_dir_falls_back_to_cwd(tmp_path, monkeypatch):
    monkeypatch.setattr(gac.persistent_config, "_resolved_config_dir", None)
    monkeypatch.setattr(gac.config, "CONFIG_DIR", None)
    home = tmp_path / "home-file"
    home.write_text("not a directory", encoding="utf-8")
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: home))
    monkeypatch.chdir(tmp_path)
    assert resolve_config_dir() == Path(os.getcwd()) / ".gac"
