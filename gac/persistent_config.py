"""
Simple persistent configuration for gac.

A dict merged over DEFAULT_SETTINGS that loads from and saves to
~/.gac/config.json (./.gac/config.json when the home directory is not writable).
"""

import copy
import json
import math
from pathlib import Path

from . import config
from .styles import default_style_settings
from .utils import wmsg, dmsg

DEFAULT_SETTINGS = {
    "base_url": config.DEFAULT_BASE_URL,
    "model": config.DEFAULT_MODEL,
    "temperature": 0.7,
    "max_tokens": 512,
    "stream": True,
    "render_markdown": True,
    "debug_render": False,
    "detailed_suggest": False,
    "markdown_styles": default_style_settings(),
}

_resolved_config_dir = None


def resolve_config_dir() -> Path:
    """Pick the config directory once: GAC_CONFIG_DIR, ~/.gac, then ./.gac."""
    global _resolved_config_dir
    if _resolved_config_dir is not None:
        return _resolved_config_dir

    if config.CONFIG_DIR:
        candidates = [Path(config.CONFIG_DIR)]
    else:
        candidates = [Path.home() / ".gac", Path.cwd() / ".gac"]

    for candidate in candidates:
        try:
            candidate.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            dmsg(f"Cannot use config directory {candidate}: {e}")
            continue
        _resolved_config_dir = candidate
        return candidate

    # Nothing writable: keep the first choice, saves will degrade to in-memory
    _resolved_config_dir = candidates[0]
    return _resolved_config_dir


def get_config_path() -> Path:
    return resolve_config_dir() / config.CONFIG_FILE_NAME


def coerce_value(value: str):
    """Turn a command-line string into the JSON-ish value it spells."""
    trimmed = value.strip()
    if (trimmed.startswith("{") and trimmed.endswith("}")) or (
        trimmed.startswith("[") and trimmed.endswith("]")
    ):
        try:
            return json.loads(trimmed)
        except json.JSONDecodeError:
            pass  # Fall through to string handling
    if trimmed == "true":
        return True
    if trimmed == "false":
        return False
    if trimmed == "null":
        return None
    try:
        number = float(trimmed)
    except ValueError:
        return value
    if not math.isfinite(number):
        return value
    if number.is_integer() and "." not in trimmed and "e" not in trimmed.lower():
        return int(number)
    return number


class PersistentConfig(dict):
    """Dict of settings that loads from and saves to config.json."""

    def __init__(self, config_file=None):
        """
        Initialize persistent config.

        Args:
            config_file: Path of the JSON file. If None, uses get_config_path().
        """
        super().__init__()
        self.config_file = Path(config_file) if config_file else get_config_path()
        self._read_only = False
        self.load()

    def load(self):
        """Load config from JSON file, writing the defaults on first run."""
        self.clear()
        self.update(copy.deepcopy(DEFAULT_SETTINGS))

        if not self.config_file.exists():
            self.save()
            return

        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            wmsg(f"Warning: Could not read {self.config_file}, using defaults: {e}")
            return

        if isinstance(data, dict):
            self.update(data)
        else:
            wmsg(f"Warning: {self.config_file} does not hold a JSON object, using defaults")

    def save(self):
        """Save config to JSON file."""
        if self._read_only:
            return

        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(dict(self), f, indent=2, ensure_ascii=False)
        except OSError as e:
            wmsg(f"Warning: Could not save config, changes kept in memory only: {e}")
            self._read_only = True

    def get_value(self, key: str, default=None):
        """Look up a dotted key such as ``markdown_styles.code_border``."""
        cursor = self
        for part in key.split("."):
            if not isinstance(cursor, dict) or part not in cursor:
                return default
            cursor = cursor[part]
        return cursor

    def set_value(self, key: str, raw_value: str):
        """Set a dotted key from its string form, save, and return self."""
        parts = key.split(".")
        cursor = self
        for part in parts[:-1]:
            if not isinstance(cursor.get(part), dict):
                cursor[part] = {}
            cursor = cursor[part]
        cursor[parts[-1]] = coerce_value(raw_value)
        self.save()
        return self
