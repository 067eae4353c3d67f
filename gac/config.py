"""
Configuration module for gac.
"""

import os


def _get_env_config(env_var: str, default_value, value_type=str):
    """Get config value from the environment, falling back to a default."""
    value = os.environ.get(env_var)
    if value is not None:
        if default_value is None and value == "":
            return None
        try:
            return value_type(value)
        except ValueError:
            return default_value
    return default_value


# --- Configuration ---
DEBUG = os.environ.get("DEBUG", "0") == "1"
APP_NAME = "gac"

# Directory holding config.json. Unset means ~/.gac with ./.gac as fallback.
CONFIG_DIR = _get_env_config("GAC_CONFIG_DIR", None)
CONFIG_FILE_NAME = "config.json"

# Per-run overrides of the persisted settings
BASE_URL_OVERRIDE = _get_env_config("GAC_BASE_URL", None)
MODEL_OVERRIDE = _get_env_config("GAC_MODEL", None)

# HTTP timeout for every request (seconds)
HTTP_TIMEOUT = _get_env_config("HTTP_TIMEOUT", 300, int)

# Stream log file - if set, all raw SSE lines are appended to this file
STREAM_LOG_FILE = _get_env_config("GAC_STREAM_LOG", None)

# Border rules are clamped to this range of columns
RULE_MIN_WIDTH = 20
RULE_MAX_WIDTH = 100
DEFAULT_TERMINAL_WIDTH = 80

DEFAULT_BASE_URL = "http://localhost:4891"
DEFAULT_MODEL = "gpt4all"

# Define some ANSI color codes
RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
CYAN = "\033[36m"
RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
ITALIC = "\033[3m"
UNDERLINE = "\033[4m"
