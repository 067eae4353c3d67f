"""
Resolve style tokens into ANSI escape sequences.

A style token is one of:
- a named attribute or color from ANSI_CODES (``bold``, ``cyan``, ``bgBlack``...)
- a default marker (``default``/``fg:default``/``fg-default``, ``bg:default``/``bg-default``)
- a truecolor foreground ``#rgb`` / ``#rrggbb``
- a truecolor background ``bg#rgb`` / ``bg#rrggbb`` / ``bg:#rrggbb``

Anything else resolves to nothing and is skipped.
"""

import re
from typing import Iterable, Optional, Tuple

from . import config

_BASE_COLORS = ["black", "red", "green", "yellow", "blue", "magenta", "cyan", "white"]


def _build_code_table():
    table = {
        "reset": config.RESET,
        "bold": config.BOLD,
        "dim": config.DIM,
        "italic": config.ITALIC,
        "underline": config.UNDERLINE,
        "gray": "\033[90m",
        "grey": "\033[90m",
        "bgGray": "\033[100m",
        "bgGrey": "\033[100m",
    }
    for offset, name in enumerate(_BASE_COLORS):
        cap = name.capitalize()
        table[name] = f"\033[{30 + offset}m"
        table[f"bright{cap}"] = f"\033[{90 + offset}m"
        table[f"bg{cap}"] = f"\033[{40 + offset}m"
        table[f"bgBright{cap}"] = f"\033[{100 + offset}m"
    return table


ANSI_CODES = _build_code_table()

DEFAULT_FG_MARKERS = ("default", "fg:default", "fg-default")
DEFAULT_BG_MARKERS = ("bg:default", "bg-default")

DEFAULT_FG_CODE = "\033[39m"
DEFAULT_BG_CODE = "\033[49m"

_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_BG_HEX_RE = re.compile(r"^bg:?(#[0-9a-fA-F]+)$")


def parse_hex_color(token: str) -> Optional[Tuple[int, int, int]]:
    """Parse ``#rgb`` or ``#rrggbb`` into an RGB tuple, None if malformed."""
    if not token:
        return None
    match = _HEX_RE.match(token)
    if not match:
        return None
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


def parse_bg_hex_color(token: str) -> Optional[Tuple[int, int, int]]:
    """Parse ``bg#rrggbb`` / ``bg:#rrggbb`` into an RGB tuple."""
    if not token:
        return None
    match = _BG_HEX_RE.match(token)
    if not match:
        return None
    return parse_hex_color(match.group(1))


def resolve_token(token) -> str:
    """Return the escape code for a single token, or "" when unresolvable."""
    if not isinstance(token, str):
        return ""
    if token in ANSI_CODES:
        return ANSI_CODES[token]
    if token in DEFAULT_FG_MARKERS:
        return DEFAULT_FG_CODE
    if token in DEFAULT_BG_MARKERS:
        return DEFAULT_BG_CODE
    rgb = parse_hex_color(token)
    if rgb:
        return "\033[38;2;{};{};{}m".format(*rgb)
    rgb = parse_bg_hex_color(token)
    if rgb:
        return "\033[48;2;{};{};{}m".format(*rgb)
    return ""


def apply_style(styles: Iterable[str], text: str) -> str:
    """Wrap text in the codes of every resolvable token, left to right.

    When no token resolves the text comes back untouched, without a reset.
    """
    codes = "".join(resolve_token(style) for style in styles or ())
    if not codes:
        return text
    return f"{codes}{text}{config.RESET}"
