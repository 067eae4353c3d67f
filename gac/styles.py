"""
Markdown style specification.

Defaults live in DEFAULT_STYLES; user overrides (the ``markdown_styles`` key of
the config file) are merged over them by ``merge_styles``.
"""

import copy
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from .utils import dmsg

DEFAULT_STYLES: Dict[str, Any] = {
    "header_styles": ["bold"],
    "header_styles_by_level": {
        1: ["bold", "brightWhite"],
        2: ["bold"],
        3: ["bold"],
        4: ["dim"],
        5: ["dim"],
        6: ["dim"],
    },
    "header_underline": True,
    "header_underline_levels": [1],
    "header_underline_style": ["dim"],
    "header_underline_char": "─",
    "code_styles": ["cyan"],
    "code_background": ["bgBlack"],
    "code_border": True,
    "code_border_style": ["dim"],
    "code_gutter": "│ ",
    "code_border_chars": {
        "top_left": "┌",
        "top": "─",
        "top_right": "┐",
        "bottom_left": "└",
        "bottom": "─",
        "bottom_right": "┘",
    },
}


def default_style_settings() -> Dict[str, Any]:
    """A mutable copy of the defaults, suitable for writing to config.json."""
    return copy.deepcopy(DEFAULT_STYLES)


def normalize_styles(styles) -> Tuple[str, ...]:
    """Accept None, a single token or a list of tokens."""
    if not styles:
        return ()
    if isinstance(styles, str):
        return (styles,)
    return tuple(styles)


def _normalize_levels(levels: Mapping) -> Dict[int, Tuple[str, ...]]:
    normalized = {}
    for level, styles in levels.items():
        try:
            normalized[int(level)] = normalize_styles(styles)
        except (TypeError, ValueError):
            dmsg(f"Ignoring header level {level!r} in markdown styles")
    return normalized


@dataclass(frozen=True)
class StyleSpec:
    """Effective, read-only styles used by the markdown renderer."""

    header_styles: Tuple[str, ...]
    header_styles_by_level: Mapping[int, Tuple[str, ...]]
    header_underline: bool
    header_underline_levels: Optional[Tuple[int, ...]]
    header_underline_style: Tuple[str, ...]
    header_underline_char: str
    code_styles: Tuple[str, ...]
    code_background: Tuple[str, ...]
    code_border: bool
    code_border_style: Tuple[str, ...]
    code_gutter: str
    code_border_chars: Mapping[str, str]

    def header_styles_for_level(self, level: int) -> Tuple[str, ...]:
        if level in self.header_styles_by_level:
            return self.header_styles_by_level[level]
        return self.header_styles

    def underline_enabled_for(self, level: int) -> bool:
        if not self.header_underline:
            return False
        if self.header_underline_levels is None:
            return True
        return level in self.header_underline_levels


def merge_styles(overrides: Optional[Mapping[str, Any]] = None) -> StyleSpec:
    """Build a StyleSpec from the defaults and a partial override mapping.

    Top-level keys replace the default; ``header_styles_by_level`` and
    ``code_border_chars`` are merged entry by entry so a partial override keeps
    the remaining defaults.
    """
    if isinstance(overrides, StyleSpec):
        return overrides

    merged = copy.deepcopy(DEFAULT_STYLES)
    merged["header_styles_by_level"] = _normalize_levels(merged["header_styles_by_level"])

    for key, value in (overrides or {}).items():
        if key not in merged:
            dmsg(f"Ignoring unknown markdown style key: {key}")
            continue
        if key == "header_styles_by_level":
            if isinstance(value, Mapping):
                merged[key].update(_normalize_levels(value))
            continue
        if key == "code_border_chars":
            if isinstance(value, Mapping):
                merged[key].update({k: str(v) for k, v in value.items()})
            continue
        merged[key] = value

    levels = merged["header_underline_levels"]
    if isinstance(levels, (list, tuple)):
        levels = tuple(int(level) for level in levels if str(level).isdigit())
    else:
        levels = None

    return StyleSpec(
        header_styles=normalize_styles(merged["header_styles"]),
        header_styles_by_level=MappingProxyType(merged["header_styles_by_level"]),
        header_underline=bool(merged["header_underline"]),
        header_underline_levels=levels,
        header_underline_style=normalize_styles(merged["header_underline_style"]),
        header_underline_char=merged["header_underline_char"] or "─",
        code_styles=normalize_styles(merged["code_styles"]),
        code_background=normalize_styles(merged["code_background"]),
        code_border=bool(merged["code_border"]),
        code_border_style=normalize_styles(merged["code_border_style"]),
        code_gutter=str(merged["code_gutter"] or ""),
        code_border_chars=MappingProxyType(dict(merged["code_border_chars"])),
    )
