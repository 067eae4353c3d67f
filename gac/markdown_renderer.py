"""
Markdown rendering for model replies.
Turns markdown into ANSI-styled terminal text one line at a time, keeping the
block state (fenced code, indented code, markdown wrapper fences) between calls
so a reply can be rendered while it is still streaming in.
"""

import re
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from . import config
from .style_resolver import apply_style
from .styles import StyleSpec, merge_styles
from .utils import get_terminal_width

FENCE_RE = re.compile(r"^\s*(?:[-*+]\s+|\d+\.\s+)?(```|~~~)\s*([A-Za-z0-9_-]+)?\s*$")
INDENT_RE = re.compile(r"^(?:\t| {4})(.*)$")
HEADER_RE = re.compile(r"^(#{1,6})\s+(.+?)(?:\s+#+|#+)?\s*$")
LIST_HEADER_RE = re.compile(
    r"^(\s*[-*+]+\s+|\s*\d+[.)]\s+)(#{1,6})\s+(.+?)(?:\s+#+|#+)?\s*$"
)
THEMATIC_BREAK_RE = re.compile(r"^(-{3,}|_{3,}|\*{3,})\s*$")

CODE_SPAN_RE = re.compile(r"`([^`]+)`")
BOLD_RE = re.compile(r"\*\*([^*]+)\*\*")
ITALIC_RE = re.compile(r"_([^_]+)_")
LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")

MARKDOWN_LANGS = ("markdown", "md")
THEMATIC_BREAK_WIDTH = 24
MIN_UNDERLINE_WIDTH = 4


class Block(Enum):
    """Innermost block the renderer is in."""

    NORMAL = "normal"
    FENCED_CODE = "fenced_code"
    INDENTED_CODE = "indented_code"


class RendererState:
    """Mutable state of one renderer, alive for one rendered reply.

    ``block``/``fence`` describe the innermost block. A markdown wrapper fence
    (```` ```markdown ````) encloses blocks rather than being one, so it is
    tracked separately in ``wrapper_fence``.
    """

    def __init__(self):
        self.block = Block.NORMAL
        self.fence: Optional[str] = None
        self.wrapper_fence: Optional[str] = None
        # True so the first line never gets a separating blank line
        self.prev_blank = True

    @property
    def in_fenced_code(self) -> bool:
        return self.block is Block.FENCED_CODE

    @property
    def fence_type(self) -> Optional[str]:
        return self.fence

    @property
    def in_indented_code(self) -> bool:
        return self.block is Block.INDENTED_CODE

    @property
    def markdown_wrapper(self) -> bool:
        return self.wrapper_fence is not None

    @property
    def wrapper_fence_type(self) -> Optional[str]:
        return self.wrapper_fence

    @property
    def mode(self) -> str:
        if self.block is Block.FENCED_CODE:
            return "InFencedCode"
        if self.block is Block.INDENTED_CODE:
            return "InIndentedCode"
        if self.wrapper_fence is not None:
            return "InMarkdownWrapper"
        return "Normal"

    def open_fenced_code(self, fence: str):
        self.block = Block.FENCED_CODE
        self.fence = fence

    def open_indented_code(self):
        self.block = Block.INDENTED_CODE
        self.fence = None

    def close_block(self):
        self.block = Block.NORMAL
        self.fence = None

    def __repr__(self):
        return (
            f"RendererState(mode={self.mode}, fence={self.fence!r}, "
            f"wrapper_fence={self.wrapper_fence!r}, prev_blank={self.prev_blank})"
        )


def match_fence(line: str):
    """Return (fence, lowercased language tag) for a fence delimiter line, else None."""
    match = FENCE_RE.match(line)
    if not match:
        return None
    return match.group(1), (match.group(2) or "").lower()


def render_inline(text: str) -> str:
    """Inline markdown: code spans, bold, italic and links, in that order."""
    output = CODE_SPAN_RE.sub(lambda m: apply_style(["dim"], m.group(1)), text)
    output = BOLD_RE.sub(lambda m: apply_style(["bold"], m.group(1)), output)
    output = ITALIC_RE.sub(lambda m: apply_style(["italic"], m.group(1)), output)
    output = LINK_RE.sub(
        lambda m: f"{apply_style(['underline'], m.group(1))} ({m.group(2)})", output
    )
    return output


class MarkdownRenderer:
    """Stateful line renderer. Feed it lines in order, one call per line."""

    def __init__(
        self,
        styles: Optional[StyleSpec] = None,
        width_provider: Optional[Callable[[], int]] = None,
    ):
        self.styles = styles or merge_styles()
        self.width_provider = width_provider or get_terminal_width
        self.state = RendererState()

    def render_text(self, text: str) -> str:
        """Render a complete reply through the same state machine."""
        return "\n".join(self.render_line(line) for line in text.split("\n"))

    def render_line(self, line: str) -> str:
        """Render one line of markdown (without its newline)."""
        sanitized = line.replace("\r", "")
        trimmed = sanitized.strip()
        is_blank = not trimmed
        state = self.state

        fence = match_fence(sanitized)
        if fence:
            rendered = self._render_fence_line(sanitized, *fence)
            state.prev_blank = False
            return rendered

        if state.in_fenced_code:
            state.prev_blank = False
            return self._render_code_line(sanitized)

        indented = INDENT_RE.match(sanitized)

        if state.in_indented_code:
            if indented:
                state.prev_blank = False
                return self._render_code_line(indented.group(1))
            state.close_block()
            rendered = self._render_markdown_line(sanitized, trimmed)
            state.prev_blank = is_blank
            if self.styles.code_border:
                return f"{self._closing_rule()}\n{rendered}"
            return rendered

        if indented and state.prev_blank:
            state.open_indented_code()
            state.prev_blank = False
            code_line = self._render_code_line(indented.group(1))
            if self.styles.code_border:
                return f"{self._opening_rule()}\n{code_line}"
            return code_line

        rendered = self._render_markdown_line(sanitized, trimmed)
        state.prev_blank = is_blank
        return rendered

    def _render_fence_line(self, sanitized: str, fence: str, lang: str) -> str:
        state = self.state
        border = self.styles.code_border

        if state.in_fenced_code:
            if fence == state.fence and not lang:
                state.close_block()
                return self._closing_rule() if border else ""
            # Other fence character or a tagged fence: literal code
            return self._render_code_line(sanitized)

        # A fence ends any indented block before it is interpreted
        closing = ""
        if state.in_indented_code:
            state.close_block()
            closing = self._closing_rule() if border else ""

        if state.markdown_wrapper and fence == state.wrapper_fence and not lang:
            state.wrapper_fence = None
            rendered = ""
        elif not state.markdown_wrapper and lang in MARKDOWN_LANGS:
            state.wrapper_fence = fence
            rendered = ""
        else:
            state.open_fenced_code(fence)
            rendered = self._opening_rule() if border else ""

        if closing and rendered:
            return f"{closing}\n{rendered}"
        return closing or rendered

    def _render_markdown_line(self, sanitized: str, trimmed: str) -> str:
        header = HEADER_RE.match(trimmed)
        if header:
            return self._render_header(len(header.group(1)), header.group(2))

        list_header = LIST_HEADER_RE.match(sanitized)
        if list_header:
            return self._render_header(
                len(list_header.group(2)), list_header.group(3), list_header.group(1)
            )

        if THEMATIC_BREAK_RE.match(trimmed):
            rule = self.styles.header_underline_char * THEMATIC_BREAK_WIDTH
            return apply_style(self.styles.header_underline_style, rule)

        if trimmed.startswith(">"):
            return apply_style(["dim"], render_inline(sanitized))

        return render_inline(sanitized)

    def _render_header(self, level: int, text: str, prefix: str = "") -> str:
        styled = apply_style(self.styles.header_styles_for_level(level), text)
        separator = "" if self.state.prev_blank else "\n"
        if not self.styles.underline_enabled_for(level):
            return f"{separator}{prefix}{styled}"

        underline = self.styles.header_underline_char * max(len(text), MIN_UNDERLINE_WIDTH)
        pad = " " * len(prefix.replace("\t", "    "))
        styled_underline = apply_style(self.styles.header_underline_style, underline)
        return f"{separator}{prefix}{styled}\n{pad}{styled_underline}"

    def _render_code_line(self, line: str) -> str:
        gutter = apply_style(self.styles.code_border_style, self.styles.code_gutter)
        code_styles = self.styles.code_background + self.styles.code_styles
        return f"{gutter}{apply_style(code_styles, line)}"

    def _rule_width(self) -> int:
        try:
            width = self.width_provider() or config.DEFAULT_TERMINAL_WIDTH
        except (OSError, ValueError):
            width = config.DEFAULT_TERMINAL_WIDTH
        return max(config.RULE_MIN_WIDTH, min(width, config.RULE_MAX_WIDTH))

    def _rule_line(self, left: str, fill: str, right: str) -> str:
        inner = max(self._rule_width() - 2, 1)
        return apply_style(self.styles.code_border_style, f"{left}{fill * inner}{right}")

    def _opening_rule(self) -> str:
        chars = self.styles.code_border_chars
        return self._rule_line(chars["top_left"], chars["top"], chars["top_right"])

    def _closing_rule(self) -> str:
        chars = self.styles.code_border_chars
        return self._rule_line(chars["bottom_left"], chars["bottom"], chars["bottom_right"])


def create_renderer(
    style_overrides: Optional[Mapping[str, Any]] = None,
    width_provider: Optional[Callable[[], int]] = None,
) -> MarkdownRenderer:
    """Build a fresh renderer from partial style overrides (the config's markdown_styles)."""
    return MarkdownRenderer(merge_styles(style_overrides), width_provider)
