"""
Streaming adapter for gac to handle SSE streaming responses.
Extracts content deltas from ``data:`` lines and pushes them through a
StreamReassembler so the reply is rendered while it arrives.
"""

import json
from typing import Any, Dict, Iterable, Iterator, Optional, Union

from . import config
from .stream_reassembler import StreamReassembler
from .utils import dmsg

SSE_DONE = "[DONE]"


def get_content_delta(payload: Optional[Dict[str, Any]]) -> str:
    """Text carried by a chat-completion chunk or response, "" if none."""
    if not isinstance(payload, dict):
        return ""
    choices = payload.get("choices")
    if not choices or not isinstance(choices, list):
        return ""
    choice = choices[0] or {}

    delta = choice.get("delta") or {}
    if delta.get("content"):
        return delta["content"]
    message = choice.get("message") or {}
    if message.get("content"):
        return message["content"]
    if choice.get("text"):
        return choice["text"]
    return ""


def _log_stream_data(data: str):
    """Append a raw SSE line to the stream log if logging is enabled."""
    if not config.STREAM_LOG_FILE:
        return
    try:
        with open(config.STREAM_LOG_FILE, "a", encoding="utf-8") as f:
            f.write(data + "\n")
    except OSError as e:
        dmsg(f"Error writing to stream log: {e}")


def iter_sse_deltas(lines: Iterable[Union[str, bytes]]) -> Iterator[str]:
    """Yield content deltas from SSE lines until ``data: [DONE]``."""
    for raw_line in lines:
        if isinstance(raw_line, bytes):
            raw_line = raw_line.decode("utf-8", errors="replace")
        line = raw_line.strip()
        _log_stream_data(line)

        if not line or not line.startswith("data:"):
            continue

        data = line[len("data:"):].strip()
        if data == SSE_DONE:
            return

        try:
            payload = json.loads(data)
        except json.JSONDecodeError:
            dmsg(f"Skipping non-JSON SSE payload: {data[:80]}")
            continue

        delta = get_content_delta(payload)
        if delta:
            yield delta


def stream_response(response, renderer=None, sink=None) -> str:
    """Render an SSE response body as it streams; return the raw reply text.

    ``response`` is anything iterable line by line (an HTTP response object
    or a list of lines in tests).
    """
    reassembler = StreamReassembler(renderer, sink)
    try:
        for delta in iter_sse_deltas(response):
            reassembler.feed(delta)
    finally:
        # Whatever arrived before an interrupt is still flushed
        reassembler.finish()
    return reassembler.raw_text
