"""
Tests for SSE parsing and streamed rendering.
"""

import json

import pytest

import gac.config
from gac.markdown_renderer import create_renderer
from gac.streaming_adapter import get_content_delta, iter_sse_deltas, stream_response


def sse(content):
    return f"data: {json.dumps({'choices': [{'delta': {'content': content}}]})}\n".encode()


def test_get_content_delta_prefers_delta():
    payload = {"choices": [{"delta": {"content": "a"}, "message": {"content": "b"}}]}
    assert get_content_delta(payload) == "a"


def test_get_content_delta_message_and_text():
    assert get_content_delta({"choices": [{"message": {"content": "full"}}]}) == "full"
    assert get_content_delta({"choices": [{"text": "legacy"}]}) == "legacy"


@pytest.mark.parametrize(
    "payload",
    [None, {}, {"choices": []}, {"choices": [{}]}, {"choices": [{"delta": {"role": "assistant"}}]}, []],
)
def test_get_content_delta_empty(payload):
    assert get_content_delta(payload) == ""


def test_iter_sse_deltas_skips_noise_and_stops_at_done():
    lines = [
        b": keep-alive\n",
        b"\n",
        sse("Hel"),
        b"event: ping\n",
        b"data: not json\n",
        sse("lo"),
        b"data: {\"choices\": [{\"delta\": {}}]}\n",
        b"data: [DONE]\n",
        sse("ignored"),
    ]
    assert list(iter_sse_deltas(lines)) == ["Hel", "lo"]


def test_iter_sse_deltas_accepts_str_lines():
    lines = ['data: {"choices": [{"delta": {"content": "x"}}]}', "data:[DONE]"]
    assert list(iter_sse_deltas(lines)) == ["x"]


def test_stream_response_renders_lines(fixed_width):
    output = []
    lines = [sse("# Ti"), sse("tle\nplain "), sse("text"), b"data: [DONE]\n"]
    raw = stream_response(lines, create_renderer(width_provider=fixed_width), output.append)

    assert raw == "# Title\nplain text"
    assert output[0] == "\x1b[1m\x1b[97mTitle\x1b[0m\n\x1b[2m─────\x1b[0m\n"
    assert output[1] == "plain text"


def test_stream_response_without_renderer_passes_deltas():
    output = []
    raw = stream_response([sse("**a**"), sse("\nb")], None, output.append)
    assert raw == "**a**\nb"
    assert output == ["**a**", "\nb"]


def test_stream_response_flushes_on_interrupt():
    output = []

    def interrupted():
        yield sse("partial line")
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        stream_response(interrupted(), create_renderer(), output.append)
    assert output == ["partial line"]


def test_stream_log_file(tmp_path, monkeypatch):
    log_file = tmp_path / "stream.log"
    monkeypatch.setattr(gac.config, "STREAM_LOG_FILE", str(log_file))
    list(iter_sse_deltas([sse("x"), b"data: [DONE]\n"]))
    logged = log_file.read_text(encoding="utf-8").splitlines()
    assert logged[-1] == "data: [DONE]"
    assert logged[0].startswith("data: ")
