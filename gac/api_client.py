"""
API Client for gac - talks to an OpenAI-compatible chat-completion endpoint
(GPT4All by default) using urllib.
"""

import json
import socket
import urllib.error
import urllib.request
from typing import Any, Dict, List, Optional

from . import config
from .api.errors import APIErrors
from .markdown_renderer import create_renderer
from .streaming_adapter import get_content_delta, stream_response
from .utils import dmsg, write_stdout


class GPT4AllError(Exception):
    """The server answered with an error status."""


class GPT4AllConnectionError(GPT4AllError):
    """The server could not be reached."""


def normalize_base_url(base_url: str) -> str:
    """Strip a trailing slash and make sure the URL ends in /v1."""
    trimmed = base_url.rstrip("/")
    if trimmed.endswith("/v1"):
        return trimmed
    return f"{trimmed}/v1"


def _read_error_body(error: urllib.error.HTTPError) -> str:
    try:
        return error.read().decode("utf-8", errors="replace")
    except OSError:
        return ""


def _open(url: str, data: Optional[Dict[str, Any]] = None, method: str = "GET"):
    """Open a request; HTTP errors come back as HTTPError, transport errors are wrapped."""
    headers = {"Accept": "application/json, text/event-stream"}
    body = None
    if data is not None:
        body = json.dumps(data).encode("utf-8")
        headers["Content-Type"] = "application/json"

    req = urllib.request.Request(url, data=body, method=method, headers=headers)
    dmsg(f"{method} {url}")
    try:
        return urllib.request.urlopen(req, timeout=config.HTTP_TIMEOUT)
    except urllib.error.HTTPError:
        raise
    except (urllib.error.URLError, OSError) as e:
        reason = getattr(e, "reason", e)
        if isinstance(reason, socket.timeout):
            raise GPT4AllConnectionError(
                APIErrors.format(APIErrors.HTTP_TIMEOUT, timeout=config.HTTP_TIMEOUT)
            ) from e
        raise GPT4AllConnectionError(
            APIErrors.format(APIErrors.CONNECTION_ERROR, url=url, reason=reason)
        ) from e


def _connection_lost(error: OSError) -> GPT4AllConnectionError:
    """Wrap a failure that happened while the response body was being read."""
    if isinstance(error, (socket.timeout, TimeoutError)):
        return GPT4AllConnectionError(
            APIErrors.format(APIErrors.HTTP_TIMEOUT, timeout=config.HTTP_TIMEOUT)
        )
    return GPT4AllConnectionError(APIErrors.format(APIErrors.CONNECTION_DROPPED, reason=error))


def fetch_json(url: str, data: Optional[Dict[str, Any]] = None, method: str = "GET"):
    """Request a URL and decode its JSON body."""
    try:
        with _open(url, data, method) as response:
            return json.loads(response.read().decode("utf-8"))
    except urllib.error.HTTPError as e:
        raise GPT4AllError(
            APIErrors.format(APIErrors.HTTP_ERROR, status=e.code, body=_read_error_body(e))
        ) from e
    except OSError as e:
        raise _connection_lost(e) from e


def list_models(base_url: str) -> List[str]:
    """Ids of the models the server offers."""
    url = f"{normalize_base_url(base_url)}/models"
    payload = fetch_json(url)
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
        return []
    return [model.get("id") for model in payload["data"] if model.get("id")]


def _is_stream_unsupported(status: int, body: str) -> bool:
    return status == 400 and "stream" in body and "not supported" in body


def chat_completion(settings: Dict[str, Any], messages: List[Dict[str, str]], sink=None) -> str:
    """
    Send a chat completion request and return the reply text.

    When streaming is requested the reply is written to ``sink`` as it arrives
    (rendered when ``render_markdown`` is on). Non-streaming callers get the
    reply back unprinted and display it themselves.
    """
    sink = sink or write_stdout
    stream = bool(settings.get("stream"))
    url = f"{normalize_base_url(settings['base_url'])}/chat/completions"
    payload = {
        "model": settings.get("model"),
        "messages": messages,
        "temperature": settings.get("temperature"),
        "max_tokens": settings.get("max_tokens"),
        "stream": stream,
    }

    renderer = None
    if settings.get("render_markdown"):
        renderer = create_renderer(settings.get("markdown_styles"))

    try:
        response = _open(url, payload, method="POST")
    except urllib.error.HTTPError as e:
        body = _read_error_body(e)
        if stream and _is_stream_unsupported(e.code, body):
            dmsg(APIErrors.format(APIErrors.STREAM_NOT_SUPPORTED, status=e.code))
            content = get_content_delta(fetch_json(url, {**payload, "stream": False}, "POST"))
            sink(renderer.render_text(content) if renderer else content)
            return content
        raise GPT4AllError(
            APIErrors.format(APIErrors.HTTP_ERROR, status=e.code, body=body)
        ) from e

    try:
        with response:
            content_type = response.headers.get("Content-Type", "") or ""
            if stream and "text/event-stream" in content_type:
                return stream_response(response, renderer, sink)

            content = get_content_delta(json.loads(response.read().decode("utf-8")))
    except OSError as e:
        # Partial streamed output has already been flushed to the sink
        raise _connection_lost(e) from e

    if stream:
        sink(renderer.render_text(content) if renderer else content)
    return content
