"""
Global test configuration.
This file is automatically loaded by pytest before any tests run.
It blocks external internet access and keeps the config file out of $HOME.
"""

import os
import socket
import sys
import urllib.request
from urllib.parse import urlparse

import pytest

# Add parent directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

LOCAL_ADDRESSES = ["127.0.0.1", "::1", "localhost", "0.0.0.0"]

_original_urlopen = urllib.request.urlopen
_original_socket_create = socket.create_connection


def _is_local_address(address):
    """Check if address is local."""
    if not address:
        return False
    return any(
        address == local or address.startswith(local + ".") for local in LOCAL_ADDRESSES
    )


def _is_local_url(url):
    """Check if URL points to local address."""
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return False
    return _is_local_address(hostname) if hostname else False


def _blocking_urlopen(*args, **kwargs):
    """Mock urllib.urlopen to block external URLs."""
    url = args[0] if args else None
    if hasattr(url, "get_full_url"):  # urllib.request.Request object
        url = url.get_full_url()
    elif not isinstance(url, str):
        url = str(url)

    if url and not _is_local_url(url):
        raise RuntimeError(
            f"EXTERNAL INTERNET ACCESS BLOCKED in tests!\n"
            f"Attempted URL: {url}\n"
            f"Fix: Use mock responses or a local server"
        )
    return _original_urlopen(*args, **kwargs)


def _blocking_socket_create(*args, **kwargs):
    """Mock socket.create_connection to block external connections."""
    if args and isinstance(args[0], tuple):
        address = args[0][0] if args[0] else None
        if address and not _is_local_address(address):
            raise RuntimeError(
                f"EXTERNAL NETWORK ACCESS BLOCKED in tests!\n"
                f"Attempted connection to: {address}"
            )
    return _original_socket_create(*args, **kwargs)


if os.environ.get("GAC_BLOCK_INTERNET", "1") != "0":
    urllib.request.urlopen = _blocking_urlopen
    socket.create_connection = _blocking_socket_create


@pytest.fixture(autouse=True)
def isolated_config_dir(tmp_path, monkeypatch):
    """Point the persistent config at a per-test directory."""
    import gac.persistent_config

    config_dir = tmp_path / ".gac"
    monkeypatch.setattr(gac.persistent_config, "_resolved_config_dir", config_dir)
    return config_dir


@pytest.fixture
def fixed_width():
    """Width provider pinned to 40 columns so border rules are predictable."""
    return lambda: 40
