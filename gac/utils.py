"""
Utility functions for gac.
"""

import os
import platform
import shutil
import sys

from . import config


def colorize(msg: str, color: str) -> str:
    """Wrap a message in a color code and a reset."""
    return f"{color}{msg}{config.RESET}"


def wmsg(msg: str, file=None) -> None:
    """Print a yellow message."""
    print(colorize(msg, config.YELLOW), file=file or sys.stderr)


def emsg(msg: str, file=None) -> None:
    """Print a red error message."""
    print(colorize(msg, config.RED), file=file or sys.stderr)


def imsg(msg: str, file=None) -> None:
    """Print a green info message."""
    print(colorize(msg, config.GREEN), file=file)


def dmsg(msg: str, file=None) -> None:
    """Print a debug message (only if DEBUG is enabled)."""
    if config.DEBUG:
        print(colorize(f"DEBUG: {msg}", config.CYAN), file=file or sys.stderr)


def write_stdout(text: str) -> None:
    """Default output sink: write a styled fragment as-is and flush."""
    sys.stdout.write(text)
    sys.stdout.flush()


def get_terminal_width() -> int:
    """Current terminal width in columns."""
    return shutil.get_terminal_size((config.DEFAULT_TERMINAL_WIDTH, 24)).columns


def get_os_version() -> str:
    """Describe the host OS for the system prompt.

    Distribution-style environment variables win over the bare platform name,
    in the same order the shell profiles usually export them.
    """
    system = platform.system().lower()

    if system == "windows":
        for var in ("OS_VERSION", "OS_RELEASE", "OS"):
            if os.environ.get(var):
                return f"win32: {os.environ[var]}"
        return "Windows"

    if system == "darwin":
        for var in ("OS_VERSION", "OS_RELEASE", "OS"):
            if os.environ.get(var):
                return f"darwin: {os.environ[var]}"
        return "macOS"

    if system == "linux":
        for var in ("OS_RELEASE", "OS", "LINUX_DISTRO"):
            if os.environ.get(var):
                return f"linux: {os.environ[var]}"
        return "Linux"

    if system == "freebsd":
        return "FreeBSD"
    if system == "sunos":
        return "SunOS"
    if system == "aix":
        return "AIX"
    return "Unknown OS"
