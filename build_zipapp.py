#!/usr/bin/env python3
"""
Script to build a zipapp version of gac for easy distribution.

The archive starts with a python3 shebang so it can be run directly
(./gac.pyz models). An optional argument names the output file; by default
it is gac.pyz, and gac-<version>.pyz with --versioned.
"""

import os
import re
import shutil
import sys
import zipfile

SHEBANG = b"#!/usr/bin/env python3\n"
SKIPPED_DIRS = ("__pycache__", "tests")


def read_version(package_dir="gac"):
    """Read __version__ without importing the package."""
    with open(os.path.join(package_dir, "__init__.py"), "r", encoding="utf-8") as f:
        match = re.search(r'^__version__ = "([^"]+)"', f.read(), re.MULTILINE)
    return match.group(1) if match else "0"


def build_zipapp(output=None, versioned=False):
    """Build a zipapp version of gac and return its path."""
    if output is None:
        output = f"gac-{read_version()}.pyz" if versioned else "gac.pyz"

    if os.path.exists("build"):
        shutil.rmtree("build")
    os.makedirs("build")

    shutil.copytree("gac", "build/gac", ignore=shutil.ignore_patterns(*SKIPPED_DIRS, "*.pyc"))
    # gac.py imports gac.app, which the archive root provides
    shutil.copy("gac.py", "build/__main__.py")

    with open(output, "wb") as f:
        f.write(SHEBANG)
        with zipfile.ZipFile(f, "w", zipfile.ZIP_DEFLATED) as zf:
            for root, dirs, files in os.walk("build"):
                dirs.sort()
                for file in sorted(files):
                    file_path = os.path.join(root, file)
                    zf.write(file_path, os.path.relpath(file_path, "build"))

    shutil.rmtree("build")
    os.chmod(output, 0o755)

    print(f"Zipapp created: {output}")
    print(f"Run with: ./{output} or python {output}")
    return output


if __name__ == "__main__":
    args = sys.argv[1:]
    versioned = "--versioned" in args
    names = [arg for arg in args if arg != "--versioned"]
    build_zipapp(names[0] if names else None, versioned)
