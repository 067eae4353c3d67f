#!/usr/bin/env python3
"""
gac - GPT4All CLI.
This is a single-file launcher for running from a checkout or a zipapp.
"""

import sys

# This launcher imports from the modular package
try:
    from gac.app import main
except ImportError:
    # If the package isn't installed, try to run from the current directory
    import os

    sys.path.insert(0, os.path.dirname(__file__))
    from gac.app import main

if __name__ == "__main__":
    sys.exit(main())
