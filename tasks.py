#!/usr/bin/env python3
"""Run taskctl from a source checkout: `python tasks.py list`."""

import sys

from core.desktop.devtools.interface.tasks_app import main

if __name__ == "__main__":
    sys.exit(main())
