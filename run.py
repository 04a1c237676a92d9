#!/usr/bin/env python3
"""
Status Light Launcher

Runs an effect, a solid color or a single channel write on the indicator LED.

    python run.py --list
    python run.py --effect notification --duration 5
    python run.py --effect party --simulation --log-level DEBUG
    python run.py --color 255 128 0
"""

import sys

from statuslight.controller.main import main

if __name__ == "__main__":
    sys.exit(main())
