# -*- coding: utf-8 -*-

"""
Main entry point for launching the Otzaria Toolkit command line.
"""

import sys

from otzaria_toolkit.cli import main

if __name__ == "__main__":
    sys.exit(main())
