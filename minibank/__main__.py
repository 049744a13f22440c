#!/usr/bin/env python3
"""Main entry point for the MiniBank console"""

import sys

from minibank.cli import main


if __name__ == "__main__":
    sys.exit(main())
