#!/usr/bin/env python3
"""Main entry point for the Minibank shell"""

import sys

from minibank.shell import main

if __name__ == "__main__":
    sys.exit(main())
