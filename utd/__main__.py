"""Entry point for utd when run as a module.

This allows the package to be run with: python -m utd
"""

import sys

from utd.cli import main

if __name__ == "__main__":
    sys.exit(main())
