"""CLI entry point for ``python -m buildifchanged``.

Example:
    python -m buildifchanged
    python -m buildifchanged -f path/to/buildconfig --dry-run
"""

import sys

from .runner import main

if __name__ == '__main__':
    sys.exit(main())
