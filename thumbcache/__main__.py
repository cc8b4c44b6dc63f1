"""
Main entry point for running the package as a module.

Usage:
    python -m thumbcache build --root ./content
    python -m thumbcache run --root ./content --reindex-interval 60
    python -m thumbcache report --metadata-root ./content/.thumbcache
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
