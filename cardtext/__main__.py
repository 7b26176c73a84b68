"""Main entry point for cardtext package.

This module allows the package to be executed as:
    python -m cardtext [args...]
"""

from .cli import main

if __name__ == "__main__":
    main()
