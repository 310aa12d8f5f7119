"""Entry-point for ``python -m overtime_index``."""

from __future__ import annotations

import sys

from overtime_index.cli import main

if __name__ == "__main__":
    sys.exit(main())
