#!/usr/bin/env python3
"""Check that the backend exposes the expected tables and columns."""

import sys

from permitsy.maintenance.cli import check_schema_main

if __name__ == "__main__":
    sys.exit(check_schema_main())
