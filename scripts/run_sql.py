#!/usr/bin/env python3
"""Run a SQL file against the backend through the exec_sql procedure.

Usage:
    python scripts/run_sql.py migrations/fix_visa_packages.sql
"""

import sys

from permitsy.maintenance.cli import run_sql_main

if __name__ == "__main__":
    sys.exit(run_sql_main())
