#!/usr/bin/env python3
"""Seed the four legal pages into the backend."""

import sys

from permitsy.maintenance.cli import seed_legal_pages_main

if __name__ == "__main__":
    sys.exit(seed_legal_pages_main())
