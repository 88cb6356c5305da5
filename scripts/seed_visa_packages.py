#!/usr/bin/env python3
"""Seed one visa package per country."""

import sys

from permitsy.maintenance.cli import seed_visa_packages_main

if __name__ == "__main__":
    sys.exit(seed_visa_packages_main())
