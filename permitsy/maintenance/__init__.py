"""One-off maintenance tasks run outside the web application."""

from .check_schema import check_schema
from .seed_legal_pages import LEGAL_PAGES, SeedReport, seed_legal_pages
from .seed_visa_packages import build_seed_package, seed_visa_packages
from .sql_runner import SqlRunReport, run_sql, run_sql_file, split_sql_statements

__all__ = [
    "check_schema",
    "LEGAL_PAGES",
    "SeedReport",
    "seed_legal_pages",
    "build_seed_package",
    "seed_visa_packages",
    "SqlRunReport",
    "run_sql",
    "run_sql_file",
    "split_sql_statements",
]
