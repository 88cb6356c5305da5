"""Seed the four legal pages.

Each page is inserted; a unique violation on ``slug`` turns the insert into an
update, so the script can be re-run without creating duplicates.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from permitsy.constants import Intervals, Tables
from permitsy.core.exceptions import BackendError
from permitsy.models.backend import BackendClient
from permitsy.repositories.base import utc_now

LEGAL_PAGES: List[Dict[str, str]] = [
    {
        "title": "Terms of Service",
        "slug": "terms-of-service",
        "content": (
            "<section><h2>1. Introduction</h2>"
            '<p>Welcome to Permitsy ("Company", "we", "our", "us")! These Terms of Service '
            '("Terms") govern your use of our web pages.</p>'
            "<p>Sample content for Terms of Service. Edit this from the admin panel.</p>"
            "</section>"
        ),
    },
    {
        "title": "Privacy Policy",
        "slug": "privacy-policy",
        "content": (
            "<section><h2>1. Introduction</h2>"
            "<p>At Permitsy, we respect your privacy and are committed to protecting it "
            "through our compliance with this policy.</p>"
            "<p>Sample content for Privacy Policy. Edit this from the admin panel.</p>"
            "</section>"
        ),
    },
    {
        "title": "Cookie Policy",
        "slug": "cookie-policy",
        "content": (
            "<section><h2>1. Introduction</h2>"
            "<p>This Cookie Policy explains how Permitsy uses cookies and similar "
            "technologies.</p>"
            "<p>Sample content for Cookie Policy. Edit this from the admin panel.</p>"
            "</section>"
        ),
    },
    {
        "title": "Refund Policy",
        "slug": "refund-policy",
        "content": (
            "<section><h2>1. Introduction</h2>"
            "<p>At Permitsy, we're committed to ensuring your satisfaction with our visa "
            "application services.</p>"
            "<p>Sample content for Refund Policy. Edit this from the admin panel.</p>"
            "</section>"
        ),
    },
]

MISSING_TABLE_HELP = (
    "The legal_pages table does not exist. Apply the database migrations "
    "(alembic upgrade head) and run this script again."
)


@dataclass
class SeedReport:
    """Per-slug outcome of a seeding run."""

    inserted: List[str] = field(default_factory=list)
    updated: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    aborted: bool = False

    @property
    def success(self) -> bool:
        return not self.aborted and not self.failed

    def to_dict(self) -> Dict[str, Any]:
        """Convert report to dictionary."""
        return {
            "inserted": self.inserted,
            "updated": self.updated,
            "failed": self.failed,
            "aborted": self.aborted,
        }


async def _upsert_page(backend: BackendClient, page: Dict[str, str], report: SeedReport) -> None:
    row = {**page, "last_updated": utc_now()}
    table = Tables.LEGAL_PAGES
    try:
        await backend.table(table).insert(row, returning=False).execute()
        logger.info(f"Inserted {page['title']} ({page['slug']})")
        report.inserted.append(page["slug"])
        return
    except BackendError as e:
        if e.is_missing_table:
            raise
        if not e.is_unique_violation:
            logger.error(f"Error inserting {page['title']}: {e}")
            report.failed.append(page["slug"])
            return

    logger.debug(f"{page['slug']} already exists, updating")
    try:
        await (
            backend.table(table)
            .update(
                {"title": row["title"], "content": row["content"], "last_updated": row["last_updated"]},
                returning=False,
            )
            .eq("slug", page["slug"])
            .execute()
        )
    except BackendError as e:
        logger.error(f"Error updating {page['title']}: {e}")
        report.failed.append(page["slug"])
        return
    logger.info(f"Updated {page['title']} ({page['slug']})")
    report.updated.append(page["slug"])


async def seed_legal_pages(
    backend: BackendClient,
    pages: Optional[Sequence[Dict[str, str]]] = None,
    pause: float = Intervals.SCRIPT_STATEMENT_PAUSE,
) -> SeedReport:
    """
    Insert or refresh the legal pages.

    Args:
        backend: Connected backend client
        pages: Pages to seed (the four default pages when omitted)
        pause: Seconds to wait between pages

    Returns:
        SeedReport listing inserted, updated and failed slugs
    """
    pages = LEGAL_PAGES if pages is None else pages
    report = SeedReport()
    logger.info(f"Seeding {len(pages)} legal pages...")

    for index, page in enumerate(pages):
        try:
            await _upsert_page(backend, page, report)
        except BackendError as e:
            logger.error(f"{MISSING_TABLE_HELP} ({e.message})")
            report.aborted = True
            break
        if pause and index < len(pages) - 1:
            await asyncio.sleep(pause)

    logger.info(
        f"Legal pages seeded: {len(report.inserted)} inserted, "
        f"{len(report.updated)} updated, {len(report.failed)} failed"
    )
    return report
