"""Command line entry points for the maintenance scripts.

Every command reads the same settings as the application, opens one backend
client, runs its task and exits 0 on completion or 1 on failure.
"""

import asyncio
import sys
from typing import Awaitable, Callable, List, Optional

from loguru import logger
from pydantic import ValidationError as SettingsValidationError

from permitsy.core.exceptions import PermitsyError
from permitsy.core.logger import setup_structured_logging
from permitsy.core.settings import PermitsySettings, get_settings
from permitsy.maintenance.check_schema import check_schema
from permitsy.maintenance.seed_legal_pages import seed_legal_pages
from permitsy.maintenance.seed_visa_packages import seed_visa_packages
from permitsy.maintenance.sql_runner import run_sql_file
from permitsy.models.backend import BackendClient

Task = Callable[[BackendClient, PermitsySettings], Awaitable[bool]]


def run_task(name: str, task: Task) -> int:
    """
    Load settings, run a maintenance task and map the outcome to an exit code.

    Args:
        name: Task name used in log lines
        task: Coroutine function receiving the client and settings

    Returns:
        Process exit code
    """
    try:
        settings = get_settings()
    except SettingsValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_structured_logging(
        settings.log_level,
        settings.log_json,
        settings.log_dir,
        diagnose=settings.is_development(),
    )
    logger.info(f"Running {name} against {settings.backend_url} (key {settings.masked_key()})")

    async def runner() -> bool:
        async with BackendClient.from_settings(settings) as backend:
            return await task(backend, settings)

    try:
        ok = asyncio.run(runner())
    except PermitsyError as e:
        logger.error(f"{name} failed: {e.message}")
        return 1

    if ok:
        logger.info(f"{name} completed")
        return 0
    logger.error(f"{name} finished with errors")
    return 1


async def _seed_legal_pages(backend: BackendClient, settings: PermitsySettings) -> bool:
    report = await seed_legal_pages(backend, pause=settings.script_statement_pause)
    return report.success


async def _seed_visa_packages(backend: BackendClient, settings: PermitsySettings) -> bool:
    return bool(await seed_visa_packages(backend))


async def _check_schema(backend: BackendClient, settings: PermitsySettings) -> bool:
    return await check_schema(backend)


def seed_legal_pages_main() -> int:
    """Seed the legal pages."""
    return run_task("seed-legal-pages", _seed_legal_pages)


def seed_visa_packages_main() -> int:
    """Seed one visa package per country."""
    return run_task("seed-visa-packages", _seed_visa_packages)


def check_schema_main() -> int:
    """Validate the backend schema."""
    return run_task("check-schema", _check_schema)


def run_sql_main(argv: Optional[List[str]] = None) -> int:
    """Run a SQL file given as the only argument."""
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: permitsy-run-sql <file.sql>", file=sys.stderr)
        return 2
    path = args[0]

    async def task(backend: BackendClient, settings: PermitsySettings) -> bool:
        try:
            report = await run_sql_file(backend, path, pause=settings.script_statement_pause)
        except OSError as e:
            logger.error(f"Error reading SQL file {path}: {e}")
            return False
        return report.success

    return run_task("run-sql", task)
