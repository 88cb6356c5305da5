"""Loguru setup shared by the web server and the maintenance commands."""

import logging
import sys
from pathlib import Path
from types import FrameType
from typing import Optional, Union

from loguru import logger

__all__ = ["InterceptHandler", "setup_structured_logging"]

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"

# Third-party loggers that are too chatty below WARNING
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


class InterceptHandler(logging.Handler):
    """Forward stdlib logging records (httpx, uvicorn, alembic) to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: Union[str, int] = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk out of the logging module so loguru reports the real caller
        frame: Optional[FrameType] = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_structured_logging(
    level: str = "INFO",
    json_format: bool = False,
    logs_dir: Union[str, Path] = "logs",
    diagnose: bool = False,
) -> None:
    """
    Configure loguru sinks and route stdlib logging through them.

    Sinks: colourised console, ``permitsy.log`` (or ``permitsy.jsonl`` with
    ``json_format``) and a daily ``errors_<date>.log`` with backtraces.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: Serialize the main log file as JSON lines
        logs_dir: Directory for log files
        diagnose: Include variable values in error tracebacks (never in production)
    """
    logger.remove()

    logs_path = Path(logs_dir)
    logs_path.mkdir(parents=True, exist_ok=True)

    logger.add(sys.stdout, format=CONSOLE_FORMAT, level=level, colorize=True)

    main_file = logs_path / ("permitsy.jsonl" if json_format else "permitsy.log")
    logger.add(
        main_file,
        format="{message}" if json_format else FILE_FORMAT,
        level=level,
        rotation="10 MB",
        retention="30 days",
        compression="zip",
        serialize=json_format,
    )

    logger.add(
        logs_path / "errors_{time:YYYY-MM-DD}.log",
        format=FILE_FORMAT,
        level="ERROR",
        rotation="10 MB",
        retention="90 days",
        backtrace=True,
        diagnose=diagnose,
    )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logging.root.setLevel(getattr(logging, level))
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, logging.root.level))

    logger.info(f"Logging initialized (level={level}, json={json_format}, dir={logs_path})")
