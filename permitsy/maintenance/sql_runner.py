"""Run SQL repair files through the backend's exec_sql procedure."""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

from loguru import logger

from permitsy.constants import Intervals, Rpc
from permitsy.core.exceptions import BackendError
from permitsy.models.backend import BackendClient


@dataclass
class SqlRunReport:
    """Outcome of running a SQL file."""

    whole_file: bool = False
    executed: int = 0
    failed: List[int] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.whole_file or not self.failed


def split_sql_statements(sql: str) -> List[str]:
    """
    Split a script into statements on top-level semicolons.

    Semicolons inside single-quoted strings, double-quoted identifiers,
    dollar-quoted bodies and ``--`` comments do not end a statement.

    Args:
        sql: SQL script

    Returns:
        Non-empty statements without their trailing semicolon
    """
    statements: List[str] = []
    current: List[str] = []
    i = 0
    length = len(sql)
    quote = ""
    dollar_tag = ""

    while i < length:
        char = sql[i]

        if dollar_tag:
            if sql.startswith(dollar_tag, i):
                current.append(dollar_tag)
                i += len(dollar_tag)
                dollar_tag = ""
                continue
        elif quote:
            if char == quote:
                quote = ""
        elif char in ("'", '"'):
            quote = char
        elif char == "-" and sql.startswith("--", i):
            end = sql.find("\n", i)
            end = length if end == -1 else end
            current.append(sql[i:end])
            i = end
            continue
        elif char == "$":
            end = sql.find("$", i + 1)
            tag = sql[i : end + 1] if end != -1 else ""
            if tag and (tag == "$$" or tag[1:-1].replace("_", "").isalnum()):
                dollar_tag = tag
                current.append(tag)
                i = end + 1
                continue
        elif char == ";":
            statement = "".join(current).strip()
            if statement:
                statements.append(statement)
            current = []
            i += 1
            continue

        current.append(char)
        i += 1

    statement = "".join(current).strip()
    if statement:
        statements.append(statement)
    return statements


async def run_sql(
    backend: BackendClient, sql: str, pause: float = Intervals.SCRIPT_STATEMENT_PAUSE
) -> SqlRunReport:
    """
    Execute a script, statement by statement if the whole script is rejected.

    Every statement's outcome is logged and the run continues past failures.

    Args:
        backend: Connected backend client
        sql: SQL script
        pause: Seconds to wait between statements

    Returns:
        SqlRunReport
    """
    report = SqlRunReport()
    try:
        await backend.rpc(Rpc.EXEC_SQL, {"sql": sql})
        report.whole_file = True
        logger.info("SQL executed successfully")
        return report
    except BackendError as e:
        logger.warning(f"SQL execution error, running statements one by one: {e}")

    statements = split_sql_statements(sql)
    for index, statement in enumerate(statements, start=1):
        logger.info(f"Executing statement {index}/{len(statements)}...")
        try:
            await backend.rpc(Rpc.EXEC_SQL, {"sql": f"{statement};"})
            report.executed += 1
            logger.info(f"Statement {index} executed successfully")
        except BackendError as e:
            report.failed.append(index)
            logger.warning(f"Statement {index} error: {e}")
        if pause:
            await asyncio.sleep(pause)

    logger.info(
        f"SQL run finished: {report.executed} executed, {len(report.failed)} failed"
    )
    return report


async def run_sql_file(
    backend: BackendClient,
    path: Union[str, Path],
    pause: float = Intervals.SCRIPT_STATEMENT_PAUSE,
) -> SqlRunReport:
    """
    Execute a SQL file.

    Args:
        backend: Connected backend client
        path: SQL file path
        pause: Seconds to wait between statements

    Returns:
        SqlRunReport

    Raises:
        OSError: If the file cannot be read
    """
    sql = Path(path).read_text(encoding="utf-8")
    logger.info(f"Loaded SQL commands from {path}")
    return await run_sql(backend, sql, pause)
