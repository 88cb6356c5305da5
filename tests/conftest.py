"""Pytest configuration and common fixtures."""

import copy
import os
import sys
import uuid
import warnings
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from dotenv import load_dotenv

# Try to load test-specific environment file if it exists
test_env_file = Path(__file__).parent / ".env.test"
if test_env_file.exists():
    load_dotenv(test_env_file)

# Bootstrap variables for module-level settings access.
# Actual test isolation is provided by the setup_test_environment fixture.
os.environ.setdefault("BACKEND_URL", "https://backend.test")
os.environ.setdefault("BACKEND_ANON_KEY", "test-anon-key")
os.environ.setdefault("ENV", "testing")

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from permitsy.constants import ErrorCodes, Tables
from permitsy.core.exceptions import BackendError
from permitsy.models.backend import BackendClient
from permitsy.models.query import Filter, Query

_EPOCH = datetime(2026, 1, 1, tzinfo=timezone.utc)


def pytest_configure(config):
    """Configure pytest environment before tests run."""
    warnings.filterwarnings("ignore", message="coroutine.*was never awaited")


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch, tmp_path):
    """Automatically set up test environment for all tests."""
    monkeypatch.setenv("BACKEND_URL", "https://backend.test")
    monkeypatch.setenv("BACKEND_ANON_KEY", "test-anon-key")
    monkeypatch.setenv("ENV", "testing")
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("SCHEMA_AUTO_REPAIR", raising=False)
    monkeypatch.delenv("VALIDATE_SCHEMA_ON_STARTUP", raising=False)

    # Reset settings singleton so each test gets fresh settings
    from permitsy.core.settings import reset_settings

    reset_settings()
    yield
    reset_settings()


def backend_error(code: str, message: str, status: int = 400) -> BackendError:
    """Build a BackendError shaped like a gateway error response."""
    return BackendError.from_response(
        status, {"code": code, "message": message, "details": None, "hint": None}
    )


class FakeBackend(BackendClient):
    """
    In-memory stand-in for the hosted backend.

    Executes queries built by the real QueryBuilder against dict rows and
    raises the same error codes the gateway returns: unique and foreign key
    violations, missing tables/columns and single-row mismatches.
    """

    def __init__(self):
        super().__init__("https://backend.test", "test-anon-key")
        self.tables: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        self.unique: Dict[str, List[str]] = {
            Tables.LEGAL_PAGES: ["slug"],
            Tables.VISA_PACKAGES: ["country_id"],
        }
        self.foreign_keys: Dict[str, Dict[str, str]] = {
            Tables.VISA_PACKAGES: {"country_id": Tables.COUNTRIES},
            Tables.DOCUMENT_CHECKLIST: {"country_id": Tables.COUNTRIES},
        }
        self.missing_tables: Set[str] = set()
        self.missing_columns: Dict[str, Set[str]] = defaultdict(set)
        self.failures: Dict[Tuple[str, str], BackendError] = {}
        self.rpc_handlers: Dict[str, Callable[[Dict[str, Any]], Any]] = {}
        self.queries: List[Query] = []
        self.rpc_calls: List[Tuple[str, Dict[str, Any]]] = []
        self.connected = False
        self._tick = 0

    # Connection lifecycle without HTTP

    async def connect(self) -> None:
        self.connected = True

    async def close(self) -> None:
        self.connected = False

    # Test helpers

    def _timestamp(self) -> str:
        self._tick += 1
        return (_EPOCH + timedelta(seconds=self._tick)).isoformat()

    def seed(self, table: str, *rows: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Store rows directly, assigning ids and created_at."""
        stored = []
        for row in rows:
            record = dict(row)
            record.setdefault("id", str(uuid.uuid4()))
            record.setdefault("created_at", self._timestamp())
            self.tables[table].append(record)
            stored.append(copy.deepcopy(record))
        return stored

    def fail(self, table: str, action: str, error: BackendError) -> None:
        """Make every ``action`` on ``table`` raise ``error``."""
        self.failures[(table, action)] = error

    def queries_for(self, table: str, action: Optional[str] = None) -> List[Query]:
        return [
            q for q in self.queries if q.table == table and (action is None or q.action == action)
        ]

    def rpc_names(self) -> List[str]:
        return [name for name, _ in self.rpc_calls]

    # Backend surface

    async def rpc(self, name: str, params: Optional[Dict[str, Any]] = None) -> Any:
        params = params or {}
        self.rpc_calls.append((name, params))
        handler = self.rpc_handlers.get(name)
        if handler is None:
            raise backend_error(
                "PGRST202",
                f"Could not find the function public.{name} in the schema cache",
                status=404,
            )
        return handler(params)

    async def execute(self, query: Query) -> Any:
        self.queries.append(query)
        if (query.table, query.action) in self.failures:
            raise self.failures[(query.table, query.action)]
        if query.table in self.missing_tables:
            raise backend_error(
                ErrorCodes.UNDEFINED_TABLE,
                f'relation "public.{query.table}" does not exist',
                status=404,
            )
        self._check_columns(query)

        handler = getattr(self, f"_{query.action}")
        return handler(query)

    # Query evaluation

    def _check_columns(self, query: Query) -> None:
        missing = self.missing_columns.get(query.table) or set()
        if not missing:
            return
        if query.action == "select":
            for column in _plain_columns(query.columns):
                if column in missing:
                    raise backend_error(
                        ErrorCodes.UNDEFINED_COLUMN,
                        f"column {query.table}.{column} does not exist",
                    )
            return
        payload = query.payload if isinstance(query.payload, list) else [query.payload or {}]
        for row in payload:
            for column in row:
                if column in missing:
                    raise backend_error(
                        ErrorCodes.SCHEMA_CACHE_COLUMN,
                        f"Could not find the '{column}' column of '{query.table}' "
                        "in the schema cache",
                    )

    def _matching(self, query: Query) -> List[Dict[str, Any]]:
        rows = self.tables[query.table]
        return [row for row in rows if all(_filter_matches(f, row) for f in query.filters)]

    def _shape(self, query: Query, rows: List[Dict[str, Any]]) -> Any:
        rows = [self._project(query, row) for row in rows]
        if query.single:
            if len(rows) != 1:
                raise backend_error(
                    ErrorCodes.SINGLE_ROW_NOT_FOUND,
                    "JSON object requested, multiple (or no) rows returned",
                    status=406,
                )
            return rows[0]
        return rows

    def _project(self, query: Query, row: Dict[str, Any]) -> Dict[str, Any]:
        columns = _plain_columns(query.columns)
        if not columns or "*" in columns:
            return copy.deepcopy(row)
        return {column: copy.deepcopy(row.get(column)) for column in columns}

    def _select(self, query: Query) -> Any:
        rows = self._matching(query)
        for column, ascending in reversed(query.order_by):
            rows = sorted(
                rows,
                key=lambda r: (r.get(column) is None, r.get(column)),
                reverse=not ascending,
            )
        if query.limit is not None:
            rows = rows[: query.limit]
        return self._shape(query, rows)

    def _validate_row(self, table: str, row: Dict[str, Any], ignore: Optional[Dict] = None) -> None:
        for column, target in self.foreign_keys.get(table, {}).items():
            value = row.get(column)
            if value is None:
                continue
            if not any(r.get("id") == value for r in self.tables[target]):
                raise backend_error(
                    ErrorCodes.FOREIGN_KEY_VIOLATION,
                    f'insert or update on table "{table}" violates foreign key constraint '
                    f'"{table}_{column}_fkey"',
                    status=409,
                )
        for column in self.unique.get(table, []):
            value = row.get(column)
            if value is None:
                continue
            for existing in self.tables[table]:
                if existing is not ignore and existing.get(column) == value:
                    raise backend_error(
                        ErrorCodes.UNIQUE_VIOLATION,
                        f'duplicate key value violates unique constraint "{table}_{column}_key"',
                        status=409,
                    )

    def _new_row(self, table: str, data: Dict[str, Any]) -> Dict[str, Any]:
        row = dict(data)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", self._timestamp())
        self._validate_row(table, row)
        return row

    def _insert(self, query: Query) -> Any:
        payload = query.payload if isinstance(query.payload, list) else [query.payload]
        created = []
        for data in payload:
            row = self._new_row(query.table, data)
            self.tables[query.table].append(row)
            created.append(row)
        if not query.returning:
            return None
        return self._shape(query, created)

    def _upsert(self, query: Query) -> Any:
        payload = query.payload if isinstance(query.payload, list) else [query.payload]
        conflict = query.on_conflict or "id"
        stored = []
        for data in payload:
            existing = next(
                (
                    row
                    for row in self.tables[query.table]
                    if data.get(conflict) is not None and row.get(conflict) == data.get(conflict)
                ),
                None,
            )
            if existing is not None:
                existing.update(data)
                stored.append(existing)
            else:
                row = self._new_row(query.table, data)
                self.tables[query.table].append(row)
                stored.append(row)
        if not query.returning:
            return None
        return self._shape(query, stored)

    def _update(self, query: Query) -> Any:
        rows = self._matching(query)
        for row in rows:
            candidate = {**row, **query.payload}
            self._validate_row(query.table, candidate, ignore=row)
        for row in rows:
            row.update(query.payload)
        if not query.returning:
            return None
        return self._shape(query, rows)

    def _delete(self, query: Query) -> Any:
        rows = self._matching(query)
        self.tables[query.table] = [r for r in self.tables[query.table] if r not in rows]
        if not query.returning:
            return None
        return self._shape(query, rows)


def _filter_matches(flt: Filter, row: Dict[str, Any]) -> bool:
    """Evaluate a query filter against an in-memory row."""
    current = row.get(flt.column)
    if flt.operator == "eq":
        return current == flt.value
    if flt.operator == "neq":
        return current != flt.value
    return current in flt.value


def _plain_columns(columns: str) -> List[str]:
    """Column names of a select list, without embedded relations."""
    names = []
    depth = 0
    current = ""
    for char in columns + ",":
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif char == "," and depth == 0:
            name = current.strip()
            if name and "(" not in name:
                names.append(name)
            current = ""
            continue
        current += char
    return names


@pytest.fixture
def backend():
    """Empty in-memory backend."""
    return FakeBackend()


@pytest.fixture
def country(backend):
    """One stored country."""
    return backend.seed(Tables.COUNTRIES, {"name": "France", "flag": "fr.png", "popularity": 10})[0]
