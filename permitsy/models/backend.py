"""Client for the hosted backend's REST and RPC surface."""

from typing import TYPE_CHECKING, Any, Dict, Optional

import httpx
from loguru import logger
from postgrest import (
    DEFAULT_POSTGREST_CLIENT_HEADERS,
    APIError,
    AsyncPostgrestClient,
    ReturnMethod,
)

from permitsy.constants import ErrorCodes
from permitsy.core.exceptions import (
    BackendConnectionError,
    BackendError,
    BackendNotConnectedError,
)
from permitsy.models.query import Filter, Query, QueryBuilder

if TYPE_CHECKING:
    from permitsy.core.settings import PermitsySettings

APPLICATION_NAME = "permitsy"
REST_PATH = "/rest/v1"


class BackendClient:
    """
    Single configured handle to the backend.

    Wraps one ``AsyncPostgrestClient``. It is constructed at startup, passed
    by reference to repositories and services, and closed on shutdown.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        schema: str = "public",
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize backend client.

        Args:
            base_url: Backend base URL (https://<project>.example.co)
            api_key: Public API key sent as apikey and bearer token
            schema: Exposed database schema
            timeout: Total request timeout in seconds
            http_client: Preconfigured httpx client (a new one is created on
                connect when omitted)
        """
        if not base_url:
            raise ValueError("base_url is required")
        if not api_key:
            raise ValueError("api_key is required")

        self.base_url = base_url.rstrip("/")
        self.schema = schema
        self.timeout = timeout
        self._api_key = api_key
        self._http_client = http_client
        self._postgrest: Optional[AsyncPostgrestClient] = None

    @classmethod
    def from_settings(cls, settings: "PermitsySettings") -> "BackendClient":
        """
        Build a client from application settings.

        Args:
            settings: Loaded settings

        Returns:
            Unconnected BackendClient
        """
        return cls(
            base_url=settings.backend_url,
            api_key=settings.backend_anon_key.get_secret_value(),
            schema=settings.backend_schema,
            timeout=settings.request_timeout,
        )

    async def __aenter__(self) -> "BackendClient":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    @property
    def rest_url(self) -> str:
        """Base URL of the REST gateway."""
        return f"{self.base_url}{REST_PATH}"

    @property
    def is_connected(self) -> bool:
        """Whether the PostgREST client is open."""
        return self._postgrest is not None

    async def connect(self) -> None:
        """Open the PostgREST client and its HTTP connection pool."""
        if self.is_connected:
            return

        headers = {
            **DEFAULT_POSTGREST_CLIENT_HEADERS,
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
            "x-application-name": APPLICATION_NAME,
        }
        http_client = self._http_client or httpx.AsyncClient(
            timeout=self.timeout, follow_redirects=True
        )
        self._postgrest = AsyncPostgrestClient(
            self.rest_url,
            schema=self.schema,
            headers=headers,
            http_client=http_client,
        )
        logger.info(f"Backend client connected to {self.base_url} (schema={self.schema})")

    async def close(self) -> None:
        """Close the PostgREST client."""
        if self._postgrest is not None:
            await self._postgrest.aclose()
            self._postgrest = None
            self._http_client = None
            logger.info("Backend client closed")

    @property
    def postgrest(self) -> AsyncPostgrestClient:
        """Get the PostgREST client, raising error if not connected."""
        if self._postgrest is None:
            raise BackendNotConnectedError()
        return self._postgrest

    def table(self, name: str) -> QueryBuilder:
        """
        Start a query against a table.

        Args:
            name: Table name

        Returns:
            QueryBuilder bound to this client
        """
        return QueryBuilder(self, name)

    async def execute(self, query: Query) -> Any:
        """
        Execute a table query.

        Args:
            query: Query description

        Returns:
            List of rows, one row for single queries, or None for writes
            without representation

        Raises:
            BackendError: If the backend rejects the request
        """
        request = self._build_request(query)
        response = await self._send(request, f"{query.action} {query.table}")
        data = response.data

        if query.action == "select":
            return data if query.single else (data or [])
        if not query.returning:
            return None
        if query.single:
            return _single_row(data)
        return data

    async def rpc(self, name: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Call a named remote procedure.

        Args:
            name: Procedure name
            params: Named arguments

        Returns:
            Decoded procedure result

        Raises:
            BackendError: If the procedure fails or does not exist
        """
        request = self.postgrest.rpc(name, params or {})
        response = await self._send(request, f"rpc {name}")
        return response.data

    def _build_request(self, query: Query) -> Any:
        builder = self.postgrest.from_(query.table)
        returning = ReturnMethod.representation if query.returning else ReturnMethod.minimal

        if query.action == "insert":
            return builder.insert(query.payload, returning=returning)
        if query.action == "upsert":
            return builder.upsert(
                query.payload, returning=returning, on_conflict=query.on_conflict or ""
            )

        if query.action == "select":
            request = builder.select(query.columns)
        elif query.action == "update":
            request = builder.update(query.payload, returning=returning)
        elif query.action == "delete":
            request = builder.delete(returning=returning)
        else:
            raise ValueError(f"Unsupported action: {query.action}")

        for flt in query.filters:
            request = _apply_filter(request, flt)

        if query.action == "select":
            for column, ascending in query.order_by:
                request = request.order(column, desc=not ascending)
            if query.limit is not None:
                request = request.limit(query.limit)
            if query.single:
                request = request.single()
        return request

    async def _send(self, request: Any, label: str) -> Any:
        logger.debug(f"{label} -> {self.rest_url}")
        try:
            return await request.execute()
        except APIError as e:
            error = to_backend_error(e)
            logger.debug(f"{label} failed: {error.code} {error.message}")
            raise error from e
        except httpx.TimeoutException as e:
            raise BackendConnectionError(f"{label} timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise BackendConnectionError(f"{label} failed: {e}") from e


def filter_value(value: Any) -> str:
    """
    Render a filter value the way the REST gateway expects it.

    Args:
        value: Python value

    Returns:
        String form used in query parameters
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _apply_filter(request: Any, flt: Filter) -> Any:
    if flt.operator == "in":
        return request.in_(flt.column, [filter_value(v) for v in flt.value])
    if flt.value is None:
        # NULL never compares equal; PostgREST needs is.null / not.is.null
        if flt.operator == "eq":
            return request.is_(flt.column, None)
        return request.not_.is_(flt.column, None)
    if flt.operator == "eq":
        return request.eq(flt.column, flt.value)
    return request.neq(flt.column, filter_value(flt.value))


def _single_row(data: Any) -> Dict[str, Any]:
    rows = data if isinstance(data, list) else [data]
    if len(rows) != 1:
        raise BackendError(
            "JSON object requested, multiple (or no) rows returned",
            code=ErrorCodes.SINGLE_ROW_NOT_FOUND,
            status=406,
        )
    return rows[0]


def to_backend_error(error: APIError) -> BackendError:
    """
    Convert a postgrest ``APIError`` into a ``BackendError``.

    When the gateway body could not be parsed, postgrest puts the HTTP status
    in ``code``; it is moved to ``status`` so codes stay SQLSTATE-like.

    Args:
        error: Error raised by postgrest

    Returns:
        BackendError carrying code, details and hint
    """
    body = dict(error.json() or {})
    status = None
    if isinstance(body.get("code"), int):
        status = body.pop("code")
    return BackendError.from_response(status, body)
