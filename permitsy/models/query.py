"""Table query description built fluently by repositories."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple

if TYPE_CHECKING:
    from permitsy.models.backend import BackendClient

ACTIONS = frozenset({"select", "insert", "upsert", "update", "delete"})
OPERATORS = frozenset({"eq", "neq", "in"})


@dataclass
class Filter:
    """Single column filter."""

    column: str
    operator: str
    value: Any

    def __post_init__(self) -> None:
        if self.operator not in OPERATORS:
            raise ValueError(f"Unsupported operator: {self.operator}")


@dataclass
class Query:
    """
    Description of one table request.

    The client turns it into a PostgREST request; the in-memory test backend
    evaluates it directly against dict rows.
    """

    table: str
    action: str = "select"
    columns: str = "*"
    filters: List[Filter] = field(default_factory=list)
    order_by: List[Tuple[str, bool]] = field(default_factory=list)
    limit: Optional[int] = None
    single: bool = False
    payload: Any = None
    on_conflict: Optional[str] = None
    returning: bool = True


class QueryBuilder:
    """Fluent builder bound to a backend client.

    Example:
        ```python
        page = await (
            backend.table("legal_pages").select("*").eq("slug", "privacy-policy").single().execute()
        )
        ```
    """

    def __init__(self, client: "BackendClient", table: str):
        self._client = client
        self.query = Query(table=table)

    # Verbs
    def select(self, columns: str = "*") -> "QueryBuilder":
        self.query.action = "select"
        self.query.columns = columns
        return self

    def insert(self, rows: Any, returning: bool = True) -> "QueryBuilder":
        self.query.action = "insert"
        self.query.payload = rows
        self.query.returning = returning
        return self

    def upsert(self, rows: Any, on_conflict: Optional[str] = None) -> "QueryBuilder":
        self.query.action = "upsert"
        self.query.payload = rows
        self.query.on_conflict = on_conflict
        return self

    def update(self, values: Dict[str, Any], returning: bool = True) -> "QueryBuilder":
        self.query.action = "update"
        self.query.payload = values
        self.query.returning = returning
        return self

    def delete(self, returning: bool = False) -> "QueryBuilder":
        self.query.action = "delete"
        self.query.returning = returning
        return self

    # Modifiers
    def eq(self, column: str, value: Any) -> "QueryBuilder":
        self.query.filters.append(Filter(column, "eq", value))
        return self

    def neq(self, column: str, value: Any) -> "QueryBuilder":
        self.query.filters.append(Filter(column, "neq", value))
        return self

    def in_(self, column: str, values: Sequence[Any]) -> "QueryBuilder":
        self.query.filters.append(Filter(column, "in", list(values)))
        return self

    def order(self, column: str, ascending: bool = True) -> "QueryBuilder":
        self.query.order_by.append((column, ascending))
        return self

    def limit(self, count: int) -> "QueryBuilder":
        self.query.limit = count
        return self

    def single(self) -> "QueryBuilder":
        self.query.single = True
        return self

    async def execute(self) -> Any:
        """
        Send the query to the backend.

        Returns:
            List of rows, a single row dict for single(), or None for
            writes without representation

        Raises:
            BackendError: If the backend rejects the request
        """
        return await self._client.execute(self.query)
