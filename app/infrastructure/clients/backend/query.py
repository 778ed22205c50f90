"""Fluent builder for backend table queries.

Renders filters, ordering and paging as PostgREST query parameters. A list
of tuples is produced rather than a dict because the same column can carry
more than one filter (``gte`` and ``lte`` on a timestamp, for instance).
"""

from typing import Any, Iterable, List, Optional, Tuple


def format_value(value: Any) -> str:
    """Render a Python value the way the query layer expects it."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def quote_value(value: str) -> str:
    """Double-quote a value for a logical filter such as ``or``.

    Commas, dots, colons and parentheses are reserved inside the expression;
    quoting makes them literal. Embedded quotes and backslashes are escaped.
    """
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class TableQuery:
    """Filters, ordering and paging for a single table read or write.

    Example:
        ```python
        query = (
            TableQuery()
            .select("*, monitors(name, monitor_type)")
            .eq("status", "open")
            .order("created_at", ascending=False)
            .limit(50)
        )
        backend.select("incidents", query)
        ```
    """

    def __init__(self) -> None:
        self._columns = "*"
        self._filters: List[Tuple[str, str]] = []
        self._order: List[str] = []
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None

    @property
    def has_filters(self) -> bool:
        return bool(self._filters)

    def select(self, columns: str) -> "TableQuery":
        self._columns = columns
        return self

    def _filter(self, column: str, operator: str, value: Any) -> "TableQuery":
        self._filters.append((column, f"{operator}.{format_value(value)}"))
        return self

    def eq(self, column: str, value: Any) -> "TableQuery":
        if value is None:
            return self._filter(column, "is", None)
        return self._filter(column, "eq", value)

    def neq(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "neq", value)

    def gte(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "gte", value)

    def lte(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "lte", value)

    def ilike(self, column: str, pattern: str) -> "TableQuery":
        """Case-insensitive match; ``%`` is the wildcard."""
        return self._filter(column, "ilike", pattern)

    def in_(self, column: str, values: Iterable[Any]) -> "TableQuery":
        rendered = ",".join(format_value(value) for value in values)
        self._filters.append((column, f"in.({rendered})"))
        return self

    def or_(self, expression: str) -> "TableQuery":
        """Raw disjunction, e.g. ``name.ilike.%foo%,sku.ilike.%foo%``."""
        self._filters.append(("or", f"({expression})"))
        return self

    def order(self, column: str, ascending: bool = True) -> "TableQuery":
        self._order.append(f"{column}.{'asc' if ascending else 'desc'}")
        return self

    def limit(self, count: int) -> "TableQuery":
        self._limit = count
        return self

    def offset(self, count: int) -> "TableQuery":
        self._offset = count
        return self

    def params(self, include_select: bool = True) -> List[Tuple[str, str]]:
        """Render the query as request parameters.

        Args:
            include_select: Mutations (update/delete) have no column list.
        """
        rendered: List[Tuple[str, str]] = []
        if include_select:
            rendered.append(("select", self._columns))
        rendered.extend(self._filters)
        if self._order:
            rendered.append(("order", ",".join(self._order)))
        if self._limit is not None:
            rendered.append(("limit", str(self._limit)))
        if self._offset is not None:
            rendered.append(("offset", str(self._offset)))
        return rendered
