"""
PostgREST table access.

Filters are passed through as ``column -> "op.value"`` query parameters;
operators are not interpreted here.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from teamdash.gateways.base import BaseGateway
from teamdash.gateways.result import Result, Success

Filters = Mapping[str, str]

DEFAULT_ORDER = "created_at.desc"
DEFAULT_LIMIT = 50
ORDER_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]*\.(asc|desc)$"


@dataclass
class QueryOptions:
    order: Optional[str] = DEFAULT_ORDER
    limit: Optional[int] = DEFAULT_LIMIT
    offset: Optional[int] = None

    def as_params(self) -> Dict[str, Any]:
        params = {}
        if self.order is not None:
            params["order"] = self.order
        if self.limit is not None:
            params["limit"] = self.limit
        if self.offset is not None:
            params["offset"] = self.offset
        return params


# Fetch every matching row, as the statistics endpoint needs.
UNBOUNDED = QueryOptions(order=None, limit=None)


def eq(value: Any) -> str:
    return f"eq.{value}"


class TableGateway(BaseGateway):
    def _table_headers(self) -> Dict[str, str]:
        return self._headers(**{
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        })

    def query(self, table: str, filters: Optional[Filters] = None, options: Optional[QueryOptions] = None) -> Result[List[dict]]:
        params = dict(filters or {})
        params.update((options or QueryOptions()).as_params())
        return self._send("GET", table, params=params, headers=self._table_headers())

    def insert(self, table: str, record: Dict[str, Any]) -> Result[dict]:
        result = self._send("POST", table, json=record, headers=self._table_headers())
        if isinstance(result, Success) and isinstance(result.payload, list):
            # return=representation answers with a one-element array
            return Success(result.payload[0] if result.payload else None)
        return result

    def update(self, table: str, filters: Filters, record: Dict[str, Any]) -> Result[List[dict]]:
        return self._send("PATCH", table, params=dict(filters), json=record, headers=self._table_headers())

    def remove(self, table: str, filters: Filters) -> Result[List[dict]]:
        return self._send("DELETE", table, params=dict(filters), headers=self._table_headers())
