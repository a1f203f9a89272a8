from typing import Optional

from fastapi import APIRouter, Depends, Query

from teamdash.core.exceptions import NotFoundError
from teamdash.core.schemas import ApiResponse
from teamdash.dependencies import get_table_gateway
from teamdash.gateways import QueryOptions, TableGateway, unwrap
from teamdash.gateways.tables import DEFAULT_LIMIT, DEFAULT_ORDER, ORDER_PATTERN, eq

router = APIRouter(prefix="/teams", tags=["teams"])


@router.get("")
def list_teams(
    manager_id: Optional[str] = None,
    order: str = Query(DEFAULT_ORDER, pattern=ORDER_PATTERN),
    limit: int = Query(DEFAULT_LIMIT, ge=1),
    tables: TableGateway = Depends(get_table_gateway),
):
    """Teams, optionally only those run by ``manager_id``."""
    filters = {"manager_id": eq(manager_id)} if manager_id else {}
    result = tables.query("teams", filters, QueryOptions(order=order, limit=limit))
    return ApiResponse.ok(unwrap(result, "Failed to fetch teams")).to_response()


@router.get("/{team_id}")
def get_team(team_id: str, tables: TableGateway = Depends(get_table_gateway)):
    rows = unwrap(tables.query("teams", {"id": eq(team_id)}), "Team not found", status_code=404)
    if not rows:
        raise NotFoundError("Team not found")
    return ApiResponse.ok(rows[0]).to_response()


@router.get("/{team_id}/members")
def list_team_members(
    team_id: str,
    limit: int = Query(DEFAULT_LIMIT, ge=1),
    tables: TableGateway = Depends(get_table_gateway),
):
    result = tables.query(
        "team_members",
        {"team_id": eq(team_id)},
        QueryOptions(order="joined_at.desc", limit=limit),
    )
    return ApiResponse.ok(unwrap(result, "Failed to fetch team members")).to_response()
