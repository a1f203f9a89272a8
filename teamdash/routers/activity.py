from typing import Optional

from fastapi import APIRouter, Depends, Query

from teamdash.core.schemas import ApiResponse
from teamdash.dependencies import get_table_gateway
from teamdash.gateways import QueryOptions, TableGateway, unwrap
from teamdash.gateways.tables import DEFAULT_LIMIT, DEFAULT_ORDER, ORDER_PATTERN, eq
from teamdash.services.activity import ACTIVITY_TABLE

router = APIRouter(prefix="/activity", tags=["activity"])


@router.get("")
def list_activity(
    team_id: Optional[str] = None,
    user_id: Optional[str] = None,
    action_type: Optional[str] = None,
    order: str = Query(DEFAULT_ORDER, pattern=ORDER_PATTERN),
    limit: int = Query(DEFAULT_LIMIT, ge=1),
    offset: Optional[int] = Query(None, ge=0),
    tables: TableGateway = Depends(get_table_gateway),
):
    """Recent activity feed for the dashboard."""
    filters = {}
    if team_id:
        filters["team_id"] = eq(team_id)
    if user_id:
        filters["user_id"] = eq(user_id)
    if action_type:
        filters["action_type"] = eq(action_type)

    result = tables.query(ACTIVITY_TABLE, filters, QueryOptions(order=order, limit=limit, offset=offset))
    return ApiResponse.ok(unwrap(result, "Failed to fetch activity")).to_response()
