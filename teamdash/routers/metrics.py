import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status

from teamdash.core.exceptions import NotFoundError
from teamdash.core.schemas import ApiResponse
from teamdash.dependencies import get_activity_logger, get_bearer_token, get_table_gateway
from teamdash.gateways import QueryOptions, TableGateway, unwrap
from teamdash.gateways.tables import DEFAULT_LIMIT, DEFAULT_ORDER, ORDER_PATTERN, UNBOUNDED, eq
from teamdash.schemas.metrics import MetricCreate, MetricUpdate
from teamdash.services.activity import ActivityLogger
from teamdash.services.statistics import calculate_statistics

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/metrics", tags=["metrics"])

METRICS_TABLE = "performance_metrics"


@router.get("")
def list_metrics(
    team_id: Optional[str] = None,
    employee_id: Optional[str] = None,
    metric_type: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    order: str = Query(DEFAULT_ORDER, pattern=ORDER_PATTERN),
    limit: int = Query(DEFAULT_LIMIT, ge=1),
    offset: Optional[int] = Query(None, ge=0),
    tables: TableGateway = Depends(get_table_gateway),
):
    filters = {}
    if team_id:
        filters["team_id"] = eq(team_id)
    if employee_id:
        filters["employee_id"] = eq(employee_id)
    if metric_type:
        filters["metric_type"] = eq(metric_type)
    if start_date:
        filters["period_start"] = f"gte.{start_date.isoformat()}"
    if end_date:
        filters["period_end"] = f"lte.{end_date.isoformat()}"

    result = tables.query(METRICS_TABLE, filters, QueryOptions(order=order, limit=limit, offset=offset))
    return ApiResponse.ok(unwrap(result, "Failed to fetch metrics")).to_response()


@router.get("/statistics")
def metric_statistics(
    team_id: Optional[str] = None,
    employee_id: Optional[str] = None,
    tables: TableGateway = Depends(get_table_gateway),
):
    filters = {}
    if team_id:
        filters["team_id"] = eq(team_id)
    if employee_id:
        filters["employee_id"] = eq(employee_id)

    metrics = unwrap(tables.query(METRICS_TABLE, filters, UNBOUNDED), "Failed to fetch statistics")
    return ApiResponse.ok(calculate_statistics(metrics or [])).to_response()


@router.get("/{metric_id}")
def get_metric(metric_id: str, tables: TableGateway = Depends(get_table_gateway)):
    rows = unwrap(
        tables.query(METRICS_TABLE, {"id": eq(metric_id)}),
        "Metric not found",
        status_code=status.HTTP_404_NOT_FOUND,
    )
    if not rows:
        raise NotFoundError("Metric not found")
    return ApiResponse.ok(rows[0]).to_response()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_metric(
    data: MetricCreate,
    background_tasks: BackgroundTasks,
    token: Optional[str] = Depends(get_bearer_token),
    tables: TableGateway = Depends(get_table_gateway),
    activity: ActivityLogger = Depends(get_activity_logger),
):
    record = data.model_dump(mode="json", exclude_unset=True)
    created = unwrap(tables.insert(METRICS_TABLE, record), "Failed to create metric")

    background_tasks.add_task(
        activity.record_for_token,
        token,
        str(data.team_id),
        "metric_added",
        f"Added new {data.metric_type} metric",
        {"metric_type": data.metric_type},
    )
    return ApiResponse.ok(created, message="Metric created successfully").to_response(status.HTTP_201_CREATED)


@router.patch("/{metric_id}")
def update_metric(
    metric_id: str,
    data: MetricUpdate,
    tables: TableGateway = Depends(get_table_gateway),
):
    changes = data.model_dump(mode="json", exclude_unset=True)
    result = tables.update(METRICS_TABLE, {"id": eq(metric_id)}, changes)
    return ApiResponse.ok(unwrap(result, "Failed to update metric"), message="Metric updated successfully").to_response()


@router.delete("/{metric_id}")
def delete_metric(metric_id: str, tables: TableGateway = Depends(get_table_gateway)):
    unwrap(tables.remove(METRICS_TABLE, {"id": eq(metric_id)}), "Failed to delete metric")
    logger.info(f"Deleted metric {metric_id}")
    return ApiResponse.ok(message="Metric deleted successfully").to_response()
