from datetime import date
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field, ValidationInfo, field_validator


def _check_period(period_end: Optional[date], info: ValidationInfo) -> Optional[date]:
    period_start = info.data.get("period_start")
    if period_end is not None and period_start is not None and period_end < period_start:
        raise ValueError("period_end must be a date after or equal to period_start")
    return period_end


def reject_null(value: Any, info: ValidationInfo) -> Any:
    """Optional-to-send fields that still may not be sent as null."""
    if value is None:
        raise ValueError(f"The {info.field_name} field may not be null")
    return value


class MetricCreate(BaseModel):
    employee_id: UUID
    team_id: UUID
    metric_type: str = Field(max_length=255)
    metric_value: float
    metric_target: Optional[float] = None
    period_start: date
    period_end: date
    notes: Optional[str] = None

    @field_validator("period_end")
    @classmethod
    def period_end_after_start(cls, v: date, info: ValidationInfo) -> date:
        return _check_period(v, info)


class MetricUpdate(BaseModel):
    """Partial update; dates are only cross-checked when both are sent.

    Only ``metric_target`` and ``notes`` can be cleared with null.
    """
    metric_type: Optional[str] = Field(default=None, max_length=255)
    metric_value: Optional[float] = None
    metric_target: Optional[float] = None
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("metric_type", "metric_value", "period_start", "period_end", mode="before")
    @classmethod
    def not_null(cls, v: Any, info: ValidationInfo) -> Any:
        return reject_null(v, info)

    @field_validator("period_end")
    @classmethod
    def period_end_after_start(cls, v: Optional[date], info: ValidationInfo) -> Optional[date]:
        return _check_period(v, info)
