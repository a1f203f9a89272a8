from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field, ValidationInfo, field_validator

from teamdash.schemas.metrics import reject_null


class DocumentCategory(str, Enum):
    PERFORMANCE_REVIEW = "performance_review"
    REPORT = "report"
    PRESENTATION = "presentation"
    OTHER = "other"


class DocumentUpdate(BaseModel):
    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    category: Optional[DocumentCategory] = None

    @field_validator("title", "category", mode="before")
    @classmethod
    def not_null(cls, v: Any, info: ValidationInfo) -> Any:
        return reject_null(v, info)
