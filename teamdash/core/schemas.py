from typing import Any, Dict, List, Optional
from pydantic import BaseModel
from fastapi.responses import JSONResponse


class ApiResponse(BaseModel):
    """Uniform envelope returned by every resource endpoint.

    Keys that were never set are left out of the serialized body, so a
    success carries ``data``/``message`` and a failure carries
    ``message``/``error`` or ``errors``.
    """

    success: bool
    data: Optional[Any] = None
    message: Optional[str] = None
    error: Optional[Any] = None
    errors: Optional[Dict[str, List[str]]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary with JSON-serializable values."""
        return self.model_dump(mode="json", exclude_unset=True)

    def to_response(self, status_code: int = 200) -> JSONResponse:
        return JSONResponse(status_code=status_code, content=self.to_dict())

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None) -> "ApiResponse":
        fields = {"success": True}
        if data is not None:
            fields["data"] = data
        if message is not None:
            fields["message"] = message
        return cls(**fields)

    @classmethod
    def fail(
        cls,
        message: Optional[str] = None,
        error: Any = None,
        errors: Optional[Dict[str, List[str]]] = None,
    ) -> "ApiResponse":
        fields = {"success": False}
        if message is not None:
            fields["message"] = message
        if error is not None:
            fields["error"] = error
        if errors is not None:
            fields["errors"] = errors
        return cls(**fields)
