"""
Tagged outcome of a single call against the data platform.

Gateways never raise for upstream problems; they hand back either a
``Success`` wrapping the decoded payload or a ``Failure`` wrapping the
HTTP status (``None`` for transport errors) and the raw response body.
"""
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar, Union

from teamdash.core.exceptions import UpstreamError

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    payload: T


@dataclass(frozen=True)
class Failure:
    status_code: Optional[int]
    body: Any


Result = Union[Success[T], Failure]


def unwrap(result: "Result[T]", message: str, status_code: int = 400) -> T:
    """Return the payload or raise ``UpstreamError`` carrying the raw body."""
    if isinstance(result, Failure):
        raise UpstreamError(message, status_code=status_code, body=result.body)
    return result.payload
