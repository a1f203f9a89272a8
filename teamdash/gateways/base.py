import logging
from typing import Any, Callable, Dict, Optional

import requests

from teamdash.gateways.result import Failure, Result, Success

logger = logging.getLogger(__name__)


def _decode_body(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class BaseGateway:
    """
    Shared plumbing for the Supabase sub-API gateways.

    One network attempt per call: no retries and no timeout beyond what the
    HTTP client does by default. ``transport`` is ``requests.request`` unless
    a test hands in a stand-in with the same signature.
    """

    def __init__(self, base_url: str, api_key: str, transport: Optional[Callable[..., requests.Response]] = None):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self._transport = transport or requests.request

    def _headers(self, bearer: Optional[str] = None, **extra: str) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {bearer or self.api_key}",
        }
        headers.update(extra)
        return headers

    def _send(self, method: str, path: str, **kwargs) -> Result[Any]:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self._transport(method, url, **kwargs)
        except requests.RequestException as e:
            logger.warning(f"{method} {url} failed: {e}")
            return Failure(status_code=None, body={"message": str(e)})

        body = _decode_body(response)
        if not 200 <= response.status_code < 300:
            logger.warning(f"{method} {url} returned {response.status_code}")
            return Failure(status_code=response.status_code, body=body)
        return Success(body)
