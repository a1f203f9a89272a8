"""
Supabase Storage access for uploaded documents.

Runs with the service-role key so end-user tokens never reach storage.
``public_url`` only builds a string and assumes the bucket allows public
reads; signed, expiring URLs are not supported.
"""
from typing import Any, List
from urllib.parse import quote

from teamdash.gateways.base import BaseGateway
from teamdash.gateways.result import Result


def _object_path(bucket: str, path: str) -> str:
    # Slashes stay as folder separators; "?", "#" and spaces are escaped.
    return f"{quote(bucket, safe='')}/{quote(path)}"


class StorageGateway(BaseGateway):
    def upload(self, bucket: str, path: str, content: bytes, content_type: str) -> Result[Any]:
        return self._send(
            "POST",
            f"object/{_object_path(bucket, path)}",
            data=content,
            headers=self._headers(**{"Content-Type": content_type}),
        )

    def remove(self, bucket: str, path: str) -> Result[Any]:
        return self._send("DELETE", f"object/{_object_path(bucket, path)}", headers=self._headers())

    def list(self, bucket: str, prefix: str = "") -> Result[List[dict]]:
        return self._send(
            "POST",
            f"object/list/{quote(bucket, safe='')}",
            json={"prefix": prefix},
            headers=self._headers(**{"Content-Type": "application/json"}),
        )

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/object/public/{_object_path(bucket, path)}"
