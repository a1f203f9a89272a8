"""
Supabase Auth (GoTrue) access.

Tokens are minted and validated by the identity provider; this service only
forwards credentials and trusts the identity it gets back.
"""
from typing import Any, Dict, Optional

from teamdash.gateways.base import BaseGateway
from teamdash.gateways.result import Result


class AuthGateway(BaseGateway):
    def sign_up(self, email: str, password: str, profile_metadata: Optional[Dict[str, Any]] = None) -> Result[dict]:
        return self._send(
            "POST",
            "signup",
            json={"email": email, "password": password, "data": profile_metadata or {}},
            headers={"apikey": self.api_key, "Content-Type": "application/json"},
        )

    def sign_in(self, email: str, password: str) -> Result[dict]:
        return self._send(
            "POST",
            "token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            headers={"apikey": self.api_key, "Content-Type": "application/json"},
        )

    def resolve_user(self, bearer_token: str) -> Result[dict]:
        return self._send("GET", "user", headers=self._headers(bearer=bearer_token))
