"""
Dependency wiring for the FastAPI app.

Gateways are built once in ``create_app`` from the startup ``Config`` and
kept on ``app.state``; routes receive them through these providers, and
tests replace them with ``app.dependency_overrides``.
"""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from teamdash.core.config import Config
from teamdash.core.exceptions import AuthenticationError
from teamdash.gateways import AuthGateway, StorageGateway, TableGateway
from teamdash.services.activity import ActivityLogger

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Config:
    return request.app.state.settings


def get_table_gateway(request: Request) -> TableGateway:
    return request.app.state.tables


def get_storage_gateway(request: Request) -> StorageGateway:
    return request.app.state.storage


def get_auth_gateway(request: Request) -> AuthGateway:
    return request.app.state.auth


def get_activity_logger(
    tables: TableGateway = Depends(get_table_gateway),
    auth: AuthGateway = Depends(get_auth_gateway),
) -> ActivityLogger:
    return ActivityLogger(tables, auth)


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    """Caller's access token, or None when no bearer header was sent."""
    if credentials is None:
        return None
    return credentials.credentials


def require_bearer_token(token: Optional[str] = Depends(get_bearer_token)) -> str:
    if not token:
        raise AuthenticationError("No token provided")
    return token
