"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tradedesk.auth import AuthService, Caller
from tradedesk.config import Settings, get_settings
from tradedesk.db import DbClient, InMemoryDbClient, PostgresDbClient
from tradedesk.errors import AuthenticationError
from tradedesk.repository import ScopedRepository

_db_client: DbClient | None = None

bearer_scheme = HTTPBearer(auto_error=False)


def get_db_client() -> DbClient:
    """
    Return a singleton store client so state persists across requests.
    """
    global _db_client
    if _db_client is not None:
        return _db_client

    settings = get_settings()
    seed = {
        "default_partner_link": settings.default_partner_link,
        "default_wallet_address": settings.default_wallet_address,
        "default_bot_username": settings.default_bot_username,
    }
    if settings.use_in_memory_backends or not settings.database_url:
        _db_client = InMemoryDbClient(**seed)
    else:
        _db_client = PostgresDbClient(settings.database_url, **seed)
    return _db_client


def get_auth_service(
    db: DbClient = Depends(get_db_client),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(db, settings)


def get_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> Caller:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError("Not signed in")
    return auth.resolve(credentials.credentials)


def get_optional_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> Optional[Caller]:
    if credentials is None:
        return None
    return auth.resolve(credentials.credentials)


def get_repository(
    caller: Caller = Depends(get_caller),
    db: DbClient = Depends(get_db_client),
) -> ScopedRepository:
    return ScopedRepository(db, caller.user_id)


def get_public_repository(
    caller: Optional[Caller] = Depends(get_optional_caller),
    db: DbClient = Depends(get_db_client),
) -> ScopedRepository:
    return ScopedRepository(db, caller.user_id if caller else None)
