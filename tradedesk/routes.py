"""
HTTP routes for the service.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from tradedesk import validation, views
from tradedesk.auth import AuthService, Caller
from tradedesk.config import Settings, get_settings
from tradedesk.db import DbClient
from tradedesk.dependencies import (
    get_auth_service,
    get_caller,
    get_db_client,
    get_public_repository,
    get_repository,
)
from tradedesk.repository import ScopedRepository
from tradedesk.schemas import (
    AccountView,
    AdminAccountView,
    AdminOverviewResponse,
    DashboardResponse,
    MeResponse,
    PlatformSettingsResponse,
    PlatformSettingsUpdate,
    ProfileResponse,
    ProfileUpdate,
    PublicSettingsResponse,
    RoleGrantRequest,
    RoleResponse,
    SignInRequest,
    SignInResponse,
    SignOutRequest,
    SignOutResponse,
    SignUpRequest,
    SignUpResponse,
    TradingAccountCreate,
    TradingAccountResponse,
    TradingAccountUpdate,
)
from tradedesk.types import AppRole

logger = logging.getLogger(__name__)

router = APIRouter()


# Landing


@router.get("/landing", response_model=PublicSettingsResponse)
def landing(repo: ScopedRepository = Depends(get_public_repository)):
    settings = repo.get_platform_settings()
    return PublicSettingsResponse(
        fbs_partner_link=settings.fbs_partner_link,
        telegram_bot_username=settings.telegram_bot_username,
    )


# Auth


@router.post("/auth/sign-up", response_model=SignUpResponse, status_code=201)
def sign_up(
    payload: SignUpRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    db: DbClient = Depends(get_db_client),
    settings: Settings = Depends(get_settings),
):
    validation.check_sign_up(payload, settings.min_password_length)

    if payload.has_trading_account == "no":
        # No broker account yet: send the user to the referral link instead.
        link = db.get_platform_settings().fbs_partner_link or settings.default_partner_link
        response.status_code = 200
        return SignUpResponse(
            status="partner_redirect",
            partner_link=link,
            message="Please create your trading account first, then return to complete registration.",
        )

    identity = auth.sign_up(
        validation.normalize_email(payload.email),
        payload.password,
        {
            "full_name": payload.full_name.strip(),
            "telegram_handle": payload.telegram_handle.strip(),
        },
    )
    return SignUpResponse(
        status="registered", user_id=identity.id, message="Account created!"
    )


@router.post("/auth/sign-in", response_model=SignInResponse)
def sign_in(payload: SignInRequest, auth: AuthService = Depends(get_auth_service)):
    validation.check_sign_in(payload)
    issued = auth.sign_in(payload.email.strip().lower(), payload.password)
    return SignInResponse(
        access_token=issued.access_token,
        user_id=issued.identity.id,
        expires_at=issued.session.expires_at,
    )


@router.post("/auth/sign-out", response_model=SignOutResponse)
def sign_out(
    payload: Optional[SignOutRequest] = None,
    caller: Caller = Depends(get_caller),
    auth: AuthService = Depends(get_auth_service),
):
    scope = payload.scope if payload else "local"
    revoked = auth.sign_out(caller, scope)
    return SignOutResponse(status="ok", revoked=revoked)


@router.get("/auth/me", response_model=MeResponse)
def me(
    caller: Caller = Depends(get_caller),
    repo: ScopedRepository = Depends(get_repository),
):
    profile = repo.db.get_profile_by_user(caller.user_id)
    return MeResponse(
        user_id=caller.user_id,
        email=caller.email,
        is_admin=repo.is_admin,
        roles=sorted(repo.ctx.roles, key=lambda r: r.value),
        profile=ProfileResponse(**profile.as_dict()) if profile else None,
    )


# Dashboard


@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(
    repo: ScopedRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    return views.build_dashboard(repo, settings)


@router.post("/dashboard/accounts", response_model=AccountView, status_code=201)
def submit_account(
    payload: TradingAccountCreate,
    repo: ScopedRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    deposit = validation.check_trading_account(payload)
    account = repo.create_trading_account(
        account_id=payload.account_id.strip(),
        password=payload.password,
        server=payload.server.strip(),
        initial_deposit=deposit,
    )
    return views.account_view(account, settings)


# Data boundary


@router.get("/profiles", response_model=list[ProfileResponse])
def list_profiles(repo: ScopedRepository = Depends(get_repository)):
    return [ProfileResponse(**p.as_dict()) for p in repo.list_profiles()]


@router.get("/profiles/{user_id}", response_model=ProfileResponse)
def get_profile(user_id: str, repo: ScopedRepository = Depends(get_repository)):
    return ProfileResponse(**repo.get_profile(user_id).as_dict())


@router.patch("/profiles/{user_id}", response_model=ProfileResponse)
def update_profile(
    user_id: str,
    payload: ProfileUpdate,
    repo: ScopedRepository = Depends(get_repository),
):
    profile = repo.update_profile(
        user_id,
        full_name=payload.full_name,
        telegram_handle=payload.telegram_handle,
    )
    return ProfileResponse(**profile.as_dict())


@router.get("/accounts", response_model=list[TradingAccountResponse])
def list_accounts(
    user_id: Optional[str] = Query(None),
    repo: ScopedRepository = Depends(get_repository),
):
    return [
        views.account_response(a, include_secret=repo.is_admin)
        for a in repo.list_trading_accounts(user_id)
    ]


@router.post("/accounts", response_model=TradingAccountResponse, status_code=201)
def create_account(
    payload: TradingAccountCreate,
    user_id: Optional[str] = Query(None),
    repo: ScopedRepository = Depends(get_repository),
):
    deposit = validation.check_trading_account(payload)
    account = repo.create_trading_account(
        account_id=payload.account_id.strip(),
        password=payload.password,
        server=payload.server.strip(),
        initial_deposit=deposit,
        user_id=user_id,
    )
    return views.account_response(account, include_secret=repo.is_admin)


@router.get("/accounts/{account_pk}", response_model=TradingAccountResponse)
def get_account(account_pk: str, repo: ScopedRepository = Depends(get_repository)):
    account = repo.get_trading_account(account_pk)
    return views.account_response(account, include_secret=repo.is_admin)


@router.patch("/accounts/{account_pk}", response_model=TradingAccountResponse)
def update_account(
    account_pk: str,
    payload: TradingAccountUpdate,
    repo: ScopedRepository = Depends(get_repository),
):
    account = repo.update_trading_account(
        account_pk, validation.account_changes(payload)
    )
    return views.account_response(account, include_secret=repo.is_admin)


@router.get("/roles", response_model=list[RoleResponse])
def list_roles(
    user_id: Optional[str] = Query(None),
    repo: ScopedRepository = Depends(get_repository),
):
    return [RoleResponse(**vars(r)) for r in repo.list_roles(user_id)]


@router.get("/settings", response_model=PlatformSettingsResponse)
def get_platform_settings(repo: ScopedRepository = Depends(get_public_repository)):
    return PlatformSettingsResponse(**repo.get_platform_settings().as_dict())


# Admin


@router.get("/admin", response_model=AdminOverviewResponse)
def admin_overview(
    repo: ScopedRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    return views.build_admin_overview(repo, settings)


@router.patch("/admin/accounts/{account_pk}", response_model=AdminAccountView)
def admin_update_account(
    account_pk: str,
    payload: TradingAccountUpdate,
    repo: ScopedRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    repo.require_admin()
    account = repo.update_trading_account(
        account_pk, validation.account_changes(payload)
    )
    owner = repo.db.get_profile_by_user(account.user_id)
    return views.admin_account_view(
        account, owner.full_name if owner else None, settings
    )


@router.put("/admin/settings", response_model=PlatformSettingsResponse)
def admin_update_settings(
    payload: PlatformSettingsUpdate,
    repo: ScopedRepository = Depends(get_repository),
):
    updated = repo.update_platform_settings(payload.model_dump(exclude_none=True))
    return PlatformSettingsResponse(**updated.as_dict())


@router.post("/admin/roles", response_model=RoleResponse, status_code=201)
def admin_grant_role(
    payload: RoleGrantRequest,
    repo: ScopedRepository = Depends(get_repository),
):
    record = repo.grant_role(payload.user_id, payload.role)
    return RoleResponse(**vars(record))


@router.delete("/admin/roles/{user_id}/{role}", status_code=204)
def admin_revoke_role(
    user_id: str,
    role: AppRole,
    repo: ScopedRepository = Depends(get_repository),
):
    repo.revoke_role(user_id, role)
    return Response(status_code=204)
