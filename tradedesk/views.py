"""
Screen payloads: the dashboard and admin panel assembled from scoped reads.
"""

from __future__ import annotations

from typing import Optional

from tradedesk import commission
from tradedesk.config import Settings
from tradedesk.db import TradingAccountRecord
from tradedesk.errors import NotFoundError
from tradedesk.repository import ScopedRepository
from tradedesk.schemas import (
    AccountView,
    AdminAccountView,
    AdminOverviewResponse,
    AdminUser,
    DashboardResponse,
    PlatformSettingsResponse,
    ProfileResponse,
    TradingAccountResponse,
)
from tradedesk.types import AppRole


def account_response(
    account: TradingAccountRecord, *, include_secret: bool = False
) -> TradingAccountResponse:
    return TradingAccountResponse(**account.as_dict(include_secret=include_secret))


def account_view(
    account: TradingAccountRecord, settings: Settings, *, include_secret: bool = False
) -> AccountView:
    return AccountView(
        **account.as_dict(include_secret=include_secret),
        profit=commission.profit(account),
        profit_percentage=round(commission.profit_percentage(account), 1),
        commission_status=commission.commission_status(account),
        commission_amount=commission.commission_amount(account, settings.commission_rate),
        badge=commission.badge(account),
    )


def build_dashboard(repo: ScopedRepository, settings: Settings) -> DashboardResponse:
    try:
        profile = ProfileResponse(**repo.get_profile(repo.user_id).as_dict())
    except NotFoundError:
        profile = None

    accounts = repo.list_trading_accounts(repo.user_id)
    wallet: Optional[str] = repo.get_platform_settings().usdt_wallet_address

    return DashboardResponse(
        profile=profile,
        accounts=[account_view(a, settings) for a in accounts],
        total_accounts=len(accounts),
        total_balance=sum(a.current_balance or 0.0 for a in accounts),
        total_profit=sum(max(0.0, commission.profit(a)) for a in accounts),
        usdt_wallet_address=wallet,
    )


def admin_account_view(
    account: TradingAccountRecord, owner_name: Optional[str], settings: Settings
) -> AdminAccountView:
    base = account_view(account, settings, include_secret=True)
    return AdminAccountView(
        **base.model_dump(),
        owner_name=owner_name or "Unknown User",
        target_suggested=commission.target_suggested(
            account, settings.profit_target_multiple
        ),
    )


def build_admin_overview(
    repo: ScopedRepository, settings: Settings
) -> AdminOverviewResponse:
    repo.require_admin()

    profiles = repo.list_profiles()
    names = {p.user_id: p.full_name for p in profiles}
    admins = {r.user_id for r in repo.list_roles() if r.role == AppRole.ADMIN}
    users = []
    for profile in profiles:
        identity = repo.db.get_identity(profile.user_id)
        users.append(
            AdminUser(
                id=profile.user_id,
                full_name=profile.full_name,
                telegram_handle=profile.telegram_handle,
                email=identity.email if identity else "N/A",
                created_at=profile.created_at,
                is_admin=profile.user_id in admins,
            )
        )

    accounts = repo.list_trading_accounts()
    account_views = [
        admin_account_view(account, names.get(account.user_id), settings)
        for account in accounts
    ]

    platform = repo.get_platform_settings()
    return AdminOverviewResponse(
        users=users,
        accounts=account_views,
        total_users=len(users),
        total_accounts=len(accounts),
        total_balance=sum(a.current_balance or 0.0 for a in accounts),
        accounts_needing_commission=sum(
            1 for a in accounts if a.profit_target_reached and not a.commission_paid
        ),
        inconsistencies=commission.inconsistencies(accounts),
        settings=PlatformSettingsResponse(**platform.as_dict()),
    )
