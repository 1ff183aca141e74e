"""
Pydantic schemas for the HTTP API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from tradedesk.types import AppRole, CommissionStatus


class ErrorResponse(BaseModel):
    error: str
    message: str


class SignUpRequest(BaseModel):
    full_name: str = ""
    email: str = ""
    telegram_handle: str = ""
    password: str = ""
    confirm_password: str = ""
    has_trading_account: Optional[Literal["yes", "no"]] = None


class SignUpResponse(BaseModel):
    status: Literal["registered", "partner_redirect"]
    message: str
    user_id: Optional[str] = None
    partner_link: Optional[str] = None


class SignInRequest(BaseModel):
    email: str = ""
    password: str = ""


class SignInResponse(BaseModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    user_id: str
    expires_at: datetime


class SignOutRequest(BaseModel):
    scope: Literal["local", "global"] = "local"


class SignOutResponse(BaseModel):
    status: Literal["ok"]
    revoked: int


class ProfileResponse(BaseModel):
    id: str
    user_id: str
    full_name: str
    telegram_handle: str
    created_at: datetime
    updated_at: datetime


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, max_length=200)
    telegram_handle: Optional[str] = Field(default=None, max_length=100)


class RoleResponse(BaseModel):
    id: str
    user_id: str
    role: AppRole
    created_at: datetime


class RoleGrantRequest(BaseModel):
    user_id: str
    role: AppRole


class MeResponse(BaseModel):
    user_id: str
    email: str
    is_admin: bool
    roles: list[AppRole]
    profile: Optional[ProfileResponse] = None


class TradingAccountCreate(BaseModel):
    account_id: str = ""
    password: str = ""
    server: str = ""
    initial_deposit: Optional[float] = None


class TradingAccountUpdate(BaseModel):
    current_balance: Optional[float] = None
    profit_target_reached: Optional[bool] = None
    commission_paid: Optional[bool] = None


class TradingAccountResponse(BaseModel):
    id: str
    user_id: str
    account_id: str
    server: str
    initial_deposit: Optional[float] = None
    current_balance: Optional[float] = None
    profit_target_reached: bool
    commission_paid: bool
    created_at: datetime
    updated_at: datetime
    # Credential secret, returned to administrators only.
    password: Optional[str] = None


class AccountView(TradingAccountResponse):
    profit: float
    profit_percentage: float
    commission_status: CommissionStatus
    commission_amount: float
    badge: Optional[str] = None


class AdminAccountView(AccountView):
    owner_name: str
    target_suggested: bool


class PublicSettingsResponse(BaseModel):
    fbs_partner_link: Optional[str] = None
    telegram_bot_username: Optional[str] = None


class PlatformSettingsResponse(BaseModel):
    id: str
    fbs_partner_link: Optional[str] = None
    usdt_wallet_address: Optional[str] = None
    telegram_bot_username: Optional[str] = None
    updated_at: datetime


class PlatformSettingsUpdate(BaseModel):
    fbs_partner_link: Optional[str] = None
    usdt_wallet_address: Optional[str] = None
    telegram_bot_username: Optional[str] = None


class DashboardResponse(BaseModel):
    profile: Optional[ProfileResponse] = None
    accounts: list[AccountView]
    total_accounts: int
    total_balance: float
    total_profit: float
    usdt_wallet_address: Optional[str] = None


class AdminUser(BaseModel):
    id: str
    full_name: str
    telegram_handle: str
    email: str
    created_at: datetime
    is_admin: bool


class InconsistencyFlag(BaseModel):
    id: str
    account_id: str
    reason: str


class AdminOverviewResponse(BaseModel):
    users: list[AdminUser]
    accounts: list[AdminAccountView]
    total_users: int
    total_accounts: int
    total_balance: float
    accounts_needing_commission: int
    inconsistencies: list[InconsistencyFlag]
    settings: PlatformSettingsResponse
