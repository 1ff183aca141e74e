"""
Data access on behalf of a signed-in caller.

Every method checks the row-level policies before it reads or writes, so a
screen can only ever see or change what its caller is allowed to.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from tradedesk import commission
from tradedesk.db import (
    DbClient,
    PlatformSettingsRecord,
    ProfileRecord,
    RoleAssignmentRecord,
    TradingAccountRecord,
)
from tradedesk.errors import AuthorizationError, NotFoundError
from tradedesk.policies import EvaluationContext, PolicyEngine, default_engine
from tradedesk.types import Action, AppRole, Table

logger = logging.getLogger(__name__)


class ScopedRepository:
    def __init__(
        self,
        db: DbClient,
        user_id: Optional[str],
        engine: PolicyEngine = default_engine,
    ):
        self.db = db
        self.engine = engine
        self.ctx = EvaluationContext.for_user(db, user_id)

    @property
    def user_id(self) -> Optional[str]:
        return self.ctx.user_id

    @property
    def is_admin(self) -> bool:
        return self.ctx.is_admin

    def _require_visible(self, table: Table, user_id: Optional[str]) -> None:
        # Asking for someone else's rows is a denial, not an empty result.
        if user_id is not None:
            self.engine.authorize(self.ctx, table, Action.SELECT, {"user_id": user_id})

    # Profiles

    def get_profile(self, user_id: str) -> ProfileRecord:
        profile = self.db.get_profile_by_user(user_id)
        if profile is None:
            self._require_visible(Table.PROFILES, user_id)
            raise NotFoundError("Profile not found")
        self.engine.authorize(self.ctx, Table.PROFILES, Action.SELECT, profile)
        return profile

    def list_profiles(self) -> list[ProfileRecord]:
        return self.engine.filter_visible(
            self.ctx, Table.PROFILES, self.db.list_profiles()
        )

    def update_profile(
        self,
        user_id: str,
        *,
        full_name: Optional[str] = None,
        telegram_handle: Optional[str] = None,
    ) -> ProfileRecord:
        profile = self.get_profile(user_id)
        self.engine.authorize(self.ctx, Table.PROFILES, Action.UPDATE, profile)
        changes = {}
        if full_name is not None:
            changes["full_name"] = full_name
        if telegram_handle is not None:
            changes["telegram_handle"] = telegram_handle
        if not changes:
            return profile
        return self.db.update_profile(user_id, changes)

    # Trading accounts

    def list_trading_accounts(
        self, user_id: Optional[str] = None
    ) -> list[TradingAccountRecord]:
        self._require_visible(Table.MT5_ACCOUNTS, user_id)
        return self.engine.filter_visible(
            self.ctx, Table.MT5_ACCOUNTS, self.db.list_trading_accounts(user_id)
        )

    def get_trading_account(self, account_pk: str) -> TradingAccountRecord:
        account = self.db.get_trading_account(account_pk)
        if account is None:
            raise NotFoundError("Trading account not found")
        self.engine.authorize(self.ctx, Table.MT5_ACCOUNTS, Action.SELECT, account)
        return account

    def create_trading_account(
        self,
        *,
        account_id: str,
        password: str,
        server: str,
        initial_deposit: float,
        user_id: Optional[str] = None,
    ) -> TradingAccountRecord:
        record = TradingAccountRecord(
            id=str(uuid.uuid4()),
            user_id=user_id or self.user_id or "",
            account_id=account_id,
            password=password,
            server=server,
            initial_deposit=initial_deposit,
            current_balance=initial_deposit,
            profit_target_reached=False,
            commission_paid=False,
        )
        self.engine.authorize(self.ctx, Table.MT5_ACCOUNTS, Action.INSERT, record)
        if self.db.get_identity(record.user_id) is None:
            raise NotFoundError("User not found")
        created = self.db.insert_trading_account(record)
        logger.info("User %s submitted trading account %s", record.user_id, created.id)
        return created

    def update_trading_account(
        self, account_pk: str, changes: dict
    ) -> TradingAccountRecord:
        account = self.db.get_trading_account(account_pk)
        if account is None:
            raise NotFoundError("Trading account not found")
        self.engine.authorize(
            self.ctx, Table.MT5_ACCOUNTS, Action.UPDATE, account, columns=changes.keys()
        )
        commission.check_transition(account, changes)
        updated = self.db.update_trading_account(account_pk, changes)
        if updated is None:
            raise NotFoundError("Trading account not found")
        logger.info(
            "User %s updated trading account %s: %s",
            self.user_id,
            account_pk,
            ", ".join(sorted(changes)),
        )
        return updated

    # Role assignments

    def list_roles(self, user_id: Optional[str] = None) -> list[RoleAssignmentRecord]:
        self._require_visible(Table.USER_ROLES, user_id)
        return self.engine.filter_visible(
            self.ctx, Table.USER_ROLES, self.db.list_roles(user_id)
        )

    def grant_role(self, user_id: str, role: AppRole) -> RoleAssignmentRecord:
        self.engine.authorize(
            self.ctx, Table.USER_ROLES, Action.INSERT, {"user_id": user_id}
        )
        if self.db.get_identity(user_id) is None:
            raise NotFoundError("User not found")
        record = self.db.insert_role(user_id, role)
        logger.info("User %s granted role %s to %s", self.user_id, record.role.value, user_id)
        return record

    def revoke_role(self, user_id: str, role: AppRole) -> None:
        self.engine.authorize(
            self.ctx, Table.USER_ROLES, Action.DELETE, {"user_id": user_id}
        )
        if not self.db.delete_role(user_id, role):
            raise NotFoundError("Role assignment not found")
        logger.info("User %s revoked role %s from %s", self.user_id, AppRole(role).value, user_id)

    # Platform settings

    def get_platform_settings(self) -> PlatformSettingsRecord:
        settings = self.db.get_platform_settings()
        self.engine.authorize(self.ctx, Table.ADMIN_SETTINGS, Action.SELECT, settings)
        return settings

    def update_platform_settings(self, changes: dict) -> PlatformSettingsRecord:
        self.engine.authorize(self.ctx, Table.ADMIN_SETTINGS, Action.UPDATE)
        updated = self.db.upsert_platform_settings(changes)
        logger.info("User %s updated platform settings", self.user_id)
        return updated

    def require_admin(self) -> None:
        if not self.is_admin:
            raise AuthorizationError("Administrator access required")
