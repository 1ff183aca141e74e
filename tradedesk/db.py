"""
Store abstraction for Postgres and an in-memory test implementation.

The store is trusted and unscoped: it never looks at who is asking. Callers
acting on behalf of a user go through ``tradedesk.repository`` so every read
and write passes the row-level policies first.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    UniqueConstraint,
    create_engine,
    delete,
    select,
    update,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from tradedesk.errors import ConflictError
from tradedesk.types import AppRole

PROFILE_FIELDS = ("full_name", "telegram_handle")
TRADING_ACCOUNT_FIELDS = (
    "account_id",
    "password",
    "server",
    "initial_deposit",
    "current_balance",
    "profit_target_reached",
    "commission_paid",
)
SETTINGS_FIELDS = ("fbs_partner_link", "usdt_wallet_address", "telegram_bot_username")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything stored is UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _new_id() -> str:
    return str(uuid.uuid4())


class DbClient(Protocol):
    """Interface for store access."""

    def create_identity(
        self, email: str, password_hash: str, metadata: Optional[dict] = None
    ) -> "IdentityRecord":
        ...

    def get_identity(self, user_id: str) -> Optional["IdentityRecord"]:
        ...

    def get_identity_by_email(self, email: str) -> Optional["IdentityRecord"]:
        ...

    def list_identities(self) -> list["IdentityRecord"]:
        ...

    def get_profile_by_user(self, user_id: str) -> Optional["ProfileRecord"]:
        ...

    def list_profiles(self) -> list["ProfileRecord"]:
        ...

    def update_profile(
        self, user_id: str, changes: dict
    ) -> Optional["ProfileRecord"]:
        ...

    def insert_trading_account(
        self, record: "TradingAccountRecord"
    ) -> "TradingAccountRecord":
        ...

    def get_trading_account(
        self, account_pk: str
    ) -> Optional["TradingAccountRecord"]:
        ...

    def list_trading_accounts(
        self, user_id: Optional[str] = None
    ) -> list["TradingAccountRecord"]:
        ...

    def update_trading_account(
        self, account_pk: str, changes: dict
    ) -> Optional["TradingAccountRecord"]:
        ...

    def list_roles(self, user_id: Optional[str] = None) -> list["RoleAssignmentRecord"]:
        ...

    def insert_role(self, user_id: str, role: AppRole) -> "RoleAssignmentRecord":
        ...

    def delete_role(self, user_id: str, role: AppRole) -> bool:
        ...

    def get_platform_settings(self) -> "PlatformSettingsRecord":
        ...

    def upsert_platform_settings(self, changes: dict) -> "PlatformSettingsRecord":
        ...

    def create_session(
        self, user_id: str, expires_at: datetime
    ) -> "SessionRecord":
        ...

    def get_session(self, session_id: str) -> Optional["SessionRecord"]:
        ...

    def revoke_session(self, session_id: str) -> None:
        ...

    def revoke_sessions_for_user(self, user_id: str) -> int:
        ...


@dataclass
class IdentityRecord:
    id: str
    email: str
    password_hash: str
    raw_user_meta_data: dict = field(default_factory=dict)
    created_at: datetime = field(default_factory=_now)


@dataclass
class ProfileRecord:
    id: str
    user_id: str
    full_name: str
    telegram_handle: str
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "full_name": self.full_name,
            "telegram_handle": self.telegram_handle,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class TradingAccountRecord:
    id: str
    user_id: str
    account_id: str
    password: str
    server: str
    initial_deposit: Optional[float] = None
    current_balance: Optional[float] = None
    profit_target_reached: bool = False
    commission_paid: bool = False
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    def as_dict(self, include_secret: bool = False) -> dict:
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "account_id": self.account_id,
            "server": self.server,
            "initial_deposit": self.initial_deposit,
            "current_balance": self.current_balance,
            "profit_target_reached": self.profit_target_reached,
            "commission_paid": self.commission_paid,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if include_secret:
            data["password"] = self.password
        return data


@dataclass
class RoleAssignmentRecord:
    id: str
    user_id: str
    role: AppRole
    created_at: datetime = field(default_factory=_now)


@dataclass
class PlatformSettingsRecord:
    id: str
    fbs_partner_link: Optional[str] = None
    usdt_wallet_address: Optional[str] = None
    telegram_bot_username: Optional[str] = None
    updated_at: datetime = field(default_factory=_now)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "fbs_partner_link": self.fbs_partner_link,
            "usdt_wallet_address": self.usdt_wallet_address,
            "telegram_bot_username": self.telegram_bot_username,
            "updated_at": self.updated_at,
        }


@dataclass
class SessionRecord:
    id: str
    user_id: str
    expires_at: datetime
    issued_at: datetime = field(default_factory=_now)
    revoked_at: Optional[datetime] = None

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None


def profile_values_from_metadata(metadata: Optional[dict]) -> dict:
    """
    Read optional registration metadata, defaulting missing fields to empty.
    """
    metadata = metadata or {}
    return {name: str(metadata.get(name) or "") for name in PROFILE_FIELDS}


def _pick(changes: dict, allowed: tuple[str, ...]) -> dict:
    return {key: value for key, value in changes.items() if key in allowed}


class InMemoryDbClient:
    """Simple in-memory store for development and tests."""

    def __init__(
        self,
        *,
        default_partner_link: Optional[str] = None,
        default_wallet_address: Optional[str] = None,
        default_bot_username: Optional[str] = None,
    ):
        self._settings_defaults = {
            "fbs_partner_link": default_partner_link,
            "usdt_wallet_address": default_wallet_address,
            "telegram_bot_username": default_bot_username,
        }
        self.identities: Dict[str, IdentityRecord] = {}
        self.profiles: Dict[str, ProfileRecord] = {}
        self.accounts: Dict[str, TradingAccountRecord] = {}
        self.roles: Dict[str, RoleAssignmentRecord] = {}
        self.sessions: Dict[str, SessionRecord] = {}
        self.settings: Optional[PlatformSettingsRecord] = None

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.identities.clear()
        self.profiles.clear()
        self.accounts.clear()
        self.roles.clear()
        self.sessions.clear()
        self.settings = None

    def create_identity(
        self, email: str, password_hash: str, metadata: Optional[dict] = None
    ) -> IdentityRecord:
        if self.get_identity_by_email(email):
            raise ConflictError("User already registered")
        # Build every row before touching state so a failure leaves nothing behind.
        identity = IdentityRecord(
            id=_new_id(),
            email=email.lower(),
            password_hash=password_hash,
            raw_user_meta_data=dict(metadata or {}),
        )
        profile = ProfileRecord(
            id=_new_id(),
            user_id=identity.id,
            **profile_values_from_metadata(metadata),
        )
        role = RoleAssignmentRecord(id=_new_id(), user_id=identity.id, role=AppRole.USER)
        self.identities[identity.id] = identity
        self.profiles[profile.id] = profile
        self.roles[role.id] = role
        return identity

    def get_identity(self, user_id: str) -> Optional[IdentityRecord]:
        return self.identities.get(user_id)

    def get_identity_by_email(self, email: str) -> Optional[IdentityRecord]:
        wanted = email.lower()
        for identity in self.identities.values():
            if identity.email.lower() == wanted:
                return identity
        return None

    def list_identities(self) -> list[IdentityRecord]:
        return sorted(self.identities.values(), key=lambda i: i.created_at)

    def get_profile_by_user(self, user_id: str) -> Optional[ProfileRecord]:
        for profile in self.profiles.values():
            if profile.user_id == user_id:
                return profile
        return None

    def list_profiles(self) -> list[ProfileRecord]:
        return sorted(self.profiles.values(), key=lambda p: p.created_at)

    def update_profile(self, user_id: str, changes: dict) -> Optional[ProfileRecord]:
        profile = self.get_profile_by_user(user_id)
        if not profile:
            return None
        updated = replace(profile, **_pick(changes, PROFILE_FIELDS), updated_at=_now())
        self.profiles[profile.id] = updated
        return updated

    def insert_trading_account(
        self, record: TradingAccountRecord
    ) -> TradingAccountRecord:
        self.accounts[record.id] = record
        return record

    def get_trading_account(self, account_pk: str) -> Optional[TradingAccountRecord]:
        return self.accounts.get(account_pk)

    def list_trading_accounts(
        self, user_id: Optional[str] = None
    ) -> list[TradingAccountRecord]:
        rows = [
            account
            for account in self.accounts.values()
            if user_id is None or account.user_id == user_id
        ]
        return sorted(rows, key=lambda a: a.created_at, reverse=True)

    def update_trading_account(
        self, account_pk: str, changes: dict
    ) -> Optional[TradingAccountRecord]:
        account = self.accounts.get(account_pk)
        if not account:
            return None
        updated = replace(
            account, **_pick(changes, TRADING_ACCOUNT_FIELDS), updated_at=_now()
        )
        self.accounts[account_pk] = updated
        return updated

    def list_roles(self, user_id: Optional[str] = None) -> list[RoleAssignmentRecord]:
        return [
            role
            for role in self.roles.values()
            if user_id is None or role.user_id == user_id
        ]

    def insert_role(self, user_id: str, role: AppRole) -> RoleAssignmentRecord:
        role = AppRole(role)
        for existing in self.roles.values():
            if existing.user_id == user_id and existing.role == role:
                raise ConflictError(f"Role '{role.value}' already assigned")
        record = RoleAssignmentRecord(id=_new_id(), user_id=user_id, role=role)
        self.roles[record.id] = record
        return record

    def delete_role(self, user_id: str, role: AppRole) -> bool:
        role = AppRole(role)
        for key, existing in list(self.roles.items()):
            if existing.user_id == user_id and existing.role == role:
                del self.roles[key]
                return True
        return False

    def get_platform_settings(self) -> PlatformSettingsRecord:
        if self.settings is None:
            self.settings = PlatformSettingsRecord(id=_new_id(), **self._settings_defaults)
        return self.settings

    def upsert_platform_settings(self, changes: dict) -> PlatformSettingsRecord:
        current = self.get_platform_settings()
        self.settings = replace(
            current, **_pick(changes, SETTINGS_FIELDS), updated_at=_now()
        )
        return self.settings

    def create_session(self, user_id: str, expires_at: datetime) -> SessionRecord:
        record = SessionRecord(id=_new_id(), user_id=user_id, expires_at=expires_at)
        self.sessions[record.id] = record
        return record

    def get_session(self, session_id: str) -> Optional[SessionRecord]:
        return self.sessions.get(session_id)

    def revoke_session(self, session_id: str) -> None:
        record = self.sessions.get(session_id)
        if record and not record.is_revoked:
            record.revoked_at = _now()

    def revoke_sessions_for_user(self, user_id: str) -> int:
        revoked = 0
        for record in self.sessions.values():
            if record.user_id == user_id and not record.is_revoked:
                record.revoked_at = _now()
                revoked += 1
        return revoked


class PostgresDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(
        self,
        database_url: str,
        *,
        default_partner_link: Optional[str] = None,
        default_wallet_address: Optional[str] = None,
        default_bot_username: Optional[str] = None,
    ):
        if not database_url:
            raise ValueError("DATABASE_URL is required for PostgresDbClient")
        engine_kwargs: dict[str, Any] = {"future": True, "pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs["pool_recycle"] = 1800
        self.engine = create_engine(database_url, **engine_kwargs)
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        self._settings_defaults = {
            "fbs_partner_link": default_partner_link,
            "usdt_wallet_address": default_wallet_address,
            "telegram_bot_username": default_bot_username,
        }
        Base.metadata.create_all(self.engine)

    @staticmethod
    def _to_identity(row: "IdentityRow") -> IdentityRecord:
        return IdentityRecord(
            id=row.id,
            email=row.email,
            password_hash=row.password_hash,
            raw_user_meta_data=dict(row.raw_user_meta_data or {}),
            created_at=_aware(row.created_at),
        )

    @staticmethod
    def _to_profile(row: "ProfileRow") -> ProfileRecord:
        return ProfileRecord(
            id=row.id,
            user_id=row.user_id,
            full_name=row.full_name,
            telegram_handle=row.telegram_handle,
            created_at=_aware(row.created_at),
            updated_at=_aware(row.updated_at),
        )

    @staticmethod
    def _to_account(row: "TradingAccountRow") -> TradingAccountRecord:
        return TradingAccountRecord(
            id=row.id,
            user_id=row.user_id,
            account_id=row.account_id,
            password=row.password,
            server=row.server,
            initial_deposit=row.initial_deposit,
            current_balance=row.current_balance,
            profit_target_reached=bool(row.profit_target_reached),
            commission_paid=bool(row.commission_paid),
            created_at=_aware(row.created_at),
            updated_at=_aware(row.updated_at),
        )

    @staticmethod
    def _to_role(row: "RoleAssignmentRow") -> RoleAssignmentRecord:
        return RoleAssignmentRecord(
            id=row.id,
            user_id=row.user_id,
            role=AppRole(row.role),
            created_at=_aware(row.created_at),
        )

    @staticmethod
    def _to_settings(row: "PlatformSettingsRow") -> PlatformSettingsRecord:
        return PlatformSettingsRecord(
            id=row.id,
            fbs_partner_link=row.fbs_partner_link,
            usdt_wallet_address=row.usdt_wallet_address,
            telegram_bot_username=row.telegram_bot_username,
            updated_at=_aware(row.updated_at),
        )

    @staticmethod
    def _to_session(row: "SessionRow") -> SessionRecord:
        return SessionRecord(
            id=row.id,
            user_id=row.user_id,
            issued_at=_aware(row.issued_at),
            expires_at=_aware(row.expires_at),
            revoked_at=_aware(row.revoked_at),
        )

    def create_identity(
        self, email: str, password_hash: str, metadata: Optional[dict] = None
    ) -> IdentityRecord:
        now = _now()
        identity_id = _new_id()
        with self.Session() as session:
            existing = session.execute(
                select(IdentityRow.id).where(IdentityRow.email == email.lower())
            ).scalar_one_or_none()
            if existing:
                raise ConflictError("User already registered")
            identity = IdentityRow(
                id=identity_id,
                email=email.lower(),
                password_hash=password_hash,
                raw_user_meta_data=dict(metadata or {}),
                created_at=now,
            )
            session.add(identity)
            # Profile and default role commit together with the identity or not at all.
            session.add(
                ProfileRow(
                    id=_new_id(),
                    user_id=identity_id,
                    created_at=now,
                    updated_at=now,
                    **profile_values_from_metadata(metadata),
                )
            )
            session.add(
                RoleAssignmentRow(
                    id=_new_id(),
                    user_id=identity_id,
                    role=AppRole.USER.value,
                    created_at=now,
                )
            )
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise ConflictError("User already registered") from exc
            return self._to_identity(identity)

    def get_identity(self, user_id: str) -> Optional[IdentityRecord]:
        with self.Session() as session:
            row = session.get(IdentityRow, user_id)
            return self._to_identity(row) if row else None

    def get_identity_by_email(self, email: str) -> Optional[IdentityRecord]:
        with self.Session() as session:
            row = session.execute(
                select(IdentityRow).where(IdentityRow.email == email.lower())
            ).scalar_one_or_none()
            return self._to_identity(row) if row else None

    def list_identities(self) -> list[IdentityRecord]:
        with self.Session() as session:
            rows = session.execute(
                select(IdentityRow).order_by(IdentityRow.created_at.asc())
            ).scalars()
            return [self._to_identity(row) for row in rows]

    def get_profile_by_user(self, user_id: str) -> Optional[ProfileRecord]:
        with self.Session() as session:
            row = session.execute(
                select(ProfileRow).where(ProfileRow.user_id == user_id)
            ).scalar_one_or_none()
            return self._to_profile(row) if row else None

    def list_profiles(self) -> list[ProfileRecord]:
        with self.Session() as session:
            rows = session.execute(
                select(ProfileRow).order_by(ProfileRow.created_at.asc())
            ).scalars()
            return [self._to_profile(row) for row in rows]

    def update_profile(self, user_id: str, changes: dict) -> Optional[ProfileRecord]:
        with self.Session() as session:
            row = session.execute(
                select(ProfileRow).where(ProfileRow.user_id == user_id)
            ).scalar_one_or_none()
            if not row:
                return None
            for key, value in _pick(changes, PROFILE_FIELDS).items():
                setattr(row, key, value)
            row.updated_at = _now()
            session.commit()
            return self._to_profile(row)

    def insert_trading_account(
        self, record: TradingAccountRecord
    ) -> TradingAccountRecord:
        with self.Session() as session:
            row = TradingAccountRow(
                id=record.id,
                user_id=record.user_id,
                account_id=record.account_id,
                password=record.password,
                server=record.server,
                initial_deposit=record.initial_deposit,
                current_balance=record.current_balance,
                profit_target_reached=record.profit_target_reached,
                commission_paid=record.commission_paid,
                created_at=record.created_at,
                updated_at=record.updated_at,
            )
            session.add(row)
            session.commit()
            return self._to_account(row)

    def get_trading_account(self, account_pk: str) -> Optional[TradingAccountRecord]:
        with self.Session() as session:
            row = session.get(TradingAccountRow, account_pk)
            return self._to_account(row) if row else None

    def list_trading_accounts(
        self, user_id: Optional[str] = None
    ) -> list[TradingAccountRecord]:
        with self.Session() as session:
            stmt = select(TradingAccountRow).order_by(
                TradingAccountRow.created_at.desc()
            )
            if user_id is not None:
                stmt = stmt.where(TradingAccountRow.user_id == user_id)
            return [self._to_account(row) for row in session.execute(stmt).scalars()]

    def update_trading_account(
        self, account_pk: str, changes: dict
    ) -> Optional[TradingAccountRecord]:
        with self.Session() as session:
            row = session.get(TradingAccountRow, account_pk)
            if not row:
                return None
            for key, value in _pick(changes, TRADING_ACCOUNT_FIELDS).items():
                setattr(row, key, value)
            row.updated_at = _now()
            session.commit()
            return self._to_account(row)

    def list_roles(self, user_id: Optional[str] = None) -> list[RoleAssignmentRecord]:
        with self.Session() as session:
            stmt = select(RoleAssignmentRow).order_by(RoleAssignmentRow.created_at.asc())
            if user_id is not None:
                stmt = stmt.where(RoleAssignmentRow.user_id == user_id)
            return [self._to_role(row) for row in session.execute(stmt).scalars()]

    def insert_role(self, user_id: str, role: AppRole) -> RoleAssignmentRecord:
        with self.Session() as session:
            row = RoleAssignmentRow(
                id=_new_id(),
                user_id=user_id,
                role=AppRole(role).value,
                created_at=_now(),
            )
            session.add(row)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise ConflictError(
                    f"Role '{AppRole(role).value}' already assigned"
                ) from exc
            return self._to_role(row)

    def delete_role(self, user_id: str, role: AppRole) -> bool:
        with self.Session() as session:
            result = session.execute(
                delete(RoleAssignmentRow).where(
                    RoleAssignmentRow.user_id == user_id,
                    RoleAssignmentRow.role == AppRole(role).value,
                )
            )
            session.commit()
            return bool(result.rowcount)

    def _settings_row(self, session: Session) -> "PlatformSettingsRow":
        row = session.execute(
            select(PlatformSettingsRow).order_by(PlatformSettingsRow.id).limit(1)
        ).scalar_one_or_none()
        if row is None:
            row = PlatformSettingsRow(id=_new_id(), updated_at=_now(), **self._settings_defaults)
            session.add(row)
            session.commit()
        return row

    def get_platform_settings(self) -> PlatformSettingsRecord:
        with self.Session() as session:
            return self._to_settings(self._settings_row(session))

    def upsert_platform_settings(self, changes: dict) -> PlatformSettingsRecord:
        with self.Session() as session:
            row = self._settings_row(session)
            for key, value in _pick(changes, SETTINGS_FIELDS).items():
                setattr(row, key, value)
            row.updated_at = _now()
            session.commit()
            return self._to_settings(row)

    def create_session(self, user_id: str, expires_at: datetime) -> SessionRecord:
        with self.Session() as session:
            row = SessionRow(
                id=_new_id(),
                user_id=user_id,
                issued_at=_now(),
                expires_at=expires_at,
            )
            session.add(row)
            session.commit()
            return self._to_session(row)

    def get_session(self, session_id: str) -> Optional[SessionRecord]:
        with self.Session() as session:
            row = session.get(SessionRow, session_id)
            return self._to_session(row) if row else None

    def revoke_session(self, session_id: str) -> None:
        with self.Session() as session:
            session.execute(
                update(SessionRow)
                .where(SessionRow.id == session_id, SessionRow.revoked_at.is_(None))
                .values(revoked_at=_now())
            )
            session.commit()

    def revoke_sessions_for_user(self, user_id: str) -> int:
        with self.Session() as session:
            result = session.execute(
                update(SessionRow)
                .where(SessionRow.user_id == user_id, SessionRow.revoked_at.is_(None))
                .values(revoked_at=_now())
            )
            session.commit()
            return result.rowcount or 0


Base = declarative_base()


class IdentityRow(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    raw_user_meta_data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False)


class ProfileRow(Base):
    __tablename__ = "profiles"

    id = Column(String, primary_key=True)
    user_id = Column(
        String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    full_name = Column(String, nullable=False)
    telegram_handle = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class TradingAccountRow(Base):
    __tablename__ = "mt5_accounts"

    id = Column(String, primary_key=True)
    user_id = Column(
        String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    account_id = Column(String, nullable=False)
    password = Column(String, nullable=False)
    server = Column(String, nullable=False)
    initial_deposit = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    current_balance = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    profit_target_reached = Column(Boolean, default=False)
    commission_paid = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class RoleAssignmentRow(Base):
    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role", name="user_roles_user_id_role_key"),)

    id = Column(String, primary_key=True)
    user_id = Column(
        String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)


class PlatformSettingsRow(Base):
    __tablename__ = "admin_settings"

    id = Column(String, primary_key=True)
    fbs_partner_link = Column(String, nullable=True)
    usdt_wallet_address = Column(String, nullable=True)
    telegram_bot_username = Column(String, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class SessionRow(Base):
    __tablename__ = "sessions"

    id = Column(String, primary_key=True)
    user_id = Column(
        String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    issued_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    revoked_at = Column(DateTime(timezone=True), nullable=True)
