"""
Row-level access policies.

Every select/insert/update/delete that a user triggers is checked here. A
table declares one or more policies; an operation is allowed when at least
one policy that covers the action holds for the caller. Denials raise
``AuthorizationError`` so callers can tell "not permitted" from "no data".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

from tradedesk.db import DbClient
from tradedesk.errors import AuthorizationError
from tradedesk.types import Action, AppRole, Table

logger = logging.getLogger(__name__)

ALL_ACTIONS = frozenset(Action)

# Columns of mt5_accounts that only an administrator may change.
ADMIN_ONLY_ACCOUNT_COLUMNS = frozenset(
    {"current_balance", "profit_target_reached", "commission_paid"}
)


def roles_of(db: DbClient, user_id: Optional[str]) -> frozenset:
    """The set of roles held by ``user_id``; empty for an anonymous caller."""
    if not user_id:
        return frozenset()
    return frozenset(assignment.role for assignment in db.list_roles(user_id))


def has_role(db: DbClient, user_id: Optional[str], role: AppRole) -> bool:
    """Return True when ``user_id`` holds ``role``. Reads only, never writes."""
    return role in roles_of(db, user_id)


@dataclass(frozen=True)
class EvaluationContext:
    """
    The caller's identity and a snapshot of its roles.

    Roles are read once when the context is built so every check made with the
    same context sees the same answer.
    """

    user_id: Optional[str]
    roles: frozenset = field(default_factory=frozenset)

    @classmethod
    def for_user(cls, db: DbClient, user_id: Optional[str]) -> "EvaluationContext":
        if not user_id:
            return cls(user_id=None)
        return cls(user_id=user_id, roles=roles_of(db, user_id))

    def has_role(self, role: AppRole) -> bool:
        return role in self.roles

    @property
    def is_admin(self) -> bool:
        return self.has_role(AppRole.ADMIN)


Predicate = Callable[[EvaluationContext, Any], bool]


def is_owner(ctx: EvaluationContext, row: Any) -> bool:
    owner = row.get("user_id") if isinstance(row, dict) else getattr(row, "user_id", None)
    return ctx.user_id is not None and owner == ctx.user_id


def role_is(role: AppRole) -> Predicate:
    def _check(ctx: EvaluationContext, row: Any) -> bool:
        return ctx.has_role(role)

    _check.__name__ = f"has_role_{role.value}"
    return _check


def public(ctx: EvaluationContext, row: Any) -> bool:
    return True


@dataclass(frozen=True)
class Policy:
    name: str
    table: Table
    actions: frozenset
    predicate: Predicate

    def applies_to(self, table: Table, action: Action) -> bool:
        return self.table == table and action in self.actions


POLICIES: tuple[Policy, ...] = (
    # profiles
    Policy("Users can view their own profile", Table.PROFILES, frozenset({Action.SELECT}), is_owner),
    Policy("Users can insert their own profile", Table.PROFILES, frozenset({Action.INSERT}), is_owner),
    Policy("Users can update their own profile", Table.PROFILES, frozenset({Action.UPDATE}), is_owner),
    Policy("Admins can manage all profiles", Table.PROFILES, ALL_ACTIONS, role_is(AppRole.ADMIN)),
    # mt5_accounts
    Policy("Admins can manage all MT5 accounts", Table.MT5_ACCOUNTS, ALL_ACTIONS, role_is(AppRole.ADMIN)),
    Policy("Users can insert their own MT5 account", Table.MT5_ACCOUNTS, frozenset({Action.INSERT}), is_owner),
    Policy("Users can view their own MT5 accounts", Table.MT5_ACCOUNTS, frozenset({Action.SELECT}), is_owner),
    # user_roles
    Policy("Admins can manage user roles", Table.USER_ROLES, ALL_ACTIONS, role_is(AppRole.ADMIN)),
    Policy("Users can view their own roles", Table.USER_ROLES, frozenset({Action.SELECT}), is_owner),
    # admin_settings
    Policy("Admins can manage settings", Table.ADMIN_SETTINGS, ALL_ACTIONS, role_is(AppRole.ADMIN)),
    Policy("Everyone can view admin settings", Table.ADMIN_SETTINGS, frozenset({Action.SELECT}), public),
)


class PolicyEngine:
    """Evaluates the declared policies for a caller."""

    def __init__(self, policies: Iterable[Policy] = POLICIES):
        self.policies = tuple(policies)

    def applicable(self, table: Table, action: Action) -> list[Policy]:
        return [policy for policy in self.policies if policy.applies_to(table, action)]

    def allows(
        self, ctx: EvaluationContext, table: Table, action: Action, row: Any = None
    ) -> bool:
        return any(
            policy.predicate(ctx, row) for policy in self.applicable(table, action)
        )

    def authorize(
        self,
        ctx: EvaluationContext,
        table: Table,
        action: Action,
        row: Any = None,
        columns: Iterable[str] = (),
    ) -> None:
        """Raise ``AuthorizationError`` unless the caller may perform the action."""
        if not self.allows(ctx, table, action, row):
            logger.warning(
                "Denied %s on %s for user %s", action.value, table.value, ctx.user_id
            )
            raise AuthorizationError(
                f"Permission denied for {action.value} on {table.value}"
            )
        if table == Table.MT5_ACCOUNTS and action == Action.UPDATE:
            guarded = ADMIN_ONLY_ACCOUNT_COLUMNS.intersection(columns)
            if guarded and not ctx.is_admin:
                logger.warning(
                    "Denied update of %s on %s for user %s",
                    ", ".join(sorted(guarded)),
                    table.value,
                    ctx.user_id,
                )
                raise AuthorizationError(
                    "Only an administrator may change balance or commission flags"
                )

    def filter_visible(self, ctx: EvaluationContext, table: Table, rows: Iterable[Any]) -> list:
        return [row for row in rows if self.allows(ctx, table, Action.SELECT, row)]


default_engine = PolicyEngine()
