"""
Commission milestone bookkeeping for trading accounts.

An account moves from active, to target reached with commission due, to
commission paid. Transitions are plain field updates made by an
administrator; nothing here sets a flag on its own.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from tradedesk.db import TradingAccountRecord
from tradedesk.errors import ValidationError
from tradedesk.types import CommissionStatus

logger = logging.getLogger(__name__)

BADGE_DUE = "Commission Due"
BADGE_PAID = "Commission Paid"


def commission_status(account: TradingAccountRecord) -> CommissionStatus:
    if account.commission_paid and not account.profit_target_reached:
        return CommissionStatus.INCONSISTENT
    if not account.profit_target_reached:
        return CommissionStatus.ACTIVE
    if account.commission_paid:
        return CommissionStatus.PAID
    return CommissionStatus.DUE


def badge(account: TradingAccountRecord) -> Optional[str]:
    """Badge text shown next to an account, only once the target is reached."""
    if not account.profit_target_reached:
        return None
    return BADGE_PAID if account.commission_paid else BADGE_DUE


def profit(account: TradingAccountRecord) -> float:
    return (account.current_balance or 0.0) - (account.initial_deposit or 0.0)


def profit_percentage(account: TradingAccountRecord) -> float:
    if not account.initial_deposit:
        return 0.0
    return profit(account) / account.initial_deposit * 100


def commission_amount(account: TradingAccountRecord, rate: float) -> float:
    return max(profit(account), 0.0) * rate


def target_suggested(account: TradingAccountRecord, multiple: float) -> bool:
    """
    True when the balance has reached ``multiple`` times the deposit but the
    latch is still unset. Advisory only; the flag stays a manual decision.
    """
    if account.profit_target_reached or not account.initial_deposit:
        return False
    return (account.current_balance or 0.0) >= account.initial_deposit * multiple


def check_transition(before: TradingAccountRecord, changes: dict) -> None:
    """
    Validate an administrator's update against the milestone rules.

    ``profit_target_reached`` is a one-way latch. Marking commission paid
    before the target is reached is accepted but logged.
    """
    if before.profit_target_reached and changes.get("profit_target_reached") is False:
        raise ValidationError("Profit target cannot be unset once reached")

    target = changes.get("profit_target_reached", before.profit_target_reached)
    paid = changes.get("commission_paid", before.commission_paid)
    if paid and not target:
        logger.warning(
            "Account %s marked commission paid without profit target reached",
            before.id,
        )


def inconsistencies(accounts: Iterable[TradingAccountRecord]) -> list[dict]:
    """Accounts whose flags disagree with the milestone order."""
    flagged = []
    for account in accounts:
        if commission_status(account) == CommissionStatus.INCONSISTENT:
            flagged.append(
                {
                    "id": account.id,
                    "account_id": account.account_id,
                    "reason": "commission_paid set while profit_target_reached is false",
                }
            )
    return flagged
