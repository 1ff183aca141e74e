"""
Input checks that run before anything is sent to the store.
"""

from __future__ import annotations

import math
from typing import Optional

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from tradedesk.errors import ValidationError
from tradedesk.schemas import (
    SignInRequest,
    SignUpRequest,
    TradingAccountCreate,
    TradingAccountUpdate,
)

MISSING_FIELDS = "Please fill in all fields."

# Amounts are stored as DECIMAL(10,2).
MAX_AMOUNT = 100_000_000

_email_adapter = TypeAdapter(EmailStr)


def _blank(*values: Optional[str]) -> bool:
    return any(not (value or "").strip() for value in values)


def normalize_email(email: str) -> str:
    try:
        _email_adapter.validate_python(email.strip())
    except PydanticValidationError as exc:
        raise ValidationError("Please enter a valid email address.") from exc
    return email.strip().lower()


def check_sign_up(payload: SignUpRequest, min_password_length: int) -> None:
    if _blank(payload.full_name, payload.email, payload.telegram_handle, payload.password):
        raise ValidationError(MISSING_FIELDS)
    if payload.password != payload.confirm_password:
        raise ValidationError("Passwords do not match.")
    if len(payload.password) < min_password_length:
        raise ValidationError(
            f"Password must be at least {min_password_length} characters long."
        )
    if payload.has_trading_account is None:
        raise ValidationError("Do you already have a trading account?")
    normalize_email(payload.email)


def check_sign_in(payload: SignInRequest) -> None:
    if _blank(payload.email, payload.password):
        raise ValidationError(MISSING_FIELDS)


def check_trading_account(payload: TradingAccountCreate) -> float:
    """Validate a submitted account and return its initial deposit."""
    if _blank(payload.account_id, payload.password, payload.server) or payload.initial_deposit is None:
        raise ValidationError(MISSING_FIELDS)
    deposit = payload.initial_deposit
    if math.isnan(deposit) or not 0 < deposit < MAX_AMOUNT:
        raise ValidationError("Please enter a valid initial deposit amount.")
    return deposit


def account_changes(payload: TradingAccountUpdate) -> dict:
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise ValidationError("No changes supplied.")
    balance = changes.get("current_balance")
    if balance is not None and (math.isnan(balance) or not 0 <= balance < MAX_AMOUNT):
        raise ValidationError("Please enter a valid balance.")
    return changes
