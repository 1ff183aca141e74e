"""
Closed vocabularies shared across the service.
"""

from __future__ import annotations

from enum import Enum


class AppRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class Table(str, Enum):
    PROFILES = "profiles"
    MT5_ACCOUNTS = "mt5_accounts"
    USER_ROLES = "user_roles"
    ADMIN_SETTINGS = "admin_settings"


class Action(str, Enum):
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class CommissionStatus(str, Enum):
    ACTIVE = "active"
    DUE = "due"
    PAID = "paid"
    # commission_paid set while profit_target_reached is not; flagged, never fixed
    INCONSISTENT = "inconsistent"
