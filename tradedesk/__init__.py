"""
Trading-account management service.

This package provides a FastAPI application with a policy-checked data layer
over a pluggable store (SQLAlchemy or in-memory), so users can register,
submit MT5 accounts, and administrators can track balances and commission.
"""
