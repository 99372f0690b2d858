"""
Service layer exports.
"""
from .account_service import AccountService, account_service

__all__ = ["AccountService", "account_service"]
