"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.financial_data import FinancialData
from db.models.user_setting import UserSetting

__all__ = [
    "FinancialData",
    "UserSetting",
]
