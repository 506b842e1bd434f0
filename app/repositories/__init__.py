"""
app/repositories package marker.
"""

from app.repositories.base import (
    CHANNEL_STATISTICS_KEY,
    DAILY_IMPORT_CONFIG_KEY,
    LedgerStore,
    SettingsStore,
    UnitOfWork,
)
from app.repositories.financial_data_repository import FinancialDataRepository
from app.repositories.memory import InMemoryLedgerStore, InMemorySettingsStore, InMemoryUnitOfWork
from app.repositories.unit_of_work import SqlAlchemyUnitOfWork
from app.repositories.user_settings_repository import UserSettingsRepository

__all__ = [
    "CHANNEL_STATISTICS_KEY",
    "DAILY_IMPORT_CONFIG_KEY",
    "FinancialDataRepository",
    "InMemoryLedgerStore",
    "InMemorySettingsStore",
    "InMemoryUnitOfWork",
    "LedgerStore",
    "SettingsStore",
    "SqlAlchemyUnitOfWork",
    "UnitOfWork",
    "UserSettingsRepository",
]
