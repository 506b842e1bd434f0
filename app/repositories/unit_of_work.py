"""
app/repositories/unit_of_work.py

SQLAlchemy-backed unit of work: one session, both stores, one transaction.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.repositories.financial_data_repository import FinancialDataRepository
from app.repositories.user_settings_repository import UserSettingsRepository


class SqlAlchemyUnitOfWork:
    def __init__(self, session: Session) -> None:
        self.session = session
        self.ledger = FinancialDataRepository(session)
        self.settings = UserSettingsRepository(session)

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
