"""
app/repositories/user_settings_repository.py

Key/value JSON documents stored in ``user_settings``.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.orm import Session

from db.models.user_setting import SETTING_KEY_CONSTRAINT, UserSetting


class UserSettingsRepository:
    """
    Whole-document reads and replacements by setting key.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_key(self, key: str) -> dict[str, Any] | None:
        stmt = select(UserSetting.setting_value).where(UserSetting.setting_key == key)
        value = self._session.execute(stmt).scalars().first()
        return dict(value) if value is not None else None

    def upsert_by_key(self, key: str, value: dict[str, Any]) -> None:
        stmt = pg_insert(UserSetting).values(
            id=uuid.uuid4(),
            setting_key=key,
            setting_value=value,
        )
        self._session.execute(
            stmt.on_conflict_do_update(
                constraint=SETTING_KEY_CONSTRAINT,
                set_={
                    "setting_value": stmt.excluded.setting_value,
                    "updated_at": func.now(),
                },
            )
        )
