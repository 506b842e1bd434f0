"""
db/models/user_setting.py

Key/value JSON documents (channel statistics, daily import configuration).
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin

SETTING_KEY_CONSTRAINT = "uq_user_settings_setting_key"


class UserSetting(Base, TimestampMixin):
    __tablename__ = "user_settings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    setting_key: Mapped[str] = mapped_column(
        String(120),
        nullable=False,
        comment="Logical document key, e.g. channel_statistics",
    )
    setting_value: Mapped[dict[str, Any]] = mapped_column(
        JSONB,
        nullable=False,
        comment="Whole-document value; replaced on every write",
    )

    __table_args__ = (
        UniqueConstraint("setting_key", name=SETTING_KEY_CONSTRAINT),
    )
