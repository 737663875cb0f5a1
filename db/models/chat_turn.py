from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base
from db.utils.time import utcnow


class ChatRole(enum.Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ChatTurn(Base):
    __tablename__ = "chat_turns"
    __table_args__ = (
        CheckConstraint("role IN ('user', 'assistant')", name="ck_chat_turns_role"),
        CheckConstraint("length(content) > 0", name="ck_chat_turns_content"),
        Index("ix_chat_turns_wallet_created", "wallet_id", "created_at"),
    )

    # autoincrement id breaks ties between turns written in the same instant
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    wallet_id: Mapped[str] = mapped_column(String(128), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
