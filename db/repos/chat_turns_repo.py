from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import StorageError
from db.models.chat_turn import ChatRole, ChatTurn
from db.utils.time import utcnow

DEFAULT_HISTORY_LIMIT = 10


def _new_turn(wallet_id: str, role: ChatRole | str, content: str) -> ChatTurn:
    role = ChatRole(role)
    if not wallet_id:
        raise ValueError("wallet_id is required")
    if not isinstance(content, str) or not content:
        raise ValueError("chat turn content must be non-empty")
    return ChatTurn(
        wallet_id=wallet_id,
        role=role.value,
        content=content,
        created_at=utcnow(),
    )


def _commit(db: Session, turns: list[ChatTurn]) -> list[ChatTurn]:
    try:
        db.add_all(turns)
        db.commit()
        for turn in turns:
            db.refresh(turn)
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError("Conversation store unavailable", details=str(e)) from e
    return turns


def append_turn(db: Session, *, wallet_id: str, role: ChatRole | str, content: str) -> ChatTurn:
    return _commit(db, [_new_turn(wallet_id, role, content)])[0]


def append_exchange(
    db: Session,
    *,
    wallet_id: str,
    user_content: str,
    assistant_content: str,
) -> tuple[ChatTurn, ChatTurn]:
    """
    Record one user turn and its assistant reply in a single transaction.

    Either both rows are written or neither is.
    """
    user_turn = _new_turn(wallet_id, ChatRole.USER, user_content)
    assistant_turn = _new_turn(wallet_id, ChatRole.ASSISTANT, assistant_content)
    # the reply never sorts before the message it answers
    assistant_turn.created_at = max(assistant_turn.created_at, user_turn.created_at)
    _commit(db, [user_turn, assistant_turn])
    return user_turn, assistant_turn


def recent_history(
    db: Session,
    *,
    wallet_id: str,
    limit: int = DEFAULT_HISTORY_LIMIT,
) -> list[ChatTurn]:
    """
    Most recent `limit` turns for a wallet, oldest first.
    """
    if limit <= 0:
        return []
    stmt = (
        select(ChatTurn)
        .where(
            ChatTurn.wallet_id == wallet_id,
            ChatTurn.role.in_([r.value for r in ChatRole]),
        )
        .order_by(ChatTurn.created_at.desc(), ChatTurn.id.desc())
        .limit(limit)
    )
    try:
        turns = list(db.execute(stmt).scalars().all())
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError("Conversation store unavailable", details=str(e)) from e
    turns.reverse()
    return turns


def count_turns(db: Session, *, wallet_id: str) -> int:
    stmt = select(func.count()).select_from(ChatTurn).where(ChatTurn.wallet_id == wallet_id)
    try:
        return int(db.execute(stmt).scalar_one())
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError("Conversation store unavailable", details=str(e)) from e
