from __future__ import annotations

from datetime import timedelta
from unittest.mock import patch

import pytest

from db.models.chat_turn import ChatRole, ChatTurn
from db.repos.chat_turns_repo import append_exchange, append_turn, count_turns, recent_history
from db.utils.time import utcnow

WALLET = "0x1111111111111111111111111111111111111111"
OTHER_WALLET = "0x3333333333333333333333333333333333333333"


def test_append_turn_creates_row(db):
    turn = append_turn(db, wallet_id=WALLET, role="user", content="hello")

    assert turn.id is not None
    assert turn.wallet_id == WALLET
    assert turn.role == ChatRole.USER.value
    assert turn.created_at is not None


def test_append_turn_rejects_unknown_role(db):
    with pytest.raises(ValueError):
        append_turn(db, wallet_id=WALLET, role="system", content="hi")
    assert count_turns(db, wallet_id=WALLET) == 0


def test_append_turn_rejects_empty_content(db):
    with pytest.raises(ValueError):
        append_turn(db, wallet_id=WALLET, role="user", content="")


def test_append_exchange_writes_both_turns_in_order(db):
    user_turn, assistant_turn = append_exchange(
        db,
        wallet_id=WALLET,
        user_content="what's up?",
        assistant_content='{"action": "reply", "text": "not much"}',
    )

    assert user_turn.id < assistant_turn.id
    history = recent_history(db, wallet_id=WALLET)
    assert [t.role for t in history] == ["user", "assistant"]


def test_append_exchange_is_all_or_nothing(db):
    with pytest.raises(ValueError):
        append_exchange(db, wallet_id=WALLET, user_content="hello", assistant_content="")
    assert count_turns(db, wallet_id=WALLET) == 0


def test_recent_history_is_chronological_and_bounded(db):
    base = utcnow()
    for i in range(15):
        db.add(
            ChatTurn(
                wallet_id=WALLET,
                role="user" if i % 2 == 0 else "assistant",
                content=f"msg {i}",
                created_at=base + timedelta(seconds=i),
            )
        )
    db.commit()

    history = recent_history(db, wallet_id=WALLET, limit=10)

    assert len(history) == 10
    assert [t.content for t in history] == [f"msg {i}" for i in range(5, 15)]
    timestamps = [t.created_at for t in history]
    assert timestamps == sorted(timestamps)


def test_recent_history_is_scoped_per_wallet(db):
    append_exchange(db, wallet_id=WALLET, user_content="a", assistant_content="b")
    append_exchange(db, wallet_id=OTHER_WALLET, user_content="c", assistant_content="d")

    history = recent_history(db, wallet_id=OTHER_WALLET)

    assert [t.content for t in history] == ["c", "d"]


def test_recent_history_zero_limit(db):
    append_turn(db, wallet_id=WALLET, role="user", content="a")
    assert recent_history(db, wallet_id=WALLET, limit=0) == []


def test_count_turns_wraps_store_failures(db):
    from sqlalchemy.exc import OperationalError

    from app.core.errors import StorageError

    failure = OperationalError("SELECT count(*)", {}, Exception("database is locked"))
    with patch.object(db, "execute", side_effect=failure):
        with pytest.raises(StorageError):
            count_turns(db, wallet_id=WALLET)
