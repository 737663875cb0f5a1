from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.chat.classifier import classify_message
from app.chat.contracts import ActionKind, ChatResponse, PlainReply, TransferRequest
from app.chat.validator import ValidationFailure, validate_transfer
from app.config import get_settings
from app.core.context import set_wallet_id
from app.services.transfer_service import propose_transfer
from db.repos.chat_turns_repo import append_exchange, recent_history
from llm.client import LLMClient

logger = logging.getLogger(__name__)


def handle_chat(
    db: Session,
    *,
    message: str,
    wallet_id: str,
    llm_client: LLMClient | None = None,
) -> ChatResponse:
    """
    One chat cycle: read history, classify, record both turns, dispatch.

    Both turns are written together only after the model answered, so a
    failed model call leaves the history untouched. A transfer proposal runs
    after the turns are recorded; its failure does not roll them back.
    """
    settings = get_settings()
    set_wallet_id(wallet_id)

    history = recent_history(db, wallet_id=wallet_id, limit=settings.chat_history_limit)
    classification = classify_message(
        message=message,
        wallet_id=wallet_id,
        history=history,
        llm_client=llm_client,
    )
    append_exchange(
        db,
        wallet_id=wallet_id,
        user_content=message,
        assistant_content=classification.raw_text,
    )

    action = classification.action
    if isinstance(action, PlainReply):
        return ChatResponse(reply=action.text, action=ActionKind.REPLY)

    if isinstance(action, TransferRequest) and settings.chat_auto_propose:
        if not action.multisig_address:
            action = action.model_copy(update={"multisig_address": wallet_id})
        outcome = validate_transfer(action, expected_safe=wallet_id)
        if isinstance(outcome, ValidationFailure):
            logger.info("transfer not executable missing_or_invalid=%s", outcome.fields)
            return ChatResponse(
                reply=outcome.message,
                action=ActionKind.TRANSFER,
                issues=outcome.issues,
            )
        proposal = propose_transfer(outcome)
        return ChatResponse(
            reply=f"{proposal.res}\n{proposal.link}",
            action=ActionKind.TRANSFER,
            proposal=proposal,
        )

    return ChatResponse(reply=classification.raw_text, action=ActionKind(action.action))
