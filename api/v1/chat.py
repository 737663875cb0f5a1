from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.schemas.errors import ERROR_RESPONSES
from app.chat.contracts import ChatRequest, ChatResponse
from app.services.chat_service import handle_chat
from db.deps import get_db

router = APIRouter(tags=["chat"])
logger = logging.getLogger(__name__)


@router.post("/chat", response_model=ChatResponse, responses=ERROR_RESPONSES)
def chat(req: ChatRequest, db: Session = Depends(get_db)) -> ChatResponse:
    logger.info("chat called message_len=%s", len(req.message))
    return handle_chat(db, message=req.message, wallet_id=req.wallet_id)
