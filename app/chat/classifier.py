from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Sequence

from pydantic import TypeAdapter, ValidationError

from app.chat.balances import get_balances_fact
from app.chat.contracts import LEGACY_ACTION_TAGS, ClassifiedAction, PlainReply
from app.config import get_settings
from app.core.errors import ClassificationError
from chain.chains import get_network
from chain.safe_tx import normalize_safe_address
from chain.tokens import supported_tokens
from db.models.chat_turn import ChatTurn
from llm.client import LLMClient
from llm.prompts import build_chat_messages

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^\s*```[a-zA-Z]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)

_ACTION_ADAPTER: TypeAdapter = TypeAdapter(ClassifiedAction)


@dataclass
class Classification:
    raw_text: str
    action: Any  # one of the ClassifiedAction variants


def strip_code_fence(text: str) -> str:
    """Body of a fenced code block; any other text is returned unchanged."""
    match = _FENCE_RE.match(text or "")
    if match:
        return match.group(1).strip()
    return text or ""


def _normalize_payload(data: dict[str, Any]) -> dict[str, Any]:
    data = dict(data)
    tag = data.get("action")
    if tag is None:
        tag = data.pop("acao", None)
    if not isinstance(tag, str):
        raise ClassificationError("model output has no action tag")
    tag = tag.strip().lower()
    data["action"] = LEGACY_ACTION_TAGS.get(tag, tag)
    return data


def decode_action(raw_text: str):
    """
    Strictly decode model output into a typed action.
    Raises ClassificationError for anything that is not a known action.
    """
    text = strip_code_fence(raw_text)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ClassificationError("model output is not JSON") from e
    if not isinstance(data, dict):
        raise ClassificationError("model output is not a JSON object")
    try:
        return _ACTION_ADAPTER.validate_python(_normalize_payload(data))
    except ValidationError as e:
        raise ClassificationError("model output does not match an action schema", details=str(e)) from e


def parse_action(raw_text: str):
    """
    Lenient decode: any output that is not a known action becomes a
    PlainReply carrying the (fence-stripped) text.
    """
    try:
        return decode_action(raw_text)
    except ClassificationError as e:
        logger.info("classifier output downgraded to plain reply: %s", e)
        return PlainReply(text=strip_code_fence(raw_text))


def _supported_assets(chain_id: int) -> list[dict[str, Any]]:
    network = get_network(chain_id)
    return [
        {"network": network.name, "symbol": t.symbol, "address": t.address}
        for t in supported_tokens(chain_id)
    ]


def classify_message(
    *,
    message: str,
    wallet_id: str,
    history: Sequence[ChatTurn],
    llm_client: LLMClient | None = None,
) -> Classification:
    """
    One model call: fixed instruction + multisig/balance facts + history +
    the new message. ServiceError from the model call propagates.
    """
    settings = get_settings()
    client = llm_client or LLMClient.from_settings(settings)

    balances = None
    if settings.chat_include_balances:
        balances = get_balances_fact(normalize_safe_address(wallet_id), settings.chain_id)

    messages = build_chat_messages(
        message=message,
        multisig_address=wallet_id,
        history=[{"role": turn.role, "content": turn.content} for turn in history],
        supported_assets=_supported_assets(settings.chain_id),
        balances=balances,
    )
    raw_text = client.complete(messages)
    action = parse_action(raw_text)
    logger.info("classified message action=%s history_len=%s", action.action, len(history))
    return Classification(raw_text=raw_text, action=action)
