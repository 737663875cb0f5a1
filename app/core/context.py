from __future__ import annotations

from contextvars import ContextVar
from typing import Optional

request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
wallet_id_ctx: ContextVar[Optional[str]] = ContextVar("wallet_id", default=None)


def set_request_id(request_id: Optional[str]) -> None:
    request_id_ctx.set(request_id)


def get_request_id() -> Optional[str]:
    return request_id_ctx.get()


def set_wallet_id(wallet_id: Optional[str]) -> None:
    wallet_id_ctx.set(wallet_id)


def get_wallet_id() -> Optional[str]:
    return wallet_id_ctx.get()
