from __future__ import annotations

import logging
from typing import Any

from web3 import Web3

from chain import rpc
from chain.chains import UnsupportedChainError
from chain.tokens import format_units, supported_tokens

logger = logging.getLogger(__name__)


def get_balances_fact(safe_address: str, chain_id: int) -> list[dict[str, Any]] | None:
    """
    Live balances of the supported tokens held by the multisig, formatted
    for the model context. Returns None when they cannot be read; the chat
    continues without the fact.
    """
    if not Web3.is_address(safe_address):
        return None

    balances: list[dict[str, Any]] = []
    for token in supported_tokens(chain_id):
        try:
            raw = int(rpc.erc20_balance(chain_id, token.address, safe_address))
        except (rpc.Web3RPCError, UnsupportedChainError) as e:
            logger.warning("balance lookup failed token=%s error=%s", token.symbol, e)
            return None
        balances.append(
            {
                "symbol": token.symbol,
                "token": token.address,
                "raw": str(raw),
                "balance": format_units(raw, token.decimals),
            }
        )
    return balances
