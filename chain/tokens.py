from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Any

from web3 import Web3

from app.config import get_settings
from chain.abis import ERC20_ABI

MAX_UINT256 = 2**256 - 1


class UnsupportedTokenError(ValueError):
    pass


@dataclass(frozen=True)
class TokenMeta:
    symbol: str
    address: str
    decimals: int


def _token_meta(symbol: str, meta: dict[str, Any]) -> TokenMeta:
    address = meta.get("address")
    decimals = meta.get("decimals")
    if not address or decimals is None:
        raise UnsupportedTokenError(f"invalid token metadata for {symbol}")
    return TokenMeta(
        symbol=symbol.upper(),
        address=Web3.to_checksum_address(address),
        decimals=int(decimals),
    )


def supported_tokens(chain_id: int) -> list[TokenMeta]:
    settings = get_settings()
    return [
        _token_meta(symbol, meta)
        for symbol, meta in sorted(settings.supported_tokens_for_chain(chain_id).items())
    ]


def find_supported_token(chain_id: int, asset: str) -> TokenMeta:
    """
    Look up a supported token by contract address (case-insensitive) or by
    symbol. Raises UnsupportedTokenError for anything else.
    """
    value = (asset or "").strip()
    if not value:
        raise UnsupportedTokenError("asset is required")
    for token in supported_tokens(chain_id):
        if value.lower() == token.address.lower() or value.upper() == token.symbol:
            return token
    raise UnsupportedTokenError(f"token not supported on chain {chain_id}: {asset}")


def to_base_units(amount: str | int | float | Decimal, decimals: int) -> int:
    """
    Convert a human decimal amount into integer base units, truncating any
    precision beyond `decimals`.
    """
    try:
        dec = Decimal(str(amount).strip())
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"invalid amount: {amount}") from exc
    if not dec.is_finite() or dec <= 0:
        raise ValueError(f"amount must be positive: {amount}")
    quant = Decimal(10) ** decimals
    try:
        base_units = int((dec * quant).to_integral_value(rounding=ROUND_DOWN))
    except ArithmeticError as exc:
        raise ValueError(f"invalid amount: {amount}") from exc
    if base_units <= 0:
        raise ValueError("amount too small after decimals conversion")
    if base_units > MAX_UINT256:
        raise ValueError("amount too large for a token transfer")
    return base_units


def format_units(raw: int, decimals: int) -> str:
    if decimals <= 0:
        return str(raw)
    scale = 10 ** decimals
    whole = raw // scale
    frac = str(raw % scale).rjust(decimals, "0").rstrip("0")
    if not frac:
        return str(whole)
    return f"{whole}.{frac}"


def encode_transfer_data(token_address: str, recipient: str, amount: int) -> str:
    """ERC20 transfer(recipient, amount) call data as a 0x hex string."""
    w3 = Web3()
    contract = w3.eth.contract(address=Web3.to_checksum_address(token_address), abi=ERC20_ABI)
    return contract.encode_abi("transfer", args=[Web3.to_checksum_address(recipient), int(amount)])
