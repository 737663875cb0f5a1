from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Dict

from app.config import get_settings


class UnsupportedChainError(ValueError):
    pass


@dataclass(frozen=True)
class Network:
    chain_id: int
    short_name: str  # Safe{Wallet} chain prefix, e.g. "base" in base:0x...
    name: str
    aliases: tuple[str, ...] = field(default_factory=tuple)


NETWORKS: Dict[int, Network] = {
    1: Network(1, "eth", "Ethereum", ("ethereum", "eth", "mainnet", "ethereum mainnet")),
    10: Network(10, "oeth", "Optimism", ("optimism", "op", "op mainnet")),
    137: Network(137, "matic", "Polygon", ("polygon", "matic", "polygon pos")),
    8453: Network(8453, "base", "Base", ("base", "base mainnet")),
    42161: Network(42161, "arb1", "Arbitrum One", ("arbitrum", "arbitrum one", "arb")),
    84532: Network(84532, "basesep", "Base Sepolia", ("base sepolia",)),
    11155111: Network(11155111, "sep", "Sepolia", ("sepolia", "eth sepolia")),
}

SAFE_TX_SERVICE_BASE = "https://api.safe.global/tx-service"


def get_network(chain_id: int) -> Network:
    network = NETWORKS.get(int(chain_id))
    if network is None:
        raise UnsupportedChainError(f"Unsupported chain_id: {chain_id}")
    return network


def resolve_network(value: str | int | None) -> Network:
    """
    Map a user/model supplied network label ("Base", "base mainnet", "8453")
    to a known network.
    """
    if value is None:
        raise UnsupportedChainError("network is required")
    label = str(value).strip().lower()
    if not label:
        raise UnsupportedChainError("network is required")
    if label.isdigit():
        return get_network(int(label))
    for network in NETWORKS.values():
        if label == network.short_name or label == network.name.lower() or label in network.aliases:
            return network
    raise UnsupportedChainError(f"Unsupported network: {value}")


def _load_rpc_urls() -> Dict[int, str]:
    """
    Load RPC URLs from settings.

    Expected env format:
      RPC_URLS='{"1":"https://eth.llamarpc.com","8453":"https://mainnet.base.org"}'
    RPC_URL, when set, serves the default CHAIN_ID.
    """
    settings = get_settings()

    rpc_urls: Dict[int, str] = {}
    if settings.RPC_URL:
        rpc_urls[settings.chain_id] = settings.RPC_URL.rstrip("/")

    raw = settings.RPC_URLS
    if not raw:
        return rpc_urls

    try:
        data = json.loads(raw)
    except Exception as e:
        raise ValueError("RPC_URLS must be valid JSON") from e

    for k, v in data.items():
        try:
            chain_id = int(k)
        except ValueError:
            raise ValueError(f"Invalid chain_id key in RPC_URLS: {k}")

        if not isinstance(v, str) or not v:
            raise ValueError(f"Invalid RPC URL for chain {chain_id}")

        rpc_urls[chain_id] = v.rstrip("/")

    return rpc_urls


def get_rpc_url(chain_id: int) -> str:
    """
    Return RPC URL for a given chain_id.
    Raises UnsupportedChainError if not configured.
    """
    rpc_url = _load_rpc_urls().get(int(chain_id))
    if not rpc_url:
        raise UnsupportedChainError(f"No RPC URL configured for chain_id: {chain_id}")
    return rpc_url


def get_safe_tx_service_url(chain_id: int) -> str:
    settings = get_settings()
    if settings.safe_tx_service_url:
        return settings.safe_tx_service_url.rstrip("/")
    network = get_network(chain_id)
    return f"{SAFE_TX_SERVICE_BASE}/{network.short_name}"


def safe_queue_link(chain_id: int, safe_address: str) -> str:
    """Deep link into the Safe{Wallet} transaction queue for one Safe."""
    settings = get_settings()
    network = get_network(chain_id)
    base = settings.safe_app_url.rstrip("/")
    return f"{base}/transactions/queue?safe={network.short_name}:{safe_address}"
