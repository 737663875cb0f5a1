from __future__ import annotations

import logging
from typing import Any

from web3 import Web3

from app.config import get_settings
from app.core.errors import ConfigurationError, InvalidRequestError, UpstreamError
from chain.chains import UnsupportedChainError, get_rpc_url
from chain.safe_deploy import DEFAULT_THRESHOLD, build_deployment_transaction
from chain.safe_service import SafeServiceClient, SafeServiceError
from chain.safe_tx import signer_address

logger = logging.getLogger(__name__)


def _checksum_owner(owner_address: str) -> str:
    if not owner_address or not Web3.is_address(owner_address):
        raise InvalidRequestError("ownerAddress must be a valid address", details={"ownerAddress": owner_address})
    return Web3.to_checksum_address(owner_address)


def _agent_address() -> str:
    settings = get_settings()
    if not settings.AGENT_PRIVATE_KEY:
        raise ConfigurationError("Server misconfiguration: AGENT_PRIVATE_KEY not set")
    try:
        return signer_address(settings.AGENT_PRIVATE_KEY)
    except Exception as e:
        raise ConfigurationError("Server misconfiguration: AGENT_PRIVATE_KEY is invalid") from e


def build_wallet_deployment(owner_address: str) -> dict[str, Any]:
    """
    Deployment transaction for a 2-of-2 Safe owned by the delegated signer
    and the user. The user's wallet sends it; nothing is broadcast here.
    """
    settings = get_settings()
    owner = _checksum_owner(owner_address)
    agent = _agent_address()
    try:
        get_rpc_url(settings.chain_id)
    except UnsupportedChainError as e:
        raise ConfigurationError("Server misconfiguration: RPC_URL not set") from e
    if owner.lower() == agent.lower():
        raise InvalidRequestError("ownerAddress must differ from the service signer")

    tx = build_deployment_transaction(
        chain_id=settings.chain_id,
        owners=[agent, owner],
        threshold=DEFAULT_THRESHOLD,
    )
    logger.info("built safe deployment owner=%s chain=%s", owner, settings.chain_id)
    return tx


def find_shared_safe(
    owner_address: str,
    *,
    safe_client: SafeServiceClient | None = None,
) -> dict[str, Any] | None:
    """
    The first Safe owned by `owner_address` that also lists the delegated
    signer as an owner, or None.
    """
    settings = get_settings()
    owner = _checksum_owner(owner_address)
    agent = _agent_address().lower()

    try:
        client = safe_client or SafeServiceClient(chain_id=settings.chain_id)
        for safe in client.get_safes_by_owner(owner):
            info = client.get_safe_info(safe)
            owners = [str(o).lower() for o in info.get("owners") or []]
            if agent in owners:
                return {
                    "address": info.get("address"),
                    "threshold": info.get("threshold"),
                    "owners": info.get("owners") or [],
                    "modules": info.get("modules") or [],
                }
    except (SafeServiceError, UnsupportedChainError) as e:
        raise UpstreamError("Safe lookup failed", details=str(e)) from e
    return None
