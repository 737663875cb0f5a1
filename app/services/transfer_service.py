from __future__ import annotations

import logging

from web3 import Web3

from app.chat.contracts import TransferResult
from app.chat.validator import ValidatedTransfer
from app.config import get_settings
from app.core.errors import ConfigurationError, ProposalError
from chain.chains import safe_queue_link
from chain.names import resolve_recipient
from chain.safe_service import SafeServiceClient
from chain.safe_tx import OPERATION_CALL, SafeTransaction, sign_safe_tx_hash, signer_address
from chain.tokens import encode_transfer_data

logger = logging.getLogger(__name__)

PROPOSED_MESSAGE = "Transaction proposed successfully! Now click the link to approve the transaction."


def _agent_key() -> str:
    settings = get_settings()
    if not settings.AGENT_PRIVATE_KEY:
        raise ConfigurationError("AGENT_PRIVATE_KEY is not configured")
    return settings.AGENT_PRIVATE_KEY


def propose_transfer(
    transfer: ValidatedTransfer,
    *,
    safe_client: SafeServiceClient | None = None,
) -> TransferResult:
    """
    Turn a validated transfer into a signed proposal on the coordination
    service. Nothing is retried; any failing step raises ProposalError.
    """
    settings = get_settings()
    private_key = _agent_key()
    chain_id = transfer.network.chain_id
    safe_address = transfer.safe_address

    recipient = resolve_recipient(transfer.destination)
    if not Web3.is_address(recipient):
        raise ProposalError(
            "Recipient could not be resolved to an address",
            details=f"destinationAddress={transfer.destination}",
        )
    recipient = Web3.to_checksum_address(recipient)

    logger.info(
        "proposing transfer safe=%s token=%s recipient=%s amount=%s chain=%s",
        safe_address,
        transfer.token.symbol,
        recipient,
        transfer.amount_base_units,
        chain_id,
    )

    try:
        data = encode_transfer_data(transfer.token.address, recipient, transfer.amount_base_units)
        client = safe_client or SafeServiceClient(chain_id=chain_id)
        safe_tx_gas = client.estimate_safe_tx_gas(
            safe_address,
            to=transfer.token.address,
            value=0,
            data=data,
            operation=OPERATION_CALL,
        )
        nonce = client.get_next_nonce(safe_address)

        safe_tx = SafeTransaction(
            safe=safe_address,
            chain_id=chain_id,
            to=transfer.token.address,
            value=0,
            data=data,
            operation=OPERATION_CALL,
            safe_tx_gas=safe_tx_gas,
            nonce=nonce,
        )
        safe_tx_hash = Web3.to_hex(safe_tx.safe_tx_hash())
        signature = sign_safe_tx_hash(private_key, safe_tx.safe_tx_hash())
        sender = signer_address(private_key)

        client.propose_transaction(
            safe_address,
            safe_tx=safe_tx.to_service_payload(),
            safe_tx_hash=safe_tx_hash,
            sender=sender,
            signature=signature,
            origin=settings.safe_origin,
        )
    except Exception as e:
        logger.warning("transfer proposal failed safe=%s error=%s", safe_address, e)
        raise ProposalError("Transfer proposal failed", details=str(e)) from e

    logger.info("transfer proposed safe=%s nonce=%s safe_tx_hash=%s", safe_address, nonce, safe_tx_hash)
    return TransferResult(
        res=PROPOSED_MESSAGE,
        link=safe_queue_link(chain_id, safe_address),
        safeTxHash=safe_tx_hash,
        nonce=nonce,
        safeAddress=safe_address,
        recipient=recipient,
        amountBaseUnits=str(transfer.amount_base_units),
        network=transfer.network.short_name,
    )
