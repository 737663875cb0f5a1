from __future__ import annotations

import logging

from fastapi import APIRouter

from api.schemas.errors import ERROR_RESPONSES
from api.schemas.transfer import TransferRequestBody, TransferResponse
from app.chat.contracts import TransferRequest
from app.chat.validator import ValidationFailure, validate_transfer
from app.core.errors import InvalidRequestError
from app.services.transfer_service import propose_transfer

router = APIRouter(tags=["transfer"])
logger = logging.getLogger(__name__)


@router.post("/transfer", response_model=TransferResponse, responses=ERROR_RESPONSES)
def transfer(body: TransferRequestBody) -> TransferResponse:
    logger.info("transfer called network=%s", body.network)

    action = TransferRequest(
        multisig_address=body.multisigAddress,
        amount=body.amountToInvest,
        asset_address=body.assetAddress,
        network=body.network,
        destination_address=body.destinationAddress,
    )
    outcome = validate_transfer(action)
    if isinstance(outcome, ValidationFailure):
        raise InvalidRequestError(
            "Invalid transfer request",
            details=[issue.model_dump() for issue in outcome.issues],
        )

    result = propose_transfer(outcome)
    return TransferResponse(
        res=result.res,
        link=result.link,
        safeTxHash=result.safeTxHash,
        nonce=result.nonce,
    )
