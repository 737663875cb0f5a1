from __future__ import annotations

import logging

from fastapi import APIRouter, Query

from api.schemas.errors import ERROR_RESPONSES
from api.schemas.wallets import (
    CreateWalletRequest,
    CreateWalletResponse,
    DeploymentTransaction,
    ListSafesResponse,
    SafeInfo,
)
from app.services.wallet_service import build_wallet_deployment, find_shared_safe

router = APIRouter(tags=["wallets"])
logger = logging.getLogger(__name__)


@router.post("/createWallet", response_model=CreateWalletResponse, responses=ERROR_RESPONSES)
def create_wallet(body: CreateWalletRequest) -> CreateWalletResponse:
    tx = build_wallet_deployment(body.ownerAddress)
    return CreateWalletResponse(deploymentTransaction=DeploymentTransaction(**tx))


@router.get("/listSafes", response_model=ListSafesResponse, responses=ERROR_RESPONSES)
def list_safes(ownerAddress: str = Query(..., min_length=1)) -> ListSafesResponse:
    safe = find_shared_safe(ownerAddress)
    return ListSafesResponse(safeResponse=SafeInfo(**safe) if safe else None)
