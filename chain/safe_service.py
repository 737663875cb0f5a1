from __future__ import annotations

import logging
from typing import Any

import requests
from web3 import Web3

from app.config import get_settings
from chain.chains import get_safe_tx_service_url

logger = logging.getLogger(__name__)


class SafeServiceError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SafeServiceClient:
    """
    Thin client for the Safe Transaction Service (the multisig coordination
    service): gas estimation, nonce lookup, proposal submission and Safe
    lookups. Every non-2xx answer raises SafeServiceError.
    """

    def __init__(
        self,
        *,
        chain_id: int,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout_s: int | None = None,
        session: requests.Session | None = None,
    ) -> None:
        settings = get_settings()
        self.chain_id = chain_id
        self.base_url = (base_url or get_safe_tx_service_url(chain_id)).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.safe_api_key
        self.timeout_s = timeout_s or settings.safe_http_timeout_s
        self.session = session or requests.Session()

    # ---------------------------
    # HTTP plumbing
    # ---------------------------

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        logger.info("safe service %s %s", method, path)
        try:
            resp = self.session.request(
                method,
                url,
                headers=self._headers(),
                timeout=self.timeout_s,
                **kwargs,
            )
        except requests.RequestException as exc:
            raise SafeServiceError(f"{method} {path} failed: {exc}") from exc

        if resp.status_code >= 400:
            raise SafeServiceError(
                f"{method} {path} returned {resp.status_code}: {_error_text(resp)}",
                status_code=resp.status_code,
            )
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise SafeServiceError(f"{method} {path} returned invalid JSON") from exc

    # ---------------------------
    # Safe lookups
    # ---------------------------

    def get_safe_info(self, safe_address: str) -> dict[str, Any]:
        safe = Web3.to_checksum_address(safe_address)
        return self._request("GET", f"/api/v1/safes/{safe}/")

    def get_safes_by_owner(self, owner_address: str) -> list[str]:
        owner = Web3.to_checksum_address(owner_address)
        body = self._request("GET", f"/api/v1/owners/{owner}/safes/") or {}
        return list(body.get("safes") or [])

    # ---------------------------
    # Proposal lifecycle
    # ---------------------------

    def estimate_safe_tx_gas(self, safe_address: str, *, to: str, value: int, data: str, operation: int) -> int:
        safe = Web3.to_checksum_address(safe_address)
        body = self._request(
            "POST",
            f"/api/v1/safes/{safe}/multisig-transactions/estimations/",
            json={
                "to": Web3.to_checksum_address(to),
                "value": str(value),
                "data": data,
                "operation": operation,
            },
        ) or {}
        if "safeTxGas" not in body:
            raise SafeServiceError("estimation response is missing safeTxGas")
        return int(body["safeTxGas"])

    def get_next_nonce(self, safe_address: str) -> int:
        """
        Next unused nonce: the Safe's on-chain nonce, advanced past any
        proposals already queued in the service.
        """
        safe = Web3.to_checksum_address(safe_address)
        info = self.get_safe_info(safe)
        nonce = int(info["nonce"])
        pending = self._request(
            "GET",
            f"/api/v1/safes/{safe}/multisig-transactions/",
            params={"executed": "false", "nonce__gte": nonce, "ordering": "-nonce", "limit": 1},
        ) or {}
        results = pending.get("results") or []
        if results:
            return max(nonce, int(results[0]["nonce"]) + 1)
        return nonce

    def propose_transaction(
        self,
        safe_address: str,
        *,
        safe_tx: dict[str, Any],
        safe_tx_hash: str,
        sender: str,
        signature: str,
        origin: str | None = None,
    ) -> None:
        safe = Web3.to_checksum_address(safe_address)
        payload = dict(safe_tx)
        payload.update(
            {
                "contractTransactionHash": safe_tx_hash,
                "sender": Web3.to_checksum_address(sender),
                "signature": signature,
                "origin": origin,
            }
        )
        self._request("POST", f"/api/v1/safes/{safe}/multisig-transactions/", json=payload)


def _error_text(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:500]
    if isinstance(body, dict):
        for key in ("message", "detail", "nonFieldErrors", "non_field_errors"):
            if body.get(key):
                return str(body[key])
    return str(body)[:500]
