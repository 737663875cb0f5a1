from __future__ import annotations

from unittest.mock import MagicMock, patch

from chain.safe_service import SafeServiceError

SAFE = "0x1111111111111111111111111111111111111111"
USDC = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"
RECIPIENT = "0x0000000000000000000000000000000000000001"


def _body(**overrides) -> dict:
    body = {
        "multisigAddress": f"base:{SAFE}",
        "amountToInvest": "50",
        "assetAddress": USDC,
        "network": "base",
        "destinationAddress": RECIPIENT,
    }
    body.update(overrides)
    return body


def _patched_safe_client(nonce: int = 9) -> MagicMock:
    instance = MagicMock()
    instance.estimate_safe_tx_gas.return_value = 0
    instance.get_next_nonce.return_value = nonce
    return instance


def test_transfer_missing_field_is_400(client):
    body = _body()
    del body["destinationAddress"]

    resp = client.post("/transfer", json=body)

    assert resp.status_code == 400
    assert resp.json()["error"]


def test_transfer_invalid_asset_is_400(client):
    resp = client.post("/transfer", json=_body(assetAddress="0x9999999999999999999999999999999999999999"))

    assert resp.status_code == 400
    details = resp.json()["details"]
    assert [d["field"] for d in details] == ["assetAddress"]


def test_transfer_amount_beyond_uint256_is_400(client):
    resp = client.post("/transfer", json=_body(amountToInvest="1e80"))

    assert resp.status_code == 400
    assert [d["field"] for d in resp.json()["details"]] == ["amount"]


def test_transfer_success(client):
    safe_client = _patched_safe_client(nonce=9)
    with patch("app.services.transfer_service.SafeServiceClient", return_value=safe_client):
        resp = client.post("/transfer", json=_body())

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["res"].startswith("Transaction proposed successfully")
    assert body["link"] == f"https://app.safe.global/transactions/queue?safe=base:{SAFE}"
    assert body["nonce"] == 9
    assert body["safeTxHash"].startswith("0x") and len(body["safeTxHash"]) == 66


def test_transfer_accepts_legacy_field_names(client):
    safe_client = _patched_safe_client()
    legacy = {
        "multisigaddress": SAFE,
        "amount_to_invest": 10,
        "assetaddress": USDC,
        "network": "Base",
        "destinationAddress": RECIPIENT,
    }
    with patch("app.services.transfer_service.SafeServiceClient", return_value=safe_client):
        resp = client.post("/transfer", json=legacy)

    assert resp.status_code == 200, resp.text
    data = safe_client.estimate_safe_tx_gas.call_args.kwargs["data"]
    assert int(data[74:138], 16) == 10_000_000


def test_transfer_submission_rejected_is_502(client):
    safe_client = _patched_safe_client()
    safe_client.propose_transaction.side_effect = SafeServiceError("returned 422: nonce already used")
    with patch("app.services.transfer_service.SafeServiceClient", return_value=safe_client):
        resp = client.post("/transfer", json=_body())

    assert resp.status_code == 502
    body = resp.json()
    assert body["error"] == "Transfer proposal failed"
    assert "nonce already used" in body["details"]


def test_transfer_without_signing_key_is_500(client, monkeypatch):
    from app.config import get_settings

    monkeypatch.setenv("AGENT_PRIVATE_KEY", "")
    get_settings.cache_clear()

    resp = client.post("/transfer", json=_body())

    assert resp.status_code == 500
    assert "AGENT_PRIVATE_KEY" in resp.json()["error"]
