from __future__ import annotations

from unittest.mock import MagicMock, patch

from app.config import get_settings
from chain.safe_deploy import SAFE_PROXY_FACTORY
from chain.safe_service import SafeServiceError

OWNER = "0x2222222222222222222222222222222222222222"
AGENT_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
SHARED_SAFE = "0x4444444444444444444444444444444444444444"
OTHER_SAFE = "0x5555555555555555555555555555555555555555"


def test_create_wallet_requires_owner(client):
    resp = client.post("/createWallet", json={})

    assert resp.status_code == 400


def test_create_wallet_rejects_bad_address(client):
    resp = client.post("/createWallet", json={"ownerAddress": "not-an-address"})

    assert resp.status_code == 400


def test_create_wallet_returns_deployment_transaction(client):
    resp = client.post("/createWallet", json={"ownerAddress": OWNER})

    assert resp.status_code == 200, resp.text
    tx = resp.json()["deploymentTransaction"]
    assert tx["to"] == SAFE_PROXY_FACTORY
    assert tx["value"] == "0"
    data = tx["data"].lower()
    # both owners are encoded into the setup initializer
    assert OWNER[2:].lower() in data
    assert AGENT_ADDRESS[2:].lower() in data


def test_create_wallet_without_signing_key_is_500(client, monkeypatch):
    monkeypatch.setenv("AGENT_PRIVATE_KEY", "")
    get_settings.cache_clear()

    resp = client.post("/createWallet", json={"ownerAddress": OWNER})

    assert resp.status_code == 500
    assert "AGENT_PRIVATE_KEY" in resp.json()["error"]


def test_create_wallet_without_rpc_is_500(client, monkeypatch):
    monkeypatch.setenv("RPC_URL", "")
    monkeypatch.delenv("RPC_URLS", raising=False)
    get_settings.cache_clear()

    resp = client.post("/createWallet", json={"ownerAddress": OWNER})

    assert resp.status_code == 500
    assert "RPC_URL" in resp.json()["error"]


def test_list_safes_requires_owner(client):
    resp = client.get("/listSafes")

    assert resp.status_code == 400


def test_list_safes_returns_shared_safe(client):
    safe_client = MagicMock()
    safe_client.get_safes_by_owner.return_value = [OTHER_SAFE, SHARED_SAFE]
    safe_client.get_safe_info.side_effect = lambda safe: {
        OTHER_SAFE: {"address": OTHER_SAFE, "threshold": 1, "owners": [OWNER], "modules": []},
        SHARED_SAFE: {
            "address": SHARED_SAFE,
            "threshold": 2,
            "owners": [AGENT_ADDRESS.lower(), OWNER],
            "modules": [],
        },
    }[safe]

    with patch("app.services.wallet_service.SafeServiceClient", return_value=safe_client):
        resp = client.get("/listSafes", params={"ownerAddress": OWNER})

    assert resp.status_code == 200
    body = resp.json()["safeResponse"]
    assert body["address"] == SHARED_SAFE
    assert body["threshold"] == 2


def test_list_safes_none_shared(client):
    safe_client = MagicMock()
    safe_client.get_safes_by_owner.return_value = []

    with patch("app.services.wallet_service.SafeServiceClient", return_value=safe_client):
        resp = client.get("/listSafes", params={"ownerAddress": OWNER})

    assert resp.status_code == 200
    assert resp.json()["safeResponse"] is None


def test_list_safes_service_failure_is_502(client):
    safe_client = MagicMock()
    safe_client.get_safes_by_owner.side_effect = SafeServiceError("boom")

    with patch("app.services.wallet_service.SafeServiceClient", return_value=safe_client):
        resp = client.get("/listSafes", params={"ownerAddress": OWNER})

    assert resp.status_code == 502
