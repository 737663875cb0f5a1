from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
import requests

from chain.safe_service import SafeServiceClient, SafeServiceError

SAFE = "0x1111111111111111111111111111111111111111"
USDC = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"
AGENT_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
BASE_URL = "https://api.safe.global/tx-service/base"


def _response(status_code: int, body=None) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status_code
    if body is None:
        resp._content = b""
    elif isinstance(body, str):
        resp._content = body.encode()
    else:
        resp._content = json.dumps(body).encode()
    return resp


def _client(*responses, **kwargs) -> tuple[SafeServiceClient, MagicMock]:
    session = MagicMock(spec=requests.Session)
    session.request.side_effect = list(responses)
    return SafeServiceClient(chain_id=8453, session=session, **kwargs), session


def test_base_url_follows_network_short_name():
    client, _ = _client()

    assert client.base_url == BASE_URL


def test_next_nonce_without_queued_proposals():
    client, session = _client(
        _response(200, {"address": SAFE, "nonce": 5, "threshold": 2}),
        _response(200, {"count": 0, "results": []}),
    )

    assert client.get_next_nonce(SAFE) == 5
    method, url = session.request.call_args_list[1].args
    assert method == "GET"
    assert url == f"{BASE_URL}/api/v1/safes/{SAFE}/multisig-transactions/"
    assert session.request.call_args_list[1].kwargs["params"]["executed"] == "false"


def test_next_nonce_steps_past_queued_proposals():
    client, _ = _client(
        _response(200, {"address": SAFE, "nonce": "5", "threshold": 2}),
        _response(200, {"count": 2, "results": [{"nonce": 7}, {"nonce": 6}]}),
    )

    assert client.get_next_nonce(SAFE) == 8


def test_estimate_parses_safe_tx_gas():
    client, session = _client(_response(200, {"safeTxGas": "42000"}))

    gas = client.estimate_safe_tx_gas(SAFE, to=USDC, value=0, data="0xa9059cbb", operation=0)

    assert gas == 42000
    kwargs = session.request.call_args.kwargs
    assert session.request.call_args.args[1].endswith("/multisig-transactions/estimations/")
    assert kwargs["json"] == {"to": USDC, "value": "0", "data": "0xa9059cbb", "operation": 0}


def test_estimate_without_safe_tx_gas_is_an_error():
    client, _ = _client(_response(200, {}))

    with pytest.raises(SafeServiceError):
        client.estimate_safe_tx_gas(SAFE, to=USDC, value=0, data="0x", operation=0)


def test_rejection_carries_service_message():
    client, _ = _client(_response(422, {"nonFieldErrors": ["Tx with nonce=3 already executed"]}))

    with pytest.raises(SafeServiceError) as exc:
        client.propose_transaction(
            SAFE,
            safe_tx={"to": USDC, "nonce": 3},
            safe_tx_hash="0x" + "ab" * 32,
            sender=AGENT_ADDRESS,
            signature="0x" + "cd" * 65,
        )

    assert exc.value.status_code == 422
    assert "422" in str(exc.value)
    assert "already executed" in str(exc.value)


def test_non_json_error_body_is_reported_as_text():
    client, _ = _client(_response(503, "upstream unavailable"))

    with pytest.raises(SafeServiceError) as exc:
        client.get_safe_info(SAFE)

    assert exc.value.status_code == 503
    assert "upstream unavailable" in str(exc.value)


def test_connection_failure_is_service_error():
    session = MagicMock(spec=requests.Session)
    session.request.side_effect = requests.ConnectionError("connection refused")
    client = SafeServiceClient(chain_id=8453, session=session)

    with pytest.raises(SafeServiceError) as exc:
        client.get_safe_info(SAFE)

    assert exc.value.status_code is None


def test_proposal_payload_shape():
    client, session = _client(_response(201))
    safe_tx = {"to": USDC, "value": "0", "data": "0xa9059cbb", "operation": 0, "nonce": 3}

    assert (
        client.propose_transaction(
            SAFE,
            safe_tx=safe_tx,
            safe_tx_hash="0x" + "ab" * 32,
            sender=AGENT_ADDRESS.lower(),
            signature="0x" + "cd" * 65,
            origin="safe-chat",
        )
        is None
    )

    method, url = session.request.call_args.args
    assert method == "POST"
    assert url == f"{BASE_URL}/api/v1/safes/{SAFE}/multisig-transactions/"
    payload = session.request.call_args.kwargs["json"]
    assert payload["nonce"] == 3
    assert payload["contractTransactionHash"] == "0x" + "ab" * 32
    assert payload["sender"] == AGENT_ADDRESS
    assert payload["signature"] == "0x" + "cd" * 65
    assert payload["origin"] == "safe-chat"


def test_api_key_is_sent_as_bearer_token():
    client, session = _client(_response(200, {"safes": [SAFE]}), api_key="secret")

    assert client.get_safes_by_owner(AGENT_ADDRESS) == [SAFE]
    assert session.request.call_args.kwargs["headers"]["Authorization"] == "Bearer secret"
