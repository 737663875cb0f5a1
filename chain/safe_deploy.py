from __future__ import annotations

from typing import Any

from web3 import Web3

from chain.abis import SAFE_PROXY_FACTORY_ABI, SAFE_SETUP_ABI
from chain.safe_tx import ZERO_ADDRESS

# canonical Safe v1.4.1 deployments (same address on every supported chain)
SAFE_PROXY_FACTORY = "0x4e1DCf7AD4e460CfD30791CCC4F9c8a4f820ec67"
SAFE_SINGLETON = "0x41675C099F32341bf84BFc5382aF534df5C7461a"
SAFE_L2_SINGLETON = "0x29fcB43b46531BcA003ddC8FCB67FFE91900C762"
COMPATIBILITY_FALLBACK_HANDLER = "0xfd0732Dc9E303f09fCEf3a7388Ad10A83459Ec99"

PREDETERMINED_SALT_NONCE = "0xb1073742015cbcf5a3a4d9d1ae33ecf619439710b89475f92e2abd2117e90f90"

DEFAULT_THRESHOLD = 2


def default_salt_nonce(chain_id: int) -> int:
    return int.from_bytes(Web3.keccak(text=f"{PREDETERMINED_SALT_NONCE}{chain_id}"), "big")


def singleton_for_chain(chain_id: int) -> str:
    # L2 chains use the event-emitting singleton so indexers can follow the Safe
    return SAFE_SINGLETON if chain_id == 1 else SAFE_L2_SINGLETON


def encode_setup(owners: list[str], threshold: int) -> str:
    if threshold < 1 or threshold > len(owners):
        raise ValueError(f"threshold {threshold} out of range for {len(owners)} owners")
    w3 = Web3()
    contract = w3.eth.contract(address=SAFE_SINGLETON, abi=SAFE_SETUP_ABI)
    return contract.encode_abi(
        "setup",
        args=[
            [Web3.to_checksum_address(o) for o in owners],
            threshold,
            ZERO_ADDRESS,
            b"",
            COMPATIBILITY_FALLBACK_HANDLER,
            ZERO_ADDRESS,
            0,
            ZERO_ADDRESS,
        ],
    )


def build_deployment_transaction(
    *,
    chain_id: int,
    owners: list[str],
    threshold: int = DEFAULT_THRESHOLD,
    salt_nonce: int | None = None,
) -> dict[str, Any]:
    """
    Build (not send) the proxy-factory call that deploys a new Safe with the
    given owners. Returns {to, value, data}.
    """
    if len({o.lower() for o in owners}) != len(owners):
        raise ValueError("owners must be distinct")
    initializer = encode_setup(owners, threshold)
    w3 = Web3()
    factory = w3.eth.contract(address=SAFE_PROXY_FACTORY, abi=SAFE_PROXY_FACTORY_ABI)
    data = factory.encode_abi(
        "createProxyWithNonce",
        args=[
            singleton_for_chain(chain_id),
            Web3.to_bytes(hexstr=initializer),
            default_salt_nonce(chain_id) if salt_nonce is None else salt_nonce,
        ],
    )
    return {
        "to": SAFE_PROXY_FACTORY,
        "value": "0",
        "data": data,
    }
