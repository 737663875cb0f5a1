from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from eth_abi import encode as encode_abi
from eth_account import Account
from web3 import Web3

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

OPERATION_CALL = 0

# EIP-712 type hashes used by Safe contracts >= 1.3.0
DOMAIN_SEPARATOR_TYPEHASH = Web3.keccak(text="EIP712Domain(uint256 chainId,address verifyingContract)")
SAFE_TX_TYPEHASH = Web3.keccak(
    text=(
        "SafeTx(address to,uint256 value,bytes data,uint8 operation,uint256 safeTxGas,"
        "uint256 baseGas,uint256 gasPrice,address gasToken,address refundReceiver,uint256 nonce)"
    )
)


def normalize_safe_address(value: str) -> str:
    """
    Drop a chain-prefix qualifier: "base:0xABC..." -> "0xABC...".
    """
    value = (value or "").strip()
    if ":" in value:
        value = value.rsplit(":", 1)[1].strip()
    return value


@dataclass
class SafeTransaction:
    safe: str
    chain_id: int
    to: str
    data: str
    nonce: int
    value: int = 0
    operation: int = OPERATION_CALL
    safe_tx_gas: int = 0
    base_gas: int = 0
    gas_price: int = 0
    gas_token: str = ZERO_ADDRESS
    refund_receiver: str = ZERO_ADDRESS

    def domain_separator(self) -> bytes:
        return Web3.keccak(
            encode_abi(
                ["bytes32", "uint256", "address"],
                [DOMAIN_SEPARATOR_TYPEHASH, self.chain_id, Web3.to_checksum_address(self.safe)],
            )
        )

    def struct_hash(self) -> bytes:
        return Web3.keccak(
            encode_abi(
                [
                    "bytes32",
                    "address",
                    "uint256",
                    "bytes32",
                    "uint8",
                    "uint256",
                    "uint256",
                    "uint256",
                    "address",
                    "address",
                    "uint256",
                ],
                [
                    SAFE_TX_TYPEHASH,
                    Web3.to_checksum_address(self.to),
                    int(self.value),
                    Web3.keccak(hexstr=self.data),
                    int(self.operation),
                    int(self.safe_tx_gas),
                    int(self.base_gas),
                    int(self.gas_price),
                    Web3.to_checksum_address(self.gas_token),
                    Web3.to_checksum_address(self.refund_receiver),
                    int(self.nonce),
                ],
            )
        )

    def safe_tx_hash(self) -> bytes:
        return Web3.keccak(b"\x19\x01" + self.domain_separator() + self.struct_hash())

    def to_service_payload(self) -> dict[str, Any]:
        """Transaction fields in the shape the coordination service expects."""
        return {
            "to": Web3.to_checksum_address(self.to),
            "value": str(self.value),
            "data": self.data,
            "operation": self.operation,
            "safeTxGas": str(self.safe_tx_gas),
            "baseGas": str(self.base_gas),
            "gasPrice": str(self.gas_price),
            "gasToken": self.gas_token,
            "refundReceiver": self.refund_receiver,
            "nonce": self.nonce,
        }


def signer_address(private_key: str) -> str:
    return Account.from_key(private_key).address


def sign_safe_tx_hash(private_key: str, safe_tx_hash: bytes) -> str:
    """
    Sign the raw safeTxHash (no EIP-191 prefix) as an owner; Safe accepts
    this as an ECDSA signature with v in {27, 28}.
    """
    signed = Account.from_key(private_key).unsafe_sign_hash(safe_tx_hash)
    return Web3.to_hex(signed.signature)
