from __future__ import annotations

from functools import lru_cache

from ens import ENS
from web3 import Web3
from web3.exceptions import ContractLogicError

from chain.abis import ERC20_ABI
from chain.chains import get_rpc_url


class Web3RPCError(RuntimeError):
    pass


@lru_cache
def _get_web3(chain_id: int) -> Web3:
    """
    Lazily create and cache a Web3 instance per chain_id.
    """
    rpc_url = get_rpc_url(chain_id)
    return Web3(Web3.HTTPProvider(rpc_url))


# ---------------------------
# ERC20 helpers
# ---------------------------

def _erc20_contract(chain_id: int, token_address: str):
    w3 = _get_web3(chain_id)
    return w3.eth.contract(
        address=Web3.to_checksum_address(token_address),
        abi=ERC20_ABI,
    )


def erc20_balance(chain_id: int, token_address: str, owner: str) -> int:
    """
    Return ERC20 balance (raw uint256).
    """
    try:
        contract = _erc20_contract(chain_id, token_address)
        return contract.functions.balanceOf(
            Web3.to_checksum_address(owner)
        ).call()
    except ContractLogicError as e:
        raise Web3RPCError(f"erc20_balance reverted: {e}") from e
    except Exception as e:
        raise Web3RPCError(f"erc20_balance failed: {e}") from e


# ---------------------------
# Name service
# ---------------------------

def resolve_ens_name(chain_id: int, name: str) -> str | None:
    """
    Forward-resolve an ENS name to an address. Returns None when the name
    has no address record.
    """
    try:
        ns = ENS.from_web3(_get_web3(chain_id))
        address = ns.address(name)
    except Exception as e:
        raise Web3RPCError(f"resolve_ens_name failed: {e}") from e
    return str(address) if address else None
