from __future__ import annotations

import logging

from app.config import get_settings
from app.core.errors import ResolutionError
from chain import rpc
from chain.chains import UnsupportedChainError

logger = logging.getLogger(__name__)


def is_resolvable_name(target: str) -> bool:
    settings = get_settings()
    value = (target or "").strip().lower()
    return any(value.endswith(suffix.lower()) for suffix in settings.name_suffixes)


def lookup_name(name: str) -> str:
    """
    Resolve a naming-service name to an address.
    Raises ResolutionError when the name cannot be resolved.
    """
    settings = get_settings()
    try:
        address = rpc.resolve_ens_name(settings.ens_chain_id, name)
    except (rpc.Web3RPCError, UnsupportedChainError) as e:
        raise ResolutionError(f"Could not resolve {name}", details=str(e)) from e
    if not address:
        raise ResolutionError(f"No address record for {name}")
    return address


def resolve_recipient(target: str) -> str:
    """
    Return the address to send to.

    Targets carrying a naming-service suffix are resolved; when resolution
    fails the literal target is returned unchanged.
    """
    target = (target or "").strip()
    if not is_resolvable_name(target):
        return target
    try:
        address = lookup_name(target)
    except ResolutionError as e:
        logger.warning("name resolution failed name=%s error=%s; using literal", target, e.details or e)
        return target
    logger.info("resolved name=%s address=%s", target, address)
    return address
