from __future__ import annotations

from dataclasses import dataclass, field

from web3 import Web3

from app.chat.contracts import FieldIssue, TransferRequest
from chain.chains import Network, UnsupportedChainError, resolve_network
from chain.names import is_resolvable_name
from chain.safe_tx import normalize_safe_address
from chain.tokens import TokenMeta, UnsupportedTokenError, find_supported_token, to_base_units

_QUESTION_MAP = {
    "multisigAddress": "Which multisig wallet should send the funds?",
    "amount": "How much do you want to send?",
    "assetAddress": "Which token do you want to send?",
    "network": "Which network is the transfer on (e.g., Base)?",
    "destinationAddress": "What address or ENS name should receive the funds?",
}


@dataclass
class ValidatedTransfer:
    safe_address: str
    network: Network
    token: TokenMeta
    amount: str
    amount_base_units: int
    destination: str


@dataclass
class ValidationFailure:
    issues: list[FieldIssue] = field(default_factory=list)

    @property
    def fields(self) -> list[str]:
        return [issue.field for issue in self.issues]

    @property
    def message(self) -> str:
        missing = [i.field for i in self.issues if i.problem == "missing"]
        invalid = [i for i in self.issues if i.problem != "missing"]
        lines = []
        if invalid:
            lines.extend(f"- {i.field}: {i.problem}" for i in invalid)
        lines.extend(f"- {_QUESTION_MAP.get(f, f)}" for f in missing)
        return "I can't propose this transfer yet:\n" + "\n".join(lines)


def validate_transfer(
    action: TransferRequest,
    *,
    expected_safe: str | None = None,
) -> ValidatedTransfer | ValidationFailure:
    """
    Decide whether a classified transfer is executable. Every problem is
    reported, not just the first one.

    With `expected_safe`, the multisig must be that wallet (chain prefixes
    ignored).
    """
    issues: list[FieldIssue] = []

    safe_address = None
    if not action.multisig_address:
        issues.append(FieldIssue(field="multisigAddress", problem="missing"))
    else:
        normalized = normalize_safe_address(action.multisig_address)
        if not Web3.is_address(normalized):
            issues.append(FieldIssue(field="multisigAddress", problem="not a valid address"))
        elif expected_safe is not None and normalized.lower() != normalize_safe_address(expected_safe).lower():
            issues.append(FieldIssue(field="multisigAddress", problem="does not match this conversation's wallet"))
        else:
            safe_address = Web3.to_checksum_address(normalized)

    network = None
    if not action.network:
        issues.append(FieldIssue(field="network", problem="missing"))
    else:
        try:
            network = resolve_network(action.network)
        except UnsupportedChainError:
            issues.append(FieldIssue(field="network", problem=f"unsupported network {action.network!r}"))

    token = None
    if not action.asset_address:
        issues.append(FieldIssue(field="assetAddress", problem="missing"))
    elif network is not None:
        try:
            token = find_supported_token(network.chain_id, action.asset_address)
        except UnsupportedTokenError:
            issues.append(
                FieldIssue(field="assetAddress", problem=f"not a supported token on {network.name}")
            )

    amount_base_units = None
    if not action.amount:
        issues.append(FieldIssue(field="amount", problem="missing"))
    else:
        try:
            # 18 decimals only checks the number is a positive decimal
            amount_base_units = to_base_units(action.amount, token.decimals if token else 18)
        except ValueError as e:
            issues.append(FieldIssue(field="amount", problem=str(e)))

    destination = (action.destination_address or "").strip()
    if not destination:
        issues.append(FieldIssue(field="destinationAddress", problem="missing"))
    elif not (Web3.is_address(destination) or is_resolvable_name(destination)):
        issues.append(
            FieldIssue(field="destinationAddress", problem="not an address or a resolvable name")
        )

    if issues:
        return ValidationFailure(issues=issues)

    return ValidatedTransfer(
        safe_address=safe_address,
        network=network,
        token=token,
        amount=action.amount,
        amount_base_units=amount_base_units,
        destination=destination,
    )
