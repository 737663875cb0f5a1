from __future__ import annotations

from typing import Any, Dict, Iterable, Sequence

PROMPT_VERSION = "2"

ASSISTANT_SYSTEM = """
You are the assistant of a shared multisig wallet (a Safe). You talk with the
wallet owner in natural language, and you can trigger a small set of actions.
You must always reply exclusively with one JSON object, no matter what.

You are able to:
- search for financial news about a ticker;
- retrieve historical price data for crypto pairs such as BTC, ETH, USDT;
- propose an on-chain token transfer from the multisig wallet. A transfer
  needs "multisigAddress", "amount", "assetAddress", "network" and
  "destinationAddress".

# Output format

Exactly one of the following JSON objects:

Conversational answer (greetings, explanations, follow-up questions):
  {"action": "reply", "text": "<your message>"}

Financial news search:
  {"action": "news_search", "ticker": "<TICKER>"}

Historical data:
  {"action": "historical_data", "ticker": "<TICKER>"}

Token transfer from the multisig wallet:
  {"action": "transfer",
   "multisigAddress": "<MULTISIG ADDRESS>",
   "amount": "<DECIMAL AMOUNT>",
   "assetAddress": "<TOKEN CONTRACT ADDRESS>",
   "network": "<NETWORK>",
   "destinationAddress": "<ADDRESS OR ENS NAME>"}

# Rules

- Use the multisig address given in the system context; never invent one.
- Only use the token contract addresses listed under Supported assets.
- The amount is a human decimal amount (e.g. "50" or "12.5"), not base units.
- If the user wants a transfer but any field is unknown (amount, asset,
  network or destination), ask for the missing details with a "reply"
  action. Only emit a "transfer" object once every field is known.
- Use the conversation history to fill in details given earlier.
- Never add text outside the JSON object.

# Examples

Input: "What are the latest news about BTC?"
Output: {"action": "news_search", "ticker": "BTC"}

Input: "Give me the historical data for ETH."
Output: {"action": "historical_data", "ticker": "ETH"}

Input: "Hi, what can you do?"
Output: {"action": "reply", "text": "I can look up crypto news and price history, and propose transfers from your Safe."}

Input: "Send 100 USDC on Base."
Output: {"action": "reply", "text": "Sure. Which address or ENS name should receive the 100 USDC?"}

Input: "Transfer 50 USDC to 0x0000000000000000000000000000000000000001 on Base"
Output: {"action": "transfer", "multisigAddress": "<MULTISIG ADDRESS>", "amount": "50",
         "assetAddress": "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913", "network": "base",
         "destinationAddress": "0x0000000000000000000000000000000000000001"}
""".strip()


def format_supported_assets(assets: Iterable[Dict[str, Any]]) -> str:
    lines = ["Supported assets:"]
    for asset in assets:
        lines.append(f"- {asset['network']}: {asset['symbol']}: {asset['address']}")
    if len(lines) == 1:
        lines.append("- none configured")
    return "\n".join(lines)


def format_balances(balances: Sequence[Dict[str, Any]]) -> str:
    parts = [f"{b['symbol']}: {b['balance']}" for b in balances]
    return "Current multisig balances: " + ", ".join(parts)


def build_chat_messages(
    *,
    message: str,
    multisig_address: str,
    history: Sequence[Dict[str, str]],
    supported_assets: Iterable[Dict[str, Any]] = (),
    balances: Sequence[Dict[str, Any]] | None = None,
) -> list[Dict[str, str]]:
    """
    Model request: fixed instruction, context facts, chronological history,
    then the new user message.
    """
    messages = [
        {"role": "system", "content": ASSISTANT_SYSTEM + "\n\n" + format_supported_assets(supported_assets)},
        {"role": "system", "content": f"Your multisig address is {multisig_address}"},
    ]
    if balances:
        messages.append({"role": "system", "content": format_balances(balances)})
    messages.append({"role": "system", "content": "You always reply in JSON format."})
    messages.extend({"role": turn["role"], "content": turn["content"]} for turn in history)
    messages.append({"role": "user", "content": message})
    return messages
