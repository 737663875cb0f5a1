import json
from functools import lru_cache
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_SUPPORTED_TOKENS = json.dumps(
    {
        "8453": {
            "USDC": {"address": "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913", "decimals": 6},
            "USDT": {"address": "0xfde4C96c8593536E31F229EA8f37b2ADa2699bb2", "decimals": 6},
        }
    }
)


class Settings(BaseSettings):
    # storage
    database_url: str = ""
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout_s: int = 30
    db_pool_recycle_s: int = 1800
    db_auto_create: bool = True

    # language model
    llm_provider: str = "openai"
    llm_model: str = "gpt-4o-mini"  # safe default- override via env
    openai_api_key: str = ""
    llm_temperature: float = 0.0
    llm_timeout_s: int = 30
    llm_json_mode: bool = True

    # chat pipeline
    chat_history_limit: int = 10
    chat_include_balances: bool = True
    chat_auto_propose: bool = True

    # chain
    chain_id: int = 8453
    rpc_url: str = ""
    rpc_urls: str = ""
    ens_chain_id: int = 1
    name_suffixes: list[str] = [".eth"]
    supported_tokens: str = _DEFAULT_SUPPORTED_TOKENS

    # multisig coordination service
    agent_private_key: str = ""
    safe_tx_service_url: str = ""
    safe_api_key: str = ""
    safe_app_url: str = "https://app.safe.global"
    safe_origin: str = "safe-chat"
    safe_http_timeout_s: int = 20

    # observability
    log_level: str = "INFO"
    log_json: bool = False
    langsmith_tracing: bool = False
    langsmith_api_key: str = ""
    langsmith_project: str = "safe-chat"
    langsmith_endpoint: str = "https://api.smith.langchain.com"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def DATABASE_URL(self) -> str:
        return self.database_url

    @property
    def LLM_MODEL(self) -> str:
        return self.llm_model

    @property
    def LLM_PROVIDER(self) -> str:
        return self.llm_provider

    @property
    def OPENAI_API_KEY(self) -> str:
        return self.openai_api_key

    @property
    def LLM_TEMPERATURE(self) -> float:
        return self.llm_temperature

    @property
    def LLM_TIMEOUT_S(self) -> int:
        return self.llm_timeout_s

    @property
    def RPC_URL(self) -> str:
        return self.rpc_url

    @property
    def RPC_URLS(self) -> str:
        return self.rpc_urls

    @property
    def AGENT_PRIVATE_KEY(self) -> str:
        return self.agent_private_key

    def supported_tokens_for_chain(self, chain_id: int | None) -> dict[str, dict[str, Any]]:
        """
        Symbol -> {"address", "decimals"} for one chain.

        Expected env format:
          SUPPORTED_TOKENS='{"8453":{"USDC":{"address":"0x...","decimals":6}}}'
        """
        if chain_id is None:
            return {}
        try:
            data = json.loads(self.supported_tokens or "{}")
        except json.JSONDecodeError as e:
            raise ValueError("SUPPORTED_TOKENS must be valid JSON") from e
        tokens = data.get(str(chain_id)) or {}
        return {str(symbol).upper(): meta for symbol, meta in tokens.items() if isinstance(meta, dict)}


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader (process-level).
    """
    return Settings()
