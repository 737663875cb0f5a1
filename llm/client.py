from __future__ import annotations

import json
import logging
from typing import Any, Sequence

from app.core.errors import ConfigurationError, ServiceError

logger = logging.getLogger(__name__)


class LLMClient:
    def __init__(
        self,
        *,
        model: str | None = None,
        provider: str | None = None,
        api_key: str | None = None,
        temperature: float = 0.0,
        timeout_s: int = 30,
        json_mode: bool = True,
    ) -> None:
        self.model = model
        self.provider = provider
        self.api_key = api_key
        self.temperature = temperature
        self.timeout_s = timeout_s
        self.json_mode = json_mode

    @classmethod
    def from_settings(cls, settings) -> "LLMClient":
        return cls(
            model=settings.LLM_MODEL,
            provider=settings.LLM_PROVIDER,
            api_key=settings.OPENAI_API_KEY,
            temperature=settings.LLM_TEMPERATURE,
            timeout_s=settings.LLM_TIMEOUT_S,
            json_mode=settings.llm_json_mode,
        )

    def complete(self, messages: Sequence[dict[str, str]]) -> str:
        """
        Send a role-tagged message list ({"role", "content"}) and return the
        completion text. One outbound call, no retries.
        """
        return self._call_provider(messages=messages)

    def _call_provider(self, *, messages: Sequence[dict[str, str]]) -> str:
        if self.provider == "openai":
            return self._call_openai(messages=messages)
        raise ConfigurationError(f"LLM provider not configured: {self.provider}")

    def _call_openai(self, *, messages: Sequence[dict[str, str]]) -> str:
        if not self.api_key:
            raise ConfigurationError("OPENAI_API_KEY is not set")
        try:
            from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
            from langchain_openai import ChatOpenAI
        except Exception as e:
            raise ConfigurationError(f"LangChain OpenAI client not available: {e}") from e

        message_types = {"system": SystemMessage, "user": HumanMessage, "assistant": AIMessage}
        lc_messages = []
        for msg in messages:
            message_type = message_types.get(msg["role"])
            if message_type is None:
                raise ValueError(f"unsupported message role: {msg['role']}")
            lc_messages.append(message_type(content=msg["content"]))

        model = self.model or "gpt-4o-mini"
        logger.info(
            "LLM call start provider=openai model=%s messages=%s json_mode=%s",
            model,
            len(lc_messages),
            self.json_mode,
        )
        model_kwargs: dict[str, Any] = {"response_format": {"type": "json_object"}} if self.json_mode else {}
        try:
            llm = ChatOpenAI(
                model=model,
                temperature=self.temperature,
                timeout=self.timeout_s,
                max_retries=0,
                api_key=self.api_key,
                model_kwargs=model_kwargs,
            )
            response = llm.invoke(lc_messages)
        except Exception as e:
            logger.warning("LLM call failed provider=openai error=%s", e)
            raise ServiceError("Language model request failed") from e

        output_text = response.content
        if not output_text:
            raise ServiceError("Language model returned empty content")
        if not isinstance(output_text, str):
            output_text = json.dumps(output_text)
        logger.info("LLM call success provider=openai output_len=%s", len(output_text))
        return output_text
