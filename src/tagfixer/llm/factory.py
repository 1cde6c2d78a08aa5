from __future__ import annotations

from typing import Optional

from tagfixer import config

from .base import LLMClient, LLMConfig
from .errors import LLMError
from .openai_client import OpenAILLM


def build_llm(
    *,
    provider: Optional[str] = None,
    model: Optional[str] = None,
    timeout_s: Optional[float] = None,
) -> LLMClient:
    """Factory for provider clients, defaulting to the configured provider.

    Providers:
    - openai
    """

    p = (provider or config.LLM_PROVIDER).lower().strip()
    if p == "openai":
        return OpenAILLM(
            LLMConfig(
                provider="openai",
                model=model or config.LLM_MODEL,
                api_key_env="OPENAI_API_KEY",
                timeout_s=config.LLM_TIMEOUT_S if timeout_s is None else timeout_s,
            )
        )

    raise LLMError(f"Unknown LLM provider: {provider}")
