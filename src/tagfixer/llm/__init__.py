"""LLM provider abstraction used by the filename -> metadata oracle.

Design goals:
- Keep provider-specific SDKs isolated.
- Expose one call: "generate JSON matching this schema".
- Validate output against the JSON Schema before anyone trusts it.
"""

from .base import LLMClient, LLMConfig, LLMMessage, LLMResult
from .errors import LLMError, LLMValidationError
from .factory import build_llm

__all__ = [
    "LLMClient",
    "LLMConfig",
    "LLMError",
    "LLMMessage",
    "LLMResult",
    "LLMValidationError",
    "build_llm",
]
