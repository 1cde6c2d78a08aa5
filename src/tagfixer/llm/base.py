from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Protocol

from tagfixer import helpers

Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class LLMMessage:
    role: Role
    content: str

    def as_payload(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class LLMResult:
    """Schema-validated JSON from one model call.

    ``structured`` is False when the provider had to fall back to plain JSON
    output instead of native structured output.
    """

    provider: str
    model: str
    output_json: dict[str, Any]
    raw_text: str
    structured: bool = True

    def text_field(self, key: str) -> str:
        """String value of ``key``, stripped; empty when missing or null."""
        return helpers.safe_str(self.output_json.get(key)).strip()


@dataclass(frozen=True)
class LLMConfig:
    provider: str
    model: str
    api_key_env: str
    timeout_s: float = 30.0


class LLMClient(Protocol):
    def generate_json(
        self,
        *,
        messages: list[LLMMessage],
        json_schema: dict[str, Any],
        schema_name: str = "output",
    ) -> LLMResult: ...
