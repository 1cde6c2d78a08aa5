from __future__ import annotations

import os
from typing import Any, Iterator

from tagfixer import logger as logger_mod

from ._json import parse_json, validate_json
from .base import LLMClient, LLMConfig, LLMMessage, LLMResult
from .errors import LLMError

log = logger_mod.get_logger()

JSON_ONLY = LLMMessage(
    role="system",
    content="Return ONLY valid JSON matching the requested schema. No markdown, no prose.",
)


def _response_texts(resp: Any) -> Iterator[Any]:
    yield getattr(resp, "output_text", None)
    for item in getattr(resp, "output", None) or []:
        for part in getattr(item, "content", None) or []:
            if getattr(part, "type", None) in ("output_text", "text"):
                yield getattr(part, "text", None)


def response_text(resp: Any) -> str:
    """First non-empty text of a Responses API reply.

    Recent SDKs expose ``output_text``; older ones only the ``output`` list.
    """
    for text in _response_texts(resp):
        if isinstance(text, str) and text.strip():
            return text.strip()
    raise LLMError("OpenAI response carried no text output")


class OpenAILLM(LLMClient):
    """OpenAI backed ``LLMClient``.

    Asks for native structured output first and falls back to a plain chat
    completion told to answer in JSON. Both are validated against the schema.
    """

    def __init__(self, config: LLMConfig, client: Any = None):
        self._cfg = config
        if client is None:
            api_key = os.getenv(config.api_key_env)
            if not api_key:
                raise LLMError(f"{config.api_key_env} is not set; cannot call OpenAI")

            from openai import OpenAI

            client = OpenAI(api_key=api_key, timeout=config.timeout_s)
        self._client = client

    def _structured(
        self, payload: list[dict[str, str]], json_schema: dict[str, Any], schema_name: str
    ) -> str:
        resp = self._client.responses.create(
            model=self._cfg.model,
            input=payload,
            text={
                "format": {
                    "type": "json_schema",
                    "name": schema_name,
                    "schema": json_schema,
                    "strict": True,
                }
            },
            timeout=self._cfg.timeout_s,
        )
        return response_text(resp)

    def _json_only(self, payload: list[dict[str, str]]) -> str:
        try:
            resp = self._client.chat.completions.create(
                model=self._cfg.model,
                messages=payload + [JSON_ONLY.as_payload()],
                temperature=0.2,
                timeout=self._cfg.timeout_s,
            )
        except Exception as e:  # noqa: BLE001
            raise LLMError(f"OpenAI request failed: {e}") from e
        return (resp.choices[0].message.content or "").strip()

    def generate_json(
        self,
        *,
        messages: list[LLMMessage],
        json_schema: dict[str, Any],
        schema_name: str = "output",
    ) -> LLMResult:
        payload = [m.as_payload() for m in messages]

        structured = True
        try:
            raw = self._structured(payload, json_schema, schema_name)
            data = parse_json(raw)
            validate_json(data, json_schema)
        except Exception as e:  # noqa: BLE001
            log.warning(
                f"[LLM] structured output failed for {schema_name}; "
                f"retrying as plain JSON: {e}"
            )
            structured = False
            raw = self._json_only(payload)
            data = parse_json(raw)
            validate_json(data, json_schema)

        return LLMResult(
            provider="openai",
            model=self._cfg.model,
            output_json=data,
            raw_text=raw,
            structured=structured,
        )
