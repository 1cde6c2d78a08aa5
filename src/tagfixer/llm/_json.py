from __future__ import annotations

import json
from typing import Any

from jsonschema import validate
from jsonschema.exceptions import ValidationError as _SchemaValidationError

from .errors import LLMValidationError


def parse_json(text: str) -> dict[str, Any]:
    """Parse the JSON object a model was asked to return.

    Tolerates a markdown code fence around the object.
    """

    body = text.strip()
    if body.startswith("```"):
        body = body.strip("`")
        if body.lower().startswith("json"):
            body = body[4:]
    try:
        data = json.loads(body)
    except ValueError as e:
        raise LLMValidationError(f"Failed to parse JSON: {e}") from e
    if not isinstance(data, dict):
        raise LLMValidationError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def validate_json(instance: dict[str, Any], schema: dict[str, Any]) -> None:
    try:
        validate(instance=instance, schema=schema)
    except _SchemaValidationError as e:
        where = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise LLMValidationError(f"model output invalid at {where}: {e.message}") from e
