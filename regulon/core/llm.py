"""Helpers for turning model output into validated objects."""

import json
import re
from typing import TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)

_FENCED_BLOCK = re.compile(r"```[a-zA-Z]*\s*\n?(.*?)```", re.DOTALL)


def strip_llm_fences(raw_output: str) -> str:
    """Return the payload of the first markdown code block, or the bare text.

    Gateways frequently wrap JSON in ```json fences even when told not to. An
    unterminated opening fence (truncated output) is dropped as well.
    """
    text = raw_output.strip()

    block = _FENCED_BLOCK.search(text)
    if block:
        return block.group(1).strip()

    if text.startswith("```"):
        first_newline = text.find("\n")
        text = text[first_newline + 1 :] if first_newline != -1 else ""
    return text.removesuffix("```").strip()


def parse_llm_json_dict(raw_output: str) -> dict:
    """
    Decode model output as a single JSON object.

    Raises:
        json.JSONDecodeError: If the text is not JSON, or is JSON but not an object
    """
    payload = strip_llm_fences(raw_output)
    decoded = json.loads(payload)
    if not isinstance(decoded, dict):
        raise json.JSONDecodeError(
            f"Expected a JSON object, got {type(decoded).__name__}", payload, 0
        )
    return decoded


def parse_llm_json(raw_output: str, model: type[T]) -> T:
    """
    Decode model output and validate it against ``model``.

    Raises:
        json.JSONDecodeError: If the output is not a JSON object
        pydantic.ValidationError: If the object does not fit the schema
    """
    return model.model_validate(parse_llm_json_dict(raw_output))
