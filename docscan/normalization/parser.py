"""Turns the analysis engine's raw reply into a JSON object."""

import json
import re
from collections.abc import Mapping
from typing import Any

from docscan.normalization.exceptions import MalformedPayloadError

_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")


def parse_payload(raw: object) -> dict[str, Any]:
    """Parse ``raw`` into a dict.

    Accepts an already decoded mapping, or text/bytes holding a JSON object,
    optionally wrapped in markdown code fences or surrounded by prose.

    Raises:
        MalformedPayloadError: if no JSON object can be recovered.
    """
    if isinstance(raw, Mapping):
        return dict(raw)
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedPayloadError(f"Payload is not UTF-8 text: {exc}") from exc
    if not isinstance(raw, str):
        raise MalformedPayloadError(
            f"Payload must be an object or JSON text, got {type(raw).__name__}"
        )

    cleaned = _strip_code_fences(raw.strip())
    if not cleaned:
        raise MalformedPayloadError("Payload is empty")

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        parsed = _extract_embedded_object(cleaned)

    if not isinstance(parsed, dict):
        raise MalformedPayloadError("Payload must be a JSON object")
    return parsed


def _strip_code_fences(text: str) -> str:
    if not text.startswith("```"):
        return text
    lines = text.splitlines()
    if lines and lines[0].startswith("```"):
        lines = lines[1:]
    if lines and lines[-1].strip() == "```":
        lines = lines[:-1]
    return "\n".join(lines).strip()


def _extract_embedded_object(text: str) -> object:
    match = _OBJECT_PATTERN.search(text)
    if match is None:
        raise MalformedPayloadError("No JSON object found in payload")
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise MalformedPayloadError(f"Invalid JSON payload: {exc}") from exc
