"""Coerces a raw analysis payload into the canonical record shape.

Everything here is a pure function of its inputs: no clock, no storage, no
network. Irregular engine output is repaired rather than rejected; only a
payload that is not a structured object at all raises.
"""

import copy
import math
from datetime import datetime
from typing import Any

from docscan.logging.logger import Log
from docscan.normalization.parser import parse_payload
from docscan.records.models import NormalizedResult
from docscan.schema.models import FieldDescriptor, FieldKind
from docscan.schema.registry import (
    GENERIC_LABEL,
    GENERIC_TAG,
    TYPE_FIELD,
    empty_value,
    is_recognized,
    schema_for,
)


def normalize(
    payload: object,
    *,
    analyzed_at: datetime | None,
    model: str,
) -> NormalizedResult:
    """Build a NormalizedResult from an engine payload.

    Args:
        payload: Decoded mapping or raw JSON text from the analysis engine.
        analyzed_at: Timestamp of the analysis call.
        model: Identifier of the engine/version that produced the payload.

    Raises:
        MalformedPayloadError: if the payload cannot be parsed as an object.
    """
    parsed = parse_payload(payload)

    raw_tag = parsed.get("documentType")
    document_type = resolve_document_type(raw_tag)
    raw_data = parsed.get("data")
    if not isinstance(raw_data, dict):
        if raw_data is not None:
            Log.warning(f"Discarding non-object data of type {type(raw_data).__name__}")
        raw_data = {}

    data = normalize_data(document_type, raw_data)
    if document_type != raw_tag:
        Log.debug(f"Unrecognized document type {raw_tag!r} coerced to {GENERIC_TAG!r}")
        data[TYPE_FIELD] = GENERIC_LABEL

    return NormalizedResult(
        document_type=document_type,
        confidence=clamp_confidence(parsed.get("confidence")),
        languages=_normalize_languages(parsed.get("languages")),
        data=data,
        raw_text=_text_or_empty(parsed.get("rawText")),
        additional_info=_optional_text(parsed.get("additionalInfo")),
        analyzed_at=analyzed_at,
        model=model,
    )


def resolve_document_type(tag: object) -> str:
    """Return ``tag`` if recognized, otherwise the generic tag."""
    return tag if is_recognized(tag) else GENERIC_TAG  # type: ignore[return-value]


def clamp_confidence(value: object) -> float:
    """Clamp to [0, 1]; missing, non-numeric and NaN values become 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    number = float(value)
    if math.isnan(number):
        return 0.0
    return max(0.0, min(1.0, number))


def normalize_data(document_type: str, raw: dict[str, Any]) -> dict[str, Any]:
    """Ensure every declared field of ``document_type`` is present in ``raw``.

    Returns a new dict. Declared fields come first in schema order, followed by
    undeclared fields which are kept verbatim.
    """
    schema = schema_for(document_type)
    raw = copy.deepcopy(raw)
    label = raw.get(TYPE_FIELD)
    data: dict[str, Any] = {
        TYPE_FIELD: label if isinstance(label, str) and label else schema.label
    }
    for descriptor in schema.fields:
        data[descriptor.name] = normalize_value(descriptor, raw.get(descriptor.name))
    for key, value in raw.items():
        if key not in data:
            data[key] = value
    return data


def normalize_value(descriptor: FieldDescriptor, value: Any) -> Any:
    """Coerce one field value to the kind its descriptor declares."""
    if value is None:
        return empty_value(descriptor)

    if descriptor.kind is FieldKind.NESTED_OBJECT:
        if not isinstance(value, dict):
            Log.warning(f"Field '{descriptor.name}' is not an object, replaced with empty")
            return empty_value(descriptor)
        return _fill_object(descriptor.fields, value)

    if descriptor.is_array:
        if not isinstance(value, list):
            Log.warning(f"Field '{descriptor.name}' is not a list, replaced with empty")
            return []
        if descriptor.kind is FieldKind.ARRAY_OF_OBJECT:
            return [
                _fill_object(descriptor.fields, item) if isinstance(item, dict) else item
                for item in value
            ]
        return list(value)

    return value


def _fill_object(fields: tuple[FieldDescriptor, ...], value: dict[str, Any]) -> dict[str, Any]:
    filled = {sub.name: normalize_value(sub, value.get(sub.name)) for sub in fields}
    for key, extra in value.items():
        if key not in filled:
            filled[key] = extra
    return filled


def _normalize_languages(value: object) -> list[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    languages: list[str] = []
    for item in value:
        if item is None:
            continue
        name = str(item).strip()
        if name:
            languages.append(name)
    return languages


def _text_or_empty(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _optional_text(value: object) -> str | None:
    if value is None:
        return None
    text = value if isinstance(value, str) else str(value)
    return text or None
