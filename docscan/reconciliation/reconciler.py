"""Merges user field edits into an existing record's data."""

import copy
from collections.abc import Mapping
from typing import Any

from docscan.logging.logger import Log
from docscan.normalization.normalizer import normalize_value
from docscan.schema.models import FieldKind
from docscan.schema.registry import TYPE_FIELD, schema_for


def apply_edit(
    document_type: str,
    data: Mapping[str, Any],
    field_name: str,
    value: Any,
) -> dict[str, Any]:
    """Return a copy of ``data`` with one field edit applied."""
    return apply_edits(document_type, data, {field_name: value})


def apply_edits(
    document_type: str,
    data: Mapping[str, Any],
    edits: Mapping[str, Any],
) -> dict[str, Any]:
    """Return a copy of ``data`` with every edit in ``edits`` applied.

    Field names are plain keys of ``data``; they are never interpreted as
    paths. Rules:

    * ``type`` is the display label of the document type and is not editable.
    * Declared scalar fields take any scalar value; ``None`` clears to "".
    * Declared array and nested-object fields are replaced as a whole value and
      only by a value of the same kind; the replacement is re-shaped against
      the schema so element and sub-field keys stay present.
    * Undeclared fields are stored verbatim when the value is a scalar, or when
      it replaces an existing list or object of the same kind. Any other list
      or object is refused, so edits never invent structure.

    Edits that break a rule are skipped. The input ``data`` is not modified.
    """
    schema = schema_for(document_type)
    result = copy.deepcopy(dict(data))

    for name, value in edits.items():
        if name == TYPE_FIELD:
            Log.debug("Ignoring edit of the document type label")
            continue

        descriptor = schema.get_field(name)
        if descriptor is None:
            if _is_structured(value) and not _same_kind(result.get(name), value):
                Log.warning(f"Ignoring structured edit of undeclared field '{name}'")
                continue
            result[name] = copy.deepcopy(value)
            continue

        if descriptor.kind is FieldKind.SCALAR:
            if _is_structured(value):
                Log.warning(f"Ignoring structured edit of scalar field '{name}'")
                continue
            result[name] = "" if value is None else value
            continue

        expected = dict if descriptor.kind is FieldKind.NESTED_OBJECT else list
        if not isinstance(value, expected):
            Log.warning(
                f"Ignoring edit of '{name}': expected {expected.__name__}, "
                f"got {type(value).__name__}"
            )
            continue
        result[name] = normalize_value(descriptor, copy.deepcopy(value))

    return result


def _is_structured(value: Any) -> bool:
    return isinstance(value, (dict, list))


def _same_kind(current: Any, value: Any) -> bool:
    if isinstance(current, dict):
        return isinstance(value, dict)
    if isinstance(current, list):
        return isinstance(value, list)
    return False
