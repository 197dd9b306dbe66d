from docscan.schema.models import DocumentSchema, FieldDescriptor, FieldKind
from docscan.schema.registry import (
    DOCUMENT_TYPES,
    GENERIC_LABEL,
    GENERIC_TAG,
    TYPE_FIELD,
    empty_data,
    empty_value,
    fields_for,
    is_recognized,
    label_for,
    schema_for,
)

__all__ = [
    "DOCUMENT_TYPES",
    "GENERIC_LABEL",
    "GENERIC_TAG",
    "TYPE_FIELD",
    "DocumentSchema",
    "FieldDescriptor",
    "FieldKind",
    "empty_data",
    "empty_value",
    "fields_for",
    "is_recognized",
    "label_for",
    "schema_for",
]
