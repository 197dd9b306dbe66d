from docscan.normalization.exceptions import MalformedPayloadError
from docscan.normalization.normalizer import (
    clamp_confidence,
    normalize,
    normalize_data,
    resolve_document_type,
)
from docscan.normalization.parser import parse_payload

__all__ = [
    "MalformedPayloadError",
    "clamp_confidence",
    "normalize",
    "normalize_data",
    "parse_payload",
    "resolve_document_type",
]
