from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar

# Python attribute name -> persisted field name.
_PERSISTED_NAMES: dict[str, str] = {
    "id": "id",
    "document_type": "documentType",
    "confidence": "confidence",
    "languages": "languages",
    "data": "data",
    "raw_text": "rawText",
    "additional_info": "additionalInfo",
    "analyzed_at": "analyzedAt",
    "model": "model",
    "image_uri": "imageUri",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}

_ATTRIBUTE_NAMES: dict[str, str] = {v: k for k, v in _PERSISTED_NAMES.items()}

_TIMESTAMP_FIELDS = frozenset({"analyzed_at", "created_at", "updated_at"})


def attribute_name(key: str) -> str | None:
    """Map a python or persisted field name to the python attribute name."""
    if key in _PERSISTED_NAMES:
        return key
    return _ATTRIBUTE_NAMES.get(key)


def persisted_name(attribute: str) -> str:
    return _PERSISTED_NAMES[attribute]


def format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def parse_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


@dataclass(frozen=True)
class NormalizedResult:
    """A normalized analysis body, ready to be stored. Has no identity yet."""

    document_type: str
    confidence: float
    languages: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)
    raw_text: str = ""
    additional_info: str | None = None
    analyzed_at: datetime | None = None
    model: str = ""

    def to_fields(self) -> dict[str, Any]:
        """Analysis fields as a partial body for ``RecordStore.update``."""
        return {
            "document_type": self.document_type,
            "confidence": self.confidence,
            "languages": list(self.languages),
            "data": self.data,
            "raw_text": self.raw_text,
            "additional_info": self.additional_info,
            "analyzed_at": self.analyzed_at,
            "model": self.model,
        }


@dataclass(frozen=True)
class DocumentRecord:
    """The persisted unit: one analyzed document and its metadata."""

    FIELD_NAMES: ClassVar[tuple[str, ...]] = tuple(_PERSISTED_NAMES)

    id: str
    document_type: str
    confidence: float
    created_at: datetime
    updated_at: datetime
    languages: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)
    raw_text: str = ""
    additional_info: str | None = None
    analyzed_at: datetime | None = None
    model: str = ""
    image_uri: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted layout (camelCase keys, ISO timestamps)."""
        out: dict[str, Any] = {}
        for attribute, name in _PERSISTED_NAMES.items():
            value = getattr(self, attribute)
            if attribute in _TIMESTAMP_FIELDS:
                value = format_timestamp(value)
            out[name] = value
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "DocumentRecord":
        """Build a record from its persisted layout.

        Raises:
            KeyError: if ``id``, ``createdAt`` or ``updatedAt`` is missing.
            ValueError: if a timestamp cannot be parsed.
        """
        created_at = parse_timestamp(raw["createdAt"])
        updated_at = parse_timestamp(raw["updatedAt"])
        if created_at is None or updated_at is None:
            raise ValueError(f"Record {raw.get('id')!r} has empty timestamps")
        return cls(
            id=str(raw["id"]),
            document_type=raw.get("documentType", ""),
            confidence=raw.get("confidence", 0.0),
            created_at=created_at,
            updated_at=updated_at,
            languages=list(raw.get("languages") or []),
            data=dict(raw.get("data") or {}),
            raw_text=raw.get("rawText") or "",
            additional_info=raw.get("additionalInfo"),
            analyzed_at=parse_timestamp(raw.get("analyzedAt")),
            model=raw.get("model") or "",
            image_uri=raw.get("imageUri"),
        )
