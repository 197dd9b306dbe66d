from dataclasses import dataclass
from enum import Enum


class FieldKind(str, Enum):
    """Structural kind of a field inside a record's ``data``."""

    SCALAR = "scalar"
    NESTED_OBJECT = "nested-object"
    ARRAY_OF_OBJECT = "array-of-object"
    ARRAY_OF_SCALAR = "array-of-scalar"


@dataclass(frozen=True)
class FieldDescriptor:
    """A single declared field of a document type.

    ``fields`` holds the sub-fields of a nested object, or the per-element
    fields of an array of objects. It is empty for scalars.
    """

    name: str
    kind: FieldKind = FieldKind.SCALAR
    fields: tuple["FieldDescriptor", ...] = ()

    @property
    def is_array(self) -> bool:
        return self.kind in (FieldKind.ARRAY_OF_OBJECT, FieldKind.ARRAY_OF_SCALAR)


@dataclass(frozen=True)
class DocumentSchema:
    """Canonical shape of ``data`` for one document type tag."""

    tag: str
    label: str
    fields: tuple[FieldDescriptor, ...] = ()

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def get_field(self, name: str) -> FieldDescriptor | None:
        for descriptor in self.fields:
            if descriptor.name == name:
                return descriptor
        return None
