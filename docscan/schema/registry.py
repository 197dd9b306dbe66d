"""Static table of recognized document types and the shape of their data."""

from docscan.schema.models import DocumentSchema, FieldDescriptor, FieldKind

GENERIC_TAG = "generic"
GENERIC_LABEL = "DOCUMENT"
TYPE_FIELD = "type"


def _scalars(*names: str) -> tuple[FieldDescriptor, ...]:
    return tuple(FieldDescriptor(name) for name in names)


def _nested(name: str, *sub_fields: str) -> FieldDescriptor:
    return FieldDescriptor(name, FieldKind.NESTED_OBJECT, _scalars(*sub_fields))


def _array_of(name: str, *item_fields: str) -> FieldDescriptor:
    return FieldDescriptor(name, FieldKind.ARRAY_OF_OBJECT, _scalars(*item_fields))


def _array_of_scalars(name: str) -> FieldDescriptor:
    return FieldDescriptor(name, FieldKind.ARRAY_OF_SCALAR)


_SCHEMAS: tuple[DocumentSchema, ...] = (
    DocumentSchema(
        tag="passport",
        label="PASSPORT",
        fields=_scalars(
            "country",
            "passportNumber",
            "surname",
            "givenNames",
            "nationality",
            "dateOfBirth",
            "sex",
            "placeOfBirth",
            "dateOfIssue",
            "dateOfExpiry",
            "authority",
            "mrzLine1",
            "mrzLine2",
        ),
    ),
    DocumentSchema(
        tag="id_card",
        label="ID CARD",
        fields=_scalars(
            "idNumber",
            "fullName",
            "dateOfBirth",
            "sex",
            "nationality",
            "address",
            "dateOfIssue",
            "dateOfExpiry",
        ),
    ),
    DocumentSchema(
        tag="driver_license",
        label="DRIVER LICENSE",
        fields=_scalars(
            "licenseNumber",
            "fullName",
            "address",
            "dateOfBirth",
            "sex",
            "height",
            "eyeColor",
            "dateOfIssue",
            "dateOfExpiry",
            "class",
            "restrictions",
            "endorsements",
        ),
    ),
    DocumentSchema(
        tag="receipt",
        label="RECEIPT",
        fields=(
            *_scalars("merchantName", "merchantAddress", "merchantPhone", "date", "time"),
            _array_of("items", "name", "quantity", "price", "total"),
            *_scalars("subtotal", "tax", "total", "currency", "paymentMethod"),
        ),
    ),
    DocumentSchema(
        tag="invoice",
        label="INVOICE",
        fields=(
            *_scalars("invoiceNumber", "date", "dueDate"),
            _nested("vendor", "name", "address", "phone", "email"),
            _nested("billTo", "name", "address"),
            _array_of("items", "description", "quantity", "unitPrice", "total"),
            *_scalars("subtotal", "tax", "total", "currency"),
        ),
    ),
    DocumentSchema(
        tag="business_card",
        label="BUSINESS CARD",
        fields=_scalars("name", "title", "company", "phone", "email", "website", "address"),
    ),
    DocumentSchema(
        tag="prescription",
        label="MEDICAL PRESCRIPTION",
        fields=(
            *_scalars("patientName", "patientDOB", "doctorName", "clinicName", "date"),
            _array_of("medications", "name", "dosage", "frequency", "duration", "instructions"),
        ),
    ),
    DocumentSchema(
        tag="contract",
        label="CONTRACT",
        fields=(
            *_scalars("title", "date"),
            _array_of("parties", "name", "role"),
            *_scalars("effectiveDate", "expiryDate"),
            _array_of_scalars("keyTerms"),
        ),
    ),
    DocumentSchema(
        tag=GENERIC_TAG,
        label=GENERIC_LABEL,
        fields=_scalars("title", "summary"),
    ),
)

_REGISTRY: dict[str, DocumentSchema] = {schema.tag: schema for schema in _SCHEMAS}

DOCUMENT_TYPES: tuple[str, ...] = tuple(_REGISTRY)


def is_recognized(tag: object) -> bool:
    """Return True if ``tag`` is one of the closed set of document type tags."""
    return isinstance(tag, str) and tag in _REGISTRY


def schema_for(tag: object) -> DocumentSchema:
    """Return the schema for ``tag``, falling back to the generic schema."""
    if isinstance(tag, str) and tag in _REGISTRY:
        return _REGISTRY[tag]
    return _REGISTRY[GENERIC_TAG]


def fields_for(tag: object) -> list[FieldDescriptor]:
    """Ordered field descriptors of ``data`` for ``tag``.

    Unknown tags get the generic descriptor set. ``type`` is implicit and not
    part of the returned list.
    """
    return list(schema_for(tag).fields)


def label_for(tag: object) -> str:
    """Display label stored under ``data.type`` for ``tag``."""
    return schema_for(tag).label


def all_schemas() -> list[DocumentSchema]:
    return list(_SCHEMAS)


def empty_value(descriptor: FieldDescriptor) -> object:
    """Placeholder value for a declared field that the source did not provide."""
    if descriptor.is_array:
        return []
    if descriptor.kind is FieldKind.NESTED_OBJECT:
        return {sub.name: empty_value(sub) for sub in descriptor.fields}
    return ""


def empty_data(tag: object) -> dict[str, object]:
    """A fully shaped ``data`` value for ``tag`` with every field defaulted."""
    schema = schema_for(tag)
    data: dict[str, object] = {TYPE_FIELD: schema.label}
    for descriptor in schema.fields:
        data[descriptor.name] = empty_value(descriptor)
    return data
