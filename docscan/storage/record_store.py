"""Durable collection of DocumentRecords stored under a single key.

The whole collection is the unit of persistence: every mutation reads the
full list, changes it in memory and writes the full list back. Mutations are
serialized on one lock so overlapping calls cannot lose each other's changes.
Reads take no lock; because adapters replace the stored value atomically they
always decode a complete collection.
"""

import asyncio
import dataclasses
import json
import uuid
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta, timezone
from types import TracebackType
from typing import Any

from docscan.logging.logger import Log
from docscan.normalization.normalizer import (
    clamp_confidence,
    normalize_data,
    resolve_document_type,
)
from docscan.reconciliation.reconciler import apply_edits
from docscan.records.models import (
    DocumentRecord,
    NormalizedResult,
    attribute_name,
    parse_timestamp,
)
from docscan.schema.registry import GENERIC_LABEL, GENERIC_TAG, TYPE_FIELD
from docscan.storage.base import BaseKeyValueStorage
from docscan.storage.exceptions import StorageFailureError

DEFAULT_STORAGE_KEY = "@documents"
ALL_TYPES = "all"

_IMMUTABLE_FIELDS = frozenset({"id", "created_at", "updated_at"})
_MAX_ID_ATTEMPTS = 10
_TICK = timedelta(microseconds=1)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_record_id() -> str:
    return str(uuid.uuid4())


class RecordStore:
    """Owns the persisted DocumentRecord collection.

    ``id_factory`` must never return the same value twice. Ids issued by this
    store are remembered, so a repeated value is rejected even after the
    record holding it was deleted.
    """

    def __init__(
        self,
        storage: BaseKeyValueStorage,
        *,
        key: str = DEFAULT_STORAGE_KEY,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._storage = storage
        self._key = key
        self._clock = clock or utc_now
        self._id_factory = id_factory or new_record_id
        self._issued_ids: set[str] = set()
        self._write_lock = asyncio.Lock()

    async def open(self) -> None:
        await self._storage.open()

    async def close(self) -> None:
        await self._storage.close()

    async def __aenter__(self) -> "RecordStore":
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # Mutations

    async def create(
        self,
        body: NormalizedResult | Mapping[str, Any],
        *,
        image_uri: str | None = None,
    ) -> DocumentRecord:
        """Assign an id and timestamps, append, persist and return the record."""
        fields = body.to_fields() if isinstance(body, NormalizedResult) else _attribute_fields(body)
        for name in _IMMUTABLE_FIELDS & fields.keys():
            Log.warning(f"Ignoring '{name}' in create body")
            del fields[name]
        if image_uri is not None:
            fields["image_uri"] = image_uri

        async with self._write_lock:
            records = await self._load()
            existing_ids = {raw.get("id") for raw in records} | self._issued_ids
            now = self._clock()
            record = _conform(
                DocumentRecord(
                    id=self._fresh_id(existing_ids),
                    document_type=fields.pop("document_type", GENERIC_TAG),
                    confidence=fields.pop("confidence", 0.0),
                    created_at=now,
                    updated_at=now,
                    **fields,
                )
            )
            records.append(record.to_dict())
            await self._save(records)

        Log.info(f"Created record {record.id} ({record.document_type})")
        return record

    async def update(self, record_id: str, partial: Mapping[str, Any]) -> DocumentRecord | None:
        """Shallow-merge ``partial`` into the record and persist it.

        ``id``, ``created_at`` and ``updated_at`` in ``partial`` are ignored.
        Returns None if no record has ``record_id``.
        """
        changes = _attribute_fields(partial)
        for name in _IMMUTABLE_FIELDS & changes.keys():
            Log.warning(f"Ignoring immutable field '{name}' in update of {record_id}")
            del changes[name]

        async with self._write_lock:
            records = await self._load()
            index = _index_of(records, record_id)
            if index is None:
                Log.info(f"Update skipped, record {record_id} not found")
                return None
            record = await self._replace(records, index, changes)

        Log.info(f"Updated record {record_id}: {sorted(changes)}")
        return record

    async def edit_data(self, record_id: str, edits: Mapping[str, Any]) -> DocumentRecord | None:
        """Reconcile field ``edits`` into the record's current data and persist it.

        The edits are applied to the data as stored at write time, so
        overlapping edits of different fields all survive.
        Returns None if no record has ``record_id``.
        """
        async with self._write_lock:
            records = await self._load()
            index = _index_of(records, record_id)
            if index is None:
                Log.info(f"Edit skipped, record {record_id} not found")
                return None
            current = _decode(records[index])
            data = apply_edits(current.document_type, current.data, edits)
            record = await self._replace(records, index, {"data": data})

        Log.info(f"Edited record {record_id}: {sorted(edits)}")
        return record

    async def delete(self, record_id: str) -> bool:
        """Remove the record if present. Returns whether one was removed."""
        async with self._write_lock:
            records = await self._load()
            index = _index_of(records, record_id)
            if index is None:
                Log.info(f"Delete skipped, record {record_id} not found")
                return False
            del records[index]
            await self._save(records)

        Log.info(f"Deleted record {record_id}")
        return True

    async def clear_all(self) -> bool:
        """Remove the whole collection."""
        async with self._write_lock:
            try:
                await self._storage.remove_item(self._key)
            except StorageFailureError as exc:
                Log.error(f"Failed to clear collection {self._key}: {exc}")
                raise
        Log.warning(f"Cleared collection {self._key}")
        return True

    # Reads

    async def get_all(self) -> list[DocumentRecord]:
        """All records in insertion order."""
        return [_decode(raw) for raw in await self._load()]

    async def get_by_id(self, record_id: str) -> DocumentRecord | None:
        for raw in await self._load():
            if raw.get("id") == record_id:
                return _decode(raw)
        return None

    async def search(self, query: str) -> list[DocumentRecord]:
        """Case-insensitive substring match over each record's serialized form.

        Covers nested fields. The query is matched as given, surrounding
        whitespace included. An empty query matches everything.
        """
        needle = query.lower()
        records = await self._load()
        if not needle:
            return [_decode(raw) for raw in records]
        return [
            _decode(raw)
            for raw in records
            if needle in json.dumps(raw, ensure_ascii=False).lower()
        ]

    async def filter_by_type(self, tag: str | None) -> list[DocumentRecord]:
        """Records whose document type contains ``tag`` (case-insensitive).

        ``None``, "" and "All" match everything. The match is a substring test,
        so "id" also matches "id_card".
        """
        records = [_decode(raw) for raw in await self._load()]
        if tag is None or not tag.strip() or tag.strip().lower() == ALL_TYPES:
            return records
        needle = tag.strip().lower()
        return [r for r in records if needle in r.document_type.lower()]

    # Persistence

    async def _load(self) -> list[dict[str, Any]]:
        try:
            raw = await self._storage.get_item(self._key)
        except StorageFailureError as exc:
            Log.error(f"Failed to read collection {self._key}: {exc}")
            raise
        if raw is None:
            return []
        try:
            records = json.loads(raw)
        except json.JSONDecodeError as exc:
            Log.error(f"Collection {self._key} is not valid JSON: {exc}")
            raise StorageFailureError(f"Collection {self._key} is corrupted: {exc}") from exc
        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            raise StorageFailureError(f"Collection {self._key} must be a list of objects")
        return records

    async def _save(self, records: list[dict[str, Any]]) -> None:
        payload = json.dumps(records, ensure_ascii=False)
        try:
            await self._storage.set_item(self._key, payload)
        except StorageFailureError as exc:
            Log.error(f"Failed to write collection {self._key}: {exc}")
            raise

    async def _replace(
        self,
        records: list[dict[str, Any]],
        index: int,
        changes: dict[str, Any],
    ) -> DocumentRecord:
        """Apply ``changes`` to ``records[index]`` and save. Caller holds the lock."""
        current = _decode(records[index])
        updated_at = self._clock()
        if updated_at <= current.updated_at:
            updated_at = current.updated_at + _TICK
        record = _conform(dataclasses.replace(current, **changes, updated_at=updated_at))
        records[index] = record.to_dict()
        await self._save(records)
        return record

    def _fresh_id(self, existing_ids: set[Any]) -> str:
        for _ in range(_MAX_ID_ATTEMPTS):
            candidate = self._id_factory()
            if candidate not in existing_ids:
                self._issued_ids.add(candidate)
                return candidate
        raise RuntimeError(f"Could not generate a unique record id in {_MAX_ID_ATTEMPTS} attempts")


def _attribute_fields(body: Mapping[str, Any]) -> dict[str, Any]:
    """Translate python or persisted field names to record attribute names."""
    fields: dict[str, Any] = {}
    for key, value in body.items():
        name = attribute_name(key)
        if name is None:
            Log.warning(f"Ignoring unknown record field '{key}'")
            continue
        fields[name] = value
    return fields


def _conform(record: DocumentRecord) -> DocumentRecord:
    """Enforce record invariants on a candidate record."""
    if not isinstance(record.data, Mapping):
        raise TypeError(f"Record data must be a mapping, got {type(record.data).__name__}")
    document_type = resolve_document_type(record.document_type)
    data = normalize_data(document_type, dict(record.data))
    if document_type != record.document_type:
        data[TYPE_FIELD] = GENERIC_LABEL
    conformed = dataclasses.replace(
        record,
        document_type=document_type,
        confidence=clamp_confidence(record.confidence),
        languages=[str(lang) for lang in record.languages or []],
        data=data,
        analyzed_at=parse_timestamp(record.analyzed_at),
    )
    try:
        json.dumps(conformed.to_dict(), ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise TypeError(
            f"Record {record.id} holds a value that is not JSON-serializable: {exc}"
        ) from exc
    return conformed


def _decode(raw: dict[str, Any]) -> DocumentRecord:
    try:
        return DocumentRecord.from_dict(raw)
    except (KeyError, TypeError, ValueError) as exc:
        raise StorageFailureError(f"Stored record {raw.get('id')!r} is invalid: {exc}") from exc


def _index_of(records: list[dict[str, Any]], record_id: str) -> int | None:
    for index, raw in enumerate(records):
        if raw.get("id") == record_id:
            return index
    return None
