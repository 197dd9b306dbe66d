from collections.abc import Mapping
from typing import Any

from docscan.analysis.analyzer import DocumentAnalyzer
from docscan.analysis.factory import AnalyzerFactory
from docscan.analysis.image_loader import ImageLoader
from docscan.config.settings import Settings
from docscan.logging.logger import Log
from docscan.records.models import DocumentRecord
from docscan.storage.factory import StorageFactory
from docscan.storage.record_store import RecordStore


class DocumentProcessor:
    """Orchestrates analysis, review edits and persistence of documents.

    Flows:
        scan:      load image -> analyze -> store.create
        edit:      store.edit_data (reconciled under the store lock)
        reanalyze: load image -> analyze -> store.update (full replace)
        enhance:   engine-assisted corrections -> store.edit_data
    """

    def __init__(
        self,
        analyzer: DocumentAnalyzer,
        store: RecordStore,
        image_loader: ImageLoader | None = None,
    ) -> None:
        self._analyzer = analyzer
        self._store = store
        self._image_loader = image_loader or ImageLoader()

    @property
    def store(self) -> RecordStore:
        return self._store

    async def open(self) -> None:
        await self._store.open()

    async def close(self) -> None:
        try:
            await self._analyzer.close()
        finally:
            await self._store.close()

    async def __aenter__(self) -> "DocumentProcessor":
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def scan(self, image_uri: str) -> DocumentRecord:
        """Analyze the image at ``image_uri`` and save the result as a new record."""
        image_bytes = self._image_loader.load(image_uri)
        Log.info(f"Loaded {len(image_bytes)} bytes from {image_uri}")
        result = await self._analyzer.analyze(image_bytes)
        return await self._store.create(result, image_uri=image_uri)

    async def edit(
        self,
        record_id: str,
        edits: Mapping[str, Any],
    ) -> DocumentRecord | None:
        """Apply field edits to a record's data and persist them."""
        return await self._store.edit_data(record_id, edits)

    async def reanalyze(self, record_id: str) -> DocumentRecord | None:
        """Re-run analysis on the record's source image and replace its analysis fields."""
        record = await self._store.get_by_id(record_id)
        if record is None:
            return None
        if not record.image_uri:
            raise ValueError(f"Record {record_id} has no source image to re-analyze")
        image_bytes = self._image_loader.load(record.image_uri)
        result = await self._analyzer.analyze(image_bytes)
        Log.info(f"Re-analyzed record {record_id}: {record.document_type} -> {result.document_type}")
        return await self._store.update(record_id, result.to_fields())

    async def enhance(self, record_id: str, corrections: str) -> DocumentRecord | None:
        """Apply free-text corrections to a record using the analysis engine."""
        record = await self._store.get_by_id(record_id)
        if record is None:
            return None
        data = await self._analyzer.enhance(record.document_type, record.data, corrections)
        # Only fields the engine changed; the rest may have been edited meanwhile.
        changes = {name: value for name, value in data.items() if record.data.get(name) != value}
        return await self._store.edit_data(record_id, changes)

    async def translate(self, record_id: str, target_language: str) -> str | None:
        """Translate a record's raw text. The translation is not persisted."""
        record = await self._store.get_by_id(record_id)
        if record is None:
            return None
        return await self._analyzer.translate(record.raw_text, target_language)


def build_processor(settings: Settings) -> DocumentProcessor:
    """Build a DocumentProcessor with all required adapters."""
    storage = StorageFactory.create(settings)
    store = RecordStore(storage, key=settings.storage_key)
    analyzer = AnalyzerFactory.create(settings)
    return DocumentProcessor(analyzer=analyzer, store=store, image_loader=ImageLoader())
