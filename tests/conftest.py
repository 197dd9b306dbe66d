import asyncio
import json
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from docscan.analysis.client_base import BaseVisionClient
from docscan.storage.memory_adapter import MemoryStorageAdapter
from docscan.storage.record_store import RecordStore


class FakeClock:
    """Deterministic clock. Each call returns the current time, then ticks."""

    def __init__(self, start: datetime | None = None, step: timedelta | None = None) -> None:
        self.now = start or datetime(2024, 3, 8, 10, 30, tzinfo=timezone.utc)
        self.step = step if step is not None else timedelta(seconds=1)

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + self.step
        return current


class YieldingStorage(MemoryStorageAdapter):
    """Memory storage that yields to the event loop inside every call."""

    async def get_item(self, key: str) -> str | None:
        await asyncio.sleep(0)
        value = await super().get_item(key)
        await asyncio.sleep(0)
        return value

    async def set_item(self, key: str, value: str) -> None:
        await asyncio.sleep(0)
        await super().set_item(key, value)


class FakeVisionClient(BaseVisionClient):
    """Records calls and replies with canned text.

    ``analyze_image`` blocks forever for images listed in ``stall_on``, which
    lets tests hold a call in flight.
    """

    def __init__(self, reply: object = None, completion: str = "") -> None:
        self.reply = reply if isinstance(reply, str) or reply is None else json.dumps(reply)
        self.completion = completion
        self.stall_on: set[str] = set()
        self.image_calls: list[dict[str, Any]] = []
        self.complete_calls: list[dict[str, Any]] = []
        self.closed = False

    async def analyze_image(self, **kwargs: Any) -> str:  # type: ignore[override]
        self.image_calls.append(kwargs)
        if kwargs["image_base64"] in self.stall_on:
            await asyncio.Event().wait()
        return self.reply or "{}"

    async def complete(self, **kwargs: Any) -> str:  # type: ignore[override]
        self.complete_calls.append(kwargs)
        return self.completion

    async def close(self) -> None:
        self.closed = True


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def memory_storage() -> MemoryStorageAdapter:
    return MemoryStorageAdapter()


@pytest.fixture()
def store(memory_storage: MemoryStorageAdapter, clock: FakeClock) -> RecordStore:
    return RecordStore(memory_storage, clock=clock)


@pytest.fixture()
def receipt_payload() -> dict[str, Any]:
    """A receipt as the analysis engine would return it."""
    return {
        "documentType": "receipt",
        "confidence": 0.93,
        "languages": ["English"],
        "data": {
            "type": "RECEIPT",
            "merchantName": "Old Name",
            "date": "08 Mar 2024",
            "items": [
                {"name": "Coffee", "quantity": 2, "price": 3.75, "total": 7.50},
                {"name": "Bagel", "quantity": 1, "price": 35.00, "total": 35.00},
            ],
            "subtotal": 42.50,
            "tax": 0.00,
            "total": 42.50,
            "currency": "USD",
        },
        "rawText": "OLD NAME\nCoffee x2 7.50\nBagel 35.00\nTOTAL 42.50",
        "additionalInfo": None,
    }


@pytest.fixture()
def prescription_payload() -> dict[str, Any]:
    return {
        "documentType": "prescription",
        "confidence": 0.81,
        "languages": ["English", "Latin"],
        "data": {
            "type": "MEDICAL PRESCRIPTION",
            "patientName": "Jane Roe",
            "doctorName": "Dr. Who",
            "medications": [
                {
                    "name": "Amoxicillin",
                    "dosage": "500mg",
                    "frequency": "3x daily",
                    "duration": "7 days",
                    "instructions": "Take with food",
                }
            ],
        },
        "rawText": "Rx Amoxicillin 500mg",
        "additionalInfo": "",
    }
