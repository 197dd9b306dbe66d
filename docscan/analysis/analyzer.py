"""AI-powered document analyzer."""

import asyncio
import base64
import json
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from docscan.analysis.client_base import BaseVisionClient
from docscan.analysis.exceptions import AnalysisFailureError, AnalysisSupersededError
from docscan.analysis.prompt_loader import load_prompt, render_document_shapes
from docscan.logging.logger import Log
from docscan.normalization.normalizer import normalize
from docscan.normalization.parser import parse_payload
from docscan.reconciliation.reconciler import apply_edits
from docscan.records.models import NormalizedResult


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DocumentAnalyzer:
    """Turns a document image into a NormalizedResult via an analysis engine.

    Only one image analysis is in flight per analyzer: starting a new one
    cancels the previous call, which then raises AnalysisSupersededError.
    """

    def __init__(
        self,
        *,
        client: BaseVisionClient,
        model: str,
        temperature: float = 0.1,
        max_tokens: int = 4096,
        image_detail: str = "high",
        translation_temperature: float = 0.3,
        clock: Callable[[], datetime] | None = None,
        prompt_dir: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(1.0, temperature))
        self._translation_temperature = max(0.0, min(1.0, translation_temperature))
        self._max_tokens = max_tokens
        self._image_detail = image_detail
        self._clock = clock or _utc_now
        self._analysis_system_prompt = load_prompt("analysis_system", prompt_dir).format(
            document_shapes=render_document_shapes()
        )
        self._analysis_user_prompt = load_prompt("analysis_user", prompt_dir)
        self._enhance_system_prompt = load_prompt("enhance_system", prompt_dir)
        self._enhance_user_template = load_prompt("enhance_user", prompt_dir)
        self._translate_system_template = load_prompt("translate_system", prompt_dir)
        self._inflight: asyncio.Task[str] | None = None

    @property
    def model(self) -> str:
        return self._model

    async def analyze(self, image_bytes: bytes) -> NormalizedResult:
        """Analyze one still image.

        Raises:
            AnalysisFailureError: if the engine call fails or is superseded.
            MalformedPayloadError: if the reply is not a structured object.
        """
        if not image_bytes:
            raise AnalysisFailureError("Image is empty")
        image_base64 = base64.b64encode(image_bytes).decode("ascii")
        Log.info(f"Analyzing image ({len(image_bytes)} bytes) with {self._model}")

        raw = await self._run_superseding(
            lambda: self._client.analyze_image(
                model=self._model,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
                system_prompt=self._analysis_system_prompt,
                user_prompt=self._analysis_user_prompt,
                image_base64=image_base64,
                image_detail=self._image_detail,
            )
        )
        Log.debug(f"Analysis raw response:\n{raw}")

        result = normalize(raw, analyzed_at=self._clock(), model=self._model)
        Log.info(
            f"Analysis complete: {result.document_type} "
            f"(confidence {result.confidence:.2f}, {len(result.languages)} languages)"
        )
        return result

    async def enhance(
        self,
        document_type: str,
        data: dict[str, Any],
        corrections: str,
    ) -> dict[str, Any]:
        """Apply free-text user corrections to ``data`` with the engine's help.

        The engine's reply goes through the edit reconciler, so the result keeps
        the schema shape of ``document_type``.

        Raises:
            AnalysisFailureError: if the engine call fails.
            MalformedPayloadError: if the reply is not a structured object.
        """
        prompt = self._enhance_user_template.format(
            corrections=corrections,
            data=json.dumps(data, ensure_ascii=False, indent=2),
        )
        raw = await self._client.complete(
            model=self._model,
            temperature=self._temperature,
            max_tokens=self._max_tokens // 2,
            system_prompt=self._enhance_system_prompt,
            user_prompt=prompt,
        )
        updated = parse_payload(raw)
        # Some replies wrap the data in a full analysis object.
        if "documentType" in updated and isinstance(updated.get("data"), dict):
            updated = updated["data"]
        return apply_edits(document_type, data, updated)

    async def translate(self, text: str, target_language: str) -> str:
        """Translate ``text`` to ``target_language``.

        Raises:
            AnalysisFailureError: if the engine call fails.
        """
        if not text.strip():
            return ""
        return await self._client.complete(
            model=self._model,
            temperature=self._translation_temperature,
            max_tokens=self._max_tokens // 2,
            system_prompt=self._translate_system_template.format(
                target_language=target_language
            ),
            user_prompt=text,
        )

    async def close(self) -> None:
        previous = self._inflight
        if previous is not None and not previous.done():
            previous.cancel()
        await self._client.close()

    async def _run_superseding(self, call: Callable[[], Awaitable[str]]) -> str:
        previous = self._inflight
        if previous is not None and not previous.done():
            Log.info("Cancelling in-flight analysis in favour of a newer request")
            previous.cancel()

        task: asyncio.Task[str] = asyncio.ensure_future(call())
        self._inflight = task
        try:
            return await task
        except asyncio.CancelledError:
            if self._inflight is not task:
                raise AnalysisSupersededError(
                    "Analysis was superseded by a newer request"
                ) from None
            raise
        finally:
            if self._inflight is task:
                self._inflight = None
