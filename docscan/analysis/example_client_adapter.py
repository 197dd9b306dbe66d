"""Example analysis client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseVisionClient and register the provider in AnalyzerFactory.
"""

import json
from typing import ClassVar

from docscan.analysis.client_base import BaseVisionClient


class ExampleClientAdapter(BaseVisionClient):
    """Example adapter that returns a fixed generic-document payload.

    No network calls. Useful for local development, tests, and as a template
    for building real provider adapters.
    """

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "documentType": "generic",
        "confidence": 0.5,
        "languages": ["English"],
        "data": {"type": "DOCUMENT", "title": "Example document", "summary": ""},
        "rawText": "Example document",
        "additionalInfo": "Produced by the example analysis client",
    }

    async def analyze_image(
        self,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        system_prompt: str,
        user_prompt: str,
        image_base64: str,
        image_detail: str,
    ) -> str:
        _ = model, temperature, max_tokens, system_prompt, user_prompt, image_base64, image_detail
        return json.dumps(self.DEFAULT_RESPONSE)

    async def complete(
        self,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        """Echo the user prompt back, which keeps enhance/translate inert."""
        _ = model, temperature, max_tokens, system_prompt
        return user_prompt
