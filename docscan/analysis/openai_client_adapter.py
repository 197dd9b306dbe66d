from typing import Any

import httpx
import openai

from docscan.analysis.client_base import BaseVisionClient
from docscan.analysis.exceptions import AnalysisFailureError, AnalysisNetworkError


class OpenAIClientAdapter(BaseVisionClient):
    """Analysis engine client built on the OpenAI-compatible chat API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

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
        messages: list[dict[str, Any]] = [
            {"role": "system", "content": system_prompt},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": user_prompt},
                    {
                        "type": "image_url",
                        "image_url": {
                            "url": f"data:image/jpeg;base64,{image_base64}",
                            "detail": image_detail,
                        },
                    },
                ],
            },
        ]
        return await self._create(model, temperature, max_tokens, messages)

    async def complete(
        self,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        messages: list[dict[str, Any]] = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        return await self._create(model, temperature, max_tokens, messages)

    async def close(self) -> None:
        await self._client.close()

    async def _create(
        self,
        model: str,
        temperature: float,
        max_tokens: int,
        messages: list[dict[str, Any]],
    ) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
                messages=messages,  # type: ignore[arg-type]
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise AnalysisNetworkError(f"Analysis engine network error: {exc}") from exc
        except openai.APIError as exc:
            raise AnalysisNetworkError(f"Analysis engine API error: {exc}") from exc

        if not response.choices:
            raise AnalysisFailureError("Analysis engine returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise AnalysisFailureError("Analysis engine returned empty response")
        return content
