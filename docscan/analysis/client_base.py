from abc import ABC, abstractmethod


class BaseVisionClient(ABC):
    """Contract for provider-specific analysis engine clients."""

    async def close(self) -> None:
        """Release network resources. Default: nothing to do."""

    @abstractmethod
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
        """Send one still image with instructions; return the reply as text."""

    @abstractmethod
    async def complete(
        self,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        """Text-only chat completion; return the reply as text."""
