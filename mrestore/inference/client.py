"""InferenceClient — abstract base for multimodal inference backends."""
from abc import ABC, abstractmethod
from typing import Any


class InferenceClient(ABC):
    @abstractmethod
    async def generate(self, image_b64: str, mime_type: str) -> dict[str, Any]:
        """Send one base64 image with the soil prompt and return the raw provider payload.

        Raises ConfigurationError, RateLimitError or InferenceError on failure.
        """
        ...
