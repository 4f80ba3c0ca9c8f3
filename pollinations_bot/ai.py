"""
Pollinations API client — text and image generation over authenticated JSON POST.

Handles:
- Bearer-token auth and JSON request bodies
- Bounded request timeout (the API itself promises none)
- Call logging with model and duration per request
"""

import logging
import time
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

TEXT_URL = "https://enter.pollinations.ai/api/generate/v1"
IMAGE_URL = "https://enter.pollinations.ai/api/generate/image"
TEXT_MODEL = "pollinations-text-v1"
IMAGE_MODEL = "pollinations-image-v1"
DEFAULT_TIMEOUT = 60.0


class PollinationsClient:
    """Async Pollinations API client shared by the message and command handlers."""

    def __init__(
        self,
        api_key: str,
        text_url: str = TEXT_URL,
        image_url: str = IMAGE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.api_key = api_key
        self.text_url = text_url
        self.image_url = image_url
        self.client = httpx.AsyncClient(timeout=timeout)

    async def post(
        self,
        url: str,
        payload: Dict[str, Any],
        log_context: Optional[Dict] = None,
    ) -> Any:
        """POST a JSON payload and return the decoded JSON body.

        Raises httpx errors on transport failure or non-2xx status, and
        ValueError when the body is not valid JSON.
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        start = time.time()
        response = await self.client.post(url, headers=headers, json=payload)
        response.raise_for_status()
        result = response.json()
        duration_ms = round((time.time() - start) * 1000)

        logger.info(
            f"Pollinations call: {url}",
            extra={
                "model": payload.get("model"),
                "duration_ms": duration_ms,
                **(log_context or {}),
            },
        )
        return result

    async def generate_text(
        self,
        prompt: str,
        max_tokens: int = 200,
        model: str = TEXT_MODEL,
        log_context: Optional[Dict] = None,
    ) -> Any:
        """Text generation. Returns the raw response body."""
        payload = {"prompt": prompt, "max_tokens": max_tokens, "model": model}
        return await self.post(self.text_url, payload, log_context=log_context)

    async def generate_image(
        self,
        prompt: str,
        width: int = 1024,
        height: int = 1024,
        model: str = IMAGE_MODEL,
        log_context: Optional[Dict] = None,
    ) -> Any:
        """Image generation. Returns the raw response body."""
        payload = {"prompt": prompt, "width": width, "height": height, "model": model}
        return await self.post(self.image_url, payload, log_context=log_context)

    async def aclose(self):
        await self.client.aclose()
