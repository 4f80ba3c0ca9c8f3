"""
BotRunner — Core bot orchestrator.

The runner owns:
- Pollinations client (built-in)
- Message processing (text generation) and /imagine processing (image generation)
- Bot configuration (identity, endpoints, generation parameters)

The adapter (e.g., DiscordAdapter) owns the chat gateway connection.
"""

import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional

from .ai import DEFAULT_TIMEOUT, IMAGE_MODEL, IMAGE_URL, TEXT_MODEL, TEXT_URL, PollinationsClient
from .utils import extract_image_url, extract_text, format_image_reply

logger = logging.getLogger(__name__)

NO_TEXT_NOTICE = "🤔 No text returned."
TEXT_ERROR_NOTICE = "❌ Could not reach Pollinations API."
NO_IMAGE_NOTICE = "❌ No image returned from Pollinations API."
IMAGE_ERROR_NOTICE = "❌ Error generating image with Pollinations API."


@dataclass
class BotConfig:
    """Configuration for a bot.

    Identity:
        bot_name: Bot display name (used in logs)
        version: Version string

    Generation options:
        text_url / image_url: Pollinations endpoints
        text_model / image_model: Model identifiers sent with each request
        max_tokens: Token budget for text generation
        image_width / image_height: Target image dimensions
        timeout: Per-request HTTP timeout in seconds

    Behaviour:
        ignore_bots: Drop messages from every bot account, not only our own
    """

    bot_name: str = "Pollinations Bot"
    version: str = "1.0.0"
    text_url: str = TEXT_URL
    image_url: str = IMAGE_URL
    text_model: str = TEXT_MODEL
    image_model: str = IMAGE_MODEL
    max_tokens: int = 200
    image_width: int = 1024
    image_height: int = 1024
    timeout: float = DEFAULT_TIMEOUT
    ignore_bots: bool = True


class BotRunner:
    """
    Core bot orchestrator with built-in Pollinations client.

        config = BotConfig(bot_name="Pollinations Bot", version="1.0.0")
        BotRunner(config=config).start()

    Handlers never raise: every failure becomes a fixed notice for the user.
    """

    def __init__(
        self,
        config: BotConfig,
        adapter=None,
        client: Optional[PollinationsClient] = None,
    ):
        self.config = config

        if client is not None:
            self.ai = client
        else:
            api_key = os.environ.get("POLLINATIONS_API_KEY")
            if not api_key:
                raise ValueError("Missing POLLINATIONS_API_KEY")
            self.ai = PollinationsClient(
                api_key=api_key,
                text_url=config.text_url,
                image_url=config.image_url,
                timeout=config.timeout,
            )

        # Default to Discord adapter (lazy import avoids requiring tokens at import time)
        if adapter is not None:
            self.adapter = adapter
        else:
            from .discord_adapter import DiscordAdapter

            self.adapter = DiscordAdapter()

    async def handle_message(self, user_text: str, log_context: Optional[Dict] = None) -> str:
        """
        Generate a reply for a chat message. Called by the adapter.

        Args:
            user_text: Raw message text, sent as the prompt
            log_context: Structured logging context (user_id, channel, etc.)

        Returns:
            Generated text, or a fixed notice when nothing usable came back
        """
        try:
            data = await self.ai.generate_text(
                user_text,
                max_tokens=self.config.max_tokens,
                model=self.config.text_model,
                log_context=log_context,
            )
        except Exception as e:
            logger.error(f"Text generation error: {e}", exc_info=True, extra=log_context or {})
            return TEXT_ERROR_NOTICE

        text = extract_text(data)
        if text is None:
            logger.warning("Text response had no recognised field", extra=log_context or {})
            return NO_TEXT_NOTICE
        return text

    async def handle_imagine(self, prompt: str, log_context: Optional[Dict] = None) -> str:
        """
        Generate an image for /imagine and return the final response text.

        Args:
            prompt: The command's prompt option
            log_context: Structured logging context

        Returns:
            Prompt and image URL for display, or a fixed notice
        """
        try:
            data = await self.ai.generate_image(
                prompt,
                width=self.config.image_width,
                height=self.config.image_height,
                model=self.config.image_model,
                log_context=log_context,
            )
        except Exception as e:
            logger.error(f"Image generation error: {e}", exc_info=True, extra=log_context or {})
            return IMAGE_ERROR_NOTICE

        image_url = extract_image_url(data)
        if image_url is None:
            logger.warning("Image response had no recognised field", extra=log_context or {})
            return NO_IMAGE_NOTICE
        return format_image_reply(prompt, image_url)

    async def aclose(self):
        """Release the HTTP connection pool."""
        await self.ai.aclose()

    def start(self, **adapter_kwargs):
        """Start the bot via its adapter. Blocks until shutdown.

        Args:
            **adapter_kwargs: Passed to adapter.start() (e.g., register_signals=False).
        """
        logger.info(f"Starting {self.config.bot_name} v{self.config.version}...")
        self.adapter.start(self, **adapter_kwargs)
