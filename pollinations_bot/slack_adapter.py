"""
SlackAdapter — Slack interface for bots.

Handles Socket Mode connection, event routing, and response posting.
Routes messages and /imagine to BotRunner for processing.
"""

import asyncio
import logging
import os
import signal
from typing import Optional

from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler
from slack_bolt.async_app import AsyncApp

from .commands import IMAGINE

logger = logging.getLogger(__name__)

WORKING_NOTICE = ":hourglass_flowing_sand: Generating image..."


class SlackAdapter:
    """Slack Socket Mode adapter. Routes messages and /imagine to a BotRunner."""

    def __init__(
        self,
        bot_token: Optional[str] = None,
        app_token: Optional[str] = None,
    ):
        self.bot_token = bot_token or os.environ.get("SLACK_BOT_TOKEN")
        self.app_token = app_token or os.environ.get("SLACK_APP_TOKEN")

        if not self.bot_token or not self.app_token:
            raise ValueError("Missing SLACK_BOT_TOKEN or SLACK_APP_TOKEN")

        self.runner = None
        self.bot_id: Optional[str] = None
        self._stop: Optional[asyncio.Event] = None

    def start(self, runner, register_signals: bool = True):
        """Start Slack Socket Mode, routing events to runner. Blocks until shutdown."""
        self.runner = runner
        asyncio.run(self._serve(register_signals))

    async def _serve(self, register_signals: bool):
        self.app = AsyncApp(token=self.bot_token)
        self._register_handlers()

        auth_info = await self.app.client.auth_test()
        self.bot_id = auth_info.get("bot_id")
        await self.sync_commands()

        self._stop = asyncio.Event()
        if register_signals:
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGTERM, signal.SIGINT):
                loop.add_signal_handler(sig, self._shutdown_handler)

        handler = AsyncSocketModeHandler(self.app, self.app_token)
        try:
            await handler.connect_async()
            logger.info(f"Connected to Slack as bot {self.bot_id}")
            await self._stop.wait()
        finally:
            await handler.close_async()
            await self.runner.aclose()

    def _register_handlers(self):
        """Register Slack event handlers."""

        @self.app.event("message")
        async def handle_message(event, say):
            await self._handle_message(event, say)

        @self.app.command(f"/{IMAGINE.name}")
        async def handle_imagine(ack, command, respond):
            await self._handle_imagine(ack, command, respond)

    async def sync_commands(self):
        """Slash commands live in the Slack app manifest; nothing to push at runtime."""
        logger.info(f"/{IMAGINE.name} is declared in the Slack app manifest, skipping registration")

    async def _handle_message(self, event, say):
        """Handle channel and direct messages."""
        if event.get("subtype"):
            return
        bot_id = event.get("bot_id")
        if bot_id and (bot_id == self.bot_id or self.runner.config.ignore_bots):
            return

        log_context = {
            "context": {
                "event_type": "message",
                "user_id": event.get("user"),
                "channel_id": event.get("channel"),
            }
        }
        response = await self.runner.handle_message(event.get("text", ""), log_context=log_context)

        try:
            await say(response, thread_ts=event.get("thread_ts") or event.get("ts"))
        except Exception as e:
            logger.error(f"Error replying to message: {e}", exc_info=True)

    async def _handle_imagine(self, ack, command, respond):
        """Handle /imagine: ack with a working notice, generate, replace the notice."""
        prompt = (command.get("text") or "").strip()
        if not prompt:
            await ack(text=f"Usage: /{IMAGINE.name} <{IMAGINE.option_name}>")
            return

        await ack(text=WORKING_NOTICE)

        log_context = {
            "context": {
                "event_type": "imagine",
                "user_id": command.get("user_id"),
                "channel_id": command.get("channel_id"),
            }
        }
        response = await self.runner.handle_imagine(prompt, log_context=log_context)

        try:
            await respond(text=response, response_type="in_channel", replace_original=True)
        except Exception as e:
            logger.error(f"Error responding to /{IMAGINE.name}: {e}", exc_info=True)

    def _shutdown_handler(self):
        """Graceful shutdown."""
        logger.info("Shutdown signal received...")
        if self._stop is not None:
            self._stop.set()
