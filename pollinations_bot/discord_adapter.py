"""
DiscordAdapter — Discord interface for bots.

Handles the gateway connection, /imagine registration, event routing,
and response posting. Routes messages and commands to BotRunner for processing.
"""

import asyncio
import logging
import os
import signal
from typing import Optional

import discord
from discord import app_commands

from .commands import IMAGINE
from .utils import clamp_message

logger = logging.getLogger(__name__)

DISCORD_MESSAGE_LIMIT = 2000


class GatewayClient(discord.Client):
    """Discord client that syncs commands before dispatch and routes events to the adapter."""

    def __init__(self, adapter: "DiscordAdapter", **options):
        super().__init__(**options)
        self.adapter = adapter
        self.tree = app_commands.CommandTree(self)

    async def setup_hook(self):
        # Runs after login, before the gateway starts delivering events
        await self.adapter.sync_commands()

    async def on_ready(self):
        logger.info(f"Logged in as {self.user}")

    async def on_message(self, message: discord.Message):
        await self.adapter._handle_message(message)


class DiscordAdapter:
    """Discord gateway adapter. Routes messages and /imagine to a BotRunner."""

    def __init__(
        self,
        bot_token: Optional[str] = None,
        application_id: Optional[int] = None,
    ):
        self.bot_token = bot_token or os.environ.get("DISCORD_TOKEN")
        if not self.bot_token:
            raise ValueError("Missing DISCORD_TOKEN")

        app_id = application_id or os.environ.get("CLIENT_ID")
        self.application_id = int(app_id) if app_id else None

        self.runner = None
        self.client: Optional[GatewayClient] = None

    def start(self, runner, register_signals: bool = True):
        """Connect to Discord, routing events to runner. Blocks until shutdown."""
        self.runner = runner
        asyncio.run(self._serve(register_signals))

    async def _serve(self, register_signals: bool):
        self.client = self._build_client()

        if register_signals:
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGTERM, signal.SIGINT):
                loop.add_signal_handler(sig, self._shutdown_handler)

        try:
            async with self.client:
                await self.client.start(self.bot_token)
        finally:
            await self.runner.aclose()

    def _build_client(self) -> GatewayClient:
        intents = discord.Intents.default()
        intents.message_content = True

        client = GatewayClient(self, intents=intents, application_id=self.application_id)
        client.tree.add_command(self._imagine_command())
        return client

    def _imagine_command(self) -> app_commands.Command:
        """Build the /imagine chat-input command bound to this adapter."""

        @app_commands.command(name=IMAGINE.name, description=IMAGINE.description)
        @app_commands.describe(prompt=IMAGINE.option_description)
        async def imagine(interaction: discord.Interaction, prompt: str):
            await self._handle_imagine(interaction, prompt)

        return imagine

    async def sync_commands(self):
        """Overwrite the global application commands with the tree's (just /imagine)."""
        logger.info(f"Registering /{IMAGINE.name}...")
        try:
            synced = await self.client.tree.sync()
        except Exception as e:
            logger.error(f"Slash command registration failed: {e}", exc_info=True)
            return
        logger.info(f"Slash commands registered: {[cmd.name for cmd in synced]}")

    async def _handle_message(self, message: discord.Message):
        """Handle a message in any channel the bot can read."""
        if message.author == self.client.user:
            return
        if message.author.bot and self.runner.config.ignore_bots:
            return

        log_context = {
            "context": {
                "event_type": "message",
                "user_id": message.author.id,
                "channel_id": message.channel.id,
            }
        }
        response = await self.runner.handle_message(message.content, log_context=log_context)

        try:
            await message.reply(clamp_message(response, DISCORD_MESSAGE_LIMIT))
        except discord.HTTPException as e:
            logger.error(f"Error replying to message: {e}", exc_info=True)

    async def _handle_imagine(self, interaction: discord.Interaction, prompt: str):
        """Handle /imagine: defer, generate, then edit the deferred response."""
        log_context = {
            "context": {
                "event_type": "imagine",
                "user_id": interaction.user.id,
                "channel_id": interaction.channel_id,
            }
        }

        try:
            # Shows the "thinking..." indicator until the edit lands
            await interaction.response.defer(thinking=True)
        except discord.HTTPException as e:
            logger.error(f"Error deferring /{IMAGINE.name}: {e}", exc_info=True)
            return

        response = await self.runner.handle_imagine(prompt, log_context=log_context)

        try:
            await interaction.edit_original_response(
                content=clamp_message(response, DISCORD_MESSAGE_LIMIT)
            )
        except discord.HTTPException as e:
            logger.error(f"Error editing /{IMAGINE.name} response: {e}", exc_info=True)

    def _shutdown_handler(self):
        """Graceful shutdown."""
        logger.info("Shutdown signal received...")
        if self.client is not None:
            asyncio.ensure_future(self.client.close())
