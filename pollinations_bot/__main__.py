"""
Process entry point: python -m pollinations_bot (or the pollinations-bot script).
"""

import logging
import os

from dotenv import load_dotenv

from . import __version__
from .discord_adapter import DiscordAdapter
from .runner import BotConfig, BotRunner
from .slack_adapter import SlackAdapter

logger = logging.getLogger(__name__)


def build_adapter(platform: str):
    """Adapter for BOT_PLATFORM ("discord" or "slack")."""
    if platform == "discord":
        return DiscordAdapter()
    if platform == "slack":
        return SlackAdapter()
    raise ValueError(f"Unknown BOT_PLATFORM: {platform}")


def main():
    load_dotenv()
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())

    platform = os.environ.get("BOT_PLATFORM", "discord").lower()
    logger.info(f"Using {platform} adapter")
    config = BotConfig(bot_name="Pollinations Bot", version=__version__)
    BotRunner(config=config, adapter=build_adapter(platform)).start()


if __name__ == "__main__":
    main()
