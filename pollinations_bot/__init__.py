"""
pollinations-bot: Chat bridge to the Pollinations text and image generation API.

Messages get a generated text reply; /imagine gets a generated image.

    from pollinations_bot import BotRunner, BotConfig

    config = BotConfig(bot_name="Pollinations Bot", version="1.0.0")
    BotRunner(config=config).start()

Slack instead of Discord (adapters are swappable):

    from pollinations_bot import BotRunner, BotConfig, SlackAdapter

    BotRunner(config=config, adapter=SlackAdapter()).start()
"""

from .ai import PollinationsClient
from .commands import IMAGINE, CommandSpec
from .discord_adapter import DiscordAdapter
from .runner import BotConfig, BotRunner
from .slack_adapter import SlackAdapter
from .utils import extract_image_url, extract_text, first_present

__all__ = [
    "BotRunner",
    "BotConfig",
    "PollinationsClient",
    "DiscordAdapter",
    "SlackAdapter",
    "CommandSpec",
    "IMAGINE",
    "first_present",
    "extract_text",
    "extract_image_url",
]
__version__ = "1.0.0"
