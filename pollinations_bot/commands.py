"""
Application command definitions. The bot registers exactly one: /imagine.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class CommandSpec:
    """A chat-input command taking a single required string option."""

    name: str
    description: str
    option_name: str
    option_description: str


IMAGINE = CommandSpec(
    name="imagine",
    description="Generate an image using Pollinations",
    option_name="prompt",
    option_description="Describe your image",
)

COMMANDS = [IMAGINE]
