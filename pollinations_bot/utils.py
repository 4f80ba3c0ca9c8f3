"""
Response utilities - pure functions for probing generation results and formatting replies.
"""

import logging
from typing import Any, Callable, Optional, Sequence

logger = logging.getLogger(__name__)

Accessor = Callable[[Any], Any]


def field(name: str) -> Accessor:
    """Accessor reading a top-level key from a JSON object."""
    def get(data: Any) -> Any:
        if isinstance(data, dict):
            return data.get(name)
        return None

    get.__name__ = name
    return get


def first_item(name: str) -> Accessor:
    """Accessor reading the first element of a list stored under a key."""
    def get(data: Any) -> Any:
        value = field(name)(data)
        if isinstance(value, list) and value:
            return value[0]
        return None

    get.__name__ = f"{name}[0]"
    return get


TEXT_FIELDS: Sequence[Accessor] = (field("text"), field("result"))
IMAGE_FIELDS: Sequence[Accessor] = (field("url"), field("image"), first_item("images"))


def first_present(data: Any, accessors: Sequence[Accessor]) -> Optional[Any]:
    """
    Evaluate accessors in priority order and return the first present value.

    A value is present when it is not None and not an empty string.

    Args:
        data: Decoded JSON response body (any shape)
        accessors: Candidate accessors, highest priority first

    Returns:
        The first present value, or None if no candidate matched
    """
    for accessor in accessors:
        value = accessor(data)
        if value is None or value == "":
            continue
        logger.debug(f"Matched response field {accessor.__name__}")
        return value
    return None


def extract_text(data: Any) -> Optional[str]:
    """Generated text from a text-generation response, if any."""
    value = first_present(data, TEXT_FIELDS)
    return None if value is None else str(value)


def extract_image_url(data: Any) -> Optional[str]:
    """Image locator from an image-generation response, if any."""
    value = first_present(data, IMAGE_FIELDS)
    return None if value is None else str(value)


def format_image_reply(prompt: str, image_url: str) -> str:
    """Display text for a generated image: bold prompt, then the URL."""
    return f"🖼️ **{prompt}**\n{image_url}"


def clamp_message(text: str, limit: int) -> str:
    """Truncate text to a platform message limit, marking the cut with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"
