"""Item name normalization utilities.

Order descriptions and catalog descriptions are compared in a canonical form:
bracketed and asterisk-delimited annotations removed, whitespace collapsed,
lowercased.

Known limitation: the patterns are non-greedy and do not check balance, so an
unclosed "[" or "*" pairs with the next closing character and may remove
legitimate text in between.
"""

import re
from typing import List, Optional

_BRACKETED = re.compile(r"\[.*?\]")
_ASTERISKED = re.compile(r"\*.*?\*")
_WHITESPACE = re.compile(r"\s+")


def normalize_item_name(text: Optional[str]) -> str:
    """Normalize an item name for matching.

    Args:
        text: Raw item or product description

    Returns:
        Canonical lowercase form, e.g. "DND Gel Polish [Color: Red]" -> "dnd gel polish"
    """
    if not text:
        return ""

    result = _BRACKETED.sub("", text)
    result = _ASTERISKED.sub("", result)
    result = _WHITESPACE.sub(" ", result)
    return result.strip().lower()


def tokenize(normalized: str) -> List[str]:
    """Split a normalized item name into words.

    Args:
        normalized: Output of normalize_item_name()

    Returns:
        Non-empty whitespace-delimited tokens in order
    """
    return [word for word in normalized.split(" ") if word]
