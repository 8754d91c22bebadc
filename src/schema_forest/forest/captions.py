"""Caption sanitizing and collision resolution."""

import re
from typing import Iterable

_WHITESPACE_RUN = re.compile(r"\s+")


def sanitize_caption(caption: str, separator: str = "_") -> str:
    """Trim a caption and collapse inner whitespace runs into ``separator``.

    Example:
        >>> sanitize_caption("  order   lines ")
        'order_lines'
    """
    return _WHITESPACE_RUN.sub(separator, caption.strip())


def generate_unique_caption(caption: str, taken: Iterable[str], separator: str = "_") -> str:
    """Sanitize ``caption`` and suffix it until it is not in ``taken``.

    Suffixes are ``_1``, ``_2``, ... counted up from 1 until a free caption is
    found.

    Args:
        caption: Requested caption
        taken: Captions already used in the uniqueness scope
        separator: Replacement for whitespace runs

    Returns:
        A caption not present in ``taken``
    """
    base = sanitize_caption(caption, separator)
    used = set(taken)
    candidate = base
    counter = 1
    while candidate in used:
        candidate = f"{base}_{counter}"
        counter += 1
    return candidate
