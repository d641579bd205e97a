"""
General utility functions.

Provides embed text sanitization and validation helpers for config values.
"""
from __future__ import annotations

import re
from typing import Any, List, Optional

CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")

EMBED_FIELD_NAME_LIMIT = 256


def sanitize_text(text: Any, max_len: int = EMBED_FIELD_NAME_LIMIT) -> str:
    """Strip control characters and defuse @mentions for display in an embed."""
    if text is None:
        return ""
    text = str(text)
    text = CONTROL_RE.sub("", text)
    text = text.replace("@", "@\u200b")
    if len(text) > max_len:
        text = text[: max_len - 3] + "..."
    return text


def is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_valid_id(value: Any) -> bool:
    return is_int(value) and 1 <= value <= 2**63 - 1


def safe_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.isdigit():
            return int(stripped)
    return default


def one_or_many(value: Any) -> List[Any]:
    """Accept a single value or a list of values; None becomes an empty list."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]
