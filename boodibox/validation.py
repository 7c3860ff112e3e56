"""Argument validation for posts (reply permission, quote post id)."""
from __future__ import annotations

import re
from typing import Any, Optional

from .errors import ValidationError
from .models import ReplyPermission


class _Omitted:
    """Marker for an argument the caller did not pass at all."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "OMITTED"

    def __bool__(self) -> bool:
        return False


OMITTED: Any = _Omitted()

# Letter followed by lowercase alphanumerics, 24..32 characters in total
QUOTE_POST_ID_PATTERN = re.compile(r"^[a-z][a-z0-9]{23,31}$", re.IGNORECASE)


def resolve_reply_permission(value: Any = OMITTED) -> ReplyPermission:
    """
    Resolve a reply permission argument.

    Omitted means PUBLIC. An explicit empty or falsy value is rejected rather
    than treated as the default.
    """
    if value is OMITTED:
        return ReplyPermission.PUBLIC
    if isinstance(value, ReplyPermission):
        return value
    if value is None or value is False or (isinstance(value, str) and not value.strip()) or not value:
        raise ValidationError('replyPermission cannot be empty. Use "PUBLIC" or "PRIVATE".')

    normalized = str(value).strip().upper()
    try:
        return ReplyPermission(normalized)
    except ValueError:
        allowed = ", ".join(p.value for p in ReplyPermission)
        raise ValidationError(f"replyPermission must be one of: {allowed}") from None


def validate_quote_post_id(value: Any) -> Optional[str]:
    """Return the lower-cased quote post id, or None when not given."""
    if value is None:
        return None
    candidate = str(value).strip()
    if not QUOTE_POST_ID_PATTERN.match(candidate):
        raise ValidationError(
            "quotePostID must be a valid CUID v2-style id "
            "(letter + lowercase alphanumeric, length 24-32)."
        )
    return candidate.lower()
