"""Broadcast duration tokens (``PT#H#M#S``) and human-readable labels."""

from __future__ import annotations

import re
from typing import Any

_TOKEN_RE = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")


def parse_duration(token: Any) -> int:
    """Return the number of seconds encoded by a ``PT#H#M#S`` token.

    Tokens without a recognisable ``PT`` marker resolve to ``0`` instead of
    raising, so unexpected API payloads never break playlist tracking.
    """
    if not isinstance(token, str):
        return 0
    match = _TOKEN_RE.search(token)
    if match is None:
        return 0
    hours = int(match.group(1) or 0)
    minutes = int(match.group(2) or 0)
    seconds = int(match.group(3) or 0)
    return hours * 3600 + minutes * 60 + seconds


def _split(total_seconds: int) -> tuple[int, int, int]:
    total = max(int(total_seconds), 0)
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)
    return hours, minutes, seconds


def format_duration(total_seconds: int) -> str:
    """Render seconds as ``"1h 2m 3s"``, ``"2m 3s"`` or ``"3s"``.

    Negative values are clamped to zero.
    """
    hours, minutes, seconds = _split(total_seconds)
    if hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    if minutes > 0:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


def duration_token(total_seconds: int) -> str:
    """Encode seconds in the ``PT#H#M#S`` grammar accepted by :func:`parse_duration`."""
    hours, minutes, seconds = _split(total_seconds)
    parts = ["PT"]
    if hours:
        parts.append(f"{hours}H")
    if minutes:
        parts.append(f"{minutes}M")
    if seconds or len(parts) == 1:
        parts.append(f"{seconds}S")
    return "".join(parts)


__all__ = ["duration_token", "format_duration", "parse_duration"]
