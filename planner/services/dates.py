"""Resolving the anchor date the HTTP shell receives as text."""

from __future__ import annotations

from datetime import datetime

import dateparser


def resolve_anchor(raw: str | None, now: datetime) -> datetime | None:
    """Parse *raw* ("2026-03-02", "today", "next friday") relative to *now*.

    Returns *now* when *raw* is empty and ``None`` when it cannot be parsed.
    The result is a naive wall-clock datetime.
    """
    if not raw or not raw.strip():
        return now.replace(tzinfo=None)
    settings = {
        "PREFER_DATES_FROM": "future",
        "RELATIVE_BASE": now.replace(tzinfo=None),
        "RETURN_AS_TIMEZONE_AWARE": False,
    }
    return dateparser.parse(raw.strip(), settings=settings)
