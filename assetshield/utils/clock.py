# -*- coding: utf-8 -*-
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns round-trip on SQLite."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
