from datetime import datetime, timezone
from typing import List, Optional
import time

def current_millis() -> int:
    """Current wall-clock time in milliseconds."""
    return int(time.time() * 1000)

def generate_key(timestamp_ms: int, original_name: str) -> str:
    """Object key for an upload. Identical names within one millisecond collide."""
    return f"{timestamp_ms}-{original_name}"

def parse_tags(raw: Optional[str]) -> List[str]:
    """
        Splits a comma separated tag string into unique tags.
        Blank entries are dropped and first-seen order is kept.
    """
    if not raw:
        return []
    tags = []
    for part in raw.split(","):
        tag = part.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags

def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with milliseconds, e.g. 2024-05-01T10:00:00.000Z"""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
