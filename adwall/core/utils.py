"""
Shared utility functions for the ad wall backend.

Contains helper functions used across multiple modules including
ID generation, timestamp handling and upload file naming.
"""

import threading
import time
import uuid
from datetime import datetime, timezone
from pathlib import PurePath


_id_lock = threading.Lock()
_last_ad_id = 0


def generate_ad_id() -> str:
    """
    Generate a unique ad identifier.

    IDs are the current Unix time in milliseconds as a decimal string.
    Two calls within the same millisecond still get distinct IDs: the
    sequence never goes backwards and never repeats within a process.

    Returns:
        A numeric ID string such as '1767225600000'
    """
    global _last_ad_id
    with _id_lock:
        candidate = int(time.time() * 1000)
        if candidate <= _last_ad_id:
            candidate = _last_ad_id + 1
        _last_ad_id = candidate
        return str(candidate)


def get_timestamp() -> str:
    """
    Get current UTC timestamp in ISO format.

    Returns:
        ISO-formatted UTC timestamp string
    """
    return datetime.now(timezone.utc).isoformat()


def build_upload_name(original_name: str | None) -> str:
    """
    Build a collision-free storage name for an uploaded file.

    Only the suffix of the client's file name is kept, so nothing the
    client sends ends up as a path component.

    Args:
        original_name: File name as reported by the client (may be empty)

    Returns:
        Name in format '<ms timestamp>-<random hex><suffix>'
    """
    suffix = PurePath(original_name or "").suffix.lower()
    if not suffix[1:].isalnum():
        suffix = ""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{suffix}"
