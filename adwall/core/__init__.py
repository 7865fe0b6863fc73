"""
Core module containing configuration, errors and utilities.
"""

from .config import settings, Settings
from .exceptions import ApiError, StorageError, UploadRejected
from .utils import generate_ad_id, get_timestamp

__all__ = [
    "settings",
    "Settings",
    "ApiError",
    "StorageError",
    "UploadRejected",
    "generate_ad_id",
    "get_timestamp"
]
