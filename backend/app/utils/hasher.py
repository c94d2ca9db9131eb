"""
Hashing and timestamp utilities.
"""

import json
import hashlib
from datetime import datetime, timezone
from typing import Any, Dict, List


def hash_records(records: List[Dict[str, Any]]) -> str:
    """Generate SHA-256 hash of a list of JSON-serialisable records."""
    json_string = json.dumps(records, sort_keys=True, default=str)
    hash_object = hashlib.sha256(json_string.encode("utf-8"))
    return hash_object.hexdigest()


def get_timestamp() -> str:
    """Get current UTC time as ISO format string."""
    return datetime.now(timezone.utc).isoformat()
