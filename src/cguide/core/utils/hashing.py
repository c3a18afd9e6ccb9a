"""SHA-256 content hashing for document change detection"""

import hashlib
import json
from typing import Any, Mapping


def sha256(content: str) -> str:
    """Return hex-encoded SHA-256 hash of content (64 chars, matches String(64) column)."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def json_hash(data: Mapping[str, Any]) -> str:
    """Hash of a JSON document, independent of key order."""
    return sha256(json.dumps(data, sort_keys=True, ensure_ascii=False, separators=(",", ":")))
