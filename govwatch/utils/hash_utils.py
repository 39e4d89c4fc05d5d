"""Utility helpers for generating deterministic content hashes.

Provides stable hashing for domain records to support change detection
during upserts.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from pydantic import BaseModel

# Fields that should not influence content hashing because they are
# identity, not content.
_RECORD_HASH_EXCLUDE_FIELDS: set[str] = {
    "external_id",
}


def _normalized_json(payload: Any) -> str:
    """Serialize payload to a deterministic JSON string."""
    return json.dumps(
        payload,
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
        default=str,
    )


def calculate_hash(payload: Any) -> str:
    """Produce a SHA-256 hash for the given payload."""
    normalized = _normalized_json(payload)
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


def compute_record_hash(record: BaseModel) -> str:
    """Compute a deterministic content hash for a legislation, meeting or election record."""
    payload = record.model_dump(mode="json", exclude=_RECORD_HASH_EXCLUDE_FIELDS)
    return calculate_hash(payload)


def short_hash(value: str, length: int = 12) -> str:
    """Short stable digest used for fallback identifiers."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:length]
