"""
Canonical Hashing
Single source of truth for result hashes.

Analytics results are pure functions of their inputs, so the same data must
always produce the same hash. Used to prove batch idempotence and to let
callers detect unchanged reports.
"""

import hashlib
import json
from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel

# Model fields excluded from hashing (volatile/generated). Matched on field
# names only; keys of data dicts (option values, question ids) are always kept.
VOLATILE_FIELDS = frozenset([
    "generated_at",
    "timestamp",
    "result_hash",
])


def _key(k: Any) -> str:
    return str(k.value) if isinstance(k, Enum) else str(k)


def _clean(o: Any, exclude_volatile: bool) -> Any:
    if isinstance(o, BaseModel):
        return {
            name: _clean(getattr(o, name), exclude_volatile)
            for name in sorted(type(o).model_fields)
            if not (exclude_volatile and name in VOLATILE_FIELDS)
        }
    elif isinstance(o, Enum):
        return o.value
    elif isinstance(o, dict):
        return {
            _key(k): _clean(v, exclude_volatile)
            for k, v in sorted(o.items(), key=lambda kv: _key(kv[0]))
        }
    elif isinstance(o, (list, tuple)):
        return [_clean(i, exclude_volatile) for i in o]
    elif isinstance(o, (set, frozenset)):
        return sorted(_clean(i, exclude_volatile) for i in o)
    elif isinstance(o, (datetime, date)):
        return o.isoformat()
    elif isinstance(o, float):
        # Normalize floats to avoid precision issues
        return round(o, 10)
    return o


def canonicalize(obj: Any, exclude_volatile: bool = True) -> str:
    """
    Convert object to canonical JSON string.
    Deterministic: same input always produces same output.
    """
    cleaned = _clean(obj, exclude_volatile)
    return json.dumps(cleaned, sort_keys=True, separators=(',', ':'), ensure_ascii=True)


def canonicalize_and_hash(obj: Any, exclude_volatile: bool = True) -> str:
    """
    Returns: "sha256:<64-char-hex>"
    """
    canonical = canonicalize(obj, exclude_volatile)
    digest = hashlib.sha256(canonical.encode('utf-8')).hexdigest()
    return f"sha256:{digest}"


def verify_hash(obj: Any, expected_hash: str, exclude_volatile: bool = True) -> bool:
    """
    Verify object matches expected hash.
    """
    computed = canonicalize_and_hash(obj, exclude_volatile)
    return computed == expected_hash
