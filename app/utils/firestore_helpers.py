"""
Firestore helpers shared by the services.

Contact and metadata are stored as JSON strings (opaque blob columns), so
every read/write of those fields goes through dump_blob / load_blob.
"""

import json
import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def where_filter(query, field_path: str, op_string: str, value):
    """
    Helper function for Firestore queries.

    Usage:
        query = where_filter(collection, "type", "==", "HOSPITAL")
        query = where_filter(query, "status", "==", "AVAILABLE")
    """
    return query.where(field_path, op_string, value)


def dump_blob(value: Optional[Any]) -> str:
    """Serialize a structured value for a JSON blob field (compact, key order preserved)."""
    return json.dumps(value if value is not None else {}, separators=(",", ":"), ensure_ascii=False)


def load_blob(raw: Any, field: str = "blob", doc_id: Optional[str] = None) -> Optional[Dict]:
    """
    Parse a JSON blob field back into a dict.

    Documents written by older clients may hold the object directly instead of
    a string; those are returned as-is. Unparseable blobs, and blobs that
    decode to anything other than an object, read as None.
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, dict):
        return raw
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning(f"Unparseable {field} blob on document {doc_id or '?'}; treating as empty")
        return None
    if not isinstance(value, dict):
        logger.warning(f"{field} blob on document {doc_id or '?'} is {type(value).__name__}, not an object; treating as empty")
        return None
    return value
