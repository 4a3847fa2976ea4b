"""Opaque cursor helpers for keyset pagination.

Cursors wrap the last seen primary key (BIGINT or snowflake string) in
Base64 JSON. Services fetch limit+1 rows to detect has_more without COUNT(*).
"""

import base64
import binascii
import json
from typing import Any


def cursor_encode(last_id: int | str) -> str:
    payload = json.dumps({"id": last_id})
    return base64.urlsafe_b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> Any:
    """Decode a cursor back to the last seen id. Returns None on a malformed cursor."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.urlsafe_b64decode(cursor.encode()).decode())
        return payload["id"]
    except (binascii.Error, ValueError, KeyError, TypeError):
        return None
