"""Cursor-based pagination utilities shared by list endpoints.

Cursors are opaque Base64 JSON wrapping the last seen primary key.
Services fetch limit+1 rows to detect has_more without a COUNT(*) query.
"""

import base64
import binascii
import json


def cursor_encode(last_id: str | int) -> str:
    """Encode a primary key into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.urlsafe_b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> str | None:
    """Decode a cursor back to the last seen id (as str). Returns None on a bad cursor."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.urlsafe_b64decode(cursor.encode()).decode())
        return str(payload["id"])
    except (binascii.Error, UnicodeDecodeError, ValueError, KeyError, TypeError):
        return None


def keyset_encode(sort_value: str | int, last_id: str) -> str:
    """Encode a (sort column value, id) pair for lists not ordered by id alone."""
    payload = json.dumps({"v": sort_value, "id": last_id})
    return base64.urlsafe_b64encode(payload.encode()).decode()


def keyset_decode(cursor: str | None) -> tuple[str | int, str] | None:
    """Decode a keyset cursor -> (sort_value, id), or None on a bad cursor."""
    if cursor is None:
        return None
    try:
        data = json.loads(base64.urlsafe_b64decode(cursor.encode()).decode())
        return data["v"], str(data["id"])
    except (binascii.Error, UnicodeDecodeError, ValueError, KeyError, TypeError):
        return None


def id_as_bigint(last_id: str | None) -> int | None:
    """Snowflake ids are stored as VARCHAR but ordered numerically; a non-numeric id starts over."""
    if last_id is None or not last_id.isdigit():
        return None
    return int(last_id)
