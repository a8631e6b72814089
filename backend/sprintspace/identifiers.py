"""
SprintSpace Backend — Object Identifiers
==========================================

What:  Generation and validation of 24-character hexadecimal object ids.
How:   Ids follow the ObjectId byte layout: 4-byte big-endian creation time,
       5 random bytes fixed per process, 3-byte incrementing counter.

Every identifier-taking route validates its ids here BEFORE any storage
access, so a malformed id always yields HTTP 400.
"""

import itertools
import os
import re
import threading
import time

from sprintspace.exceptions import ValidationError

OBJECT_ID_LENGTH = 24
_OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")

_process_random = os.urandom(5)
_counter = itertools.count(int.from_bytes(os.urandom(3), "big"))
_counter_lock = threading.Lock()


def new_object_id() -> str:
    """Return a new lowercase 24-hex identifier."""
    with _counter_lock:
        count = next(_counter) & 0xFFFFFF
    timestamp = int(time.time()) & 0xFFFFFFFF
    raw = timestamp.to_bytes(4, "big") + _process_random + count.to_bytes(3, "big")
    return raw.hex()


def is_valid_object_id(value: object) -> bool:
    return isinstance(value, str) and _OBJECT_ID_RE.match(value) is not None


def check_object_id(value: object, resource: str = "resource") -> str:
    """
    Validate and normalize an identifier.

    Returns:
        The identifier lowercased.

    Raises:
        ValidationError: value is not 24 hex characters (→ 400)
    """
    if not is_valid_object_id(value):
        raise ValidationError(
            message=f"Invalid {resource} ID",
            field="id",
            context={"resource": resource, "value": str(value)[:64]},
        )
    return str(value).lower()
