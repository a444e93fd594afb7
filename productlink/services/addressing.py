from __future__ import annotations

"""Content addressing: deterministic ids for serialized payloads."""

import hashlib
import json
import re
from typing import Any

from productlink.errors import PayloadNotFoundError

CONTENT_ID_RE = re.compile(r"^[0-9a-fA-F]{64}$")


def content_id(data: bytes) -> str:
    """Return the lowercase SHA-256 hex digest of ``data``."""

    return hashlib.sha256(data).hexdigest()


def is_valid_content_id(value: Any) -> bool:
    return isinstance(value, str) and bool(CONTENT_ID_RE.fullmatch(value))


def normalize_content_id(value: Any) -> str:
    """Validate an identifier from a URL and return its canonical lowercase form.

    Malformed identifiers raise the same error as unknown ones so the two cases
    are indistinguishable to callers.
    """

    if not is_valid_content_id(value):
        raise PayloadNotFoundError()
    return value.lower()


def serialize_payload(payload: Any, *, canonical: bool = False) -> str:
    """Compact JSON text for ``payload``.

    With ``canonical`` the keys are sorted, so payloads that only differ in
    field order serialize (and therefore hash) identically.
    """

    return json.dumps(
        payload,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
        sort_keys=canonical,
    )
