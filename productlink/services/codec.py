from __future__ import annotations

"""Pack JSON payloads into URL-safe tokens and back.

A token is the payload's compact JSON text, UTF-8 encoded, compressed as a raw
DEFLATE stream (no zlib or gzip framing) and base64url-encoded without padding.
"""

import base64
import binascii
import json
import re
import zlib
from typing import Any

from productlink.errors import PayloadDecodeError, PayloadValidationError
from productlink.services.addressing import serialize_payload

# Keeps the full link under the ~16 KB URL ceiling of common intermediaries.
TOKEN_BUDGET = 14_000
URL_LENGTH_CEILING = 16_000

# Upper bounds for tokens accepted from clients and for the text they inflate to.
MAX_TOKEN_LENGTH = 4 * URL_LENGTH_CEILING
MAX_DECODED_BYTES = 25 * 1024 * 1024

TOKEN_RE = re.compile(r"^[A-Za-z0-9_-]+$")
_RAW_DEFLATE_WBITS = -zlib.MAX_WBITS


class PayloadCodec:
    """Reversible JSON <-> token transform."""

    def __init__(
        self,
        level: int = zlib.Z_BEST_COMPRESSION,
        max_decoded_bytes: int = MAX_DECODED_BYTES,
        max_token_length: int = MAX_TOKEN_LENGTH,
    ) -> None:
        self.level = level
        self.max_token_length = max_token_length
        self.max_decoded_bytes = max_decoded_bytes

    def encode(self, payload: Any) -> str:
        try:
            text = serialize_payload(payload)
        except (TypeError, ValueError) as exc:
            raise PayloadValidationError(
                f"Payload is not JSON-representable: {exc}"
            ) from exc

        compressor = zlib.compressobj(self.level, zlib.DEFLATED, _RAW_DEFLATE_WBITS)
        compressed = compressor.compress(text.encode("utf-8")) + compressor.flush()
        return base64.urlsafe_b64encode(compressed).decode("ascii").rstrip("=")

    def decode(self, token: str) -> Any:
        if isinstance(token, str) and len(token) > self.max_token_length:
            raise PayloadDecodeError("Token is longer than the allowed maximum")
        if not is_token(token):
            raise PayloadDecodeError("Token contains characters outside the URL-safe alphabet")

        padded = token + "=" * (-len(token) % 4)
        try:
            compressed = base64.urlsafe_b64decode(padded)
        except (binascii.Error, ValueError) as exc:
            raise PayloadDecodeError("Token is not valid base64url") from exc

        decompressor = zlib.decompressobj(_RAW_DEFLATE_WBITS)
        try:
            raw = decompressor.decompress(compressed, self.max_decoded_bytes + 1)
        except zlib.error as exc:
            raise PayloadDecodeError("Token is not a valid DEFLATE stream") from exc
        if len(raw) > self.max_decoded_bytes:
            raise PayloadDecodeError("Token inflates beyond the allowed payload size")
        if not decompressor.eof or decompressor.unused_data:
            raise PayloadDecodeError("Token DEFLATE stream is truncated or has trailing data")

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise PayloadDecodeError("Token does not contain UTF-8 text") from exc

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise PayloadDecodeError("Token does not contain valid JSON") from exc

    def token_length(self, payload: Any) -> int:
        return len(self.encode(payload))


def is_token(value: Any) -> bool:
    return isinstance(value, str) and bool(TOKEN_RE.fullmatch(value))


def fits_budget(token: str, budget: int = TOKEN_BUDGET) -> bool:
    """True when ``token`` is short enough to travel inside a URL."""

    return len(token) <= budget
