from __future__ import annotations

"""Write payloads to the content-addressed store and read them back."""

import logging
import time
from typing import Any, List, Optional

from productlink.errors import PayloadNotFoundError, PayloadValidationError
from productlink.schemas import DisplayRecord, StoredPayload
from productlink.services.addressing import (
    content_id,
    normalize_content_id,
    serialize_payload,
)
from productlink.services.normalizer import normalize_payload, parse_payload_text
from productlink.services.storage import StorageGateway

logger = logging.getLogger(__name__)

STORED_PATH_PREFIX = "/p/"


class PayloadIngestor:
    """Validate submitted payloads and store them under their content id."""

    def __init__(
        self,
        store: StorageGateway,
        *,
        base_url: str = "",
        canonical: bool = False,
        ttl: Optional[int] = None,
        read_retries: int = 0,
        retry_delay: float = 0.25,
    ) -> None:
        self.store = store
        self.base_url = base_url
        self.canonical = canonical
        self.ttl = ttl
        self.read_retries = read_retries
        self.retry_delay = retry_delay

    def stored_url(self, identifier: str) -> str:
        return f"{self.base_url}{STORED_PATH_PREFIX}{identifier}"

    def ingest(self, body: Any, ttl: Optional[int] = None) -> StoredPayload:
        if not isinstance(body, list):
            raise PayloadValidationError("Expected an array of products")

        try:
            text = serialize_payload(body, canonical=self.canonical)
        except (TypeError, ValueError) as exc:
            raise PayloadValidationError(
                f"Payload is not JSON-representable: {exc}"
            ) from exc

        data = text.encode("utf-8")
        identifier = content_id(data)
        self.store.put(identifier, text, ttl=ttl if ttl is not None else self.ttl)

        logger.info(
            "Stored payload",
            extra={"content_id": identifier, "size": len(data), "items": len(body)},
        )
        return StoredPayload(
            id=identifier,
            url=self.stored_url(identifier),
            text=text,
            size=len(data),
            items=len(body),
        )

    def fetch_text(self, identifier: Any) -> str:
        """Return the stored text for ``identifier`` without interpreting it."""

        key = normalize_content_id(identifier)
        for attempt in range(self.read_retries + 1):
            text = self.store.get(key)
            if text is not None:
                return text
            if attempt < self.read_retries:
                time.sleep(self.retry_delay)

        logger.info("Payload not found", extra={"content_id": key})
        raise PayloadNotFoundError()

    def fetch(self, identifier: Any) -> List[DisplayRecord]:
        text = self.fetch_text(identifier)
        return normalize_payload(parse_payload_text(text))
