from __future__ import annotations

"""Pick an addressing pattern for a payload."""

import logging
from typing import Any, Optional

from productlink.schemas import TransportPattern, TransportPlan
from productlink.services.codec import (
    TOKEN_BUDGET,
    URL_LENGTH_CEILING,
    PayloadCodec,
    fits_budget,
)
from productlink.services.ingestion import PayloadIngestor

logger = logging.getLogger(__name__)

VIEW_PATH = "/v"
TOKEN_PARAM = "d"


def query_url(token: str, base_url: str = "") -> str:
    return f"{base_url}{VIEW_PATH}?{TOKEN_PARAM}={token}"


def fragment_url(token: str, base_url: str = "") -> str:
    return f"{base_url}{VIEW_PATH}#{TOKEN_PARAM}={token}"


def token_fits(
    token: str,
    *,
    base_url: str = "",
    budget: int = TOKEN_BUDGET,
    url_ceiling: int = URL_LENGTH_CEILING,
) -> bool:
    """True when the token is within budget and its query URL stays under the ceiling."""

    return fits_budget(token, budget) and len(query_url(token, base_url)) <= url_ceiling


class TransportSelector:
    """Callers ask for a placement; the selector falls back to storage when needed.

    A query token reaches the server (so it can be rendered server-side and
    previewed) but is subject to server URL limits. A fragment token never
    leaves the browser. Anything over the token budget, or any request for a
    stable link, goes to the content-addressed store instead.
    """

    def __init__(
        self,
        ingestor: PayloadIngestor,
        codec: Optional[PayloadCodec] = None,
        *,
        base_url: str = "",
        budget: int = TOKEN_BUDGET,
        url_ceiling: int = URL_LENGTH_CEILING,
    ) -> None:
        self.ingestor = ingestor
        self.codec = codec or PayloadCodec()
        self.base_url = base_url
        self.budget = budget
        self.url_ceiling = url_ceiling

    def plan(self, payload: Any, *, prefer: TransportPattern = "query") -> TransportPlan:
        token = self.codec.encode(payload)
        fits = token_fits(
            token, base_url=self.base_url, budget=self.budget, url_ceiling=self.url_ceiling
        )

        if fits and prefer != "stored":
            query = query_url(token, self.base_url)
            fragment = fragment_url(token, self.base_url)
            url, alternative = (fragment, query) if prefer == "fragment" else (query, fragment)
            return TransportPlan(
                pattern=prefer,
                url=url,
                token_length=len(token),
                fits_budget=True,
                alternative_url=alternative,
            )

        stored = self.ingestor.ingest(payload)
        logger.info(
            "Falling back to stored payload",
            extra={"content_id": stored.id, "pattern": "stored"},
        )
        return TransportPlan(
            pattern="stored",
            url=stored.url,
            token_length=len(token),
            fits_budget=fits,
            id=stored.id,
        )
