"""productlink FastAPI application."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Optional

from fastapi import Body, Depends, FastAPI, Query
from fastapi.responses import HTMLResponse, JSONResponse, Response

from productlink.config import Settings, get_settings
from productlink.error_handlers import CORS_HEADERS, register_error_handlers
from productlink.logging_config import setup_logging
from productlink.schemas import DecodedResponse, DecodeRequest, LinkRequest, TransportPlan
from productlink.services import (
    ListingRenderer,
    PayloadCodec,
    PayloadIngestor,
    StorageGateway,
    TransportSelector,
    build_store,
)
from productlink.services.codec import MAX_TOKEN_LENGTH
from productlink.services.normalizer import normalize_payload

logger = logging.getLogger(__name__)

app = FastAPI(
    title="productlink",
    description=(
        "Share arrays of product records through a single URL: compressed tokens"
        " for small payloads, content-addressed storage for large ones."
    ),
    version="0.1.0",
)
register_error_handlers(app)

_codec = PayloadCodec()
_renderer = ListingRenderer()

PREFLIGHT_HEADERS = {
    **CORS_HEADERS,
    "access-control-allow-methods": "POST, OPTIONS",
    "access-control-allow-headers": "Content-Type",
}


@lru_cache
def _default_store() -> StorageGateway:
    return build_store(get_settings())


def get_store() -> StorageGateway:
    return _default_store()


def get_ingestor(
    store: StorageGateway = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> PayloadIngestor:
    return PayloadIngestor(
        store,
        base_url=settings.public_base_url,
        canonical=settings.canonicalize_keys,
        ttl=settings.payload_ttl_seconds,
        read_retries=settings.read_retries,
        retry_delay=settings.read_retry_delay_seconds,
    )


def get_selector(
    ingestor: PayloadIngestor = Depends(get_ingestor),
    settings: Settings = Depends(get_settings),
) -> TransportSelector:
    return TransportSelector(
        ingestor,
        _codec,
        base_url=settings.public_base_url,
        budget=settings.token_budget,
        url_ceiling=settings.url_length_ceiling,
    )


def _cache_headers(settings: Settings) -> dict[str, str]:
    return {"cache-control": f"public, max-age={settings.cache_max_age_seconds}"}


@app.on_event("startup")
def configure_logging() -> None:  # pragma: no cover - integration side effect
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    logger.info("productlink started", extra={"pattern": settings.storage_backend})


@app.on_event("shutdown")
def close_store() -> None:
    if _default_store.cache_info().currsize:
        _default_store().close()
        _default_store.cache_clear()


@app.get("/health")
def health_check() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/api/new")
def create_payload(
    body: Any = Body(...),
    ingestor: PayloadIngestor = Depends(get_ingestor),
) -> JSONResponse:
    stored = ingestor.ingest(body)
    return JSONResponse(stored.model_dump(exclude={"text"}), headers=CORS_HEADERS)


@app.options("/api/new", include_in_schema=False)
def create_payload_preflight() -> Response:
    return Response(status_code=204, headers=PREFLIGHT_HEADERS)


@app.get("/p/{identifier}", response_class=HTMLResponse)
def view_stored_payload(
    identifier: str,
    ingestor: PayloadIngestor = Depends(get_ingestor),
    settings: Settings = Depends(get_settings),
) -> HTMLResponse:
    records = ingestor.fetch(identifier)
    html = _renderer.build_page(
        records,
        title="Product Payload",
        subtitle=f"ID: {identifier[:8].lower()}...",
    )
    return HTMLResponse(html, headers=_cache_headers(settings))


@app.get("/api/p/{identifier}", response_model=DecodedResponse)
def read_stored_payload(
    identifier: str,
    ingestor: PayloadIngestor = Depends(get_ingestor),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    records = ingestor.fetch(identifier)
    response = DecodedResponse(id=identifier.lower(), items=records)
    return JSONResponse(
        response.model_dump(),
        headers={**CORS_HEADERS, **_cache_headers(settings)},
    )


@app.get("/v", response_class=HTMLResponse)
def view_token_payload(
    d: Optional[str] = Query(
        None,
        max_length=MAX_TOKEN_LENGTH,
        description="Payload token produced by the codec. Absent for fragment links.",
    ),
    settings: Settings = Depends(get_settings),
) -> HTMLResponse:
    if d is None:
        return HTMLResponse(_renderer.build_fragment_page(), headers=_cache_headers(settings))
    records = normalize_payload(_codec.decode(d))
    html = _renderer.build_page(records, title="Product Payload", subtitle="Loaded from link")
    return HTMLResponse(html, headers=_cache_headers(settings))


@app.post("/api/decode", response_model=DecodedResponse)
def decode_token(payload: DecodeRequest) -> DecodedResponse:
    records = normalize_payload(_codec.decode(payload.token))
    return DecodedResponse(items=records)


@app.post("/api/link", response_model=TransportPlan)
def plan_link(
    payload: LinkRequest,
    selector: TransportSelector = Depends(get_selector),
) -> TransportPlan:
    return selector.plan(payload.items, prefer=payload.prefer)
