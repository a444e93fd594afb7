from __future__ import annotations

"""Shared pydantic schemas for the productlink service."""

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

TransportPattern = Literal["query", "fragment", "stored"]


class DisplayRecord(BaseModel):
    """Display-ready view of one product record.

    Formatted fields are always strings. Link-like fields keep the raw value so
    that the renderer can tell a missing link apart from a present one.
    """

    product: Optional[Any] = None
    price: str = ""
    compare_at_price: str = ""
    discount: str = "0%"
    is_free: str = "No"
    variantId: Optional[Any] = None
    website: Optional[Any] = None
    cartLink: Optional[Any] = None
    image_url: Optional[Any] = None


class StoredPayload(BaseModel):
    """Receipt for a payload written to the content-addressed store."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., pattern=r"^[0-9a-f]{64}$")
    url: str
    text: str = Field(..., exclude=True)
    size: int = Field(..., ge=0)
    items: int = Field(..., ge=0, alias="itemCount")


class TransportPlan(BaseModel):
    """How a payload should be addressed, as chosen by the transport selector."""

    pattern: TransportPattern
    url: str
    token_length: int = Field(..., ge=0)
    fits_budget: bool
    alternative_url: Optional[str] = None
    id: Optional[str] = None


class LinkRequest(BaseModel):
    """Request payload used by the /api/link endpoint."""

    items: List[Any] = Field(..., description="Ordered list of product records.")
    prefer: TransportPattern = Field(
        default="query",
        description="Placement to use when the token fits the size budget.",
    )


class DecodeRequest(BaseModel):
    """Request payload used by the /api/decode endpoint."""

    token: str = Field(..., description="Token taken from a query or fragment URL.")


class DecodedResponse(BaseModel):
    """Normalized records returned by the lookup endpoints."""

    id: Optional[str] = None
    items: List[DisplayRecord]
