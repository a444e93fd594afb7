from __future__ import annotations

"""Shape coercion and display normalization for decoded or stored payloads.

Every retrieval path (query token, fragment token, stored id) runs through
the same functions so one JSON document always renders the same way. Nothing
here touches stored bytes; normalization happens on the way out.
"""

import json
from typing import Any, List, Mapping

from productlink.errors import PayloadDecodeError, PayloadNotFoundError
from productlink.schemas import DisplayRecord

LEADING_MARKERS = ("\u200d", "\ufeff", "\u200b")


def parse_payload_text(text: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, json.JSONDecodeError) as exc:
        raise PayloadDecodeError("Stored payload is not valid JSON") from exc


def coerce_payload(value: Any) -> List[Any]:
    """Resolve the parsed value into an ordered list of records."""

    if value is None:
        raise PayloadNotFoundError()
    if isinstance(value, list):
        return value
    if isinstance(value, Mapping):
        return [value]
    raise PayloadDecodeError("Payload is neither a record nor a list of records")


def strip_leading_marker(value: Any) -> Any:
    """Drop a single leading zero-width joiner, BOM or zero-width space."""

    if isinstance(value, str) and value[:1] in LEADING_MARKERS:
        return value[1:]
    return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _display_number(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _display_raw(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if _is_number(value):
        return _display_number(value)
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def format_money(value: Any) -> str:
    if _is_number(value):
        return f"{value:.2f}"
    return _display_raw(value)


def format_discount(value: Any) -> str:
    if value is None:
        value = 0
    return f"{_display_raw(value)}%"


def format_flag(value: Any) -> str:
    return "Yes" if value else "No"


def normalize_record(record: Any) -> DisplayRecord:
    """Turn one raw record into display-ready values.

    Non-mapping entries behave like a record with every field absent.
    """

    if not isinstance(record, Mapping):
        record = {}

    return DisplayRecord(
        product=strip_leading_marker(record.get("product")),
        price=format_money(record.get("price")),
        compare_at_price=format_money(record.get("compare_at_price")),
        discount=format_discount(record.get("discount_percentage")),
        is_free=format_flag(record.get("is_free")),
        variantId=record.get("variantId"),
        website=record.get("website"),
        cartLink=record.get("cartLink"),
        image_url=record.get("image_url"),
    )


def normalize_payload(value: Any) -> List[DisplayRecord]:
    return [normalize_record(record) for record in coerce_payload(value)]
