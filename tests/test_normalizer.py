from __future__ import annotations

import pytest

from productlink.errors import PayloadDecodeError, PayloadNotFoundError
from productlink.services.normalizer import (
    coerce_payload,
    normalize_payload,
    normalize_record,
    parse_payload_text,
    strip_leading_marker,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("\u200dWidget", "Widget"),
        ("\ufeffWidget", "Widget"),
        ("\u200bWidget", "Widget"),
        ("Wid\u200dget", "Wid\u200dget"),
        ("\u200d\u200bWidget", "\u200bWidget"),
        ("Widget\ufeff", "Widget\ufeff"),
        ("", ""),
        (42, 42),
        (None, None),
    ],
)
def test_strip_leading_marker(raw, expected) -> None:
    assert strip_leading_marker(raw) == expected


def test_display_formatting_for_complete_record() -> None:
    record = normalize_record(
        {
            "product": "\u200dWidget",
            "variantId": "123",
            "website": "https://shop.example.com/widget",
            "cartLink": "https://shop.example.com/cart/123:1",
            "price": 9,
            "compare_at_price": 12.5,
            "discount_percentage": 25,
            "is_free": True,
            "image_url": "https://cdn.example.com/widget.jpg",
        }
    )

    assert record.product == "Widget"
    assert record.price == "9.00"
    assert record.compare_at_price == "12.50"
    assert record.discount == "25%"
    assert record.is_free == "Yes"
    assert record.variantId == "123"
    assert record.website == "https://shop.example.com/widget"
    assert record.cartLink == "https://shop.example.com/cart/123:1"
    assert record.image_url == "https://cdn.example.com/widget.jpg"


def test_display_formatting_for_empty_record() -> None:
    record = normalize_record({})

    assert record.product is None
    assert record.price == ""
    assert record.compare_at_price == ""
    assert record.discount == "0%"
    assert record.is_free == "No"
    assert record.variantId is None
    assert record.website is None
    assert record.cartLink is None
    assert record.image_url is None


def test_wrong_types_degrade_to_raw_display() -> None:
    record = normalize_record(
        {"price": "29.99", "compare_at_price": True, "discount_percentage": 12.5, "is_free": 0}
    )

    assert record.price == "29.99"
    assert record.compare_at_price == "true"
    assert record.discount == "12.5%"
    assert record.is_free == "No"


def test_whole_float_discount_displays_without_fraction() -> None:
    assert normalize_record({"discount_percentage": 10.0}).discount == "10%"


def test_non_mapping_entries_behave_like_empty_records() -> None:
    assert normalize_record("oops") == normalize_record({})


def test_coerce_payload_shapes() -> None:
    records = [{"product": "A"}, {"product": "B"}]

    assert coerce_payload(records) is records
    assert coerce_payload({"product": "A"}) == [{"product": "A"}]
    assert coerce_payload([]) == []


def test_coerce_payload_null_is_not_found() -> None:
    with pytest.raises(PayloadNotFoundError):
        coerce_payload(None)


def test_coerce_payload_rejects_scalars() -> None:
    with pytest.raises(PayloadDecodeError):
        coerce_payload(42)


def test_parse_payload_text_rejects_invalid_json() -> None:
    with pytest.raises(PayloadDecodeError):
        parse_payload_text("{not json")


def test_normalize_payload_preserves_order() -> None:
    records = normalize_payload([{"product": "First"}, {"product": "Second"}])

    assert [record.product for record in records] == ["First", "Second"]
