from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from purpleifypdf.typing.enums import Quality
from purpleifypdf.typing.models import (
    DEFAULT_BACKGROUND_COLOR,
    Color,
    ImagesMetadata,
    PageRange,
    PortOptions,
    Status,
    TransformationOptions,
)


def test_color_from_hex_accepts_optional_hash_and_any_case() -> None:
    assert Color.from_hex("#E261FF") == Color(r=226, g=97, b=255)
    assert Color.from_hex("00ff10") == Color(r=0, g=255, b=16)


@pytest.mark.parametrize("raw", ["", "#fff", "#12345g", "#1234567", "purple"])
def test_color_from_hex_rejects_malformed_values(raw: str) -> None:
    with pytest.raises(ValueError, match="Failed to parse hex color"):
        Color.from_hex(raw)


def test_color_channels_are_bounded() -> None:
    with pytest.raises(ValidationError):
        Color(r=256, g=0, b=0)


def test_color_to_hex_and_bgr() -> None:
    assert DEFAULT_BACKGROUND_COLOR.to_hex() == "#e261ff"
    assert DEFAULT_BACKGROUND_COLOR.to_bgr() == (255, 97, 226)


def test_page_range_all_pages() -> None:
    assert PageRange.all_pages(7) == PageRange(starting_index=0, count=7)


def test_page_range_includes_clips_to_document() -> None:
    page_range = PageRange(starting_index=1, count=5)

    assert page_range.includes(0, 3)
    assert page_range.includes(1, 3)
    assert not page_range.includes(2, 3)
    assert not page_range.includes(-1, 3)


def test_page_range_includes_respects_count() -> None:
    page_range = PageRange(starting_index=0, count=1)

    assert page_range.includes(0, 3)
    assert not page_range.includes(1, 3)


def test_page_range_past_the_end_selects_nothing() -> None:
    page_range = PageRange(starting_index=100, count=10)
    assert not any(page_range.includes(offset, 3) for offset in range(10))


def test_page_range_rejects_negative_values() -> None:
    with pytest.raises(ValidationError):
        PageRange(starting_index=-1, count=1)
    with pytest.raises(ValidationError):
        PageRange(count=-1)


def test_transformation_options_default_to_purple() -> None:
    options = TransformationOptions(quality="LOW", page_range=PageRange(count=1))
    assert options.quality is Quality.LOW
    assert options.background_color == DEFAULT_BACKGROUND_COLOR


def test_port_options_parse_wire_json() -> None:
    payload = {
        "quality": "extremelow",
        "background_color": {"r": 1, "g": 2, "b": 3},
        "in_file": "/tmp/in.pdf",
        "out_file": "/tmp/out.pdf",
    }
    options = PortOptions.model_validate_json(json.dumps(payload))

    assert options.quality is Quality.EXTREME_LOW
    assert options.background_color == Color(r=1, g=2, b=3)
    assert options.page_range is None


def test_port_options_reject_unknown_fields() -> None:
    payload = {
        "quality": "low",
        "background_color": {"r": 1, "g": 2, "b": 3},
        "in_file": "a",
        "out_file": "b",
        "extra": True,
    }
    with pytest.raises(ValidationError):
        PortOptions.model_validate(payload)


def test_status_percent_is_bounded() -> None:
    with pytest.raises(ValidationError):
        Status(percent_done=1.5)


def test_images_metadata_uses_camel_case_keys() -> None:
    meta = ImagesMetadata(original_title="Report", page_count=3)

    assert json.loads(meta.model_dump_json(by_alias=True)) == {"originalTitle": "Report", "pageCount": 3}
    assert ImagesMetadata.model_validate_json(b'{"originalTitle": "Report", "pageCount": 3}') == meta
