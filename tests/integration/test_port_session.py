from __future__ import annotations

import io
import json
import struct
from typing import TYPE_CHECKING

import pytest

from purpleifypdf.port import Port, read_frame

if TYPE_CHECKING:
    from pathlib import Path

pymupdf = pytest.importorskip("pymupdf")


def _frame(tag: bytes, body: bytes = b"") -> bytes:
    return struct.pack(">I", len(tag) + len(body)) + tag + body


def _options(in_file: Path, out_file: Path, **extra: object) -> bytes:
    return json.dumps(
        {
            "quality": "ExtremeLow",
            "background_color": {"r": 0, "g": 128, "b": 0},
            "in_file": str(in_file),
            "out_file": str(out_file),
            **extra,
        },
    ).encode()


def test_session_transforms_two_documents(tmp_path: Path, sample_pdf: bytes, make_pdf) -> None:
    first_in = tmp_path / "first.pdf"
    second_in = tmp_path / "second.pdf"
    first_in.write_bytes(sample_pdf)
    second_in.write_bytes(make_pdf(pages=1, title="Single"))
    inbound = (
        _frame(b"OPTS", _options(first_in, tmp_path / "first-out.pdf"))
        + _frame(b"DONE")
        + _frame(b"OPTS", _options(second_in, tmp_path / "second-out.pdf"))
        + _frame(b"DONE")
    )
    outbound = io.BytesIO()

    Port(io.BytesIO(inbound), outbound).serve()

    outbound.seek(0)
    replies = []
    while (frame := read_frame(outbound)) is not None:
        replies.append((frame.category, json.loads(frame.body)))

    assert [category for category, _ in replies] == [b"STAT", b"STAT", b"STAT", b"DONE", b"STAT", b"DONE"]
    assert replies[3][1] == {"original_title": "Multipage test"}
    assert replies[5][1] == {"original_title": "Single"}
    with pymupdf.open(tmp_path / "first-out.pdf") as doc:
        assert doc.page_count == 3
    with pymupdf.open(tmp_path / "second-out.pdf") as doc:
        assert doc.page_count == 1


def test_session_reports_unreadable_pdf(tmp_path: Path) -> None:
    bad = tmp_path / "bad.pdf"
    bad.write_bytes(b"not a pdf at all")
    inbound = _frame(b"OPTS", _options(bad, tmp_path / "out.pdf")) + _frame(b"DONE")
    outbound = io.BytesIO()

    Port(io.BytesIO(inbound), outbound).serve()

    outbound.seek(0)
    frame = read_frame(outbound)
    assert frame is not None
    assert frame.category == b"ERRR"
    assert json.loads(frame.body)["message"].startswith("Error reading the PDF")
    assert read_frame(outbound) is None
