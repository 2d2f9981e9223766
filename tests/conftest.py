"""Pytest marker auto-assignment by folder and shared document fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from purpleifypdf import logger


def _mark_tests_by_directory(
    config: pytest.Config,
    items: list[pytest.Item],
    marker: str,
) -> None:
    """Mark collected tests located under tests/<marker>/."""
    target_dir = Path(config.rootpath) / "tests" / marker
    target_dir = target_dir.resolve()

    for item in items:
        try:
            path = Path(str(item.fspath)).resolve()
        except Exception:
            logger.warning(
                f"Could not resolve path for test item {item.name!s}; skipping {marker!s} marker assignment",
            )
            continue

        if path == target_dir or target_dir in path.parents:
            item.add_marker(getattr(pytest.mark, marker))


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: list[pytest.Item],
) -> None:
    """Apply directory-based markers to test items."""
    _mark_tests_by_directory(config, items, "unit")
    _mark_tests_by_directory(config, items, "integration")
    _mark_tests_by_directory(config, items, "end2end")


class FakeDocument:
    """In-memory stand-in for a parsed PDF.

    Every page rasterizes to white, except for an optional block of black ink
    in the top-left corner.
    """

    def __init__(
        self,
        sizes: list[tuple[float, float]] | None = None,
        *,
        title: str = "Fake document",
        ink_pixels: int = 0,
    ) -> None:
        self.sizes = [(72.0, 72.0)] * 3 if sizes is None else sizes
        self._title = title
        self.ink_pixels = ink_pixels
        self.rendered: list[int] = []
        self.closed = False

    @property
    def page_count(self) -> int:
        return len(self.sizes)

    @property
    def title(self) -> str:
        return self._title

    def page_size(self, index: int) -> tuple[float, float]:
        return self.sizes[index]

    def rasterize(self, index: int, *, width_px: int, height_px: int, scale: float) -> bytearray:
        assert scale > 0
        self.rendered.append(index)
        data = bytearray(b"\xff" * (width_px * height_px * 4))
        for pixel in range(min(self.ink_pixels, width_px * height_px)):
            data[pixel * 4 : pixel * 4 + 3] = b"\x00\x00\x00"
        return data

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_document() -> FakeDocument:
    return FakeDocument()


@pytest.fixture
def fake_loader(fake_document: FakeDocument):
    def _load(data: bytes) -> FakeDocument:
        _ = data
        return fake_document

    return _load


@pytest.fixture
def recorded_assembly(monkeypatch) -> list[list[tuple[float, float, int, int, bytes]]]:
    """Replace PDF reassembly with a recorder returning a fixed marker blob."""
    calls: list[list[tuple[float, float, int, int, bytes]]] = []

    def _assemble(pages, *, title: str) -> bytes:
        calls.append(list(pages))
        return f"%PDF {title} {len(calls[-1])}".encode()

    monkeypatch.setattr("purpleifypdf.transformation.assemble_pdf", _assemble)
    return calls


def build_pdf(*, pages: int = 3, title: str = "Multipage test", width: float = 612.0, height: float = 792.0) -> bytes:
    """Build a real PDF with a dark square and a caption on every page."""
    pymupdf = pytest.importorskip("pymupdf")

    doc = pymupdf.open()
    for index in range(pages):
        page = doc.new_page(width=width, height=height)
        page.draw_rect(pymupdf.Rect(100, 100, 300, 300), color=(0, 0, 0), fill=(0.1, 0.1, 0.1))
        page.insert_text((72, 72), f"Page {index + 1}", fontsize=24)
    doc.set_metadata({"title": title})
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture(scope="session")
def sample_pdf() -> bytes:
    return build_pdf()


@pytest.fixture
def make_pdf():
    return build_pdf


@pytest.fixture
def document_factory() -> type[FakeDocument]:
    return FakeDocument
