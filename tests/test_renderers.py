from datetime import date
from io import BytesIO

import pytest
from PIL import Image

from genealogia.clients import UpstreamUnavailable
from genealogia.models import Person
from genealogia.services.canvas_size import resolve_height
from genealogia.services.pdf_generator import (
    _ReportPDF, _render_branch, generate_certificate_pdf, generate_genealogy_report_pdf
)
from genealogia.services.reports import ReportKind, render_document, render_from_payload
from genealogia.services import tree_image
from genealogia.services.tree_image import build_tree_layout, generate_tree_image, render_tree_png


async def test_tree_png_has_exact_canvas_size(principal, family):
    png = await generate_tree_image(principal, family, generated_on=date(2026, 1, 2))
    image = Image.open(BytesIO(png))

    tree = build_tree_layout(principal, family)
    assert image.format == "PNG"
    assert image.size == (900, resolve_height(tree))


def test_tree_png_draws_node_borders_in_category_color(principal):
    tree = build_tree_layout(principal, [Person(name="Ana", relationship="Hijo/Hija")])
    image = Image.open(BytesIO(render_tree_png(tree))).convert("RGB")

    child = tree.nodes[1]
    # left border, vertically centered
    assert image.getpixel((int(child.x) + 1, int(child.center_y))) == (0x28, 0xA7, 0x45)
    assert image.getpixel((5, 5)) == (255, 255, 255)


async def test_certificate_pdf(principal, family):
    pdf = await generate_certificate_pdf(principal, family)
    assert pdf.startswith(b"%PDF")


async def test_report_pdf_with_tree_page(principal, family):
    png = await generate_tree_image(principal, family)
    pdf = await generate_genealogy_report_pdf(principal, family, tree_png=png)
    assert pdf.startswith(b"%PDF")


async def test_report_pdf_without_relatives(principal):
    pdf = await generate_genealogy_report_pdf(principal, [])
    assert pdf.startswith(b"%PDF")


def test_long_branch_continues_on_new_pages():
    pdf = _ReportPDF()
    members = [Person(name=f"Pariente {i}", relationship="PRIMO", dni=f"{i:08d}") for i in range(80)]

    _render_branch(pdf, "Rama materna", members)

    # 33 rows fit under the section header on each page
    assert pdf.page_no() == 3
    assert pdf.get_y() <= pdf.y_limit + 3


def test_short_branch_stays_on_one_page():
    pdf = _ReportPDF()
    _render_branch(pdf, "Familia directa", [Person(name="Ana", relationship="HIJA")])
    assert pdf.page_no() == 1


@pytest.mark.parametrize("kind,mime,prefix", [
    (ReportKind.TREE, "image/png", b"\x89PNG"),
    (ReportKind.CERTIFICATE, "application/pdf", b"%PDF"),
    (ReportKind.REPORT, "application/pdf", b"%PDF"),
])
async def test_render_from_payload(sample_payload, kind, mime, prefix):
    doc = await render_from_payload(sample_payload, kind)

    assert doc.kind == kind
    assert doc.mime_type == mime
    assert doc.content.startswith(prefix)
    assert doc.filename.startswith(f"{kind}_12345678")


async def test_render_from_payload_rejects_unknown_kind(sample_payload):
    with pytest.raises(ValueError):
        await render_from_payload(sample_payload, "pdf")


class _FakeRegistry:
    def __init__(self, payload=None, error=None):
        self.payload = payload
        self.error = error
        self.calls = []

    async def get_family(self, dni):
        self.calls.append(dni)
        if self.error:
            raise self.error
        return self.payload


async def test_render_document_uses_the_registry(sample_payload):
    registry = _FakeRegistry(payload=sample_payload)
    doc = await render_document("87654321", ReportKind.TREE, client=registry)

    assert registry.calls == ["87654321"]
    assert doc.filename == "arbol_87654321.png"


async def test_render_document_propagates_upstream_failure():
    registry = _FakeRegistry(error=UpstreamUnavailable("down"))
    with pytest.raises(UpstreamUnavailable):
        await render_document("87654321", ReportKind.REPORT, client=registry)


async def test_render_from_malformed_payload_uses_placeholders():
    doc = await render_from_payload({"result": {"person": "12345678"}}, ReportKind.TREE, code="x")
    assert doc.content.startswith(b"\x89PNG")


def test_default_font_respects_requested_size(monkeypatch):
    monkeypatch.setattr(tree_image, "font_path", lambda name: None)
    small = tree_image._font(12)
    large = tree_image._font(24, "B")

    def height(font):
        left, top, right, bottom = font.getbbox("Arbol")
        return bottom - top

    assert height(large) > height(small)
