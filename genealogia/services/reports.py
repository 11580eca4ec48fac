"""
Render pipeline: registry lookup → parse → group → layout → draw → bytes.

One call builds everything it needs from scratch; nothing is shared between
renders. Any upstream failure aborts the whole render (no partial documents).
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from genealogia.clients.registry import RegistryClient
from genealogia.services.family_parser import FamilyDataParser
from genealogia.services.tree_image import generate_tree_image
from genealogia.services.pdf_generator import (
    generate_certificate_pdf, generate_genealogy_report_pdf
)

logger = logging.getLogger(__name__)


class ReportKind:
    TREE = "arbol"
    CERTIFICATE = "certificado"
    REPORT = "reporte"

    ALL = (TREE, CERTIFICATE, REPORT)


_CAPTIONS = {
    ReportKind.TREE: "🌳 Árbol genealógico",
    ReportKind.CERTIFICATE: "📄 Certificado de vínculo familiar",
    ReportKind.REPORT: "📊 Reporte genealógico",
}


@dataclass(frozen=True)
class RenderedDocument:
    kind: str
    filename: str
    content: bytes
    caption: str

    @property
    def mime_type(self) -> str:
        return "image/png" if self.kind == ReportKind.TREE else "application/pdf"


async def render_from_payload(payload: Dict, kind: str, code: Optional[str] = None) -> RenderedDocument:
    """Render one document from an already fetched registry payload."""
    if kind not in ReportKind.ALL:
        raise ValueError(f"Unsupported document kind: {kind}")

    principal, relatives = FamilyDataParser.parse(payload)
    code = code or principal.dni or "familia"

    if kind == ReportKind.TREE:
        content = await generate_tree_image(principal, relatives)
        filename = f"arbol_{code}.png"
    elif kind == ReportKind.CERTIFICATE:
        content = await generate_certificate_pdf(principal, relatives)
        filename = f"certificado_{code}.pdf"
    else:
        tree_png = await generate_tree_image(principal, relatives)
        content = await generate_genealogy_report_pdf(principal, relatives, tree_png=tree_png)
        filename = f"reporte_{code}.pdf"

    logger.info(f"Rendered {kind} for {code}: {len(relatives)} relatives, {len(content)} bytes")
    return RenderedDocument(kind=kind, filename=filename, content=content, caption=_CAPTIONS[kind])


async def render_document(dni: str, kind: str, client: Optional[RegistryClient] = None) -> RenderedDocument:
    """
    Fetch the family of ``dni`` and render the requested document.

    Raises:
        UpstreamUnavailable: the registry failed or had no person record.
    """
    client = client or RegistryClient()
    payload = await client.get_family(dni)
    return await render_from_payload(payload, kind, code=dni)
