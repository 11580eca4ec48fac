"""PDF Report Generator for genealogy lookups.

Generates the family-link certificate and the multi-page genealogy report
(direct family, tree, paternal branch, maternal branch, statistics dashboard).
Uses fpdf2 with DejaVu Sans when available; falls back to the core Helvetica
font (Latin-1 only) otherwise.

Installation:
    pip install fpdf2
    # Ubuntu/Debian: sudo apt install fonts-dejavu-core
    # macOS: brew install --cask font-dejavu
    # Or place DejaVuSans.ttf + DejaVuSans-Bold.ttf into genealogia/services/fonts/
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from io import BytesIO
from typing import Sequence

from fpdf import FPDF
from PIL import Image

from genealogia.config import settings
from genealogia.models import Person
from genealogia.services import layout as L
from genealogia.services.grouping import group_report, ReportBranches
from genealogia.services.stats import aggregate, StatsSnapshot, MALE, FEMALE, UNKNOWN
from genealogia.utils import font_dir, clean, NOT_AVAILABLE
from genealogia.utils.fonts import REGULAR, BOLD

logger = logging.getLogger(__name__)


# ── Color palette (black + gold + white/gray) ────────────────────────────────

_BLACK = (22, 22, 22)
_DARK = (50, 50, 50)
_LIGHT_BG = (245, 245, 242)
_BLUE = (0, 123, 255)
_RED = (220, 53, 69)
_GREEN = (40, 167, 69)
_TEXT = (40, 40, 40)
_GRAY = (130, 130, 130)
_RING_BG = (230, 230, 226)
_WHITE = (255, 255, 255)
_GOLD = (207, 171, 59)

# ── Layout constants (mm) ─────────────────────────────────────────────────────

ROW_H = 7.0
SECTION_H = 14.0  # ln(3) + bar(8) + ln(3)
BRANCH_COLUMNS = (25, 55, 20)
DIRECT_COLUMNS = (40, 60)
BRANCH_HEADER = ["Parentesco", "Nombre", "DNI"]

DONUT_R = 16.0
DONUT_INNER_R = 10.0
CHART_H = 38.0

_SEX_ES: dict[str, str] = {MALE: "Masculino", FEMALE: "Femenino", UNKNOWN: "Sin dato"}

CERTIFICATE_TITLE = "CERTIFICADO DE VÍNCULO FAMILIAR"
REPORT_TITLE = "REPORTE GENEALÓGICO"


def _rgb(hex_color: str) -> tuple:
    h = hex_color.lstrip("#")
    return tuple(int(h[i:i + 2], 16) for i in (0, 2, 4))


# ── PDF class ─────────────────────────────────────────────────────────────────

class _ReportPDF(FPDF):
    """Corporate-styled PDF for genealogy reports."""

    def __init__(self) -> None:
        super().__init__("P", "mm", "A4")
        self._ts = datetime.now().strftime("%d/%m/%Y %H:%M")
        self._sec = 0
        self._brand = settings.REPORT_BRAND

        fd = font_dir()
        if fd is not None:
            self.add_font("DV", "", str(fd / REGULAR))
            bold = fd / BOLD
            self.add_font("DV", "B", str(bold if bold.is_file() else fd / REGULAR))
            self._family = "DV"
            self._unicode = True
        else:
            logger.warning("DejaVuSans.ttf not found, using Helvetica (Latin-1 only)")
            self._family = "helvetica"
            self._unicode = False

        self.set_auto_page_break(True, 20)
        self.set_margins(15, 15, 15)
        self.add_page()

    @property
    def pw(self) -> float:
        """Printable width (page minus margins)."""
        return self.w - self.l_margin - self.r_margin

    @property
    def y_limit(self) -> float:
        return min(settings.REPORT_PAGE_Y_LIMIT, self.h - 22)

    def txt(self, text: object) -> str:
        text = str(text)
        if self._unicode:
            return text
        return text.encode("latin-1", "replace").decode("latin-1")

    def font(self, style: str = "", size: float = 9) -> None:
        self.set_font(self._family, style, size)

    # ── page footer ───────────────────────────────────────────────────────

    def footer(self) -> None:
        self.set_y(-15)
        self.set_draw_color(*_GOLD)
        self.set_line_width(0.3)
        self.line(self.l_margin, self.get_y(), self.w - self.r_margin, self.get_y())
        self.set_y(-12.5)
        self.font("B", 7)
        self.set_text_color(*_BLACK)
        self.cell(self.pw / 2, 4, self.txt(f"{self._brand}  |  {self._ts}"), align="L")
        self.font("", 7)
        self.set_text_color(*_GRAY)
        self.cell(self.pw / 2, 4, f"Página {self.page_no()}/{{nb}}", align="R")

    # ── banner at top of first page ──────────────────────────────────────

    def banner(self, title: str, dni: str) -> None:
        banner_h = 34

        self.set_fill_color(*_BLACK)
        self.rect(0, 0, self.w, banner_h, "F")
        self.set_fill_color(*_GOLD)
        self.rect(0, banner_h, self.w, 0.6, "F")

        text_x = self.l_margin + 3
        text_w = self.w - text_x - self.r_margin

        self.set_xy(text_x, 7)
        self.font("B", 9)
        self.set_text_color(*_GOLD)
        self.cell(text_w, 5, self.txt(self._brand), align="L")

        self.set_xy(text_x, 13)
        self.font("B", 14)
        self.set_text_color(*_WHITE)
        self.cell(text_w, 8, self.txt(title), align="L")

        self.set_xy(text_x, 23)
        self.font("", 8.5)
        self.set_text_color(150, 150, 150)
        self.cell(text_w, 6, self.txt(f"DNI: {dni}    |    {self._ts}"), align="L")

        self.set_y(banner_h + 4)
        self.set_text_color(*_TEXT)

    # ── numbered section header ───────────────────────────────────────────

    def section(self, title: str, numbered: bool = True) -> None:
        if numbered:
            self._sec += 1
            title = f"{self._sec}. {title}"
        self.ln(3)
        self.set_fill_color(*_BLACK)
        self.font("B", 10)
        self.set_text_color(*_WHITE)
        self.cell(self.pw, 8, self.txt(f"  {title}"), fill=True, new_x="LMARGIN", new_y="NEXT")
        self.ln(3)
        self.set_text_color(*_TEXT)

    # ── key-value row ─────────────────────────────────────────────────────

    def kv(self, label: str, value: str) -> None:
        lw = 55
        self.font("B", 9)
        self.set_text_color(*_GRAY)
        self.cell(lw, 6, self.txt(label))
        self.font("", 9)
        self.set_text_color(*_TEXT)
        self.multi_cell(self.pw - lw, 6, self.txt(value), new_x="LMARGIN", new_y="NEXT")

    def note(self, text: str) -> None:
        self.font("", 8)
        self.set_text_color(*_GRAY)
        self.multi_cell(self.pw, 5, self.txt(text), new_x="LMARGIN", new_y="NEXT")
        self.set_text_color(*_TEXT)

    # ── table with header + alternating rows ──────────────────────────────

    def _clip(self, text: str, width: float) -> str:
        text = self.txt(text)
        if self.get_string_width(text) <= width:
            return text
        while text and self.get_string_width(text + "...") > width:
            text = text[:-1]
        return text.rstrip() + "..."

    def draw_table(self, table: L.TableLayout) -> None:
        for idx, row in enumerate(table.rows):
            if row.header:
                self.set_fill_color(*_DARK)
            elif idx % 2:
                self.set_fill_color(*_LIGHT_BG)
            else:
                self.set_fill_color(*_WHITE)
            self.rect(self.l_margin, row.y, self.pw, table.row_height, "F")

            for (x, w), text in zip(table.columns, row.cells):
                if row.header:
                    self.font("B", 8)
                    self.set_text_color(*_WHITE)
                else:
                    self.font("", 8)
                    self.set_text_color(*_TEXT)
                self.set_xy(x, row.y)
                self.cell(w, table.row_height, self._clip(f" {text}", w - 1), align="L")

        self.set_y(table.bottom)
        self.set_text_color(*_TEXT)

    # ── charts ────────────────────────────────────────────────────────────

    def chart_title(self, x: float, y: float, w: float, title: str) -> None:
        self.set_xy(x, y)
        self.font("B", 9)
        self.set_text_color(*_DARK)
        self.cell(w, 5, self.txt(title), align="L")

    def donut(self, arc: L.DonutArc, inner_r: float, color: tuple, caption: str) -> None:
        full = L.donut_arc(arc.cx, arc.cy, arc.radius, 1.0)
        self.set_fill_color(*_RING_BG)
        self.polygon(full.ring_points(inner_r), style="F")

        ring = arc.ring_points(inner_r)
        if ring:
            self.set_fill_color(*color)
            self.polygon(ring, style="F")

        self.font("B", 10)
        self.set_text_color(*_TEXT)
        self.set_xy(arc.cx - arc.radius, arc.cy - 3)
        self.cell(arc.radius * 2, 6, f"{arc.pct * 100:.0f}%", align="C")

        self.font("", 8)
        self.set_text_color(*_GRAY)
        self.set_xy(arc.cx - arc.radius - 5, arc.cy + arc.radius + 2)
        self.cell(arc.radius * 2 + 10, 5, self.txt(caption), align="C")

    def bars(self, bars: Sequence[L.BarGeom], color: tuple, baseline: float) -> None:
        self.set_fill_color(*color)
        for bar in bars:
            self.rect(bar.x, bar.y, bar.width, bar.height, "F")

        self.set_draw_color(*_GRAY)
        self.set_line_width(0.2)
        if bars:
            self.line(bars[0].x, baseline, bars[-1].x + bars[-1].width, baseline)

        for bar in bars:
            self.font("B", 7.5)
            self.set_text_color(*_TEXT)
            self.set_xy(bar.x, bar.y - 5)
            self.cell(bar.width, 4, f"{bar.value:g}", align="C")
            self.font("", 7)
            self.set_text_color(*_GRAY)
            self.set_xy(bar.x, baseline + 1)
            self.cell(bar.width, 4, self.txt(bar.label), align="C")

    def area(self, geom: L.AreaGeom, color: tuple, labels: Sequence[str]) -> None:
        if not geom.points:
            return
        self.set_fill_color(*color)
        with self.local_context(fill_opacity=0.3):
            self.polygon(list(geom.polygon), style="F")

        self.set_draw_color(*color)
        self.set_line_width(0.6)
        self.polyline(list(geom.points), style="D")

        self.set_draw_color(*_GRAY)
        self.set_line_width(0.2)
        self.line(geom.polygon[0][0], geom.baseline, geom.polygon[-1][0], geom.baseline)

        self.font("", 7)
        self.set_text_color(*_GRAY)
        for (px, _), label in zip(geom.points, labels):
            self.set_xy(px - 10, geom.baseline + 1)
            self.cell(20, 4, self.txt(label), align="C")


# ── Row builders ─────────────────────────────────────────────────────────────


def _relationship(person: Person) -> str:
    return clean(person.relationship, "Familiar")


def _branch_row(person: Person) -> list[str]:
    return [_relationship(person), clean(person.name), clean(person.dni, NOT_AVAILABLE)]


def _render_principal(pdf: _ReportPDF, principal: Person) -> None:
    pdf.section("Datos del titular")
    pdf.kv("Nombre completo", clean(principal.name))
    pdf.kv("DNI", clean(principal.dni, NOT_AVAILABLE))
    pdf.kv("Apellido paterno", clean(principal.paternal_surname, NOT_AVAILABLE))
    pdf.kv("Apellido materno", clean(principal.maternal_surname, NOT_AVAILABLE))
    pdf.kv("Sexo", clean(principal.sex, NOT_AVAILABLE))
    pdf.kv("Fecha de nacimiento", clean(principal.birth_date, NOT_AVAILABLE))
    pdf.kv("Edad", clean(principal.age, NOT_AVAILABLE))


def _render_branch(pdf: _ReportPDF, title: str, members: Sequence[Person]) -> None:
    """Branch table over as many pages as needed; rows stop at the page Y limit."""
    limit = pdf.y_limit
    if pdf.get_y() + SECTION_H + 2 * ROW_H > limit:
        pdf.add_page()
    pdf.section(f"{title} ({len(members)})")

    if not members:
        pdf.note("Sin registros.")
        return

    rows = [_branch_row(p) for p in members]
    first = L.table_capacity(pdf.get_y(), limit, ROW_H)
    following = L.table_capacity(pdf.t_margin + SECTION_H, limit, ROW_H)

    for page_index, chunk in enumerate(L.paginate_rows(rows, first, following)):
        if page_index:
            pdf.add_page()
            pdf.section(f"{title} (continuación)", numbered=False)
        table = L.layout_table(
            BRANCH_HEADER, chunk, pdf.l_margin, pdf.get_y(), pdf.pw, limit,
            columns_pct=BRANCH_COLUMNS, row_height=ROW_H,
        )
        if table.dropped:
            logger.debug(f"{title}: {table.dropped} rows truncated on page {pdf.page_no()}")
        pdf.draw_table(table)
        pdf.ln(3)


def _render_tree_page(pdf: _ReportPDF, tree_png: bytes) -> None:
    pdf.add_page()
    pdf.section("Árbol genealógico")
    img = Image.open(BytesIO(tree_png))
    iw, ih = img.size
    avail_h = pdf.y_limit - pdf.get_y()
    w = pdf.pw
    h = w * ih / iw
    if h > avail_h:
        h = avail_h
        w = h * iw / ih
    x = pdf.l_margin + (pdf.pw - w) / 2
    pdf.image(img, x=x, y=pdf.get_y(), w=w, h=h)
    pdf.set_y(pdf.get_y() + h + 3)


def _render_dashboard(pdf: _ReportPDF, stats: StatsSnapshot) -> None:
    pdf.add_page()
    pdf.section("Estadísticas familiares")
    pdf.kv("Total de familiares", str(stats.total))
    pdf.kv("Hijos (también en rama paterna)", str(stats.children))
    pdf.kv("Edad no registrada", str(stats.unknown_age))

    # sex donuts
    top = pdf.get_y() + 6
    pdf.chart_title(pdf.l_margin, top, pdf.pw, "Distribución por sexo")
    cy = top + 8 + DONUT_R
    slot = pdf.pw / 3
    for i, (key, color) in enumerate(((MALE, _BLUE), (FEMALE, _RED), (UNKNOWN, _GRAY))):
        cx = pdf.l_margin + slot * i + slot / 2
        arc = L.donut_arc(cx, cy, DONUT_R, stats.sex_percent(key))
        pdf.donut(arc, DONUT_INNER_R, color, f"{_SEX_ES[key]} ({stats.sex.get(key, 0)})")

    # branch + coarse age bars side by side
    top = cy + DONUT_R + 12
    half = (pdf.pw - 10) / 2
    baseline = top + 8 + CHART_H
    pdf.chart_title(pdf.l_margin, top, half, "Familiares por rama")
    branch_items = [
        ("Directa", stats.branches.get("direct", 0)),
        ("Paterna", stats.branches.get("paternal", 0)),
        ("Materna", stats.branches.get("maternal", 0)),
    ]
    pdf.bars(L.bar_layout(branch_items, pdf.l_margin, baseline, half, CHART_H, gap=6), _GOLD, baseline)

    right = pdf.l_margin + half + 10
    pdf.chart_title(right, top, half, "Rango de edad")
    age_items = list(stats.age_brackets.items())
    pdf.bars(L.bar_layout(age_items, right, baseline, half, CHART_H, gap=6), _GREEN, baseline)

    # fine age area chart
    top = baseline + 12
    pdf.chart_title(pdf.l_margin, top, pdf.pw, "Distribución de edades")
    area_baseline = top + 8 + CHART_H
    labels = list(stats.area_brackets.keys())
    geom = L.area_layout(list(stats.area_brackets.values()), pdf.l_margin + 10, area_baseline,
                         pdf.pw - 20, CHART_H)
    pdf.area(geom, _BLUE, labels)
    pdf.set_y(area_baseline + 8)


# ── PDF build ────────────────────────────────────────────────────────────────


def _build_certificate(principal: Person, relatives: Sequence[Person]) -> bytes:
    """Synchronous PDF generation, called via asyncio.to_thread."""
    pdf = _ReportPDF()
    pdf.alias_nb_pages()
    pdf.banner(CERTIFICATE_TITLE, clean(principal.dni, NOT_AVAILABLE))

    branches = group_report(principal, relatives)
    _render_principal(pdf, principal)

    pdf.section(f"Familia directa ({len(branches.direct)})")
    direct = L.layout_table(
        ["Parentesco", "Nombre"],
        [[_relationship(p), clean(p.name)] for p in branches.direct],
        pdf.l_margin, pdf.get_y(), pdf.pw, pdf.y_limit,
        columns_pct=DIRECT_COLUMNS, row_height=ROW_H,
    )
    pdf.draw_table(direct)
    pdf.ln(3)

    relatives = branches.relatives
    if pdf.get_y() + SECTION_H + 2 * ROW_H <= pdf.y_limit:
        pdf.section(f"Familiares registrados ({len(relatives)})")
        table = L.layout_table(
            BRANCH_HEADER, [_branch_row(p) for p in relatives],
            pdf.l_margin, pdf.get_y(), pdf.pw, pdf.y_limit,
            columns_pct=BRANCH_COLUMNS, row_height=ROW_H,
        )
        if table.dropped:
            logger.debug(f"Certificate: {table.dropped} relatives did not fit")
        pdf.draw_table(table)

    return bytes(pdf.output())


def _build_report(
    principal: Person,
    relatives: Sequence[Person],
    tree_png: bytes | None = None,
) -> bytes:
    """Synchronous PDF generation, called via asyncio.to_thread."""
    pdf = _ReportPDF()
    pdf.alias_nb_pages()
    pdf.banner(REPORT_TITLE, clean(principal.dni, NOT_AVAILABLE))

    branches: ReportBranches = group_report(principal, relatives)
    stats = aggregate(branches)

    _render_principal(pdf, principal)
    _render_branch(pdf, "Familia directa", branches.direct)

    if tree_png:
        _render_tree_page(pdf, tree_png)

    pdf.add_page()
    _render_branch(pdf, "Rama paterna", branches.paternal)
    pdf.add_page()
    _render_branch(pdf, "Rama materna", branches.maternal)

    _render_dashboard(pdf, stats)

    logger.info(f"Genealogy report built: {pdf.page_no()} pages, {stats.total} relatives")
    return bytes(pdf.output())


# ── Public interface ─────────────────────────────────────────────────────────


async def generate_certificate_pdf(principal: Person, relatives: Sequence[Person]) -> bytes:
    """Single-page certificate: principal data, direct family, registered relatives."""
    return await asyncio.to_thread(_build_certificate, principal, list(relatives))


async def generate_genealogy_report_pdf(
    principal: Person,
    relatives: Sequence[Person],
    tree_png: bytes | None = None,
) -> bytes:
    """
    Multi-page genealogy report.

    Args:
        principal: the person the report is about.
        relatives: every relative returned by the registry.
        tree_png: optional tree image embedded on its own page.

    Returns:
        bytes of the finished PDF.
    """
    return await asyncio.to_thread(_build_report, principal, list(relatives), tree_png)
