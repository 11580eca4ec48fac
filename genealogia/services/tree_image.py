"""Genealogy tree PNG renderer.

Replays a :class:`~genealogia.services.layout.TreeLayout` onto a Pillow canvas
whose height comes from :func:`~genealogia.services.canvas_size.resolve_height`,
so the image is allocated once at its final size.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from io import BytesIO
from typing import Sequence

from PIL import Image, ImageDraw, ImageFont

from genealogia.models import Person
from genealogia.services import layout as L
from genealogia.services.canvas_size import resolve_height
from genealogia.services.classifier import TreeCategory
from genealogia.services.grouping import group_tree
from genealogia.utils import font_path, PLACEHOLDER
from genealogia.utils.fonts import REGULAR, BOLD, OBLIQUE

logger = logging.getLogger(__name__)

SOURCE_NAME = "ARBOL GENEALOGICO"

BACKGROUND_COLOR = "#FFFFFF"
COLOR_TITLE = "#333333"
COLOR_TEXT = "#444444"
COLOR_SECONDARY_TEXT = "#999999"
COLOR_SEPARATOR = "#CCCCCC"

NODE_RADIUS = 8
LINE_THICKNESS = 3
CONNECTOR_THICKNESS = 2
LEGEND_BOX_LINE = 4


def _font(size: int, style: str = ""):
    name = {"B": BOLD, "I": OBLIQUE}.get(style, REGULAR)
    path = font_path(name)
    if path is not None:
        try:
            return ImageFont.truetype(str(path), size)
        except OSError:
            logger.warning(f"Cannot load font {path}, using Pillow default")
    return ImageFont.load_default(size=size)


def _ascent(font) -> float:
    if hasattr(font, "getmetrics"):
        return font.getmetrics()[0]
    return 10


def _text(draw: ImageDraw.ImageDraw, x: float, baseline: float, text: str, font, fill: str, align: str = "left") -> None:
    """Draw text with canvas-style alignment: (x, baseline) anchors left/center/right."""
    width = draw.textlength(text, font=font)
    if align == "center":
        x -= width / 2
    elif align == "right":
        x -= width
    draw.text((x, baseline - _ascent(font)), text, font=font, fill=fill)


def _fit(draw: ImageDraw.ImageDraw, text: str, font, max_width: float) -> str:
    if draw.textlength(text, font=font) <= max_width:
        return text
    while text and draw.textlength(text + "...", font=font) > max_width:
        text = text[:-1]
    return text.rstrip() + "..."


def _draw_node(draw: ImageDraw.ImageDraw, node: L.LayoutNode, fonts: dict) -> None:
    box = (node.x, node.y, node.x + node.width, node.y + node.height)
    draw.rounded_rectangle(box, radius=NODE_RADIUS, fill=BACKGROUND_COLOR,
                           outline=node.color, width=LINE_THICKNESS)

    inner = node.width - 2 * 10
    name = _fit(draw, node.person.name or PLACEHOLDER, fonts["name"], inner)
    _text(draw, node.center_x, node.center_y - 8, name, fonts["name"], COLOR_TEXT, "center")

    label = node.person.relationship
    if label and node.category is not TreeCategory.PRINCIPAL:
        label = _fit(draw, f"({label})", fonts["label"], inner)
        _text(draw, node.center_x, node.center_y + 14, label, fonts["label"], node.color, "center")


def render_tree_png(tree: L.TreeLayout, generated_on: date | None = None) -> bytes:
    """Draw a computed tree layout; the canvas is allocated at its exact final height."""
    generated_on = generated_on or date.today()
    height = resolve_height(tree)

    img = Image.new("RGB", (tree.width, height), BACKGROUND_COLOR)
    draw = ImageDraw.Draw(img)
    fonts = {
        "title": _font(24, "B"),
        "caption": _font(14, "I"),
        "name": _font(14, "B"),
        "label": _font(12, "I"),
        "legend_title": _font(18, "B"),
        "text": _font(14),
    }

    # header
    _text(draw, tree.width / 2, tree.title_y, tree.title, fonts["title"], COLOR_TITLE, "center")
    draw.line((L.MARGIN, tree.separator_y, tree.width - L.MARGIN, tree.separator_y),
              fill=COLOR_SEPARATOR, width=1)

    for caption in tree.captions:
        _text(draw, caption.x, caption.y, caption.text, fonts["caption"], COLOR_SECONDARY_TEXT)

    for node in tree.nodes:
        _draw_node(draw, node, fonts)
        if node.connector:
            draw.line(node.connector, fill=node.color, width=CONNECTOR_THICKNESS)

    # legend
    _text(draw, L.MARGIN, tree.legend_title_y, L.LEGEND_TITLE, fonts["legend_title"], COLOR_TITLE)
    for item in tree.legend_items:
        box = (item.box_x, item.box_y, item.box_x + item.box_size, item.box_y + item.box_size)
        draw.rectangle(box, fill=BACKGROUND_COLOR, outline=item.color, width=LEGEND_BOX_LINE)
        _text(draw, item.text_x, item.text_y, item.text, fonts["text"], COLOR_TEXT)

    # footer
    _text(draw, L.MARGIN, tree.footer_y, f"Fuente: {SOURCE_NAME}", fonts["text"], COLOR_SECONDARY_TEXT)
    _text(draw, tree.width - L.MARGIN, tree.footer_y,
          f"Generado el: {generated_on.strftime('%d/%m/%Y')}",
          fonts["text"], COLOR_SECONDARY_TEXT, "right")

    buf = BytesIO()
    img.save(buf, format="PNG")
    logger.info(f"Tree image rendered: {tree.width}x{height}px, {len(tree.nodes)} nodes")
    return buf.getvalue()


def build_tree_layout(
    principal: Person,
    relatives: Sequence[Person],
    canvas_width: int | None = None,
) -> L.TreeLayout:
    layers = group_tree(principal, relatives)
    return L.layout_tree(
        layers,
        canvas_width=canvas_width,
        title=f"Árbol Genealógico: {principal.name}",
    )


def _build(principal: Person, relatives: Sequence[Person], generated_on: date | None) -> bytes:
    """Synchronous rendering, called via asyncio.to_thread."""
    return render_tree_png(build_tree_layout(principal, relatives), generated_on)


async def generate_tree_image(
    principal: Person,
    relatives: Sequence[Person],
    generated_on: date | None = None,
) -> bytes:
    """PNG bytes of the genealogy tree for one principal and their relatives."""
    return await asyncio.to_thread(_build, principal, list(relatives), generated_on)
