"""Layout engine: pure geometry for the tree image, report tables and charts.

Nothing here draws. Every function turns grouped data plus fixed constants
into coordinates; the Pillow and fpdf2 renderers only replay them.

Tree units are pixels (y grows downwards); table and chart units are whatever
the caller passes in (the PDF generator works in millimetres).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from genealogia.config import settings
from genealogia.models import Person
from genealogia.services.classifier import TreeCategory, LEGEND_ORDER
from genealogia.services.grouping import Layer

# ── Tree geometry (px) ────────────────────────────────────────────────────────

MARGIN = 30
HEADER_HEIGHT = 80
NODE_WIDTH = 180
NODE_HEIGHT = 60
HORIZONTAL_SPACING = 30
VERTICAL_SPACING = 80
LAYER_CAPTION_OFFSET = 25
CAPTION_BASELINE = 15
WRAP_ROW_SPACING = 20
TITLE_BASELINE = 20

LEGEND_GAP = 20
LEGEND_TITLE_GAP = 10
LEGEND_BOX_SIZE = 18
LEGEND_LINE_HEIGHT = 28
LEGEND_TEXT_DROP = 5
LEGEND_COLUMNS = 2
FOOTER_GAP = 20

LEGEND_TITLE = "Leyenda de Parentesco:"


@dataclass(frozen=True)
class LayoutNode:
    person: Person
    category: TreeCategory
    x: float
    y: float
    width: float
    height: float
    layer_index: int
    # trunk connector: (x, y_from, x, y_to), None for the first layer
    connector: tuple | None = None

    @property
    def color(self) -> str:
        return self.category.color

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass(frozen=True)
class Caption:
    text: str
    x: float
    y: float


@dataclass(frozen=True)
class LegendItem:
    text: str
    color: str
    box_x: float
    box_y: float
    box_size: float
    text_x: float
    text_y: float


@dataclass(frozen=True)
class TreeLayout:
    width: int
    title: str
    title_y: float
    separator_y: float
    captions: tuple
    nodes: tuple
    legend_title_y: float
    legend_items: tuple
    legend_bottom: float
    footer_y: float

    def node(self, person_id: str) -> LayoutNode | None:
        for n in self.nodes:
            if n.person.id == person_id:
                return n
        return None

    @property
    def nodes_bottom(self) -> float:
        return max((n.bottom for n in self.nodes), default=self.separator_y)


def block_start_x(
    count: int,
    canvas_width: float,
    node_width: float = NODE_WIDTH,
    spacing: float = HORIZONTAL_SPACING,
) -> float:
    """Left edge of a horizontally centered row of ``count`` nodes."""
    block = count * node_width + max(count - 1, 0) * spacing
    return (canvas_width - block) / 2


def nodes_per_row(canvas_width: float) -> int:
    usable = canvas_width - 2 * MARGIN + HORIZONTAL_SPACING
    return max(1, int(usable // (NODE_WIDTH + HORIZONTAL_SPACING)))


def _rows(members: Sequence[Person], per_row: int) -> list:
    return [list(members[i:i + per_row]) for i in range(0, len(members), per_row)] or [[]]


def layout_tree(
    layers: Sequence[Layer],
    canvas_width: int | None = None,
    title: str = "",
    max_per_row: int | None = None,
) -> TreeLayout:
    """
    Place every layer top to bottom, each row centered, then the legend and footer.

    Layers wider than ``max_per_row`` nodes (default: what fits between the
    margins) continue on extra rows inside the same layer.
    """
    width = canvas_width or settings.TREE_CANVAS_WIDTH
    per_row = max_per_row or nodes_per_row(width)

    captions = []
    nodes = []
    y = MARGIN + HEADER_HEIGHT

    for layer_index, layer in enumerate(layers):
        captions.append(Caption(f"{layer.name} ({len(layer)})", MARGIN, y + CAPTION_BASELINE))
        y += LAYER_CAPTION_OFFSET

        row_y = y
        for row_index, row in enumerate(_rows(layer.members, per_row)):
            if row_index:
                row_y += NODE_HEIGHT + WRAP_ROW_SPACING
            trunk = VERTICAL_SPACING / 2 if row_index == 0 else WRAP_ROW_SPACING
            x = block_start_x(len(row), width)
            for person in row:
                connector = None
                if layer_index > 0:
                    cx = x + NODE_WIDTH / 2
                    connector = (cx, row_y, cx, row_y - trunk)
                nodes.append(LayoutNode(
                    person=person,
                    category=layer.category,
                    x=x,
                    y=row_y,
                    width=NODE_WIDTH,
                    height=NODE_HEIGHT,
                    layer_index=layer_index,
                    connector=connector,
                ))
                x += NODE_WIDTH + HORIZONTAL_SPACING

        y = row_y + NODE_HEIGHT + VERTICAL_SPACING

    # legend sits half a spacing below the last layer
    y -= VERTICAL_SPACING / 2
    y += LEGEND_GAP
    legend_title_y = y + LEGEND_TITLE_GAP
    legend_y = legend_title_y + LEGEND_TITLE_GAP
    col_width = width / 2 - MARGIN

    items = []
    legend_bottom = legend_y
    for index, category in enumerate(LEGEND_ORDER):
        col = index % LEGEND_COLUMNS
        row = index // LEGEND_COLUMNS
        item_x = MARGIN + col * col_width
        item_y = legend_y + (row + 1) * LEGEND_LINE_HEIGHT
        items.append(LegendItem(
            text=category.label,
            color=category.color,
            box_x=item_x,
            box_y=item_y - LEGEND_BOX_SIZE / 2,
            box_size=LEGEND_BOX_SIZE,
            text_x=item_x + LEGEND_BOX_SIZE + 10,
            text_y=item_y + LEGEND_TEXT_DROP,
        ))
        legend_bottom = max(legend_bottom, item_y + LEGEND_TEXT_DROP)

    return TreeLayout(
        width=width,
        title=title,
        title_y=MARGIN + TITLE_BASELINE,
        separator_y=MARGIN + HEADER_HEIGHT - 10,
        captions=tuple(captions),
        nodes=tuple(nodes),
        legend_title_y=legend_title_y,
        legend_items=tuple(items),
        legend_bottom=legend_bottom,
        footer_y=legend_bottom + FOOTER_GAP + MARGIN / 2,
    )


# ── Tables ────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TableRow:
    y: float
    cells: tuple
    header: bool = False


@dataclass(frozen=True)
class TableLayout:
    columns: tuple  # ((x, width), ...)
    rows: tuple
    row_height: float
    dropped: int
    bottom: float


def column_widths(total_width: float, columns_pct: Sequence[float]) -> list:
    share = sum(columns_pct) or 1
    return [total_width * p / share for p in columns_pct]


def layout_table(
    header: Sequence[str],
    rows: Sequence[Sequence[str]],
    x: float,
    top: float,
    width: float,
    bottom: float,
    columns_pct: Sequence[float] = (25, 55, 20),
    row_height: float = 7.0,
) -> TableLayout:
    """
    Fixed-height rows under a header until ``bottom``; the rest is dropped.

    No pagination here: callers that need more pages split the rows first
    (see :func:`paginate_rows`).
    """
    columns = []
    cx = x
    for w in column_widths(width, columns_pct):
        columns.append((cx, w))
        cx += w

    placed = []
    y = top
    all_rows = [(tuple(header), True)] + [(tuple(r), False) for r in rows]
    for cells, is_header in all_rows:
        if y + row_height > bottom:
            break
        placed.append(TableRow(y=y, cells=cells, header=is_header))
        y += row_height

    placed_data = sum(1 for r in placed if not r.header)
    return TableLayout(
        columns=tuple(columns),
        rows=tuple(placed),
        row_height=row_height,
        dropped=len(rows) - placed_data,
        bottom=y,
    )


def table_capacity(top: float, bottom: float, row_height: float, header: bool = True) -> int:
    """Data rows that fit between ``top`` and ``bottom``."""
    fits = int((bottom - top) // row_height) if row_height > 0 else 0
    return max(0, fits - (1 if header else 0))


def paginate_rows(items: Sequence, first_capacity: int, page_capacity: int) -> list:
    """Split items into pages: the first holds ``first_capacity``, the rest ``page_capacity``."""
    page_capacity = max(1, page_capacity)
    first_capacity = max(0, first_capacity)
    pages = []
    items = list(items)
    if first_capacity:
        pages.append(items[:first_capacity])
        items = items[first_capacity:]
    while items:
        pages.append(items[:page_capacity])
        items = items[page_capacity:]
    return pages or [[]]


# ── Charts ────────────────────────────────────────────────────────────────────

DONUT_START_ANGLE = -90.0


def _point(cx: float, cy: float, r: float, angle_deg: float) -> tuple:
    a = math.radians(angle_deg)
    return (cx + r * math.cos(a), cy + r * math.sin(a))


@dataclass(frozen=True)
class DonutArc:
    """Clockwise arc from 12 o'clock covering ``pct`` of the circle"""
    cx: float
    cy: float
    radius: float
    pct: float

    @property
    def sweep(self) -> float:
        return 360.0 * self.pct

    @property
    def end_angle(self) -> float:
        return DONUT_START_ANGLE + self.sweep

    @property
    def large_arc(self) -> bool:
        return self.pct > 0.5

    @property
    def start(self) -> tuple:
        return _point(self.cx, self.cy, self.radius, DONUT_START_ANGLE)

    @property
    def end(self) -> tuple:
        return _point(self.cx, self.cy, self.radius, self.end_angle)

    def arc_points(self, radius: float | None = None, segments: int = 72) -> list:
        """Points along the arc at ``radius``; ``segments`` is the count for a full circle."""
        if self.pct <= 0:
            return []
        r = self.radius if radius is None else radius
        steps = max(2, math.ceil(segments * self.pct))
        return [
            _point(self.cx, self.cy, r, DONUT_START_ANGLE + self.sweep * i / steps)
            for i in range(steps + 1)
        ]

    def ring_points(self, inner_radius: float, segments: int = 72) -> list:
        """Closed outline of the ring segment: outer arc forwards, inner arc back."""
        outer = self.arc_points(self.radius, segments)
        if not outer:
            return []
        inner = self.arc_points(inner_radius, segments)
        return outer + list(reversed(inner))


def donut_arc(cx: float, cy: float, radius: float, pct: float) -> DonutArc:
    return DonutArc(cx=cx, cy=cy, radius=radius, pct=min(1.0, max(0.0, pct)))


@dataclass(frozen=True)
class BarGeom:
    label: str
    value: float
    x: float
    y: float
    width: float
    height: float


def bar_layout(
    items: Sequence[tuple],
    x: float,
    baseline: float,
    width: float,
    height: float,
    gap: float = 4.0,
    min_height: float = 1.0,
) -> list:
    """
    Vertical bars for ``(label, value)`` pairs across ``width``.

    Heights are value / max * height, never below ``min_height`` so empty
    buckets stay visible.
    """
    n = len(items)
    if n == 0:
        return []
    bar_w = (width - gap * (n - 1)) / n
    max_v = max((v for _, v in items), default=0) or 1
    bars = []
    for i, (label, value) in enumerate(items):
        h = max(value / max_v * height, min_height)
        bars.append(BarGeom(
            label=label,
            value=value,
            x=x + i * (bar_w + gap),
            y=baseline - h,
            width=bar_w,
            height=h,
        ))
    return bars


@dataclass(frozen=True)
class AreaGeom:
    points: tuple
    polygon: tuple
    baseline: float


def area_layout(
    values: Sequence[float],
    x: float,
    baseline: float,
    width: float,
    height: float,
) -> AreaGeom:
    """Polyline through normalized values plus the same line closed to the baseline."""
    n = len(values)
    if n == 0:
        return AreaGeom(points=(), polygon=(), baseline=baseline)
    max_v = max(values) or 1
    step = width / (n - 1) if n > 1 else 0
    start = x if n > 1 else x + width / 2
    points = tuple(
        (start + i * step, baseline - v / max_v * height)
        for i, v in enumerate(values)
    )
    polygon = ((points[0][0], baseline),) + points + ((points[-1][0], baseline),)
    return AreaGeom(points=points, polygon=polygon, baseline=baseline)
