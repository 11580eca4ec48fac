import math
from typing import Optional, Sequence

from genealogia.config import settings
from genealogia.services.grouping import Layer
from genealogia.services import layout as L

# Room reserved for legend + footer before they are laid out
TENTATIVE_ALLOWANCE = 300


def tentative_height(
    layers: Sequence[Layer],
    canvas_width: Optional[int] = None,
    max_per_row: Optional[int] = None,
) -> int:
    """
    Pre-layout estimate: nodes + spacing + a fixed legend/footer allowance.

    Always >= :func:`resolve_height` of the same layers. The renderers don't
    need it (they lay out first and allocate the resolved height); it stays
    for callers that must reserve space before a layout exists.
    """
    per_row = max_per_row or L.nodes_per_row(canvas_width or settings.TREE_CANVAS_WIDTH)
    drawing = 0
    for index, layer in enumerate(layers):
        rows = max(1, math.ceil(len(layer) / per_row))
        drawing += L.LAYER_CAPTION_OFFSET
        drawing += rows * L.NODE_HEIGHT + (rows - 1) * L.WRAP_ROW_SPACING
        if index < len(layers) - 1:
            drawing += L.VERTICAL_SPACING
    return L.MARGIN * 2 + L.HEADER_HEIGHT + drawing + TENTATIVE_ALLOWANCE


def resolve_height(tree: L.TreeLayout) -> int:
    """
    Exact canvas height for a computed tree layout.

    Footer baseline plus the bottom margin, and never less than anything else
    the layout placed (nodes, legend).
    """
    lowest = max(tree.footer_y, tree.legend_bottom, tree.nodes_bottom)
    return int(math.ceil(lowest + L.MARGIN))
