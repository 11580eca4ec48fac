import pytest

from genealogia.models import Person
from genealogia.services import layout as L
from genealogia.services.classifier import LEGEND_ORDER, TreeCategory
from genealogia.services.grouping import Layer, group_tree


def _layer(category, count):
    return Layer(category=category, members=tuple(
        Person(id=f"{category.name}{i}", name=f"Persona {i}", relationship=category.label)
        for i in range(count)
    ))


@pytest.mark.parametrize("count", [1, 2, 3, 4])
def test_block_start_centers_the_row(count):
    start = L.block_start_x(count, 900)
    block = count * 180 + (count - 1) * 30
    assert start == (900 - block) / 2
    assert start + block == pytest.approx(900 - start)


def test_layers_stack_top_to_bottom():
    layers = [_layer(TreeCategory.SPOUSE, 1), _layer(TreeCategory.CHILD, 2)]
    tree = L.layout_tree(layers, canvas_width=900)

    first, second, third = tree.nodes
    assert first.y == L.MARGIN + L.HEADER_HEIGHT + L.LAYER_CAPTION_OFFSET == 135
    assert second.y == third.y == 135 + L.NODE_HEIGHT + L.VERTICAL_SPACING + L.LAYER_CAPTION_OFFSET
    assert first.x == L.block_start_x(1, 900) == 360
    assert second.x == L.block_start_x(2, 900) == 255
    assert third.x == second.x + L.NODE_WIDTH + L.HORIZONTAL_SPACING

    assert [c.text for c in tree.captions] == ["Cónyuge/Pareja (1)", "Hijo/Hija (2)"]
    assert tree.captions[0].y == 125


def test_connectors_rise_from_every_node_below_the_first_layer():
    layers = [_layer(TreeCategory.PRINCIPAL, 1), _layer(TreeCategory.CHILD, 3)]
    tree = L.layout_tree(layers, canvas_width=900)

    assert tree.nodes[0].connector is None
    for node in tree.nodes[1:]:
        x1, y1, x2, y2 = node.connector
        assert x1 == x2 == node.center_x
        assert y1 == node.y
        assert y2 == node.y - L.VERTICAL_SPACING / 2


def test_wide_layers_wrap_inside_the_margins():
    tree = L.layout_tree([_layer(TreeCategory.COUSIN, 6)], canvas_width=900)

    assert L.nodes_per_row(900) == 4
    ys = sorted({n.y for n in tree.nodes})
    assert ys == [135, 135 + L.NODE_HEIGHT + L.WRAP_ROW_SPACING]
    assert [n.y for n in tree.nodes].count(ys[1]) == 2
    for node in tree.nodes:
        assert node.x >= L.MARGIN
        assert node.x + node.width <= 900 - L.MARGIN


def test_max_per_row_override():
    tree = L.layout_tree([_layer(TreeCategory.SIBLING, 3)], canvas_width=900, max_per_row=1)
    assert len({n.y for n in tree.nodes}) == 3
    assert all(n.x == 360 for n in tree.nodes)


def test_node_lookup_and_legend(principal):
    tree = L.layout_tree(group_tree(principal, []), canvas_width=900, title="Árbol")

    assert tree.node("p1").category is TreeCategory.PRINCIPAL
    assert tree.node("missing") is None

    assert [item.text for item in tree.legend_items] == [c.label for c in LEGEND_ORDER]
    left, right = tree.legend_items[0], tree.legend_items[1]
    assert left.box_x == L.MARGIN
    assert right.box_x == L.MARGIN + 900 / 2 - L.MARGIN
    assert right.box_y == left.box_y
    assert tree.legend_items[2].box_y == left.box_y + L.LEGEND_LINE_HEIGHT
    assert tree.footer_y > tree.legend_bottom > tree.nodes_bottom


def test_empty_tree_still_has_legend_and_footer():
    tree = L.layout_tree([], canvas_width=900)
    assert tree.nodes == ()
    assert tree.legend_bottom == 227
    assert tree.footer_y == 262


def test_table_columns_follow_percentages():
    assert L.column_widths(180, (25, 55, 20)) == [45, 99, 36]
    table = L.layout_table(["A", "B", "C"], [], x=10, top=0, width=180, bottom=100)
    assert table.columns == ((10, 45), (55, 99), (154, 36))
    assert len(table.rows) == 1 and table.rows[0].header


def test_table_rows_stop_at_the_bottom_limit():
    rows = [[f"r{i}", "nombre", "dni"] for i in range(10)]
    table = L.layout_table(["A", "B", "C"], rows, x=10, top=0, width=180, bottom=35, row_height=7)

    assert len(table.rows) == 5
    assert [r.cells[0] for r in table.rows[1:]] == ["r0", "r1", "r2", "r3"]
    assert table.dropped == 6
    assert table.bottom == 35
    assert all(r.y + table.row_height <= 35 for r in table.rows)


def test_table_capacity_and_pagination():
    assert L.table_capacity(29, 270, 7) == 33
    assert L.table_capacity(0, 5, 7) == 0

    pages = L.paginate_rows(list(range(10)), 3, 4)
    assert [len(p) for p in pages] == [3, 4, 3]
    assert sum(pages, []) == list(range(10))

    assert L.paginate_rows([], 3, 4) == [[]]
    assert [len(p) for p in L.paginate_rows(list(range(5)), 0, 4)] == [4, 1]


def test_donut_quarter():
    arc = L.donut_arc(50, 50, 10, 0.25)
    assert arc.start == pytest.approx((50, 40))
    assert arc.end == pytest.approx((60, 50))
    assert not arc.large_arc


def test_donut_large_arc_flag():
    assert not L.donut_arc(0, 0, 10, 0.5).large_arc
    three_quarters = L.donut_arc(50, 50, 10, 0.75)
    assert three_quarters.large_arc
    assert three_quarters.end == pytest.approx((40, 50))


def test_donut_clamps_and_empty_ring():
    assert L.donut_arc(0, 0, 10, 1.7).pct == 1.0
    assert L.donut_arc(0, 0, 10, -0.2).pct == 0.0
    assert L.donut_arc(0, 0, 10, 0).ring_points(5) == []

    ring = L.donut_arc(0, 0, 10, 0.5).ring_points(5)
    assert ring[0] == pytest.approx((0, -10))
    assert ring[-1] == pytest.approx((0, -5))


def test_bars_scale_to_the_largest_value():
    bars = L.bar_layout([("a", 0), ("b", 5), ("c", 10)], x=0, baseline=100, width=108, height=40, gap=6)

    assert [b.height for b in bars] == [1, 20, 40]
    assert [b.y for b in bars] == [99, 80, 60]
    assert [b.x for b in bars] == [0, 38, 76]
    assert all(b.width == 32 for b in bars)


def test_bars_all_zero_keep_minimum_height():
    bars = L.bar_layout([("a", 0), ("b", 0)], x=0, baseline=50, width=50, height=40)
    assert [b.height for b in bars] == [1, 1]
    assert L.bar_layout([], 0, 0, 10, 10) == []


def test_area_polygon_closes_on_the_baseline():
    geom = L.area_layout([0, 5, 10], x=0, baseline=100, width=100, height=40)

    assert geom.points == ((0, 100), (50, 80), (100, 60))
    assert geom.polygon[0] == (0, 100)
    assert geom.polygon[-1] == (100, 100)
    assert geom.polygon[1:-1] == geom.points


def test_area_single_value_and_empty():
    geom = L.area_layout([3], x=0, baseline=10, width=100, height=5)
    assert geom.points == ((50, 5),)
    assert L.area_layout([], 0, 10, 100, 5).polygon == ()
