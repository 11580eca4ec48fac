from .classifier import (
    TreeCategory, ReportCategory, classify_tree, classify_report, LEGEND_ORDER
)
from .grouping import Layer, ReportBranches, group_tree, group_report
from .stats import StatsSnapshot, aggregate
from .canvas_size import tentative_height, resolve_height
from .family_parser import FamilyDataParser
from .reports import ReportKind, RenderedDocument, render_document, render_from_payload

__all__ = [
    "TreeCategory", "ReportCategory", "classify_tree", "classify_report", "LEGEND_ORDER",
    "Layer", "ReportBranches", "group_tree", "group_report",
    "StatsSnapshot", "aggregate",
    "tentative_height", "resolve_height",
    "FamilyDataParser",
    "ReportKind", "RenderedDocument", "render_document", "render_from_payload",
]
