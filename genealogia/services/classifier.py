import enum
import logging
import re
from typing import Optional

from genealogia.models import Person
from genealogia.utils import normalize_label, fold_label, label_words

# "PRIMO HERMANO" is a first cousin, not a sibling
_COUSIN_QUALIFIER_RE = re.compile(r"\b(PRIM[OA])\s+HERMAN[OA]\b")

logger = logging.getLogger(__name__)


class TreeCategory(enum.Enum):
    """Tree layers. Definition order is the top-to-bottom layer order."""
    GRANDPARENT = ("Abuelo/Abuela", "#17A2B8")
    PARENT = ("Padre/Madre", "#DC3545")
    PRINCIPAL = ("Principal", "#007BFF")
    SPOUSE = ("Cónyuge/Pareja", "#FFC107")
    SIBLING = ("Hermano/Hermana", "#6F42C1")
    CHILD = ("Hijo/Hija", "#28A745")
    UNCLE_AUNT = ("Tío/Tía", "#FD7E14")
    COUSIN = ("Primo/Prima", "#E83E8C")

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def color(self) -> str:
        return self.value[1]

    @property
    def key(self) -> str:
        return normalize_label(self.label)

    @property
    def order(self) -> int:
        return _TREE_ORDER.index(self)


_TREE_ORDER = list(TreeCategory)

# Legend reads from the principal outwards
LEGEND_ORDER = (
    TreeCategory.PRINCIPAL, TreeCategory.SPOUSE, TreeCategory.CHILD,
    TreeCategory.SIBLING, TreeCategory.PARENT, TreeCategory.GRANDPARENT,
    TreeCategory.UNCLE_AUNT, TreeCategory.COUSIN,
)

# Single-gender words the registry actually sends ("PADRE", "HIJA", ...)
_TREE_WORDS: list[tuple[frozenset, TreeCategory]] = [
    (frozenset({"abuelo", "abuela"}), TreeCategory.GRANDPARENT),
    (frozenset({"padre", "madre"}), TreeCategory.PARENT),
    (frozenset({"principal", "titular"}), TreeCategory.PRINCIPAL),
    (frozenset({"conyuge", "esposo", "esposa", "pareja"}), TreeCategory.SPOUSE),
    (frozenset({"hermano", "hermana"}), TreeCategory.SIBLING),
    (frozenset({"hijo", "hija"}), TreeCategory.CHILD),
    (frozenset({"tio", "tia"}), TreeCategory.UNCLE_AUNT),
    (frozenset({"primo", "prima"}), TreeCategory.COUSIN),
]


def _folded(label: Optional[str]) -> str:
    """Folded label with cousin qualifiers removed ("PRIMA HERMANA" → "PRIMA")"""
    return _COUSIN_QUALIFIER_RE.sub(r"\1", fold_label(label))


def classify_tree(label: Optional[str]) -> Optional[TreeCategory]:
    """
    Map a relationship label to a tree layer.

    Exact category keys win ("Hijo/Hija"); otherwise the first category owning
    one of the label's words ("HIJA", "Tío Paterno"). None means the person is
    left out of the tree.
    """
    key = normalize_label(label)
    if not key:
        return None

    for category in _TREE_ORDER:
        if category.key == key:
            return category

    words = set(label_words(_folded(label)))
    for vocabulary, category in _TREE_WORDS:
        if words & vocabulary:
            return category

    return None


class ReportCategory(enum.Enum):
    CHILD = "child"
    SPOUSE = "spouse"
    SIBLING = "sibling"
    PATERNAL = "paternal"
    MATERNAL = "maternal"
    OTHER = "other"


# Ordered substring rules over the folded label; first match wins
_REPORT_RULES: list[tuple[tuple[str, ...], ReportCategory]] = [
    (("HIJ",), ReportCategory.CHILD),
    (("CONYUGE", "ESPOS", "PAREJA"), ReportCategory.SPOUSE),
    (("HERMAN",), ReportCategory.SIBLING),
    (("MATERN",), ReportCategory.MATERNAL),
    (("PADRE", "ABUEL", "TIO", "TIA", "PATERN"), ReportCategory.PATERNAL),
    (("MADRE",), ReportCategory.MATERNAL),
]


def _same_surname(a: Optional[str], b: Optional[str]) -> bool:
    return bool(a and b) and fold_label(a) == fold_label(b)


def classify_report(person: Person, principal: Optional[Person] = None) -> ReportCategory:
    """
    Map a relative to a report branch.

    Label rules first, then surname comparison against the principal, then
    OTHER. Never raises; a missing label goes straight to OTHER.
    """
    label = _folded(person.relationship)
    if not label:
        return ReportCategory.OTHER

    for tokens, category in _REPORT_RULES:
        if any(token in label for token in tokens):
            return category

    if principal is not None:
        if _same_surname(person.paternal_surname, principal.paternal_surname):
            return ReportCategory.PATERNAL
        if (_same_surname(person.paternal_surname, principal.maternal_surname)
                or _same_surname(person.maternal_surname, principal.maternal_surname)):
            return ReportCategory.MATERNAL

    return ReportCategory.OTHER
