import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from genealogia.config import settings
from genealogia.models import Person
from genealogia.services.grouping import ReportBranches
from genealogia.utils import fold_label

logger = logging.getLogger(__name__)

MALE = "M"
FEMALE = "F"
UNKNOWN = "U"

_MALE_MARKERS = frozenset({"M", "MASCULINO", "HOMBRE", "VARON", "H", "1"})
_FEMALE_MARKERS = frozenset({"F", "FEMENINO", "MUJER", "2"})


def sex_from_marker(marker: Optional[str]) -> Optional[str]:
    """Authoritative sex from the registry marker, None if absent/unknown"""
    if not marker:
        return None
    folded = fold_label(marker)
    if folded in _MALE_MARKERS:
        return MALE
    if folded in _FEMALE_MARKERS:
        return FEMALE
    return None


def infer_sex_from_label(label: Optional[str]) -> str:
    """
    Last-resort guess from the label's final letter ("Tío" → M, "Prima" → F).

    Unreliable; only used when the registry sent no sex marker.
    """
    letters = [ch for ch in fold_label(label).lower() if ch.isalpha()]
    if not letters:
        return UNKNOWN
    if letters[-1] == "o":
        return MALE
    if letters[-1] == "a":
        return FEMALE
    return UNKNOWN


def resolve_sex(person: Person) -> str:
    return sex_from_marker(person.sex) or infer_sex_from_label(person.relationship)


def bracket_labels(breakpoints: Sequence[int]) -> List[str]:
    """[17, 60] → ["0-17", "18-60", "61+"]; the top bucket starts above the last breakpoint"""
    labels = []
    lower = 0
    for bp in breakpoints:
        labels.append(f"{lower}-{bp}")
        lower = bp + 1
    labels.append(f"{breakpoints[-1] + 1}+" if breakpoints else "0+")
    return labels


def bracket_index(age: int, breakpoints: Sequence[int]) -> int:
    """Breakpoints are upper-inclusive: age 60 with [17, 60] is bracket 1"""
    for idx, bp in enumerate(breakpoints):
        if age <= bp:
            return idx
    return len(breakpoints)


@dataclass(frozen=True)
class StatsSnapshot:
    total: int
    sex: Dict[str, int] = field(default_factory=dict)
    age_brackets: Dict[str, int] = field(default_factory=dict)
    area_brackets: Dict[str, int] = field(default_factory=dict)
    unknown_age: int = 0
    branches: Dict[str, int] = field(default_factory=dict)
    children: int = 0

    def percent(self, count: int) -> float:
        """count / total with the denominator guarded; 0.0 when there are no relatives"""
        if not self.total:
            return 0.0
        return count / self.total

    def sex_percent(self, key: str) -> float:
        return self.percent(self.sex.get(key, 0))


def _histogram(ages: List[int], breakpoints: Sequence[int]) -> Dict[str, int]:
    labels = bracket_labels(breakpoints)
    counts = {label: 0 for label in labels}
    for age in ages:
        counts[labels[bracket_index(age, breakpoints)]] += 1
    return counts


def aggregate(
    branches: ReportBranches,
    age_breakpoints: Optional[Sequence[int]] = None,
    area_breakpoints: Optional[Sequence[int]] = None,
) -> StatsSnapshot:
    """Count relatives by sex, age bracket and branch."""
    age_breakpoints = sorted(age_breakpoints or settings.age_breakpoints)
    area_breakpoints = sorted(area_breakpoints or settings.area_age_breakpoints)

    relatives = branches.relatives
    sex = {MALE: 0, FEMALE: 0, UNKNOWN: 0}
    ages: List[int] = []
    for person in relatives:
        sex[resolve_sex(person)] += 1
        if person.age is not None and person.age >= 0:
            ages.append(person.age)

    snapshot = StatsSnapshot(
        total=len(relatives),
        sex=sex,
        age_brackets=_histogram(ages, age_breakpoints),
        area_brackets=_histogram(ages, area_breakpoints),
        unknown_age=len(relatives) - len(ages),
        branches=branches.counts(),
        children=len(branches.children),
    )
    logger.debug(f"Stats: total={snapshot.total} sex={sex} branches={snapshot.branches}")
    return snapshot
