import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from genealogia.models import Person
from genealogia.services.classifier import (
    TreeCategory, ReportCategory, classify_tree, classify_report
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Layer:
    """One tree tier: every member shares a category"""
    category: TreeCategory
    members: tuple

    @property
    def name(self) -> str:
        return self.category.label

    @property
    def order(self) -> int:
        return self.category.order

    def __len__(self) -> int:
        return len(self.members)


def group_tree(principal: Optional[Person], relatives: Sequence[Person]) -> List[Layer]:
    """
    Bucket the principal and relatives into fixed-order tree layers.

    Empty layers are left out; members keep their input order. Persons whose
    label maps to no category are dropped.
    """
    people = ([principal] if principal is not None else []) + list(relatives)
    buckets = {category: [] for category in TreeCategory}

    for person in people:
        category = classify_tree(person.relationship)
        if category is None:
            logger.debug(f"Tree: dropping unclassified relationship {person.relationship!r} ({person.name})")
            continue
        buckets[category].append(person)

    return [
        Layer(category=category, members=tuple(members))
        for category, members in buckets.items()
        if members
    ]


@dataclass
class ReportBranches:
    """
    Report display buckets.

    Children are listed in ``direct`` AND in ``paternal`` (report convention),
    and counted once more in ``children``. ``extended`` holds relatives no rule
    could place; they are also appended to ``maternal``.
    """
    principal: Optional[Person] = None
    direct: List[Person] = field(default_factory=list)
    paternal: List[Person] = field(default_factory=list)
    maternal: List[Person] = field(default_factory=list)
    extended: List[Person] = field(default_factory=list)
    children: List[Person] = field(default_factory=list)

    @property
    def relatives(self) -> List[Person]:
        """Every relative once, in first-seen order"""
        seen = set()
        result = []
        for person in self.direct + self.paternal + self.maternal:
            if person.id not in seen:
                seen.add(person.id)
                result.append(person)
        return result

    def counts(self) -> dict:
        return {
            "direct": len(self.direct),
            "paternal": len(self.paternal),
            "maternal": len(self.maternal),
        }


def group_report(principal: Optional[Person], relatives: Sequence[Person]) -> ReportBranches:
    """Split relatives into direct / paternal / maternal (+ extended) buckets."""
    branches = ReportBranches(principal=principal)
    maternal_own: List[Person] = []

    for person in relatives:
        category = classify_report(person, principal)
        if category is ReportCategory.CHILD:
            branches.direct.append(person)
            branches.children.append(person)
            branches.paternal.append(person)
        elif category in (ReportCategory.SPOUSE, ReportCategory.SIBLING):
            branches.direct.append(person)
        elif category is ReportCategory.PATERNAL:
            branches.paternal.append(person)
        elif category is ReportCategory.MATERNAL:
            maternal_own.append(person)
        else:
            branches.extended.append(person)

    branches.maternal = maternal_own + branches.extended

    logger.debug(
        f"Report branches: direct={len(branches.direct)} paternal={len(branches.paternal)} "
        f"maternal={len(maternal_own)} extended={len(branches.extended)}"
    )
    return branches
