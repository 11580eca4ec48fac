"""Registry API response → Person records.

The upstream API is inconsistent about field names (``nom`` / ``nombres``,
``ap`` / ``apellido_paterno`` ...). Every alias is resolved here, before any
classification happens, so the rest of the pipeline only sees ``Person``.
"""

from __future__ import annotations

import logging
from datetime import date, datetime

from genealogia.models import Person
from genealogia.utils import PLACEHOLDER

logger = logging.getLogger(__name__)

PRINCIPAL_LABEL = "Principal"

# canonical field → accepted upstream keys, first non-empty wins
_ALIASES: dict[str, tuple[str, ...]] = {
    "dni": ("dni", "numDoc", "num_doc"),
    "names": ("nom", "nombres"),
    "paternal": ("ap", "apellido_paterno"),
    "maternal": ("am", "apellido_materno"),
    "sex": ("ge", "sexo"),
    "birth": ("fn", "fecha_nacimiento"),
    "age": ("edad",),
    "relationship": ("tipo", "parentesco"),
}

_DATE_FORMATS = ("%d/%m/%Y", "%Y-%m-%d", "%d-%m-%Y", "%Y%m%d")


def _pick(record: dict, canonical: str) -> str | None:
    for key in _ALIASES[canonical]:
        value = record.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def parse_birth_date(raw: str | None) -> date | None:
    if not raw:
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(raw.strip(), fmt).date()
        except ValueError:
            continue
    return None


def _age(record: dict, today: date) -> int | None:
    raw = _pick(record, "age")
    if raw is not None:
        try:
            return int(float(raw))
        except (ValueError, OverflowError):
            # non-finite ages fall back to the birth date
            pass
    born = parse_birth_date(_pick(record, "birth"))
    if born is None or born > today:
        return None
    return today.year - born.year - ((today.month, today.day) < (born.month, born.day))


def person_from_record(record: dict, relationship: str | None = None, today: date | None = None) -> Person:
    """Build a Person from one upstream record (principal or coincidence)."""
    today = today or date.today()
    names = _pick(record, "names")
    paternal = _pick(record, "paternal")
    maternal = _pick(record, "maternal")
    display = " ".join(p for p in (names, paternal, maternal) if p) or PLACEHOLDER

    sex = _pick(record, "sex")
    kwargs = {}
    if record.get("id"):
        kwargs["id"] = str(record["id"])

    return Person(
        name=display,
        relationship=relationship if relationship is not None else (_pick(record, "relationship") or ""),
        paternal_surname=paternal,
        maternal_surname=maternal,
        sex=sex.upper() if sex else None,
        age=_age(record, today),
        birth_date=_pick(record, "birth"),
        dni=_pick(record, "dni"),
        **kwargs,
    )


class FamilyDataParser:
    """Parses a registry family payload into principal + relatives"""

    @classmethod
    def parse(cls, data: dict, today: date | None = None) -> tuple[Person, list[Person]]:
        """
        Returns (principal, relatives).

        Accepts the full payload ({"result": {...}}) or the bare result object.
        Non-dict result, person and coincidence entries are treated as empty.
        """
        result = data.get("result", data) if isinstance(data, dict) else {}
        if not isinstance(result, dict):
            logger.warning(f"Malformed registry result: {type(result).__name__}")
            result = {}
        person = result.get("person")
        if not isinstance(person, dict):
            if person:
                logger.warning(f"Malformed person record: {type(person).__name__}")
            person = {}

        principal = person_from_record(person, relationship=PRINCIPAL_LABEL, today=today)

        relatives: list[Person] = []
        for item in result.get("coincidences") or []:
            if not isinstance(item, dict):
                logger.debug(f"Skipping malformed coincidence: {item!r}")
                continue
            relatives.append(person_from_record(item, today=today))

        quantity = result.get("quantity")
        if quantity is not None and str(quantity).isdigit() and int(quantity) != len(relatives):
            logger.info(f"Registry quantity={quantity} but {len(relatives)} coincidences parsed")

        return principal, relatives
