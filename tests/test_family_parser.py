import json
from datetime import date

import pytest

from genealogia.services.family_parser import (
    FamilyDataParser, parse_birth_date, person_from_record, PRINCIPAL_LABEL
)
from genealogia.utils import PLACEHOLDER, validate_dni, format_dni, clean


def test_principal_and_relatives(sample_payload):
    principal, relatives = FamilyDataParser.parse(sample_payload, today=date(2026, 3, 14))

    assert principal.name == "Juan Pérez García"
    assert principal.relationship == PRINCIPAL_LABEL
    assert principal.dni == "12345678"
    assert principal.age == 46
    assert len(relatives) == 11
    assert relatives[0].relationship == "Cónyuge/Pareja"


def test_birthday_not_reached_yet(sample_payload):
    principal, _ = FamilyDataParser.parse(sample_payload, today=date(2026, 3, 13))
    assert principal.age == 45


def test_field_aliases(sample_payload):
    _, relatives = FamilyDataParser.parse(sample_payload)
    ana = relatives[2]
    pedro = relatives[3]

    assert ana.dni == "45678901"
    assert ana.sex == "F"
    assert pedro.name == "Pedro Pérez Ruiz"
    assert pedro.relationship == "PADRE"
    assert pedro.paternal_surname == "Pérez"
    assert pedro.maternal_surname == "Ruiz"


def test_missing_fields_use_placeholders():
    person = person_from_record({"tipo": "PRIMO"})
    assert person.name == PLACEHOLDER
    assert person.dni is None
    assert person.age is None
    assert person.sex is None


def test_bare_result_and_malformed_coincidences():
    data = {"person": {"nom": "Ana"}, "coincidences": ["oops", None, {"nom": "Luis", "tipo": "HERMANO"}]}
    principal, relatives = FamilyDataParser.parse(data)
    assert principal.name == "Ana"
    assert [p.name for p in relatives] == ["Luis"]


def test_empty_payload():
    principal, relatives = FamilyDataParser.parse({})
    assert principal.name == PLACEHOLDER
    assert relatives == []


def test_age_field_wins_over_birth_date():
    person = person_from_record({"edad": "30", "fn": "01/01/1950"}, today=date(2026, 1, 1))
    assert person.age == 30


def test_non_finite_age_falls_back_to_birth_date():
    payload = json.loads(
        '{"result": {"person": {"nom": "Ana"}, "coincidences": ['
        '{"tipo": "HIJO", "edad": 1e400},'
        '{"tipo": "HIJA", "edad": "nan", "fn": "01/01/2010"}]}}'
    )
    _, relatives = FamilyDataParser.parse(payload, today=date(2026, 1, 1))

    assert relatives[0].age is None
    assert relatives[1].age == 16


@pytest.mark.parametrize("payload", [
    {"result": {"person": "12345678"}},
    {"result": "12345678"},
    {"result": {"person": ["Ana"], "coincidences": [{"nom": "Luis", "tipo": "HERMANO"}]}},
    "not a payload",
])
def test_malformed_result_or_person_is_treated_as_empty(payload):
    principal, relatives = FamilyDataParser.parse(payload)
    assert principal.name == PLACEHOLDER
    assert principal.relationship == PRINCIPAL_LABEL
    assert len(relatives) <= 1


def test_parse_birth_date_formats():
    assert parse_birth_date("14/03/1980") == date(1980, 3, 14)
    assert parse_birth_date("1980-03-14") == date(1980, 3, 14)
    assert parse_birth_date("19800314") == date(1980, 3, 14)
    assert parse_birth_date("mañana") is None
    assert parse_birth_date(None) is None


def test_future_birth_date_has_no_age():
    person = person_from_record({"fn": "01/01/2030"}, today=date(2026, 1, 1))
    assert person.age is None


def test_dni_helpers():
    assert validate_dni("12345678")
    assert validate_dni(" 12345678 ")
    assert not validate_dni("1234567")
    assert not validate_dni("1234567a")
    assert format_dni("1.234.567") == "01234567"
    assert clean(None) == PLACEHOLDER
    assert clean("  ", "N/A") == "N/A"
    assert clean(0) == "0"
