import json
from pathlib import Path

import pytest

from genealogia.models import Person

SAMPLE_PAYLOAD = Path(__file__).parent.parent / "scripts" / "sample_family.json"


@pytest.fixture
def sample_payload() -> dict:
    return json.loads(SAMPLE_PAYLOAD.read_text(encoding="utf-8"))


@pytest.fixture
def principal() -> Person:
    return Person(
        id="p1", name="Juan Pérez", relationship="Principal",
        paternal_surname="Pérez", maternal_surname="García", sex="M", dni="12345678",
    )


@pytest.fixture
def family() -> list:
    """One relative per tree category, labelled with the category keys"""
    return [
        Person(id="f1", name="María García", relationship="Cónyuge/Pareja", sex="F"),
        Person(id="f2", name="Carlos Pérez", relationship="Hijo/Hija", sex="M", age=15),
        Person(id="f3", name="Ana Pérez", relationship="Hijo/Hija", sex="F", age=12),
        Person(id="f4", name="Pedro Pérez", relationship="Padre/Madre", sex="M", age=70),
        Person(id="f5", name="Elena López", relationship="Padre/Madre", sex="F", age=68),
        Person(id="f6", name="Luis Pérez", relationship="Hermano/Hermana", sex="M", age=40),
        Person(id="f7", name="Javier Pérez", relationship="Abuelo/Abuela", sex="M", age=92),
        Person(id="f8", name="Rosa Pérez", relationship="Abuelo/Abuela", sex="F", age=89),
        Person(id="f9", name="Lucía Pérez", relationship="Tío/Tía", sex="F", age=65),
        Person(id="f10", name="Roberto García", relationship="Primo/Prima", sex="M", age=35),
    ]
