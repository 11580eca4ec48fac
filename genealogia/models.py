from dataclasses import dataclass, field
from typing import Optional
import uuid


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Person:
    """A relative or the principal individual of one render job"""
    name: str
    relationship: str = ""
    paternal_surname: Optional[str] = None
    maternal_surname: Optional[str] = None
    sex: Optional[str] = None
    age: Optional[int] = None
    birth_date: Optional[str] = None
    dni: Optional[str] = None
    id: str = field(default_factory=_new_id)

    @property
    def surnames(self) -> str:
        return " ".join(s for s in (self.paternal_surname, self.maternal_surname) if s)
