import re
import unicodedata
from typing import Optional

PLACEHOLDER = "Desconocido"
NOT_AVAILABLE = "N/A"

# Characters removed from relationship labels before comparing them to category keys
_LABEL_STRIP_RE = re.compile(r"[/áéíóúüñ]")

_DNI_RE = re.compile(r"^\d{8}$")


def normalize_label(label: Optional[str]) -> str:
    """
    Normalize a relationship label to a category key.
    Examples:
        "Padre/Madre" → "padremadre"
        "Cónyuge/Pareja" → "cnyugepareja"
    """
    if not label:
        return ""
    return _LABEL_STRIP_RE.sub("", label.lower())


def fold_label(label: Optional[str]) -> str:
    """
    Accent-fold and upper-case a label for substring rules.
    Examples:
        "Tío Paterno" → "TIO PATERNO"
        "cónyuge" → "CONYUGE"
    """
    if not label:
        return ""
    decomposed = unicodedata.normalize("NFKD", label)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.upper().strip()


def label_words(label: Optional[str]) -> list:
    """Lower-case folded words of a label ("Tío/Tía" → ["tio", "tia"])."""
    return [w for w in re.split(r"[^a-z]+", fold_label(label).lower()) if w]


def clean(value: object, placeholder: str = PLACEHOLDER) -> str:
    """Stringify a field, substituting a placeholder for missing values."""
    if value is None:
        return placeholder
    text = str(value).strip()
    return text or placeholder


def validate_dni(dni: str) -> bool:
    """
    Validate a DNI number.
    DNI is 8 digits.
    """
    if not dni:
        return False
    return bool(_DNI_RE.match(dni.strip()))


def format_dni(dni: str) -> str:
    """Format DNI to standard 8-digit format."""
    cleaned = re.sub(r'\D', '', dni)
    return cleaned.zfill(8)
