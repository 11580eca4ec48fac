from .text import (
    normalize_label, fold_label, label_words, clean,
    validate_dni, format_dni, PLACEHOLDER, NOT_AVAILABLE
)
from .fonts import font_dir, font_path

__all__ = [
    "normalize_label", "fold_label", "label_words", "clean",
    "validate_dni", "format_dni", "PLACEHOLDER", "NOT_AVAILABLE",
    "font_dir", "font_path",
]
