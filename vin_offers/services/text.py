"""Lookup-key normalisation for offer names."""

import re
import unicodedata

_WHITESPACE = re.compile(r"\s+")


def fold_accents(value: str) -> str:
    """'Código' -> 'Codigo'."""
    decomposed = unicodedata.normalize("NFD", value)
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def normalize_text(value: object) -> str:
    """Underscores to spaces, strip accents, lowercase, collapse whitespace.

    Never fails; ``None`` and empty input give ``""``.
    """
    if value is None:
        return ""
    text = str(value).replace("_", " ")
    text = fold_accents(text.lower()).strip()
    return _WHITESPACE.sub(" ", text)
