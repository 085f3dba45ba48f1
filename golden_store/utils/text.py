"""Name normalisation and search helpers."""
import math
import re
import unicodedata

_PUNCTUATION = re.compile(r"[^\w\s]")
_SPACES = re.compile(r"\s+")


def title_case(text: str) -> str:
    """'jean  PIERRE' -> 'Jean Pierre'."""
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split())


def capitalize_words(text: str) -> str:
    """Upper-case the first letter of each word, keep the rest as typed."""
    return " ".join(word[:1].upper() + word[1:] for word in text.split())


def normalize_search(text: str) -> str:
    """Lowercase, strip accents and punctuation, collapse whitespace."""
    decomposed = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    stripped = _PUNCTUATION.sub("", stripped)
    return _SPACES.sub(" ", stripped).strip()


def is_finite_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)
