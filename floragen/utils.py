import re
import unicodedata
from typing import Callable, Iterable, Optional, TypeVar

T = TypeVar("T")

_TRANSLITERATION_GROUPS = (
    ("áàäâãåăą", "a"),
    ("çćč", "c"),
    ("đď", "d"),
    ("èéěëêę", "e"),
    ("ǵ", "g"),
    ("ḧ", "h"),
    ("îïíīįì", "i"),
    ("ł", "l"),
    ("ḿ", "m"),
    ("ǹń", "n"),
    ("ôöòóœøōõő", "o"),
    ("ṕ", "p"),
    ("ŕř", "r"),
    ("ßſśšș", "s"),
    ("ťț", "t"),
    ("ûüùúūǘůűų", "u"),
    ("ẃ", "w"),
    ("ẍ", "x"),
    ("ÿý", "y"),
    ("žźż", "z"),
    ("·/_,:;", "-"),
)
TRANSLITERATION = str.maketrans(
    {char: ascii_char for chars, ascii_char in _TRANSLITERATION_GROUPS for char in chars}
)


def _clean_hyphens(text: str) -> str:
    text = re.sub(r"-+", "-", text)
    return text.strip("-")


def slugify(text: Optional[str]) -> str:
    """
    Convert free text into a URL-safe slug.

    Steps:
    - lowercase
    - whitespace runs become a single hyphen
    - anything that is not a word character or hyphen is removed
    - hyphen runs collapse, leading/trailing hyphens are trimmed
    - accented characters are transliterated to their ASCII base letter

    The result only ever contains [a-z0-9-]. Empty input, or input made only of
    removed characters, gives "" and callers must treat that as a failure.

    Examples:
        "Minha Rosa!" -> "minha-rosa"
        "Orquídea  Borboleta" -> "orquidea-borboleta"
    """
    if not text:
        return ""

    slug = str(text).lower()
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"[^\w-]+", "", slug)
    slug = _clean_hyphens(slug)

    slug = slug.translate(TRANSLITERATION)

    # Letters outside the table: drop the combining marks left by NFD
    slug = unicodedata.normalize("NFD", slug)
    slug = "".join(c for c in slug if unicodedata.category(c) != "Mn")
    slug = re.sub(r"[^a-z0-9-]+", "", slug)

    return _clean_hyphens(slug)


def first_successful(candidates: Iterable[Callable[[], Optional[T]]]) -> Optional[T]:
    """Call each candidate in order and return the first non-empty result.

    Later candidates are never called once one succeeds.
    """
    for candidate in candidates:
        result = candidate()
        if result:
            return result
    return None


def target_language_name(language: str, fallback: Optional[str] = "English") -> str:
    """Language wording used inside prompts.

    Tags starting with "pt" read as Brazilian Portuguese. Otherwise the fallback
    is used, or the tag itself when the fallback is None.
    """
    if language.lower().startswith("pt"):
        return "Brazilian Portuguese"
    return fallback if fallback is not None else language
