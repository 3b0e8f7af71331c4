import re
import secrets
import unicodedata
from typing import Awaitable, Callable

_SLUG_INVALID_RE = re.compile(r"[^a-z0-9]+")

# Numeric suffixes tried (-1 .. -999) before falling back to a random one.
MAX_SLUG_ATTEMPTS = 1000
FALLBACK_SLUG = "article"


def _strip_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return unicodedata.normalize("NFC", stripped)


def generate_slug(title: str) -> str:
    """
    Return a URL-safe, lowercase slug derived from *title*.

    >>> generate_slug("Café au Lait")
    'cafe-au-lait'
    """
    if not title:
        return ""
    text = _strip_diacritics(title).lower()
    return _SLUG_INVALID_RE.sub("-", text).strip("-")


async def generate_unique_slug(
    title: str,
    exists: Callable[[str], Awaitable[bool]],
) -> str:
    """
    Return the first slug for *title* that *exists* reports as free.

    Tries the bare slug, then ``-1``, ``-2`` ... up to the attempt bound,
    then a random hex suffix.  A title with no usable characters slugs to
    ``article``.
    """
    base = generate_slug(title) or FALLBACK_SLUG
    if not await exists(base):
        return base
    for i in range(1, MAX_SLUG_ATTEMPTS):
        candidate = f"{base}-{i}"
        if not await exists(candidate):
            return candidate
    return f"{base}-{secrets.token_hex(4)}"
