"""URL slug helpers shared by blog posts, status pages and products."""

import re
import unicodedata
from typing import Iterable

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Lowercase ASCII slug: accents folded, other runs become ``-``.

    Examples:
        slugify("Réparer l'écran d'un iPhone") -> "reparer-l-ecran-d-un-iphone"
        slugify("  --Hello__World--  ") -> "hello-world"
    """
    folded = unicodedata.normalize("NFKD", text or "")
    ascii_text = folded.encode("ascii", "ignore").decode("ascii").lower()
    return _NON_ALNUM.sub("-", ascii_text).strip("-")


def next_free_slug(slug: str, taken: Iterable[str]) -> str:
    """First of ``slug-2``, ``slug-3``... not present in ``taken``."""
    used = set(taken)
    counter = 2
    while f"{slug}-{counter}" in used:
        counter += 1
    return f"{slug}-{counter}"
