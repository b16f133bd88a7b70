"""Output file names derived from page titles"""

import re
import unicodedata


MAX_SLUG_LENGTH = 80


def _fold(char: str) -> str:
    """Strip accents from Latin letters; leave other scripts as they are."""
    base = "".join(c for c in unicodedata.normalize("NFKD", char) if not unicodedata.combining(c))
    return base if base.isascii() else char


def slugify(title: str) -> str:
    """Page title to a lowercase, hyphen-separated file stem.

    Accents are folded to their base letters; other word characters (CJK
    titles, digits) are kept. Long titles are cut at a hyphen boundary.
    """
    text = "".join(_fold(c) for c in title).lower()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_-]+", "-", text).strip("-")
    if len(text) > MAX_SLUG_LENGTH:
        head = text[:MAX_SLUG_LENGTH]
        text = head.rsplit("-", 1)[0] if "-" in head else head
    return text


def unique_slug(slug: str, taken: set[str]) -> str:
    """Return slug, or slug-2, slug-3 ... when already taken; records the result."""
    candidate, n = slug, 1
    while candidate in taken:
        n += 1
        candidate = f"{slug}-{n}"
    taken.add(candidate)
    return candidate
