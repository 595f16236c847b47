"""
Asset naming helpers.
"""

from __future__ import annotations

import re
import secrets
import string

_SEPARATORS = re.compile(r"[-_\s]+")
_UNSAFE = re.compile(r"[^a-z0-9-]+")
_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def zip_name_to_human_name(zip_name: str) -> str:
    """
    Derive a display name from an archive file name.

    Everything from the first dot on is dropped (so versioned archives
    like ``gutenberg.19.0.zip`` keep just the slug), separators become
    spaces, and words are title-cased.

        >>> zip_name_to_human_name("hello-dolly.zip")
        'Hello Dolly'
    """
    base = zip_name.rsplit("/", 1)[-1].split(".", 1)[0]
    words = [w for w in _SEPARATORS.split(base) if w]
    return " ".join(w[:1].upper() + w[1:].lower() for w in words)


def slugify(name: str, fallback: str = "asset") -> str:
    """Filesystem-safe folder name: lowercase, dash separated."""
    slug = _SEPARATORS.sub("-", name.strip().lower())
    slug = _UNSAFE.sub("", slug).strip("-")
    return re.sub(r"-{2,}", "-", slug) or fallback


def random_suffix(length: int = 10) -> str:
    return "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(length))
