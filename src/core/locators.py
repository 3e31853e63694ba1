"""
Canonical identities for remote resources.

A canonical locator is the comparison key used for duplicate detection:
everything from the first '?' or '#' is dropped and the rest is lowercased.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import Optional

VIDEO_PAGE_MARKER = "/videos/hentai/"
IMAGES_PAGE_MARKER = "/browse/images"

_QUERY_OR_FRAGMENT = re.compile(r"[?#]")


class PageKind(str, Enum):
    VIDEO = "video"
    IMAGES = "images"
    OTHER = "other"


def normalize_url(raw: Optional[str]) -> str:
    """Return the canonical form of ``raw``; empty/None yields ''."""
    if not raw:
        return ""
    return _QUERY_OR_FRAGMENT.split(raw, maxsplit=1)[0].lower()


def classify_page(url: Optional[str]) -> PageKind:
    canonical = normalize_url(url)
    if VIDEO_PAGE_MARKER in canonical:
        return PageKind.VIDEO
    if IMAGES_PAGE_MARKER in canonical:
        return PageKind.IMAGES
    return PageKind.OTHER


def is_same_page(a: Optional[str], b: Optional[str]) -> bool:
    return normalize_url(a) == normalize_url(b)
