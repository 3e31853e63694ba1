from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

_LEADING_DIGITS = re.compile(r"\d+")

# Scrape payload keys that count as "missing" when empty
SCRAPE_FIELDS = ("url", "title", "views", "thumbnail", "brand", "releaseDate", "tags", "plot")


def parse_view_count(text: Any) -> Optional[int]:
    """
    Parse a free-text view counter such as "1,234,567 views".

    Thousands separators are stripped and the leading numeric token is used.
    Returns None when nothing numeric leads the text; zero is only returned
    for an explicit "0".
    """
    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, int):
        return text if text >= 0 else None
    if isinstance(text, float):
        return int(text) if text >= 0 else None

    tokens = str(text).split()
    if not tokens:
        return None
    match = _LEADING_DIGITS.match(tokens[0].replace(",", ""))
    return int(match.group(0)) if match else None


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class VideoRecord:
    url: str

    title: Optional[str] = None
    views: Optional[int] = None
    thumbnail_url: Optional[str] = None
    brand: Optional[str] = None
    playlist: Optional[str] = None
    release_date: Optional[str] = None
    plot: Optional[str] = None
    tags: Tuple[str, ...] = field(default_factory=tuple)

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def with_changes(self, **changes) -> "VideoRecord":
        return replace(self, **changes)

    def content_fields(self) -> Dict[str, Any]:
        """All mutable fields, i.e. everything except identity and timestamps."""
        return {
            "title": self.title,
            "views": self.views,
            "thumbnail_url": self.thumbnail_url,
            "brand": self.brand,
            "playlist": self.playlist,
            "release_date": self.release_date,
            "plot": self.plot,
            "tags": self.tags,
        }

    @classmethod
    def from_scrape(cls, payload: Dict[str, Any]) -> Tuple["VideoRecord", List[str]]:
        """
        Build a candidate from the dict returned by the page scrape script.

        Returns the record and the list of payload keys that were empty.
        """
        tags = payload.get("tags") or []
        if isinstance(tags, str):
            tags = [tags]
        record = cls(
            url=_clean(payload.get("url")) or "",
            title=_clean(payload.get("title")),
            views=parse_view_count(payload.get("views")),
            thumbnail_url=_clean(payload.get("thumbnail")),
            brand=_clean(payload.get("brand")),
            playlist=_clean(payload.get("playlist")),
            release_date=_clean(payload.get("releaseDate")),
            plot=_clean(payload.get("plot")),
            tags=tuple(t for t in (_clean(t) for t in tags) if t),
        )
        missing = []
        for key in SCRAPE_FIELDS:
            value = payload.get(key)
            if value is None or value == "" or (isinstance(value, (list, tuple)) and not value):
                missing.append(key)
        return record, missing
