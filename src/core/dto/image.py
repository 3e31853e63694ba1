from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, NamedTuple, Optional, Tuple


class ImageKey(NamedTuple):
    """Duplicate key for a saved image: the same image may be saved under another tag."""
    url: str
    source_url: str
    tag: str


@dataclass(frozen=True)
class ImageRecord:
    url: str                    # raw member url as read from the page
    source_url: str             # canonical url of the gallery page
    tag: str
    comments: Optional[str] = None

    saved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def key(self) -> ImageKey:
        return ImageKey(self.url, self.source_url, self.tag)


@dataclass(frozen=True)
class ImageBatch:
    """A set of members chosen on one page, saved under one tag/comments pair."""
    urls: Tuple[str, ...]
    source_url: str
    tag: str
    comments: Optional[str] = None
    saved_at: Optional[datetime] = None

    def unique_urls(self) -> List[str]:
        seen = set()
        ordered = []
        for url in self.urls:
            if url and url not in seen:
                seen.add(url)
                ordered.append(url)
        return ordered

    def keys(self) -> List[ImageKey]:
        return [ImageKey(url, self.source_url, self.tag) for url in self.unique_urls()]

    def records(self, now: datetime) -> List[ImageRecord]:
        saved_at = self.saved_at or now
        return [
            ImageRecord(
                url=url,
                source_url=self.source_url,
                tag=self.tag,
                comments=self.comments,
                saved_at=saved_at,
                created_at=now,
            )
            for url in self.unique_urls()
        ]


@dataclass(frozen=True)
class ImageDetails:
    """Tag and comments entered for a selection before it is saved."""
    tag: str
    comments: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "tag", (self.tag or "").strip())
        object.__setattr__(self, "comments", (self.comments or "").strip() or None)


@dataclass(frozen=True)
class InsertSummary:
    saved: int = 0
    skipped: int = 0
    failed_urls: Tuple[str, ...] = field(default_factory=tuple)
