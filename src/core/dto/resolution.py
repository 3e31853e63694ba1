from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple, Union

from src.core.dto.image import ImageRecord
from src.core.dto.video import VideoRecord
from src.core.errors import ErrorKind


class ResolutionKind(str, Enum):
    KEEP_EXISTING = "keep_existing"
    OVERWRITE_WITH_NEW = "overwrite_with_new"
    FIELD_MERGE = "field_merge"
    SAVE_NEW_ONLY = "save_new_only"
    SAVE_ALL = "save_all"
    CANCEL = "cancel"


VIDEO_KINDS = frozenset({
    ResolutionKind.KEEP_EXISTING,
    ResolutionKind.OVERWRITE_WITH_NEW,
    ResolutionKind.FIELD_MERGE,
    ResolutionKind.CANCEL,
})
IMAGE_KINDS = frozenset({
    ResolutionKind.SAVE_NEW_ONLY,
    ResolutionKind.SAVE_ALL,
    ResolutionKind.CANCEL,
})


class MergeField(str, Enum):
    """Video fields the user may pick individually during a custom merge."""
    TITLE = "title"
    VIEWS = "views"
    PLAYLIST = "playlist"
    PLOT = "plot"


class FieldSource(str, Enum):
    EXISTING = "existing"
    CANDIDATE = "candidate"


@dataclass(frozen=True)
class ResolutionDecision:
    kind: ResolutionKind
    field_sources: Mapping[MergeField, FieldSource] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def keep_existing(cls) -> "ResolutionDecision":
        return cls(ResolutionKind.KEEP_EXISTING)

    @classmethod
    def overwrite(cls) -> "ResolutionDecision":
        return cls(ResolutionKind.OVERWRITE_WITH_NEW)

    @classmethod
    def save_new_only(cls) -> "ResolutionDecision":
        return cls(ResolutionKind.SAVE_NEW_ONLY)

    @classmethod
    def save_all(cls) -> "ResolutionDecision":
        return cls(ResolutionKind.SAVE_ALL)

    @classmethod
    def cancel(cls) -> "ResolutionDecision":
        return cls(ResolutionKind.CANCEL)

    @classmethod
    def field_merge(
        cls,
        selection: Mapping[Union[MergeField, str], Union[FieldSource, str]],
    ) -> "ResolutionDecision":
        """
        Build a merge decision from a per-field selection.

        Keys and values may be given as enum members or their string values.
        Unknown field names raise ValueError. Fields not present in the
        selection take the candidate's value when applied.
        """
        sources = {}
        for key, value in selection.items():
            try:
                merge_field = MergeField(key)
            except ValueError:
                raise ValueError(f"Unknown merge field: {key!r}") from None
            sources[merge_field] = FieldSource(value)
        return cls(ResolutionKind.FIELD_MERGE, MappingProxyType(sources))

    def source_for(self, merge_field: MergeField) -> FieldSource:
        return self.field_sources.get(merge_field, FieldSource.CANDIDATE)


class SaveAction(str, Enum):
    INSERTED = "inserted"
    UPDATED = "updated"
    KEPT_EXISTING = "kept_existing"
    CANCELLED = "cancelled"
    NOT_SAVED = "not_saved"


@dataclass(frozen=True)
class VideoSaveResult:
    action: SaveAction
    record: Optional[VideoRecord] = None
    error: Optional[ErrorKind] = None

    @property
    def success(self) -> bool:
        return self.error is None and self.action != SaveAction.NOT_SAVED


@dataclass(frozen=True)
class ImageSaveResult:
    saved: int = 0
    skipped: int = 0
    duplicates: Tuple[ImageRecord, ...] = ()
    protocol: Optional[ResolutionKind] = None
    error: Optional[ErrorKind] = None
    cancelled: bool = False

    @property
    def success(self) -> bool:
        return self.error is None and not self.cancelled
