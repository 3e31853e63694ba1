from src.core.dto.video import VideoRecord, parse_view_count
from src.core.dto.image import ImageBatch, ImageDetails, ImageKey, ImageRecord, InsertSummary
from src.core.dto.library import LibraryStats, UpsertMode, UpsertResult

# Resolution DTOs (produced per duplicate event, never persisted)
from src.core.dto.resolution import (
    FieldSource,
    ImageSaveResult,
    MergeField,
    ResolutionDecision,
    ResolutionKind,
    SaveAction,
    VideoSaveResult,
)

__all__ = [
    # Records
    "VideoRecord",
    "parse_view_count",
    "ImageBatch",
    "ImageDetails",
    "ImageKey",
    "ImageRecord",
    "InsertSummary",

    # Store
    "LibraryStats",
    "UpsertMode",
    "UpsertResult",

    # Resolution
    "FieldSource",
    "ImageSaveResult",
    "MergeField",
    "ResolutionDecision",
    "ResolutionKind",
    "SaveAction",
    "VideoSaveResult",
]
