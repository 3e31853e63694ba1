from dataclasses import dataclass
from enum import Enum


class UpsertMode(str, Enum):
    INSERT = "insert"
    UPDATE = "update"


@dataclass(frozen=True)
class UpsertResult:
    action: str                 # "inserted" | "updated"
    rows_affected: int


@dataclass(frozen=True)
class LibraryStats:
    total_videos: int = 0
    total_images: int = 0
    total_playlists: int = 0
    db_size: int = 0            # bytes on disk
