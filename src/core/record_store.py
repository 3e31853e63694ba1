"""
Library storage for saved videos and image sets.

The library lives in a user-chosen SQLite file. Until a path is configured
every data operation raises StoreNotConfiguredError so callers can surface
the "set up your library first" state instead of failing.
"""
import json
import logging
import sqlite3
from datetime import datetime
from itertools import groupby
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from src.core.dto.image import ImageKey, ImageRecord, InsertSummary
from src.core.dto.library import LibraryStats, UpsertMode, UpsertResult
from src.core.dto.video import VideoRecord
from src.core.errors import (
    ConstraintViolationError,
    StoreIOError,
    StoreNotConfiguredError,
)

logger = logging.getLogger(__name__)

# Stay well below SQLITE_MAX_VARIABLE_NUMBER on older builds
_MAX_IN_PARAMS = 500


def _to_db_time(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _from_db_time(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        logger.debug(f"Unparseable timestamp in library: {value!r}")
        return None


class RecordStore:
    """Keyed storage for VideoRecord and ImageRecord rows"""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path: Optional[Path] = Path(db_path) if db_path else None
        self.conn: Optional[sqlite3.Connection] = None

    @property
    def is_configured(self) -> bool:
        return self.conn is not None

    def connect(self) -> bool:
        """
        Open the library file and create tables if needed.

        Returns False (and stays unconfigured) when no path is set or the
        file cannot be opened.
        """
        if self.db_path is None:
            logger.info("Library path not configured")
            return False
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self.conn = sqlite3.connect(
                self.db_path,
                check_same_thread=False,
                timeout=30.0
            )
            self.conn.row_factory = sqlite3.Row
            self._initialize_schema()
        except (OSError, sqlite3.Error) as e:
            logger.error(f"Could not open library at {self.db_path}: {e}")
            if self.conn is not None:
                self.conn.close()
            self.conn = None
            return False
        logger.info(f"Library opened: {self.db_path}")
        return True

    def _initialize_schema(self):
        cursor = self.conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS videos (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                url TEXT NOT NULL UNIQUE,
                title TEXT,
                views INTEGER,
                thumbnail_url TEXT,
                brand TEXT,
                playlist TEXT,
                release_date TEXT,
                plot TEXT,
                tags_json TEXT,
                created_at TIMESTAMP,
                updated_at TIMESTAMP
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS images (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                url TEXT NOT NULL,
                source_url TEXT NOT NULL,
                tag TEXT NOT NULL,
                comments TEXT,
                saved_at TIMESTAMP,
                created_at TIMESTAMP,
                UNIQUE(url, source_url, tag)
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_videos_playlist
            ON videos(playlist)
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_images_source_tag
            ON images(source_url, tag)
        """)

        self.conn.commit()

    def _require_conn(self) -> sqlite3.Connection:
        if self.conn is None:
            raise StoreNotConfiguredError("Library database is not configured")
        return self.conn

    # ------------------------------------------------------------------
    # Videos
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_video(row: sqlite3.Row) -> VideoRecord:
        tags: List[str] = []
        if row["tags_json"]:
            try:
                tags = json.loads(row["tags_json"])
            except (TypeError, ValueError):
                tags = []
        return VideoRecord(
            url=row["url"],
            title=row["title"],
            views=row["views"],
            thumbnail_url=row["thumbnail_url"],
            brand=row["brand"],
            playlist=row["playlist"],
            release_date=row["release_date"],
            plot=row["plot"],
            tags=tuple(tags),
            created_at=_from_db_time(row["created_at"]),
            updated_at=_from_db_time(row["updated_at"]),
        )

    def find_video_by_url(self, url: str) -> Optional[VideoRecord]:
        """Look up a video by its canonical url"""
        conn = self._require_conn()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM videos WHERE url = ?", (url,))
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise StoreIOError(f"Video lookup failed: {e}") from e
        return self._row_to_video(row) if row else None

    def upsert_video(self, record: VideoRecord, mode: UpsertMode) -> UpsertResult:
        """
        Write a video row.

        INSERT raises ConstraintViolationError when the url already exists.
        UPDATE rewrites every mutable field and updated_at, keeping created_at.
        """
        conn = self._require_conn()
        tags_json = json.dumps(list(record.tags)) if record.tags else None
        cursor = conn.cursor()

        if mode == UpsertMode.INSERT:
            try:
                cursor.execute("""
                    INSERT INTO videos
                    (url, title, views, thumbnail_url, brand, playlist, release_date,
                     plot, tags_json, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    record.url,
                    record.title,
                    record.views,
                    record.thumbnail_url,
                    record.brand,
                    record.playlist,
                    record.release_date,
                    record.plot,
                    tags_json,
                    _to_db_time(record.created_at),
                    _to_db_time(record.updated_at),
                ))
                conn.commit()
            except sqlite3.IntegrityError as e:
                conn.rollback()
                raise ConstraintViolationError(f"Video already exists: {record.url}") from e
            except sqlite3.Error as e:
                conn.rollback()
                raise StoreIOError(f"Video insert failed: {e}") from e
            logger.debug(f"Video inserted: {record.url}")
            return UpsertResult(action="inserted", rows_affected=cursor.rowcount)

        try:
            cursor.execute("""
                UPDATE videos
                SET title = ?, views = ?, thumbnail_url = ?, brand = ?, playlist = ?,
                    release_date = ?, plot = ?, tags_json = ?, updated_at = ?
                WHERE url = ?
            """, (
                record.title,
                record.views,
                record.thumbnail_url,
                record.brand,
                record.playlist,
                record.release_date,
                record.plot,
                tags_json,
                _to_db_time(record.updated_at),
                record.url,
            ))
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreIOError(f"Video update failed: {e}") from e
        logger.debug(f"Video updated: {record.url} ({cursor.rowcount} rows)")
        return UpsertResult(action="updated", rows_affected=cursor.rowcount)

    def list_playlists(self) -> List[str]:
        """Distinct non-empty playlist labels, sorted case-insensitively"""
        conn = self._require_conn()
        try:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT DISTINCT playlist FROM videos
                WHERE playlist IS NOT NULL AND TRIM(playlist) != ''
                ORDER BY playlist COLLATE NOCASE
            """)
            return [row["playlist"] for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise StoreIOError(f"Playlist query failed: {e}") from e

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_image(row: sqlite3.Row) -> ImageRecord:
        return ImageRecord(
            url=row["url"],
            source_url=row["source_url"],
            tag=row["tag"],
            comments=row["comments"],
            saved_at=_from_db_time(row["saved_at"]),
            created_at=_from_db_time(row["created_at"]),
        )

    def find_images_by_keys(self, keys: Iterable[ImageKey]) -> List[ImageRecord]:
        """Return the stored images matching any of the (url, source_url, tag) keys"""
        conn = self._require_conn()

        def group_key(k: ImageKey):
            return (k.source_url, k.tag)

        ordered = sorted(set(keys), key=group_key)
        found: List[ImageRecord] = []
        cursor = conn.cursor()
        try:
            for (source_url, tag), members in groupby(ordered, key=group_key):
                urls = [k.url for k in members]
                for start in range(0, len(urls), _MAX_IN_PARAMS):
                    chunk = urls[start:start + _MAX_IN_PARAMS]
                    placeholders = ", ".join("?" for _ in chunk)
                    cursor.execute(f"""
                        SELECT * FROM images
                        WHERE source_url = ? AND tag = ? AND url IN ({placeholders})
                    """, [source_url, tag, *chunk])
                    found.extend(self._row_to_image(row) for row in cursor.fetchall())
        except sqlite3.Error as e:
            raise StoreIOError(f"Image lookup failed: {e}") from e
        return found

    def insert_images_ignoring_duplicates(self, records: Sequence[ImageRecord]) -> InsertSummary:
        """
        Insert image rows one by one, ignoring rows whose key already exists.

        A row that fails for any other reason is counted as skipped and the
        rest of the batch continues.
        """
        conn = self._require_conn()
        saved = 0
        skipped = 0
        failed: List[str] = []
        cursor = conn.cursor()

        for record in records:
            try:
                cursor.execute("""
                    INSERT OR IGNORE INTO images
                    (url, source_url, tag, comments, saved_at, created_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                """, (
                    record.url,
                    record.source_url,
                    record.tag,
                    record.comments,
                    _to_db_time(record.saved_at),
                    _to_db_time(record.created_at),
                ))
            except sqlite3.Error as e:
                logger.warning(f"Skipping image {record.url!r}: {e}")
                skipped += 1
                failed.append(str(record.url))
                continue
            if cursor.rowcount == 1:
                saved += 1
            else:
                skipped += 1

        try:
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreIOError(f"Image batch commit failed: {e}") from e

        logger.info(f"Images saved: {saved}, skipped: {skipped}")
        return InsertSummary(saved=saved, skipped=skipped, failed_urls=tuple(failed))

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def get_stats(self) -> LibraryStats:
        conn = self._require_conn()
        try:
            cursor = conn.cursor()
            counts: Dict[str, Any] = {}
            for name, query in (
                ("videos", "SELECT COUNT(*) AS n FROM videos"),
                ("images", "SELECT COUNT(*) AS n FROM images"),
                ("playlists", """
                    SELECT COUNT(DISTINCT playlist) AS n FROM videos
                    WHERE playlist IS NOT NULL AND TRIM(playlist) != ''
                """),
            ):
                cursor.execute(query)
                counts[name] = int(cursor.fetchone()["n"] or 0)
        except sqlite3.Error as e:
            raise StoreIOError(f"Stats query failed: {e}") from e

        try:
            db_size = self.db_path.stat().st_size if self.db_path else 0
        except OSError:
            db_size = 0

        return LibraryStats(
            total_videos=counts["videos"],
            total_images=counts["images"],
            total_playlists=counts["playlists"],
            db_size=db_size,
        )

    def close(self):
        """Close database connection"""
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.debug("Library connection closed")
