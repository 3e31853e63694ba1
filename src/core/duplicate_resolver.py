"""
Duplicate detection and resolution for library saves.

Each save runs a small state machine:

    CHECKING -> NO_COLLISION -> INSERTED
    CHECKING -> COLLISION -> AWAITING_DECISION -> RESOLVED

The decision itself comes from a DecisionSource (the dialogs in the UI, a
scripted source in tests). Awaiting it blocks only that save.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional, Sequence

from src.core.dto.image import ImageBatch, ImageDetails, ImageRecord
from src.core.dto.library import LibraryStats, UpsertMode
from src.core.dto.resolution import (
    IMAGE_KINDS,
    VIDEO_KINDS,
    FieldSource,
    ImageSaveResult,
    MergeField,
    ResolutionDecision,
    ResolutionKind,
    SaveAction,
    VideoSaveResult,
)
from src.core.dto.video import VideoRecord
from src.core.errors import (
    ConstraintViolationError,
    ErrorKind,
    StoreError,
    StoreNotConfiguredError,
)
from src.core.locators import normalize_url
from src.core.record_store import RecordStore

logger = logging.getLogger(__name__)


class ResolutionState(str, Enum):
    CHECKING = "checking"
    NO_COLLISION = "no_collision"
    INSERTED = "inserted"
    COLLISION = "collision"
    AWAITING_DECISION = "awaiting_decision"
    RESOLVED = "resolved"


class DecisionSource(ABC):
    """
    Supplies user decisions to the resolver and the session orchestrator.

    Every method may suspend until the user answers.
    """

    @abstractmethod
    async def decide_video(self, existing: VideoRecord, candidate: VideoRecord) -> ResolutionDecision:
        """KEEP_EXISTING, OVERWRITE_WITH_NEW, FIELD_MERGE or CANCEL."""

    @abstractmethod
    async def decide_images(self, batch: ImageBatch, duplicates: Sequence[ImageRecord]) -> ResolutionDecision:
        """SAVE_NEW_ONLY, SAVE_ALL or CANCEL."""

    @abstractmethod
    async def request_image_details(self, count: int) -> Optional[ImageDetails]:
        """Ask for the tag/comments of a selection; None cancels."""

    @abstractmethod
    async def review_video(self, candidate: VideoRecord, playlists: List[str]) -> Optional[VideoRecord]:
        """Let the user confirm or edit a scraped video; None cancels."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def merge_video(existing: VideoRecord, candidate: VideoRecord, decision: ResolutionDecision) -> VideoRecord:
    """
    Apply a per-field merge selection.

    Mergeable fields take the selected side; everything else, and any field
    left unselected, comes from the candidate. Identity and created_at come
    from the existing record.
    """
    merged = candidate.with_changes(url=existing.url, created_at=existing.created_at)
    changes = {}
    for merge_field in MergeField:
        if decision.source_for(merge_field) == FieldSource.EXISTING:
            changes[merge_field.value] = getattr(existing, merge_field.value)
    return merged.with_changes(**changes) if changes else merged


class DuplicateResolver:
    """
    Duplicate-aware persistence on top of RecordStore.

    Explicit non-responsibilities:
    - UI / dialogs (delegated to DecisionSource)
    - Selection state
    """

    def __init__(self, store: RecordStore, clock: Optional[Callable[[], datetime]] = None):
        self._store = store
        self._clock = clock or _utcnow

    @property
    def store(self) -> RecordStore:
        return self._store

    def _enter(self, state: ResolutionState, key: str) -> None:
        logger.debug(f"[{key}] -> {state.value}")

    # ------------------------------------------------------------------
    # Videos
    # ------------------------------------------------------------------

    async def save_video(self, candidate: VideoRecord, decisions: DecisionSource) -> VideoSaveResult:
        canonical = normalize_url(candidate.url)
        if not canonical:
            logger.warning("Refusing to save video without a url")
            return VideoSaveResult(SaveAction.NOT_SAVED, error=ErrorKind.INVALID_RECORD)
        candidate = candidate.with_changes(url=canonical)

        self._enter(ResolutionState.CHECKING, canonical)
        try:
            existing = self._store.find_video_by_url(canonical)
        except StoreError as e:
            logger.error(f"Video lookup failed for {canonical}: {e}")
            return VideoSaveResult(SaveAction.NOT_SAVED, error=e.kind)

        if existing is None:
            self._enter(ResolutionState.NO_COLLISION, canonical)
            return self._insert_video(candidate)

        self._enter(ResolutionState.COLLISION, canonical)
        self._enter(ResolutionState.AWAITING_DECISION, canonical)
        decision = await decisions.decide_video(existing, candidate)
        self._enter(ResolutionState.RESOLVED, canonical)
        return self.apply_video_decision(existing, candidate, decision)

    def apply_video_decision(
        self,
        existing: VideoRecord,
        candidate: VideoRecord,
        decision: ResolutionDecision,
    ) -> VideoSaveResult:
        if decision.kind not in VIDEO_KINDS:
            raise ValueError(f"{decision.kind.value} is not a video resolution")

        if decision.kind == ResolutionKind.KEEP_EXISTING:
            logger.info(f"Kept existing video: {existing.url}")
            return VideoSaveResult(SaveAction.KEPT_EXISTING, record=existing)
        if decision.kind == ResolutionKind.CANCEL:
            logger.info(f"Video save cancelled: {existing.url}")
            return VideoSaveResult(SaveAction.CANCELLED, record=existing)

        if decision.kind == ResolutionKind.FIELD_MERGE:
            record = merge_video(existing, candidate, decision)
        else:
            record = candidate.with_changes(url=existing.url, created_at=existing.created_at)
        return self._update_video(record.with_changes(updated_at=self._clock()))

    def _insert_video(self, candidate: VideoRecord) -> VideoSaveResult:
        now = self._clock()
        record = candidate.with_changes(created_at=now, updated_at=now)
        try:
            self._store.upsert_video(record, UpsertMode.INSERT)
        except ConstraintViolationError:
            # Row appeared between lookup and insert; keep its created_at if we can see it.
            logger.warning(f"Insert collided for {record.url}, retrying as update")
            try:
                current = self._store.find_video_by_url(record.url)
            except StoreError:
                current = None
            if current is not None:
                record = record.with_changes(created_at=current.created_at)
            return self._update_video(record)
        except StoreError as e:
            logger.error(f"Video insert failed for {record.url}: {e}")
            return VideoSaveResult(SaveAction.NOT_SAVED, error=e.kind)
        self._enter(ResolutionState.INSERTED, record.url)
        logger.info(f"Video saved: {record.url}")
        return VideoSaveResult(SaveAction.INSERTED, record=record)

    def _update_video(self, record: VideoRecord) -> VideoSaveResult:
        try:
            self._store.upsert_video(record, UpsertMode.UPDATE)
        except StoreError as e:
            logger.error(f"Video update failed for {record.url}: {e}")
            return VideoSaveResult(SaveAction.NOT_SAVED, error=e.kind)
        logger.info(f"Video updated: {record.url}")
        return VideoSaveResult(SaveAction.UPDATED, record=record)

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_batch(batch: ImageBatch) -> None:
        if not (batch.tag or "").strip():
            raise ValueError("Image tag is required")
        if not batch.source_url:
            raise ValueError("Image source url is required")

    async def save_images(self, batch: ImageBatch, decisions: DecisionSource) -> ImageSaveResult:
        self._validate_batch(batch)
        keys = batch.keys()
        if not keys:
            return ImageSaveResult()

        self._enter(ResolutionState.CHECKING, batch.source_url)
        try:
            duplicates = self._store.find_images_by_keys(keys)
        except StoreError as e:
            logger.error(f"Image duplicate check failed: {e}")
            return ImageSaveResult(error=e.kind)

        if not duplicates:
            self._enter(ResolutionState.NO_COLLISION, batch.source_url)
            return self.save_image_batch(batch, ResolutionKind.SAVE_ALL)

        self._enter(ResolutionState.COLLISION, batch.source_url)
        self._enter(ResolutionState.AWAITING_DECISION, batch.source_url)
        decision = await decisions.decide_images(batch, duplicates)
        self._enter(ResolutionState.RESOLVED, batch.source_url)

        if decision.kind not in IMAGE_KINDS:
            raise ValueError(f"{decision.kind.value} is not an image resolution")
        if decision.kind == ResolutionKind.CANCEL:
            logger.info(f"Image save cancelled ({len(duplicates)} duplicates)")
            return ImageSaveResult(duplicates=tuple(duplicates), cancelled=True)
        return self.save_image_batch(batch, decision.kind, duplicates=duplicates)

    def save_image_batch(
        self,
        batch: ImageBatch,
        protocol: ResolutionKind,
        duplicates: Optional[Sequence[ImageRecord]] = None,
    ) -> ImageSaveResult:
        """
        Write a batch with a known protocol.

        SAVE_NEW_ONLY writes only members whose key is absent; SAVE_ALL
        offers every member to the store's insert-or-ignore. Existing rows
        are never updated either way.
        """
        if protocol not in (ResolutionKind.SAVE_NEW_ONLY, ResolutionKind.SAVE_ALL):
            raise ValueError(f"{protocol.value} is not a batch save protocol")
        self._validate_batch(batch)

        records = batch.records(self._clock())
        if not records:
            return ImageSaveResult(protocol=protocol)

        try:
            if duplicates is None:
                duplicates = self._store.find_images_by_keys(r.key for r in records)
            pre_skipped = 0
            if protocol == ResolutionKind.SAVE_NEW_ONLY:
                existing_keys = {d.key for d in duplicates}
                fresh = [r for r in records if r.key not in existing_keys]
                pre_skipped = len(records) - len(fresh)
                records = fresh
            summary = self._store.insert_images_ignoring_duplicates(records)
        except StoreError as e:
            logger.error(f"Image save failed: {e}")
            return ImageSaveResult(protocol=protocol, error=e.kind)

        self._enter(ResolutionState.INSERTED, batch.source_url)
        return ImageSaveResult(
            saved=summary.saved,
            skipped=summary.skipped + pre_skipped,
            duplicates=tuple(duplicates),
            protocol=protocol,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_playlists(self) -> List[str]:
        try:
            return self._store.list_playlists()
        except StoreNotConfiguredError:
            logger.debug("Library not configured, no playlists")
            return []
        except StoreError as e:
            logger.error(f"Error getting playlists: {e}")
            return []

    def get_stats(self) -> LibraryStats:
        try:
            return self._store.get_stats()
        except StoreError as e:
            logger.debug(f"Library stats unavailable: {e}")
            return LibraryStats()
