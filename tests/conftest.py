from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

import pytest

from src.core.bridge import ContentBridge
from src.core.database import DatabaseManager
from src.core.dto.image import ImageBatch, ImageDetails, ImageRecord
from src.core.dto.resolution import ResolutionDecision
from src.core.dto.video import VideoRecord
from src.core.duplicate_resolver import DecisionSource, DuplicateResolver
from src.core.record_store import RecordStore


class StepClock:
    """now() that advances one second per call."""

    def __init__(self, start: Optional[datetime] = None):
        self.current = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        return self.current


class FakeBridge(ContentBridge):
    """Scripted page surface that records every call in order."""

    def __init__(self):
        self.calls: List[str] = []
        self.selection: List[str] = []
        self.inject_result = True
        self.inject_error: Optional[Exception] = None
        self.clear_error: Optional[Exception] = None
        self.count_error: Optional[Exception] = None
        self.scrape_payload: Optional[Dict[str, Any]] = None
        self.count_gate: Optional[asyncio.Event] = None
        self.injected = 0

    async def inject(self) -> bool:
        self.calls.append("inject")
        if self.inject_error is not None:
            raise self.inject_error
        if self.inject_result:
            self.injected += 1
        return self.inject_result

    async def clear(self) -> None:
        self.calls.append("clear")
        if self.clear_error is not None:
            raise self.clear_error
        self.selection = []

    async def read_selection(self) -> List[str]:
        self.calls.append("read_selection")
        return list(self.selection)

    async def read_selection_count(self) -> int:
        self.calls.append("read_selection_count")
        if self.count_gate is not None:
            await self.count_gate.wait()
        if self.count_error is not None:
            raise self.count_error
        return len(self.selection)

    async def scrape_video(self) -> Optional[Dict[str, Any]]:
        self.calls.append("scrape_video")
        return self.scrape_payload


class ScriptedDecisionSource(DecisionSource):
    """Answers from queued values; records what it was asked."""

    def __init__(self):
        self.video_decisions: List[ResolutionDecision] = []
        self.image_decisions: List[ResolutionDecision] = []
        self.details: List[Optional[ImageDetails]] = []
        self.reviews: List[Optional[VideoRecord]] = []
        self.asked: List[str] = []
        self.seen_duplicates: List[Sequence[ImageRecord]] = []
        self.seen_playlists: List[List[str]] = []

    async def decide_video(self, existing: VideoRecord, candidate: VideoRecord) -> ResolutionDecision:
        self.asked.append("decide_video")
        return self.video_decisions.pop(0)

    async def decide_images(self, batch: ImageBatch, duplicates: Sequence[ImageRecord]) -> ResolutionDecision:
        self.asked.append("decide_images")
        self.seen_duplicates.append(list(duplicates))
        return self.image_decisions.pop(0)

    async def request_image_details(self, count: int) -> Optional[ImageDetails]:
        self.asked.append("request_image_details")
        return self.details.pop(0) if self.details else ImageDetails("beach")

    async def review_video(self, candidate: VideoRecord, playlists: List[str]) -> Optional[VideoRecord]:
        self.asked.append("review_video")
        self.seen_playlists.append(list(playlists))
        if self.reviews:
            return self.reviews.pop(0)
        return candidate


class CountingStore(RecordStore):
    """RecordStore that counts data calls."""

    def __init__(self, db_path=None):
        super().__init__(db_path)
        self.data_calls = 0

    def find_images_by_keys(self, keys):
        self.data_calls += 1
        return super().find_images_by_keys(keys)

    def insert_images_ignoring_duplicates(self, records):
        self.data_calls += 1
        return super().insert_images_ignoring_duplicates(records)


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def store(tmp_path):
    record_store = CountingStore(tmp_path / "library.db")
    assert record_store.connect()
    yield record_store
    record_store.close()


@pytest.fixture
def unconfigured_store():
    return RecordStore()


@pytest.fixture
def resolver(store, clock) -> DuplicateResolver:
    return DuplicateResolver(store, clock=clock)


@pytest.fixture
def decisions() -> ScriptedDecisionSource:
    return ScriptedDecisionSource()


@pytest.fixture
def bridge() -> FakeBridge:
    return FakeBridge()


@pytest.fixture
def config_db(tmp_path):
    db = DatabaseManager(tmp_path / "config" / "data.db")
    db.connect()
    yield db
    db.close()
