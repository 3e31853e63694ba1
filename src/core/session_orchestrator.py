"""
Drives marking sessions and video saves for one web view.

The orchestrator sits between the page (ContentBridge), the user
(DecisionSource) and the library (DuplicateResolver). It owns the only
SelectionSession and reports progress through plain callbacks so the core
stays free of Qt.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from src.core.bridge import ContentBridge
from src.core.dto.image import ImageBatch
from src.core.dto.resolution import ImageSaveResult, ResolutionKind, SaveAction, VideoSaveResult
from src.core.dto.video import VideoRecord
from src.core.duplicate_resolver import DecisionSource, DuplicateResolver
from src.core.errors import ErrorKind
from src.core.locators import PageKind, classify_page, is_same_page, normalize_url
from src.core.selection_session import SelectionSession, SessionMode, SessionSnapshot

logger = logging.getLogger(__name__)


class StatusLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class StatusMessage:
    level: StatusLevel
    text: str


SETTINGS_HINT = "Choose a library file first (File > Choose library...)"


class SessionOrchestrator:

    def __init__(
        self,
        bridge: ContentBridge,
        resolver: DuplicateResolver,
        decisions: DecisionSource,
        *,
        poll_interval: float = 0.5,
        on_status: Optional[Callable[[StatusMessage], None]] = None,
        on_counter: Optional[Callable[[Optional[int]], None]] = None,
        on_mode_changed: Optional[Callable[[SessionMode], None]] = None,
    ):
        self.bridge = bridge
        self.resolver = resolver
        self.decisions = decisions
        self.poll_interval = poll_interval

        self._on_status = on_status
        self._on_counter = on_counter
        self._on_mode_changed = on_mode_changed

        self.session = SelectionSession()
        self._gesture_lock = asyncio.Lock()
        self._poll_task: Optional[asyncio.Task] = None
        self._last_mode = self.session.mode

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    @property
    def mode(self) -> SessionMode:
        return self.session.mode

    def snapshot(self) -> SessionSnapshot:
        return self.session.snapshot()

    def _status(self, level: StatusLevel, text: str):
        logger.info(f"Status [{level.value}]: {text}")
        if self._on_status:
            self._on_status(StatusMessage(level, text))

    def _counter(self, count: Optional[int]):
        if self._on_counter:
            self._on_counter(count)

    def _sync_mode(self):
        mode = self.session.mode
        if mode == self._last_mode:
            return
        self._last_mode = mode
        if self._on_mode_changed:
            self._on_mode_changed(mode)
        if mode == SessionMode.IDLE:
            self._counter(None)

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------

    async def handle_primary_gesture(self, page_url: str):
        """Floating button / Ctrl+S."""
        if self._gesture_lock.locked():
            if self.session.mode == SessionMode.RESOLVING:
                self._status(StatusLevel.WARNING, "Still saving, please wait")
            else:
                self._status(StatusLevel.WARNING, "Finish the open dialog first")
            return

        async with self._gesture_lock:
            if self.session.mode == SessionMode.ACTIVE:
                await self.commit()
                return
            if self.session.mode == SessionMode.RESOLVING:
                self._status(StatusLevel.WARNING, "Still saving, please wait")
                return

            kind = classify_page(page_url)
            if kind == PageKind.VIDEO:
                await self.save_current_video(page_url)
            elif kind == PageKind.IMAGES:
                await self.begin_mark(page_url)
            else:
                self._status(StatusLevel.WARNING, "Please navigate to a media page!")

    async def begin_mark(self, page_url: str) -> bool:
        if not self.session.begin(normalize_url(page_url)):
            return False
        self._sync_mode()
        generation = self.session.generation

        try:
            injected = await self.bridge.inject()
        except Exception as e:
            logger.error(f"Selection inject failed: {e}")
            injected = False

        if generation != self.session.generation:
            # Abandoned while injecting
            return False
        if not injected:
            self.session.end()
            self._sync_mode()
            self._status(StatusLevel.ERROR, "Failed to setup image selection")
            return False

        self._counter(0)
        self._start_poll(generation)
        self._status(StatusLevel.INFO, "Select images and click the button again")
        return True

    async def commit(self) -> Optional[ImageSaveResult]:
        if not self.session.start_resolving():
            logger.debug(f"Commit ignored, session is {self.session.mode.value}")
            return None
        self._sync_mode()
        generation = self.session.generation
        source_url = self.session.source_url

        try:
            urls = await self.bridge.read_selection()
        except Exception as e:
            logger.error(f"Reading selection failed: {e}")
            urls = []

        if generation != self.session.generation:
            return None
        if not urls:
            self.session.resume()
            self._sync_mode()
            self._status(StatusLevel.WARNING, "No images selected. Click images to select them first")
            return None

        self.session.record_selection(urls)
        self._counter(self.session.last_synced_count)

        try:
            details = await self.decisions.request_image_details(len(urls))
            if details is None or not details.tag:
                if generation == self.session.generation:
                    self.session.resume()
                    self._sync_mode()
                    self._status(StatusLevel.INFO, "Save cancelled, selection kept")
                return None

            batch = ImageBatch(
                urls=tuple(urls),
                source_url=source_url,
                tag=details.tag,
                comments=details.comments,
            )
            result = await self.resolver.save_images(batch, self.decisions)
        except Exception as e:
            logger.exception(f"Saving selected images failed: {e}")
            if generation == self.session.generation:
                self.session.resume()
                self._sync_mode()
            self._status(StatusLevel.ERROR, "Error saving images, selection kept")
            return None

        if result.cancelled or result.error == ErrorKind.NOT_CONFIGURED:
            if generation == self.session.generation:
                self.session.resume()
                self._sync_mode()
            if result.cancelled:
                self._status(StatusLevel.INFO, "Save cancelled, selection kept")
            else:
                self._status(StatusLevel.ERROR, f"Library not available. {SETTINGS_HINT}")
            return result

        if generation == self.session.generation:
            self.session.end()
            self._stop_poll()
            self._sync_mode()
            await self._clear_surface()

        self._report_images(result)
        return result

    async def abandon(self, reason: str):
        if self.session.mode == SessionMode.IDLE:
            return
        logger.info(f"Abandoning selection session: {reason}")
        self.session.end()
        self._stop_poll()
        self._sync_mode()
        await self._clear_surface()

    async def on_navigated(self, url: str):
        if self.session.mode == SessionMode.IDLE:
            return
        if not is_same_page(url, self.session.source_url):
            await self.abandon("navigation")

    async def save_current_video(self, page_url: str) -> Optional[VideoSaveResult]:
        try:
            payload = await self.bridge.scrape_video()
        except Exception as e:
            logger.error(f"Video scrape failed: {e}")
            payload = None
        if not payload:
            self._status(StatusLevel.ERROR, "Error extracting content")
            return None

        payload = dict(payload)
        payload.setdefault("url", page_url)
        candidate, missing = VideoRecord.from_scrape(payload)
        if missing:
            logger.debug(f"Scrape missing fields: {', '.join(missing)}")

        try:
            reviewed = await self.decisions.review_video(candidate, self.resolver.list_playlists())
            if reviewed is None:
                self._status(StatusLevel.INFO, "Save cancelled")
                return None
            result = await self.resolver.save_video(reviewed, self.decisions)
        except Exception as e:
            logger.exception(f"Saving video failed: {e}")
            self._status(StatusLevel.ERROR, "Error saving video")
            return None

        self._report_video(result)
        return result

    async def shutdown(self):
        await self.abandon("shutdown")
        self._stop_poll()

    # ------------------------------------------------------------------
    # Display poll
    # ------------------------------------------------------------------

    def _start_poll(self, generation: int):
        self._stop_poll()
        self._poll_task = asyncio.ensure_future(self._poll_loop(generation))

    def _stop_poll(self):
        if self._poll_task is not None:
            self._poll_task.cancel()
            self._poll_task = None

    async def _poll_loop(self, generation: int):
        while generation == self.session.generation and self.session.mode != SessionMode.IDLE:
            await asyncio.sleep(self.poll_interval)
            await self._poll_once(generation)

    async def _poll_once(self, generation: int) -> bool:
        try:
            count = await self.bridge.read_selection_count()
        except Exception as e:
            logger.debug(f"Selection count poll failed: {e}")
            return False
        if not self.session.apply_polled_count(generation, count):
            return False
        self._counter(self.session.last_synced_count)
        return True

    async def _clear_surface(self):
        try:
            await self.bridge.clear()
        except Exception as e:
            logger.warning(f"Clearing page selection failed: {e}")

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def _report_images(self, result: ImageSaveResult):
        if result.error is not None:
            self._status(StatusLevel.ERROR, f"Error saving images ({result.error.value})")
            return
        if result.protocol == ResolutionKind.SAVE_NEW_ONLY:
            text = f"Saved {result.saved} new images, skipped {result.skipped} duplicates"
        elif result.skipped:
            text = f"Saved {result.saved} images, {result.skipped} already saved"
        else:
            text = f"Saved {result.saved} images"
        self._status(StatusLevel.SUCCESS, text)

    def _report_video(self, result: VideoSaveResult):
        if result.error == ErrorKind.NOT_CONFIGURED:
            self._status(StatusLevel.ERROR, f"Library not available. {SETTINGS_HINT}")
            return
        if result.error is not None:
            self._status(StatusLevel.ERROR, f"Error saving video ({result.error.value})")
            return
        messages = {
            SaveAction.INSERTED: (StatusLevel.SUCCESS, "Video saved successfully"),
            SaveAction.UPDATED: (StatusLevel.SUCCESS, "Video updated successfully"),
            SaveAction.KEPT_EXISTING: (StatusLevel.INFO, "Kept existing video"),
            SaveAction.CANCELLED: (StatusLevel.INFO, "Save cancelled"),
        }
        level, text = messages.get(result.action, (StatusLevel.ERROR, "Video not saved"))
        self._status(level, text)
