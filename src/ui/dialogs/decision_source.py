"""
DecisionSource backed by non-blocking dialogs.

Each dialog is opened with open() and its result delivered through a future
resolved on finished, so the qasync loop keeps running while it is shown.
"""
import asyncio
import logging
from typing import List, Optional, Sequence

from PyQt6.QtWidgets import QDialog, QWidget

from src.core.dto.image import ImageBatch, ImageRecord
from src.core.dto.resolution import ResolutionDecision, ResolutionKind
from src.core.dto.video import VideoRecord
from src.core.dto.image import ImageDetails
from src.core.duplicate_resolver import DecisionSource
from src.ui.dialogs.image_dialogs import ImageDuplicateDialog, ImageSaveDialog
from src.ui.dialogs.video_dialogs import CustomMergeDialog, VideoDuplicateDialog, VideoReviewDialog

logger = logging.getLogger(__name__)

_ACCEPTED = QDialog.DialogCode.Accepted.value


async def run_dialog(dialog: QDialog) -> int:
    """Show a dialog window-modal and wait for its result code.

    The caller reads the dialog state and then calls deleteLater().
    """
    loop = asyncio.get_running_loop()
    future = loop.create_future()

    def _on_finished(code: int):
        if not future.done():
            future.set_result(code)

    dialog.finished.connect(_on_finished)
    dialog.open()
    return await future


class DialogDecisionSource(DecisionSource):

    def __init__(self, parent: Optional[QWidget] = None):
        self._parent = parent

    async def review_video(self, candidate: VideoRecord, playlists: List[str]) -> Optional[VideoRecord]:
        dialog = VideoReviewDialog(candidate, playlists, self._parent)
        accepted = await run_dialog(dialog) == _ACCEPTED
        record = dialog.edited_record() if accepted else None
        dialog.deleteLater()
        return record

    async def decide_video(self, existing: VideoRecord, candidate: VideoRecord) -> ResolutionDecision:
        dialog = VideoDuplicateDialog(existing, candidate, self._parent)
        await run_dialog(dialog)
        choice = dialog.choice
        dialog.deleteLater()
        logger.debug(f"Video duplicate choice: {choice.value}")

        if choice == ResolutionKind.KEEP_EXISTING:
            return ResolutionDecision.keep_existing()
        if choice == ResolutionKind.OVERWRITE_WITH_NEW:
            return ResolutionDecision.overwrite()
        if choice != ResolutionKind.FIELD_MERGE:
            return ResolutionDecision.cancel()

        merge_dialog = CustomMergeDialog(existing, candidate, self._parent)
        accepted = await run_dialog(merge_dialog) == _ACCEPTED
        selection = merge_dialog.selection()
        merge_dialog.deleteLater()
        if not accepted:
            return ResolutionDecision.cancel()
        return ResolutionDecision.field_merge(selection)

    async def request_image_details(self, count: int) -> Optional[ImageDetails]:
        dialog = ImageSaveDialog(count, self._parent)
        accepted = await run_dialog(dialog) == _ACCEPTED
        details = dialog.details() if accepted else None
        dialog.deleteLater()
        return details

    async def decide_images(self, batch: ImageBatch, duplicates: Sequence[ImageRecord]) -> ResolutionDecision:
        dialog = ImageDuplicateDialog(batch, duplicates, self._parent)
        await run_dialog(dialog)
        choice = dialog.choice
        dialog.deleteLater()
        if choice == ResolutionKind.SAVE_NEW_ONLY:
            return ResolutionDecision.save_new_only()
        if choice == ResolutionKind.SAVE_ALL:
            return ResolutionDecision.save_all()
        return ResolutionDecision.cancel()
