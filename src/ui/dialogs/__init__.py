from src.ui.dialogs.decision_source import DialogDecisionSource, run_dialog
from src.ui.dialogs.image_dialogs import ImageDuplicateDialog, ImageSaveDialog
from src.ui.dialogs.library_dialogs import LibraryStatsDialog, choose_library_path
from src.ui.dialogs.video_dialogs import CustomMergeDialog, VideoDuplicateDialog, VideoReviewDialog

__all__ = [
    "DialogDecisionSource",
    "run_dialog",
    "ImageDuplicateDialog",
    "ImageSaveDialog",
    "LibraryStatsDialog",
    "choose_library_path",
    "CustomMergeDialog",
    "VideoDuplicateDialog",
    "VideoReviewDialog",
]
