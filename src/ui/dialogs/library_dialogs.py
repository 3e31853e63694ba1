"""
Library location chooser and statistics dialog.
"""
import logging
from pathlib import Path
from typing import Optional

from PyQt6.QtWidgets import (
    QDialog, QFileDialog, QFormLayout, QHBoxLayout, QLabel, QPushButton,
    QVBoxLayout, QWidget,
)

from src.core.dto.library import LibraryStats
from src.utils.file_utils import format_size, normalize_library_path
from src.ui.common.theme import Spacing, Styles

logger = logging.getLogger(__name__)


def choose_library_path(parent: QWidget, current: Optional[Path]) -> Optional[Path]:
    """Ask for a library file; an existing file is reused, a new one is created."""
    start_dir = str(current.parent) if current else str(Path.home())
    path_str, _ = QFileDialog.getSaveFileName(
        parent,
        "Choose library file",
        str(current) if current else str(Path(start_dir) / "media_library.db"),
        "SQLite library (*.db);;All files (*)",
        options=QFileDialog.Option.DontConfirmOverwrite,
    )
    if not path_str:
        return None
    try:
        return normalize_library_path(path_str)
    except ValueError as e:
        logger.warning(f"Invalid library path {path_str!r}: {e}")
        return None


class LibraryStatsDialog(QDialog):

    def __init__(self, stats: LibraryStats, library_path: Optional[Path], parent=None):
        super().__init__(parent)
        self.setWindowTitle("Library statistics")
        self.setMinimumWidth(Spacing.DIALOG_MIN_WIDTH)
        self.setStyleSheet(Styles.dialog())

        layout = QVBoxLayout(self)
        layout.setSpacing(Spacing.MD)

        if library_path is None:
            note = QLabel("No library configured yet. Use File > Choose library...")
            note.setStyleSheet(Styles.warning_label())
            layout.addWidget(note)

        form = QFormLayout()
        form.addRow("Location", QLabel(str(library_path) if library_path else "-"))
        form.addRow("Videos", QLabel(f"{stats.total_videos:,}"))
        form.addRow("Images", QLabel(f"{stats.total_images:,}"))
        form.addRow("Playlists", QLabel(f"{stats.total_playlists:,}"))
        form.addRow("Size on disk", QLabel(format_size(stats.db_size)))
        layout.addLayout(form)

        buttons = QHBoxLayout()
        buttons.addStretch()
        close_btn = QPushButton("Close")
        close_btn.setStyleSheet(Styles.button_secondary())
        close_btn.clicked.connect(self.accept)
        buttons.addWidget(close_btn)
        layout.addLayout(buttons)
