"""
Dialogs for the video save flow: review, duplicate prompt and custom merge.
"""
import logging
from typing import Dict, List

from PyQt6.QtCore import QRegularExpression, Qt
from PyQt6.QtGui import QRegularExpressionValidator
from PyQt6.QtWidgets import (
    QButtonGroup, QComboBox, QDialog, QFormLayout, QGridLayout, QGroupBox,
    QHBoxLayout, QLabel, QLineEdit, QPushButton, QRadioButton,
    QTextEdit, QVBoxLayout,
)

from src.core.dto.resolution import FieldSource, MergeField, ResolutionKind
from src.core.dto.video import VideoRecord, parse_view_count
from src.ui.common.theme import Colors, Fonts, Spacing, Styles

logger = logging.getLogger(__name__)

# Digits with optional thousands separators; empty means unknown
_VIEWS_PATTERN = QRegularExpression(r"^[0-9][0-9,]*$|^$")


def _display(value) -> str:
    if value is None or value == "":
        return "-"
    if isinstance(value, int):
        return f"{value:,}"
    if isinstance(value, tuple):
        return ", ".join(value) or "-"
    return str(value)


class VideoReviewDialog(QDialog):
    """
    Confirm the scraped fields before saving.

    The playlist combo is editable and offers the labels already used in the
    library. An empty views field means the count is unknown.
    """

    def __init__(self, candidate: VideoRecord, playlists: List[str], parent=None):
        super().__init__(parent)
        self.setWindowTitle("Save video")
        self.setMinimumWidth(Spacing.DIALOG_MIN_WIDTH)
        self.setStyleSheet(Styles.dialog())
        self._candidate = candidate

        layout = QVBoxLayout(self)
        layout.setSpacing(Spacing.MD)

        url_label = QLabel(candidate.url or "-")
        url_label.setStyleSheet(Styles.description_label())
        url_label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        layout.addWidget(url_label)

        form = QFormLayout()
        self.title_edit = QLineEdit(candidate.title or "")
        form.addRow("Title", self.title_edit)

        self.views_edit = QLineEdit("" if candidate.views is None else f"{candidate.views:,}")
        self.views_edit.setValidator(QRegularExpressionValidator(_VIEWS_PATTERN, self.views_edit))
        self.views_edit.setPlaceholderText("Unknown")
        form.addRow("Views", self.views_edit)

        self.brand_edit = QLineEdit(candidate.brand or "")
        form.addRow("Brand", self.brand_edit)

        self.release_edit = QLineEdit(candidate.release_date or "")
        form.addRow("Release date", self.release_edit)

        self.playlist_combo = QComboBox()
        self.playlist_combo.setEditable(True)
        self.playlist_combo.addItem("")
        self.playlist_combo.addItems(playlists)
        self.playlist_combo.setCurrentText(candidate.playlist or "")
        form.addRow("Playlist", self.playlist_combo)

        self.tags_edit = QLineEdit(", ".join(candidate.tags))
        form.addRow("Tags", self.tags_edit)

        self.plot_edit = QTextEdit(candidate.plot or "")
        self.plot_edit.setMinimumHeight(Spacing.MULTILINE_MIN_HEIGHT)
        self.plot_edit.setMaximumHeight(Spacing.MULTILINE_MAX_HEIGHT)
        form.addRow("Plot", self.plot_edit)
        layout.addLayout(form)

        buttons = QHBoxLayout()
        buttons.addStretch()
        cancel_btn = QPushButton("Cancel")
        cancel_btn.setStyleSheet(Styles.button_secondary())
        cancel_btn.clicked.connect(self.reject)
        buttons.addWidget(cancel_btn)
        save_btn = QPushButton("Save")
        save_btn.setStyleSheet(Styles.button_primary())
        save_btn.setDefault(True)
        save_btn.clicked.connect(self.accept)
        buttons.addWidget(save_btn)
        layout.addLayout(buttons)

    def edited_record(self) -> VideoRecord:
        views = parse_view_count(self.views_edit.text())
        tags = tuple(t.strip() for t in self.tags_edit.text().split(",") if t.strip())
        return self._candidate.with_changes(
            title=self.title_edit.text().strip() or None,
            views=views,
            brand=self.brand_edit.text().strip() or None,
            release_date=self.release_edit.text().strip() or None,
            playlist=self.playlist_combo.currentText().strip() or None,
            tags=tags,
            plot=self.plot_edit.toPlainText().strip() or None,
        )


class VideoDuplicateDialog(QDialog):
    """Side-by-side view of the stored and the new record."""

    ROWS = (
        ("Title", "title"),
        ("Views", "views"),
        ("Brand", "brand"),
        ("Release date", "release_date"),
        ("Playlist", "playlist"),
        ("Tags", "tags"),
        ("Plot", "plot"),
    )

    def __init__(self, existing: VideoRecord, candidate: VideoRecord, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Video already saved")
        self.setMinimumWidth(Spacing.DIALOG_WIDE_WIDTH)
        self.setStyleSheet(Styles.dialog())
        self.choice = ResolutionKind.CANCEL

        layout = QVBoxLayout(self)
        layout.setSpacing(Spacing.MD)

        warning = QLabel("This video is already in your library.")
        warning.setStyleSheet(Styles.warning_label())
        layout.addWidget(warning)

        grid = QGridLayout()
        grid.setHorizontalSpacing(Spacing.LG)
        for col, heading in enumerate(("", "Existing", "New"), start=0):
            header = QLabel(heading)
            header.setStyleSheet(Styles.label(Colors.TEXT_SECONDARY, Fonts.SIZE_SM, Fonts.WEIGHT_SEMIBOLD))
            grid.addWidget(header, 0, col)

        for row, (caption, attr) in enumerate(self.ROWS, start=1):
            old_value = getattr(existing, attr)
            new_value = getattr(candidate, attr)
            bg = Colors.DIFF_HIGHLIGHT if old_value != new_value else None
            grid.addWidget(QLabel(caption), row, 0)
            for col, value in ((1, old_value), (2, new_value)):
                cell = QLabel(_display(value))
                cell.setWordWrap(True)
                cell.setStyleSheet(Styles.label(bg=bg))
                grid.addWidget(cell, row, col, Qt.AlignmentFlag.AlignTop)
        grid.setColumnStretch(1, 1)
        grid.setColumnStretch(2, 1)
        layout.addLayout(grid)

        buttons = QHBoxLayout()
        for text, kind, primary in (
            ("Cancel", ResolutionKind.CANCEL, False),
            ("Keep existing", ResolutionKind.KEEP_EXISTING, False),
            ("Custom merge", ResolutionKind.FIELD_MERGE, False),
            ("Update with new", ResolutionKind.OVERWRITE_WITH_NEW, True),
        ):
            btn = QPushButton(text)
            btn.setStyleSheet(Styles.button_primary() if primary else Styles.button_secondary())
            btn.clicked.connect(lambda _checked=False, k=kind: self._choose(k))
            buttons.addWidget(btn)
        buttons.insertStretch(1)
        layout.addLayout(buttons)

    def _choose(self, kind: ResolutionKind):
        self.choice = kind
        if kind == ResolutionKind.CANCEL:
            self.reject()
        else:
            self.accept()


class CustomMergeDialog(QDialog):
    """Pick existing or new per mergeable field. New is preselected."""

    def __init__(self, existing: VideoRecord, candidate: VideoRecord, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Custom merge")
        self.setMinimumWidth(Spacing.DIALOG_WIDE_WIDTH)
        self.setStyleSheet(Styles.dialog())
        self._groups: Dict[MergeField, QButtonGroup] = {}

        layout = QVBoxLayout(self)
        layout.setSpacing(Spacing.MD)

        hint = QLabel("Choose which value to keep for each field.")
        hint.setStyleSheet(Styles.description_label())
        layout.addWidget(hint)

        for merge_field in MergeField:
            box = QGroupBox(merge_field.value.capitalize())
            row = QHBoxLayout(box)
            group = QButtonGroup(self)

            old_radio = QRadioButton(f"Existing: {_display(getattr(existing, merge_field.value))}")
            new_radio = QRadioButton(f"New: {_display(getattr(candidate, merge_field.value))}")
            new_radio.setChecked(True)
            group.addButton(old_radio, 0)
            group.addButton(new_radio, 1)
            row.addWidget(old_radio, 1)
            row.addWidget(new_radio, 1)

            self._groups[merge_field] = group
            layout.addWidget(box)

        buttons = QHBoxLayout()
        buttons.addStretch()
        cancel_btn = QPushButton("Cancel")
        cancel_btn.setStyleSheet(Styles.button_secondary())
        cancel_btn.clicked.connect(self.reject)
        buttons.addWidget(cancel_btn)
        save_btn = QPushButton("Save merged")
        save_btn.setStyleSheet(Styles.button_primary())
        save_btn.clicked.connect(self.accept)
        buttons.addWidget(save_btn)
        layout.addLayout(buttons)

    def selection(self) -> Dict[MergeField, FieldSource]:
        return {
            merge_field: FieldSource.EXISTING if group.checkedId() == 0 else FieldSource.CANDIDATE
            for merge_field, group in self._groups.items()
        }
