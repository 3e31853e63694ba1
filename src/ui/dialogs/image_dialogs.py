"""
Dialogs for the image save flow.
"""
from typing import Optional, Sequence

from PyQt6.QtWidgets import (
    QDialog, QFormLayout, QHBoxLayout, QLabel, QLineEdit, QListWidget,
    QPushButton, QTextEdit, QVBoxLayout,
)

from src.core.dto.image import ImageBatch, ImageRecord
from src.core.dto.resolution import ResolutionKind
from src.core.dto.image import ImageDetails
from src.ui.common.theme import Spacing, Styles

# Duplicate list is informational; keep it short
_MAX_LISTED = 50


class ImageSaveDialog(QDialog):
    """Ask for the tag (required) and comments of a selection."""

    def __init__(self, count: int, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Save images")
        self.setMinimumWidth(Spacing.DIALOG_MIN_WIDTH)
        self.setStyleSheet(Styles.dialog())

        layout = QVBoxLayout(self)
        layout.setSpacing(Spacing.MD)

        summary = QLabel(f"{count} image{'s' if count != 1 else ''} selected")
        summary.setStyleSheet(Styles.description_label())
        layout.addWidget(summary)

        form = QFormLayout()
        self.tag_edit = QLineEdit()
        self.tag_edit.setPlaceholderText("Required")
        self.tag_edit.textChanged.connect(self._update_save_enabled)
        form.addRow("Tag", self.tag_edit)

        self.comments_edit = QTextEdit()
        self.comments_edit.setMinimumHeight(Spacing.MULTILINE_MIN_HEIGHT)
        self.comments_edit.setMaximumHeight(Spacing.MULTILINE_MAX_HEIGHT)
        form.addRow("Comments", self.comments_edit)
        layout.addLayout(form)

        buttons = QHBoxLayout()
        buttons.addStretch()
        cancel_btn = QPushButton("Cancel")
        cancel_btn.setStyleSheet(Styles.button_secondary())
        cancel_btn.clicked.connect(self.reject)
        buttons.addWidget(cancel_btn)
        self.save_btn = QPushButton("Save")
        self.save_btn.setStyleSheet(Styles.button_primary())
        self.save_btn.setDefault(True)
        self.save_btn.clicked.connect(self.accept)
        buttons.addWidget(self.save_btn)
        layout.addLayout(buttons)

        self._update_save_enabled()

    def _update_save_enabled(self):
        self.save_btn.setEnabled(bool(self.tag_edit.text().strip()))

    def details(self) -> Optional[ImageDetails]:
        tag = self.tag_edit.text().strip()
        if not tag:
            return None
        return ImageDetails(tag, self.comments_edit.toPlainText())


class ImageDuplicateDialog(QDialog):
    """Report which members are already saved under this tag."""

    def __init__(self, batch: ImageBatch, duplicates: Sequence[ImageRecord], parent=None):
        super().__init__(parent)
        self.setWindowTitle("Images already saved")
        self.setMinimumWidth(Spacing.DIALOG_MIN_WIDTH)
        self.setStyleSheet(Styles.dialog())
        self.choice = ResolutionKind.CANCEL

        total = len(batch.unique_urls())
        layout = QVBoxLayout(self)
        layout.setSpacing(Spacing.MD)

        warning = QLabel(
            f"{len(duplicates)} of {total} images are already saved with tag \"{batch.tag}\"."
        )
        warning.setWordWrap(True)
        warning.setStyleSheet(Styles.warning_label())
        layout.addWidget(warning)

        listing = QListWidget()
        for record in list(duplicates)[:_MAX_LISTED]:
            listing.addItem(record.url)
        if len(duplicates) > _MAX_LISTED:
            listing.addItem(f"... and {len(duplicates) - _MAX_LISTED} more")
        layout.addWidget(listing)

        buttons = QHBoxLayout()
        buttons.addStretch()
        for text, kind, primary in (
            ("Cancel", ResolutionKind.CANCEL, False),
            ("Save all", ResolutionKind.SAVE_ALL, False),
            ("Save new only", ResolutionKind.SAVE_NEW_ONLY, True),
        ):
            btn = QPushButton(text)
            btn.setStyleSheet(Styles.button_primary() if primary else Styles.button_secondary())
            btn.clicked.connect(lambda _checked=False, k=kind: self._choose(k))
            buttons.addWidget(btn)
        layout.addLayout(buttons)

    def _choose(self, kind: ResolutionKind):
        self.choice = kind
        if kind == ResolutionKind.CANCEL:
            self.reject()
        else:
            self.accept()
