"""
Floating action button for the primary save gesture.

Shows a save icon while idle and a check icon with a selection counter badge
while a marking session is active.
"""
from typing import Optional

from PyQt6.QtCore import Qt, QSize, pyqtSignal
from PyQt6.QtWidgets import QLabel, QPushButton, QWidget
import qtawesome as qta

from src.core.selection_session import SessionMode
from src.ui.common.theme import Colors, Fonts, Spacing


class SelectionFab(QPushButton):
    """Round button anchored to the bottom-right corner of its parent."""

    activated = pyqtSignal()

    def __init__(self, parent: QWidget):
        super().__init__(parent)
        self.setObjectName("selectionFab")
        self.setFixedSize(Spacing.FAB_SIZE, Spacing.FAB_SIZE)
        self.setIconSize(QSize(Spacing.ICON_LG, Spacing.ICON_LG))
        self.setCursor(Qt.CursorShape.PointingHandCursor)
        self.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.clicked.connect(self.activated.emit)

        self.badge = QLabel(self)
        self.badge.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.badge.setFixedSize(Spacing.BADGE_SIZE, Spacing.BADGE_SIZE)
        self.badge.setStyleSheet(f"""
            QLabel {{
                background-color: {Colors.ACCENT_ERROR};
                color: {Colors.TEXT_WHITE};
                border-radius: {Spacing.BADGE_SIZE // 2}px;
                font-size: {Fonts.SIZE_XS}px;
                font-weight: {Fonts.WEIGHT_BOLD};
            }}
        """)
        self.badge.move(self.width() - Spacing.BADGE_SIZE, 0)
        self.badge.hide()

        self.set_mode(SessionMode.IDLE)
        self.reposition()

    def _apply_style(self, color: str):
        radius = Spacing.FAB_SIZE // 2
        self.setStyleSheet(f"""
            QPushButton#selectionFab {{
                background-color: {color};
                border: none;
                border-radius: {radius}px;
            }}
            QPushButton#selectionFab:hover {{
                border: 2px solid {Colors.TEXT_WHITE};
            }}
            QPushButton#selectionFab:disabled {{
                background-color: {Colors.STATE_DISABLED_BG};
            }}
        """)

    def set_mode(self, mode: SessionMode):
        if mode == SessionMode.IDLE:
            self.setIcon(qta.icon('fa5s.save', color=Colors.TEXT_WHITE))
            self.setToolTip("Save video / start selecting images (Ctrl+S)")
            self._apply_style(Colors.ACCENT_PRIMARY)
            self.setEnabled(True)
        elif mode == SessionMode.ACTIVE:
            self.setIcon(qta.icon('fa5s.check', color=Colors.TEXT_WHITE))
            self.setToolTip("Save selected images (Ctrl+S), Esc to cancel")
            self._apply_style(Colors.ACCENT_SECONDARY)
            self.setEnabled(True)
        else:
            self.setIcon(qta.icon('fa5s.spinner', color=Colors.TEXT_WHITE))
            self.setToolTip("Saving...")
            self._apply_style(Colors.ACCENT_SECONDARY)
            self.setEnabled(False)

    def set_count(self, count: Optional[int]):
        """Show the selection counter; None hides it."""
        if count is None:
            self.badge.hide()
            return
        self.badge.setText(str(count) if count < 100 else "99+")
        self.badge.show()
        self.badge.raise_()

    def reposition(self):
        parent = self.parentWidget()
        if parent is None:
            return
        self.move(
            parent.width() - self.width() - Spacing.FAB_MARGIN,
            parent.height() - self.height() - Spacing.FAB_MARGIN,
        )
        self.raise_()
