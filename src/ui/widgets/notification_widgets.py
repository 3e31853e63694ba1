"""
Toast notification for save/selection status messages.
"""
from PyQt6.QtCore import Qt, QTimer, QPropertyAnimation, QRectF
from PyQt6.QtGui import QPainter, QColor, QPainterPath, QPen
from PyQt6.QtWidgets import QWidget, QHBoxLayout, QLabel, QPushButton
import qtawesome as qta

from src.core.session_orchestrator import StatusLevel, StatusMessage
from src.ui.common.theme import Colors, Fonts, Spacing

# icon name, icon color, duration ms
_LEVEL_STYLE = {
    StatusLevel.INFO: ('fa5s.info-circle', Colors.ACCENT_SECONDARY, 3000),
    StatusLevel.SUCCESS: ('fa5s.check-circle', Colors.ACCENT_SUCCESS, 3000),
    StatusLevel.WARNING: ('fa5s.exclamation-triangle', Colors.ACCENT_WARNING, 4000),
    StatusLevel.ERROR: ('fa5s.times-circle', Colors.ACCENT_ERROR, 5000),
}


class ToastNotification(QWidget):
    """
    Toast notification widget that appears and auto-dismisses.

    Shows a message with an icon at the bottom-left of the parent widget,
    away from the floating save button. Fades out after the level's duration.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("toastNotification")
        self.setWindowFlags(
            Qt.WindowType.FramelessWindowHint |
            Qt.WindowType.ToolTip |
            Qt.WindowType.WindowStaysOnTopHint
        )
        self.setAttribute(Qt.WidgetAttribute.WA_ShowWithoutActivating)
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground)
        self.hide()  # Start hidden to prevent flash

        self._radius = Spacing.RADIUS_XL
        self._bg_color = QColor(Colors.BG_TERTIARY)
        self._border_color = QColor(Colors.BORDER_DEFAULT)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(Spacing.LG, Spacing.MD, Spacing.LG, Spacing.MD)
        layout.setSpacing(Spacing.MD)

        self.icon_label = QLabel()
        self.icon_label.setFixedSize(Spacing.ICON_LG, Spacing.ICON_LG)
        layout.addWidget(self.icon_label)

        self.message_label = QLabel()
        self.message_label.setWordWrap(True)
        self.message_label.setMaximumWidth(420)
        self.message_label.setStyleSheet(
            f"color: {Colors.TEXT_PRIMARY}; font-size: {Fonts.SIZE_LG}px; background: transparent;"
        )
        layout.addWidget(self.message_label, 1)

        close_btn = QPushButton()
        close_btn.setIcon(qta.icon('fa5s.times', color=Colors.TEXT_SECONDARY))
        close_btn.setFixedSize(Spacing.ICON_MD, Spacing.ICON_MD)
        close_btn.setFlat(True)
        close_btn.setStyleSheet(
            f"QPushButton {{ border: none; background: transparent; }} "
            f"QPushButton:hover {{ background-color: rgba(255,255,255,0.1); border-radius: {Spacing.RADIUS_LG}px; }}"
        )
        close_btn.clicked.connect(self.hide)
        close_btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        layout.addWidget(close_btn)

        self.hide_timer = QTimer(self)
        self.hide_timer.setSingleShot(True)
        self.hide_timer.timeout.connect(self._fade_out)

        self.fade_animation = QPropertyAnimation(self, b"windowOpacity")
        self.fade_animation.setDuration(300)

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        path = QPainterPath()
        rect = QRectF(0.5, 0.5, self.width() - 1, self.height() - 1)
        path.addRoundedRect(rect, self._radius, self._radius)

        painter.fillPath(path, self._bg_color)
        painter.setPen(QPen(self._border_color, 1))
        painter.drawPath(path)

    def show_status(self, status: StatusMessage):
        icon_name, icon_color, duration = _LEVEL_STYLE.get(status.level, _LEVEL_STYLE[StatusLevel.INFO])
        self.show_message(status.text, icon_name, icon_color, duration)

    def show_message(
        self,
        message: str,
        icon_name: str = 'fa5s.info-circle',
        icon_color: str = Colors.ACCENT_SECONDARY,
        duration: int = 3000
    ):
        """
        Show toast notification.

        Args:
            message: Message to display
            icon_name: QtAwesome icon name
            icon_color: Icon color
            duration: Duration in milliseconds before auto-hide
        """
        try:
            self.fade_animation.finished.disconnect()
        except TypeError:
            pass
        self.fade_animation.stop()

        self.message_label.setText(message)
        self.icon_label.setPixmap(
            qta.icon(icon_name, color=icon_color).pixmap(Spacing.ICON_LG, Spacing.ICON_LG)
        )

        # ToolTip windows are top-level, so position in global coordinates
        parent = self.parentWidget()
        if parent is not None:
            self.adjustSize()
            bottom_left = parent.mapToGlobal(parent.rect().bottomLeft())
            self.move(bottom_left.x() + Spacing.XL, bottom_left.y() - self.height() - Spacing.XL)

        self.setWindowOpacity(0)
        self.show()
        self.fade_animation.setStartValue(0.0)
        self.fade_animation.setEndValue(1.0)
        self.fade_animation.start()

        self.hide_timer.start(duration)

    def _fade_out(self):
        try:
            self.fade_animation.finished.disconnect()
        except TypeError:
            pass
        self.fade_animation.setStartValue(1.0)
        self.fade_animation.setEndValue(0.0)
        self.fade_animation.finished.connect(self.hide)
        self.fade_animation.start()
