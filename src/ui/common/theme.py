"""
Centralized theme configuration for Media Shelf.

Single source of truth for the colors, fonts, spacing and stylesheet snippets
used by the browser window, dialogs and floating widgets.

Usage:
    from src.ui.common.theme import Colors, Fonts, Spacing, Styles

    label.setStyleSheet(f"color: {Colors.TEXT_PRIMARY};")
    icon = qta.icon('fa5s.save', color=Colors.ACCENT_PRIMARY)
"""
from typing import Optional

from PyQt6.QtGui import QColor, QPalette


class Colors:
    """
    Dark palette.

      Backgrounds: #141414 (primary), #1b1b1b (secondary), #232323 (tertiary)
      Accent A:    #f7673a (primary action)
      Accent B:    #4a9eff (selection, matches the page overlay)
    """

    ACCENT_PRIMARY = "#f7673a"
    ACCENT_SECONDARY = "#4a9eff"
    ACCENT_SUCCESS = "#10b981"
    ACCENT_ERROR = "#ef4444"
    ACCENT_WARNING = "#f59e0b"

    TEXT_PRIMARY = "#e6e6e6"
    TEXT_SECONDARY = "#9ca3af"
    TEXT_MUTED = "#6b7280"
    TEXT_DISABLED = "#666666"
    TEXT_WHITE = "#ffffff"

    BG_PRIMARY = "#141414"
    BG_SECONDARY = "#1b1b1b"
    BG_TERTIARY = "#232323"
    BG_INPUT = "#161616"
    BG_HOVER = "#2e2e2e"

    BORDER_DEEP = "#111111"
    BORDER_DEFAULT = "#2e2e2e"
    BORDER_LIGHT = "#3a3a3a"

    STATE_DISABLED_BG = "#242424"

    # Highlight for fields that differ between existing and new records
    DIFF_HIGHLIGHT = "#3b2a1a"


class Fonts:
    FAMILY = '"Fira Sans", "Segoe UI", sans-serif'

    SIZE_XS = 11
    SIZE_SM = 12
    SIZE_MD = 13
    SIZE_LG = 14
    SIZE_XXL = 16
    SIZE_TITLE = 24

    WEIGHT_NORMAL = 400
    WEIGHT_MEDIUM = 500
    WEIGHT_SEMIBOLD = 600
    WEIGHT_BOLD = 700


class Spacing:
    """Spacing and sizing constants."""

    XS = 4
    SM = 8
    MD = 12
    LG = 16
    XL = 20
    XXL = 24

    RADIUS_SM = 4
    RADIUS_MD = 6
    RADIUS_LG = 8
    RADIUS_XL = 10

    ICON_SM = 16
    ICON_MD = 20
    ICON_LG = 24
    ICON_XL = 32

    FAB_SIZE = 56
    FAB_MARGIN = 24
    BADGE_SIZE = 22

    DIALOG_MIN_WIDTH = 480
    DIALOG_WIDE_WIDTH = 760
    MULTILINE_MIN_HEIGHT = 60
    MULTILINE_MAX_HEIGHT = 100


class Styles:
    """Pre-built stylesheet snippets for programmatic styling."""

    @staticmethod
    def label(
        color: str = Colors.TEXT_PRIMARY,
        size: int = Fonts.SIZE_MD,
        weight: int = Fonts.WEIGHT_NORMAL,
        bg: Optional[str] = None,
    ) -> str:
        # Font size must stay > 0 to avoid Qt warnings
        safe_size = max(1, size) if size else Fonts.SIZE_MD
        style = f"color: {color}; font-size: {safe_size}px; font-weight: {weight};"
        if bg is not None:
            style += f" background-color: {bg}; border-radius: {Spacing.RADIUS_MD}px; padding: 2px 4px;"
        return f"QLabel {{ {style} }}"

    @staticmethod
    def button_primary() -> str:
        return f"""
            QPushButton {{
                background-color: {Colors.ACCENT_PRIMARY};
                border: 1px solid {Colors.ACCENT_PRIMARY};
                border-radius: {Spacing.RADIUS_LG}px;
                color: {Colors.TEXT_WHITE};
                font-weight: {Fonts.WEIGHT_SEMIBOLD};
                padding: 8px 18px;
            }}
            QPushButton:hover {{
                background-color: #ff8a60;
                border-color: #ff8a60;
            }}
            QPushButton:disabled {{
                background-color: {Colors.STATE_DISABLED_BG};
                border-color: {Colors.STATE_DISABLED_BG};
                color: {Colors.TEXT_DISABLED};
            }}
        """

    @staticmethod
    def button_secondary() -> str:
        return f"""
            QPushButton {{
                background-color: {Colors.BG_TERTIARY};
                border: 1px solid {Colors.BORDER_DEFAULT};
                border-radius: {Spacing.RADIUS_LG}px;
                color: {Colors.TEXT_PRIMARY};
                padding: 8px 16px;
                font-weight: {Fonts.WEIGHT_MEDIUM};
            }}
            QPushButton:hover {{
                background-color: {Colors.BG_HOVER};
                border-color: {Colors.ACCENT_PRIMARY};
            }}
        """

    @staticmethod
    def input_field() -> str:
        return f"""
            QLineEdit, QTextEdit, QSpinBox {{
                background-color: {Colors.BG_INPUT};
                color: {Colors.TEXT_PRIMARY};
                border: 1px solid {Colors.BORDER_DEFAULT};
                border-radius: {Spacing.RADIUS_LG}px;
                padding: 4px 8px;
                selection-background-color: {Colors.ACCENT_PRIMARY};
            }}
            QLineEdit:focus, QTextEdit:focus, QSpinBox:focus {{
                border-color: {Colors.ACCENT_PRIMARY};
            }}
        """

    @staticmethod
    def combo_box() -> str:
        return f"""
            QComboBox {{
                background-color: {Colors.BG_TERTIARY};
                color: {Colors.TEXT_PRIMARY};
                border: 1px solid {Colors.BORDER_DEFAULT};
                border-radius: {Spacing.RADIUS_LG}px;
                padding: 4px 12px;
            }}
            QComboBox:hover {{
                border-color: {Colors.ACCENT_PRIMARY};
            }}
            QComboBox QAbstractItemView {{
                background-color: {Colors.BG_SECONDARY};
                color: {Colors.TEXT_PRIMARY};
                selection-background-color: {Colors.ACCENT_PRIMARY};
                border: 1px solid {Colors.BORDER_DEFAULT};
            }}
        """

    @staticmethod
    def dialog() -> str:
        return f"""
            QDialog {{
                background-color: {Colors.BG_SECONDARY};
                color: {Colors.TEXT_PRIMARY};
            }}
            QGroupBox {{
                border: 1px solid {Colors.BORDER_DEFAULT};
                border-radius: {Spacing.RADIUS_LG}px;
                margin-top: 14px;
                padding: 10px;
                color: {Colors.TEXT_SECONDARY};
            }}
            QGroupBox::title {{
                subcontrol-origin: margin;
                left: 10px;
            }}
            QListWidget {{
                background-color: {Colors.BG_INPUT};
                border: 1px solid {Colors.BORDER_DEFAULT};
                border-radius: {Spacing.RADIUS_LG}px;
                color: {Colors.TEXT_SECONDARY};
            }}
        """ + Styles.input_field() + Styles.combo_box()

    @staticmethod
    def description_label() -> str:
        return f"color: {Colors.TEXT_MUTED}; margin-bottom: 10px;"

    @staticmethod
    def warning_label() -> str:
        return f"color: {Colors.ACCENT_WARNING}; margin-bottom: 10px; font-weight: bold;"


def dark_palette() -> QPalette:
    """Palette for native widgets (menus, message boxes, file dialogs)."""
    palette = QPalette()
    palette.setColor(QPalette.ColorRole.Window, QColor("#1e1e1e"))
    palette.setColor(QPalette.ColorRole.WindowText, QColor("#e0e0e0"))
    palette.setColor(QPalette.ColorRole.Base, QColor("#252525"))
    palette.setColor(QPalette.ColorRole.AlternateBase, QColor("#2a2a2a"))
    palette.setColor(QPalette.ColorRole.ToolTipBase, QColor("#2a2a2a"))
    palette.setColor(QPalette.ColorRole.ToolTipText, QColor("#e0e0e0"))
    palette.setColor(QPalette.ColorRole.Text, QColor("#e0e0e0"))
    palette.setColor(QPalette.ColorRole.Button, QColor("#353535"))
    palette.setColor(QPalette.ColorRole.ButtonText, QColor("#e0e0e0"))
    palette.setColor(QPalette.ColorRole.Link, QColor(Colors.ACCENT_PRIMARY))
    palette.setColor(QPalette.ColorRole.Highlight, QColor(Colors.ACCENT_PRIMARY))
    palette.setColor(QPalette.ColorRole.HighlightedText, QColor("#ffffff"))
    return palette
