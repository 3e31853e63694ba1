"""
Main browser window.

- Embedded web view on the media site
- Floating save button with selection counter
- Toast status messages
- File / Navigate menus, Ctrl+S and Escape shortcuts
"""
import asyncio
import logging
from typing import Optional

from PyQt6.QtCore import QTimer, QUrl
from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import QMainWindow, QVBoxLayout, QWidget
from PyQt6.QtWebEngineWidgets import QWebEngineView
import qtawesome as qta
from qasync import asyncSlot

from src.core.selection_session import SessionMode
from src.core.session_orchestrator import StatusLevel, StatusMessage
from src.ui.browser.web_bridge import WebEngineBridge
from src.ui.common.theme import Colors
from src.ui.dialogs import DialogDecisionSource, LibraryStatsDialog, choose_library_path
from src.ui.widgets.notification_widgets import ToastNotification
from src.ui.widgets.selection_fab import SelectionFab

logger = logging.getLogger(__name__)

# Upper bound for the async cleanup on close
_SHUTDOWN_TIMEOUT_S = 2.0


class BrowserWindow(QMainWindow):

    def __init__(self, core):
        super().__init__()

        self.core = core
        self.db = core.db
        self._closing = False
        self._shutdown_done = False

        self.setWindowTitle("Media Shelf")
        self.setGeometry(100, 100, 1400, 900)

        self._create_ui()
        self._create_menus()
        self._setup_shortcuts()

        self.bridge = WebEngineBridge(self.view.page(), timeout=core.bridge_timeout)
        self.decisions = DialogDecisionSource(self)
        self.orchestrator = core.create_orchestrator(
            self.bridge,
            self.decisions,
            on_status=self._show_status,
            on_counter=self.fab.set_count,
            on_mode_changed=self._on_mode_changed,
        )

        self.view.urlChanged.connect(self._on_url_changed)
        self.view.load(QUrl(core.home_url))

        if not core.store.is_configured:
            QTimer.singleShot(1500, self._hint_library_setup)

    def _create_ui(self):
        self._central_widget = QWidget()
        layout = QVBoxLayout(self._central_widget)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        self.view = QWebEngineView(self._central_widget)
        layout.addWidget(self.view)
        self.setCentralWidget(self._central_widget)

        self.fab = SelectionFab(self._central_widget)
        self.fab.activated.connect(self._on_primary_gesture)

        self.toast = ToastNotification(self)

    def _create_menus(self):
        """Create menu bar"""
        menubar = self.menuBar()

        # File menu
        file_menu = menubar.addMenu("File")

        library_action = QAction(qta.icon('fa5s.database', color=Colors.TEXT_SECONDARY), "Choose library...", self)
        library_action.triggered.connect(self._choose_library)
        file_menu.addAction(library_action)

        stats_action = QAction(qta.icon('fa5s.chart-bar', color=Colors.TEXT_SECONDARY), "Library statistics", self)
        stats_action.triggered.connect(self._show_stats)
        file_menu.addAction(stats_action)

        file_menu.addSeparator()

        exit_action = QAction("Exit", self)
        exit_action.setShortcut(QKeySequence("Ctrl+Q"))
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        # Navigate menu
        nav_menu = menubar.addMenu("Navigate")

        back_action = QAction(qta.icon('fa5s.arrow-left', color=Colors.TEXT_SECONDARY), "Back", self)
        back_action.setShortcut(QKeySequence("Alt+Left"))
        back_action.triggered.connect(self.view.back)
        nav_menu.addAction(back_action)

        forward_action = QAction(qta.icon('fa5s.arrow-right', color=Colors.TEXT_SECONDARY), "Forward", self)
        forward_action.setShortcut(QKeySequence("Alt+Right"))
        forward_action.triggered.connect(self.view.forward)
        nav_menu.addAction(forward_action)

        reload_action = QAction(qta.icon('fa5s.redo', color=Colors.TEXT_SECONDARY), "Reload", self)
        reload_action.setShortcut(QKeySequence("F5"))
        reload_action.triggered.connect(self._reload)
        nav_menu.addAction(reload_action)

        home_action = QAction(qta.icon('fa5s.home', color=Colors.TEXT_SECONDARY), "Home", self)
        home_action.setShortcut(QKeySequence("Alt+Home"))
        home_action.triggered.connect(lambda: self.view.load(QUrl(self.core.home_url)))
        nav_menu.addAction(home_action)

    def _setup_shortcuts(self):
        """Setup keyboard shortcuts"""
        save_shortcut = QAction(self)
        save_shortcut.setShortcut(QKeySequence("Ctrl+S"))
        save_shortcut.triggered.connect(self._on_primary_gesture)
        self.addAction(save_shortcut)

        cancel_shortcut = QAction(self)
        cancel_shortcut.setShortcut(QKeySequence("Escape"))
        cancel_shortcut.triggered.connect(self._on_cancel_marking)
        self.addAction(cancel_shortcut)

    # ------------------------------------------------------------------
    # Orchestrator callbacks
    # ------------------------------------------------------------------

    def _show_status(self, status: StatusMessage):
        if self._closing:
            return
        self.toast.show_status(status)

    def _on_mode_changed(self, mode: SessionMode):
        self.fab.set_mode(mode)

    def _hint_library_setup(self):
        if not self.core.store.is_configured:
            self._show_status(StatusMessage(
                StatusLevel.WARNING,
                "No library configured yet. Use File > Choose library... before saving",
            ))

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------

    @asyncSlot()
    async def _on_primary_gesture(self):
        if self._closing:
            return
        await self.orchestrator.handle_primary_gesture(self.view.url().toString())

    @asyncSlot()
    async def _on_cancel_marking(self):
        if self.orchestrator.mode == SessionMode.ACTIVE:
            await self.orchestrator.abandon("cancelled")
            self._show_status(StatusMessage(StatusLevel.INFO, "Image selection cancelled"))

    @asyncSlot(QUrl)
    async def _on_url_changed(self, url: QUrl):
        logger.debug(f"Navigated to {url.toString()}")
        await self.orchestrator.on_navigated(url.toString())

    @asyncSlot()
    async def _reload(self):
        # A reload drops the page-side selection even on the same url
        await self.orchestrator.abandon("reload")
        self.view.reload()

    def _choose_library(self):
        path = choose_library_path(self, self.core.store.db_path)
        if path is None:
            return
        if self.core.set_library_path(path):
            self._show_status(StatusMessage(StatusLevel.SUCCESS, f"Library set to {path.name}"))
        else:
            self._show_status(StatusMessage(StatusLevel.ERROR, f"Could not open library at {path}"))

    def _show_stats(self):
        library_path = self.core.store.db_path if self.core.store.is_configured else None
        dialog = LibraryStatsDialog(self.core.resolver.get_stats(), library_path, self)
        dialog.finished.connect(dialog.deleteLater)
        dialog.open()

    # ------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.fab.reposition()

    def showEvent(self, event):
        super().showEvent(event)
        self.fab.reposition()

    async def _shutdown_then_close(self):
        try:
            await asyncio.wait_for(self.orchestrator.shutdown(), timeout=_SHUTDOWN_TIMEOUT_S)
        except asyncio.TimeoutError:
            logger.warning("Session shutdown timed out")
        self._shutdown_done = True
        self.close()

    def closeEvent(self, event):
        """Abandon any marking session, then shut the core down."""
        if not self._shutdown_done:
            # Page cleanup is async; close again once it finishes
            event.ignore()
            if not self._closing:
                self._closing = True
                asyncio.ensure_future(self._shutdown_then_close())
            return
        self.toast.hide()
        self.core.close()
        super().closeEvent(event)
