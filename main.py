"""
Main application entry point for Media Shelf
"""
import os
import sys

# Disable Qt's automatic DPI scaling for consistent pixel sizes across displays
os.environ["QT_SCALE_FACTOR"] = "1"

import logging
import asyncio
from PyQt6.QtWidgets import QApplication
from PyQt6.QtCore import QtMsgType, qInstallMessageHandler
from PyQt6.QtGui import QIcon
import qasync

from src.utils.file_utils import get_resource_path

APP_VERSION = "1.0.0"


def qt_message_handler(mode, context, message):
    """Forward Qt messages to logging, dropping known harmless ones."""
    if "QFont::setPointSize: Point size <= 0" in message:
        return
    # Page console noise from the media site
    if message.startswith("js:"):
        logging.getLogger("src.ui.browser.web_bridge").debug(f"Qt: {message}")
        return

    if mode == QtMsgType.QtDebugMsg:
        logging.debug(f"Qt: {message}")
    elif mode == QtMsgType.QtInfoMsg:
        logging.info(f"Qt: {message}")
    elif mode == QtMsgType.QtWarningMsg:
        logging.warning(f"Qt: {message}")
    elif mode == QtMsgType.QtCriticalMsg:
        logging.error(f"Qt: {message}")
    elif mode == QtMsgType.QtFatalMsg:
        logging.critical(f"Qt: {message}")


def setup_logging():
    """Configure application logging"""
    from src.utils.logging_config import setup_logging as setup_categorized_logging

    # Levels are reloaded from the config DB once it is open
    logging_manager = setup_categorized_logging()

    qInstallMessageHandler(qt_message_handler)

    logger = logging.getLogger(__name__)
    logger.info("="*50)
    logger.info("Media Shelf Starting")
    logger.info("="*50)

    return logging_manager


async def async_main(logging_manager):
    """Async main function with Qt event loop integration"""
    logger = logging.getLogger(__name__)

    try:
        from src.core.context import CoreContext
        from src.ui.browser.browser_window import BrowserWindow
        from src.ui.common.theme import dark_palette
        from src.utils.file_utils import apply_windows_dark_mode

        app = QApplication.instance()
        app.setPalette(dark_palette())

        icon_path = get_resource_path('resources', 'icon.ico')
        if icon_path.exists():
            app.setWindowIcon(QIcon(str(icon_path)))
            logger.info(f"Application icon loaded: {icon_path}")
        else:
            logger.info("No icon.ico found in resources/ - using default icon")

        logger.info("Initializing core context...")
        core = CoreContext()
        logging_manager.attach_database(core.db)

        logger.info("Creating browser window...")
        main_window = BrowserWindow(core)
        apply_windows_dark_mode(main_window)
        main_window.show()

        logger.info("Application started successfully")

        # Keep reference to prevent garbage collection
        app._main_window = main_window
        app._core_context = core

    except Exception as e:
        logger.exception(f"Fatal error during startup: {e}")
        sys.exit(1)


def main():
    """Main application entry point"""
    logging_manager = setup_logging()
    logger = logging.getLogger(__name__)

    try:
        app = QApplication(sys.argv)
        app.setApplicationName("Media Shelf")
        app.setApplicationVersion(APP_VERSION)
        app.setOrganizationName("MediaShelf")

        loop = qasync.QEventLoop(app)
        asyncio.set_event_loop(loop)

        logger.info("Starting application with asyncio event loop integration")

        app_close_event = asyncio.Event()
        app.aboutToQuit.connect(app_close_event.set)

        with loop:
            loop.run_until_complete(async_main(logging_manager))
            loop.run_until_complete(app_close_event.wait())

    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)
    finally:
        logger.info("Shutting down...")
        if 'app' in locals() and hasattr(app, '_core_context'):
            app._core_context.close()
        logger.info("Application closed")


if __name__ == "__main__":
    main()
