"""
Centralized logging configuration with categorized loggers.

This module provides:
- Named categories for the Media Shelf subsystems
- Per-category log level control
- Persistent levels via the config database (log_level_<category>)
"""
import logging
from typing import Dict, Optional
from pathlib import Path
from logging.handlers import TimedRotatingFileHandler


class LoggerCategory:
    """Named categories for application loggers"""
    CORE = "core"                  # Context, resolver, locators
    DATABASE = "database"          # Config DB and library store
    SESSION = "session"            # Selection session and orchestrator
    BRIDGE = "bridge"              # Page scripts / runJavaScript calls
    UI = "ui"                      # Dialogs and widgets
    BROWSER = "browser"            # Browser window and navigation
    SETTINGS = "settings"          # Library chooser and configuration


DEFAULT_LOG_LEVELS = {
    LoggerCategory.CORE: logging.INFO,
    LoggerCategory.DATABASE: logging.WARNING,  # Reduce DB query noise
    LoggerCategory.SESSION: logging.INFO,
    LoggerCategory.BRIDGE: logging.WARNING,    # Poll calls are frequent
    LoggerCategory.UI: logging.WARNING,
    LoggerCategory.BROWSER: logging.INFO,
    LoggerCategory.SETTINGS: logging.INFO,
}


MODULE_TO_CATEGORY = {
    # Core
    'src.core': LoggerCategory.CORE,
    'src.core.context': LoggerCategory.CORE,
    'src.core.duplicate_resolver': LoggerCategory.CORE,
    'src.core.locators': LoggerCategory.CORE,

    # Database
    'src.core.database': LoggerCategory.DATABASE,
    'src.core.record_store': LoggerCategory.DATABASE,

    # Session
    'src.core.selection_session': LoggerCategory.SESSION,
    'src.core.session_orchestrator': LoggerCategory.SESSION,

    # Bridge
    'src.core.bridge': LoggerCategory.BRIDGE,
    'src.ui.browser.web_bridge': LoggerCategory.BRIDGE,

    # UI
    'src.ui': LoggerCategory.UI,
    'src.ui.dialogs': LoggerCategory.UI,
    'src.ui.widgets': LoggerCategory.UI,

    # Browser
    'src.ui.browser': LoggerCategory.BROWSER,
    'src.ui.browser.browser_window': LoggerCategory.BROWSER,

    # Settings
    'src.ui.dialogs.library_dialogs': LoggerCategory.SETTINGS,
}


class LoggingManager:
    """Manages application-wide logging configuration"""

    def __init__(self, log_dir: Optional[Path] = None, db_manager=None):
        """
        Initialize logging manager.

        Args:
            log_dir: Directory for log files
            db_manager: Database manager for persistent configuration
        """
        self.log_dir = log_dir or (Path.home() / "AppData" / "Local" / "MediaShelf" / "logs")
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.db_manager = db_manager
        self._category_levels: Dict[str, int] = {}
        self._load_levels_from_db()

    def _load_levels_from_db(self):
        """Load log levels from database configuration"""
        if not self.db_manager:
            self._category_levels = DEFAULT_LOG_LEVELS.copy()
            return

        for category, default_level in DEFAULT_LOG_LEVELS.items():
            config_key = f'log_level_{category}'
            level_name = self.db_manager.get_config(config_key, logging.getLevelName(default_level))
            level = logging.getLevelName(str(level_name).upper())
            if isinstance(level, int):
                self._category_levels[category] = level
            else:
                self._category_levels[category] = default_level

    def attach_database(self, db_manager):
        """Switch to persisted levels once the config DB is open."""
        self.db_manager = db_manager
        self._load_levels_from_db()
        for category, level in self._category_levels.items():
            self._apply_category_level(category, level)

    def get_category_level(self, category: str) -> int:
        """Get log level for a category"""
        return self._category_levels.get(category, logging.INFO)

    def set_category_level(self, category: str, level: int):
        """Set log level for a category"""
        self._category_levels[category] = level
        if self.db_manager:
            config_key = f'log_level_{category}'
            self.db_manager.set_config(config_key, logging.getLevelName(level))

        self._apply_category_level(category, level)

    def _apply_category_level(self, category: str, level: int):
        """Apply level to all loggers in a category"""
        for module_name, cat in MODULE_TO_CATEGORY.items():
            if cat == category:
                logging.getLogger(module_name).setLevel(level)

    def setup_logging(self, root_level: int = logging.INFO):
        """
        Setup application logging with categories.

        Args:
            root_level: Root logger level (default: INFO)
        """
        log_file = self.log_dir / "media_shelf.log"

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        file_handler = TimedRotatingFileHandler(
            log_file,
            when="midnight",
            interval=1,
            backupCount=7,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)

        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)

        root_logger = logging.getLogger()
        root_logger.setLevel(root_level)

        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()

        root_logger.addHandler(file_handler)
        root_logger.addHandler(stream_handler)

        for category, level in self._category_levels.items():
            self._apply_category_level(category, level)

        # Silence noisy third-party loggers
        logging.getLogger('asyncio').setLevel(logging.WARNING)
        logging.getLogger('qasync').setLevel(logging.WARNING)

    def get_all_levels(self) -> Dict[str, int]:
        """Get all category log levels"""
        return self._category_levels.copy()


# Global instance
_logging_manager: Optional[LoggingManager] = None


def get_logging_manager(db_manager=None) -> LoggingManager:
    """Get or create the global logging manager"""
    global _logging_manager
    if _logging_manager is None:
        _logging_manager = LoggingManager(db_manager=db_manager)
    return _logging_manager


def setup_logging(db_manager=None):
    """Setup application logging (convenience function)"""
    manager = get_logging_manager(db_manager)
    manager.setup_logging()
    return manager
