"""
Application configuration database for Media Shelf.
Holds the key/value settings (library location, poll interval, log levels).
The saved videos and images live in a separate library file, see record_store.
"""
import sqlite3
import logging
from pathlib import Path
from typing import Any, Optional, Dict

from src.utils.logging_config import DEFAULT_LOG_LEVELS

logger = logging.getLogger(__name__)


DEFAULT_CONFIG_DIR = Path.home() / "AppData" / "Local" / "MediaShelf"


class DatabaseManager:
    """Manages the SQLite config table"""

    VERSION = "1.0.0"

    def __init__(self, db_path: Optional[Path] = None):
        """
        Initialize database manager

        Args:
            db_path: Path to SQLite database file. Defaults to user data directory.
        """
        if db_path is None:
            db_path = DEFAULT_CONFIG_DIR / "data.db"

        db_path.parent.mkdir(parents=True, exist_ok=True)
        self.db_path = db_path
        self.conn: Optional[sqlite3.Connection] = None

    def connect(self):
        """Establish database connection"""
        self.conn = sqlite3.connect(
            self.db_path,
            check_same_thread=False,
            timeout=30.0
        )
        self.conn.row_factory = sqlite3.Row
        self._initialize_schema()

    def _initialize_schema(self):
        """Create database schema if not exists"""
        cursor = self.conn.cursor()

        # Check if schema already exists
        cursor.execute("SELECT name FROM sqlite_master WHERE type='table' AND name='config'")
        schema_exists = cursor.fetchone() is not None

        # Configuration table
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS config (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Insert default configuration
        self._set_default_config()

        self.conn.commit()

        # Only log if this was a new database
        if not schema_exists:
            logger.info("Config database initialized")
        else:
            logger.debug("Config database verified")

    def _set_default_config(self):
        """Set default configuration values"""
        defaults = {
            'app_version': self.VERSION,
            'home_url': 'https://hanime.tv/',
            'library_db_path': '',
            'selection_poll_interval_ms': '500',
            'bridge_timeout_ms': '5000',
        }
        for category, level in DEFAULT_LOG_LEVELS.items():
            defaults[f'log_level_{category}'] = logging.getLevelName(level)

        cursor = self.conn.cursor()
        for key, value in defaults.items():
            cursor.execute("""
                INSERT OR IGNORE INTO config (key, value)
                VALUES (?, ?)
            """, (key, value))
        self.conn.commit()

    def get_config(self, key: str, default: Any = None) -> Any:
        """
        Retrieve configuration value

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        cursor = self.conn.cursor()
        cursor.execute("""
            SELECT value FROM config WHERE key = ?
        """, (key,))

        row = cursor.fetchone()
        if row:
            return row['value']
        return default

    def set_config(self, key: str, value: Any):
        """
        Set configuration value

        Args:
            key: Configuration key
            value: Configuration value
        """
        cursor = self.conn.cursor()
        cursor.execute("""
            INSERT OR REPLACE INTO config (key, value, updated_at)
            VALUES (?, ?, CURRENT_TIMESTAMP)
        """, (key, str(value)))
        self.conn.commit()

    def get_all_config(self) -> Dict[str, str]:
        """Get all configuration as dictionary"""
        cursor = self.conn.cursor()
        cursor.execute("SELECT key, value FROM config")
        return {row['key']: row['value'] for row in cursor.fetchall()}

    def get_int_config(self, key: str, default: int) -> int:
        """Integer setting with fallback when missing or malformed."""
        try:
            return int(self.get_config(key, str(default)))
        except (TypeError, ValueError):
            logger.warning(f"Invalid integer for config '{key}', using {default}")
            return default

    def close(self):
        """Close database connection"""
        if self.conn:
            self.conn.close()
            self.conn = None
