from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from src.core.bridge import ContentBridge
from src.core.database import DatabaseManager
from src.core.duplicate_resolver import DecisionSource, DuplicateResolver
from src.core.record_store import RecordStore
from src.core.session_orchestrator import SessionOrchestrator

logger = logging.getLogger(__name__)


class CoreContext:
    """
    Shared Core dependencies (config DB + library store + resolver).

    Use a single instance for app lifetime for consistency.
    """

    def __init__(self, *, db: Optional[DatabaseManager] = None):
        self.db = db or DatabaseManager()

        # Connect early so we can read settings
        if self.db.conn is None:
            self.db.connect()

        self.store = RecordStore(self._configured_library_path())
        if self.store.db_path is not None:
            self.store.connect()

        self.resolver = DuplicateResolver(self.store)

    def _configured_library_path(self) -> Optional[Path]:
        raw = (self.db.get_config('library_db_path', '') or '').strip()
        return Path(raw) if raw else None

    @property
    def home_url(self) -> str:
        return self.db.get_config('home_url', 'https://hanime.tv/')

    @property
    def poll_interval(self) -> float:
        return self.db.get_int_config('selection_poll_interval_ms', 500) / 1000.0

    @property
    def bridge_timeout(self) -> float:
        return self.db.get_int_config('bridge_timeout_ms', 5000) / 1000.0

    def set_library_path(self, path: Path) -> bool:
        """Persist a new library location and reopen the store on it."""
        path = Path(path)
        self.store.close()
        self.store.db_path = path
        if not self.store.connect():
            return False
        self.db.set_config('library_db_path', str(path))
        logger.info(f"Library path set to {path}")
        return True

    def create_orchestrator(
        self,
        bridge: ContentBridge,
        decisions: DecisionSource,
        **callbacks,
    ) -> SessionOrchestrator:
        return SessionOrchestrator(
            bridge,
            self.resolver,
            decisions,
            poll_interval=self.poll_interval,
            **callbacks,
        )

    def close(self) -> None:
        self.store.close()
        self.db.close()
