"""
Host-side mirror of a marking session on the content surface.

The surface holds the real selection. This object only tracks which mode the
host believes it is in, the last authoritative read, and a generation token
that lets late poll results be recognised and dropped.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, Optional

logger = logging.getLogger(__name__)


class SessionMode(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    RESOLVING = "resolving"


@dataclass(frozen=True)
class SessionSnapshot:
    mode: SessionMode
    chosen: FrozenSet[str]
    last_synced_count: int
    generation: int
    source_url: Optional[str]


class SelectionSession:

    def __init__(self):
        self.mode = SessionMode.IDLE
        self.chosen: set = set()
        self.last_synced_count = 0
        self.generation = 0
        self.source_url: Optional[str] = None

    @property
    def is_idle(self) -> bool:
        return self.mode == SessionMode.IDLE

    def _transition(self, new_mode: SessionMode):
        logger.debug(f"Session {self.mode.value} -> {new_mode.value} (gen {self.generation})")
        self.mode = new_mode

    def begin(self, source_url: str) -> bool:
        if self.mode != SessionMode.IDLE:
            logger.debug(f"begin ignored, session is {self.mode.value}")
            return False
        self.generation += 1
        self.chosen = set()
        self.last_synced_count = 0
        self.source_url = source_url
        self._transition(SessionMode.ACTIVE)
        return True

    def start_resolving(self) -> bool:
        if self.mode != SessionMode.ACTIVE:
            return False
        self._transition(SessionMode.RESOLVING)
        return True

    def resume(self) -> bool:
        if self.mode != SessionMode.RESOLVING:
            return False
        self._transition(SessionMode.ACTIVE)
        return True

    def record_selection(self, urls: Iterable[str]):
        """Store the authoritative read taken at commit time."""
        if self.mode != SessionMode.RESOLVING:
            raise RuntimeError(f"Cannot record a selection while {self.mode.value}")
        self.chosen = set(urls)
        self.last_synced_count = len(self.chosen)

    def apply_polled_count(self, generation: int, count: int) -> bool:
        """
        Accept a display count from the poll.

        Counts from an older generation, or arriving after the session ended,
        are dropped. The chosen set is never touched here.
        """
        if generation != self.generation or self.mode == SessionMode.IDLE:
            return False
        self.last_synced_count = max(0, int(count))
        return True

    def end(self):
        if self.mode == SessionMode.IDLE and not self.chosen and self.source_url is None:
            return
        self.generation += 1
        self.chosen = set()
        self.last_synced_count = 0
        self.source_url = None
        self._transition(SessionMode.IDLE)

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            mode=self.mode,
            chosen=frozenset(self.chosen),
            last_synced_count=self.last_synced_count,
            generation=self.generation,
            source_url=self.source_url,
        )
