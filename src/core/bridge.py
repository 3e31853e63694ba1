"""
Host side of the content-surface contract.

The surface (the rendered page) owns the live selection; the host only talks
to it through these async request/response calls. Implementations turn an
unreachable surface into the empty result of each call instead of raising.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class ContentBridge(ABC):

    @abstractmethod
    async def inject(self) -> bool:
        """Install the marking capability. Injecting twice is a no-op."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove all marks. Best-effort, never raises."""

    @abstractmethod
    async def read_selection(self) -> List[str]:
        """Authoritative list of marked member urls, [] when absent."""

    @abstractmethod
    async def read_selection_count(self) -> int:
        """Number of marked members, for display only."""

    @abstractmethod
    async def scrape_video(self) -> Optional[Dict[str, Any]]:
        """Extract the video fields of the current page, None on failure."""
