"""Browser window and the page bridge."""

from .browser_window import BrowserWindow
from .web_bridge import WebEngineBridge

__all__ = ['BrowserWindow', 'WebEngineBridge']
