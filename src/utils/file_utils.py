import os
import sys
from pathlib import Path

LIBRARY_SUFFIX = ".db"


def get_resource_path(*parts: str) -> Path:
    """
    Get the absolute path to a resource file, handling PyInstaller bundles.

    In development: returns path relative to project root
    In PyInstaller bundle: returns path inside _MEIPASS

    Args:
        *parts: Path components relative to project/bundle root
                e.g. get_resource_path('resources', 'icon.ico')
    """
    if hasattr(sys, '_MEIPASS'):
        base = Path(sys._MEIPASS)
    else:
        # Development - use project root (parent of src/)
        base = Path(__file__).parent.parent.parent

    return base.joinpath(*parts)


def normalize_library_path(path_str: str) -> Path:
    """
    Turn the path picked in the library chooser into an absolute .db path.

    Accepts file:// urls, relative paths and paths without a suffix.
    """
    path_str = (path_str or "").strip()
    if not path_str:
        raise ValueError("Library path is empty")

    if path_str.startswith('file://'):
        path_str = path_str[len('file://'):]
        # file:///C:/... on Windows
        if sys.platform == 'win32' and path_str.startswith('/'):
            path_str = path_str[1:]

    path = Path(os.path.expanduser(path_str))
    if not path.is_absolute():
        path = Path(os.getcwd()) / path
    if path.suffix.lower() != LIBRARY_SUFFIX:
        path = path.with_suffix(LIBRARY_SUFFIX)
    return path.resolve()


def format_size(num_bytes: int) -> str:
    size = float(num_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


def apply_windows_dark_mode(widget):
    """
    Apply Windows dark mode to a widget's title bar (Windows 10 1809+ / Windows 11).

    Args:
        widget: A QWidget with a window handle (QMainWindow, QDialog, etc.)
    """
    if sys.platform != "win32":
        return

    try:
        import ctypes
        hwnd = int(widget.winId())
        dwmapi = ctypes.windll.dwmapi

        # DWMWA_USE_IMMERSIVE_DARK_MODE = 20 (Windows 10 20H1+)
        value = ctypes.c_int(1)
        result = dwmapi.DwmSetWindowAttribute(hwnd, 20, ctypes.byref(value), ctypes.sizeof(value))
        if result != 0:
            # Older attribute id for Windows 10 1809-1909
            dwmapi.DwmSetWindowAttribute(hwnd, 19, ctypes.byref(value), ctypes.sizeof(value))
    except (AttributeError, OSError):
        pass
