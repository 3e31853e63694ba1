"""Reusable UI widgets."""

from .notification_widgets import ToastNotification
from .selection_fab import SelectionFab

__all__ = [
    'ToastNotification',
    'SelectionFab',
]
