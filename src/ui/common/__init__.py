"""Shared UI theme."""

from .theme import Colors, Fonts, Spacing, Styles, dark_palette

__all__ = ['Colors', 'Fonts', 'Spacing', 'Styles', 'dark_palette']
