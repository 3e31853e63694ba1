"""
Qt-free core of Media Shelf: library storage, duplicate resolution and the
selection session. Import submodules directly, e.g. ``src.core.context``.
"""
