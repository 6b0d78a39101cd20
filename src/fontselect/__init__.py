"""
FontSelect Package.

Chooses the default sans and serif fonts whose rendered glyphs best match a
scanned document, keeps a worker pool's font state in sync with that choice,
and re-validates size-optimized fonts as OCR data changes.
"""

__version__ = "0.1.0"

from .app import FontSelectApp

__all__ = ["FontSelectApp"]
