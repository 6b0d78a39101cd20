# -*- coding: utf-8 -*-
"""
src/fontselect/utils/optimization_toggle.py

The registry-wide switch between raw and size-optimized fonts.
"""

import logging
from typing import Optional

from ..registry import FontRegistry

logger = logging.getLogger(__name__)


class FontOptimizationToggle:
    """
    Points the registry's active view at the optimized or raw font set and
    re-syncs the workers so they render with the same set.

    Attributes:
        registry (FontRegistry): The registry being switched.
        font_sync (Optional[WorkerFontSync]): Sync run after every switch, if given.
    """

    def __init__(self, registry: FontRegistry, font_sync=None):
        self.registry = registry
        self.font_sync = font_sync
        self._enabled: Optional[bool] = None

    @property
    def enabled(self) -> bool:
        if self._enabled is None:
            return self.registry.optimized_active
        return self._enabled

    async def set_optimized_fonts_enabled(self, enabled: bool) -> None:
        if enabled and self.registry.opt is None:
            logger.warning("Optimized fonts requested, but no optimized font set is installed.")
        self._enabled = enabled
        self.registry.activate(optimized=enabled)
        logger.debug(f"Optimized fonts {'enabled' if enabled else 'disabled'}.")
        if self.font_sync is not None:
            await self.font_sync.sync()
