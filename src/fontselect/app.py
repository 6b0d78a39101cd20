# -*- coding: utf-8 -*-
"""
src/fontselect/app.py

Application controller for FontSelect.

`FontSelectApp` wires the pieces together: it loads the raw (and optional
optimized) font sets, starts the worker pool, and exposes the two entry
points, default font selection and optimized font validation.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

from .config import Config, config as default_config
from .core.comparison_kernel import ComparisonKernel, PixelComparisonKernel
from .core.font_selector import DefaultFontSelector
from .core.font_validator import OptimizedFontValidator
from .core.image_processor import load_page_sample
from .core.worker_sync import WorkerFontSync
from .pages import PageSample
from .registry import FontClass, FontRegistry, FontVariant, load_font_set
from .utils.optimization_toggle import FontOptimizationToggle
from .utils.worker_pool import WorkerPool

logger = logging.getLogger(__name__)


class FontSelectApp:
    """
    The main application controller.
    """

    def __init__(
        self,
        registry: FontRegistry,
        pool: WorkerPool,
        kernel: Optional[ComparisonKernel] = None,
        word_budget: int = 500,
    ):
        self.registry = registry
        self.pool = pool
        self.kernel = kernel or PixelComparisonKernel()
        self.font_sync = WorkerFontSync(pool, registry)
        self.toggle = FontOptimizationToggle(registry, self.font_sync)
        self.selector = DefaultFontSelector(registry, self.kernel, self.font_sync, word_budget)
        self.validator = OptimizedFontValidator(
            registry, self.kernel, self.font_sync, self.toggle, word_budget
        )

    @classmethod
    def from_config(cls, cfg: Optional[Config] = None) -> "FontSelectApp":
        """Loads fonts from the configured directories and activates them."""
        cfg = cfg or default_config
        if cfg.raw_font_dir is None:
            raise ValueError("No raw font directory is configured.")

        raw = load_font_set(cfg.raw_font_dir, FontVariant.RAW)
        opt = load_font_set(cfg.opt_font_dir, FontVariant.OPTIMIZED) if cfg.opt_font_dir else None
        registry = FontRegistry(raw, opt)
        registry.activate(optimized=cfg.use_optimized)

        return cls(registry, WorkerPool(cfg.worker_count), word_budget=cfg.word_budget)

    def default_family_names(self) -> dict:
        active = self.registry.require_active()
        return {
            FontClass.SANS.value: active.sans_default.normal.family_name,
            FontClass.SERIF.value: active.serif_default.normal.family_name,
        }

    async def select_default_fonts(self, sample: PageSample) -> bool:
        change = await self.selector.select(sample)
        logger.info(f"Default fonts: {self.default_family_names()} (changed: {change})")
        return change

    async def validate_optimized_fonts(self, sample: PageSample) -> bool:
        if self.registry.opt is None:
            logger.warning("No optimized font set installed; skipping validation.")
            return False
        change = await self.validator.validate(sample)
        logger.info(
            f"Optimized fonts {'disabled' if change else 'kept'}; "
            f"defaults: {self.default_family_names()}"
        )
        return change

    async def run(self, page_paths: Iterable[Path], validate: bool = False) -> bool:
        """Selects default fonts for the given pages, then optionally validates optimized fonts."""
        page_paths = list(page_paths)
        change = await self.select_default_fonts(load_page_sample(page_paths))
        if validate and self.registry.opt is not None:
            was_enabled = self.toggle.enabled
            await self.toggle.set_optimized_fonts_enabled(True)
            # Each sample's images are awaitables that can only be resolved once.
            regressed = await self.validate_optimized_fonts(load_page_sample(page_paths))
            if not regressed and not was_enabled:
                # Validation passed, but the configured setting still has optimization off.
                await self.toggle.set_optimized_fonts_enabled(False)
            change = regressed or change
        return change
