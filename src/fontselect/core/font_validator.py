# -*- coding: utf-8 -*-
"""
src/fontselect/core/font_validator.py

Re-checks optimized default fonts once the OCR data has changed. An optimized
font is smaller than its raw counterpart but can render slightly differently;
when it now matches the scan worse than the best raw candidate, the class
falls back to raw and optimized fonts stay switched off.
"""

import logging
from typing import Dict, Protocol

from ..pages import PageSample
from ..registry import FontClass, FontRegistry
from .comparison_kernel import ComparisonKernel
from .font_selector import CandidateRanking, rank_candidates
from .metric_aggregator import DEFAULT_WORD_BUDGET, evaluate_page_fonts
from .worker_sync import WorkerFontSync

logger = logging.getLogger(__name__)


class OptimizationToggle(Protocol):
    @property
    def enabled(self) -> bool:
        ...

    async def set_optimized_fonts_enabled(self, enabled: bool) -> None:
        ...


class OptimizedFontValidator:
    """
    Both classes use the same rule: a class falls back to raw when the score
    of its previously active default is higher than the best raw score.
    """

    def __init__(
        self,
        registry: FontRegistry,
        kernel: ComparisonKernel,
        font_sync: WorkerFontSync,
        toggle: OptimizationToggle,
        word_budget: int = DEFAULT_WORD_BUDGET,
    ):
        self.registry = registry
        self.kernel = kernel
        self.font_sync = font_sync
        self.toggle = toggle
        self.word_budget = word_budget
        self.previous_metrics: Dict[FontClass, float] = {}
        self.rankings: Dict[FontClass, CandidateRanking] = {}

    def _fall_back(self, ranking: CandidateRanking):
        raw_faces = self.registry.raw[ranking.winner]
        self.registry.raw.set_default(ranking.font_class, raw_faces)
        # The optimized slot for this class is abandoned in favor of the raw font.
        if self.registry.opt is not None:
            self.registry.opt.set_default(ranking.font_class, raw_faces)
        logger.info(
            f"Optimized {ranking.font_class.value} default regressed "
            f"({self.previous_metrics[ranking.font_class]:.4f} > {ranking.best_score:.4f}); "
            f"falling back to raw {ranking.winner.value}."
        )

    async def validate(self, sample: PageSample) -> bool:
        """
        Returns:
            True if either class fell back to a raw font, in which case
            optimized fonts are left disabled.
        """
        binary_images = await sample.resolve_images()

        # The active OCR data may have changed since selection, so the
        # currently active defaults are scored again.
        active = self.registry.require_active()
        self.kernel.set_active_font_set(self.registry)
        self.previous_metrics = {
            FontClass.SANS: await evaluate_page_fonts(
                self.kernel, active.sans_default, sample, binary_images, self.word_budget
            ),
            FontClass.SERIF: await evaluate_page_fonts(
                self.kernel, active.serif_default, sample, binary_images, self.word_budget
            ),
        }
        logger.debug(f"Active SansDefault metric: {self.previous_metrics[FontClass.SANS]}")
        logger.debug(f"Active SerifDefault metric: {self.previous_metrics[FontClass.SERIF]}")

        was_enabled = self.toggle.enabled
        await self.toggle.set_optimized_fonts_enabled(False)

        raw_set = self.registry.require_active()
        change = False
        self.rankings = {}
        for font_class in (FontClass.SANS, FontClass.SERIF):
            ranking = await rank_candidates(
                font_class, self.kernel, raw_set, sample, binary_images, self.word_budget
            )
            self.rankings[font_class] = ranking
            if self.previous_metrics[font_class] > ranking.best_score:
                self._fall_back(ranking)
                change = True

        if not change:
            await self.toggle.set_optimized_fonts_enabled(was_enabled)
            logger.info("Optimized fonts validated; no regression found.")
        else:
            # Workers still hold the defaults broadcast when optimization was switched off.
            await self.font_sync.sync()
        return change
