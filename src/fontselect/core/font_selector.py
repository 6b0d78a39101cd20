# -*- coding: utf-8 -*-
"""
src/fontselect/core/font_selector.py

This module defines the DefaultFontSelector class, which scores every sans and
serif candidate against a document's scanned pages and promotes the
best-matching families to the registry's default aliases.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence

import numpy as np

from ..pages import PageSample
from ..registry import BASELINES, CANDIDATES, FontClass, FontFamily, FontRegistry, FontSet
from .comparison_kernel import ComparisonKernel
from .metric_aggregator import DEFAULT_WORD_BUDGET, evaluate_page_fonts
from .worker_sync import WorkerFontSync

logger = logging.getLogger(__name__)


@dataclass
class CandidateRanking:
    """Scores of one font class's candidates and the family that won."""

    font_class: FontClass
    scores: Dict[FontFamily, float]
    winner: FontFamily

    @property
    def best_score(self) -> float:
        return self.scores[self.winner]

    @property
    def baseline_kept(self) -> bool:
        return self.winner is BASELINES[self.font_class]


def pick_minimum(font_class: FontClass, scores: Dict[FontFamily, float]) -> FontFamily:
    """
    Returns the candidate with the lowest score.

    The baseline seeds the minimum and only a strictly lower score replaces
    it, so the baseline wins every tie. Between other tied candidates the one
    declared first wins.
    """
    winner = BASELINES[font_class]
    minimum = scores[winner]
    for family in CANDIDATES[font_class]:
        if scores[family] < minimum:
            minimum = scores[family]
            winner = family
    return winner


async def rank_candidates(
    font_class: FontClass,
    kernel: ComparisonKernel,
    font_set: FontSet,
    sample: PageSample,
    binary_images: Sequence[np.ndarray],
    word_budget: int = DEFAULT_WORD_BUDGET,
) -> CandidateRanking:
    """Scores each candidate of a class one after the other, in declared order."""
    scores: Dict[FontFamily, float] = {}
    for family in CANDIDATES[font_class]:
        scores[family] = await evaluate_page_fonts(
            kernel, font_set[family], sample, binary_images, word_budget
        )
        logger.debug(f"{family.value} metric: {scores[family]}")
    return CandidateRanking(font_class, scores, pick_minimum(font_class, scores))


class DefaultFontSelector:
    """
    Chooses the default sans and serif families for a document.

    Args:
        registry (FontRegistry): Shared registry whose aliases get updated.
        kernel (ComparisonKernel): Scores a family against one page.
        font_sync (WorkerFontSync): Mirrors the registry onto the workers.
        word_budget (int): Words examined per candidate before its score is final.
    """

    def __init__(
        self,
        registry: FontRegistry,
        kernel: ComparisonKernel,
        font_sync: WorkerFontSync,
        word_budget: int = DEFAULT_WORD_BUDGET,
    ):
        self.registry = registry
        self.kernel = kernel
        self.font_sync = font_sync
        self.word_budget = word_budget
        self.rankings: List[CandidateRanking] = []

    def _promote(self, ranking: CandidateRanking) -> bool:
        if ranking.baseline_kept:
            return False
        self.registry.raw.set_default(ranking.font_class, self.registry.raw[ranking.winner])
        if self.registry.opt is not None:
            self.registry.opt.set_default(ranking.font_class, self.registry.opt[ranking.winner])
        logger.info(f"{ranking.font_class.value} default set to {ranking.winner.value}.")
        return True

    async def select(self, sample: PageSample) -> bool:
        """
        Runs selection over `sample`.

        Returns:
            True if either default alias now points at a non-baseline family.
        """
        binary_images = await sample.resolve_images()

        await self.font_sync.sync()
        font_set = self.registry.require_active()
        self.kernel.set_active_font_set(self.registry)
        await self.kernel.prepare_rendering_backend()

        self.rankings = []
        for font_class in (FontClass.SANS, FontClass.SERIF):
            self.rankings.append(
                await rank_candidates(
                    font_class, self.kernel, font_set, sample, binary_images, self.word_budget
                )
            )

        change = False
        for ranking in self.rankings:
            change = self._promote(ranking) or change

        await self.font_sync.sync()
        return change
