# -*- coding: utf-8 -*-
"""
src/fontselect/core/metric_aggregator.py

Scores a single font candidate over a word-budgeted sample of pages.
"""

import logging
from typing import Sequence

import numpy as np

from ..pages import PageSample
from ..registry import FontFaces
from .comparison_kernel import ComparisonKernel

logger = logging.getLogger(__name__)

DEFAULT_WORD_BUDGET = 500


async def evaluate_page_fonts(
    kernel: ComparisonKernel,
    faces: FontFaces,
    sample: PageSample,
    binary_images: Sequence[np.ndarray],
    n: int = DEFAULT_WORD_BUDGET,
) -> float:
    """
    Sums the kernel's mismatch metric for `faces` over the pages of `sample`.

    Pages are visited in order. The budget is checked before each page, so
    the page that pushes the word count past `n` is still included, and a
    non-empty sample always contributes at least one page. The cut-off depends
    only on OCR word counts, so scores are comparable between candidates
    evaluated on the same sample and budget.

    Returns:
        The absolute (unnormalized) metric sum; lower is better.
    """
    metric_total = 0.0
    words_total = 0
    pages_visited = 0

    for entry, binary_image in zip(sample, binary_images):
        if words_total > n:
            break

        metric, word_count = await kernel.score_candidate(
            faces.normal.family_name,
            entry.page,
            binary_image,
            entry.rotated,
            entry.metrics,
        )
        metric_total += metric
        words_total += word_count
        pages_visited += 1

    logger.debug(
        f"{faces.normal.family_name}: metric {metric_total:.4f} over "
        f"{words_total} words on {pages_visited} page(s)."
    )
    return metric_total
