# -*- coding: utf-8 -*-
"""
The Core Processing Package for FontSelect.

- `metric_aggregator`: Scores one font candidate over a word-budgeted page sample.
- `worker_sync`: Mirrors the registry's active fonts onto the worker pool.
- `font_selector`: Picks the best sans and serif defaults.
- `font_validator`: Re-checks optimized defaults and falls back to raw fonts.
- `comparison_kernel`: Renders words in a font and scores them against the scan.
- `image_processor`: Binarizes scans and loads page samples.
"""

from .font_selector import DefaultFontSelector
from .font_validator import OptimizedFontValidator
from .metric_aggregator import evaluate_page_fonts
from .worker_sync import WorkerFontSync

__all__ = [
    "DefaultFontSelector",
    "OptimizedFontValidator",
    "WorkerFontSync",
    "evaluate_page_fonts",
]
