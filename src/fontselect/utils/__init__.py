# -*- coding: utf-8 -*-
"""
The Utilities Package for FontSelect.

Default implementations of the collaborators the core talks to:

- worker_pool: In-process font workers and the pool that holds them.
- optimization_toggle: The registry-wide raw/optimized font switch.
"""

from .optimization_toggle import FontOptimizationToggle
from .worker_pool import LocalWorker, WorkerPool

__all__ = [
    "FontOptimizationToggle",
    "LocalWorker",
    "WorkerPool",
]
