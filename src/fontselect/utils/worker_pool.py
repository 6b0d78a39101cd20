# -*- coding: utf-8 -*-
"""
src/fontselect/utils/worker_pool.py

An in-process worker pool. Each `LocalWorker` keeps its own copy of the font
bundles it was sent and the default family names it was told to use, the same
state an out-of-process worker would need to render and compare words.
"""

import logging
from typing import Dict, List, Optional, Protocol, Sequence

from ..registry import FontVariant

logger = logging.getLogger(__name__)

# {family: {"normal" | "italic" | "small_caps": font binary}}
FontBundle = Dict[str, Dict[str, bytes]]


class FontWorker(Protocol):
    async def load_font_bundle(self, bundle: FontBundle, variant: FontVariant) -> None:
        ...

    async def set_active_defaults(
        self, variant: FontVariant, sans_family_name: str, serif_family_name: str
    ) -> None:
        ...


class LocalWorker:
    """
    Attributes:
        worker_id (int): Position of the worker in its pool.
        bundles (Dict[FontVariant, FontBundle]): Font binaries received per variant.
        active_variant (Optional[FontVariant]): Variant named by the last default broadcast.
        sans_family_name / serif_family_name: Current default family names.
    """

    def __init__(self, worker_id: int):
        self.worker_id = worker_id
        self.bundles: Dict[FontVariant, FontBundle] = {}
        self.active_variant: Optional[FontVariant] = None
        self.sans_family_name: Optional[str] = None
        self.serif_family_name: Optional[str] = None

    async def load_font_bundle(self, bundle: FontBundle, variant: FontVariant) -> None:
        self.bundles[variant] = {family: dict(styles) for family, styles in bundle.items()}
        logger.debug(f"Worker {self.worker_id}: loaded {variant.value} bundle ({len(bundle)} families).")

    async def set_active_defaults(
        self, variant: FontVariant, sans_family_name: str, serif_family_name: str
    ) -> None:
        if variant not in self.bundles:
            raise RuntimeError(
                f"Worker {self.worker_id} has no {variant.value} fonts loaded."
            )
        self.active_variant = variant
        self.sans_family_name = sans_family_name
        self.serif_family_name = serif_family_name
        logger.debug(
            f"Worker {self.worker_id}: defaults set to sans={sans_family_name}, serif={serif_family_name}."
        )


class WorkerPool:
    """A fixed set of workers that font sync broadcasts to."""

    def __init__(self, count: int = 2, workers: Optional[Sequence[FontWorker]] = None):
        if workers is not None:
            self.workers: List[FontWorker] = list(workers)
        else:
            if count < 1:
                raise ValueError("A worker pool needs at least one worker.")
            self.workers = [LocalWorker(i) for i in range(count)]
        logger.info(f"Worker pool started with {len(self.workers)} worker(s).")

    def __len__(self) -> int:
        return len(self.workers)
