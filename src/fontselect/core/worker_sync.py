# -*- coding: utf-8 -*-
"""
src/fontselect/core/worker_sync.py

Keeps every worker's font state in line with the registry's active font set.

Font binaries are large, so each (variant, revision) is broadcast to the
workers once. Callers that arrive while a broadcast is still running wait on
the same pending load rather than starting another one. The active default
family names are cheap and are broadcast on every sync.
"""

import asyncio
import logging
from typing import Dict, Tuple

from ..registry import FontFamily, FontRegistry, FontSet, FontVariant
from ..utils.worker_pool import FontBundle

logger = logging.getLogger(__name__)

LoadKey = Tuple[FontVariant, int]


def build_font_bundle(font_set: FontSet) -> FontBundle:
    """Collects the six-family, three-style binaries of a font set."""
    return {
        faces.family.value: {
            "normal": faces.normal.src,
            "italic": faces.italic.src,
            "small_caps": faces.small_caps.src,
        }
        for faces in font_set
    }


class WorkerFontSync:
    """
    Broadcasts font state from a `FontRegistry` to a worker pool.

    Args:
        pool: Any object exposing a `workers` sequence of font workers.
        registry (FontRegistry): The registry whose active set is mirrored.
    """

    def __init__(self, pool, registry: FontRegistry):
        self.pool = pool
        self.registry = registry
        self._loads: Dict[LoadKey, asyncio.Future] = {}

    def _load_succeeded(self, variant: FontVariant) -> bool:
        load = self._loads.get((variant, self.registry.revision(variant)))
        return load is not None and load.done() and not load.cancelled() and load.exception() is None

    @property
    def loaded_raw(self) -> bool:
        return self._load_succeeded(FontVariant.RAW)

    @property
    def loaded_opt(self) -> bool:
        return self._load_succeeded(FontVariant.OPTIMIZED)

    async def _broadcast_bundle(self, key: LoadKey, font_set: FontSet):
        variant = key[0]
        bundle = build_font_bundle(font_set)
        logger.info(
            f"Loading {variant.value} fonts (revision {key[1]}) on {len(self.pool.workers)} worker(s)."
        )
        try:
            await asyncio.gather(
                *(worker.load_font_bundle(bundle, variant) for worker in self.pool.workers)
            )
        except BaseException:
            # Forget the failed load so the next sync re-broadcasts in full.
            self._loads.pop(key, None)
            raise

    async def sync(self):
        font_set = self.registry.active
        if font_set is None:
            return

        variant = font_set[FontFamily.CARLITO].normal.variant
        key = (variant, self.registry.revision(variant))

        load = self._loads.get(key)
        if load is None:
            load = asyncio.ensure_future(self._broadcast_bundle(key, font_set))
            self._loads[key] = load
        else:
            logger.debug(f"{variant.value} fonts (revision {key[1]}) already loaded or loading.")
        await load

        sans_name = font_set.sans_default.normal.family_name
        serif_name = font_set.serif_default.normal.family_name
        await asyncio.gather(
            *(worker.set_active_defaults(variant, sans_name, serif_name) for worker in self.pool.workers)
        )
        logger.debug(f"Workers set to sans={sans_name}, serif={serif_name} ({variant.value}).")
