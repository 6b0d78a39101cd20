# -*- coding: utf-8 -*-
"""
src/fontselect/pages.py

Read-only page data consumed by font evaluation: OCR words with their
bounding boxes, per-page metrics, and the binarized scan of each page.
"""

import asyncio
import inspect
from dataclasses import dataclass, field
from typing import Awaitable, List, Optional, Sequence, Tuple, Union

import numpy as np

from .registry import FontStyle

BinaryImage = Union[np.ndarray, Awaitable[np.ndarray]]


@dataclass(frozen=True)
class Word:
    text: str
    # (left, top, right, bottom) in page pixels
    bbox: Tuple[int, int, int, int]
    style: FontStyle = FontStyle.NORMAL


@dataclass(frozen=True)
class Page:
    words: Tuple[Word, ...] = ()


@dataclass(frozen=True)
class PageMetrics:
    width: int
    height: int
    angle: float = 0.0


@dataclass
class PageEntry:
    page: Page
    binary_image: BinaryImage
    rotated: bool
    metrics: PageMetrics


@dataclass
class PageSample:
    """
    An ordered set of pages. Evaluation always visits them in this order.

    Entries are never modified; resolved images are cached on the sample.
    """

    entries: List[PageEntry] = field(default_factory=list)
    _resolved: Optional[List[np.ndarray]] = field(default=None, init=False, repr=False)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    async def resolve_images(self) -> List[np.ndarray]:
        """Awaits every pending binarized image and returns them in page order."""
        # Awaitables can only be awaited once.
        if self._resolved is not None:
            return list(self._resolved)

        async def _resolve(image: BinaryImage) -> np.ndarray:
            if inspect.isawaitable(image):
                return await image
            return image

        images = await asyncio.gather(*(_resolve(entry.binary_image) for entry in self.entries))
        self._resolved = list(images)
        return list(self._resolved)


def make_sample(
    pages: Sequence[Page],
    binary_images: Sequence[BinaryImage],
    rotated: Sequence[bool],
    metrics: Sequence[PageMetrics],
) -> PageSample:
    if not (len(pages) == len(binary_images) == len(rotated) == len(metrics)):
        raise ValueError("Pages, images, rotation flags and metrics must have the same length.")
    return PageSample([
        PageEntry(page, image, flag, page_metrics)
        for page, image, flag, page_metrics in zip(pages, binary_images, rotated, metrics)
    ])
