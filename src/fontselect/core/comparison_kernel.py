# -*- coding: utf-8 -*-
"""
src/fontselect/core/comparison_kernel.py

The comparison kernel scores how well a font reproduces the words on one
scanned page. Font selection only relies on the `ComparisonKernel` protocol.
`PixelComparisonKernel` is the in-process implementation: it renders each OCR
word in the candidate font and counts the pixels that disagree with the
binarized scan.
"""

import asyncio
import io
import logging
from typing import Dict, Optional, Protocol, Tuple

import cv2
import numpy as np
from PIL import Image, ImageDraw, ImageFont

from ..pages import Page, PageMetrics, Word
from ..registry import FontRegistry, FontStyle, FontStyleDescriptor

logger = logging.getLogger(__name__)


class ComparisonKernel(Protocol):
    def set_active_font_set(self, registry: FontRegistry) -> None:
        ...

    async def prepare_rendering_backend(self) -> None:
        ...

    async def score_candidate(
        self,
        family_name: str,
        page: Page,
        binary_image: np.ndarray,
        rotated: bool,
        metrics: PageMetrics,
    ) -> Tuple[float, int]:
        ...


def deskew(binary_image: np.ndarray, angle: float) -> np.ndarray:
    """Rotates a page about its center so OCR coordinates line up with the pixels."""
    h, w = binary_image.shape[:2]
    matrix = cv2.getRotationMatrix2D((w / 2, h / 2), angle, 1.0)
    return cv2.warpAffine(binary_image, matrix, (w, h), flags=cv2.INTER_NEAREST, borderValue=0)


def render_word(font: ImageFont.FreeTypeFont, text: str) -> Optional[np.ndarray]:
    """
    Renders text white-on-black, tightly cropped to its ink.

    Returns None when the text has no visible glyphs.
    """
    left, top, right, bottom = font.getbbox(text)
    width = right - left
    height = bottom - top
    if width <= 0 or height <= 0:
        return None

    image = Image.new("L", (width, height), color=0)
    draw = ImageDraw.Draw(image)
    # Drawing at (-left, -top) moves the ink's bounding box to the origin.
    draw.text((-left, -top), text, font=font, fill=255)
    return np.array(image)


def word_mismatch(rendered: np.ndarray, crop: np.ndarray) -> float:
    """Fraction of pixels where the rendering and the scan disagree, in [0, 1]."""
    h, w = crop.shape[:2]
    resized = cv2.resize(rendered, (w, h), interpolation=cv2.INTER_AREA)
    rendered_ink = resized >= 128
    scanned_ink = crop >= 128
    return float(np.count_nonzero(rendered_ink != scanned_ink)) / float(w * h)


class PixelComparisonKernel:
    """
    Scores a font by rendering every OCR word on a page and comparing the
    rendering with the word's crop of the binarized scan.

    The word count returned for a page is the number of OCR words on it,
    independent of the font, so every candidate sees the same budget cut-off.
    """

    def __init__(self):
        self.registry: Optional[FontRegistry] = None
        self._fonts: Dict[Tuple[FontStyleDescriptor, int], ImageFont.FreeTypeFont] = {}

    def set_active_font_set(self, registry: FontRegistry) -> None:
        self.registry = registry

    async def prepare_rendering_backend(self) -> None:
        # Font objects are bound to descriptor bytes, which may have changed.
        self._fonts.clear()
        logger.debug("Rendering backend prepared.")

    def _font(self, descriptor: FontStyleDescriptor, size: int) -> ImageFont.FreeTypeFont:
        key = (descriptor, size)
        font = self._fonts.get(key)
        if font is None:
            font = ImageFont.truetype(io.BytesIO(descriptor.src), size)
            self._fonts[key] = font
        return font

    def _score_word(self, faces, word: Word, binary_image: np.ndarray) -> float:
        left, top, right, bottom = word.bbox
        h, w = binary_image.shape[:2]
        if left < 0 or top < 0 or right > w or bottom > h or right <= left or bottom <= top:
            raise ValueError(f"Word '{word.text}' box {word.bbox} lies outside the {w}x{h} page.")

        crop = binary_image[top:bottom, left:right]
        text = word.text.upper() if word.style is FontStyle.SMALL_CAPS else word.text
        font = self._font(faces.style(word.style), max(bottom - top, 1))
        rendered = render_word(font, text)
        if rendered is None:
            # Whitespace-only words: any ink in the crop counts against the font.
            return float(np.count_nonzero(crop >= 128)) / float(crop.size)
        return word_mismatch(rendered, crop)

    def _score_page(
        self,
        family_name: str,
        page: Page,
        binary_image: np.ndarray,
        rotated: bool,
        metrics: PageMetrics,
    ) -> Tuple[float, int]:
        if self.registry is None:
            raise RuntimeError("set_active_font_set must be called before scoring.")
        faces = self.registry.find_faces(family_name)
        if faces is None:
            raise ValueError(f"Unknown font family '{family_name}'.")
        if binary_image is None or binary_image.ndim != 2:
            raise ValueError("Binary page image must be a single-channel array.")

        if not rotated and metrics.angle:
            binary_image = deskew(binary_image, metrics.angle)

        metric_total = 0.0
        for word in page.words:
            metric_total += self._score_word(faces, word, binary_image)
        return metric_total, len(page.words)

    async def score_candidate(
        self,
        family_name: str,
        page: Page,
        binary_image: np.ndarray,
        rotated: bool,
        metrics: PageMetrics,
    ) -> Tuple[float, int]:
        return await asyncio.to_thread(
            self._score_page, family_name, page, binary_image, rotated, metrics
        )
