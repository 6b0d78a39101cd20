# -*- coding: utf-8 -*-
"""
src/fontselect/core/image_processor.py

Turns scanned page images into the binarized arrays the comparison kernel
scores against, and builds page samples from page descriptor files.

A page descriptor is a JSON document:

    {
        "image": "page-001.png",
        "rotated": false,
        "angle": 0.4,
        "words": [{"text": "Hello", "bbox": [10, 12, 80, 40], "style": "normal"}]
    }

Relative image paths are resolved against the descriptor's directory.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Iterable, List, Tuple

import cv2
import numpy as np

from ..pages import Page, PageEntry, PageMetrics, PageSample, Word
from ..registry import FontStyle

logger = logging.getLogger(__name__)

# Parameters for cv2.adaptiveThreshold.
# Block size must be an odd number. It's the size of the pixel neighborhood
# used to calculate a threshold value.
ADAPTIVE_THRESH_BLOCK_SIZE = 15
# A constant subtracted from the mean or weighted mean.
ADAPTIVE_THRESH_C = 7


def binarize_array(image: np.ndarray) -> np.ndarray:
    """
    Binarizes a BGR, BGRA or grayscale image.

    Text becomes white (255) and the background black (0).
    """
    if image is None or image.size == 0:
        raise ValueError("Cannot binarize an empty image.")

    if image.ndim == 3 and image.shape[2] == 4:
        gray = cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    elif image.ndim == 3:
        gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    else:
        gray = image

    # Adaptive thresholding handles uneven scan illumination.
    return cv2.adaptiveThreshold(
        gray,
        255,
        cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
        cv2.THRESH_BINARY_INV,
        ADAPTIVE_THRESH_BLOCK_SIZE,
        ADAPTIVE_THRESH_C
    )


def binarize_image(path: Path) -> np.ndarray:
    """Reads a scan from disk and binarizes it."""
    image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise FileNotFoundError(f"Could not read page image '{path}'.")
    logger.debug(f"Binarizing '{path}' ({image.shape[1]}x{image.shape[0]}).")
    return binarize_array(image)


def _parse_word(raw: dict) -> Word:
    try:
        text = str(raw["text"])
        left, top, right, bottom = (int(v) for v in raw["bbox"])
        style = FontStyle(raw.get("style", FontStyle.NORMAL.value))
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Malformed word entry {raw!r}: {e}") from e
    return Word(text=text, bbox=(left, top, right, bottom), style=style)


def _number(data: dict, key: str, default, descriptor_path: Path):
    value = data.get(key, default)
    # bool is an int subclass, but `"width": true` is not a width.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(
            f"Page descriptor '{descriptor_path}': '{key}' must be a number, got {value!r}."
        )
    return value


def _parse_descriptor(descriptor_path: Path) -> Tuple[Page, Path, bool, PageMetrics]:
    with open(descriptor_path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Page descriptor '{descriptor_path}' is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Page descriptor '{descriptor_path}' must be a JSON object.")
    if not isinstance(data.get("image"), str):
        raise ValueError(f"Page descriptor '{descriptor_path}' has no 'image' path.")

    rotated = data.get("rotated", False)
    if not isinstance(rotated, bool):
        raise ValueError(
            f"Page descriptor '{descriptor_path}': 'rotated' must be true or false, got {rotated!r}."
        )

    raw_words = data.get("words", [])
    if not isinstance(raw_words, list):
        raise ValueError(f"Page descriptor '{descriptor_path}': 'words' must be a list.")
    try:
        words = tuple(_parse_word(raw) for raw in raw_words)
    except ValueError as e:
        raise ValueError(f"Page descriptor '{descriptor_path}': {e}") from e

    metrics = PageMetrics(
        width=int(_number(data, "width", 0, descriptor_path)),
        height=int(_number(data, "height", 0, descriptor_path)),
        angle=float(_number(data, "angle", 0.0, descriptor_path)),
    )

    image_path = Path(data["image"])
    if not image_path.is_absolute():
        image_path = descriptor_path.parent / image_path
    return Page(words=words), image_path, rotated, metrics


def _page_entry(page: Page, image_path: Path, rotated: bool, metrics: PageMetrics) -> PageEntry:
    # The binarization coroutine is only created once its descriptor parsed cleanly,
    # so a malformed page never leaves an un-awaited coroutine behind.
    return PageEntry(
        page=page,
        binary_image=asyncio.to_thread(binarize_image, image_path),
        rotated=rotated,
        metrics=metrics,
    )


def load_page_entry(descriptor_path: Path) -> PageEntry:
    """
    Parses one page descriptor. Binarization is started lazily: the entry's
    image is a coroutine that runs `binarize_image` in a worker thread.

    Raises:
        ValueError: If the descriptor is not valid JSON or a field has the wrong type.
    """
    return _page_entry(*_parse_descriptor(Path(descriptor_path)))


def load_page_sample(descriptor_paths: Iterable[Path]) -> PageSample:
    """Builds a sample from descriptor files, keeping the given order."""
    parsed = [_parse_descriptor(Path(path)) for path in descriptor_paths]
    entries: List[PageEntry] = [_page_entry(*fields) for fields in parsed]
    logger.info(f"Loaded {len(entries)} page(s) with {sum(len(e.page.words) for e in entries)} words.")
    return PageSample(entries)
