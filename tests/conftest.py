import os
import tempfile

import numpy as np
import pytest

# Keep config.ini out of the real home directory; must run before fontselect is imported.
os.environ.setdefault("FONTSELECT_HOME", tempfile.mkdtemp(prefix="fontselect-test-"))

from fontselect.pages import Page, PageMetrics, Word, make_sample
from fontselect.registry import (
    FontFaces,
    FontFamily,
    FontRegistry,
    FontSet,
    FontStyleDescriptor,
    FontVariant,
    renderer_family_name,
)
from fontselect.utils.worker_pool import WorkerPool


def build_font_set(variant):
    families = {}
    for family in FontFamily:
        name = renderer_family_name(family, variant)
        descriptors = [
            FontStyleDescriptor(src=f"{name}-{style}".encode(), family_name=name, variant=variant)
            for style in ("normal", "italic", "small_caps")
        ]
        families[family] = FontFaces(family, *descriptors)
    return FontSet(variant, families)


class ScriptedKernel:
    """Comparison kernel returning fixed per-family, per-page metrics."""

    def __init__(self, metrics=None, word_counts=None, default_metric=1.0, fail_on=None):
        self.metrics = metrics or {}
        self.word_counts = word_counts
        self.default_metric = default_metric
        self.fail_on = fail_on
        self.calls = []
        self.registry = None
        self.prepared = 0

    def set_active_font_set(self, registry):
        self.registry = registry

    async def prepare_rendering_backend(self):
        self.prepared += 1

    async def score_candidate(self, family_name, page, binary_image, rotated, metrics):
        index = page.words[0].bbox[0] if page.words else 0
        self.calls.append((family_name, index))
        if self.fail_on == (family_name, index):
            raise ValueError(f"malformed page {index}")
        value = self.metrics.get(family_name, self.default_metric)
        if isinstance(value, (list, tuple)):
            value = value[index]
        words = self.word_counts[index] if self.word_counts is not None else len(page.words)
        return value, words


class RecordingWorker:
    def __init__(self, fail_loads=0):
        self.loads = []
        self.defaults = []
        self.fail_loads = fail_loads

    async def load_font_bundle(self, bundle, variant):
        if self.fail_loads:
            self.fail_loads -= 1
            raise ConnectionError("worker unavailable")
        self.loads.append((variant, bundle))

    async def set_active_defaults(self, variant, sans_family_name, serif_family_name):
        self.defaults.append((variant, sans_family_name, serif_family_name))


class RecordingToggle:
    def __init__(self, registry, enabled=True):
        self.registry = registry
        self.enabled = enabled
        self.history = []

    async def set_optimized_fonts_enabled(self, enabled):
        self.history.append(enabled)
        self.enabled = enabled
        self.registry.activate(optimized=enabled)


def page_sample(page_count):
    """Pages whose first word's left edge encodes the page index."""
    pages = [Page(words=(Word("word", (i, 0, i + 1, 1)),)) for i in range(page_count)]
    images = [np.zeros((2, 2), dtype=np.uint8) for _ in range(page_count)]
    return make_sample(pages, images, [True] * page_count, [PageMetrics(2, 2)] * page_count)


@pytest.fixture
def registry():
    reg = FontRegistry(build_font_set(FontVariant.RAW))
    reg.activate(optimized=False)
    return reg


@pytest.fixture
def opt_registry():
    reg = FontRegistry(build_font_set(FontVariant.RAW), build_font_set(FontVariant.OPTIMIZED))
    reg.activate(optimized=True)
    return reg


@pytest.fixture
def workers():
    return [RecordingWorker(), RecordingWorker()]


@pytest.fixture
def pool(workers):
    return WorkerPool(workers=workers)
