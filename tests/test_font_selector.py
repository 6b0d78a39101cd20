import pytest

from conftest import ScriptedKernel, page_sample
from fontselect.core.font_selector import DefaultFontSelector, pick_minimum
from fontselect.core.worker_sync import WorkerFontSync
from fontselect.registry import FontClass, FontFamily, FontRegistry


def _selector(registry, pool, kernel, word_budget=500):
    return DefaultFontSelector(registry, kernel, WorkerFontSync(pool, registry), word_budget)


@pytest.mark.asyncio
async def test_baseline_wins_exact_tie(registry, pool):
    kernel = ScriptedKernel(metrics={"Carlito": 2.0, "NimbusSans": 2.0})
    change = await _selector(registry, pool, kernel).select(page_sample(2))
    assert registry.raw.sans_default.family is FontFamily.NIMBUS_SANS
    assert change is False


@pytest.mark.asyncio
async def test_no_better_candidate_leaves_registry_unchanged(registry, pool):
    kernel = ScriptedKernel(
        metrics={"Carlito": 5.0, "NimbusSans": 1.0, "NimbusRomNo9L": 1.0}, default_metric=3.0
    )
    sans_before = registry.raw.sans_default
    serif_before = registry.raw.serif_default

    change = await _selector(registry, pool, kernel).select(page_sample(2))

    assert change is False
    assert registry.raw.sans_default is sans_before
    assert registry.raw.serif_default is serif_before


@pytest.mark.asyncio
async def test_better_candidates_are_promoted(opt_registry, pool, workers):
    kernel = ScriptedKernel(
        metrics={
            "Carlito Opt": 1.0,
            "NimbusSans Opt": 2.0,
            "Garamond Opt": 0.5,
            "NimbusRomNo9L Opt": 4.0,
        },
        default_metric=3.0,
    )
    selector = _selector(opt_registry, pool, kernel)

    change = await selector.select(page_sample(1))

    assert change is True
    assert opt_registry.raw.sans_default is opt_registry.raw[FontFamily.CARLITO]
    assert opt_registry.opt.sans_default is opt_registry.opt[FontFamily.CARLITO]
    assert opt_registry.raw.serif_default is opt_registry.raw[FontFamily.GARAMOND]
    assert opt_registry.opt.serif_default is opt_registry.opt[FontFamily.GARAMOND]
    # Workers get the new defaults after selection without a second bundle load.
    for worker in workers:
        assert len(worker.loads) == 1
        assert worker.defaults[-1][1:] == ("Carlito Opt", "Garamond Opt")


@pytest.mark.asyncio
async def test_candidates_are_scored_sequentially_in_declared_order(registry, pool):
    kernel = ScriptedKernel()
    await _selector(registry, pool, kernel).select(page_sample(1))
    assert [name for name, _ in kernel.calls] == [
        "Carlito", "NimbusSans", "Century", "Palatino", "Garamond", "NimbusRomNo9L",
    ]
    assert kernel.registry is registry
    assert kernel.prepared == 1


@pytest.mark.asyncio
async def test_workers_synced_before_and_after_measuring(registry, pool, workers):
    kernel = ScriptedKernel()
    await _selector(registry, pool, kernel).select(page_sample(1))
    for worker in workers:
        assert len(worker.loads) == 1
        assert len(worker.defaults) == 2


@pytest.mark.asyncio
async def test_every_candidate_uses_the_same_budget(registry, pool):
    kernel = ScriptedKernel(word_counts=[30, 30, 30])
    await _selector(registry, pool, kernel, word_budget=40).select(page_sample(3))
    pages_per_family = {}
    for name, index in kernel.calls:
        pages_per_family.setdefault(name, []).append(index)
    assert all(pages == [0, 1] for pages in pages_per_family.values())
    assert len(pages_per_family) == 6


@pytest.mark.asyncio
async def test_selection_without_active_fonts_fails(pool):
    from conftest import build_font_set
    from fontselect.registry import FontVariant

    registry = FontRegistry(build_font_set(FontVariant.RAW))
    with pytest.raises(RuntimeError):
        await _selector(registry, pool, ScriptedKernel()).select(page_sample(1))


def test_first_declared_candidate_wins_non_baseline_tie():
    scores = {
        FontFamily.CENTURY: 1.0,
        FontFamily.PALATINO: 1.0,
        FontFamily.GARAMOND: 1.0,
        FontFamily.NIMBUS_ROM_NO9L: 2.0,
    }
    assert pick_minimum(FontClass.SERIF, scores) is FontFamily.CENTURY


def test_baseline_seeds_the_minimum():
    scores = {
        FontFamily.CENTURY: 1.0,
        FontFamily.PALATINO: 0.5,
        FontFamily.GARAMOND: 0.5,
        FontFamily.NIMBUS_ROM_NO9L: 0.5,
    }
    assert pick_minimum(FontClass.SERIF, scores) is FontFamily.NIMBUS_ROM_NO9L
