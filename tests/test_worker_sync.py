import asyncio

import pytest

from conftest import RecordingWorker, build_font_set
from fontselect.core.worker_sync import WorkerFontSync, build_font_bundle
from fontselect.registry import FontFamily, FontRegistry, FontVariant
from fontselect.utils.worker_pool import LocalWorker, WorkerPool


@pytest.mark.asyncio
async def test_no_active_font_set_is_a_no_op(workers, pool):
    registry = FontRegistry(build_font_set(FontVariant.RAW))
    await WorkerFontSync(pool, registry).sync()
    assert all(w.loads == [] and w.defaults == [] for w in workers)


@pytest.mark.asyncio
async def test_first_sync_loads_bundle_and_defaults(registry, workers, pool):
    sync = WorkerFontSync(pool, registry)
    assert not sync.loaded_raw

    await sync.sync()

    assert sync.loaded_raw
    assert not sync.loaded_opt
    for worker in workers:
        assert len(worker.loads) == 1
        variant, bundle = worker.loads[0]
        assert variant is FontVariant.RAW
        assert set(bundle) == {family.value for family in FontFamily}
        assert set(bundle["Carlito"]) == {"normal", "italic", "small_caps"}
        assert worker.defaults == [(FontVariant.RAW, "NimbusSans", "NimbusRomNo9L")]


@pytest.mark.asyncio
async def test_second_sync_only_broadcasts_defaults(registry, workers, pool):
    sync = WorkerFontSync(pool, registry)
    await sync.sync()
    await sync.sync()
    for worker in workers:
        assert len(worker.loads) == 1
        assert len(worker.defaults) == 2


@pytest.mark.asyncio
async def test_changed_default_is_broadcast_without_reload(registry, workers, pool):
    sync = WorkerFontSync(pool, registry)
    await sync.sync()
    registry.raw.sans_default = registry.raw[FontFamily.CARLITO]
    await sync.sync()
    for worker in workers:
        assert len(worker.loads) == 1
        assert worker.defaults[-1] == (FontVariant.RAW, "Carlito", "NimbusRomNo9L")


@pytest.mark.asyncio
async def test_switching_variant_loads_the_other_bundle(opt_registry, workers, pool):
    sync = WorkerFontSync(pool, opt_registry)
    await sync.sync()
    opt_registry.activate(optimized=False)
    await sync.sync()
    opt_registry.activate(optimized=True)
    await sync.sync()

    assert sync.loaded_raw and sync.loaded_opt
    for worker in workers:
        assert [variant for variant, _ in worker.loads] == [FontVariant.OPTIMIZED, FontVariant.RAW]
        assert worker.defaults[0] == (FontVariant.OPTIMIZED, "NimbusSans Opt", "NimbusRomNo9L Opt")


@pytest.mark.asyncio
async def test_installing_new_optimized_fonts_reloads(opt_registry, workers, pool):
    sync = WorkerFontSync(pool, opt_registry)
    await sync.sync()
    opt_registry.install(build_font_set(FontVariant.OPTIMIZED))
    assert not sync.loaded_opt
    await sync.sync()
    for worker in workers:
        assert len(worker.loads) == 2


@pytest.mark.asyncio
async def test_failed_broadcast_is_retried_in_full(registry):
    workers = [RecordingWorker(), RecordingWorker(fail_loads=1)]
    sync = WorkerFontSync(WorkerPool(workers=workers), registry)

    with pytest.raises(ConnectionError):
        await sync.sync()
    assert not sync.loaded_raw
    assert workers[0].defaults == []

    await sync.sync()
    assert sync.loaded_raw
    # The healthy worker received the bundle twice: once per full broadcast.
    assert len(workers[0].loads) == 2
    assert len(workers[1].loads) == 1


@pytest.mark.asyncio
async def test_concurrent_syncs_share_one_broadcast(registry):
    class SlowWorker(RecordingWorker):
        async def load_font_bundle(self, bundle, variant):
            await asyncio.sleep(0.01)
            await super().load_font_bundle(bundle, variant)

    workers = [SlowWorker(), SlowWorker()]
    sync = WorkerFontSync(WorkerPool(workers=workers), registry)

    await asyncio.gather(sync.sync(), sync.sync(), sync.sync())

    for worker in workers:
        assert len(worker.loads) == 1
        assert len(worker.defaults) == 3


@pytest.mark.asyncio
async def test_local_workers_track_bundles_and_defaults(registry):
    pool = WorkerPool(count=3)
    sync = WorkerFontSync(pool, registry)
    await sync.sync()
    for worker in pool.workers:
        assert isinstance(worker, LocalWorker)
        assert worker.bundles[FontVariant.RAW] == build_font_bundle(registry.raw)
        assert worker.active_variant is FontVariant.RAW
        assert worker.sans_family_name == "NimbusSans"
        assert worker.serif_family_name == "NimbusRomNo9L"


@pytest.mark.asyncio
async def test_local_worker_rejects_defaults_before_load():
    worker = LocalWorker(0)
    with pytest.raises(RuntimeError):
        await worker.set_active_defaults(FontVariant.RAW, "Carlito", "Century")
