"""Tests for the preset store."""

from __future__ import annotations

import json
import os

import pytest

from svgsweep.errors import (
    CannotRemoveDefault,
    NameRequired,
    PresetExists,
    PresetNotFound,
)
from svgsweep.models.config import CompressionSpec, RunConfig
from svgsweep.presets import DEFAULT_PRESET, PresetStore, default_presets_path


@pytest.fixture
def store(tmp_path):
    return PresetStore(tmp_path / "presets.json")


class TestPresetStore:
    def test_default_always_exists(self, store):
        assert DEFAULT_PRESET in store
        assert store.get(DEFAULT_PRESET) == RunConfig(thread_count=os.cpu_count() or 1)
        assert [p.name for p in store.list()] == [DEFAULT_PRESET]

    def test_save_and_get(self, store):
        config = RunConfig(thread_count=3, compression=CompressionSpec(enabled=True, level=4))
        store.save("icons", config)
        assert store.get("icons") == config

    def test_persisted(self, store, tmp_path):
        store.save("icons", RunConfig(thread_count=2))
        reloaded = PresetStore(tmp_path / "presets.json")
        assert reloaded.get("icons").thread_count == 2
        data = json.loads((tmp_path / "presets.json").read_text())
        assert data["presets"]["icons"]["thread_count"] == 2

    @pytest.mark.parametrize("name", ["", "   "])
    def test_name_required(self, store, name):
        with pytest.raises(NameRequired):
            store.save(name, RunConfig())

    def test_exists_without_overwrite(self, store):
        store.save("icons", RunConfig(thread_count=2))
        with pytest.raises(PresetExists):
            store.save("icons", RunConfig(thread_count=5))
        assert store.get("icons").thread_count == 2

    def test_overwrite(self, store):
        store.save("icons", RunConfig(thread_count=2))
        store.save("icons", RunConfig(thread_count=5), overwrite=True)
        assert store.get("icons").thread_count == 5

    def test_default_requires_overwrite(self, store):
        with pytest.raises(PresetExists):
            store.save(DEFAULT_PRESET, RunConfig(thread_count=8))
        store.save(DEFAULT_PRESET, RunConfig(thread_count=8), overwrite=True)
        assert store.get(DEFAULT_PRESET).thread_count == 8

    def test_remove(self, store):
        store.save("icons", RunConfig())
        store.remove("icons")
        assert "icons" not in store
        with pytest.raises(PresetNotFound):
            store.get("icons")

    def test_remove_missing(self, store):
        with pytest.raises(PresetNotFound):
            store.remove("nope")

    def test_cannot_remove_default(self, store):
        with pytest.raises(CannotRemoveDefault):
            store.remove(DEFAULT_PRESET)

    def test_list_order(self, store):
        store.save("zeta", RunConfig())
        store.save("alpha", RunConfig())
        assert [p.name for p in store.list()] == [DEFAULT_PRESET, "alpha", "zeta"]

    def test_list_skips_malformed(self, tmp_path):
        path = tmp_path / "presets.json"
        path.write_text(json.dumps({"presets": {"bad": {"naming": {"mode": "bogus"}}, "ok": {}}}))
        store = PresetStore(path)
        assert [p.name for p in store.list()] == [DEFAULT_PRESET, "ok"]

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "presets.json"
        path.write_text("{not json")
        assert [p.name for p in PresetStore(path).list()] == [DEFAULT_PRESET]

    def test_default_path_follows_xdg(self, isolate_config):
        assert default_presets_path() == isolate_config / "svgsweep" / "presets.json"
