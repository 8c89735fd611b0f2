from __future__ import annotations

import pytest

from moduz_console.config import ConfigError, load_config
from moduz_console.context_store import ContextStore
from moduz_console.module_cache import ModuleCache


def test_cache_entries_expire() -> None:
    clock = {"now": 100.0}
    cache = ModuleCache(ttl_seconds=10, now=lambda: clock["now"])
    cache.set("tenant-1", ["core", "docs"])

    assert cache.get("tenant-1") == frozenset({"core", "docs"})
    clock["now"] = 111.0
    assert cache.get("tenant-1") is None


def test_cache_invalidate_and_clear() -> None:
    cache = ModuleCache()
    cache.set("tenant-1", ["core"])
    cache.set("tenant-2", ["core"])

    cache.invalidate("tenant-1")
    assert cache.get("tenant-1") is None
    cache.clear()
    assert cache.get("tenant-2") is None


def test_context_store_is_scoped_to_principal(tmp_path) -> None:
    store = ContextStore(tmp_path / "nested" / "context.json")
    store.save_selected_tenant("ana", "tenant-1")
    store.save_enabled_keys("ana", "tenant-1", {"docs", "core"})

    assert store.selected_tenant_id("ana") == "tenant-1"
    assert store.enabled_keys("ana", "tenant-1") == frozenset({"core", "docs"})
    assert store.selected_tenant_id("bruno") is None
    assert store.enabled_keys("bruno", "tenant-1") is None

    store.save_selected_tenant("bruno", "tenant-2")
    assert store.enabled_keys("ana", "tenant-1") is None


def test_context_store_tolerates_corrupt_file(tmp_path) -> None:
    path = tmp_path / "context.json"
    path.write_text("{not json", encoding="utf-8")
    store = ContextStore(path)

    assert store.selected_tenant_id("ana") is None
    store.clear()
    assert not path.exists()


def test_load_config_reads_environment(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("MODUZ_API_BASE_URL", "https://api.example.com/")
    monkeypatch.setenv("MODUZ_RETRIES", "4")
    monkeypatch.setenv("MODUZ_CONSOLE_CONTEXT_PATH", str(tmp_path / "ctx.json"))

    config = load_config()

    assert config.api_base_url == "https://api.example.com"
    assert config.retries == 4
    assert config.context_path == tmp_path / "ctx.json"


def test_load_config_rejects_bad_values(monkeypatch) -> None:
    monkeypatch.setenv("MODUZ_API_BASE_URL", "https://api.example.com")
    monkeypatch.setenv("MODUZ_RETRIES", "-1")

    with pytest.raises(ConfigError):
        load_config()
