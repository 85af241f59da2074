# tests/test_storage.py
import os
from dataclasses import replace
from pathlib import Path

import pytest

from starregistry.chain.store import ChainStore
from starregistry.config import RegistrySettings
from starregistry.core.errors import ChainIntegrityViolation
from starregistry.storage import SQLiteStorage, StorageBackend, create_storage


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    return tmp_path / "test.db"


@pytest.fixture
def storage(temp_db_path: Path):
    s = SQLiteStorage(db_path=temp_db_path)
    yield s
    s.close()


def test_create_storage_dynamic_routing(temp_db_path: Path):
    storage = create_storage(f"sqlite://{temp_db_path}")
    assert isinstance(storage, SQLiteStorage)
    assert isinstance(storage, StorageBackend)
    assert storage.db_path == temp_db_path.resolve()
    storage.close()


@pytest.mark.parametrize("uri", ["jsonl:/tmp/x.jsonl", "postgres://db", "sqlite://"])
def test_create_storage_rejects_unsupported(uri):
    with pytest.raises(ValueError):
        create_storage(uri)


def test_sqlite_default_path_from_env(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("STAR_REGISTRY_DB_PATH", str(tmp_path / "env" / "stars.db"))
    with SQLiteStorage() as env_storage:
        assert env_storage.db_path == (tmp_path / "env" / "stars.db").resolve()


def test_sqlite_default_path_in_cwd(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("STAR_REGISTRY_DB_PATH", raising=False)
    monkeypatch.chdir(tmp_path)
    with SQLiteStorage() as default_storage:
        assert default_storage.db_path.name == "star-registry.db"


def test_sqlite_schema_creation(storage: SQLiteStorage):
    cursor = storage.conn.execute("PRAGMA table_info(blocks)")
    columns = {row[1] for row in cursor.fetchall()}
    assert columns == {"height", "hash", "previous_hash", "timestamp", "payload"}


def test_store_persists_genesis_and_appends(storage: SQLiteStorage):
    store = ChainStore(storage=storage, clock=lambda: 1700000000)
    store.append({"n": 1})
    store.append({"n": 2})

    loaded = storage.load_blocks()
    assert storage.block_count() == 3
    assert storage.latest_timestamp() == 1700000000
    assert [b.hash for b in loaded] == [b.hash for b in store.get_chain()]
    assert loaded[0].previous_hash is None


def test_reload_continues_chain(temp_db_path: Path):
    first = ChainStore(storage=str(temp_db_path))
    genesis = first.get_chain()[0]
    first.append("one")
    first.close()

    second = ChainStore(storage=f"sqlite://{temp_db_path}")
    assert second.height == 1
    assert second.get_chain()[0] == genesis
    block = second.append("two")
    assert block.previous_hash == second.get_chain()[1].hash
    assert second.validate().is_valid
    second.close()


def test_tampered_storage_is_rejected_on_load(temp_db_path: Path):
    store = ChainStore(storage=str(temp_db_path))
    store.append({"story": "original"})
    store.close()

    with SQLiteStorage(temp_db_path) as raw:
        forged = replace(raw.load_blocks()[1], payload=ChainStore().codec.encode({"story": "forged"}))
        raw.conn.execute("UPDATE blocks SET payload = ? WHERE height = 1", (forged.payload,))

    with pytest.raises(ChainIntegrityViolation) as exc_info:
        ChainStore(storage=str(temp_db_path))
    assert {v.height for v in exc_info.value.violations} == {1}


def test_closed_storage_raises(temp_db_path: Path):
    s = SQLiteStorage(temp_db_path)
    s.close()
    with pytest.raises(RuntimeError):
        s.block_count()


def test_settings_from_env(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("STAR_REGISTRY_DB_PATH", str(tmp_path / "x.db"))
    monkeypatch.setenv("STAR_REGISTRY_CHALLENGE_WINDOW", "120")
    monkeypatch.setenv("STAR_REGISTRY_DECODE_WORKERS", "2")
    settings = RegistrySettings.from_env()
    assert settings.db_path == tmp_path / "x.db"
    assert settings.challenge_window == 120
    assert settings.decode_workers == 2


@pytest.mark.parametrize("value", ["soon", "0", "-5"])
def test_settings_reject_bad_window(monkeypatch, value):
    monkeypatch.setenv("STAR_REGISTRY_CHALLENGE_WINDOW", value)
    with pytest.raises(ValueError):
        RegistrySettings.from_env()


def test_settings_defaults(monkeypatch):
    for name in list(os.environ):
        if name.startswith("STAR_REGISTRY_"):
            monkeypatch.delenv(name)
    settings = RegistrySettings.from_env()
    assert settings.challenge_window == 300
    assert settings.decode_workers == 4


def test_storage_closed_when_load_rejects_chain(temp_db_path: Path):
    store = ChainStore(storage=str(temp_db_path))
    store.append({"story": "original"})
    store.close()

    raw = SQLiteStorage(temp_db_path)
    raw.conn.execute("UPDATE blocks SET timestamp = 1 WHERE height = 1")

    with pytest.raises(ChainIntegrityViolation):
        ChainStore(storage=raw)
    with pytest.raises(RuntimeError):
        raw.block_count()
