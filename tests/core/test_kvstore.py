from __future__ import annotations

from pathlib import Path

import pytest

from testadura.core.kvstore import KeyValueStore, is_valid_key


@pytest.fixture()
def store(tmp_path: Path) -> KeyValueStore:
    return KeyValueStore(tmp_path / "state" / "deploy-workspace.state")


def test_missing_file_loads_empty(store):
    assert store.load() == {}
    assert store.get("anything", "fallback") == "fallback"


def test_load_ignores_comments_blank_and_malformed_lines(store):
    store.path.parent.mkdir(parents=True)
    store.path.write_text(
        "# saved by deploy-workspace\n"
        "\n"
        "last_deploy_source=/home/dev/ws\n"
        "not a pair\n"
        "9bad=value\n"
        "url=http://host/?a=b\n",
        encoding="utf-8",
    )

    assert store.load() == {
        "last_deploy_source": "/home/dev/ws",
        "url": "http://host/?a=b",
    }


def test_set_creates_the_file_and_replaces_existing_keys(store):
    store.set("last_deploy_target", "/")
    store.set("last_deploy_source", "/src")
    store.set("last_deploy_target", "/staging")

    assert store.path.read_text(encoding="utf-8") == (
        "last_deploy_source=/src\nlast_deploy_target=/staging\n"
    )


def test_set_keeps_comments(store):
    store.path.parent.mkdir(parents=True)
    store.path.write_text("# header\nkey=old\n", encoding="utf-8")

    store.set("key", "new")

    assert store.path.read_text(encoding="utf-8") == "# header\nkey=new\n"


def test_set_leaves_no_temp_files(store):
    store.set("key", "value")
    assert [p.name for p in store.path.parent.iterdir()] == [store.path.name]


def test_unset_removes_key_and_then_the_file(store):
    store.set("a", "1")
    store.set("b", "2")

    store.unset("a")
    assert store.load() == {"b": "2"}

    store.unset("b")
    assert not store.path.exists()


def test_unset_on_missing_file_is_a_no_op(store):
    store.unset("absent")
    assert not store.path.exists()


def test_reset_deletes_the_file(store):
    store.set("a", "1")
    store.reset()
    store.reset()
    assert not store.path.exists()


@pytest.mark.parametrize("key", ["", "1abc", "with-dash", "a b", "a=b"])
def test_invalid_keys_are_rejected(store, key):
    assert not is_valid_key(key)
    with pytest.raises(ValueError, match="Invalid key name"):
        store.set(key, "value")
