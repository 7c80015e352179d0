from pathlib import Path

import pytest

from fs_kv_cache import FsKvCache

from conftest import colliding_keys, tree


@pytest.mark.parametrize("value", [
    "john",
    25,
    3.5,
    True,
    False,
    None,
    [1, 2, 3, "a", "b"],
    {"foo": "bar", "num": 123},
    {"nested": {"list": [1, {"deep": None}], "flag": True}},
    b"\x00\xffraw",
])
def test_roundtrip(cache: FsKvCache, value):
    cache.set_item("key", value)
    assert cache.get_item("key") == value


def test_overwrite_keeps_single_entry(cache: FsKvCache):
    cache.set_item("key", "value1")
    cache.set_item("key", "value2")

    assert cache.get_item("key") == "value2"
    # one bucket file, one entry in it
    from fs_kv_cache.codec import unpack
    assert len(unpack(cache.path_for("key").read_bytes())) == 1


def test_missing_key(cache: FsKvCache):
    assert cache.get_item("nonexistent") is None
    assert cache.get_item("nonexistent", "fallback") == "fallback"
    assert cache.has_item("nonexistent") is False


def test_has_item_for_none_value(cache: FsKvCache):
    cache.set_item("nullkey", None)
    assert cache.has_item("nullkey") is True
    assert cache.get_item("nullkey") is None


def test_remove_item(cache: FsKvCache):
    cache.set_item("toremove", "value")
    path = cache.path_for("toremove")
    assert path.exists()

    cache.remove_item("toremove")

    assert cache.has_item("toremove") is False
    assert cache.get_item("toremove") is None
    assert not path.exists()


def test_remove_missing_key_leaves_tree_untouched(cache: FsKvCache):
    cache.set_item("a", 1)
    before = tree(cache.base_path)

    cache.remove_item("nonexistent")

    assert tree(cache.base_path) == before


def test_remove_missing_key_on_empty_cache(cache: FsKvCache):
    cache.remove_item("nonexistent")
    assert tree(cache.base_path) == []


def test_colliding_keys_share_bucket(cache: FsKvCache):
    k1, k2 = colliding_keys(cache.depth)
    assert cache.path_for(k1) == cache.path_for(k2)

    cache.set_item(k1, "one")
    cache.set_item(k2, "two")
    assert cache.get_item(k1) == "one"
    assert cache.get_item(k2) == "two"

    cache.remove_item(k1)
    assert cache.has_item(k1) is False
    assert cache.get_item(k2) == "two"
    assert cache.path_for(k2).exists()

    cache.remove_item(k2)
    assert not cache.path_for(k2).exists()


def test_overwrite_in_shared_bucket_keeps_neighbour(cache: FsKvCache):
    k1, k2, k3 = colliding_keys(cache.depth, count=3)
    for k in (k1, k2, k3):
        cache.set_item(k, k)
    cache.set_item(k2, "changed")

    assert [cache.get_item(k) for k in (k1, k2, k3)] == [k1, "changed", k3]


def test_many_keys(cache: FsKvCache):
    keys = [f"key{i}" for i in range(200)]
    for i, key in enumerate(keys):
        cache.set_item(key, f"value{i}")
    for i, key in enumerate(keys):
        assert cache.get_item(key) == f"value{i}"


def test_persists_across_instances(tmp_path: Path):
    FsKvCache(tmp_path).set_item("persistent", "data")
    assert FsKvCache(tmp_path).get_item("persistent") == "data"


def test_base_path_created(tmp_path: Path):
    root = tmp_path / "a" / "b" / "c"
    FsKvCache(root)
    assert root.is_dir()


@pytest.mark.parametrize("depth, parts", [
    (1,  ("0", "9.pack")),
    (2,  ("0", "9.pack")),
    (3,  ("0", "9", "8.pack")),
    (4,  ("0", "9", "8", "f.pack")),
    (5,  ("0", "9", "8", "f", "6.pack")),
    (10, ("0", "9", "8", "f", "6.pack")),
])
def test_directory_layout(tmp_path: Path, depth, parts):
    # md5("test") == 098f6bcd4621d373cade4e832627b4f6
    c = FsKvCache(tmp_path, depth=depth)
    c.set_item("test", "value")

    assert tmp_path.joinpath(*parts).is_file()
    assert c.get_item("test") == "value"


def test_default_depth(tmp_path: Path):
    assert FsKvCache(tmp_path).depth == 3
    assert FsKvCache(tmp_path, depth=None).depth == 3


def test_non_str_key_rejected(cache: FsKvCache):
    with pytest.raises(TypeError):
        cache.set_item(123, "v")
    with pytest.raises(TypeError):
        cache.get_item(b"bytes")


def test_unserializable_value_leaves_bucket_intact(cache: FsKvCache):
    cache.set_item("key", "old")
    with pytest.raises(TypeError):
        cache.set_item("key", object())
    assert cache.get_item("key") == "old"
    assert not list(cache.base_path.rglob("*.tmp"))


def test_unknown_algorithm(tmp_path: Path):
    with pytest.raises(ValueError):
        FsKvCache(tmp_path, algorithm="sha999")


def test_xxh128_algorithm(tmp_path: Path):
    c = FsKvCache(tmp_path, algorithm="xxh128")
    c.set_item("test", [1, 2])
    assert c.get_item("test") == [1, 2]
    assert FsKvCache(tmp_path, algorithm="xxh128").get_item("test") == [1, 2]


def test_mapping_protocol(cache: FsKvCache):
    cache["k"] = {"a": 1}
    assert "k" in cache
    assert cache["k"] == {"a": 1}

    del cache["k"]
    assert "k" not in cache
    with pytest.raises(KeyError):
        cache["k"]
    with pytest.raises(KeyError):
        del cache["k"]
    cache.remove_item("k")              # absent: no error


def test_write_error_propagates(tmp_path: Path):
    c = FsKvCache(tmp_path)
    # a regular file where the first shard directory must go
    first = c.path_for("test").relative_to(tmp_path).parts[0]
    (tmp_path / first).write_bytes(b"")

    with pytest.raises(OSError):
        c.set_item("test", "value")
