from pathlib import Path

import pytest

from fs_kv_cache import FsKvCache
from fs_kv_cache.hashing import digest


@pytest.fixture
def cache(tmp_path: Path):
    c = FsKvCache(tmp_path / "cache")
    yield c
    c.close()


def colliding_keys(depth: int, count: int = 2, prefix: str = "k"):
    """Distinct keys whose md5 share the first `depth` nibbles."""
    seen = {}
    i = 0
    while True:
        key = f"{prefix}{i}"
        nib = digest(key).hex()[:depth]
        seen.setdefault(nib, []).append(key)
        if len(seen[nib]) == count:
            return seen[nib]
        i += 1


def tree(root: Path):
    return sorted(str(p.relative_to(root)) for p in root.rglob("*"))
