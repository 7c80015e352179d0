# ==================================================
# fs_kv_cache/store.py
# ==================================================
from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

from .bucket import Bucket, BucketStore
from .config import CacheConfig
from .const import DEFAULT_ALGORITHM, DEFAULT_DEPTH
from .hashing import digest, get_hasher
from .locks import ShardLocks
from .paths import clamp_depth, resolve, shard_index


def _find(bucket: Bucket, key_digest: bytes) -> int:
    for i, (d, _) in enumerate(bucket):
        if d == key_digest:
            return i
    return -1


class FsKvCache:
    """Persistent key/value cache sharded over small msgpack bucket files.

    A key's digest picks the file (`depth` hex nibbles -> `a/b/c.pack`);
    inside the file entries are matched on the full digest. Every call
    reloads and rewrites the one bucket it touches, nothing is kept in
    memory between calls.
    """
    def __init__(self, base_path: str | os.PathLike,
                 depth: Optional[int] = DEFAULT_DEPTH,
                 *,
                 algorithm: str = DEFAULT_ALGORITHM,
                 process_lock: bool = False,
                 strict: bool = False):
        get_hasher(algorithm)                        # fail fast on bad name
        self._base_path = Path(base_path)
        self._depth     = clamp_depth(depth)
        self._algorithm = algorithm
        self._base_path.mkdir(parents=True, exist_ok=True)
        self._buckets   = BucketStore(strict=strict)
        self._locks     = ShardLocks(self._base_path, process_lock=process_lock)

    @classmethod
    def from_config(cls, config: CacheConfig) -> "FsKvCache":
        return cls(config.base_path, config.depth,
                   algorithm=config.algorithm,
                   process_lock=config.process_lock,
                   strict=config.strict)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "FsKvCache":
        return cls.from_config(CacheConfig.from_env(environ))

    # ------------------------------------------------------------------
    @property
    def base_path(self) -> Path:
        return self._base_path

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def algorithm(self) -> str:
        return self._algorithm

    def _locate(self, key: str) -> Tuple[bytes, Path, int]:
        d = digest(key, self._algorithm)
        return d, self._base_path / resolve(d, self._depth), shard_index(d, self._depth)

    def path_for(self, key: str) -> Path:
        return self._locate(key)[1]

    # ------------------------------------------------------------------
    def set_item(self, key: str, value: Any):
        d, path, shard = self._locate(key)
        with self._locks.hold(shard):
            bucket = self._buckets.load(path)
            i = _find(bucket, d)
            if i >= 0:
                bucket[i][1] = value
            else:
                bucket.append([d, value])
            self._buckets.save(path, bucket)

    def get_item(self, key: str, default: Any = None) -> Any:
        d, path, shard = self._locate(key)
        with self._locks.hold(shard):
            bucket = self._buckets.load(path)
        i = _find(bucket, d)
        return bucket[i][1] if i >= 0 else default

    def has_item(self, key: str) -> bool:
        d, path, shard = self._locate(key)
        with self._locks.hold(shard):
            bucket = self._buckets.load(path)
        return _find(bucket, d) >= 0

    def _remove(self, key: str) -> bool:
        d, path, shard = self._locate(key)
        with self._locks.hold(shard):
            bucket = self._buckets.load(path)
            i = _find(bucket, d)
            if i < 0:
                return False
            del bucket[i]
            if bucket:
                self._buckets.save(path, bucket)
            else:
                self._buckets.delete(path)
            return True

    def remove_item(self, key: str):
        self._remove(key)

    # ── mapping sugar ─────────────────────────────────────────────
    def __contains__(self, key: str) -> bool:
        return self.has_item(key)

    def __getitem__(self, key: str) -> Any:
        d, path, shard = self._locate(key)
        with self._locks.hold(shard):
            bucket = self._buckets.load(path)
        i = _find(bucket, d)
        if i < 0:
            raise KeyError(key)
        return bucket[i][1]

    def __setitem__(self, key: str, value: Any):
        self.set_item(key, value)

    def __delitem__(self, key: str):
        if not self._remove(key):
            raise KeyError(key)

    # ------------------------------------------------------------------
    def close(self):
        self._locks.close()

    def __enter__(self) -> "FsKvCache":
        return self

    def __exit__(self, *exc):
        self.close()

    def __repr__(self) -> str:
        return f"FsKvCache({str(self._base_path)!r}, depth={self._depth})"
