# ==================================================
# fs_kv_cache/locks.py
# ==================================================
import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional

from .const import LOCK_FILE, LOCK_STRIPES

log = logging.getLogger(__name__)

# ── cross‑platform advisory byte‑range locks ─────────────────
try:
    import fcntl                                      # Unix / WSL / macOS
    def _lock(f, size, offset):
        fcntl.lockf(f.fileno(), fcntl.LOCK_EX, size, offset)
    def _unlock(f, size, offset):
        fcntl.lockf(f.fileno(), fcntl.LOCK_UN, size, offset)
except ImportError:                                   # native Windows
    import msvcrt
    # msvcrt locks from the current position, so seek first
    def _lock(f, size, offset):
        f.seek(offset)
        msvcrt.locking(f.fileno(), msvcrt.LK_LOCK, size)
    def _unlock(f, size, offset):
        f.seek(offset)
        msvcrt.locking(f.fileno(), msvcrt.LK_UNLCK, size)
# ─────────────────────────────────────────────────────────────


class _RootLocks:
    """Per‑root state shared by every ShardLocks in this process.

    POSIX record locks belong to the process and any close() of the file
    drops all of them, so there is one stripe set and one lock‑file
    handle per root, closed when its last user goes away.
    """
    def __init__(self, root: Path, stripes: int):
        self.root    = root
        self.stripes = [threading.Lock() for _ in range(stripes)]
        self.file    = None
        self.users   = 0
        self.file_users = 0


_roots: Dict[Path, _RootLocks] = {}
_roots_guard = threading.Lock()


def _acquire(root: Path, process_lock: bool, stripes: int) -> _RootLocks:
    key = root.resolve()
    with _roots_guard:
        state = _roots.get(key)
        if state is None:
            state = _roots[key] = _RootLocks(key, stripes)
        if process_lock:
            if state.file is None:
                lock_path = key / LOCK_FILE
                # a+b: create if missing, never truncate another process' file
                state.file = open(lock_path, "a+b")
                log.debug("opened lock file %s", lock_path)
            state.file_users += 1
        state.users += 1
        return state


def _release(state: _RootLocks, process_lock: bool):
    with _roots_guard:
        if process_lock:
            state.file_users -= 1
            if state.file_users == 0:
                state.file.close()
                state.file = None
        state.users -= 1
        if state.users == 0:
            _roots.pop(state.root, None)


class ShardLocks:
    """Mutual exclusion per shard for one cache root.

    Threads go through a fixed set of striped mutexes shared by all
    caches on the same root. With a lock file, each shard additionally
    holds an exclusive one‑byte range at offset == shard index, so
    separate processes serialise too.
    """
    def __init__(self, root: Path, process_lock: bool = False,
                 stripes: int = LOCK_STRIPES):
        self.process_lock = process_lock
        self._state: Optional[_RootLocks] = _acquire(Path(root), process_lock, stripes)
        self.lock_path: Optional[Path] = (
            self._state.root / LOCK_FILE if process_lock else None)

    @contextmanager
    def hold(self, shard: int) -> Iterator[None]:
        state = self._state
        if state is None:
            raise ValueError("lock set is closed")
        with state.stripes[shard % len(state.stripes)]:
            if not self.process_lock:
                yield
                return
            _lock(state.file, 1, shard)
            try:
                yield
            finally:
                _unlock(state.file, 1, shard)

    def close(self):
        if self._state is not None:
            _release(self._state, self.process_lock)
            self._state = None
