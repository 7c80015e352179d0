# ==================================================
# fs_kv_cache/bucket.py
# ==================================================
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, List

from .codec import CorruptBucketError, pack, unpack
from .const import TMP_SUFFIX

log = logging.getLogger(__name__)

Bucket = List[List[Any]]          # [[digest, value], ...]

_UMASK = os.umask(0)
os.umask(_UMASK)
_FILE_MODE = 0o666 & ~_UMASK


def _fsync_dir(directory: Path):
    # persist the rename itself; directories cannot be opened on Windows
    if os.name == "nt":
        return
    fd = os.open(directory, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


class BucketStore:
    """Load / save / delete the bucket file behind one shard.

    Reads never fail: a missing, unreadable or undecodable file is an
    empty bucket. Writes go through a temp file and `os.replace`, and any
    OSError on the write path propagates.
    """
    def __init__(self, strict: bool = False):
        self.strict = strict

    # ------------------------------------------------------------------
    def load(self, path: Path) -> Bucket:
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return []
        except OSError as exc:
            log.debug("unreadable bucket %s: %s", path, exc)
            return []

        try:
            return unpack(raw)
        except CorruptBucketError as exc:
            if self.strict:
                raise CorruptBucketError(f"{path}: {exc}") from exc
            log.warning("discarding corrupt bucket %s: %s", path, exc)
            return []

    # ------------------------------------------------------------------
    def save(self, path: Path, bucket: Bucket):
        data = pack(bucket)                      # TypeError before any I/O
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.",
                                   suffix=TMP_SUFFIX)
        try:
            with os.fdopen(fd, "wb") as f:
                # mkstemp is 0600; buckets follow the umask like a plain open()
                os.chmod(tmp, _FILE_MODE)
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, path)
        except BaseException:
            try:
                os.unlink(tmp)
            except FileNotFoundError:
                pass
            raise
        _fsync_dir(path.parent)
        log.debug("wrote bucket %s (%d entries)", path, len(bucket))

    # ------------------------------------------------------------------
    def delete(self, path: Path):
        try:
            path.unlink()
        except FileNotFoundError:
            return
        log.debug("deleted empty bucket %s", path)
