# ==================================================
# fs_kv_cache/codec.py
# ==================================================
# Bucket wire format: msgpack array of [bin digest, value] pairs.
# Compatible with buckets written by msgpackr (useRecords: false).
from typing import Any, List

import msgpack


class CorruptBucketError(ValueError):
    """Bucket bytes could not be decoded into a list of entries."""


def pack(bucket: List[List[Any]]) -> bytes:
    return msgpack.packb(bucket, use_bin_type=True)


def unpack(raw: bytes) -> List[List[Any]]:
    try:
        data = msgpack.unpackb(raw, raw=False, strict_map_key=False)
    except (ValueError, TypeError, msgpack.UnpackException) as exc:
        raise CorruptBucketError(str(exc)) from exc

    if not isinstance(data, list):
        raise CorruptBucketError(f"expected array, got {type(data).__name__}")
    for entry in data:
        if (not isinstance(entry, list) or len(entry) != 2
                or not isinstance(entry[0], bytes)):
            raise CorruptBucketError("malformed entry")
    return data
