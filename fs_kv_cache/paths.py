# ==================================================
# fs_kv_cache/paths.py
# ==================================================
from pathlib import PurePath
from typing import Optional

from .const import BUCKET_SUFFIX, DEFAULT_DEPTH, MAX_DEPTH, MIN_DEPTH


def clamp_depth(depth: Optional[int]) -> int:
    if depth is None:
        return DEFAULT_DEPTH
    return max(MIN_DEPTH, min(MAX_DEPTH, int(depth)))


def _nibbles(digest: bytes, depth: int) -> str:
    hexed = digest.hex()
    if len(hexed) < depth:
        raise ValueError(f"digest too short for depth {depth}")
    return hexed[:depth]


def resolve(digest: bytes, depth: int) -> PurePath:
    """Relative bucket path, e.g. 098f… at depth 3 -> 0/9/8.pack"""
    nib = _nibbles(digest, depth)
    return PurePath(*nib[:-1], nib[-1] + BUCKET_SUFFIX)


def shard_index(digest: bytes, depth: int) -> int:
    # 0 .. 16**depth - 1, one value per bucket file
    return int(_nibbles(digest, depth), 16)
