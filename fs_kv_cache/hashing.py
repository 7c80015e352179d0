# ==================================================
# fs_kv_cache/hashing.py
# ==================================================
import hashlib
from typing import Callable, Dict

import xxhash

from .const import DEFAULT_ALGORITHM


def _md5(data: bytes) -> bytes:
    return hashlib.md5(data).digest()


def _xxh128(data: bytes) -> bytes:
    return xxhash.xxh128_digest(data)


# every entry returns 16 bytes
ALGORITHMS: Dict[str, Callable[[bytes], bytes]] = {
    "md5":    _md5,
    "xxh128": _xxh128,
}


def get_hasher(algorithm: str = DEFAULT_ALGORITHM) -> Callable[[bytes], bytes]:
    try:
        return ALGORITHMS[algorithm]
    except KeyError:
        raise ValueError(f"Unknown digest algorithm: {algorithm!r}") from None


def _utf8(key: str) -> bytes:
    try:
        return key.encode("utf-8")
    except UnicodeEncodeError:
        # pair up surrogates, lone halves become U+FFFD (WHATWG UTF-8)
        return (key.encode("utf-16-le", "surrogatepass")
                   .decode("utf-16-le", "replace").encode("utf-8"))


def digest(key: str, algorithm: str = DEFAULT_ALGORITHM) -> bytes:
    """16‑byte digest of `key`; shard placement and in‑bucket identity.

    Not a security boundary: md5 is kept because existing bucket trees
    are laid out by it.
    """
    if not isinstance(key, str):
        raise TypeError(f"key must be str, not {type(key).__name__}")
    return get_hasher(algorithm)(_utf8(key))
