from .codec  import CorruptBucketError
from .config import CacheConfig
from .store  import FsKvCache
__all__ = ["FsKvCache", "CacheConfig", "CorruptBucketError"]
