# ==================================================
# fs_kv_cache/const.py
# ==================================================
BUCKET_SUFFIX = ".pack"      # final path segment: <nibble>.pack
TMP_SUFFIX    = ".tmp"       # atomic-write staging files, same dir as bucket

MIN_DEPTH     = 2
MAX_DEPTH     = 5
DEFAULT_DEPTH = 3

DEFAULT_ALGORITHM = "md5"

LOCK_FILE     = ".fs_kv_cache.lock"   # only created with process_lock=True
LOCK_STRIPES  = 64                    # in-process mutexes shared by all shards

DEFAULT_DIR   = ".fs_kv_cache"

# ── environment overrides (see config.py) ─────────────
ENV_DIR          = "FS_KV_CACHE_DIR"
ENV_DEPTH        = "FS_KV_CACHE_DEPTH"
ENV_ALGORITHM    = "FS_KV_CACHE_ALGORITHM"
ENV_PROCESS_LOCK = "FS_KV_CACHE_PROCESS_LOCK"
ENV_STRICT       = "FS_KV_CACHE_STRICT"
