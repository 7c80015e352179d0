# ==================================================
# fs_kv_cache/config.py
# ==================================================
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .const import (DEFAULT_ALGORITHM, DEFAULT_DEPTH, DEFAULT_DIR,
                    ENV_ALGORITHM, ENV_DEPTH, ENV_DIR, ENV_PROCESS_LOCK,
                    ENV_STRICT)

_TRUE = {"1", "true", "yes", "on"}


def _flag(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in _TRUE


@dataclass(frozen=True)
class CacheConfig:
    base_path:    Path
    depth:        int  = DEFAULT_DEPTH
    algorithm:    str  = DEFAULT_ALGORITHM
    process_lock: bool = False
    strict:       bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "CacheConfig":
        env = os.environ if environ is None else environ
        raw_depth = env.get(ENV_DEPTH)
        try:
            depth = DEFAULT_DEPTH if raw_depth in (None, "") else int(raw_depth)
        except ValueError:
            raise ValueError(f"{ENV_DEPTH} must be an integer, got {raw_depth!r}") from None
        return cls(
            base_path    = Path(env.get(ENV_DIR) or DEFAULT_DIR),
            depth        = depth,
            algorithm    = env.get(ENV_ALGORITHM) or DEFAULT_ALGORITHM,
            process_lock = _flag(env.get(ENV_PROCESS_LOCK)),
            strict       = _flag(env.get(ENV_STRICT)),
        )
