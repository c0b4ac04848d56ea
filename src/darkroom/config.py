"""Runtime configuration for the Darkroom pixel engine."""

from __future__ import annotations

import os
from dataclasses import dataclass

EXECUTORS = ("jit", "python")
"""Available Wash executors, fastest first."""


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return max(1, int(raw))
    except ValueError:
        return default


MAX_WORKERS = _env_int("DARKROOM_MAX_WORKERS", os.cpu_count() or 1)
"""Upper bound on the number of row bands processed concurrently."""

MIN_ROWS_PER_BAND = _env_int("DARKROOM_MIN_ROWS_PER_BAND", 16)
"""Small images are not split into bands thinner than this."""

DEFAULT_EXECUTOR = os.getenv("DARKROOM_EXECUTOR", "jit").strip().lower() or "jit"

DEFAULT_TINT_STRENGTH = 0.5
"""Blend factor used by :meth:`Darkroom.tint` when no strength is given."""

RECIPE_VERSION = 1


@dataclass(frozen=True)
class WashOptions:
    """Execution knobs for a single Wash."""

    max_workers: int = MAX_WORKERS
    min_rows_per_band: int = MIN_ROWS_PER_BAND
    executor: str = DEFAULT_EXECUTOR

    def __post_init__(self) -> None:
        if self.executor not in EXECUTORS:
            raise ValueError(
                f"Unknown executor {self.executor!r}; expected one of {', '.join(EXECUTORS)}"
            )
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if self.min_rows_per_band < 1:
            raise ValueError("min_rows_per_band must be at least 1")

    @classmethod
    def from_env(cls) -> "WashOptions":
        """Return options reflecting the current process environment."""

        return cls(
            max_workers=_env_int("DARKROOM_MAX_WORKERS", os.cpu_count() or 1),
            min_rows_per_band=_env_int("DARKROOM_MIN_ROWS_PER_BAND", 16),
            executor=os.getenv("DARKROOM_EXECUTOR", "jit").strip().lower() or "jit",
        )
