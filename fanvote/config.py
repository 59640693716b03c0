"""Listener settings.

Defaults match the venue broadcaster: ggwave at 48 kHz, read in 1024-sample
blocks. Each value can be overridden with a ``FANVOTE_*`` environment
variable.
"""

import os
from dataclasses import dataclass
from typing import Self

SAMPLE_RATE = 48_000
BLOCK_SIZE = 1024
DEFAULT_TIMEOUT_SECONDS = 30.0
REPLAY_WINDOW_SECONDS = 300
# Roughly 20 s of audio at the defaults
QUEUE_SIZE = 1000


@dataclass(frozen=True)
class AttendanceSettings:
    sample_rate: int = SAMPLE_RATE
    block_size: int = BLOCK_SIZE
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    replay_window: int = REPLAY_WINDOW_SECONDS
    queue_size: int = QUEUE_SIZE

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Self:
        env = os.environ if environ is None else environ
        return cls(
            sample_rate=int(env.get("FANVOTE_SAMPLE_RATE", SAMPLE_RATE)),
            block_size=int(env.get("FANVOTE_BLOCK_SIZE", BLOCK_SIZE)),
            timeout=float(env.get("FANVOTE_TIMEOUT", DEFAULT_TIMEOUT_SECONDS)),
            replay_window=int(env.get("FANVOTE_REPLAY_WINDOW", REPLAY_WINDOW_SECONDS)),
            queue_size=int(env.get("FANVOTE_QUEUE_SIZE", QUEUE_SIZE)),
        )
