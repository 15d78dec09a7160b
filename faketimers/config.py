"""Construction options for `FakeTimers`.

Options can be given directly or read from the environment:

- FAKETIMERS_TICK_MS: tick quantum in milliseconds (default 10)
- FAKETIMERS_INITIAL_CAPACITY: number of pre-allocated timer slots (default 16)
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_TICK_MS = 10
DEFAULT_INITIAL_CAPACITY = 16


@dataclass(frozen=True)
class FakeTimersConfig:
    """Immutable engine configuration.

    The tick quantum is fixed for the lifetime of an engine; every timer
    period must be a whole multiple of it.
    """

    tick_ms: int = DEFAULT_TICK_MS
    initial_capacity: int = DEFAULT_INITIAL_CAPACITY

    def __post_init__(self) -> None:
        if self.tick_ms <= 0:
            raise ValueError(f"tick_ms must be > 0, got {self.tick_ms}")
        if self.initial_capacity < 0:
            raise ValueError(
                f"initial_capacity must be >= 0, got {self.initial_capacity}"
            )

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "FakeTimersConfig":
        """Build a config from `env` (defaults to `os.environ`)."""
        env = os.environ if env is None else env
        return cls(
            tick_ms=_env_int(env, "FAKETIMERS_TICK_MS", DEFAULT_TICK_MS),
            initial_capacity=_env_int(
                env, "FAKETIMERS_INITIAL_CAPACITY", DEFAULT_INITIAL_CAPACITY
            ),
        )


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
