"""Settings read from SALESBOARD_* environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from .feed import DEFAULT_TASKS_PATH
from .logic import GradeThresholds
from .seed import DEFAULT_SEED_COUNT

ENV_PREFIX = "SALESBOARD"


class ConfigError(ValueError):
    """Raised when an environment variable holds an unusable value."""


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


@dataclass(frozen=True)
class Settings:
    tasks_url: str | None = None
    tasks_path: str = DEFAULT_TASKS_PATH
    seed_count: int = DEFAULT_SEED_COUNT
    grade_excellent: float = 500.0
    grade_good: float = 200.0
    timeout: float = 10.0

    @property
    def thresholds(self) -> GradeThresholds:
        return GradeThresholds(excellent=self.grade_excellent, good=self.grade_good)


def _env_str(env: Mapping[str, str], name: str) -> str | None:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return None
    return raw.strip()


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = _env_str(env, name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {value}")
    return value


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = _env_str(env, name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from ``env`` (defaults to ``os.environ``)."""
    if env is None:
        env = os.environ
    settings = Settings(
        tasks_url=_env_str(env, _k("TASKS_URL")),
        tasks_path=_env_str(env, _k("TASKS_PATH")) or DEFAULT_TASKS_PATH,
        seed_count=_env_int(env, _k("SEED_COUNT"), DEFAULT_SEED_COUNT),
        grade_excellent=_env_float(env, _k("GRADE_EXCELLENT"), 500.0),
        grade_good=_env_float(env, _k("GRADE_GOOD"), 200.0),
        timeout=_env_float(env, _k("TIMEOUT"), 10.0),
    )
    if settings.grade_good > settings.grade_excellent:
        raise ConfigError(
            f"{_k('GRADE_GOOD')} ({settings.grade_good}) must not exceed "
            f"{_k('GRADE_EXCELLENT')} ({settings.grade_excellent})"
        )
    return settings
