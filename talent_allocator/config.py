from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

CONFLICT_POLICIES = ("warn", "reject")


@dataclass(frozen=True)
class Settings:
    baas_url: str
    baas_key: str
    http_timeout_s: float
    http_retries: int
    conflict_policy: str
    log_level: str

    @property
    def local_mode(self) -> bool:
        return not (self.baas_url and self.baas_key)


def load_env(dotenv_path: str | Path | None = None) -> None:
    path = Path(dotenv_path) if dotenv_path else None
    if path and path.exists():
        load_dotenv(path)
        return
    load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def load_settings() -> Settings:
    policy = os.getenv("TALENT_CONFLICT_POLICY", "warn").strip().lower() or "warn"
    if policy not in CONFLICT_POLICIES:
        raise ValueError(
            f"Unknown TALENT_CONFLICT_POLICY {policy!r}. Choose from {CONFLICT_POLICIES}"
        )
    return Settings(
        baas_url=os.getenv("TALENT_BAAS_URL", "").strip().rstrip("/"),
        baas_key=os.getenv("TALENT_BAAS_KEY", "").strip(),
        http_timeout_s=_env_float("TALENT_HTTP_TIMEOUT", 30.0),
        http_retries=max(1, _env_int("TALENT_HTTP_RETRIES", 3)),
        conflict_policy=policy,
        log_level=os.getenv("TALENT_LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )


def local_settings(conflict_policy: str = "warn") -> Settings:
    """Settings for an in-memory run that ignores the environment."""
    if conflict_policy not in CONFLICT_POLICIES:
        raise ValueError(f"Unknown conflict policy {conflict_policy!r}. Choose from {CONFLICT_POLICIES}")
    return Settings(
        baas_url="",
        baas_key="",
        http_timeout_s=30.0,
        http_retries=1,
        conflict_policy=conflict_policy,
        log_level="INFO",
    )
