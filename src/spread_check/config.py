from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from spread_check.fetcher import DEFAULT_RELAY_URL, DEFAULT_TIMEOUT_SECONDS
from spread_check.selector import DEFAULT_MAX_STALENESS_SECONDS

_DEFAULT_HISTORY_PATH = "~/.spread_check/history.json"
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _env_float(name: str, default: float) -> float:
  raw = os.getenv(name)
  if raw is None or not raw.strip():
    return default
  try:
    return float(raw)
  except ValueError:
    raise ValueError(f"Environment variable '{name}' must be a number, got '{raw}'")


def _env_int(name: str, default: int) -> int:
  raw = os.getenv(name)
  if raw is None or not raw.strip():
    return default
  try:
    return int(raw)
  except ValueError:
    raise ValueError(f"Environment variable '{name}' must be an integer, got '{raw}'")


def _env_bool(name: str, default: bool) -> bool:
  raw = os.getenv(name)
  if raw is None:
    return default
  value = raw.strip().lower()
  if value in _TRUE_VALUES:
    return True
  if value in _FALSE_VALUES:
    return False
  raise ValueError(f"Environment variable '{name}' must be a boolean, got '{raw}'")


@dataclass(frozen=True)
class Settings:
  relay_url: str = DEFAULT_RELAY_URL
  timeout: float = DEFAULT_TIMEOUT_SECONDS
  history_path: Path = Path(_DEFAULT_HISTORY_PATH).expanduser()
  max_staleness_seconds: int = DEFAULT_MAX_STALENESS_SECONDS
  skip_relay_on_client_error: bool = False
  log_level: str = "INFO"

  @classmethod
  def from_env(cls) -> Settings:
    """Builds settings from SPREAD_CHECK_* environment variables."""
    log_level = os.getenv("SPREAD_CHECK_LOG_LEVEL", "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
      raise ValueError(f"Unknown log level '{log_level}' in SPREAD_CHECK_LOG_LEVEL")

    return cls(
      relay_url=os.getenv("SPREAD_CHECK_RELAY_URL") or DEFAULT_RELAY_URL,
      timeout=_env_float("SPREAD_CHECK_TIMEOUT", DEFAULT_TIMEOUT_SECONDS),
      history_path=Path(
        os.getenv("SPREAD_CHECK_HISTORY_PATH") or _DEFAULT_HISTORY_PATH
      ).expanduser(),
      max_staleness_seconds=_env_int(
        "SPREAD_CHECK_MAX_STALENESS", DEFAULT_MAX_STALENESS_SECONDS
      ),
      skip_relay_on_client_error=_env_bool("SPREAD_CHECK_SKIP_RELAY_ON_4XX", False),
      log_level=log_level,
    )
