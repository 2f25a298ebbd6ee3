from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

from spread_check.timestamps import format_offset


def _round_half_up(value: float) -> int:
  return math.floor(value + 0.5)


def _with_currency(text: str, currency: str) -> str:
  return f"{text} {currency}" if currency else text


def format_price(value: float, currency: str = "") -> str:
  return _with_currency(f"{value:,.4f}", currency)


def format_spread(value: float, currency: str = "") -> str:
  return _with_currency(f"{value:+,.4f}", currency)


def format_pct(value: float) -> str:
  return f"{value:+,.3f}%"


def format_time_delta(seconds: int) -> str:
  """Describes how far the selected bar is from the transaction time."""
  if seconds <= 60:
    return "exact minute"
  if seconds < 3600:
    return f"~{_round_half_up(seconds / 60)} min away"
  return f"~{_round_half_up(seconds / 3600)} h away"


def format_bar_time(instant: datetime, offset_minutes: int) -> str:
  """Renders a bar's wall-clock time in the user's offset, e.g. `14:31 UTC+02:00`."""
  local = instant.astimezone(timezone(timedelta(minutes=offset_minutes)))
  return f"{local:%H:%M} UTC{format_offset(offset_minutes, minus_sign='−')}"


def format_verdict(spread: float) -> str:
  if spread <= 0:
    return "You paid at or below the market price."
  return "You paid more than the market price."
