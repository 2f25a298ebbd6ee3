from __future__ import annotations

import logging
import math
from datetime import datetime

from spread_check.errors import (
  BarTooStaleError,
  NoBarsError,
  NoSeriesDataError,
  NoValidCloseError,
)
from spread_check.models import BarSeries, SelectedBar
from spread_check.timestamps import from_unix, to_unix

DEFAULT_MAX_STALENESS_SECONDS = 300


def _round_minutes(seconds: int) -> int:
  # Half rounds up, so 450 s reports 8 minutes.
  return math.floor(seconds / 60 + 0.5)


def select_nearest(
  series: BarSeries | None,
  target: datetime,
  max_staleness_seconds: int = DEFAULT_MAX_STALENESS_SECONDS,
) -> SelectedBar:
  """Picks the bar closest in time to `target`.

  Intraday minute bars have gaps (market closed, feed holes), so the nearest
  bar is only accepted within `max_staleness_seconds`. Bars whose close is
  missing, zero or negative are skipped. On equal distance the earlier bar
  in series order wins.

  Failures are checked in this order: series presence, bar presence, close
  validity, staleness.

  Args:
    series: Bars as delivered by the source, or None if there was no result
    target: Transaction instant (timezone-aware)
    max_staleness_seconds: Largest accepted distance to the chosen bar

  Returns:
    SelectedBar with the close price, bar instant, distance and currency

  Raises:
    NoSeriesDataError: If there is no series at all
    NoBarsError: If the series holds no bars
    NoValidCloseError: If no bar has a positive close
    BarTooStaleError: If the nearest bar is too far from the target
  """
  if series is None:
    raise NoSeriesDataError()
  if not series.bars:
    raise NoBarsError()

  target_unix = to_unix(target)
  best = None
  best_diff = None
  for bar in series.bars:
    if bar.close is None or bar.close <= 0:
      continue
    diff = abs(bar.timestamp - target_unix)
    if best_diff is None or diff < best_diff:
      best, best_diff = bar, diff

  if best is None:
    raise NoValidCloseError()

  if best_diff > max_staleness_seconds:
    logging.warning(
      f"Nearest bar for {series.symbol} is {best_diff}s away (limit {max_staleness_seconds}s)"
    )
    raise BarTooStaleError(_round_minutes(best_diff))

  return SelectedBar(
    price=best.close,
    bar_instant=from_unix(best.timestamp),
    diff_seconds=best_diff,
    currency=series.currency,
  )
