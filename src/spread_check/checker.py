from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from spread_check.errors import CheckInProgressError
from spread_check.history import HistoryStore
from spread_check.interfaces import BarsFetcher, TickerResolver
from spread_check.models import (
  HistoryEntry,
  ResolvedTicker,
  SelectedBar,
  SpreadResult,
  TransactionInput,
)
from spread_check.providers.interface import DataProvider
from spread_check.selector import DEFAULT_MAX_STALENESS_SECONDS, select_nearest
from spread_check.spread import compute_spread
from spread_check.timestamps import build_instant


@dataclass(frozen=True)
class CheckResult:
  ticker: ResolvedTicker
  bar: SelectedBar
  spread: SpreadResult
  entry: HistoryEntry


class SpreadChecker:
  """Runs one spread check end to end and records it in the history.

  Stages run sequentially and the first failure aborts the rest; nothing is
  written to the history unless every stage succeeded. Only one check may run
  at a time per checker.
  """

  def __init__(
    self,
    provider: DataProvider,
    history: HistoryStore | None = None,
    max_staleness_seconds: int = DEFAULT_MAX_STALENESS_SECONDS,
  ):
    for interface_class in (TickerResolver, BarsFetcher):
      if not provider.supports(interface_class):
        raise TypeError(
          f"Provider does not support {interface_class.__name__}, required for spread checks."
        )
    self._resolve_ticker = provider.get_fetcher(TickerResolver)
    self._get_bars = provider.get_fetcher(BarsFetcher)
    self.history = history
    self.max_staleness_seconds = max_staleness_seconds
    self._running = threading.Lock()

  def check(self, tx: TransactionInput) -> CheckResult:
    if not self._running.acquire(blocking=False):
      raise CheckInProgressError()
    try:
      return self._run(tx)
    finally:
      self._running.release()

  def _run(self, tx: TransactionInput) -> CheckResult:
    instant = build_instant(tx.date, tx.hour, tx.minute, tx.offset_minutes)
    ticker = self._resolve_ticker(tx.identifier)

    series = self._get_bars(ticker.symbol, instant)
    bar = select_nearest(series, instant, self.max_staleness_seconds)
    logging.info(
      f"Selected {ticker.symbol} bar at {bar.bar_instant.isoformat()} "
      f"({bar.diff_seconds}s from transaction), close {bar.price}"
    )

    spread = compute_spread(tx.units, tx.total_paid, tx.fees, bar.price)
    entry = HistoryEntry.from_check(tx, ticker, bar, spread)
    if self.history is not None:
      self.history.add(entry)

    return CheckResult(ticker=ticker, bar=bar, spread=spread, entry=entry)
