from datetime import datetime
from typing import Protocol

from spread_check.models import BarSeries, ResolvedTicker


class DataProvider(Protocol):
  """
  A protocol defining the interface for market data providers.

  Providers expose their capabilities by interface class so callers can
  check `supports()` before asking for a fetcher.
  """

  def supports(self, interface_class: type) -> bool: ...

  def get_fetcher(self, interface_class: type): ...

  def resolve_ticker(self, identifier: str) -> ResolvedTicker: ...

  def get_bars(self, symbol: str, instant: datetime) -> BarSeries | None: ...

  def close(self) -> None: ...
