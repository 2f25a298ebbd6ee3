from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from spread_check.models import BarSeries, ResolvedTicker


class TickerResolver(ABC):
  """Abstract base class for identifier-to-ticker resolution."""

  @abstractmethod
  def resolve_ticker(self, identifier: str) -> ResolvedTicker:
    """Maps a free-text identifier (e.g. an ISIN) to a tradable symbol.

    Args:
      identifier: Normalized identifier entered by the user

    Returns:
      The first matching ResolvedTicker

    Raises:
      TickerNotFoundError: If the search returns no candidates
    """
    pass


class BarsFetcher(ABC):
  """Abstract base class for intraday bar retrieval around an instant."""

  @abstractmethod
  def get_bars(self, symbol: str, instant: datetime) -> BarSeries | None:
    """Fetches 1-minute bars in a small window around `instant`.

    Args:
      symbol: Tradable ticker symbol
      instant: Timezone-aware transaction instant

    Returns:
      BarSeries in delivered order, or None if the source has no data
    """
    pass
