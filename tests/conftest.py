from datetime import UTC, datetime
from unittest.mock import Mock

import pytest

from spread_check.models import HistoryEntry

# 2024-03-15 14:30:00 UTC
TX_UNIX = int(datetime(2024, 3, 15, 14, 30, tzinfo=UTC).timestamp())


def search_payload(*quotes):
  return {"count": len(quotes), "quotes": list(quotes), "news": []}


def chart_payload(timestamps, closes, currency="USD"):
  return {
    "chart": {
      "result": [
        {
          "meta": {"currency": currency, "symbol": "AAPL"},
          "timestamp": timestamps,
          "indicators": {"quote": [{"close": closes}]},
        }
      ],
      "error": None,
    }
  }


@pytest.fixture
def fake_fetcher():
  fetcher = Mock()
  fetcher.fetch.side_effect = [
    search_payload({"symbol": "AAPL", "longname": "Apple Inc.", "shortname": "Apple"}),
    chart_payload([TX_UNIX - 60, TX_UNIX, TX_UNIX + 60], [99.0, 100.0, 101.0]),
  ]
  return fetcher


@pytest.fixture
def make_entry():
  def _make_entry(spread_pct: float = 0.5, timestamp: int = 1_700_000_000_000, **overrides):
    fields = {
      "timestamp": timestamp,
      "isin": "US0378331005",
      "ticker": "Apple Inc.",
      "symbol": "AAPL",
      "units": 10.0,
      "total_paid": 1005.0,
      "fees": 5.0,
      "yahoo_price": 100.0,
      "unit_price_excl_fees": 100.0,
      "unit_price_incl_fees": 100.5,
      "spread": spread_pct,
      "spread_pct": spread_pct,
      "currency": "USD",
    }
    fields.update(overrides)
    return HistoryEntry(**fields)

  return _make_entry
