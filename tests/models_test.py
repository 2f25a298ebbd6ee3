from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from spread_check.models import (
  HistoryEntry,
  ResolvedTicker,
  SelectedBar,
  SpreadResult,
  TransactionInput,
  normalize_identifier,
)


def _tx(**overrides):
  fields = {
    "identifier": "US0378331005",
    "units": 10,
    "total_paid": 1005,
    "fees": 5,
    "date": "2024-03-15",
    "hour": 15,
    "minute": 30,
    "offset_minutes": 60,
  }
  fields.update(overrides)
  return TransactionInput(**fields)


def test_normalize_identifier():
  assert normalize_identifier("  us0378331005\n") == "US0378331005"


def test_transaction_input_normalizes_identifier():
  assert _tx(identifier=" ie00b4l5y983 ").identifier == "IE00B4L5Y983"


def test_transaction_input_fees_default_to_zero():
  tx = TransactionInput(
    identifier="X", units=1, total_paid=1, date="2024-03-15", hour=0, minute=0, offset_minutes=0
  )
  assert tx.fees == 0


@pytest.mark.parametrize(
  "overrides",
  [
    {"identifier": "   "},
    {"units": 0},
    {"units": -1},
    {"total_paid": 0},
    {"fees": -0.01},
    {"hour": 24},
    {"hour": -1},
    {"minute": 60},
    {"offset_minutes": 900},
  ],
)
def test_transaction_input_rejects_out_of_range_values(overrides):
  with pytest.raises(ValidationError):
    _tx(**overrides)


def test_resolved_ticker_label():
  assert ResolvedTicker(symbol="AAPL", name="Apple Inc.").label == "Apple Inc."
  assert ResolvedTicker(symbol="AAPL").label == "AAPL"


def test_history_entry_from_check():
  created_at = datetime(2024, 3, 15, 16, 0, tzinfo=UTC)
  bar = SelectedBar(
    price=100.0,
    bar_instant=datetime(2024, 3, 15, 14, 30, tzinfo=UTC),
    diff_seconds=0,
    currency="USD",
  )
  result = SpreadResult(
    unit_price_excl_fees=100.0,
    unit_price_incl_fees=100.5,
    yahoo_price=100.0,
    spread=0.5,
    spread_pct=0.5,
  )

  entry = HistoryEntry.from_check(
    _tx(), ResolvedTicker(symbol="AAPL", name="Apple Inc."), bar, result, created_at
  )

  assert entry.timestamp == int(created_at.timestamp() * 1000)
  assert entry.created_at == created_at
  assert entry.isin == "US0378331005"
  assert entry.ticker == "Apple Inc."
  assert entry.symbol == "AAPL"
  assert entry.spread_pct == 0.5
  assert entry.currency == "USD"
  assert entry.bar_timestamp == int(bar.bar_instant.timestamp())
  assert entry.offset_minutes == 60


def test_history_entry_is_immutable(make_entry):
  entry = make_entry()
  with pytest.raises(ValidationError):
    entry.spread = 1.0


def test_history_entry_serializes_with_camel_case_keys(make_entry):
  payload = make_entry(spread_pct=1.25).model_dump(mode="json", by_alias=True)

  assert payload["spreadPct"] == 1.25
  assert payload["totalPaid"] == 1005.0
  assert "spread_pct" not in payload
