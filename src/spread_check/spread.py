from __future__ import annotations

from spread_check.models import SpreadResult


def compute_spread(
  units: float, total_paid: float, fees: float, market_price: float
) -> SpreadResult:
  """Computes per-unit prices and the spread against `market_price`.

  No validation happens here: callers guarantee units > 0 and
  market_price > 0.
  """
  unit_price_excl_fees = (total_paid - fees) / units
  unit_price_incl_fees = total_paid / units
  spread = unit_price_incl_fees - market_price
  spread_pct = spread / market_price * 100

  return SpreadResult(
    unit_price_excl_fees=unit_price_excl_fees,
    unit_price_incl_fees=unit_price_incl_fees,
    yahoo_price=market_price,
    spread=spread,
    spread_pct=spread_pct,
  )
