import pytest

from spread_check.spread import compute_spread


def test_overpaid_example():
  result = compute_spread(units=10, total_paid=1005, fees=5, market_price=100)

  assert result.unit_price_excl_fees == pytest.approx(100.0)
  assert result.unit_price_incl_fees == pytest.approx(100.5)
  assert result.yahoo_price == 100
  assert result.spread == pytest.approx(0.5)
  assert result.spread_pct == pytest.approx(0.5)
  assert not result.is_favorable


def test_paid_below_market_is_favorable():
  result = compute_spread(units=4, total_paid=398, fees=0, market_price=100)

  assert result.spread == pytest.approx(-0.5)
  assert result.spread_pct == pytest.approx(-0.5)
  assert result.is_favorable


def test_paying_exactly_market_is_favorable():
  result = compute_spread(units=2, total_paid=250, fees=0, market_price=125)

  assert result.spread == 0
  assert result.spread_pct == 0
  assert result.is_favorable


@pytest.mark.parametrize(
  "units,total_paid,fees,market_price",
  [(3, 100, 1.5, 33.0), (0.25, 12.5, 0, 51.0), (1000, 5021.7, 2.99, 5.0)],
)
def test_spread_pct_sign_matches_spread(units, total_paid, fees, market_price):
  result = compute_spread(units, total_paid, fees, market_price)
  assert (result.spread > 0) == (result.spread_pct > 0)
  assert result.unit_price_excl_fees <= result.unit_price_incl_fees


def test_zero_units_is_the_callers_problem():
  with pytest.raises(ZeroDivisionError):
    compute_spread(units=0, total_paid=100, fees=0, market_price=10)
