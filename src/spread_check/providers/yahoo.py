from __future__ import annotations

import functools
import logging
from datetime import datetime
from typing import Any
from urllib.parse import quote, urlencode

from pydantic import ValidationError

from spread_check.errors import TickerNotFoundError
from spread_check.fetcher import NetworkFetcher
from spread_check.interfaces import BarsFetcher, TickerResolver
from spread_check.models import BarSeries, PriceBar, ResolvedTicker
from spread_check.timestamps import to_unix

# --- Module Constants ---
_SEARCH_URL = "https://query2.finance.yahoo.com/v1/finance/search"
_CHART_URL = "https://query2.finance.yahoo.com/v8/finance/chart"
_SEARCH_QUOTES_COUNT = 5
_BAR_INTERVAL = "1m"
# Chart window around the transaction instant, in seconds.
_WINDOW_BEFORE_SECONDS = 120
_WINDOW_AFTER_SECONDS = 180


def _search_url(identifier: str) -> str:
  params = {"q": identifier, "quotesCount": _SEARCH_QUOTES_COUNT, "newsCount": 0}
  return f"{_SEARCH_URL}?{urlencode(params)}"


def _chart_url(symbol: str, period1: int, period2: int) -> str:
  params = {"period1": period1, "period2": period2, "interval": _BAR_INTERVAL}
  return f"{_CHART_URL}/{quote(symbol, safe='')}?{urlencode(params)}"


# --- Ticker Resolution Logic ---


def _build_ticker_from_quote(raw_quote: dict[str, Any]) -> ResolvedTicker | None:
  symbol = raw_quote.get("symbol")
  if not symbol:
    return None

  try:
    return ResolvedTicker(
      symbol=symbol,
      name=raw_quote.get("longname") or raw_quote.get("shortname") or "",
    )
  except ValidationError as e:
    logging.debug(f"Skipping search candidate {symbol} due to validation error: {e}")
    return None


def _resolve_ticker_impl(fetcher: NetworkFetcher, identifier: str) -> ResolvedTicker:
  """Resolves an identifier through the Yahoo Finance search endpoint.

  Candidates without a symbol are skipped, so the result is the first
  candidate carrying a symbol rather than strictly the first candidate
  returned. A response where no candidate has a symbol counts as not found.
  """
  logging.info(f"Resolving ticker for {identifier}")
  payload = fetcher.fetch(_search_url(identifier))

  quotes = payload.get("quotes") if isinstance(payload, dict) else None
  if not quotes:
    raise TickerNotFoundError(identifier)

  for raw_quote in quotes:
    if not isinstance(raw_quote, dict):
      continue
    ticker = _build_ticker_from_quote(raw_quote)
    if ticker:
      logging.info(f"Resolved {identifier} to {ticker.symbol} ({ticker.name or 'no name'})")
      return ticker

  raise TickerNotFoundError(identifier)


# --- Bar Fetching Logic ---


def _dict_or_none(value: Any) -> dict | None:
  return value if isinstance(value, dict) else None


def _first_dict(value: Any) -> dict | None:
  if isinstance(value, list) and value:
    return _dict_or_none(value[0])
  return None


def _parse_chart_result(symbol: str, payload: Any) -> BarSeries | None:
  """Turns a chart payload into a BarSeries, or None if the shape is unusable."""
  chart = _dict_or_none(payload.get("chart")) if isinstance(payload, dict) else None
  result = _first_dict(chart.get("result")) if chart else None
  if not result:
    return None

  indicators = _dict_or_none(result.get("indicators")) or {}
  quote_block = indicators.get("quote")
  quote_data = _first_dict(quote_block)
  if quote_block and quote_data is None:
    return None
  timestamps = result.get("timestamp") or []
  closes = (quote_data or {}).get("close") or []
  if not isinstance(timestamps, list) or not isinstance(closes, list):
    return None
  currency = (_dict_or_none(result.get("meta")) or {}).get("currency") or ""

  bars = []
  for index, ts in enumerate(timestamps):
    close = closes[index] if index < len(closes) else None
    try:
      bars.append(PriceBar(timestamp=ts, close=close, currency=currency))
    except ValidationError as e:
      logging.warning(f"Skipping chart bar {index} for {symbol} due to validation error: {e}")

  return BarSeries(symbol=symbol, currency=currency, bars=bars)


def _get_bars_impl(
  fetcher: NetworkFetcher, symbol: str, instant: datetime
) -> BarSeries | None:
  """Fetches 1-minute bars from two minutes before to three minutes after."""
  tx_unix = to_unix(instant)
  url = _chart_url(
    symbol, tx_unix - _WINDOW_BEFORE_SECONDS, tx_unix + _WINDOW_AFTER_SECONDS
  )
  logging.info(f"Fetching {_BAR_INTERVAL} bars for {symbol} around {instant.isoformat()}")
  payload = fetcher.fetch(url)

  series = _parse_chart_result(symbol, payload)
  if series is None:
    logging.warning(f"Chart endpoint returned no result for {symbol}")
  else:
    logging.debug(f"Received {len(series.bars)} bars for {symbol}")
  return series


# --- Public Provider Class ---


class YahooProvider:
  def __init__(self, fetcher: NetworkFetcher | None = None):
    self._fetcher = fetcher or NetworkFetcher()
    self._capabilities = {
      TickerResolver: functools.partial(_resolve_ticker_impl, self._fetcher),
      BarsFetcher: functools.partial(_get_bars_impl, self._fetcher),
    }

  def supports(self, interface_class: type) -> bool:
    return interface_class in self._capabilities

  def get_fetcher(self, interface_class: type):
    if not self.supports(interface_class):
      raise TypeError(f"This provider does not support {interface_class.__name__}")
    return self._capabilities[interface_class]

  def resolve_ticker(self, identifier: str) -> ResolvedTicker:
    return self.get_fetcher(TickerResolver)(identifier)

  def get_bars(self, symbol: str, instant: datetime) -> BarSeries | None:
    return self.get_fetcher(BarsFetcher)(symbol, instant)

  def close(self) -> None:
    """Releases the underlying HTTP connections."""
    self._fetcher.close()
