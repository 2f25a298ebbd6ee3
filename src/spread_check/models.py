from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


def normalize_identifier(value: str) -> str:
  """Trims and uppercases a user-entered identifier such as an ISIN."""
  return value.strip().upper()


class ResolvedTicker(BaseModel):
  """A tradable symbol returned by the ticker search."""

  model_config = ConfigDict(frozen=True)

  symbol: str
  name: str = ""

  @property
  def label(self) -> str:
    return self.name or self.symbol


class PriceBar(BaseModel):
  """A single 1-minute bar. `close` is None when the feed left a hole."""

  model_config = ConfigDict(frozen=True)

  timestamp: int
  close: float | None = None
  currency: str = ""


class BarSeries(BaseModel):
  """Bars for one symbol in the order the source delivered them."""

  model_config = ConfigDict(frozen=True)

  symbol: str
  currency: str = ""
  bars: list[PriceBar] = Field(default_factory=list)


class SelectedBar(BaseModel):
  model_config = ConfigDict(frozen=True)

  price: float
  bar_instant: datetime
  diff_seconds: int = Field(ge=0)
  currency: str = ""


class SpreadResult(BaseModel):
  """Per-unit prices and the spread against the market reference price.

  A spread at or below zero means the purchase was at or below market.
  """

  model_config = ConfigDict(frozen=True)

  unit_price_excl_fees: float
  unit_price_incl_fees: float
  yahoo_price: float
  spread: float
  spread_pct: float

  @property
  def is_favorable(self) -> bool:
    return self.spread <= 0


class TransactionInput(BaseModel):
  """Raw purchase details as typed by the user.

  Range checks live here; the date itself is only validated when the
  instant is built.
  """

  model_config = ConfigDict(frozen=True)

  identifier: str = Field(min_length=1)
  units: float = Field(gt=0)
  total_paid: float = Field(gt=0)
  fees: float = Field(default=0.0, ge=0)
  date: str
  hour: int = Field(ge=0, le=23)
  minute: int = Field(ge=0, le=59)
  offset_minutes: int = Field(ge=-720, le=840)

  @field_validator("identifier", mode="before")
  @classmethod
  def clean_identifier(cls, v: object) -> object:  # noqa: N805
    if isinstance(v, str):
      return normalize_identifier(v)
    return v


class HistoryEntry(BaseModel):
  """An immutable record of one successful spread check.

  Field aliases follow the persisted JSON layout. Fields beyond the basic
  record (symbol, bar and offset details) are optional so older histories
  still load.
  """

  model_config = ConfigDict(frozen=True, populate_by_name=True)

  timestamp: int  # creation time, epoch milliseconds
  isin: str
  ticker: str
  symbol: str | None = None
  name: str | None = None
  units: float
  total_paid: float = Field(alias="totalPaid")
  fees: float = 0.0
  yahoo_price: float = Field(alias="yahooPrice")
  unit_price_excl_fees: float | None = Field(default=None, alias="unitPriceExclFees")
  unit_price_incl_fees: float = Field(alias="unitPriceInclFees")
  spread: float
  spread_pct: float = Field(alias="spreadPct")
  currency: str = ""
  bar_timestamp: int | None = Field(default=None, alias="barTimestamp")
  diff_seconds: int | None = Field(default=None, alias="diffSeconds")
  offset_minutes: int | None = Field(default=None, alias="offsetMinutes")

  @property
  def created_at(self) -> datetime:
    return datetime.fromtimestamp(self.timestamp / 1000, tz=UTC)

  @classmethod
  def from_check(
    cls,
    tx: TransactionInput,
    ticker: ResolvedTicker,
    bar: SelectedBar,
    result: SpreadResult,
    created_at: datetime | None = None,
  ) -> HistoryEntry:
    created_at = created_at or datetime.now(UTC)
    return cls(
      timestamp=int(created_at.timestamp() * 1000),
      isin=tx.identifier,
      ticker=ticker.label,
      symbol=ticker.symbol,
      name=ticker.name,
      units=tx.units,
      total_paid=tx.total_paid,
      fees=tx.fees,
      yahoo_price=result.yahoo_price,
      unit_price_excl_fees=result.unit_price_excl_fees,
      unit_price_incl_fees=result.unit_price_incl_fees,
      spread=result.spread,
      spread_pct=result.spread_pct,
      currency=bar.currency,
      bar_timestamp=int(bar.bar_instant.timestamp()),
      diff_seconds=bar.diff_seconds,
      offset_minutes=tx.offset_minutes,
    )
