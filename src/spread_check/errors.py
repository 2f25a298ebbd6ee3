from __future__ import annotations


class SpreadCheckError(Exception):
  """Base class for every failure that aborts a spread check."""

  pass


class InvalidTimestampError(SpreadCheckError):
  def __init__(self, value: str):
    super().__init__(f"Invalid date, time or timezone: '{value}'.")
    self.value = value


class NetworkError(SpreadCheckError):
  """Raised when both the direct request and the relay request fail."""

  def __init__(self, url: str, status: int | None = None):
    if status is not None:
      message = f"API responded with HTTP {status}."
    else:
      message = "API request failed before a response was received."
    super().__init__(message)
    self.url = url
    self.status = status


class TickerNotFoundError(SpreadCheckError):
  def __init__(self, identifier: str):
    super().__init__(f"No ticker found for identifier '{identifier}'.")
    self.identifier = identifier


class CheckInProgressError(SpreadCheckError):
  def __init__(self):
    super().__init__("A spread check is already running.")


class PriceDataError(SpreadCheckError):
  """Base class for failures while picking a price out of a bar series."""

  pass


class NoSeriesDataError(PriceDataError):
  def __init__(self):
    super().__init__("No chart data available for this ticker and time window.")


class NoBarsError(PriceDataError):
  def __init__(self):
    super().__init__("No price bars found around the transaction time.")


class NoValidCloseError(PriceDataError):
  def __init__(self):
    super().__init__("No price bar in the window has a usable close price.")


class BarTooStaleError(PriceDataError):
  def __init__(self, minutes: int):
    super().__init__(
      f"Nearest price bar is {minutes} minutes away from the transaction time."
    )
    self.minutes = minutes
