from __future__ import annotations

from datetime import date as date_type
from datetime import UTC, datetime, timedelta

from spread_check.errors import InvalidTimestampError


def format_offset(offset_minutes: int, minus_sign: str = "-") -> str:
  """Renders a signed UTC offset in minutes as `+HH:MM` / `-HH:MM`."""
  sign = "+" if offset_minutes >= 0 else minus_sign
  hours, minutes = divmod(abs(offset_minutes), 60)
  return f"{sign}{hours:02d}:{minutes:02d}"


def build_instant(
  date: str | date_type, hour: int, minute: int, offset_minutes: int
) -> datetime:
  """Combines calendar date, wall-clock time and UTC offset into an instant.

  Hour and minute ranges are expected to be checked by the caller. The
  composed ISO string is the only thing validated here.

  Raises:
    InvalidTimestampError: If the composed value does not parse.
  """
  date_str = date.isoformat() if isinstance(date, date_type) else str(date).strip()
  try:
    composed = f"{date_str}T{hour:02d}:{minute:02d}:00{format_offset(offset_minutes)}"
  except (TypeError, ValueError) as e:
    raise InvalidTimestampError(f"{date_str} {hour}:{minute} {offset_minutes}") from e

  # fromisoformat also accepts week dates and compact forms; only the
  # extended calendar form is a valid date here.
  if len(date_str) != 10:
    raise InvalidTimestampError(composed)

  try:
    instant = datetime.fromisoformat(composed)
  except ValueError as e:
    raise InvalidTimestampError(composed) from e

  if instant.tzinfo is None:
    raise InvalidTimestampError(composed)
  return instant


def to_unix(instant: datetime) -> int:
  return int(instant.timestamp())


def from_unix(seconds: int) -> datetime:
  return datetime.fromtimestamp(seconds, tz=UTC)


def local_offset_minutes(now: datetime | None = None) -> int:
  """Returns the machine's current UTC offset in whole minutes."""
  now = now or datetime.now().astimezone()
  offset = now.utcoffset() or timedelta(0)
  return int(offset.total_seconds() // 60)
