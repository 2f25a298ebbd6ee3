from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable

from pydantic import ValidationError

from spread_check.models import HistoryEntry
from spread_check.storage import KeyValueStore

HISTORY_KEY = "spread-calculator-history"
MAX_HISTORY = 100


class HistoryStore:
  """A bounded, newest-first collection of past spread checks.

  The whole collection is written back to the key-value store after every
  mutation. Loading never raises: a missing key or unreadable data gives an
  empty history. Persistence failures are logged and otherwise ignored so
  they never block a check.
  """

  def __init__(
    self,
    store: KeyValueStore,
    capacity: int = MAX_HISTORY,
    key: str = HISTORY_KEY,
  ):
    if capacity <= 0:
      raise ValueError("History capacity must be positive.")
    self._store = store
    self.capacity = capacity
    self.key = key
    self._entries: list[HistoryEntry] = []
    self._lock = threading.RLock()
    self._listeners: list[Callable[[list[HistoryEntry]], None]] = []

  def __len__(self) -> int:
    return len(self._entries)

  def subscribe(self, listener: Callable[[list[HistoryEntry]], None]) -> None:
    """Registers a callback that receives the entries after every change."""
    self._listeners.append(listener)

  def all(self) -> list[HistoryEntry]:
    with self._lock:
      return list(self._entries)

  # --- Persistence ---

  def load(self) -> None:
    with self._lock:
      self._entries = self._read()
      logging.debug(f"Loaded {len(self._entries)} history entries")
    self._notify()

  def _read(self) -> list[HistoryEntry]:
    try:
      raw = self._store.get(self.key)
    except (OSError, ValueError) as e:
      logging.error(f"Failed to load history: {e}")
      return []
    if not raw:
      return []

    try:
      payload = json.loads(raw)
    except json.JSONDecodeError as e:
      logging.error(f"History data is corrupted, starting empty: {e}")
      return []
    if not isinstance(payload, list):
      logging.warning("History data has invalid format, starting empty")
      return []

    entries = []
    for index, item in enumerate(payload):
      try:
        entries.append(HistoryEntry.model_validate(item))
      except ValidationError as e:
        logging.warning(f"Skipping history entry {index} due to validation error: {e}")
    return entries[: self.capacity]

  def _save(self) -> None:
    try:
      payload = [entry.model_dump(mode="json", by_alias=True) for entry in self._entries]
      self._store.set(self.key, json.dumps(payload))
    except (OSError, TypeError, ValueError) as e:
      logging.error(f"Failed to save history: {e}")

  def _notify(self) -> None:
    entries = self.all()
    for listener in self._listeners:
      listener(entries)

  # --- Mutations ---

  def add(self, entry: HistoryEntry) -> None:
    with self._lock:
      self._entries.insert(0, entry)
      if len(self._entries) > self.capacity:
        del self._entries[self.capacity :]
      self._save()
    self._notify()

  def remove(self, index: int) -> bool:
    """Deletes the entry at `index` (newest-first). Returns False if out of range."""
    with self._lock:
      if not 0 <= index < len(self._entries):
        return False
      del self._entries[index]
      self._save()
    self._notify()
    return True

  def clear(self) -> None:
    with self._lock:
      self._entries = []
      self._save()
    self._notify()

  # --- Aggregates ---

  def average_spread_pct(self) -> float | None:
    with self._lock:
      if not self._entries:
        return None
      return sum(entry.spread_pct for entry in self._entries) / len(self._entries)
