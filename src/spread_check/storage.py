from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path


class KeyValueStore(ABC):
  """Abstract base class for string key-value persistence."""

  @abstractmethod
  def get(self, key: str) -> str | None:
    """Returns the stored value, or None if the key is missing."""
    pass

  @abstractmethod
  def set(self, key: str, value: str) -> None:
    """Stores `value` under `key`, replacing any previous value."""
    pass


class MemoryStore(KeyValueStore):
  def __init__(self, initial: dict[str, str] | None = None):
    self._data = dict(initial or {})

  def get(self, key: str) -> str | None:
    return self._data.get(key)

  def set(self, key: str, value: str) -> None:
    self._data[key] = value


class JsonFileStore(KeyValueStore):
  """Keeps every key in a single JSON object file.

  Writes go through a temporary file in the same directory and are moved into
  place, so a crash mid-write leaves the previous file intact.
  """

  def __init__(self, path: str | Path):
    self.path = Path(path).expanduser()

  def _read_all(self) -> dict[str, str]:
    if not self.path.exists():
      return {}
    try:
      payload = json.loads(self.path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
      logging.error(f"Failed to read key-value file {self.path}: {e}")
      return {}

    if not isinstance(payload, dict):
      logging.warning(f"Key-value file {self.path} has invalid format; ignoring it")
      return {}
    return payload

  def get(self, key: str) -> str | None:
    value = self._read_all().get(key)
    return value if isinstance(value, str) else None

  def set(self, key: str, value: str) -> None:
    data = self._read_all()
    data[key] = value

    self.path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
    try:
      with os.fdopen(fd, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False)
      os.replace(tmp_path, self.path)
    except OSError:
      if os.path.exists(tmp_path):
        os.remove(tmp_path)
      raise
