from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import requests

from spread_check.errors import NetworkError

# --- Module Constants ---
DEFAULT_RELAY_URL = "https://corsproxy.io/?url="
DEFAULT_TIMEOUT_SECONDS = 15.0

_HEADERS = {
  "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/134.0.6998.166 Safari/537.36",
  "Accept": "application/json",
}


class NetworkFetcher:
  """Fetches JSON from a URL, retrying once through a relay on failure.

  The relay is a generic "fetch this URL for me" endpoint that takes the
  original URL, percent-encoded, appended to `relay_url`. There is no retry
  loop: one direct attempt, then at most one relay attempt.
  """

  def __init__(
    self,
    relay_url: str = DEFAULT_RELAY_URL,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    skip_relay_on_client_error: bool = False,
    session: requests.Session | None = None,
  ):
    self.relay_url = relay_url
    self.timeout = timeout
    self.skip_relay_on_client_error = skip_relay_on_client_error
    self._owns_session = session is None
    self._session = session or requests.Session()
    self._session.headers.update(_HEADERS)

  def close(self) -> None:
    """Closes the HTTP session if this fetcher created it."""
    if self._owns_session:
      self._session.close()

  def __enter__(self) -> NetworkFetcher:
    return self

  def __exit__(self, *exc_info) -> None:
    self.close()

  def relay_url_for(self, url: str) -> str:
    return f"{self.relay_url}{quote(url, safe='')}"

  def fetch(self, url: str) -> Any:
    """Returns the parsed JSON body of `url`.

    Raises:
      NetworkError: If the direct attempt and the relay attempt both fail.
    """
    status = None
    try:
      logging.debug(f"GET {url}")
      response = self._session.get(url, timeout=self.timeout)
      status = response.status_code
      if response.ok:
        return response.json()
      logging.warning(f"Direct request to {url} returned HTTP {status}.")
    except requests.exceptions.RequestException as e:
      # JSONDecodeError from requests is a RequestException as well.
      logging.warning(f"Direct request to {url} failed: {e}")

    if (
      self.skip_relay_on_client_error
      and status is not None
      and 400 <= status < 500
    ):
      raise NetworkError(url, status)

    return self._fetch_via_relay(url)

  def _fetch_via_relay(self, url: str) -> Any:
    relay_url = self.relay_url_for(url)
    logging.info(f"Retrying {url} through relay.")
    try:
      response = self._session.get(relay_url, timeout=self.timeout)
    except requests.exceptions.RequestException as e:
      logging.error(f"Relay request for {url} failed: {e}")
      raise NetworkError(url) from e

    if not response.ok:
      logging.error(f"Relay request for {url} returned HTTP {response.status_code}.")
      raise NetworkError(url, response.status_code)

    try:
      return response.json()
    except requests.exceptions.JSONDecodeError as e:
      logging.error(f"Relay response for {url} is not valid JSON: {e}")
      raise NetworkError(url, response.status_code) from e
