from __future__ import annotations

import importlib
from dataclasses import dataclass

from spread_check.config import Settings
from spread_check.fetcher import NetworkFetcher


@dataclass
class ProviderMetadata:
  class_path: str
  description: str = ""


_PROVIDERS = {
  "yahoo": ProviderMetadata(
    class_path="spread_check.providers.yahoo.YahooProvider",
    description="Yahoo Finance search and 1-minute chart endpoints",
  ),
}

DEFAULT_PROVIDER = "yahoo"


class ProviderFactory:
  @staticmethod
  def _import_from_string(path: str) -> type:
    """Helper to dynamically import a class from a string path."""
    module_name, class_name = path.rsplit(".", 1)
    module = importlib.import_module(module_name)
    return getattr(module, class_name)

  @staticmethod
  def available() -> list[str]:
    return sorted(_PROVIDERS)

  def create(self, provider_name: str, settings: Settings | None = None):
    """Creates a provider instance wired to a NetworkFetcher built from settings."""
    metadata = _PROVIDERS.get(provider_name)
    if not metadata:
      raise ValueError(f"Provider '{provider_name}' not found.")

    settings = settings or Settings()
    fetcher = NetworkFetcher(
      relay_url=settings.relay_url,
      timeout=settings.timeout,
      skip_relay_on_client_error=settings.skip_relay_on_client_error,
    )
    provider_class = self._import_from_string(metadata.class_path)
    return provider_class(fetcher=fetcher)
