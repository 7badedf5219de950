"""Runtime configuration helpers."""

from cdr_discovery.config.settings import DiscoverySettings, load_settings

__all__ = ["DiscoverySettings", "load_settings"]
