"""Application layer: context wiring and the discovery use case."""

from cdr_discovery.application.context import DiscoveryContext, make_discovery_context
from cdr_discovery.application.discover import DiscoveryOutcome, run_discovery

__all__ = ["DiscoveryContext", "DiscoveryOutcome", "make_discovery_context", "run_discovery"]
