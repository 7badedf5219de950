"""Choose which catalog endpoints a discovery run should query."""

from __future__ import annotations

from collections.abc import Sequence

from cdr_discovery.discovery.catalog import ENDPOINT_CATALOG
from cdr_discovery.discovery.contracts import EndpointConfig, SearchCriteria


def has_required_params(endpoint: EndpointConfig, criteria: SearchCriteria) -> bool:
    values = criteria.path_params()
    for name in endpoint.required_params:
        if not str(values.get(name, "") or "").strip():
            return False
    return True


def select_endpoints(
    criteria: SearchCriteria,
    catalog: Sequence[EndpointConfig] = ENDPOINT_CATALOG,
) -> list[EndpointConfig]:
    """
    Record endpoints whose required parameters the criteria satisfy, in
    catalog order. Count endpoints never qualify. When nothing qualifies the
    broadest record endpoint (no required parameters) is returned alone.
    """
    selected = [
        endpoint
        for endpoint in catalog
        if not endpoint.is_count_endpoint and has_required_params(endpoint, criteria)
    ]
    if selected:
        return selected

    for endpoint in catalog:
        if not endpoint.is_count_endpoint and not endpoint.required_params:
            return [endpoint]
    raise ValueError("endpoint catalog has no record endpoint without required parameters")


__all__ = ["has_required_params", "select_endpoints"]
