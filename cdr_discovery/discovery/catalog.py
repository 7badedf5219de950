"""Static catalog of queryable CDR endpoints."""

from __future__ import annotations

from cdr_discovery.discovery.contracts import EndpointConfig

_PAGED_PARAMS = ("start", "limit", "raw")

ENDPOINT_CATALOG: tuple[EndpointConfig, ...] = (
    EndpointConfig(
        name="global_cdrs",
        url_template="/ns-api/v2/cdrs",
        required_params=(),
        optional_params=_PAGED_PARAMS,
        supports_raw=True,
        description="All CDRs system-wide (supports raw=yes)",
    ),
    EndpointConfig(
        name="domain_cdrs",
        url_template="/ns-api/v2/domains/{domain}/cdrs",
        required_params=("domain",),
        optional_params=_PAGED_PARAMS,
        supports_raw=True,
        description="CDRs for specific domain (supports raw=yes)",
    ),
    EndpointConfig(
        name="user_cdrs",
        url_template="/ns-api/v2/domains/{domain}/users/{user}/cdrs",
        required_params=("domain", "user"),
        optional_params=_PAGED_PARAMS,
        supports_raw=True,
        description="CDRs for specific user (supports raw=yes)",
    ),
    EndpointConfig(
        name="site_cdrs",
        url_template="/ns-api/v2/domains/{domain}/sites/{site}/cdrs",
        required_params=("domain", "site"),
        optional_params=_PAGED_PARAMS,
        supports_raw=True,
        description="CDRs for specific site (supports raw=yes)",
    ),
    EndpointConfig(
        name="global_count",
        url_template="/ns-api/v2/cdrs/count",
        description="Count and sum of all CDRs",
    ),
    EndpointConfig(
        name="domain_count",
        url_template="/ns-api/v2/domains/{domain}/cdrs/count",
        required_params=("domain",),
        description="Count and sum for domain CDRs",
    ),
    EndpointConfig(
        name="user_count",
        url_template="/ns-api/v2/domains/{domain}/users/{user}/cdrs/count",
        required_params=("domain", "user"),
        description="Count and sum for user CDRs",
    ),
)


def get_supported_endpoints() -> tuple[EndpointConfig, ...]:
    return ENDPOINT_CATALOG


def find_endpoint(name: str, catalog: tuple[EndpointConfig, ...] = ENDPOINT_CATALOG) -> EndpointConfig | None:
    for endpoint in catalog:
        if endpoint.name == name:
            return endpoint
    return None


__all__ = ["ENDPOINT_CATALOG", "find_endpoint", "get_supported_endpoints"]
