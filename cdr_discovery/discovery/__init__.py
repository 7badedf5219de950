"""Endpoint catalog, selection, querying and aggregation."""

from cdr_discovery.discovery.aggregator import AggregateSummary, aggregate, deduplicate_records
from cdr_discovery.discovery.catalog import ENDPOINT_CATALOG, find_endpoint, get_supported_endpoints
from cdr_discovery.discovery.contracts import (
    DiscoveryResult,
    EndpointConfig,
    EndpointResult,
    SearchCriteria,
    raw_data_summary,
)
from cdr_discovery.discovery.engine import DiscoveryEngine, generate_session_id, prepare_criteria
from cdr_discovery.discovery.executor import QueryExecutor, build_endpoint_url, build_query_params
from cdr_discovery.discovery.selector import has_required_params, select_endpoints

__all__ = [
    "AggregateSummary",
    "DiscoveryEngine",
    "DiscoveryResult",
    "ENDPOINT_CATALOG",
    "EndpointConfig",
    "EndpointResult",
    "QueryExecutor",
    "SearchCriteria",
    "aggregate",
    "build_endpoint_url",
    "build_query_params",
    "deduplicate_records",
    "find_endpoint",
    "generate_session_id",
    "get_supported_endpoints",
    "has_required_params",
    "prepare_criteria",
    "raw_data_summary",
    "select_endpoints",
]
