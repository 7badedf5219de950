"""Read-side services over the results cache and the session store."""

from cdr_discovery.services.session_service import (
    get_cached_result,
    get_raw_data_summary,
    get_stored_session,
    list_session_records,
    list_sessions,
    list_top_analytics,
)

__all__ = [
    "get_cached_result",
    "get_raw_data_summary",
    "get_stored_session",
    "list_session_records",
    "list_sessions",
    "list_top_analytics",
]
