"""Discovery use case: run the engine, cache the result, persist it."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from cdr_discovery.application.context import DiscoveryContext
from cdr_discovery.discovery.contracts import DiscoveryResult, SearchCriteria
from cdr_discovery.discovery.engine import DiscoveryEngine
from cdr_discovery.infrastructure.logging import make_logger
from cdr_discovery.shared.exceptions import PersistenceError


class DiscoveryOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    result: DiscoveryResult
    persisted: bool = False
    persistence_error: str = ""

    @property
    def session_id(self) -> str:
        return self.result.session_id


def _persist(ctx: DiscoveryContext, result: DiscoveryResult) -> tuple[bool, str]:
    repo = getattr(ctx, "persistence_repo", None)
    if repo is None:
        return False, ""
    try:
        repo.save_session(result)
    except PersistenceError as exc:
        if ctx.logger is not None:
            ctx.logger.bind(result.session_id).warning("persistence", f"persist failed: {exc}")
        return False, str(exc)
    return repo.backend != "noop", ""


def run_discovery(
    criteria: SearchCriteria,
    ctx: DiscoveryContext,
    *,
    base_url: str | None = None,
    access_token: str | None = None,
) -> DiscoveryOutcome:
    """
    Query every eligible endpoint, cache the result under its session id and
    persist it. A persistence failure is reported on the outcome; the cached
    result stays readable either way.
    """
    engine = DiscoveryEngine(
        ctx.http_client,
        base_url=base_url if base_url is not None else ctx.settings.base_url,
        access_token=access_token if access_token is not None else ctx.settings.access_token,
        catalog=ctx.catalog,
        default_limit=ctx.settings.default_limit,
        logger=ctx.logger or make_logger(debug=ctx.settings.debug_logging),
    )
    result = engine.run(criteria)
    ctx.results_cache.store(result.session_id, result)
    persisted, error = _persist(ctx, result)
    return DiscoveryOutcome(result=result, persisted=persisted, persistence_error=error)


__all__ = ["DiscoveryOutcome", "run_discovery"]
