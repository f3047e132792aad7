from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from contribgraph.api.routes.contributions import router
from contribgraph.core.budget import UpstreamBudget
from contribgraph.core.cache import ResponseCache
from contribgraph.core.observability import configure_logging
from contribgraph.core.observability import init_sentry
from contribgraph.settings import Settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    app.state.contributions_cache.clear()


def create_app() -> FastAPI:
    """Build the application with settings read from the environment."""

    settings = Settings()
    configure_logging(settings)
    init_sentry(settings)

    app = FastAPI(title="contribgraph", lifespan=lifespan)
    app.state.settings = settings
    app.state.contributions_cache = ResponseCache(
        ttl_seconds=settings.cache_ttl_seconds,
        max_entries=settings.cache_max_entries,
    )
    app.state.upstream_budget = UpstreamBudget(
        max_calls=settings.upstream_calls_per_window,
        window_seconds=settings.upstream_window_seconds,
    )
    app.include_router(router)
    return app


app = create_app()
