from datetime import datetime

from fastapi import APIRouter
from fastapi import HTTPException
from fastapi import Request
from fastapi import Response

from contribgraph.api.schemas.contributions import CalendarDay
from contribgraph.api.schemas.contributions import CalendarResponse
from contribgraph.api.schemas.contributions import ContributionDay
from contribgraph.api.schemas.contributions import ContributionsResponse
from contribgraph.api.schemas.contributions import MonthLabelSpan
from contribgraph.core.budget import UpstreamBudgetExceededError
from contribgraph.services.calendar_service import GridConfig
from contribgraph.services.calendar_service import build_calendar_grid
from contribgraph.services.contribution_service import InvalidIdentityError
from contribgraph.services.contribution_service import NormalizedResponse
from contribgraph.services.contribution_service import UpstreamUnavailableError
from contribgraph.services.contribution_service import fetch_contributions


router = APIRouter()


@router.get("/health/live")
def health_live() -> dict[str, str]:
    """Return liveness response for health checks."""

    return {"status": "ok"}


@router.get("/contributions/")
def get_contributions_without_identity() -> None:
    """Reject requests that leave the identity segment out entirely."""

    raise HTTPException(status_code=400, detail="identity cannot be empty")


def load_contributions(request: Request, identity: str) -> NormalizedResponse:
    """Return cached contributions for identity, fetching them on a miss.

    Only cache misses are charged against the shared upstream budget.
    """

    settings = request.app.state.settings
    cache = request.app.state.contributions_cache
    budget = request.app.state.upstream_budget

    cache_key = identity.strip()
    if not cache_key:
        raise HTTPException(status_code=400, detail="identity cannot be empty")

    cached = cache.get(cache_key)
    if cached is not None:
        return cached

    try:
        budget.acquire()
    except UpstreamBudgetExceededError as exc:
        raise HTTPException(
            status_code=429,
            detail="Too Many Requests",
            headers={"Retry-After": str(exc.retry_after)},
        ) from exc

    try:
        result = fetch_contributions(
            identity=identity,
            api_url=settings.contributions_api_url,
            user_agent=settings.user_agent,
            timeout=settings.upstream_timeout_seconds,
        )
    except InvalidIdentityError as exc:
        raise HTTPException(status_code=400, detail="identity cannot be empty") from exc
    except UpstreamUnavailableError as exc:
        raise HTTPException(status_code=502, detail="Upstream request failed") from exc

    cache.set(cache_key, result)
    return result


def set_cache_headers(request: Request, response: Response) -> None:
    ttl = request.app.state.settings.cache_ttl_seconds
    response.headers["Cache-Control"] = f"public, max-age={ttl}"


@router.get("/contributions/{identity}", response_model=ContributionsResponse)
def get_contributions(
    identity: str, request: Request, response: Response
) -> ContributionsResponse:
    """Return normalized per-day contribution counts for identity."""

    result = load_contributions(request, identity)
    set_cache_headers(request, response)
    return ContributionsResponse(
        identity=result.identity,
        total=result.total,
        contributions=[
            ContributionDay(date=record.date, count=record.count)
            for record in result.records
        ],
    )


@router.get("/contributions/{identity}/calendar", response_model=CalendarResponse)
def get_contribution_calendar(
    identity: str, request: Request, response: Response
) -> CalendarResponse:
    """Return the trailing contribution calendar grid for identity."""

    settings = request.app.state.settings
    result = load_contributions(request, identity)
    grid = build_calendar_grid(
        result,
        now=datetime.now(),
        config=GridConfig(
            window_weeks=settings.calendar_window_weeks,
            week_start=settings.calendar_week_start,
        ),
    )

    set_cache_headers(request, response)
    return CalendarResponse(
        identity=result.identity,
        total=grid.total,
        max_count=grid.max_count,
        weeks=[
            [
                CalendarDay(
                    date=day.date,
                    count=day.count,
                    is_future=day.is_future,
                    level=day.level,
                )
                for day in week
            ]
            for week in grid.weeks
        ],
        month_labels=[
            MonthLabelSpan(label=span.label, column_span=span.column_span)
            for span in grid.month_labels
        ],
    )
