import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from datetime import datetime
from typing import Any

import httpx

from contribgraph.clients.contributions_client import fetch_contribution_payload


logger = logging.getLogger(__name__)

COUNT_FIELDS = ("count", "contributionCount")
TOTAL_FIELDS = ("total", "totalContributions")


class InvalidIdentityError(Exception):
    """Raised when the requested identity is empty after trimming."""


class UpstreamUnavailableError(Exception):
    """Raised when the contributions API fails, rejects or returns garbage."""


@dataclass(frozen=True)
class DailyRecord:
    date: date
    count: int


@dataclass(frozen=True)
class NormalizedResponse:
    identity: str
    total: int
    records: tuple[DailyRecord, ...]


@dataclass(frozen=True)
class ExtractionStrategy:
    """Named lookup of the contribution list at a fixed nesting path."""

    name: str
    path: tuple[str, ...]

    def extract(self, payload: Any) -> list[Any] | None:
        node = payload
        for key in self.path:
            if not isinstance(node, Mapping):
                return None
            node = node.get(key)
        return node if isinstance(node, list) else None


EXTRACTION_STRATEGIES = (
    ExtractionStrategy(name="top_level", path=("contributions",)),
    ExtractionStrategy(
        name="nested_contributions", path=("contributions", "contributions")
    ),
    ExtractionStrategy(name="data_envelope", path=("data", "contributions")),
)


def coerce_count(value: Any) -> int | None:
    """Return a non-negative integer count, or None if value is not numeric."""

    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None

    if isinstance(value, float):
        number = value
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(number) or number < 0:
        return None
    return int(number)


def parse_record_date(raw_value: Any) -> date | None:
    if not isinstance(raw_value, str):
        return None

    try:
        return date.fromisoformat(raw_value)
    except ValueError:
        pass

    try:
        return datetime.fromisoformat(raw_value.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def first_count(item: Mapping[str, Any], fields: tuple[str, ...]) -> int | None:
    for field in fields:
        count = coerce_count(item.get(field))
        if count is not None:
            return count
    return None


def extract_contribution_items(payload: Any) -> list[Any]:
    """Probe the known payload shapes in priority order."""

    for strategy in EXTRACTION_STRATEGIES:
        items = strategy.extract(payload)
        if items is not None:
            logger.info(
                "Matched %s contribution shape with %d entries",
                strategy.name,
                len(items),
            )
            return items

    logger.info("No contribution list found in upstream payload")
    return []


def normalize_payload(identity: str, payload: Any) -> NormalizedResponse:
    """Turn any known upstream payload shape into a NormalizedResponse.

    Entries without a parseable date are dropped. When a date repeats, the
    last entry seen wins.
    """

    counts_by_date: dict[date, int] = {}
    for item in extract_contribution_items(payload):
        if not isinstance(item, Mapping):
            continue

        day = parse_record_date(item.get("date"))
        if day is None:
            continue

        counts_by_date[day] = first_count(item, COUNT_FIELDS) or 0

    records = tuple(
        DailyRecord(date=day, count=count)
        for day, count in sorted(counts_by_date.items())
    )

    total = None
    if isinstance(payload, Mapping):
        total = first_count(payload, TOTAL_FIELDS)
    if total is None:
        total = sum(record.count for record in records)

    return NormalizedResponse(identity=identity, total=total, records=records)


def fetch_contributions(
    identity: str,
    api_url: str,
    user_agent: str,
    timeout: float = 15.0,
) -> NormalizedResponse:
    """Fetch and normalize the trailing contribution history for identity."""

    username = identity.strip()
    if not username:
        raise InvalidIdentityError("identity cannot be empty")

    try:
        payload = fetch_contribution_payload(
            identity=username,
            api_url=api_url,
            user_agent=user_agent,
            timeout=timeout,
        )
    except httpx.HTTPStatusError as exc:
        logger.warning(
            "Contributions API answered %s for %s",
            exc.response.status_code,
            username,
        )
        raise UpstreamUnavailableError from exc
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("Contributions API request failed for %s: %s", username, exc)
        raise UpstreamUnavailableError from exc

    return normalize_payload(username, payload)
