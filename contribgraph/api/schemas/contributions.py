from datetime import date

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys for the frontend."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ContributionDay(CamelModel):
    """Single normalized day of upstream contributions."""

    date: date
    count: int


class ContributionsResponse(CamelModel):
    """Normalized contribution history for one identity."""

    identity: str
    total: int
    contributions: list[ContributionDay]


class CalendarDay(CamelModel):
    date: date
    count: int
    is_future: bool
    level: int


class MonthLabelSpan(CamelModel):
    label: str
    column_span: int


class CalendarResponse(CamelModel):
    """Display-ready calendar grid; weeks are columns of seven days."""

    identity: str
    total: int
    max_count: int
    weeks: list[list[CalendarDay]]
    month_labels: list[MonthLabelSpan]
