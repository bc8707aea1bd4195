import logging
from datetime import date
from datetime import datetime
from datetime import UTC

import httpx

from backend.api.schemas.contributions import ContributionCalendar
from backend.api.schemas.contributions import ContributionDay
from backend.api.schemas.contributions import ContributionStats
from backend.api.schemas.contributions import MostActiveDay
from backend.clients.github_client import fetch_contribution_calendar
from backend.services.outcome import capture
from backend.services.outcome import FailureReason
from backend.services.outcome import log_failure
from backend.services.outcome import Outcome
from backend.services.rounding import round_half_up
from backend.services.streaks import calculate_streaks


logger = logging.getLogger(__name__)


def utc_today() -> date:
    return datetime.now(UTC).date()


def find_most_active_day(days: list[ContributionDay]) -> MostActiveDay | None:
    """Return the day with the highest count; the first maximum wins ties."""

    best: ContributionDay | None = None
    for day in days:
        if best is None or day.count > best.count:
            best = day
    if best is None:
        return None
    return MostActiveDay(date=best.date, count=best.count)


def average_per_active_day(total_count: int, days: list[ContributionDay]) -> float:
    """Source total divided by the number of days with activity, 1 decimal."""

    active_days = sum(1 for day in days if day.count > 0)
    if active_days == 0:
        return 0
    return round_half_up(total_count / active_days, 1)


def summarize_calendar(calendar: ContributionCalendar, today: date) -> ContributionStats:
    """Build contribution stats from a fetched calendar.

    The total is taken from the calendar as reported by the source rather than
    summed from the days.
    """

    days = calendar.days()
    streaks = calculate_streaks(days, today)
    return ContributionStats(
        total_count=calendar.total_contributions,
        weeks=calendar.weeks,
        longest_streak=streaks.longest_streak,
        current_streak=streaks.current_streak,
        average_per_active_day=average_per_active_day(
            calendar.total_contributions, days
        ),
        most_active_day=find_most_active_day(days),
    )


async def fetch_calendar(
    username: str,
    *,
    client: httpx.AsyncClient,
    token: str | None,
    graphql_url: str,
    user_agent: str = "portfolio-feed",
) -> Outcome[ContributionCalendar]:
    outcome = await capture(
        fetch_contribution_calendar(
            client,
            username,
            token=token,
            graphql_url=graphql_url,
            user_agent=user_agent,
        )
    )
    if not outcome.ok:
        return Outcome.failed(outcome.failure, outcome.detail)

    try:
        calendar = ContributionCalendar.from_graphql(outcome.value)
    except (KeyError, TypeError, ValueError) as exc:
        return Outcome.failed(FailureReason.MALFORMED_PAYLOAD, str(exc))
    return Outcome.success(calendar)


async def get_contribution_stats(
    username: str,
    *,
    client: httpx.AsyncClient,
    token: str | None,
    graphql_url: str,
    user_agent: str = "portfolio-feed",
    today: date | None = None,
) -> ContributionStats | None:
    """Fetch a user's contribution calendar and summarize it.

    Returns None when stats are unavailable, including when no token is
    configured; failures are logged, never raised.
    """

    if not token:
        logger.warning("GITHUB_TOKEN not set, contribution stats require authentication")
        return None

    outcome = await fetch_calendar(
        username,
        client=client,
        token=token,
        graphql_url=graphql_url,
        user_agent=user_agent,
    )
    if not outcome.ok:
        log_failure(logger, f"Contribution stats for {username}", outcome)
        return None

    return summarize_calendar(outcome.value, today or utc_today())
