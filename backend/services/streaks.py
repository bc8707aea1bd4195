from collections.abc import Iterable
from datetime import date

from backend.api.schemas.contributions import ContributionDay
from backend.api.schemas.contributions import StreakSummary


def longest_streak(days: Iterable[ContributionDay]) -> int:
    """Length of the longest run of consecutive active days, in date order."""

    longest = 0
    run = 0
    for day in sorted(days, key=lambda item: item.date):
        if day.count > 0:
            run += 1
            longest = max(longest, run)
        else:
            run = 0
    return longest


def current_streak(days: Iterable[ContributionDay], today: date) -> int:
    """Count active days walking back from `today`.

    Counting starts at the record dated `today`, or, when that record is
    missing, at the most recent active day. The first inactive day after
    counting has started ends the streak.
    """

    streak = 0
    started = False
    for day in sorted(days, key=lambda item: item.date, reverse=True):
        if day.date == today or (not started and day.count > 0):
            started = True

        if not started:
            continue
        if day.count == 0:
            break
        streak += 1
    return streak


def calculate_streaks(days: Iterable[ContributionDay], today: date) -> StreakSummary:
    """Compute current and longest streaks over an unordered set of days."""

    days = list(days)
    return StreakSummary(
        current_streak=current_streak(days, today),
        longest_streak=longest_streak(days),
    )
