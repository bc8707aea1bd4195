from datetime import date
from enum import StrEnum
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class ContributionLevel(StrEnum):
    """Intensity bucket GitHub assigns to a calendar day."""

    NONE = "NONE"
    FIRST_QUARTILE = "FIRST_QUARTILE"
    SECOND_QUARTILE = "SECOND_QUARTILE"
    THIRD_QUARTILE = "THIRD_QUARTILE"
    FOURTH_QUARTILE = "FOURTH_QUARTILE"

    @property
    def ordinal(self) -> int:
        return list(ContributionLevel).index(self)

    @classmethod
    def from_count(cls, count: int) -> "ContributionLevel":
        """Map a daily contribution count to a level when the source omits one."""

        if count <= 0:
            return cls.NONE
        if count <= 2:
            return cls.FIRST_QUARTILE
        if count <= 5:
            return cls.SECOND_QUARTILE
        if count <= 9:
            return cls.THIRD_QUARTILE
        return cls.FOURTH_QUARTILE


class ContributionDay(BaseModel):
    """Single calendar day with its activity count."""

    model_config = ConfigDict(frozen=True)

    date: date
    count: int = Field(ge=0)
    level: ContributionLevel = ContributionLevel.NONE

    @classmethod
    def from_graphql(cls, data: dict[str, Any]) -> "ContributionDay":
        count = data["contributionCount"]
        raw_level = data.get("contributionLevel")
        try:
            level = ContributionLevel(raw_level)
        except ValueError:
            level = ContributionLevel.from_count(count)
        return cls(date=date.fromisoformat(data["date"]), count=count, level=level)


class ContributionWeek(BaseModel):
    """Week bucket of days, in the order the source returned them."""

    model_config = ConfigDict(frozen=True)

    days: list[ContributionDay] = Field(default_factory=list)


class ContributionCalendar(BaseModel):
    """One year of contribution weeks plus the source-reported total."""

    total_contributions: int = 0
    weeks: list[ContributionWeek] = Field(default_factory=list)

    @classmethod
    def from_graphql(cls, data: dict[str, Any]) -> "ContributionCalendar":
        weeks = [
            ContributionWeek(
                days=[
                    ContributionDay.from_graphql(day)
                    for day in week["contributionDays"]
                ]
            )
            for week in data["weeks"]
        ]
        return cls(total_contributions=data["totalContributions"], weeks=weeks)

    def days(self) -> list[ContributionDay]:
        return [day for week in self.weeks for day in week.days]


class MostActiveDay(BaseModel):
    date: date
    count: int


class StreakSummary(BaseModel):
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)


class ContributionStats(BaseModel):
    """Contribution statistics derived from a calendar."""

    total_count: int
    weeks: list[ContributionWeek]
    longest_streak: int
    current_streak: int
    average_per_active_day: float
    most_active_day: MostActiveDay | None = None
