from pydantic import BaseModel
from pydantic import Field

from backend.api.schemas.contributions import ContributionStats


NO_DESCRIPTION = "No description available"


class Project(BaseModel):
    """Source-agnostic description of one public repository."""

    id: str
    name: str
    description: str = NO_DESCRIPTION
    topics: list[str] = Field(default_factory=list)
    languages: dict[str, int | float] = Field(default_factory=dict)
    star_count: int = 0
    fork_count: int = 0
    canonical_url: str
    homepage_url: str | None = None
    featured: bool = False


class PortfolioResponse(BaseModel):
    """Projects from every configured source plus contribution stats."""

    projects: list[Project]
    contributions: ContributionStats | None = None
