"""Data models for the insight endpoints.

Field names are snake_case in Python and camelCase on the wire, so the
browser client can post its Report and Feedback objects unchanged.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReportType(str, Enum):
    TREE_PLANTATION = "Tree Plantation"
    POLLUTION_HOTSPOT = "Pollution Hotspot"


class FeedbackCategory(str, Enum):
    GENERAL = "General Feedback"
    BUG = "Bug Report"
    FEATURE = "Feature Request"


class FeedbackStatus(str, Enum):
    RECEIVED = "Received"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class Coordinates(_CamelModel):
    lat: float
    lng: float


class UserRef(_CamelModel):
    name: str
    avatar: str = ""


class Report(_CamelModel):
    """A map marker submitted by a user."""

    id: int | str
    type: ReportType
    location: str
    description: str
    coords: Coordinates | None = None
    reported_at: datetime
    user: UserRef | None = None


class Feedback(_CamelModel):
    """A feedback item submitted by a user."""

    id: int | str | None = None
    category: FeedbackCategory
    message: str
    submitted_at: datetime | None = None
    status: FeedbackStatus = FeedbackStatus.RECEIVED
    is_important: bool = False
    user: UserRef | None = None


class FeedbackSuggestion(BaseModel):
    """An AI-generated feedback item."""

    category: FeedbackCategory = Field(
        description='The category of the feedback. Must be one of: '
                    '"Feature Request", "Bug Report", or "General Feedback".'
    )
    message: str = Field(description="The detailed feedback message.")


class NewsArticle(_CamelModel):
    id: int
    title: str
    source: str
    published_at: str
    summary: str
    image_url: str
    url: str


class AnalysisRequest(_CamelModel):
    reports: list[Report] = Field(default_factory=list)


class FeedbackSuggestionRequest(_CamelModel):
    existing_feedback: list[Feedback] = Field(default_factory=list)
