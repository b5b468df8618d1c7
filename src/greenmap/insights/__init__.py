"""AI insight tasks: report analysis, feedback synthesis and news."""

from .models import (
    AnalysisRequest,
    Feedback,
    FeedbackCategory,
    FeedbackStatus,
    FeedbackSuggestion,
    FeedbackSuggestionRequest,
    NewsArticle,
    Report,
    ReportType,
)
from .news import parse_news_articles
from .service import EMPTY_FEEDBACK_SUGGESTION, InsightService

__all__ = [
    "AnalysisRequest",
    "EMPTY_FEEDBACK_SUGGESTION",
    "Feedback",
    "FeedbackCategory",
    "FeedbackStatus",
    "FeedbackSuggestion",
    "FeedbackSuggestionRequest",
    "InsightService",
    "NewsArticle",
    "Report",
    "ReportType",
    "parse_news_articles",
]
