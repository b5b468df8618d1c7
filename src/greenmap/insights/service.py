"""Request/response AI tasks built on the LLM provider.

Each task builds its prompt, calls the provider once, and validates
the result. Provider errors propagate to the caller.
"""

import json
from collections.abc import Sequence
from typing import Any

from google.genai import types
from loguru import logger

from ..llm import ChatMessage, LLMProvider
from ..prompts import load_prompt
from .models import Feedback, FeedbackCategory, FeedbackSuggestion, NewsArticle, Report
from .news import parse_news_articles

EMPTY_FEEDBACK_SUGGESTION = FeedbackSuggestion(
    category=FeedbackCategory.FEATURE,
    message=(
        "Since there's no feedback yet, how about adding a 'Community Events' feature "
        "where users can organize clean-ups or tree plantings through the app?"
    ),
)


def _validate_suggestion(raw: Any) -> FeedbackSuggestion | None:
    """Accept only objects with a known category and a non-empty message."""
    if not isinstance(raw, dict):
        return None
    category = raw.get("category")
    message = raw.get("message")
    if category not in {c.value for c in FeedbackCategory} or not message:
        return None
    return FeedbackSuggestion(category=category, message=message)


class InsightService:
    """Report analysis, feedback synthesis and news fetch for GreenMap."""

    def __init__(
        self,
        llm: LLMProvider,
        analysis_model: str | None = None,
    ):
        """Initialize the service.

        Args:
            llm: Provider used for every task
            analysis_model: Model for report analysis (None uses provider default)
        """
        self._llm = llm
        self._analysis_model = analysis_model

    async def analyze_reports(self, reports: Sequence[Report]) -> str:
        """Summarize reports as Markdown."""
        data = json.dumps(
            [
                {
                    "type": r.type.value,
                    "location": r.location,
                    "description": r.description,
                    "date": r.reported_at.date().isoformat(),
                }
                for r in reports
            ],
            indent=2,
        )
        prompt = load_prompt("report_analysis").format(data=data)
        response = await self._llm.chat_completion(
            [ChatMessage(role="user", content=prompt)],
            model=self._analysis_model,
            temperature=0.5,
            top_p=0.95,
        )
        return response.content

    async def suggest_feedback(self, existing: Sequence[Feedback]) -> FeedbackSuggestion | None:
        """Synthesize one new feedback item from existing feedback.

        Returns a fixed suggestion when there is no feedback yet, and
        None when the model's answer fails validation.
        """
        if not existing:
            return EMPTY_FEEDBACK_SUGGESTION

        data = json.dumps([{"category": f.category.value, "message": f.message} for f in existing])
        prompt = load_prompt("feedback_synthesis").format(data=data)
        raw = await self._llm.structured_completion(prompt, FeedbackSuggestion)
        suggestion = _validate_suggestion(raw)
        if suggestion is None:
            logger.warning("Discarding invalid feedback suggestion: {!r}", raw)
        return suggestion

    async def suggest_general_feedback(self) -> FeedbackSuggestion | None:
        """Invent one feedback item without looking at existing feedback."""
        raw = await self._llm.structured_completion(load_prompt("feedback_general"), FeedbackSuggestion)
        suggestion = _validate_suggestion(raw)
        if suggestion is None:
            logger.warning("Discarding invalid general feedback suggestion: {!r}", raw)
        return suggestion

    async def fetch_news(self) -> list[NewsArticle]:
        """Fetch recent environmental news using Google Search grounding."""
        response = await self._llm.chat_completion(
            [ChatMessage(role="user", content=load_prompt("news_articles"))],
            temperature=0.3,
            tools=[types.Tool(google_search=types.GoogleSearch())],
        )
        articles = parse_news_articles(response.content)
        logger.debug("Parsed {} news articles", len(articles))
        return articles
