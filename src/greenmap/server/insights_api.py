"""Request/response AI endpoints: analysis, feedback suggestions, news.

Every endpoint answers ``{"result": ...}`` on success and
``{"error": "..."}`` with status 500 when the upstream call fails.
"""

from collections.abc import Awaitable
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from loguru import logger

from ..insights import AnalysisRequest, FeedbackSuggestionRequest, InsightService
from .deps import require_insights

router = APIRouter(tags=["Insights"])

GENERIC_ERROR = "An error occurred while processing your request with the AI."


async def _respond(task: str, call: Awaitable[Any]) -> JSONResponse:
    try:
        result = await call
    except Exception as e:
        logger.exception("Error in insight task {}", task)
        return JSONResponse(status_code=500, content={"error": str(e) or GENERIC_ERROR})
    return JSONResponse(content={"result": jsonable_encoder(result, by_alias=True)})


@router.post("/analysis")
async def analyze_reports(body: AnalysisRequest, service: InsightService = Depends(require_insights)):
    """Markdown analysis of the submitted reports."""
    return await _respond("analysis", service.analyze_reports(body.reports))


@router.post("/feedback/suggestion")
async def suggest_feedback(
    body: FeedbackSuggestionRequest,
    service: InsightService = Depends(require_insights)
):
    """One feedback item synthesized from existing feedback (or null)."""
    return await _respond("feedback_suggestion", service.suggest_feedback(body.existing_feedback))


@router.post("/feedback/general-suggestion")
async def suggest_general_feedback(service: InsightService = Depends(require_insights)):
    return await _respond("general_feedback_suggestion", service.suggest_general_feedback())


@router.post("/news")
async def fetch_news(service: InsightService = Depends(require_insights)):
    return await _respond("news", service.fetch_news())
