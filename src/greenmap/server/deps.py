"""FastAPI dependencies shared by the routers."""

from fastapi import HTTPException, Request

from ..insights import InsightService
from ..llm import LLMProvider


def require_llm(request: Request) -> LLMProvider:
    """The configured LLM provider, or 503 when none is configured."""
    llm = getattr(request.app.state, "llm", None)
    if llm is None:
        raise HTTPException(status_code=503, detail="AI assistant is not configured. Set GEMINI_API_KEY.")
    return llm


def require_insights(request: Request) -> InsightService:
    llm = require_llm(request)
    return InsightService(llm, analysis_model=getattr(request.app.state, "analysis_model", None))
