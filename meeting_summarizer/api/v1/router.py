from fastapi import APIRouter

from meeting_summarizer.api.v1.endpoints import documents, emails, summaries

# Create API router
api_router = APIRouter()

api_router.include_router(documents.router, tags=["Documents"])
api_router.include_router(summaries.router, tags=["Summaries"])
api_router.include_router(emails.router, tags=["Email"])

__all__ = ["api_router"]
