"""
API route handlers for the cookbook assistant.

Handlers are plain functions; FastAPI runs them in its threadpool
because every collaborator call blocks.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from cookbook.api.models import (
    AskRequest,
    AskResponse,
    ErrorResponse,
    HealthResponse,
    SourceInfo,
    SourcesResponse,
    SyncedSource,
)
from cookbook.errors import ValidationError
from cookbook.services import Services

logger = logging.getLogger(__name__)

router = APIRouter()


def get_services(request: Request) -> Services:
    """Services built by the application lifespan."""
    return request.app.state.services


@router.post(
    "/chatbot/ask",
    response_model=AskResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def ask(body: AskRequest, services: Services = Depends(get_services)):
    """
    Ask the cookbook a question.

    Retrieves the most relevant recipe passages and returns an answer
    grounded in them, with the source files used.
    """
    if services.composer is None:
        raise HTTPException(status_code=500, detail="Answer composer is not configured")

    logger.info(f"[Question] {body.question}")

    try:
        result = services.composer.generate(body.question)

    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    except Exception as e:
        logger.exception("Error processing question")
        raise HTTPException(
            status_code=500,
            detail=f"An error occurred while processing your question: {e}",
        )

    logger.info(f"[Answer] {result.response[:200]}")

    return AskResponse(
        question=body.question,
        answer=result.response,
        sources=[SourceInfo(**s) for s in result.sources],
    )


@router.get("/health", response_model=HealthResponse)
def health_check(services: Services = Depends(get_services)):
    """
    Health check endpoint.

    Returns service status and store sizes.
    """
    try:
        parent_stats = services.parent_store.get_stats()

        return HealthResponse(
            status="healthy",
            parent_chunks=parent_stats.get("total_parent_chunks", 0),
            child_chunks=services.vector_store.count(),
        )

    except Exception as e:
        logger.warning(f"Health check warning: {e}")
        return HealthResponse(status="degraded")


@router.get("/sources", response_model=SourcesResponse, responses={500: {"model": ErrorResponse}})
def list_sources(services: Services = Depends(get_services)):
    """
    List synced source files with their content hashes.
    """
    try:
        pairs = services.parent_store.get_all_source_file_hashes()

    except Exception as e:
        logger.exception("Error in sources endpoint")
        raise HTTPException(status_code=500, detail=str(e))

    return SourcesResponse(
        sources=[SyncedSource(source_file=name, hash=h) for name, h in pairs],
        total_count=len(pairs),
    )
