"""
Content pipeline FastAPI application.

Main entry point for the backend API server.
"""

import logging
from uuid import UUID

from fastapi import FastAPI, Depends, Query, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from content_pipeline import __version__
from content_pipeline.config import settings
from content_pipeline.database.repositories import AgentLogRepository
from content_pipeline.database.session import get_db
from content_pipeline.schemas import (
    AgentLogResponse,
    ErrorResponse,
    GenerateRequest,
    GenerateResponse,
    RunSummary,
)
from content_pipeline.services.pipeline import PipelineOrchestrator, PipelineError


logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

INVALID_INPUT_MESSAGE = "Invalid input: 'prd' field is required and must be a non-empty string"


# Create FastAPI application
app = FastAPI(
    title="Content Pipeline API",
    description="Multi-agent pipeline turning product requirements into fact-checked blog posts",
    version=__version__,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


def get_orchestrator() -> PipelineOrchestrator:
    """FastAPI dependency providing a pipeline orchestrator."""
    return PipelineOrchestrator()


def error_response(status_code: int, message: str) -> JSONResponse:
    """Build the failure envelope used by all pipeline endpoints."""
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


@app.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns basic service status.
    """
    return {
        "status": "healthy",
        "service": "content-pipeline-api",
        "version": __version__,
    }


@app.post("/api/generate")
async def generate(
    request: Request,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator)
):
    """
    Run the 4-agent pipeline on a product requirements document.

    Body: {"prd": "<document text>"}

    Pipeline:
    1. ResearcherAgent
    2. WriterAgent
    3. FactCheckerAgent (revises the draft on failed verdicts, bounded)
    4. PolisherAgent

    Returns:
        200 {"success": true, "data": {runId, research, draft, factCheckPassed, finalPost}}
        400 {"success": false, "error": ...} if prd is missing, not a string or blank
        500 {"success": false, "error": ...} if the pipeline fails
    """
    try:
        body = await request.json()
        request_data = GenerateRequest.model_validate(body)
    except ValidationError:
        return error_response(400, INVALID_INPUT_MESSAGE)
    except ValueError:
        # Body is not valid JSON
        return error_response(400, INVALID_INPUT_MESSAGE)

    logger.info("[API] Received content generation request")

    try:
        run = await orchestrator.run_pipeline(request_data.prd)
    except PipelineError as e:
        logger.error("[API] Pipeline execution failed: %s", e)
        return error_response(500, str(e))
    except Exception as e:
        logger.exception("[API] Unexpected pipeline error")
        return error_response(500, f"Unexpected error in pipeline: {str(e)}")

    logger.info("[API] Pipeline completed successfully. Run ID: %s", run.run_id)

    response = GenerateResponse(data=run.to_result())
    return JSONResponse(status_code=200, content=response.model_dump(mode="json", by_alias=True))


@app.get("/api/runs")
async def list_runs(
    limit: int = Query(20, ge=1, le=100, description="Maximum number of runs to return"),
    db: AsyncSession = Depends(get_db)
):
    """
    List recent runs, most recently active first.

    Args:
        limit: Number of runs to return (default: 20, max: 100)
        db: Database session
    """
    repo = AgentLogRepository(db)
    runs = await repo.list_runs(limit=limit)

    return {
        "runs": [RunSummary(**run).model_dump(mode="json") for run in runs],
        "count": len(runs),
    }


@app.get("/api/runs/{run_id}/logs")
async def get_run_logs(
    run_id: UUID,
    db: AsyncSession = Depends(get_db)
):
    """
    Get the execution log of a run for the timeline viewer.

    Entries are ordered by creation time, oldest first.

    Raises:
        HTTPException: 404 if the run has no log entries
    """
    repo = AgentLogRepository(db)
    logs = await repo.get_by_run_id(run_id)

    if not logs:
        raise HTTPException(status_code=404, detail="Run not found")

    return {
        "run_id": str(run_id),
        "logs": [
            AgentLogResponse(
                id=log.id,
                run_id=log.run_id,
                agent=log.agent.value,
                input=log.input,
                output=log.output,
                metadata=log.log_metadata,
                created_at=log.created_at,
            ).model_dump(mode="json")
            for log in logs
        ],
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "content_pipeline.main:app",
        host=settings.SERVICE_HOST,
        port=settings.SERVICE_PORT,
        reload=True,
    )
