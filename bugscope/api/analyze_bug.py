"""
POST /api/bugs/analyze
======================
Runs the analysis pipeline for one bug report and returns the result.

The endpoint always answers 200 for a well-formed body: pipeline failures
are reported inside the result (``error`` set, ``success`` false), never as
HTTP errors. Only body validation produces a 422.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import Field

from bugscope.agents.analysis_orchestrator import AnalysisOrchestrator
from bugscope.core.config import MEDIA_ROOT, GatewaySettings
from bugscope.docs.index import DocumentationIndex
from bugscope.media.resolver import MediaResolver
from bugscope.media.storage import FilesystemBlobStore
from bugscope.models.analysis_result import AnalysisOptions, AnalysisResult, CamelModel
from bugscope.models.bug_report import BugReport

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bugs", tags=["Bug Analysis"])

_orchestrator: Optional[AnalysisOrchestrator] = None


# ---------------------------------------------------------------------------
# Request / Response schemas
# ---------------------------------------------------------------------------
class AnalyzeBugRequest(CamelModel):
    bug: BugReport
    include_screenshot: bool = False
    include_video: bool = False
    timeout_seconds: Optional[float] = Field(default=None, gt=0)


class AnalyzeBugResponse(CamelModel):
    success: bool
    analysis: AnalysisResult


# ---------------------------------------------------------------------------
# Orchestrator wiring
# ---------------------------------------------------------------------------
def build_orchestrator() -> AnalysisOrchestrator:
    """Build the service-wide orchestrator from the environment."""
    storage = FilesystemBlobStore(MEDIA_ROOT) if MEDIA_ROOT else None
    if storage is None:
        logger.warning("MEDIA_ROOT not set; internally hosted media cannot be resolved")
    return AnalysisOrchestrator(
        settings=GatewaySettings.from_env(),
        index=DocumentationIndex(),
        media_resolver=MediaResolver(storage=storage),
    )


def get_orchestrator() -> AnalysisOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = build_orchestrator()
    return _orchestrator


async def shutdown_orchestrator() -> None:
    """Release the orchestrator's HTTP clients, if one was created."""
    global _orchestrator
    if _orchestrator is not None:
        await _orchestrator.close()
        _orchestrator = None


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------
@router.post("/analyze", response_model=AnalyzeBugResponse, response_model_by_alias=True)
async def analyze_bug(
    request: AnalyzeBugRequest,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
):
    """Analyze a bug report with documentation context and optional media."""
    logger.info(
        f"[API] Analysis requested for bug {request.bug.id} "
        f"(screenshot={request.include_screenshot}, video={request.include_video})"
    )
    options = AnalysisOptions(
        include_screenshot=request.include_screenshot,
        include_video=request.include_video,
        timeout_seconds=request.timeout_seconds,
    )
    analysis = await orchestrator.analyze(request.bug, options)

    logger.info(
        f"[API] Analysis for bug {request.bug.id} finished in "
        f"{analysis.processing_time_ms}ms (error={analysis.error})"
    )
    return AnalyzeBugResponse(success=analysis.error is None, analysis=analysis)
