from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query, Request

from careerprep.models.payloads import AnalyzeRequest, SaveAnalysisRequest
from careerprep.models.response import AnalyzeResponse, DeleteResponse
from careerprep.routers.dependencies import get_user_id
from careerprep.services.analysis import AnalysisService, get_analysis_service
from careerprep.utils.exceptions import ExceptionContext
from careerprep.utils.logging_config import PerformanceMonitor, get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.post("", response_model=AnalyzeResponse)
async def analyze_resume(
    payload: AnalyzeRequest,
    request: Request,
    user_id: str = Depends(get_user_id),
    service: AnalysisService = Depends(get_analysis_service),
):
    """Match a resume against up to ten job descriptions"""
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.info(
        f"Analyzing resume against {len(payload.job_descriptions)} job description(s)",
        extra={"request_id": request_id, "user_id": user_id},
    )
    with PerformanceMonitor("analyze_resume", logger, threshold_ms=30000):
        with ExceptionContext("analyze_resume", logger, request_id=request_id, user_id=user_id):
            return await service.analyze(user_id, payload.resume_text, payload.job_descriptions)


@router.post("/save")
async def save_analysis(
    payload: SaveAnalysisRequest,
    request: Request,
    user_id: str = Depends(get_user_id),
    service: AnalysisService = Depends(get_analysis_service),
):
    request_id = getattr(request.state, 'request_id', 'unknown')
    with ExceptionContext("save_analysis", logger, request_id=request_id, user_id=user_id):
        doc = await service.save(user_id, payload.resume_hash, payload.title)
    return {
        "id": doc["id"],
        "resume_hash": doc["resume_hash"],
        "title": doc.get("title"),
        "is_saved": doc.get("is_saved", True),
        "saved_at": doc.get("saved_at"),
    }


@router.get("", response_model=List[Dict[str, Any]])
async def list_analyses(
    request: Request,
    limit: int = Query(50, ge=1, le=200),
    user_id: str = Depends(get_user_id),
    service: AnalysisService = Depends(get_analysis_service),
):
    """Stored analyses of the caller, most recently updated first"""
    request_id = getattr(request.state, 'request_id', 'unknown')
    with ExceptionContext("list_analyses", logger, request_id=request_id, user_id=user_id):
        analyses = await service.list_analyses(user_id, limit)
    logger.info(f"Fetched {len(analyses)} analyses", extra={"request_id": request_id, "user_id": user_id})
    return analyses


@router.get("/{analysis_id}")
async def get_analysis(
    analysis_id: str,
    request: Request,
    user_id: str = Depends(get_user_id),
    service: AnalysisService = Depends(get_analysis_service),
):
    request_id = getattr(request.state, 'request_id', 'unknown')
    with ExceptionContext("get_analysis", logger, request_id=request_id, analysis_id=analysis_id):
        doc = await service.get_analysis(user_id, analysis_id)
    doc.pop("user_id", None)
    return doc


@router.delete("/{analysis_id}", response_model=DeleteResponse)
async def delete_analysis(
    analysis_id: str,
    request: Request,
    user_id: str = Depends(get_user_id),
    service: AnalysisService = Depends(get_analysis_service),
):
    request_id = getattr(request.state, 'request_id', 'unknown')
    with ExceptionContext("delete_analysis", logger, request_id=request_id, analysis_id=analysis_id):
        await service.delete_analysis(user_id, analysis_id)
    return DeleteResponse(message="Analysis deleted", details={"analysis_id": analysis_id})
