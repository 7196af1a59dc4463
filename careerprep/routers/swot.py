from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request

from careerprep.models.payloads import SaveRatingsRequest
from careerprep.models.response import DeleteResponse
from careerprep.routers.dependencies import get_user_id
from careerprep.services.ratings import RatingService, get_rating_service
from careerprep.utils.exceptions import ExceptionContext
from careerprep.utils.logging_config import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.post("/ratings")
async def save_ratings(
    payload: SaveRatingsRequest,
    request: Request,
    user_id: str = Depends(get_user_id),
    service: RatingService = Depends(get_rating_service),
):
    """Store self-assessed confidence levels for the technologies of one resume"""
    request_id = getattr(request.state, 'request_id', 'unknown')
    with ExceptionContext("save_ratings", logger, request_id=request_id, user_id=user_id):
        doc = await service.save_ratings(user_id, payload.resume_hash, payload.technologies)
    return {
        "id": doc["id"],
        "resume_hash": doc["resume_hash"],
        "technologies": doc["technologies"],
        "metadata": doc["metadata"],
        "updated_at": doc.get("updated_at"),
    }


@router.get("/ratings", response_model=List[Dict[str, Any]])
async def get_ratings(
    request: Request,
    resume_hash: Optional[str] = Query(None),
    user_id: str = Depends(get_user_id),
    service: RatingService = Depends(get_rating_service),
):
    request_id = getattr(request.state, 'request_id', 'unknown')
    with ExceptionContext("get_ratings", logger, request_id=request_id, user_id=user_id):
        return await service.get_ratings(user_id, resume_hash)


@router.get("/ratings/{resume_hash}/stats")
async def rating_stats(
    resume_hash: str,
    request: Request,
    user_id: str = Depends(get_user_id),
    service: RatingService = Depends(get_rating_service),
):
    request_id = getattr(request.state, 'request_id', 'unknown')
    with ExceptionContext("rating_stats", logger, request_id=request_id, user_id=user_id):
        return await service.stats(user_id, resume_hash)


@router.delete("/ratings/{resume_hash}", response_model=DeleteResponse)
async def delete_ratings(
    resume_hash: str,
    request: Request,
    user_id: str = Depends(get_user_id),
    service: RatingService = Depends(get_rating_service),
):
    request_id = getattr(request.state, 'request_id', 'unknown')
    with ExceptionContext("delete_ratings", logger, request_id=request_id, user_id=user_id):
        await service.delete_ratings(user_id, resume_hash)
    return DeleteResponse(message="Technology ratings deleted", details={"resume_hash": resume_hash})
