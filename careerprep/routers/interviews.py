from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query, Request

from careerprep.models.payloads import CreateInterviewRequest, SubmitAnswerRequest
from careerprep.models.response import (
    InterviewFeedbackResponse,
    NextQuestionResponse,
    SessionView,
    SubmitAnswerResponse,
)
from careerprep.routers.dependencies import get_user_id
from careerprep.services.session_manager import InterviewSessionManager, get_session_manager
from careerprep.utils.exceptions import ExceptionContext
from careerprep.utils.logging_config import PerformanceMonitor, get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.post("", response_model=SessionView, status_code=201)
async def create_interview(
    payload: CreateInterviewRequest,
    request: Request,
    user_id: str = Depends(get_user_id),
    manager: InterviewSessionManager = Depends(get_session_manager),
):
    """Generate ten questions for the job and open a new interview"""
    request_id = getattr(request.state, 'request_id', 'unknown')
    with PerformanceMonitor("create_interview", logger, threshold_ms=20000):
        with ExceptionContext("create_interview", logger, request_id=request_id, user_id=user_id):
            session = await manager.create(user_id, payload.job_description, payload.resume_text, payload.job_title)
    return SessionView.from_session(session)


@router.get("", response_model=List[Dict[str, Any]])
async def interview_history(
    request: Request,
    limit: int = Query(20, ge=1, le=100),
    user_id: str = Depends(get_user_id),
    manager: InterviewSessionManager = Depends(get_session_manager),
):
    request_id = getattr(request.state, 'request_id', 'unknown')
    with ExceptionContext("interview_history", logger, request_id=request_id, user_id=user_id):
        return await manager.history(user_id, limit)


@router.get("/{session_id}", response_model=SessionView)
async def get_interview(
    session_id: str,
    request: Request,
    user_id: str = Depends(get_user_id),
    manager: InterviewSessionManager = Depends(get_session_manager),
):
    request_id = getattr(request.state, 'request_id', 'unknown')
    with ExceptionContext("get_interview", logger, request_id=request_id, session_id=session_id):
        session = await manager.get(session_id, user_id)
    return SessionView.from_session(session)


@router.post("/{session_id}/start", response_model=SessionView)
async def start_interview(
    session_id: str,
    request: Request,
    user_id: str = Depends(get_user_id),
    manager: InterviewSessionManager = Depends(get_session_manager),
):
    request_id = getattr(request.state, 'request_id', 'unknown')
    with ExceptionContext("start_interview", logger, request_id=request_id, session_id=session_id):
        session = await manager.start(session_id, user_id)
    return SessionView.from_session(session)


@router.get("/{session_id}/next-question", response_model=NextQuestionResponse)
async def next_question(
    session_id: str,
    request: Request,
    user_id: str = Depends(get_user_id),
    manager: InterviewSessionManager = Depends(get_session_manager),
):
    request_id = getattr(request.state, 'request_id', 'unknown')
    with ExceptionContext("next_question", logger, request_id=request_id, session_id=session_id):
        state = await manager.next_question(session_id, user_id)
    return NextQuestionResponse(session_id=session_id, **state)


@router.post("/{session_id}/answers", response_model=SubmitAnswerResponse)
async def submit_answer(
    session_id: str,
    payload: SubmitAnswerRequest,
    request: Request,
    user_id: str = Depends(get_user_id),
    manager: InterviewSessionManager = Depends(get_session_manager),
):
    """Score one answer; the interview completes after the last question"""
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.info(
        f"Answer submitted for {payload.question_id}",
        extra={"request_id": request_id, "session_id": session_id},
    )
    with ExceptionContext("submit_answer", logger, request_id=request_id, session_id=session_id):
        outcome = await manager.submit_answer(
            session_id, user_id, payload.question_id, payload.response_text,
            code=payload.code, response_time=payload.response_time,
        )
    session = outcome["session"]
    return SubmitAnswerResponse(
        session_id=session_id,
        status=session.status,
        feedback=outcome["feedback"],
        progress=outcome["progress"],
        is_complete=outcome["is_complete"],
        next_question=outcome["next_question"],
        overall_feedback=session.overall_feedback,
    )


@router.post("/{session_id}/complete", response_model=SessionView)
async def complete_interview(
    session_id: str,
    request: Request,
    user_id: str = Depends(get_user_id),
    manager: InterviewSessionManager = Depends(get_session_manager),
):
    request_id = getattr(request.state, 'request_id', 'unknown')
    with PerformanceMonitor("complete_interview", logger, threshold_ms=20000):
        with ExceptionContext("complete_interview", logger, request_id=request_id, session_id=session_id):
            session = await manager.complete(session_id, user_id)
    return SessionView.from_session(session)


@router.get("/{session_id}/feedback", response_model=InterviewFeedbackResponse)
async def interview_feedback(
    session_id: str,
    request: Request,
    user_id: str = Depends(get_user_id),
    manager: InterviewSessionManager = Depends(get_session_manager),
):
    request_id = getattr(request.state, 'request_id', 'unknown')
    with ExceptionContext("interview_feedback", logger, request_id=request_id, session_id=session_id):
        session = await manager.get_feedback(session_id, user_id)
    return InterviewFeedbackResponse(
        session_id=session.id,
        job_title=session.job_title,
        overall_feedback=session.overall_feedback,
        responses=session.responses,
        total_duration=session.total_duration,
        completed_at=session.completed_at,
    )
