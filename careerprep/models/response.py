# models/response.py
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from datetime import datetime

from careerprep.models.models import (
    FeedbackResult,
    InterviewQuestion,
    InterviewResponse,
    MatchResult,
    OverallFeedback,
    Technology,
)
from careerprep.models.schemas import AnalysisMetadata, AnalysisRecommendations, InterviewSession


class AnalyzeResponse(BaseModel):
    id: str
    resume_hash: str
    results: List[MatchResult]
    extracted_technologies: List[Technology]
    metadata: AnalysisMetadata
    recommendations: AnalysisRecommendations
    is_existing_resume: bool = False


class Progress(BaseModel):
    answered: int
    total: int
    current_question_index: int


class SessionView(BaseModel):
    """Interview session as returned to the client, without the resume text"""
    id: str
    job_title: str
    job_description: str
    status: str
    questions: List[InterviewQuestion]
    responses: List[InterviewResponse]
    current_question_index: int
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    total_duration: Optional[int] = None
    overall_feedback: Optional[OverallFeedback] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_session(cls, session: InterviewSession) -> "SessionView":
        data = session.dict(exclude={"user_id", "resume_text", "version"})
        return cls(**data, current_question_index=session.current_question_index)


class NextQuestionResponse(BaseModel):
    session_id: str
    status: str
    question: Optional[InterviewQuestion] = None
    progress: Progress


class SubmitAnswerResponse(BaseModel):
    session_id: str
    status: str
    feedback: FeedbackResult
    progress: Progress
    is_complete: bool
    next_question: Optional[InterviewQuestion] = None
    overall_feedback: Optional[OverallFeedback] = None


class InterviewFeedbackResponse(BaseModel):
    session_id: str
    job_title: str
    overall_feedback: OverallFeedback
    responses: List[InterviewResponse]
    total_duration: Optional[int] = None
    completed_at: Optional[datetime] = None


class DeleteResponse(BaseModel):
    success: bool = True
    message: str
    details: Dict[str, Any] = {}
