from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime

from careerprep.models.models import (
    InterviewQuestion,
    InterviewResponse,
    MatchResult,
    OverallFeedback,
    TechCategory,
    Technology,
)

SessionStatus = Literal["created", "in_progress", "completed"]


# -------- Interviews --------
class InterviewSession(BaseModel):
    id: str
    user_id: str
    job_title: str = "Software Engineering Intern"
    job_description: str
    resume_text: str
    status: SessionStatus = "created"
    questions: List[InterviewQuestion] = []
    responses: List[InterviewResponse] = []
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    total_duration: Optional[int] = None   # seconds
    overall_feedback: Optional[OverallFeedback] = None
    version: int = 0
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def current_question_index(self) -> int:
        return len(self.responses)

    @property
    def answered_ids(self) -> List[str]:
        return [r.question_id for r in self.responses]

    def question(self, question_id: str) -> Optional[InterviewQuestion]:
        return next((q for q in self.questions if q.question_id == question_id), None)


# -------- Resume analyses --------
class AnalysisMetadata(BaseModel):
    total_job_descriptions: int = 0
    non_tech_roles_count: int = 0
    tech_roles_count: int = 0
    average_match_percentage: int = 0
    best_match_percentage: int = 0
    technologies_count: int = 0
    analysis_date: datetime = Field(default_factory=datetime.utcnow)


class AnalysisRecommendations(BaseModel):
    overall_feedback: str = ""
    next_steps: List[str] = []


class JobMatch(BaseModel):
    job_index: int
    job_description: str
    result: MatchResult


class AnalysisRecord(BaseModel):
    id: Optional[str] = None
    user_id: str
    resume_hash: str
    resume_text: str
    job_descriptions: List[str] = []
    results: List[JobMatch] = []
    extracted_technologies: List[Technology] = []
    metadata: AnalysisMetadata = Field(default_factory=AnalysisMetadata)
    recommendations: AnalysisRecommendations = Field(default_factory=AnalysisRecommendations)
    title: Optional[str] = None
    is_saved: bool = False
    saved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# -------- SWOT ratings --------
class RatingMetadata(BaseModel):
    total_technologies: int = 0
    average_confidence: float = 0.0
    expert_count: int = 0        # confidence >= 8
    proficient_count: int = 0    # 6..7
    beginner_count: int = 0      # < 6
    categories: List[TechCategory] = []

    class Config:
        use_enum_values = True


class RatingRecord(BaseModel):
    id: Optional[str] = None
    user_id: str
    resume_hash: str
    technologies: List[Technology] = []
    metadata: RatingMetadata = Field(default_factory=RatingMetadata)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def session_document(session: InterviewSession) -> Dict[str, Any]:
    """Mongo document for a session; ``id`` is stored as ``_id``."""
    doc = session.dict()
    doc["_id"] = doc.pop("id")
    doc["current_question_index"] = session.current_question_index
    return doc
