from pydantic import BaseModel, Field, validator
from typing import List, Dict, Optional, Literal, Any
from datetime import datetime
from enum import Enum


class TechCategory(str, Enum):
    PROGRAMMING_LANGUAGES = "Programming Languages"
    FRONTEND = "Frontend Technologies"
    BACKEND = "Backend Technologies"
    DATABASES = "Databases"
    CLOUD_DEVOPS = "Cloud & DevOps"
    MOBILE = "Mobile Development"
    DATA_SCIENCE_ML = "Data Science & ML"
    TESTING = "Testing"
    DEV_TOOLS = "Developer Tools"
    GENERAL = "General"


class Technology(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    category: TechCategory = TechCategory.GENERAL
    confidence_level: int = Field(default=5, ge=1, le=10)

    class Config:
        use_enum_values = True

    @validator("name")
    def name_not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Technology name cannot be blank")
        return v


class MatchResult(BaseModel):
    match_percentage: int = Field(default=0, ge=0, le=100)
    is_non_tech_role: bool = False
    strengths: List[str] = Field(default_factory=list)
    content_weaknesses: List[str] = Field(default_factory=list)
    structure_weaknesses: List[str] = Field(default_factory=list)
    content_recommendations: List[str] = Field(default_factory=list)
    structure_recommendations: List[str] = Field(default_factory=list)
    raw_similarity: float = Field(default=0.0, ge=0.0, le=1.0)
    message: Optional[str] = None
    has_error: bool = False
    analysis_quality: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)


QuestionType = Literal["behavioral", "technical", "coding"]


class InterviewQuestion(BaseModel):
    question_id: str
    type: QuestionType
    question: str
    category: str = "General"
    difficulty: Literal["easy", "medium"] = "medium"
    expected_duration: int = Field(default=120, ge=10, description="Seconds")
    starter_code: Optional[Dict[str, str]] = None


class FeedbackResult(BaseModel):
    score: int = Field(default=0, ge=0, le=100)
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    detailed_analysis: str = ""
    communication_clarity: int = Field(default=5, ge=1, le=10)
    technical_accuracy: int = Field(default=5, ge=1, le=10)
    structured_response: int = Field(default=5, ge=1, le=10)
    code_quality: Optional[int] = Field(default=None, ge=1, le=10)
    time_efficiency: Optional[int] = Field(default=None, ge=1, le=10)
    source: Literal["ai", "rule_based"] = "rule_based"


class InterviewResponse(BaseModel):
    question_id: str
    question: str = ""
    text_response: str
    code: Optional[str] = None
    response_time: int = Field(default=0, ge=0, description="Seconds")
    feedback: FeedbackResult
    submitted_at: datetime = Field(default_factory=datetime.utcnow)


class SkillAssessment(BaseModel):
    score: int = Field(default=0, ge=0, le=100)
    feedback: str = ""


class OverallFeedback(BaseModel):
    score: int = Field(default=0, ge=0, le=100)
    category_scores: Dict[str, int] = Field(default_factory=dict)
    technical_skills: SkillAssessment = Field(default_factory=SkillAssessment)
    communication_skills: SkillAssessment = Field(default_factory=SkillAssessment)
    problem_solving: SkillAssessment = Field(default_factory=SkillAssessment)
    recommendations: List[str] = Field(default_factory=list)
    questions_answered: int = 0
    source: Literal["ai", "rule_based"] = "rule_based"
