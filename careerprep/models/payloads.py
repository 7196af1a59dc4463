# models/payloads.py
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class AnalyzeRequest(BaseModel):
    resume_text: str
    job_descriptions: List[str] = Field(default_factory=list)


class SaveAnalysisRequest(BaseModel):
    resume_hash: str
    title: Optional[str] = None


class CreateInterviewRequest(BaseModel):
    job_description: str
    resume_text: str
    job_title: Optional[str] = None


class SubmitAnswerRequest(BaseModel):
    question_id: str
    response_text: str
    code: Optional[str] = None
    response_time: int = 0


class SaveRatingsRequest(BaseModel):
    resume_hash: Optional[str] = None
    # entries are checked by the rating service so bad levels map to 400
    technologies: List[Dict[str, Any]] = Field(default_factory=list)
