"""
Interview Session Manager: lifecycle, answers and completion of mock interviews
"""
import asyncio
import weakref
from datetime import datetime
from functools import lru_cache
from typing import Any, Dict, List, Optional

from careerprep.models.models import FeedbackResult, InterviewQuestion, InterviewResponse
from careerprep.models.schemas import InterviewSession, session_document
from careerprep.models.settings import PipelineSettings, get_settings
from careerprep.services import feedback as feedback_service
from careerprep.services.gateway import AIGateway, get_gateway
from careerprep.services.questions import generate_questions
from careerprep.services.repository import InterviewRepository, get_interview_repository, new_id
from careerprep.utils.exceptions import (
    DuplicateAnswerError,
    InvalidStateError,
    NoQuestionsError,
    QuestionNotFoundError,
    ValidationError,
)
from careerprep.utils.logging_config import get_logger

logger = get_logger(__name__)


class InterviewSessionManager:
    """Drives an interview through created -> in_progress -> completed.

    All state changes of one session run under a per-session ``asyncio.Lock``
    and are written with a version check, so answers stay append-only and
    strictly ordered even across processes.
    """

    STATUS_CREATED = "created"
    STATUS_IN_PROGRESS = "in_progress"
    STATUS_COMPLETED = "completed"

    def __init__(self, repository: InterviewRepository, gateway: Optional[AIGateway],
                 pipeline: Optional[PipelineSettings] = None):
        self.repository = repository
        self.gateway = gateway
        self.pipeline = pipeline or PipelineSettings()
        # entries vanish once no coroutine holds or waits on the lock
        self._locks = weakref.WeakValueDictionary()

    def _lock(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = self._locks[session_id] = asyncio.Lock()
        return lock

    async def _load(self, session_id: str, user_id: str) -> InterviewSession:
        return InterviewSession(**await self.repository.get(session_id, user_id))

    async def _save(self, session: InterviewSession, fields: Dict[str, Any]) -> InterviewSession:
        if "responses" in fields:
            fields["current_question_index"] = len(fields["responses"])
        doc = await self.repository.update_versioned(session.id, session.version, fields)
        return InterviewSession(**doc)

    async def create(self, user_id: str, job_description: str, resume_text: str,
                     job_title: Optional[str] = None) -> InterviewSession:
        """Generate the question set and store a new session in ``created``"""
        job_description = (job_description or "").strip()
        resume_text = (resume_text or "").strip()
        if len(job_description) < self.pipeline.min_job_description_length:
            raise ValidationError(
                f"Job description must be at least {self.pipeline.min_job_description_length} characters",
                field="job_description",
            )
        if len(resume_text) < self.pipeline.min_resume_length:
            raise ValidationError(
                f"Resume text must be at least {self.pipeline.min_resume_length} characters",
                field="resume_text",
            )

        questions = await generate_questions(self.gateway, resume_text, job_description)
        session = InterviewSession(
            id=new_id(),
            user_id=user_id,
            job_title=(job_title or "").strip() or "Software Engineering Intern",
            job_description=job_description,
            resume_text=resume_text[:self.pipeline.stored_resume_chars],
            questions=questions,
        )
        await self.repository.insert(session_document(session))
        logger.info(f"Created interview {session.id} for user {user_id} with {len(questions)} questions")
        return session

    async def get(self, session_id: str, user_id: str) -> InterviewSession:
        return await self._load(session_id, user_id)

    async def start(self, session_id: str, user_id: str) -> InterviewSession:
        async with self._lock(session_id):
            session = await self._load(session_id, user_id)
            if session.status != self.STATUS_CREATED:
                raise InvalidStateError(
                    f"Interview {session_id} cannot be started from status {session.status}",
                    session_id=session_id, status=session.status,
                )
            if not session.questions:
                raise NoQuestionsError(session_id=session_id, status=session.status)
            session = await self._save(session, {
                "status": self.STATUS_IN_PROGRESS,
                "started_at": datetime.utcnow(),
            })
        logger.info(f"Started interview {session_id}")
        return session

    @staticmethod
    def pending_question(session: InterviewSession) -> Optional[InterviewQuestion]:
        answered = set(session.answered_ids)
        return next((q for q in session.questions if q.question_id not in answered), None)

    @staticmethod
    def progress(session: InterviewSession) -> Dict[str, int]:
        return {
            "answered": len(session.responses),
            "total": len(session.questions),
            "current_question_index": session.current_question_index,
        }

    async def next_question(self, session_id: str, user_id: str) -> Dict[str, Any]:
        """The first unanswered question, or None once every question has an answer"""
        session = await self._load(session_id, user_id)
        return {
            "status": session.status,
            "question": self.pending_question(session),
            "progress": self.progress(session),
        }

    async def submit_answer(self, session_id: str, user_id: str, question_id: str, response_text: str,
                            code: Optional[str] = None, response_time: int = 0) -> Dict[str, Any]:
        """Score an answer and append it; completes the interview after the last question"""
        if not (response_text or "").strip():
            raise ValidationError("Response text is required", field="response_text")
        if response_time is None or response_time < 0:
            raise ValidationError("Response time must be a non-negative number of seconds",
                                  field="response_time", value=response_time)

        async with self._lock(session_id):
            session = await self._load(session_id, user_id)
            if session.status == self.STATUS_COMPLETED:
                raise InvalidStateError(
                    f"Interview {session_id} is already completed",
                    session_id=session_id, status=session.status,
                )
            question = session.question(question_id)
            if question is None:
                raise QuestionNotFoundError(
                    f"Question {question_id} is not part of interview {session_id}",
                    question_id=question_id, session_id=session_id,
                )
            if question_id in session.answered_ids:
                raise DuplicateAnswerError(
                    f"Question {question_id} has already been answered",
                    question_id=question_id, session_id=session_id,
                )

            result: FeedbackResult = await feedback_service.assess_answer(
                self.gateway, question, response_text.strip(), code, int(response_time)
            )
            response = InterviewResponse(
                question_id=question_id,
                question=question.question,
                text_response=response_text.strip(),
                code=code,
                response_time=int(response_time),
                feedback=result,
            )
            fields: Dict[str, Any] = {
                "responses": [r.dict() for r in session.responses] + [response.dict()],
            }
            if session.status == self.STATUS_CREATED:
                fields["status"] = self.STATUS_IN_PROGRESS
                fields["started_at"] = datetime.utcnow()
            session = await self._save(session, fields)

            is_complete = len(session.responses) == len(session.questions)
            if is_complete:
                session = await self._finalize(session)

        logger.info(
            f"Recorded answer {question_id} for interview {session_id} "
            f"({len(session.responses)}/{len(session.questions)}, score {result.score})"
        )
        return {
            "feedback": result,
            "progress": self.progress(session),
            "is_complete": is_complete,
            "next_question": self.pending_question(session),
            "session": session,
        }

    async def _finalize(self, session: InterviewSession) -> InterviewSession:
        overall = await feedback_service.summarize_interview(
            self.gateway, session.job_description, session.questions, session.responses
        )
        completed_at = datetime.utcnow()
        if session.started_at:
            total_duration = max(0, int((completed_at - session.started_at).total_seconds()))
        else:
            total_duration = self.pipeline.default_interview_duration
        session = await self._save(session, {
            "status": self.STATUS_COMPLETED,
            "completed_at": completed_at,
            "total_duration": total_duration,
            "overall_feedback": overall.dict(),
        })
        logger.info(f"Completed interview {session.id} with overall score {overall.score}")
        return session

    async def complete(self, session_id: str, user_id: str) -> InterviewSession:
        """Finish the interview; a completed interview is returned unchanged"""
        async with self._lock(session_id):
            session = await self._load(session_id, user_id)
            if session.status == self.STATUS_COMPLETED:
                return session
            return await self._finalize(session)

    async def get_feedback(self, session_id: str, user_id: str) -> InterviewSession:
        session = await self._load(session_id, user_id)
        if session.status != self.STATUS_COMPLETED:
            raise InvalidStateError(
                f"Feedback is available once interview {session_id} is completed",
                session_id=session_id, status=session.status,
            )
        return session

    async def history(self, user_id: str, limit: int = 20) -> List[Dict[str, Any]]:
        """Most recent interviews first, without resume or job text"""
        docs = await self.repository.list_for_user(user_id, limit)
        out = []
        for doc in docs:
            overall = doc.get("overall_feedback") or {}
            out.append({
                "id": doc["id"],
                "job_title": doc.get("job_title"),
                "status": doc.get("status"),
                "questions_count": len(doc.get("questions") or []),
                "answered_count": len(doc.get("responses") or []),
                "score": overall.get("score"),
                "total_duration": doc.get("total_duration"),
                "created_at": doc.get("created_at"),
                "completed_at": doc.get("completed_at"),
            })
        return out


@lru_cache(maxsize=1)
def get_session_manager() -> InterviewSessionManager:
    return InterviewSessionManager(get_interview_repository(), get_gateway(), get_settings().pipeline)
