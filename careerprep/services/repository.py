"""
Persistence adapter over the Mongo collections.

Analyses and SWOT ratings are upserted by ``(user_id, resume_hash)`` with
last-write-wins semantics. Interview sessions are written with an optimistic
version check so two writers can never both advance the same session.
"""
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING, ReturnDocument

from careerprep.services.db import analyses_coll, interviews_coll, ratings_coll, to_dict
from careerprep.utils.exceptions import ConcurrentModificationError, ExceptionContext, NotFoundError
from careerprep.utils.logging_config import get_logger

logger = get_logger(__name__)


def new_id() -> str:
    return uuid.uuid4().hex


class ResumeKeyedRepository:
    """Documents owned by one user and keyed by the resume content hash."""

    def __init__(self, collection, resource: str):
        self.coll = collection
        self.resource = resource

    async def find_one(self, user_id: str, resume_hash: str) -> Optional[Dict[str, Any]]:
        with ExceptionContext(f"find {self.resource}", logger, user_id=user_id, resume_hash=resume_hash):
            doc = await self.coll.find_one({"user_id": user_id, "resume_hash": resume_hash})
        return to_dict(doc)

    async def upsert(self, user_id: str, resume_hash: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        now = datetime.utcnow()
        update = {
            "$set": {**fields, "user_id": user_id, "resume_hash": resume_hash, "updated_at": now},
            "$setOnInsert": {"_id": new_id(), "created_at": now},
        }
        with ExceptionContext(f"upsert {self.resource}", logger, user_id=user_id, resume_hash=resume_hash):
            doc = await self.coll.find_one_and_update(
                {"user_id": user_id, "resume_hash": resume_hash},
                update,
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        logger.info(f"Saved {self.resource} for user {user_id} ({resume_hash[:12]})")
        return to_dict(doc)

    async def find(self, user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
        with ExceptionContext(f"list {self.resource}", logger, user_id=user_id):
            cursor = self.coll.find({"user_id": user_id}).sort("updated_at", DESCENDING).limit(limit)
            docs = await cursor.to_list(length=limit)
        return [to_dict(d) for d in docs]

    async def get(self, record_id: str, user_id: str) -> Dict[str, Any]:
        with ExceptionContext(f"get {self.resource}", logger, record_id=record_id):
            doc = await self.coll.find_one({"_id": record_id, "user_id": user_id})
        if not doc:
            raise NotFoundError(f"{self.resource.capitalize()} {record_id} not found",
                                resource=self.resource, resource_id=record_id)
        return to_dict(doc)

    async def delete_one(self, record_id: str, user_id: str) -> None:
        with ExceptionContext(f"delete {self.resource}", logger, record_id=record_id):
            result = await self.coll.delete_one({"_id": record_id, "user_id": user_id})
        if result.deleted_count == 0:
            raise NotFoundError(f"{self.resource.capitalize()} {record_id} not found",
                                resource=self.resource, resource_id=record_id)

    async def delete_by_hash(self, user_id: str, resume_hash: str) -> None:
        with ExceptionContext(f"delete {self.resource}", logger, resume_hash=resume_hash):
            result = await self.coll.delete_one({"user_id": user_id, "resume_hash": resume_hash})
        if result.deleted_count == 0:
            raise NotFoundError(f"No {self.resource} stored for this resume",
                                resource=self.resource, resource_id=resume_hash)


class InterviewRepository:
    """Interview session documents with version-checked updates."""

    resource = "interview"

    def __init__(self, collection):
        self.coll = collection

    async def insert(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        with ExceptionContext("insert interview", logger, session_id=doc.get("_id")):
            await self.coll.insert_one(doc)
        return to_dict(doc)

    async def get(self, session_id: str, user_id: str) -> Dict[str, Any]:
        with ExceptionContext("get interview", logger, session_id=session_id):
            doc = await self.coll.find_one({"_id": session_id, "user_id": user_id})
        if not doc:
            raise NotFoundError(f"Interview {session_id} not found", resource=self.resource, resource_id=session_id)
        return to_dict(doc)

    async def update_versioned(self, session_id: str, expected_version: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Apply ``fields`` only if the stored version still matches."""
        fields = {**fields, "updated_at": datetime.utcnow()}
        fields.pop("version", None)
        with ExceptionContext("update interview", logger, session_id=session_id):
            doc = await self.coll.find_one_and_update(
                {"_id": session_id, "version": expected_version},
                {"$set": fields, "$inc": {"version": 1}},
                return_document=ReturnDocument.AFTER,
            )
        if not doc:
            raise ConcurrentModificationError(
                f"Interview {session_id} was modified concurrently; reload and retry",
                session_id=session_id,
            )
        return to_dict(doc)

    async def list_for_user(self, user_id: str, limit: int = 20) -> List[Dict[str, Any]]:
        projection = {"resume_text": 0, "job_description": 0}
        with ExceptionContext("list interviews", logger, user_id=user_id):
            cursor = self.coll.find({"user_id": user_id}, projection).sort("created_at", DESCENDING).limit(limit)
            docs = await cursor.to_list(length=limit)
        return [to_dict(d) for d in docs]


_analyses = ResumeKeyedRepository(analyses_coll, "analysis")
_ratings = ResumeKeyedRepository(ratings_coll, "rating")
_interviews = InterviewRepository(interviews_coll)


def get_analysis_repository() -> ResumeKeyedRepository:
    return _analyses


def get_rating_repository() -> ResumeKeyedRepository:
    return _ratings


def get_interview_repository() -> InterviewRepository:
    return _interviews
