import os

os.environ.setdefault("ENVIRONMENT", "testing")

import copy
from datetime import datetime
from typing import Callable, List, Optional, Union

import pytest

from careerprep.services.gateway import GatewayFailure, GatewayResult
from careerprep.services.repository import new_id
from careerprep.utils.exceptions import ConcurrentModificationError, NotFoundError

RESUME_TEXT = (
    "Jane Doe - Computer Science student. Built a task tracker web app with React and Node.js, "
    "exposing REST APIs with Express and storing data in MongoDB. Comfortable with Git and GitHub, "
    "wrote unit tests with Jest and deployed side projects with Docker."
)
REACT_JOB = (
    "Software engineering intern wanted to build user interfaces with React and TypeScript "
    "alongside our frontend team."
)
ACCOUNTANT_JOB = (
    "Senior Accountant needed to manage the general ledger, month-end close, "
    "tax preparation and audit support for a growing firm."
)

Reply = Union[str, GatewayResult]


class FakeGateway:
    """Stands in for AIGateway; ``reply`` maps a prompt to text or a GatewayResult"""

    def __init__(self, reply: Union[Reply, Callable[[str], Reply]]):
        self.reply = reply
        self.prompts: List[str] = []

    async def ainvoke(self, prompt: str, temperature: Optional[float] = None,
                      max_tokens: Optional[int] = None) -> GatewayResult:
        self.prompts.append(prompt)
        reply = self.reply(prompt) if callable(self.reply) else self.reply
        if isinstance(reply, GatewayResult):
            return reply
        return GatewayResult(text=reply, model="fake-model")


def failed(kind: str = "timeout") -> GatewayResult:
    return GatewayResult(model="fake-model", error=GatewayFailure(kind=kind, message="simulated failure"))


class _DeleteResult:
    def __init__(self, deleted_count: int):
        self.deleted_count = deleted_count


class InMemoryResumeRepository:
    """Same surface as ResumeKeyedRepository, backed by a dict"""

    def __init__(self, resource: str = "analysis"):
        self.resource = resource
        self.docs = {}

    async def find_one(self, user_id, resume_hash):
        for doc in self.docs.values():
            if doc["user_id"] == user_id and doc["resume_hash"] == resume_hash:
                return copy.deepcopy(doc)
        return None

    async def upsert(self, user_id, resume_hash, fields):
        now = datetime.utcnow()
        existing = await self.find_one(user_id, resume_hash)
        doc = existing or {"id": new_id(), "created_at": now}
        doc.update(copy.deepcopy(fields))
        doc.update({"user_id": user_id, "resume_hash": resume_hash, "updated_at": now})
        self.docs[doc["id"]] = doc
        return copy.deepcopy(doc)

    async def find(self, user_id, limit=50):
        docs = [d for d in self.docs.values() if d["user_id"] == user_id]
        docs.sort(key=lambda d: d["updated_at"], reverse=True)
        return copy.deepcopy(docs[:limit])

    async def get(self, record_id, user_id):
        doc = self.docs.get(record_id)
        if not doc or doc["user_id"] != user_id:
            raise NotFoundError(f"{self.resource} {record_id} not found", resource=self.resource, resource_id=record_id)
        return copy.deepcopy(doc)

    async def delete_one(self, record_id, user_id):
        await self.get(record_id, user_id)
        del self.docs[record_id]

    async def delete_by_hash(self, user_id, resume_hash):
        doc = await self.find_one(user_id, resume_hash)
        if not doc:
            raise NotFoundError(f"No {self.resource} stored for this resume", resource=self.resource,
                                resource_id=resume_hash)
        del self.docs[doc["id"]]


class InMemoryInterviewRepository:
    """Same surface as InterviewRepository, including the version check"""

    def __init__(self):
        self.docs = {}

    async def insert(self, doc):
        doc = copy.deepcopy(doc)
        doc["id"] = doc.pop("_id")
        self.docs[doc["id"]] = doc
        return copy.deepcopy(doc)

    async def get(self, session_id, user_id):
        doc = self.docs.get(session_id)
        if not doc or doc["user_id"] != user_id:
            raise NotFoundError(f"Interview {session_id} not found", resource="interview", resource_id=session_id)
        return copy.deepcopy(doc)

    async def update_versioned(self, session_id, expected_version, fields):
        doc = self.docs.get(session_id)
        if not doc or doc["version"] != expected_version:
            raise ConcurrentModificationError(f"Interview {session_id} was modified concurrently",
                                              session_id=session_id)
        doc.update(copy.deepcopy(fields))
        doc["version"] += 1
        doc["updated_at"] = datetime.utcnow()
        return copy.deepcopy(doc)

    async def list_for_user(self, user_id, limit=20):
        docs = [d for d in self.docs.values() if d["user_id"] == user_id]
        docs.sort(key=lambda d: d["created_at"], reverse=True)
        return copy.deepcopy(docs[:limit])


@pytest.fixture
def analysis_repo():
    return InMemoryResumeRepository("analysis")


@pytest.fixture
def rating_repo():
    return InMemoryResumeRepository("rating")


@pytest.fixture
def interview_repo():
    return InMemoryInterviewRepository()
