from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from careerprep.services.repository import InterviewRepository, ResumeKeyedRepository
from careerprep.utils.exceptions import ConcurrentModificationError, NotFoundError, PersistenceError


class TestResumeKeyedRepository:
    async def test_upsert_by_user_and_hash(self):
        coll = MagicMock()
        coll.find_one_and_update = AsyncMock(return_value={"_id": "abc", "user_id": "u1", "resume_hash": "h1"})
        repo = ResumeKeyedRepository(coll, "analysis")

        doc = await repo.upsert("u1", "h1", {"results": []})

        assert doc["id"] == "abc"
        assert "_id" not in doc
        query, update = coll.find_one_and_update.call_args.args
        assert query == {"user_id": "u1", "resume_hash": "h1"}
        assert update["$set"]["results"] == []
        assert "_id" in update["$setOnInsert"]
        assert coll.find_one_and_update.call_args.kwargs["upsert"] is True

    async def test_get_missing(self):
        coll = MagicMock()
        coll.find_one = AsyncMock(return_value=None)
        with pytest.raises(NotFoundError):
            await ResumeKeyedRepository(coll, "rating").get("missing", "u1")

    async def test_delete_missing(self):
        coll = MagicMock()
        coll.delete_one = AsyncMock(return_value=MagicMock(deleted_count=0))
        with pytest.raises(NotFoundError):
            await ResumeKeyedRepository(coll, "rating").delete_by_hash("u1", "h1")

    async def test_storage_errors_are_wrapped(self):
        coll = MagicMock()
        coll.find_one = AsyncMock(side_effect=ServerSelectionTimeoutError("no servers"))
        with pytest.raises(PersistenceError):
            await ResumeKeyedRepository(coll, "analysis").find_one("u1", "h1")


class TestInterviewRepository:
    async def test_versioned_update(self):
        coll = MagicMock()
        coll.find_one_and_update = AsyncMock(return_value={"_id": "s1", "version": 4})
        doc = await InterviewRepository(coll).update_versioned("s1", 3, {"status": "completed", "version": 99})

        assert doc == {"id": "s1", "version": 4}
        query, update = coll.find_one_and_update.call_args.args
        assert query == {"_id": "s1", "version": 3}
        assert update["$inc"] == {"version": 1}
        assert "version" not in update["$set"]
        assert "updated_at" in update["$set"]

    async def test_version_conflict(self):
        coll = MagicMock()
        coll.find_one_and_update = AsyncMock(return_value=None)
        with pytest.raises(ConcurrentModificationError):
            await InterviewRepository(coll).update_versioned("s1", 3, {"status": "completed"})

    async def test_history_hides_text(self):
        cursor = MagicMock()
        cursor.sort.return_value = cursor
        cursor.limit.return_value = cursor
        cursor.to_list = AsyncMock(return_value=[{"_id": "s1", "status": "created"}])
        coll = MagicMock()
        coll.find.return_value = cursor

        docs = await InterviewRepository(coll).list_for_user("u1", 5)

        assert docs == [{"id": "s1", "status": "created"}]
        assert coll.find.call_args.args[1] == {"resume_text": 0, "job_description": 0}
