import pytest

from careerprep.services.analysis import AnalysisService, build_recommendations
from careerprep.utils.exceptions import NotFoundError, ValidationError
from careerprep.utils.utils import resume_hash
from tests.conftest import ACCOUNTANT_JOB, REACT_JOB, RESUME_TEXT

USER = "user-1"


@pytest.fixture
def service(analysis_repo):
    return AnalysisService(analysis_repo, gateway=None)


class TestAnalyze:
    async def test_report(self, service):
        report = await service.analyze(USER, RESUME_TEXT, [REACT_JOB, ACCOUNTANT_JOB])
        assert report["resume_hash"] == resume_hash(RESUME_TEXT)
        assert not report["is_existing_resume"]
        react, accountant = report["results"]
        assert 0 < react.raw_similarity < 1
        assert accountant.is_non_tech_role and accountant.match_percentage == 0

        names = {t.name: t.category for t in report["extracted_technologies"]}
        assert names["React"] == "Frontend Technologies"
        assert names["Node.js"] == "Backend Technologies"

        metadata = report["metadata"]
        assert metadata.total_job_descriptions == 2
        assert metadata.non_tech_roles_count == 1
        assert metadata.average_match_percentage == react.match_percentage
        assert "1 out of 2" in report["recommendations"].overall_feedback

    async def test_same_resume_upserts(self, service, analysis_repo):
        first = await service.analyze(USER, RESUME_TEXT, [REACT_JOB])
        second = await service.analyze(USER, "  " + RESUME_TEXT + "\n", [REACT_JOB])
        assert second["is_existing_resume"]
        assert second["id"] == first["id"]
        assert len(analysis_repo.docs) == 1

    @pytest.mark.parametrize("resume,jobs", [
        ("too short", [REACT_JOB]),
        (RESUME_TEXT, []),
        (RESUME_TEXT, ["<p>short</p>"]),
        (RESUME_TEXT, [REACT_JOB] * 11),
    ])
    async def test_validation(self, service, resume, jobs):
        with pytest.raises(ValidationError):
            await service.analyze(USER, resume, jobs)


class TestStoredAnalyses:
    async def test_save_list_get_delete(self, service):
        report = await service.analyze(USER, RESUME_TEXT, [REACT_JOB])
        saved = await service.save(USER, report["resume_hash"], "Frontend internships")
        assert saved["is_saved"] and saved["title"] == "Frontend internships"

        # re-analysis keeps the saved title
        await service.analyze(USER, RESUME_TEXT, [REACT_JOB])
        listed = await service.list_analyses(USER)
        assert [a["title"] for a in listed] == ["Frontend internships"]

        doc = await service.get_analysis(USER, report["id"])
        assert doc["resume_hash"] == report["resume_hash"]

        await service.delete_analysis(USER, report["id"])
        with pytest.raises(NotFoundError):
            await service.get_analysis(USER, report["id"])

    async def test_save_unknown_resume(self, service):
        with pytest.raises(NotFoundError):
            await service.save(USER, "0" * 64)


class TestRecommendations:
    def test_all_non_tech(self):
        recs = build_recommendations(2, 2)
        assert "non-software engineering roles" in recs.overall_feedback
        assert any("software engineering internships" in s for s in recs.next_steps)

    def test_all_tech(self):
        assert "successfully" in build_recommendations(3, 0).overall_feedback
