"""
Resume analysis service: validates input, runs the match graph for every job
description and upserts the report by (user_id, resume_hash).
"""
from datetime import datetime
from functools import lru_cache
from typing import Any, Dict, List, Optional

from careerprep.helpers import keywords
from careerprep.models.models import Technology
from careerprep.models.schemas import AnalysisMetadata, AnalysisRecommendations, AnalysisRecord, JobMatch
from careerprep.models.settings import PipelineSettings, get_settings
from careerprep.services.gateway import AIGateway, get_gateway
from careerprep.services.graph import build_match_graph, run_match
from careerprep.services.repository import ResumeKeyedRepository, get_analysis_repository
from careerprep.utils.exceptions import NotFoundError, ValidationError
from careerprep.utils.logging_config import PerformanceMonitor, get_logger
from careerprep.utils.utils import resume_hash, strip_html

logger = get_logger(__name__)

TECH_NEXT_STEPS = [
    "Review detailed recommendations for each software engineering role",
    "Prioritize implementing content recommendations (technical skills, projects)",
    "Apply structure recommendations for better ATS compatibility",
    "Consider generating a SWOT analysis for comprehensive career planning",
]
NON_TECH_NEXT_STEPS = [
    "Please provide job descriptions specifically for software engineering internships",
    "Ensure job postings mention programming languages, development frameworks, or technical skills",
    "Look for internship positions at tech companies or software development roles",
]


def build_recommendations(total: int, non_tech: int) -> AnalysisRecommendations:
    if total and non_tech == total:
        feedback = ("All provided job descriptions appear to be for non-software engineering roles. "
                    "Please provide software engineering internship job descriptions for accurate analysis.")
    elif non_tech:
        feedback = (f"{non_tech} out of {total} job descriptions were identified as non-software engineering roles. "
                    "Focus on software engineering internship positions for best results.")
    else:
        feedback = "All job descriptions appear to be for software engineering roles. Analysis completed successfully."
    return AnalysisRecommendations(
        overall_feedback=feedback,
        next_steps=list(TECH_NEXT_STEPS if non_tech < total else NON_TECH_NEXT_STEPS),
    )


def build_metadata(results: List[JobMatch], technologies: List[Technology]) -> AnalysisMetadata:
    non_tech = sum(1 for r in results if r.result.is_non_tech_role)
    scored = [r.result.match_percentage for r in results
              if not r.result.is_non_tech_role and r.result.match_percentage > 0]
    return AnalysisMetadata(
        total_job_descriptions=len(results),
        non_tech_roles_count=non_tech,
        tech_roles_count=len(results) - non_tech,
        average_match_percentage=round(sum(scored) / len(scored)) if scored else 0,
        best_match_percentage=max(scored) if scored else 0,
        technologies_count=len(technologies),
    )


class AnalysisService:
    """Resume vs job description matching and stored reports"""

    def __init__(self, repository: ResumeKeyedRepository, gateway: Optional[AIGateway],
                 pipeline: Optional[PipelineSettings] = None):
        self.repository = repository
        self.pipeline = pipeline or PipelineSettings()
        self.graph = build_match_graph(gateway)

    def _validate(self, resume_text: str, job_descriptions: List[str]) -> List[str]:
        if len(resume_text) < self.pipeline.min_resume_length:
            raise ValidationError(
                f"Resume text must be at least {self.pipeline.min_resume_length} characters",
                field="resume_text",
            )
        jobs = [strip_html(j) for j in (job_descriptions or [])]
        jobs = [j for j in jobs if j]
        if not jobs:
            raise ValidationError("At least one job description is required", field="job_descriptions")
        if len(jobs) > self.pipeline.max_job_descriptions:
            raise ValidationError(
                f"At most {self.pipeline.max_job_descriptions} job descriptions can be analyzed at once",
                field="job_descriptions", value=len(jobs),
            )
        for i, job in enumerate(jobs):
            if len(job) < self.pipeline.min_job_description_length:
                raise ValidationError(
                    f"Job description {i + 1} must be at least {self.pipeline.min_job_description_length} characters",
                    field=f"job_descriptions[{i}]",
                )
        return jobs

    async def analyze(self, user_id: str, resume_text: str, job_descriptions: List[str]) -> Dict[str, Any]:
        """Match one resume against every job description and store the report"""
        resume_text = (resume_text or "").strip()
        jobs = self._validate(resume_text, job_descriptions)
        digest = resume_hash(resume_text)
        technologies = keywords.extract(resume_text)
        names = [t.name for t in technologies]

        results: List[JobMatch] = []
        with PerformanceMonitor(f"analyze {len(jobs)} job description(s)", logger, threshold_ms=30000):
            for i, job in enumerate(jobs):
                match = await run_match(self.graph, resume_text, job, names)
                logger.info(f"Job {i + 1}/{len(jobs)}: match {match.match_percentage}%, "
                            f"non-tech {match.is_non_tech_role}")
                results.append(JobMatch(job_index=i, job_description=job, result=match))

        metadata = build_metadata(results, technologies)
        recommendations = build_recommendations(len(results), metadata.non_tech_roles_count)
        existing = await self.repository.find_one(user_id, digest)

        record = AnalysisRecord(
            user_id=user_id,
            resume_hash=digest,
            resume_text=resume_text[:self.pipeline.stored_resume_chars],
            job_descriptions=jobs,
            results=results,
            extracted_technologies=technologies,
            metadata=metadata,
            recommendations=recommendations,
        )
        fields = record.dict(exclude={"id", "user_id", "resume_hash", "title", "is_saved", "saved_at", "created_at", "updated_at"})
        stored = await self.repository.upsert(user_id, digest, fields)

        return {
            "id": stored["id"],
            "resume_hash": digest,
            "results": [r.result for r in results],
            "extracted_technologies": technologies,
            "metadata": metadata,
            "recommendations": recommendations,
            "is_existing_resume": existing is not None,
        }

    async def save(self, user_id: str, digest: str, title: Optional[str] = None) -> Dict[str, Any]:
        """Mark the stored analysis for a resume as saved by the user"""
        if not digest:
            raise ValidationError("resume_hash is required", field="resume_hash")
        existing = await self.repository.find_one(user_id, digest)
        if not existing:
            raise NotFoundError("No analysis stored for this resume", resource="analysis", resource_id=digest)
        fields = {"is_saved": True, "saved_at": datetime.utcnow()}
        if title:
            fields["title"] = title.strip()[:200]
        return await self.repository.upsert(user_id, digest, fields)

    async def list_analyses(self, user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
        docs = await self.repository.find(user_id, limit)
        return [
            {
                "id": d["id"],
                "resume_hash": d.get("resume_hash"),
                "title": d.get("title"),
                "is_saved": d.get("is_saved", False),
                "metadata": d.get("metadata"),
                "created_at": d.get("created_at"),
                "updated_at": d.get("updated_at"),
            }
            for d in docs
        ]

    async def get_analysis(self, user_id: str, analysis_id: str) -> Dict[str, Any]:
        return await self.repository.get(analysis_id, user_id)

    async def delete_analysis(self, user_id: str, analysis_id: str) -> None:
        await self.repository.delete_one(analysis_id, user_id)
        logger.info(f"Deleted analysis {analysis_id} for user {user_id}")


@lru_cache(maxsize=1)
def get_analysis_service() -> AnalysisService:
    return AnalysisService(get_analysis_repository(), get_gateway(), get_settings().pipeline)
