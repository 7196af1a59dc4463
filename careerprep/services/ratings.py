"""
SWOT technology self-ratings, stored per (user_id, resume_hash)
"""
from functools import lru_cache
from typing import Any, Dict, List, Optional

import pandas as pd

from careerprep.helpers.keywords import categorize
from careerprep.models.models import TechCategory, Technology
from careerprep.models.schemas import RatingMetadata, RatingRecord
from careerprep.services.repository import ResumeKeyedRepository, get_rating_repository
from careerprep.utils.exceptions import NotFoundError, ValidationError
from careerprep.utils.logging_config import get_logger

logger = get_logger(__name__)

EXPERT_MIN = 8
PROFICIENT_MIN = 6
STRONG_MIN = 7
NEEDS_IMPROVEMENT_BELOW = 5

_CATEGORY_BY_LABEL = {c.value.lower(): c for c in TechCategory}
_CATEGORY_BY_LABEL.update({c.name.lower(): c for c in TechCategory})


def parse_category(raw: str, name: str) -> TechCategory:
    """Display label or enum name; other text falls back to the dictionary lookup for ``name``."""
    found = _CATEGORY_BY_LABEL.get(raw.strip().lower())
    if found:
        return found
    return categorize(name)


def validate_technologies(technologies: Any) -> List[Technology]:
    if not isinstance(technologies, list) or not technologies:
        raise ValidationError("Technologies array is required and cannot be empty", field="technologies")

    validated = []
    for index, tech in enumerate(technologies):
        if not isinstance(tech, dict):
            raise ValidationError(f"Technology at index {index} must be an object", field=f"technologies[{index}]")
        name = tech.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValidationError(f"Technology at index {index} is missing a valid name",
                                  field=f"technologies[{index}].name")
        category = tech.get("category")
        if not isinstance(category, str) or not category.strip():
            raise ValidationError(f'Technology "{name}" is missing a valid category',
                                  field=f"technologies[{index}].category")
        raw_level = tech.get("confidence_level", tech.get("confidenceLevel"))
        try:
            level = int(raw_level)
        except (TypeError, ValueError):
            level = None
        if level is None or isinstance(raw_level, bool) or not 1 <= level <= 10:
            raise ValidationError(f'Technology "{name}" has invalid confidence level. Must be 1-10',
                                  field=f"technologies[{index}].confidence_level", value=raw_level)
        validated.append(Technology(
            name=name.strip()[:100],
            category=parse_category(category, name),
            confidence_level=level,
        ))
    return validated


def _frame(technologies: List[Dict[str, Any]]) -> pd.DataFrame:
    rows = [
        {
            "name": t["name"],
            "category": t["category"].value if isinstance(t["category"], TechCategory) else str(t["category"]),
            "confidence_level": int(t["confidence_level"]),
        }
        for t in technologies
    ]
    return pd.DataFrame(rows, columns=["name", "category", "confidence_level"])


def rating_metadata(technologies: List[Technology]) -> RatingMetadata:
    df = _frame([t.dict() for t in technologies])
    levels = df["confidence_level"]
    return RatingMetadata(
        total_technologies=len(df),
        average_confidence=round(float(levels.mean()), 1) if len(df) else 0.0,
        expert_count=int((levels >= EXPERT_MIN).sum()),
        proficient_count=int(((levels >= PROFICIENT_MIN) & (levels < EXPERT_MIN)).sum()),
        beginner_count=int((levels < PROFICIENT_MIN).sum()),
        categories=list(dict.fromkeys(t.category for t in technologies)),
    )


def rating_summary(technologies: List[Dict[str, Any]]) -> Dict[str, Any]:
    df = _frame(technologies)
    levels = df["confidence_level"]
    return {
        "total_technologies": len(df),
        "average_confidence": round(float(levels.mean()), 1) if len(df) else 0,
        "strong_technologies": int((levels >= STRONG_MIN).sum()),
        "needs_improvement": int((levels < NEEDS_IMPROVEMENT_BELOW).sum()),
        "categories": list(dict.fromkeys(df["category"])),
    }


def category_stats(technologies: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Confidence distribution per category plus SWOT-style groupings."""
    df = _frame(technologies)
    if df.empty:
        return {"categories": [], "strengths": [], "weaknesses": [], "levels": {}}

    grouped = (
        df.groupby("category")["confidence_level"]
        .agg(technologies="count", average="mean", lowest="min", highest="max")
        .reset_index()
        .sort_values(["average", "technologies"], ascending=[False, False])
    )
    categories = [
        {
            "category": row.category,
            "count": int(row.technologies),
            "average_confidence": round(float(row.average), 1),
            "min_confidence": int(row.lowest),
            "max_confidence": int(row.highest),
        }
        for row in grouped.itertuples(index=False)
    ]
    levels = pd.cut(
        df["confidence_level"],
        bins=[0, PROFICIENT_MIN - 1, EXPERT_MIN - 1, 10],
        labels=["beginner", "proficient", "expert"],
    ).value_counts()
    ordered = df.sort_values("confidence_level", ascending=False)
    return {
        "categories": categories,
        "strengths": ordered[ordered["confidence_level"] >= EXPERT_MIN]["name"].tolist(),
        "weaknesses": ordered[ordered["confidence_level"] < NEEDS_IMPROVEMENT_BELOW]["name"].tolist()[::-1],
        "levels": {str(k): int(v) for k, v in levels.items()},
    }


class RatingService:
    """Save, read and summarize technology confidence ratings"""

    def __init__(self, repository: ResumeKeyedRepository):
        self.repository = repository

    async def save_ratings(self, user_id: str, resume_hash: Optional[str], technologies: Any) -> Dict[str, Any]:
        validated = validate_technologies(technologies)
        if not resume_hash:
            raise ValidationError("Resume hash is required to save technology ratings; analyze a resume first",
                                  field="resume_hash")
        record = RatingRecord(
            user_id=user_id,
            resume_hash=resume_hash,
            technologies=validated,
            metadata=rating_metadata(validated),
        )
        logger.info(f"Saving {len(validated)} technology ratings for user {user_id}")
        return await self.repository.upsert(user_id, resume_hash, record.dict(include={"technologies", "metadata"}))

    async def get_ratings(self, user_id: str, resume_hash: Optional[str] = None) -> List[Dict[str, Any]]:
        if resume_hash:
            doc = await self.repository.find_one(user_id, resume_hash)
            if not doc:
                raise NotFoundError("No technology ratings found for this resume",
                                    resource="rating", resource_id=resume_hash)
            docs = [doc]
        else:
            docs = await self.repository.find(user_id)
        out = []
        for doc in docs:
            doc.pop("user_id", None)
            out.append({**doc, "summary": rating_summary(doc.get("technologies") or [])})
        return out

    async def delete_ratings(self, user_id: str, resume_hash: str) -> None:
        if not resume_hash:
            raise ValidationError("Resume hash is required", field="resume_hash")
        await self.repository.delete_by_hash(user_id, resume_hash)
        logger.info(f"Deleted technology ratings for user {user_id} ({resume_hash[:12]})")

    async def stats(self, user_id: str, resume_hash: str) -> Dict[str, Any]:
        doc = await self.repository.find_one(user_id, resume_hash)
        if not doc:
            raise NotFoundError("No technology ratings found for this resume",
                                resource="rating", resource_id=resume_hash)
        return {"resume_hash": resume_hash, **category_stats(doc.get("technologies") or [])}


@lru_cache(maxsize=1)
def get_rating_service() -> RatingService:
    return RatingService(get_rating_repository())
