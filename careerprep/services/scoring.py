from typing import Dict, List, Mapping, Sequence

import numpy as np

from careerprep.helpers.keywords import (
    NON_TECH_INDICATORS,
    SOFTWARE_ROLE_KEYWORDS,
    find_technologies,
    has_any,
    overlap,
)

ROLLUP_CATEGORIES = ("behavioral", "technical", "coding")

# (lower bound, base percentage, slope) for each similarity bucket
BUCKETS = (
    (0.9, 80.0, 200.0),
    (0.8, 60.0, 200.0),
    (0.6, 32.0, 140.0),
    (0.4, 15.0, 87.5),
    (0.2, 5.0, 50.0),
    (0.0, 0.0, 25.0),
)

FALLBACK_SIMILARITY_CAP = 0.8
NO_REQUIREMENTS_SIMILARITY = 0.1


def _round_half_up(value: float) -> int:
    return int(np.floor(value + 0.5))


def to_match_percentage(similarity: float, is_non_tech_role: bool = False) -> int:
    """Map a 0..1 similarity onto the non-linear 0..100 match scale."""
    if is_non_tech_role:
        return 0
    s = float(min(1.0, max(0.0, similarity or 0.0)))
    for lower, base, slope in BUCKETS:
        if s >= lower:
            # tiny epsilon so 0.6 -> 32, not 31 due to 0.6 - 0.4 float error
            percentage = _round_half_up(base + (s - lower) * slope + 1e-9)
            return max(0, min(100, percentage))
    return 0


def category_rollups(scores_by_type: Mapping[str, Sequence[float]]) -> Dict[str, int]:
    """Mean score per question category.

    A category with no scores reports the overall average instead of zero.
    """
    all_scores: List[float] = [s for scores in scores_by_type.values() for s in scores]
    overall = float(np.mean(all_scores)) if all_scores else 0.0
    rollups = {}
    for category in ROLLUP_CATEGORIES:
        scores = list(scores_by_type.get(category) or [])
        rollups[category] = _round_half_up(np.mean(scores) if scores else overall)
    return rollups


def overall_average(scores: Sequence[float]) -> int:
    return _round_half_up(np.mean(scores)) if len(scores) else 0


def is_non_tech_role(job_description: str) -> bool:
    """Prescreen: non-tech indicators present and no software vocabulary."""
    text = job_description or ""
    if not has_any(text, NON_TECH_INDICATORS):
        return False
    return not has_any(text, SOFTWARE_ROLE_KEYWORDS) and not find_technologies(text)


def fallback_similarity(resume_text: str, job_description: str) -> float:
    """Keyword-overlap similarity used when the model gives no usable score."""
    if is_non_tech_role(job_description):
        return 0.0
    terms = overlap(resume_text, job_description)
    required = terms["required"]
    if not required:
        return NO_REQUIREMENTS_SIMILARITY
    ratio = len(terms["matched"]) / len(required)
    return round(min(FALLBACK_SIMILARITY_CAP, ratio), 4)
