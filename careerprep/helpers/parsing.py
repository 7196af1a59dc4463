"""
Turns raw model output into schema-shaped values.

``normalize`` is total: for any input string it returns a ``NormalizedResult``
whose payload matches the requested schema. Order of attempts:

1. the non-tech sentinel, checked before any parsing
2. the first balanced JSON object or array (code fences and prose ignored)
3. rule-based extraction from plain text (bullets, numbered lines, scores)
4. a static default payload
"""
import json
import math
import re
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel

from careerprep.helpers.prompts import NON_TECH_SENTINEL
from careerprep.models.models import FeedbackResult, InterviewQuestion, OverallFeedback, SkillAssessment
from careerprep.utils.logging_config import get_logger

logger = get_logger(__name__)

SchemaTag = Literal["match_analysis", "question_list", "feedback", "overall_feedback", "similarity"]
Source = Literal["json", "text", "default", "sentinel"]

MATCH_FIELDS = (
    "strengths",
    "content_weaknesses",
    "structure_weaknesses",
    "content_recommendations",
    "structure_recommendations",
)

FENCE_RE = re.compile(r"```[a-zA-Z]*")
BULLET_RE = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s+(.*\S)\s*$")
NUMBERED_RE = re.compile(r"^\s*(?:q?\d+[.):]|[-*•])\s*(.*\S)\s*$", re.IGNORECASE)
SCORE_RE = re.compile(r"\b(?:overall\s+)?score\s*[:=]?\s*(\d{1,3})(?:\s*/\s*100)?", re.IGNORECASE)
NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")


class NormalizedResult(BaseModel):
    schema_tag: SchemaTag
    payload: Any
    source: Source
    is_non_tech: bool = False

    @property
    def from_model(self) -> bool:
        return self.source in ("json", "text")


# ---------- JSON location ----------

def strip_fences(raw: str) -> str:
    return FENCE_RE.sub("", raw or "").strip()


def find_json_block(text: str) -> Optional[str]:
    """First balanced {...} or [...] substring, ignoring brackets inside strings."""
    if not text:
        return None
    pairs = {"{": "}", "[": "]"}
    for start, ch in enumerate(text):
        if ch not in pairs:
            continue
        stack = []
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            c = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif c == "\\":
                    escaped = True
                elif c == '"':
                    in_string = False
                continue
            if c == '"':
                in_string = True
            elif c in pairs:
                stack.append(pairs[c])
            elif c in ("}", "]"):
                if not stack or stack.pop() != c:
                    break
                if not stack:
                    return text[start:i + 1]
        # unbalanced from here; try the next opening bracket
    return None


def parse_json(raw: str) -> Optional[Any]:
    block = find_json_block(strip_fences(raw))
    if block is None:
        return None
    try:
        return json.loads(block)
    except (ValueError, RecursionError):
        return None


# ---------- field coercion ----------

def _pick(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    out = []
    for item in value:
        if isinstance(item, dict):
            item = _pick(item, "text", "description", "title", "name")
        text = str(item).strip() if item is not None else ""
        if text:
            out.append(text)
    return out


def as_int(value: Any, low: int, high: int, default: Optional[int]) -> Optional[int]:
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if not math.isfinite(number):
        return default
    number = int(round(number))
    return max(low, min(high, number))


def _coerce_match(data: Any) -> Optional[Dict[str, List[str]]]:
    if not isinstance(data, dict):
        return None
    payload = {field: as_str_list(_pick(data, field, _camel(field))) for field in MATCH_FIELDS}
    if not any(payload.values()):
        return None
    return payload


def _infer_type(text: str) -> str:
    lowered = text.lower()
    if re.search(r"\b(write|implement|code|function|algorithm)\b", lowered):
        return "coding"
    if re.search(r"\b(tell me about|describe a time|a time when|situation|team|conflict|yourself)\b", lowered):
        return "behavioral"
    return "technical"


def _coerce_question(item: Any, index: int) -> Optional[InterviewQuestion]:
    if isinstance(item, str):
        item = {"question": item}
    if not isinstance(item, dict):
        return None
    text = str(_pick(item, "question", "text", "prompt") or "").strip()
    if not text:
        return None
    qtype = str(_pick(item, "type", "question_type", "questionType") or "").strip().lower()
    if qtype not in ("behavioral", "technical", "coding"):
        qtype = _infer_type(text)
    difficulty = str(_pick(item, "difficulty") or "medium").strip().lower()
    if difficulty not in ("easy", "medium"):
        difficulty = "medium"
    starter = _pick(item, "starter_code", "starterCode")
    if isinstance(starter, dict):
        starter = {str(k): str(v) for k, v in starter.items() if v is not None} or None
    elif isinstance(starter, str) and starter.strip():
        starter = {"javascript": starter}
    else:
        starter = None
    return InterviewQuestion(
        question_id=str(_pick(item, "question_id", "questionId", "id") or f"q{index + 1}"),
        type=qtype,
        question=text,
        category=str(_pick(item, "category", "topic") or "General").strip() or "General",
        difficulty=difficulty,
        expected_duration=as_int(_pick(item, "expected_duration", "expectedDuration"), 10, 3600, 120),
        starter_code=starter if qtype == "coding" else None,
    )


def _coerce_questions(data: Any) -> Optional[List[InterviewQuestion]]:
    if isinstance(data, dict):
        data = _pick(data, "questions", "items")
    if not isinstance(data, list):
        return None
    questions = [q for q in (_coerce_question(item, i) for i, item in enumerate(data)) if q]
    return questions or None


def _coerce_feedback(data: Any) -> Optional[FeedbackResult]:
    if not isinstance(data, dict):
        return None
    # legacy shape: {"confidence": {...}, "feedback": {...}}
    nested = data.get("feedback") if isinstance(data.get("feedback"), dict) else {}
    merged = {**(data.get("confidence") or {}), **nested, **{k: v for k, v in data.items() if k != "feedback"}}
    score = as_int(_pick(merged, "score", "overallScore", "overall_score"), 0, 100, None)
    if score is None:
        return None

    def sub(name: str, optional: bool = False) -> Optional[int]:
        return as_int(_pick(merged, name, _camel(name)), 1, 10, None if optional else 5)

    return FeedbackResult(
        score=score,
        strengths=as_str_list(merged.get("strengths")),
        improvements=as_str_list(_pick(merged, "improvements", "weaknesses")),
        detailed_analysis=str(_pick(merged, "detailed_analysis", "detailedAnalysis", "analysis") or ""),
        communication_clarity=sub("communication_clarity"),
        technical_accuracy=sub("technical_accuracy"),
        structured_response=sub("structured_response"),
        code_quality=sub("code_quality", optional=True),
        time_efficiency=sub("time_efficiency", optional=True),
        source="ai",
    )


def _coerce_skill(value: Any, default_score: int) -> SkillAssessment:
    if isinstance(value, dict):
        return SkillAssessment(
            score=as_int(value.get("score"), 0, 100, default_score),
            feedback=str(value.get("feedback") or ""),
        )
    if isinstance(value, str):
        return SkillAssessment(score=default_score, feedback=value)
    return SkillAssessment(score=default_score)


def _coerce_overall(data: Any) -> Optional[OverallFeedback]:
    if not isinstance(data, dict):
        return None
    nested = data.get("feedback") if isinstance(data.get("feedback"), dict) else {}
    merged = {**nested, **{k: v for k, v in data.items() if k != "feedback"}}
    score = as_int(_pick(merged, "score", "overall_score", "overallScore"), 0, 100, None)
    if score is None:
        return None
    return OverallFeedback(
        score=score,
        technical_skills=_coerce_skill(_pick(merged, "technical_skills", "technicalSkills"), score),
        communication_skills=_coerce_skill(_pick(merged, "communication_skills", "communicationSkills"), score),
        problem_solving=_coerce_skill(_pick(merged, "problem_solving", "problemSolving"), score),
        recommendations=as_str_list(merged.get("recommendations")),
        source="ai",
    )


def _coerce_similarity(data: Any) -> Optional[float]:
    if isinstance(data, dict):
        data = _pick(data, "score", "similarity")
    if isinstance(data, list) and data:
        data = data[0]
    try:
        value = float(data)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(value):
        return None
    return _scale_similarity(value)


def _scale_similarity(value: float) -> float:
    # models occasionally answer on a 0-100 scale
    if 1.0 < value <= 100.0:
        value = value / 100.0
    return max(0.0, min(1.0, value))


COERCERS = {
    "match_analysis": _coerce_match,
    "question_list": _coerce_questions,
    "feedback": _coerce_feedback,
    "overall_feedback": _coerce_overall,
    "similarity": _coerce_similarity,
}


# ---------- plain-text extraction ----------

def _sections(text: str) -> List[Tuple[str, List[str]]]:
    """Group bullet lines under the most recent non-bullet heading."""
    sections: List[Tuple[str, List[str]]] = []
    heading = ""
    items: List[str] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        match = BULLET_RE.match(line)
        if match:
            items.append(match.group(1).strip("*_ "))
            continue
        if items or heading:
            sections.append((heading, items))
        heading, items = line.strip().lower(), []
    sections.append((heading, items))
    return [(h, i) for h, i in sections if i]


def _match_field(heading: str) -> Optional[str]:
    structural = "structure" in heading or "format" in heading
    if "strength" in heading:
        return "strengths"
    if "weakness" in heading or "gap" in heading:
        return "structure_weaknesses" if structural else "content_weaknesses"
    if "recommend" in heading or "suggest" in heading or "improve" in heading:
        return "structure_recommendations" if structural else "content_recommendations"
    return None


def _text_match(text: str) -> Optional[Dict[str, List[str]]]:
    payload = {field: [] for field in MATCH_FIELDS}
    for heading, items in _sections(text):
        field = _match_field(heading)
        if field:
            payload[field].extend(items)
    return payload if any(payload.values()) else None


def _text_questions(text: str) -> Optional[List[InterviewQuestion]]:
    lines = []
    for line in text.splitlines():
        match = NUMBERED_RE.match(line)
        candidate = match.group(1).strip() if match else line.strip()
        if candidate.endswith("?") or (match and len(candidate.split()) >= 5):
            lines.append(candidate)
    questions = [_coerce_question(line, i) for i, line in enumerate(lines)]
    questions = [q for q in questions if q]
    return questions or None


def _text_score(text: str) -> Optional[int]:
    match = SCORE_RE.search(text)
    return as_int(match.group(1), 0, 100, None) if match else None


def _text_feedback(text: str) -> Optional[FeedbackResult]:
    score = _text_score(text)
    if score is None:
        return None
    strengths, improvements = [], []
    for heading, items in _sections(text):
        if "strength" in heading:
            strengths.extend(items)
        elif "improve" in heading or "weakness" in heading:
            improvements.extend(items)
    return FeedbackResult(
        score=score,
        strengths=strengths,
        improvements=improvements,
        detailed_analysis=text.strip()[:1000],
        source="ai",
    )


def _text_overall(text: str) -> Optional[OverallFeedback]:
    score = _text_score(text)
    if score is None:
        return None
    recommendations = []
    for heading, items in _sections(text):
        if "recommend" in heading or "next step" in heading:
            recommendations.extend(items)
    return OverallFeedback(
        score=score,
        technical_skills=SkillAssessment(score=score),
        communication_skills=SkillAssessment(score=score),
        problem_solving=SkillAssessment(score=score),
        recommendations=recommendations,
        source="ai",
    )


def _text_similarity(text: str) -> Optional[float]:
    match = NUMBER_RE.search(text)
    if not match:
        return None
    return _scale_similarity(float(match.group(0)))


TEXT_EXTRACTORS = {
    "match_analysis": _text_match,
    "question_list": _text_questions,
    "feedback": _text_feedback,
    "overall_feedback": _text_overall,
    "similarity": _text_similarity,
}


# ---------- defaults ----------

def default_payload(schema: SchemaTag) -> Any:
    """Static payload used when nothing usable can be recovered."""
    if schema == "match_analysis":
        return {field: [] for field in MATCH_FIELDS}
    if schema == "question_list":
        return []
    if schema == "feedback":
        return FeedbackResult(
            score=50,
            strengths=["Attempted to answer the question"],
            improvements=["Provide more specific examples", "Practice technical terminology"],
            detailed_analysis="Automatic assessment was unavailable for this answer.",
            source="rule_based",
        )
    if schema == "overall_feedback":
        return OverallFeedback(source="rule_based")
    return 0.0


def normalize(raw: Optional[str], schema: SchemaTag) -> NormalizedResult:
    """Coerce raw model text into the payload for ``schema``. Never raises."""
    text = raw if isinstance(raw, str) else ""

    if NON_TECH_SENTINEL in text:
        return NormalizedResult(schema_tag=schema, payload=default_payload(schema), source="sentinel", is_non_tech=True)

    try:
        data = parse_json(text)
        if data is not None:
            payload = COERCERS[schema](data)
            if payload is not None:
                return NormalizedResult(schema_tag=schema, payload=payload, source="json")

        payload = TEXT_EXTRACTORS[schema](strip_fences(text)) if text.strip() else None
        if payload is not None:
            return NormalizedResult(schema_tag=schema, payload=payload, source="text")
    except (ValueError, TypeError, KeyError, AttributeError, OverflowError, RecursionError) as e:
        # pydantic validation errors are ValueErrors
        logger.warning(f"Normalizer fell back to defaults for {schema}: {e}")

    return NormalizedResult(schema_tag=schema, payload=default_payload(schema), source="default")
