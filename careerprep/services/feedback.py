"""
Answer and interview feedback.

Model feedback is used when the gateway answers with something the normalizer
can read; otherwise the rule-based scorers below take over. Both paths produce
the same ``FeedbackResult`` / ``OverallFeedback`` shapes.
"""
import re
from typing import Dict, List, Optional

from careerprep.helpers import keywords, prompts
from careerprep.helpers.parsing import normalize
from careerprep.models.models import (
    FeedbackResult,
    InterviewQuestion,
    InterviewResponse,
    OverallFeedback,
    SkillAssessment,
)
from careerprep.services.gateway import AIGateway
from careerprep.services.scoring import category_rollups, overall_average
from careerprep.utils.utils import word_count
from careerprep.utils.logging_config import get_logger, log_function_call

logger = get_logger(__name__)

RUBBISH_MIN_CHARS = 10
RUBBISH_MIN_WORDS = 3
RUBBISH_MAX_SCORE = 15
PLACEHOLDER_CODE_MIN_CHARS = 20
PLACEHOLDER_MAX_SCORE = 25
PLACEHOLDER_MAX_CODE_QUALITY = 2
MIN_SCORE, MAX_SCORE = 5, 95
MIN_SCORE_ANSWERED = 15

TECH_VOCABULARY = [
    "algorithm", "complexity", "big-o", "data structure", "array", "hash", "linked list", "tree",
    "graph", "recursion", "database", "query", "index", "api", "endpoint", "http", "function",
    "class", "object", "interface", "inheritance", "async", "thread", "cache", "memory",
    "performance", "scalable", "testing", "debug", "deploy", "framework", "library", "server",
    "client", "component", "state", "variable", "loop", "runtime", "compile",
]
LEARNING_PHRASES = ["learned", "learnt", "realized", "improved", "lesson", "grew", "growth", "taught me", "now i"]
EXAMPLE_PHRASES = ["for example", "for instance", "such as", "in my project", "when i", "e.g", "specifically"]
TEAMWORK_PHRASES = ["team", "teammate", "collaborat", "together", "pair programming", "colleague", "group"]

PLACEHOLDER_MARKERS = ("your code here", "todo", "write your code", "implement here")
FUNCTION_RE = re.compile(r"\b(function|def|class|public|private|static)\b|=>")
COMMENT_RE = re.compile(r"(//|#|/\*)")
LOOP_RE = re.compile(r"\b(for|while|forEach|map|reduce|filter)\b")
LOGIC_RE = re.compile(r"\b(if|else|for|while)\b|[<>]=?|[+\-*/%]")
RETURN_RE = re.compile(r"\breturn\b\s*\S")


def _count_hits(text: str, phrases: List[str]) -> int:
    return sum(1 for p in phrases if p in text)


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, int(value)))


def is_rubbish(response_text: str) -> bool:
    text = (response_text or "").strip()
    return len(text) < RUBBISH_MIN_CHARS or word_count(text) < RUBBISH_MIN_WORDS


def is_placeholder_code(code: Optional[str]) -> bool:
    """True for empty or trivial code, or code that is only comments."""
    code = (code or "").strip()
    if len(code) < PLACEHOLDER_CODE_MIN_CHARS:
        return True
    meaningful = []
    for line in code.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(("//", "#", "/*", "*")):
            continue
        meaningful.append(stripped)
    body = " ".join(meaningful).lower()
    if any(marker in code.lower() for marker in PLACEHOLDER_MARKERS):
        # starter code left as-is: a signature plus "pass" or an empty body
        body = re.sub(r"(def\s+\w+\(.*?\):|function\s+\w+\(.*?\)\s*\{|\}|\bpass\b)", "", body).strip()
    return not body


def _code_signals(code: str) -> Dict[str, int]:
    lines = code.splitlines()
    signals = {
        "structure": 10 if FUNCTION_RE.search(code) else 0,
        "comments": 5 if any(COMMENT_RE.search(line) for line in lines) else 0,
        "return_logic": 10 if RETURN_RE.search(code) and LOGIC_RE.search(code) else 0,
        "iteration": 5 if LOOP_RE.search(code) else 0,
    }
    return signals


def generate_basic_feedback(
    response_text: str,
    question_type: str = "technical",
    code: Optional[str] = None,
    response_time: int = 0,
    expected_duration: int = 120,
) -> FeedbackResult:
    """Rule-based feedback for one answer, used whenever model feedback is unavailable."""
    text = (response_text or "").strip()
    lowered = text.lower()
    words = word_count(text)
    is_coding = question_type == "coding"

    if is_rubbish(text):
        score = _clamp(MIN_SCORE + 2 * words, MIN_SCORE, RUBBISH_MAX_SCORE)
        return FeedbackResult(
            score=score,
            strengths=[],
            improvements=[
                "Give a complete answer of at least a few sentences",
                "Explain your reasoning and use a concrete example",
            ],
            detailed_analysis="The response was too short to demonstrate understanding of the question.",
            communication_clarity=2,
            technical_accuracy=1,
            structured_response=1,
            code_quality=1 if is_coding else None,
            time_efficiency=None,
            source="rule_based",
        )

    score = 0
    strengths: List[str] = []
    improvements: List[str] = []

    if words >= 150:
        score += 30
        strengths.append("Detailed, thorough response")
    elif words >= 80:
        score += 25
        strengths.append("Well-developed response")
    elif words >= 40:
        score += 20
    else:
        score += 15
        improvements.append("Expand your answer with more detail")

    tech_hits = _count_hits(lowered, TECH_VOCABULARY) + len(keywords.find_technologies(text))
    if tech_hits >= 5:
        score += 25
        strengths.append("Strong use of technical vocabulary")
    elif tech_hits >= 3:
        score += 20
        strengths.append("Good use of technical terms")
    elif tech_hits >= 1:
        score += 15
    else:
        improvements.append("Use precise technical terminology")

    if _count_hits(lowered, LEARNING_PHRASES):
        score += 15
        strengths.append("Reflects on learning and growth")
    if _count_hits(lowered, EXAMPLE_PHRASES):
        score += 15
        strengths.append("Backs points with specific examples")
    else:
        improvements.append("Support your answer with a specific example")
    if _count_hits(lowered, TEAMWORK_PHRASES):
        score += 8
        strengths.append("Highlights collaboration")

    code_quality = None
    placeholder = False
    if is_coding:
        placeholder = is_placeholder_code(code)
        if placeholder:
            code_quality = 1 if not (code or "").strip() else PLACEHOLDER_MAX_CODE_QUALITY
            improvements.append("Submit a working solution, not just the starter code")
        else:
            signals = _code_signals(code)
            score += sum(signals.values())
            code_quality = _clamp(3 + sum(signals.values()) // 5, 1, 10)
            if signals["structure"]:
                strengths.append("Code is organised into functions")
            if not signals["comments"]:
                improvements.append("Comment the key steps of your code")
            if not signals["return_logic"]:
                improvements.append("Make sure the solution computes and returns a result")

    time_efficiency = None
    if response_time and expected_duration:
        if response_time <= expected_duration:
            score += 5
            time_efficiency = 8
        elif response_time <= expected_duration * 1.5:
            time_efficiency = 5
        else:
            time_efficiency = 3
            improvements.append("Work on answering within the expected time")

    score = _clamp(score, MIN_SCORE_ANSWERED, MAX_SCORE)
    if placeholder:
        score = min(score, PLACEHOLDER_MAX_SCORE)
    score = _clamp(score, MIN_SCORE, MAX_SCORE)

    return FeedbackResult(
        score=score,
        strengths=strengths or ["Attempted to answer the question"],
        improvements=improvements or ["Keep practising to sharpen your delivery"],
        detailed_analysis=(
            f"Answer of {words} words with {tech_hits} technical reference(s)."
            + (" No working code was submitted." if placeholder else "")
        ),
        communication_clarity=_clamp(3 + words // 30, 1, 10),
        technical_accuracy=_clamp(2 + tech_hits, 1, 10),
        structured_response=_clamp(4 + (2 if "for example" in lowered or "first" in lowered else 0) + words // 60, 1, 10),
        code_quality=code_quality,
        time_efficiency=time_efficiency,
        source="rule_based",
    )


def _apply_code_caps(feedback: FeedbackResult, question: InterviewQuestion, code: Optional[str]) -> FeedbackResult:
    if question.type != "coding" or not is_placeholder_code(code):
        return feedback
    return feedback.copy(update={
        "score": min(feedback.score, PLACEHOLDER_MAX_SCORE),
        "code_quality": min(feedback.code_quality or PLACEHOLDER_MAX_CODE_QUALITY, PLACEHOLDER_MAX_CODE_QUALITY),
    })


async def assess_answer(
    gateway: Optional[AIGateway],
    question: InterviewQuestion,
    response_text: str,
    code: Optional[str] = None,
    response_time: int = 0,
) -> FeedbackResult:
    """Model feedback for one answer, falling back to the rule-based scorer."""
    basic = generate_basic_feedback(response_text, question.type, code, response_time, question.expected_duration)
    # too short to be worth a model call
    if gateway is None or is_rubbish(response_text):
        return basic

    prompt = prompts.build("answer_feedback", "", None, {
        "question": question.question,
        "question_type": question.type,
        "expected_duration": question.expected_duration,
        "response_time": response_time,
        "answer": response_text,
        "code": code,
    })
    result = await gateway.ainvoke(prompt, temperature=0.2, max_tokens=1000)
    if not result.ok:
        logger.warning(f"Answer feedback unavailable ({result.error.kind}); using rule-based feedback")
        return basic

    normalized = normalize(result.text, "feedback")
    if not normalized.from_model:
        return basic
    return _apply_code_caps(normalized.payload, question, code)


# ---------- interview summary ----------

def _scores_by_type(questions: List[InterviewQuestion], responses: List[InterviewResponse]) -> Dict[str, List[int]]:
    types = {q.question_id: q.type for q in questions}
    grouped: Dict[str, List[int]] = {"behavioral": [], "technical": [], "coding": []}
    for r in responses:
        grouped.setdefault(types.get(r.question_id, "technical"), []).append(r.feedback.score)
    return grouped


def _band(score: int, high: str, mid: str, low: str) -> str:
    if score >= 75:
        return high
    if score >= 50:
        return mid
    return low


def basic_overall_feedback(questions: List[InterviewQuestion], responses: List[InterviewResponse]) -> OverallFeedback:
    """Aggregate per-answer scores without a model call."""
    scores = [r.feedback.score for r in responses]
    average = overall_average(scores)
    rollups = category_rollups(_scores_by_type(questions, responses))

    technical = overall_average([rollups["technical"], rollups["coding"]]) if responses else 0
    communication = (
        overall_average([r.feedback.communication_clarity * 10 for r in responses]) if responses else 0
    )
    problem_solving = rollups["coding"] if responses else 0

    recommendations = [
        "Practice coding problems regularly",
        "Work on explaining technical concepts clearly",
        "Build more projects to gain practical experience",
    ]
    if rollups["behavioral"] < 60 and responses:
        recommendations.append("Prepare STAR-style stories for behavioral questions")
    if len(responses) < len(questions):
        recommendations.append("Answer every question; unanswered questions lower your result")

    return OverallFeedback(
        score=average,
        category_scores=rollups,
        technical_skills=SkillAssessment(score=technical, feedback=_band(
            technical,
            "Solid grasp of software engineering fundamentals",
            "Shows basic understanding of software engineering concepts",
            "Technical fundamentals need more practice",
        )),
        communication_skills=SkillAssessment(score=communication, feedback=_band(
            communication,
            "Communicates ideas clearly and concisely",
            "Communicates clearly with room for improvement",
            "Answers need more structure and detail",
        )),
        problem_solving=SkillAssessment(score=problem_solving, feedback=_band(
            problem_solving,
            "Breaks problems down methodically",
            "Demonstrates logical thinking approach",
            "Practice decomposing problems before coding",
        )),
        recommendations=recommendations,
        questions_answered=len(responses),
        source="rule_based",
    )


@log_function_call
async def summarize_interview(
    gateway: Optional[AIGateway],
    job_description: str,
    questions: List[InterviewQuestion],
    responses: List[InterviewResponse],
) -> OverallFeedback:
    """Overall interview feedback; category scores always come from the recorded answers."""
    basic = basic_overall_feedback(questions, responses)
    if gateway is None or not responses:
        return basic

    summary = [
        {
            "question": r.question,
            "score": r.feedback.score,
            "strengths": r.feedback.strengths,
            "improvements": r.feedback.improvements,
        }
        for r in responses
    ]
    prompt = prompts.build("overall_feedback", "", job_description, {"summary": summary})
    result = await gateway.ainvoke(prompt, temperature=0.2, max_tokens=1500)
    if not result.ok:
        logger.warning(f"Overall feedback unavailable ({result.error.kind}); using rule-based summary")
        return basic

    normalized = normalize(result.text, "overall_feedback")
    if not normalized.from_model:
        return basic
    ai: OverallFeedback = normalized.payload
    return ai.copy(update={
        "category_scores": basic.category_scores,
        "questions_answered": basic.questions_answered,
        "recommendations": ai.recommendations or basic.recommendations,
    })
