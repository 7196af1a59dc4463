import json
from typing import Any, Dict, List, Optional

from careerprep.utils.exceptions import ValidationError
from careerprep.utils.utils import truncate

NON_TECH_SENTINEL = "NON_TECH_ROLE"

FIELD_LIMIT = 4500
SIMILARITY_FIELD_LIMIT = 4000

ROLE_SCREEN = """First, determine if this job description is for a SOFTWARE ENGINEERING INTERNSHIP or a similar technical role.

SOFTWARE ROLES: Software Engineer/Developer Intern, Web, Mobile, Full-Stack, Backend or Frontend Developer Intern, Data Engineer Intern, ML Engineer Intern, DevOps Intern, QA Engineer Intern, or any role requiring programming skills.

NON-TECH ROLES: Medical, Legal, Education, Retail, Food Service, Marketing, Sales, HR, Accounting, Administrative, or any role not requiring programming skills.

If this is NOT a software engineering role, respond exactly: {sentinel}
"""

MATCH_ANALYSIS_PROMPT = """You are a senior technical recruiter who specialises in SOFTWARE ENGINEERING INTERNS.

{screen}
Otherwise return ONLY a single JSON object, with no prose and no code fences, of this exact shape:
{{
  "strengths": ["<specific strength backed by the resume>"],
  "contentWeaknesses": ["<missing skill, experience or metric the job asks for>"],
  "structureWeaknesses": ["<layout, ATS or formatting problem>"],
  "contentRecommendations": ["<concrete content to add, naming exact technologies>"],
  "structureRecommendations": ["<concrete formatting change>"]
}}

Technologies found in the resume: {technologies}

Resume:
{resume}

Job Description:
{job}
"""

SIMILARITY_PROMPT = """You are an expert software engineering internship recruiter.

Score how well this candidate fits the job on a 0.0 to 1.0 scale.
If the job is not a software engineering or similar technical role, return 0.

Weights: programming languages 40%, technical projects 25%, CS fundamentals 20%, learning aptitude 10%, education 5%.

Resume:
{resume}

Job Description:
{job}

Return ONLY a decimal between 0.0 and 1.0:
- 0.0: non-software role or no programming skills
- 0.1-0.3: minimal coding experience, major gaps
- 0.4-0.6: some relevant skills
- 0.7-0.8: good technical foundation
- 0.9-1.0: strong candidate

Score:"""

INTERVIEW_QUESTIONS_PROMPT = """You are a senior software engineering interviewer at a top tech company.

{screen}
Otherwise generate exactly 10 interview questions for this internship candidate:
- 3 behavioral questions (type "behavioral")
- 4 technical questions on technologies from the resume or job (type "technical")
- 3 coding problems (type "coding") with starter code

Return ONLY a single JSON array, with no prose and no code fences, where each item is:
{{
  "questionId": "q1",
  "type": "behavioral" | "technical" | "coding",
  "question": "<question text>",
  "category": "<topic, e.g. Teamwork or {example_tech}>",
  "difficulty": "easy" | "medium",
  "expectedDuration": <seconds>,
  "starterCode": {{"javascript": "...", "python": "..."}} or null
}}

Technologies found in the resume: {technologies}

Resume:
{resume}

Job Description:
{job}
"""

ANSWER_FEEDBACK_PROMPT = """Assess this interview answer from a software engineering intern candidate.

Question ({question_type}): {question}
Expected duration: {expected_duration} seconds
Response time: {response_time} seconds

Answer:
{answer}

Code submitted:
{code}

Return ONLY a single JSON object, with no prose and no code fences:
{{
  "score": <0-100>,
  "strengths": ["..."],
  "improvements": ["..."],
  "detailedAnalysis": "<2-4 sentences>",
  "communicationClarity": <1-10>,
  "technicalAccuracy": <1-10>,
  "structuredResponse": <1-10>,
  "codeQuality": <1-10 or null when no code was expected>,
  "timeEfficiency": <1-10 or null>
}}

Be honest: one-word or off-topic answers must score below 15.
"""

OVERALL_FEEDBACK_PROMPT = """Write overall feedback for a software engineering intern mock interview.

Job Description:
{job}

Per-question results:
{summary}

Return ONLY a single JSON object, with no prose and no code fences:
{{
  "score": <0-100>,
  "technicalSkills": {{"score": <0-100>, "feedback": "..."}},
  "communicationSkills": {{"score": <0-100>, "feedback": "..."}},
  "problemSolving": {{"score": <0-100>, "feedback": "..."}},
  "recommendations": ["..."]
}}

Focus on intern-level expectations and growth potential.
"""

PROMPT_KINDS = (
    "match_analysis",
    "similarity",
    "interview_questions",
    "answer_feedback",
    "overall_feedback",
)


def _screen() -> str:
    return ROLE_SCREEN.format(sentinel=NON_TECH_SENTINEL)


def _technology_list(extra: Dict[str, Any]) -> str:
    names: List[str] = extra.get("technologies") or []
    return ", ".join(names) if names else "none detected"


def build(kind: str, resume_text: str, job_description: Optional[str] = None,
          extra_context: Optional[Dict[str, Any]] = None) -> str:
    """Render the prompt for one kind of model call.

    Resume and job text are truncated before embedding; ``extra_context``
    carries kind-specific values (technologies, question, answer, summary).
    """
    if kind not in PROMPT_KINDS:
        raise ValidationError(f"Unknown prompt kind: {kind}", field="kind", value=kind)

    extra = extra_context or {}
    job = job_description or ""

    if kind == "match_analysis":
        return MATCH_ANALYSIS_PROMPT.format(
            screen=_screen(),
            technologies=_technology_list(extra),
            resume=truncate(resume_text, FIELD_LIMIT),
            job=truncate(job, FIELD_LIMIT),
        )

    if kind == "similarity":
        return SIMILARITY_PROMPT.format(
            resume=truncate(resume_text, SIMILARITY_FIELD_LIMIT),
            job=truncate(job, SIMILARITY_FIELD_LIMIT),
        )

    if kind == "interview_questions":
        technologies = extra.get("technologies") or []
        return INTERVIEW_QUESTIONS_PROMPT.format(
            screen=_screen(),
            technologies=_technology_list(extra),
            example_tech=technologies[0] if technologies else "Data Structures",
            resume=truncate(resume_text, FIELD_LIMIT),
            job=truncate(job, FIELD_LIMIT),
        )

    if kind == "answer_feedback":
        return ANSWER_FEEDBACK_PROMPT.format(
            question_type=extra.get("question_type", "technical"),
            question=extra.get("question", ""),
            expected_duration=extra.get("expected_duration", 120),
            response_time=extra.get("response_time", 0),
            answer=truncate(extra.get("answer", ""), FIELD_LIMIT),
            code=truncate(extra.get("code") or "(none)", FIELD_LIMIT),
        )

    return OVERALL_FEEDBACK_PROMPT.format(
        job=truncate(job, FIELD_LIMIT),
        summary=truncate(json.dumps(extra.get("summary", []), indent=2, default=str), FIELD_LIMIT),
    )
