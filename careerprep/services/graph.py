"""
Resume vs job description analysis as a LangGraph state graph.

    prescreen --(non-tech)--------------------------> score
        \\--(tech)--> similarity      --\\
         \\--------> recommendations  ---+----------> score

``similarity`` and ``recommendations`` are independent model calls and run
concurrently; ``score`` waits for both. Each model call has a deterministic
fallback so the graph always produces a ``MatchResult``.
"""
from typing import Any, Dict, List, Optional, TypedDict

from langgraph.graph import END, StateGraph

from careerprep.helpers import keywords, prompts
from careerprep.helpers.parsing import MATCH_FIELDS, normalize
from careerprep.models.models import MatchResult
from careerprep.services.gateway import AIGateway
from careerprep.services.scoring import fallback_similarity, is_non_tech_role, to_match_percentage
from careerprep.utils.logging_config import get_logger

logger = get_logger(__name__)

NON_TECH_MESSAGE = (
    "This job description is not for a software engineering internship or technical role. "
    "The analysis is designed for roles that require programming skills; please provide a "
    "software engineering job description for accurate recommendations."
)

DEFAULT_RECOMMENDATIONS: Dict[str, List[str]] = {
    "strengths": [
        "Educational foundation in computer science or related technical field",
        "Demonstrates learning aptitude and interest in software development",
        "Has academic exposure to programming concepts and problem-solving",
        "Shows initiative in pursuing technical skills and knowledge",
    ],
    "content_weaknesses": [
        "Lacks demonstrated coding projects with measurable impact or user engagement",
        "No visible GitHub portfolio showcasing coding abilities and project diversity",
        "Insufficient evidence of database knowledge (SQL, NoSQL) and data manipulation skills",
        "Lacks demonstration of collaborative coding experience or version control usage (Git/GitHub)",
    ],
    "structure_weaknesses": [
        "Technical skills section not optimized for software engineering roles; categorize languages, frameworks and tools",
        "Missing essential professional links: GitHub profile, LinkedIn and personal portfolio website",
        "Resume format not tailored for technical recruiting and ATS compatibility",
        "Project descriptions lack technical depth, specific technologies used and quantified outcomes",
    ],
    "content_recommendations": [
        "Build 2-3 substantial coding projects with complete GitHub documentation",
        "Create measurable project impact, e.g. 'Optimized database queries reducing load time by 60%'",
        "Add relevant coursework: Data Structures & Algorithms, Software Engineering, Database Systems, Web Development",
        "Gain practical experience through open source contributions, hackathons or small freelance projects",
        "Build a problem-solving record: solve 50+ LeetCode problems or take part in coding competitions",
    ],
    "structure_recommendations": [
        "Use a technical resume layout: Contact, Summary, Education, Technical Skills, Projects, Experience",
        "Organize technical skills by type: Languages, Web Technologies, Databases, Tools",
        "Add professional links prominently: GitHub, LinkedIn and a portfolio site",
        "Optimize for applicant tracking systems: standard fonts, no graphics or tables, clear section headers",
        "Structure project entries as 'Project Name | Technologies | Impact | GitHub link | Live demo'",
    ],
}


class MatchState(TypedDict, total=False):
    resume_text: str
    job_description: str
    technologies: List[str]
    prescreen_non_tech: bool
    similarity: float
    similarity_source: str
    recommendations: Dict[str, List[str]]
    recommendations_source: str
    model_non_tech: bool
    gateway_failed: bool
    result: MatchResult


def _default_recommendations(missing: List[str]) -> Dict[str, List[str]]:
    recs = {k: list(v) for k, v in DEFAULT_RECOMMENDATIONS.items()}
    if missing:
        listed = ", ".join(missing[:8])
        recs["content_weaknesses"].insert(0, f"Missing technologies required by the job: {listed}")
        recs["content_recommendations"].insert(0, f"Learn and showcase the required technologies: {listed}")
    return recs


def build_match_graph(gateway: Optional[AIGateway]):
    """Compile the per-job analysis graph around one gateway."""

    async def node_prescreen(state: MatchState):
        non_tech = is_non_tech_role(state["job_description"])
        if non_tech:
            logger.info("Prescreen classified the job description as non-technical")
        return {"prescreen_non_tech": non_tech}

    async def node_similarity(state: MatchState):
        resume, job = state["resume_text"], state["job_description"]
        if gateway is not None:
            result = await gateway.ainvoke(prompts.build("similarity", resume, job), temperature=0.1, max_tokens=20)
            if result.ok:
                normalized = normalize(result.text, "similarity")
                if normalized.from_model:
                    return {"similarity": float(normalized.payload), "similarity_source": "ai"}
            else:
                logger.warning(f"Similarity call failed ({result.error.kind}); using keyword overlap")
                return {
                    "similarity": fallback_similarity(resume, job),
                    "similarity_source": "keyword",
                    "gateway_failed": True,
                }
        return {"similarity": fallback_similarity(resume, job), "similarity_source": "keyword"}

    async def node_recommendations(state: MatchState):
        resume, job = state["resume_text"], state["job_description"]
        missing = keywords.overlap(resume, job)["missing"]
        if gateway is not None:
            prompt = prompts.build("match_analysis", resume, job, {"technologies": state.get("technologies", [])})
            result = await gateway.ainvoke(prompt, temperature=0.3, max_tokens=3000)
            if result.ok:
                normalized = normalize(result.text, "match_analysis")
                if normalized.is_non_tech:
                    return {"model_non_tech": True, "recommendations_source": "sentinel"}
                if normalized.from_model:
                    # keep model lists, fill empty ones from the defaults
                    defaults = _default_recommendations(missing)
                    recs = {f: normalized.payload[f] or defaults[f] for f in MATCH_FIELDS}
                    return {"recommendations": recs, "recommendations_source": "ai"}
            else:
                logger.warning(f"Recommendation call failed ({result.error.kind}); using default guidance")
        return {"recommendations": _default_recommendations(missing), "recommendations_source": "default"}

    async def node_score(state: MatchState):
        overlap = keywords.overlap(state["resume_text"], state["job_description"])
        if state.get("prescreen_non_tech") or state.get("model_non_tech"):
            result = MatchResult(
                match_percentage=to_match_percentage(0.0, True),
                is_non_tech_role=True,
                raw_similarity=0.0,
                message=NON_TECH_MESSAGE,
            )
            return {"result": result}

        similarity = state.get("similarity", 0.0)
        recs = state.get("recommendations") or _default_recommendations(overlap["missing"])
        result = MatchResult(
            match_percentage=to_match_percentage(similarity, False),
            is_non_tech_role=False,
            raw_similarity=similarity,
            has_error=bool(state.get("gateway_failed")),
            analysis_quality={
                "similarity_source": state.get("similarity_source", "keyword"),
                "recommendations_source": state.get("recommendations_source", "default"),
                "matched_technologies": overlap["matched"],
                "missing_technologies": overlap["missing"],
                "strengths_count": len(recs["strengths"]),
                "weaknesses_count": len(recs["content_weaknesses"]) + len(recs["structure_weaknesses"]),
                "recommendations_count": len(recs["content_recommendations"]) + len(recs["structure_recommendations"]),
                "is_comprehensive": (
                    len(recs["strengths"]) >= 3
                    and len(recs["content_recommendations"]) >= 5
                    and len(recs["structure_recommendations"]) >= 5
                ),
            },
            **recs,
        )
        return {"result": result}

    def route_after_prescreen(state: MatchState):
        if state.get("prescreen_non_tech"):
            return ["score"]
        return ["similarity", "recommendations"]

    g = StateGraph(MatchState)
    g.add_node("prescreen", node_prescreen)
    g.add_node("similarity", node_similarity)
    g.add_node("recommendations", node_recommendations)
    g.add_node("score", node_score)
    g.set_entry_point("prescreen")
    g.add_conditional_edges("prescreen", route_after_prescreen, ["similarity", "recommendations", "score"])
    g.add_edge(["similarity", "recommendations"], "score")
    g.add_edge("score", END)
    return g.compile()


async def run_match(graph, resume_text: str, job_description: str, technologies: List[str]) -> MatchResult:
    state: Dict[str, Any] = await graph.ainvoke({
        "resume_text": resume_text,
        "job_description": job_description,
        "technologies": technologies,
    })
    return state["result"]
