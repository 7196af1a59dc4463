"""
Interview question generation.

The model is asked for a 3/4/3 behavioral/technical/coding set. Whatever comes
back is coerced by the normalizer and then fitted to that composition: extra
questions of a type are dropped, missing ones are filled from templates keyed
on the technologies found in the resume and job description. Ids are always
reassigned ``q1``..``q10`` so they are unique within the interview.
"""
from typing import Dict, List, Optional, Tuple

from careerprep.helpers import keywords, prompts
from careerprep.helpers.parsing import normalize
from careerprep.models.models import InterviewQuestion
from careerprep.services.gateway import AIGateway
from careerprep.utils.logging_config import get_logger, log_function_call

logger = get_logger(__name__)

COMPOSITION: Tuple[Tuple[str, int], ...] = (("behavioral", 3), ("technical", 4), ("coding", 3))
QUESTION_COUNT = sum(n for _, n in COMPOSITION)

BEHAVIORAL_TEMPLATES = [
    ("Tell me about yourself and why you're interested in software engineering.", "Motivation", "easy", 120),
    ("Describe a challenging programming project you've worked on. What made it hard and how did you finish it?", "Projects", "medium", 180),
    ("Tell me about a time you worked in a team and disagreed with a teammate. How was it resolved?", "Teamwork", "medium", 150),
    ("Describe a time you had to learn a new technology quickly. How did you approach it?", "Learning", "medium", 150),
    ("Tell me about a mistake you made in a project and what you learned from it.", "Growth", "medium", 150),
]

# technology name -> question
TECHNICAL_BY_TECH: Dict[str, str] = {
    "Python": "What is the difference between a list and a tuple in Python, and when would you use each?",
    "Java": "Explain the difference between an interface and an abstract class in Java.",
    "JavaScript": "Explain closures in JavaScript and give an example of where you'd use one.",
    "TypeScript": "What benefits does TypeScript's type system give over plain JavaScript? Give an example.",
    "C++": "What is the difference between a pointer and a reference in C++?",
    "C#": "Explain the difference between value types and reference types in C#.",
    "React": "How does React decide when to re-render a component, and how would you avoid unnecessary renders?",
    "Angular": "What is dependency injection in Angular and why is it useful?",
    "Vue.js": "Explain Vue's reactivity system and how computed properties differ from methods.",
    "Node.js": "How does the Node.js event loop handle asynchronous I/O?",
    "Express": "How does middleware work in Express, and how would you add error handling?",
    "Django": "Explain how Django's ORM builds queries and how you would avoid the N+1 query problem.",
    "Flask": "How would you structure a Flask application that has grown beyond a single file?",
    "Spring Boot": "What does Spring Boot auto-configuration do, and how would you override it?",
    "SQL": "Explain the difference between INNER JOIN and LEFT JOIN with an example.",
    "MySQL": "What is an index in a relational database and when can it slow things down?",
    "PostgreSQL": "What are transactions and isolation levels in PostgreSQL?",
    "MongoDB": "When would you embed documents versus reference them in MongoDB?",
    "AWS": "Which AWS services would you use to deploy a simple web application, and why?",
    "Docker": "What is the difference between a Docker image and a container?",
    "Kubernetes": "What problem does Kubernetes solve, and what is a pod?",
    "Git": "Explain the difference between git merge and git rebase.",
    "REST API": "What makes an API RESTful? Describe the common HTTP methods and status codes.",
    "GraphQL": "How does GraphQL differ from REST, and what are its trade-offs?",
    "Machine Learning": "Explain overfitting and two techniques you would use to reduce it.",
    "Android": "Describe the Android activity lifecycle.",
    "iOS": "How does memory management work in iOS with ARC?",
}

GENERIC_TECHNICAL = [
    ("How do you approach debugging a piece of code that isn't working?", "Debugging", "medium", 150),
    ("Explain the difference between a stack and a queue, with a use case for each.", "Data Structures", "easy", 120),
    ("What is Big-O notation? Compare the time complexity of linear and binary search.", "Algorithms", "easy", 120),
    ("What happens when you type a URL into the browser and press Enter?", "Web Fundamentals", "medium", 180),
    ("What is the difference between a process and a thread?", "Operating Systems", "medium", 150),
    ("Why is version control important, and how do you use branches in a team?", "Developer Tools", "easy", 120),
]

CODING_TEMPLATES = [
    (
        "Write a function that returns the maximum element in an unsorted array of numbers.",
        "Arrays", "easy", 300,
        {
            "javascript": "function findMax(nums) {\n  // your code here\n}\n",
            "python": "def find_max(nums):\n    # your code here\n    pass\n",
        },
    ),
    (
        "Write a function that checks whether a string is a palindrome, ignoring case and non-alphanumeric characters.",
        "Strings", "easy", 300,
        {
            "javascript": "function isPalindrome(s) {\n  // your code here\n}\n",
            "python": "def is_palindrome(s):\n    # your code here\n    pass\n",
        },
    ),
    (
        "Given an array of integers and a target, return the indices of the two numbers that add up to the target.",
        "Hash Maps", "medium", 420,
        {
            "javascript": "function twoSum(nums, target) {\n  // your code here\n}\n",
            "python": "def two_sum(nums, target):\n    # your code here\n    pass\n",
        },
    ),
    (
        "Write a function that reverses a singly linked list.",
        "Linked Lists", "medium", 420,
        {
            "javascript": "function reverseList(head) {\n  // your code here\n}\n",
            "python": "def reverse_list(head):\n    # your code here\n    pass\n",
        },
    ),
    (
        "Write a function that counts how many times each word appears in a sentence.",
        "Hash Maps", "easy", 300,
        {
            "javascript": "function wordCount(sentence) {\n  // your code here\n}\n",
            "python": "def word_count(sentence):\n    # your code here\n    pass\n",
        },
    ),
]


def template_questions(technologies: List[str]) -> Dict[str, List[InterviewQuestion]]:
    """Deterministic question pool per type, technology questions first."""
    behavioral = [
        InterviewQuestion(question_id="", type="behavioral", question=q, category=c, difficulty=d, expected_duration=t)
        for q, c, d, t in BEHAVIORAL_TEMPLATES
    ]
    technical = [
        InterviewQuestion(question_id="", type="technical", question=TECHNICAL_BY_TECH[name],
                          category=name, difficulty="medium", expected_duration=150)
        for name in technologies if name in TECHNICAL_BY_TECH
    ]
    technical += [
        InterviewQuestion(question_id="", type="technical", question=q, category=c, difficulty=d, expected_duration=t)
        for q, c, d, t in GENERIC_TECHNICAL
    ]
    coding = [
        InterviewQuestion(question_id="", type="coding", question=q, category=c, difficulty=d,
                          expected_duration=t, starter_code=dict(code))
        for q, c, d, t, code in CODING_TEMPLATES
    ]
    return {"behavioral": behavioral, "technical": technical, "coding": coding}


def fit_composition(candidates: List[InterviewQuestion], technologies: List[str]) -> List[InterviewQuestion]:
    """Exactly 3 behavioral, 4 technical and 3 coding questions with ids q1..q10."""
    pool = template_questions(technologies)
    fitted: List[InterviewQuestion] = []
    for qtype, wanted in COMPOSITION:
        chosen: List[InterviewQuestion] = []
        seen = set()
        for q in [c for c in candidates if c.type == qtype] + pool[qtype]:
            key = q.question.strip().lower()
            if key in seen:
                continue
            seen.add(key)
            chosen.append(q)
            if len(chosen) == wanted:
                break
        fitted.extend(chosen)

    return [
        q.copy(update={"question_id": f"q{i + 1}", "starter_code": q.starter_code if q.type == "coding" else None})
        for i, q in enumerate(fitted)
    ]


@log_function_call
async def generate_questions(gateway: Optional[AIGateway], resume_text: str, job_description: str) -> List[InterviewQuestion]:
    technologies = keywords.find_technologies(f"{resume_text}\n{job_description}")
    candidates: List[InterviewQuestion] = []

    if gateway is not None:
        prompt = prompts.build("interview_questions", resume_text, job_description,
                               {"technologies": technologies})
        result = await gateway.ainvoke(prompt, temperature=0.3, max_tokens=2500)
        if result.ok:
            normalized = normalize(result.text, "question_list")
            if normalized.is_non_tech:
                logger.info("Model flagged the job as non-technical; using template questions")
            candidates = normalized.payload if normalized.from_model else []
        else:
            logger.warning(f"Question generation failed ({result.error.kind}); using template questions")

    questions = fit_composition(candidates, technologies)
    logger.info(f"Prepared {len(questions)} interview questions ({len(candidates)} from the model)")
    return questions
