"""
Dictionary-based technology extraction.

No model call is made here: a resume or job description is scanned for a
fixed vocabulary of technology terms (case-insensitive, whole word) and every
hit is tagged with a category from a static table.
"""
import re
from functools import lru_cache
from typing import Dict, List, Pattern, Tuple

from careerprep.models.models import TechCategory, Technology

DEFAULT_CONFIDENCE = 5

# canonical name -> (category, spellings matched in text)
TECHNOLOGIES: Dict[str, Tuple[TechCategory, List[str]]] = {
    # Programming languages
    "Python": (TechCategory.PROGRAMMING_LANGUAGES, ["python"]),
    "Java": (TechCategory.PROGRAMMING_LANGUAGES, ["java"]),
    "JavaScript": (TechCategory.PROGRAMMING_LANGUAGES, ["javascript", "ecmascript", "es6"]),
    "TypeScript": (TechCategory.PROGRAMMING_LANGUAGES, ["typescript"]),
    "C++": (TechCategory.PROGRAMMING_LANGUAGES, ["c++", "cpp"]),
    "C#": (TechCategory.PROGRAMMING_LANGUAGES, ["c#", "csharp"]),
    "Go": (TechCategory.PROGRAMMING_LANGUAGES, ["golang"]),
    "Rust": (TechCategory.PROGRAMMING_LANGUAGES, ["rust"]),
    "Kotlin": (TechCategory.PROGRAMMING_LANGUAGES, ["kotlin"]),
    "Swift": (TechCategory.PROGRAMMING_LANGUAGES, ["swift"]),
    "Scala": (TechCategory.PROGRAMMING_LANGUAGES, ["scala"]),
    "Ruby": (TechCategory.PROGRAMMING_LANGUAGES, ["ruby"]),
    "PHP": (TechCategory.PROGRAMMING_LANGUAGES, ["php"]),
    "SQL": (TechCategory.PROGRAMMING_LANGUAGES, ["sql"]),
    "Bash": (TechCategory.PROGRAMMING_LANGUAGES, ["bash", "shell scripting"]),
    # Frontend
    "React": (TechCategory.FRONTEND, ["react", "react.js", "reactjs"]),
    "Angular": (TechCategory.FRONTEND, ["angular", "angularjs"]),
    "Vue.js": (TechCategory.FRONTEND, ["vue", "vue.js", "vuejs"]),
    "Next.js": (TechCategory.FRONTEND, ["next.js", "nextjs"]),
    "Svelte": (TechCategory.FRONTEND, ["svelte"]),
    "HTML": (TechCategory.FRONTEND, ["html", "html5"]),
    "CSS": (TechCategory.FRONTEND, ["css", "css3"]),
    "Tailwind CSS": (TechCategory.FRONTEND, ["tailwind", "tailwindcss"]),
    "Bootstrap": (TechCategory.FRONTEND, ["bootstrap"]),
    "Redux": (TechCategory.FRONTEND, ["redux"]),
    # Backend
    "Node.js": (TechCategory.BACKEND, ["node.js", "nodejs", "node js"]),
    "Express": (TechCategory.BACKEND, ["express", "express.js", "expressjs"]),
    "Django": (TechCategory.BACKEND, ["django"]),
    "Flask": (TechCategory.BACKEND, ["flask"]),
    "FastAPI": (TechCategory.BACKEND, ["fastapi"]),
    "Spring Boot": (TechCategory.BACKEND, ["spring boot", "springboot", "spring"]),
    "ASP.NET": (TechCategory.BACKEND, ["asp.net", ".net", "dotnet"]),
    "Ruby on Rails": (TechCategory.BACKEND, ["ruby on rails", "rails"]),
    "GraphQL": (TechCategory.BACKEND, ["graphql"]),
    "REST API": (TechCategory.BACKEND, ["rest api", "restful", "rest apis"]),
    "Microservices": (TechCategory.BACKEND, ["microservices", "microservice"]),
    # Databases
    "MySQL": (TechCategory.DATABASES, ["mysql"]),
    "PostgreSQL": (TechCategory.DATABASES, ["postgresql", "postgres"]),
    "MongoDB": (TechCategory.DATABASES, ["mongodb", "mongo"]),
    "Redis": (TechCategory.DATABASES, ["redis"]),
    "SQLite": (TechCategory.DATABASES, ["sqlite"]),
    "Firebase": (TechCategory.DATABASES, ["firebase", "firestore"]),
    "DynamoDB": (TechCategory.DATABASES, ["dynamodb"]),
    "Cassandra": (TechCategory.DATABASES, ["cassandra"]),
    "Elasticsearch": (TechCategory.DATABASES, ["elasticsearch"]),
    # Cloud & DevOps
    "AWS": (TechCategory.CLOUD_DEVOPS, ["aws", "amazon web services"]),
    "Azure": (TechCategory.CLOUD_DEVOPS, ["azure"]),
    "GCP": (TechCategory.CLOUD_DEVOPS, ["gcp", "google cloud"]),
    "Docker": (TechCategory.CLOUD_DEVOPS, ["docker"]),
    "Kubernetes": (TechCategory.CLOUD_DEVOPS, ["kubernetes", "k8s"]),
    "Jenkins": (TechCategory.CLOUD_DEVOPS, ["jenkins"]),
    "GitHub Actions": (TechCategory.CLOUD_DEVOPS, ["github actions"]),
    "Terraform": (TechCategory.CLOUD_DEVOPS, ["terraform"]),
    "Ansible": (TechCategory.CLOUD_DEVOPS, ["ansible"]),
    "CI/CD": (TechCategory.CLOUD_DEVOPS, ["ci/cd", "continuous integration"]),
    "Linux": (TechCategory.CLOUD_DEVOPS, ["linux", "unix"]),
    # Mobile
    "Android": (TechCategory.MOBILE, ["android"]),
    "iOS": (TechCategory.MOBILE, ["ios"]),
    "React Native": (TechCategory.MOBILE, ["react native"]),
    "Flutter": (TechCategory.MOBILE, ["flutter"]),
    "Xamarin": (TechCategory.MOBILE, ["xamarin"]),
    "SwiftUI": (TechCategory.MOBILE, ["swiftui", "swift ui"]),
    # Data science & ML
    "Machine Learning": (TechCategory.DATA_SCIENCE_ML, ["machine learning"]),
    "Deep Learning": (TechCategory.DATA_SCIENCE_ML, ["deep learning"]),
    "TensorFlow": (TechCategory.DATA_SCIENCE_ML, ["tensorflow"]),
    "PyTorch": (TechCategory.DATA_SCIENCE_ML, ["pytorch"]),
    "scikit-learn": (TechCategory.DATA_SCIENCE_ML, ["scikit-learn", "sklearn"]),
    "Pandas": (TechCategory.DATA_SCIENCE_ML, ["pandas"]),
    "NumPy": (TechCategory.DATA_SCIENCE_ML, ["numpy"]),
    "NLP": (TechCategory.DATA_SCIENCE_ML, ["nlp", "natural language processing"]),
    # Testing
    "Jest": (TechCategory.TESTING, ["jest"]),
    "Mocha": (TechCategory.TESTING, ["mocha"]),
    "pytest": (TechCategory.TESTING, ["pytest"]),
    "JUnit": (TechCategory.TESTING, ["junit"]),
    "Selenium": (TechCategory.TESTING, ["selenium"]),
    "Cypress": (TechCategory.TESTING, ["cypress"]),
    "Unit Testing": (TechCategory.TESTING, ["unit testing", "unit tests"]),
    # Developer tools
    "Git": (TechCategory.DEV_TOOLS, ["git"]),
    "GitHub": (TechCategory.DEV_TOOLS, ["github"]),
    "GitLab": (TechCategory.DEV_TOOLS, ["gitlab"]),
    "Jira": (TechCategory.DEV_TOOLS, ["jira"]),
    "Postman": (TechCategory.DEV_TOOLS, ["postman"]),
    "Figma": (TechCategory.DEV_TOOLS, ["figma"]),
    "VS Code": (TechCategory.DEV_TOOLS, ["vs code", "vscode", "visual studio code"]),
    "Webpack": (TechCategory.DEV_TOOLS, ["webpack"]),
}

# Phrases that mark a job description as software/technical work
SOFTWARE_ROLE_KEYWORDS = [
    "software", "developer", "programmer", "programming", "coding", "engineer",
    "engineering intern", "web development", "mobile development", "full stack",
    "full-stack", "frontend", "front-end", "backend", "back-end", "devops",
    "data engineer", "machine learning", "api", "debugging",
]

# Phrases typical of clearly non-engineering roles
NON_TECH_INDICATORS = [
    "medical", "doctor", "physician", "nurse", "healthcare", "hospital", "clinic", "patient",
    "lawyer", "attorney", "legal", "court", "litigation", "paralegal",
    "teacher", "educator", "instructor", "professor", "classroom", "curriculum",
    "retail", "sales associate", "cashier", "store manager", "customer service representative",
    "chef", "cook", "kitchen", "restaurant", "food service", "culinary",
    "accountant", "accounting", "bookkeeper", "financial analyst", "audit", "tax preparation",
    "marketing coordinator", "social media manager", "content creator", "copywriter",
    "hr manager", "human resources", "recruiter", "talent acquisition",
    "administrative assistant", "secretary", "office manager", "receptionist",
    "warehouse", "logistics", "driver", "delivery", "shipping",
]


def _term_pattern(term: str) -> str:
    # \b fails next to symbols such as "+", "#" and "."
    return r"(?<![A-Za-z0-9_])" + re.escape(term) + r"(?![A-Za-z0-9_+#])"


@lru_cache(maxsize=None)
def _compiled(term: str) -> Pattern:
    return re.compile(_term_pattern(term), re.IGNORECASE)


def contains_term(text: str, term: str) -> bool:
    return bool(text) and _compiled(term).search(text) is not None


def _category_lookup() -> Dict[str, TechCategory]:
    lookup = {}
    for name, (category, spellings) in TECHNOLOGIES.items():
        lookup[name.lower()] = category
        for spelling in spellings:
            lookup.setdefault(spelling.lower(), category)
    return lookup


_CATEGORY_BY_NAME = _category_lookup()


def categorize(name: str) -> TechCategory:
    """Category for a technology name; unknown names are General."""
    return _CATEGORY_BY_NAME.get((name or "").strip().lower(), TechCategory.GENERAL)


def find_technologies(text: str) -> List[str]:
    """Canonical names of every dictionary technology mentioned in text."""
    if not text:
        return []
    found = []
    for name, (_, spellings) in TECHNOLOGIES.items():
        if any(contains_term(text, spelling) for spelling in spellings):
            found.append(name)
    return found


def extract(text: str) -> List[Technology]:
    """Build a technology profile from free text."""
    return [
        Technology(name=name, category=TECHNOLOGIES[name][0], confidence_level=DEFAULT_CONFIDENCE)
        for name in find_technologies(text)
    ]


def overlap(resume_text: str, job_text: str) -> Dict[str, List[str]]:
    """Technologies required by the job, split into matched and missing."""
    required = find_technologies(job_text)
    offered = set(find_technologies(resume_text))
    matched = [name for name in required if name in offered]
    return {
        "required": required,
        "matched": matched,
        "missing": [name for name in required if name not in offered],
    }


def has_any(text: str, phrases: List[str]) -> bool:
    return any(contains_term(text, phrase) for phrase in phrases)
