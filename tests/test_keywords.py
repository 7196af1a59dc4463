from careerprep.helpers import keywords
from careerprep.models.models import TechCategory
from tests.conftest import REACT_JOB, RESUME_TEXT


class TestExtract:
    """Dictionary-based technology extraction"""

    def test_react_and_node(self):
        profile = keywords.extract(RESUME_TEXT)
        by_name = {t.name: t for t in profile}
        assert by_name["React"].category == "Frontend Technologies"
        assert by_name["Node.js"].category == "Backend Technologies"
        assert all(t.confidence_level == 5 for t in profile)

    def test_empty_input(self):
        assert keywords.extract("") == []
        assert keywords.extract(None) == []

    def test_no_duplicates_and_deterministic(self):
        text = "React, react.js and ReactJS with NodeJS and node.js"
        first = keywords.extract(text)
        assert [t.name for t in first] == ["React", "Node.js"]
        assert first == keywords.extract(text)

    def test_whole_word_matching(self):
        names = keywords.find_technologies("Reactive programming in Javanese, no gitter")
        assert "React" not in names
        assert "Java" not in names
        assert "Git" not in names

    def test_symbol_terms(self):
        names = keywords.find_technologies("Experience with C++, C# and CI/CD pipelines")
        assert {"C++", "C#", "CI/CD"} <= set(names)
        assert "C" not in names


class TestHelpers:
    def test_categorize_unknown_is_general(self):
        assert keywords.categorize("Kafka Streams") == TechCategory.GENERAL
        assert keywords.categorize("postgres") == TechCategory.DATABASES

    def test_overlap(self):
        result = keywords.overlap(RESUME_TEXT, REACT_JOB)
        assert result["required"] == ["TypeScript", "React"]
        assert result["matched"] == ["React"]
        assert result["missing"] == ["TypeScript"]
