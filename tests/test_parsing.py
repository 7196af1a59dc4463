import pytest

from careerprep.helpers.parsing import MATCH_FIELDS, find_json_block, normalize, parse_json
from careerprep.models.models import FeedbackResult, InterviewQuestion, OverallFeedback

SCHEMAS = ["match_analysis", "question_list", "feedback", "overall_feedback", "similarity"]


def assert_conforms(schema, payload):
    if schema == "match_analysis":
        assert set(payload) == set(MATCH_FIELDS)
        assert all(isinstance(v, list) for v in payload.values())
    elif schema == "question_list":
        assert isinstance(payload, list)
        assert all(isinstance(q, InterviewQuestion) for q in payload)
    elif schema == "feedback":
        assert isinstance(payload, FeedbackResult)
    elif schema == "overall_feedback":
        assert isinstance(payload, OverallFeedback)
    else:
        assert 0.0 <= payload <= 1.0


class TestNormalizeTotality:
    """normalize never raises and always returns the schema's shape"""

    @pytest.mark.parametrize("schema", SCHEMAS)
    @pytest.mark.parametrize("raw", [
        None,
        "",
        "   ",
        "{not json",
        '{"strengths": [',
        "Sure! Here is the analysis you asked for.",
        "NON_TECH_ROLE",
        "[1, 2, {\"a\": ]",
        "```json\n{}\n```",
        '{"score": Infinity, "expectedDuration": -Infinity, "overallScore": NaN}',
        '{"score": 1e400, "expectedDuration": 1e400, "overallScore": 1e400}',
        '[{"type": "coding", "question": "Reverse a list in place.", "expectedDuration": Infinity}]',
        "[" * 5000 + "]" * 5000,
        '{"a": ' * 5000 + "1" + "}" * 5000,
    ])
    def test_any_input(self, schema, raw):
        result = normalize(raw, schema)
        assert result.schema_tag == schema
        assert_conforms(schema, result.payload)

    @pytest.mark.parametrize("schema", SCHEMAS)
    def test_sentinel_short_circuits(self, schema):
        result = normalize('NON_TECH_ROLE {"score": 90}', schema)
        assert result.is_non_tech
        assert result.source == "sentinel"
        assert not result.from_model


class TestJsonExtraction:
    def test_prose_wrapped_json(self):
        raw = 'Here you go:\n```json\n{"strengths": ["Solid React work"], "contentWeaknesses": ["No tests"]}\n```\nGood luck!'
        result = normalize(raw, "match_analysis")
        assert result.source == "json"
        assert result.payload["strengths"] == ["Solid React work"]
        assert result.payload["content_weaknesses"] == ["No tests"]
        assert result.payload["structure_recommendations"] == []

    def test_brackets_inside_strings(self):
        text = 'prefix {"a": "curly } inside", "b": [1, 2]} suffix'
        assert find_json_block(text) == '{"a": "curly } inside", "b": [1, 2]}'
        assert parse_json(text) == {"a": "curly } inside", "b": [1, 2]}

    def test_feedback_legacy_nested_shape(self):
        raw = '{"confidence": {"communicationClarity": 7}, "feedback": {"score": 72, "strengths": ["Clear"]}}'
        payload = normalize(raw, "feedback").payload
        assert payload.score == 72
        assert payload.communication_clarity == 7
        assert payload.strengths == ["Clear"]
        assert payload.source == "ai"

    def test_questions_from_json_array(self):
        raw = '[{"type": "coding", "question": "Write a function that reverses a string.", "starterCode": "function r(s) {}"}]'
        payload = normalize(raw, "question_list").payload
        assert payload[0].type == "coding"
        assert payload[0].starter_code == {"javascript": "function r(s) {}"}

    def test_non_finite_numbers_use_field_defaults(self):
        raw = '[{"type": "technical", "question": "Explain the virtual DOM.", "expectedDuration": Infinity}]'
        payload = normalize(raw, "question_list").payload
        assert payload[0].expected_duration == 120

        assert normalize('{"score": Infinity, "strengths": ["Clear"]}', "feedback").source != "json"
        assert normalize('{"score": 1e400}', "similarity").source != "json"

    def test_deeply_nested_json_is_not_parsed(self):
        assert parse_json("[" * 5000 + "]" * 5000) is None

    @pytest.mark.parametrize("raw,expected", [("0.72", 0.72), ("72", 0.72), ('{"score": 0.4}', 0.4), ("150", 1.0)])
    def test_similarity_scales(self, raw, expected):
        assert normalize(raw, "similarity").payload == pytest.approx(expected)


class TestTextFallback:
    def test_bullets_under_headings(self):
        raw = (
            "Strengths:\n- Strong JavaScript fundamentals\n- Built full stack projects\n"
            "Structure weaknesses:\n* No GitHub link\n"
            "Recommendations:\n1. Add unit tests to projects\n"
        )
        result = normalize(raw, "match_analysis")
        assert result.source == "text"
        assert result.payload["strengths"] == ["Strong JavaScript fundamentals", "Built full stack projects"]
        assert result.payload["structure_weaknesses"] == ["No GitHub link"]
        assert result.payload["content_recommendations"] == ["Add unit tests to projects"]

    def test_numbered_questions(self):
        raw = "1. Tell me about yourself?\n2. How does the virtual DOM work in React?\n3. Write a function to sum an array?"
        payload = normalize(raw, "question_list").payload
        assert [q.type for q in payload] == ["behavioral", "technical", "coding"]

    def test_feedback_score_line(self):
        payload = normalize("Score: 64/100\nStrengths:\n- Good structure", "feedback").payload
        assert payload.score == 64
        assert payload.strengths == ["Good structure"]

    def test_unusable_feedback_gets_default(self):
        result = normalize("I cannot assess this answer.", "feedback")
        assert result.source == "default"
        assert result.payload.score == 50
        assert result.payload.source == "rule_based"
