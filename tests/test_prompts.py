import pytest

from careerprep.helpers import prompts
from careerprep.utils.exceptions import ValidationError
from tests.conftest import REACT_JOB, RESUME_TEXT


class TestBuild:
    @pytest.mark.parametrize("kind", ["match_analysis", "interview_questions"])
    def test_json_only_and_sentinel(self, kind):
        prompt = prompts.build(kind, RESUME_TEXT, REACT_JOB, {"technologies": ["React", "Node.js"]})
        assert prompts.NON_TECH_SENTINEL in prompt
        assert "JSON" in prompt
        assert "React, Node.js" in prompt

    def test_truncates_long_fields(self):
        long_resume = "x" * (prompts.FIELD_LIMIT + 500)
        prompt = prompts.build("match_analysis", long_resume, REACT_JOB)
        assert "x" * (prompts.FIELD_LIMIT + 1) not in prompt
        assert "x" * prompts.FIELD_LIMIT + "..." in prompt

    def test_answer_feedback_embeds_answer(self):
        prompt = prompts.build("answer_feedback", "", None, {
            "question": "Explain closures",
            "question_type": "technical",
            "answer": "A closure captures variables from its enclosing scope.",
        })
        assert "Explain closures" in prompt
        assert "captures variables" in prompt

    def test_unknown_kind(self):
        with pytest.raises(ValidationError):
            prompts.build("poem", RESUME_TEXT)
