import pytest

from careerprep.services.scoring import (
    category_rollups,
    fallback_similarity,
    is_non_tech_role,
    overall_average,
    to_match_percentage,
)
from tests.conftest import ACCOUNTANT_JOB, REACT_JOB, RESUME_TEXT


class TestMatchPercentage:
    """Bucketed similarity to percentage mapping"""

    @pytest.mark.parametrize("similarity,expected", [
        (0.0, 0),
        (0.1, 3),
        (0.2, 5),
        (0.3, 10),
        (0.4, 15),
        (0.6, 32),
        (0.7, 46),
        (0.8, 60),
        (0.85, 70),
        (0.9, 80),
        (1.0, 100),
    ])
    def test_breakpoints(self, similarity, expected):
        assert to_match_percentage(similarity) == expected

    def test_monotonic_and_bounded(self):
        values = [to_match_percentage(i / 200) for i in range(201)]
        assert values == sorted(values)
        assert all(0 <= v <= 100 for v in values)

    @pytest.mark.parametrize("similarity", [0.0, 0.5, 0.95, 1.0])
    def test_non_tech_is_always_zero(self, similarity):
        assert to_match_percentage(similarity, True) == 0

    def test_out_of_range_input_is_clamped(self):
        assert to_match_percentage(1.7) == 100
        assert to_match_percentage(-0.3) == 0
        assert to_match_percentage(None) == 0


class TestRollups:
    """Category averages of interview answers"""

    def test_simple_means(self):
        rollups = category_rollups({"behavioral": [60, 80], "technical": [50], "coding": [90, 70, 80]})
        assert rollups == {"behavioral": 70, "technical": 50, "coding": 80}

    def test_empty_category_uses_overall_average(self):
        rollups = category_rollups({"behavioral": [40, 60], "technical": [80], "coding": []})
        assert rollups["coding"] == 60

    def test_no_scores_at_all(self):
        assert category_rollups({}) == {"behavioral": 0, "technical": 0, "coding": 0}

    def test_overall_average(self):
        assert overall_average([70, 75]) == 73
        assert overall_average([]) == 0


class TestRoleScreening:
    """Keyword prescreen and the keyword-overlap similarity"""

    def test_accountant_is_non_tech(self):
        assert is_non_tech_role(ACCOUNTANT_JOB)

    def test_software_job_is_tech(self):
        assert not is_non_tech_role(REACT_JOB)

    def test_indicator_with_software_terms_stays_tech(self):
        assert not is_non_tech_role("Build Python tooling for our accounting team as a software developer.")

    def test_fallback_similarity_partial_overlap(self):
        # React matched, TypeScript missing
        assert fallback_similarity(RESUME_TEXT, REACT_JOB) == 0.5

    def test_fallback_similarity_non_tech(self):
        assert fallback_similarity(RESUME_TEXT, ACCOUNTANT_JOB) == 0.0

    def test_fallback_similarity_without_known_requirements(self):
        assert fallback_similarity(RESUME_TEXT, "Curious intern who enjoys solving problems with software.") == 0.1

    def test_fallback_similarity_is_capped(self):
        assert fallback_similarity(RESUME_TEXT, "Intern using React and Docker every day.") == 0.8
