# tests/test_grading.py
import pytest

from app.core.errors import ValidationError
from app.services import grading
from app.services.grading import GradeBand, ScoringConfig

CONFIG = ScoringConfig(ca=10, test=20, exam=70, total=100, pass_mark=40)


class TestScores:
    def test_clamp_scores_caps_each_component(self):
        scores = grading.clamp_scores(15, 25, 80, CONFIG)
        assert scores == {"ca": 10, "test": 20, "exam": 70, "total": 100}

    def test_negative_and_missing_scores_count_as_zero(self):
        scores = grading.clamp_scores(-5, None, "abc", CONFIG)
        assert scores["total"] == 0

    def test_percentage_rounds_half_up(self):
        config = ScoringConfig(ca=10, test=20, exam=70, total=200)
        assert grading.calculate_percentage(109, config) == 55
        assert grading.calculate_percentage(108.9, config) == 54

    def test_has_passed_uses_pass_mark(self):
        assert grading.has_passed(40, CONFIG)
        assert not grading.has_passed(39, CONFIG)


class TestGrades:
    @pytest.mark.parametrize("total,grade", [
        (100, "A+"), (90, "A+"), (89, "A"), (75, "B+"), (60, "B"),
        (55, "C+"), (40, "C"), (35, "D"), (34, "F"), (0, "F"),
    ])
    def test_default_scale(self, total, grade):
        assert grading.calculate_grade(total, CONFIG) == grade

    def test_custom_scale(self):
        scale = [GradeBand(grade="P", min=50), GradeBand(grade="F", min=0)]
        assert grading.calculate_grade(50, CONFIG, scale) == "P"
        assert grading.calculate_grade(49, CONFIG, scale) == "F"

    def test_remark_bands(self):
        assert grading.generate_remark(95, CONFIG) == "Excellent performance! Keep it up."
        assert grading.generate_remark(10, CONFIG) == grading.LOWEST_REMARK

    def test_grade_remark_lookup(self):
        assert grading.grade_remark("A") == "Excellent performance"
        assert grading.grade_remark("Z") == ""


class TestRanking:
    def test_ties_share_position_and_skip(self):
        ranked = grading.rank([("a", 150), ("b", 180), ("c", 150), ("d", 120)])
        assert [(key, position) for key, _, position in ranked] == [
            ("b", 1), ("a", 2), ("c", 2), ("d", 4),
        ]

    def test_empty(self):
        assert grading.rank([]) == []

    def test_percentile(self):
        assert grading.percentile(1, 4) == 100
        assert grading.percentile(4, 4) == 25
        assert grading.percentile(2, 3) == 67
        assert grading.percentile(1, 0) == 0


class TestPolicyNormalization:
    def test_partial_config_merges_over_base(self):
        config = grading.normalize_scoring_config({"exam": 60}, base=CONFIG)
        assert config.exam == 60
        assert config.ca == 10
        assert config.total == 90

    def test_non_positive_total_falls_back_to_sum(self):
        config = grading.normalize_scoring_config({"ca": 20, "test": 20, "exam": 60, "total": 0}, base=CONFIG)
        assert config.total == 100

    def test_zero_everything_rejected(self):
        with pytest.raises(ValidationError):
            grading.normalize_scoring_config({"ca": 0, "test": 0, "exam": 0}, base=CONFIG)

    def test_pass_mark_is_clamped(self):
        assert grading.normalize_scoring_config({"pass_mark": 150}, base=CONFIG).pass_mark == 100

    def test_scale_from_mapping_adds_f(self):
        scale = grading.normalize_grading_scale({"A": 70, "B": 50})
        assert [band.grade for band in scale] == ["A", "B", "F"]
        assert scale[-1].min == 0
        assert scale[0].remark == "Excellent performance"

    def test_scale_forces_f_to_zero(self):
        scale = grading.normalize_grading_scale([{"grade": "A", "min": 60}, {"grade": "F", "min": 30}])
        assert scale[-1].grade == "F" and scale[-1].min == 0

    def test_scale_band_without_numeric_min_starts_at_zero(self):
        scale = grading.normalize_grading_scale([
            {"grade": "A", "min": 75},
            {"grade": "B", "min": "high"},
            {"grade": "C"},
        ])
        assert [band.grade for band in scale] == ["A", "B", "C", "F"]
        assert [band.min for band in scale] == [75, 0, 0, 0]

    def test_empty_scale_rejected(self):
        with pytest.raises(ValidationError):
            grading.normalize_grading_scale([])

    def test_grade_bands_have_inclusive_max(self):
        bands = grading.grade_bands([GradeBand(grade="A", min=70), GradeBand(grade="F", min=0)])
        assert bands[0]["max"] == 100
        assert bands[1]["max"] == 69
