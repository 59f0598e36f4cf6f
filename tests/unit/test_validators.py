"""
Unit tests for interpolation, plural, content and scoring helpers
"""

import pytest

from i18next_mcp.models.issues import ERROR, INFO, WARNING, HealthCheckResult, QualityScore, ValidationIssue
from i18next_mcp.validation.content_checks import ContentHeuristics, naming_styles
from i18next_mcp.validation.interpolation_validator import InterpolationValidator
from i18next_mcp.validation.plural_rules import expected_plural_forms, group_plural_keys
from i18next_mcp.validation.quality_scorer import QualityScorer, describe_issue_type


def _issue(severity: str, issue_type: str = "test_issue") -> ValidationIssue:
    return ValidationIssue(type=issue_type, severity=severity, message="test")


class TestInterpolationValidator:
    """Test cases for InterpolationValidator"""

    @pytest.fixture
    def validator(self) -> InterpolationValidator:
        return InterpolationValidator()

    def test_valid_value(self, validator: InterpolationValidator):
        assert validator.validate("Hello {{name}}, you have {{count}} messages") == []

    def test_unbalanced(self, validator: InterpolationValidator):
        problems = validator.validate("Hi {{name")

        assert [p.error_type for p in problems] == ["unbalanced"]
        assert problems[0].details == {"open_count": 1, "close_count": 0}

    def test_empty_marker(self, validator: InterpolationValidator):
        problems = validator.validate("Hi {{  }}")

        assert [p.error_type for p in problems] == ["empty"]
        assert problems[0].severity == "warning"

    def test_single_brace(self, validator: InterpolationValidator):
        problems = validator.validate("Hi {name}!")

        assert [p.error_type for p in problems] == ["malformed"]

    def test_extract_variables_with_format(self, validator: InterpolationValidator):
        variables = validator.extract_variables("{{count, number}} of {{total}} ({{count}})")

        assert variables == ["count", "total"]

    def test_compare(self, validator: InterpolationValidator):
        missing, extra = validator.compare("Hello {{name}}", "Hola {{nombre}}")

        assert missing == ["name"]
        assert extra == ["nombre"]

    def test_custom_markers(self):
        validator = InterpolationValidator("__", "__")

        assert validator.extract_variables("Hi __name__") == ["name"]


class TestPluralRules:
    """Test cases for plural form tables"""

    def test_default_forms(self):
        assert expected_plural_forms("en") == ["one", "other"]

    def test_region_falls_back_to_base_language(self):
        assert expected_plural_forms("ru-RU") == ["one", "few", "many", "other"]

    def test_arabic(self):
        assert expected_plural_forms("ar") == ["zero", "one", "two", "few", "many", "other"]

    def test_group_plural_keys(self):
        groups = group_plural_keys(["items_one", "items_other", "title", "cart.count_few"])

        assert groups == {"items": ["one", "other"], "cart.count": ["few"]}


class TestContentHeuristics:
    """Test cases for ContentHeuristics"""

    def test_untranslated_ratio(self):
        heuristics = ContentHeuristics()

        assert heuristics.is_untranslated("Click on the button to save the file")
        assert not heuristics.is_untranslated("Haga clic para guardar")
        assert not heuristics.is_untranslated("")

    def test_custom_stoplist(self):
        heuristics = ContentHeuristics(stoplist=["der", "die", "das"], untranslated_ratio=0.2)

        assert heuristics.is_untranslated("der Hund und die Katze")

    def test_suspicious_and_html(self):
        heuristics = ContentHeuristics()

        assert heuristics.has_suspicious_pattern("TODO translate")
        assert heuristics.has_suspicious_pattern("Lorem ipsum dolor")
        assert heuristics.contains_html("<b>Bold</b>")
        assert not heuristics.contains_html("2 < 3")

    def test_length_problems(self):
        heuristics = ContentHeuristics()

        assert heuristics.length_problem("x", "label") == ("short", "info")
        assert heuristics.length_problem("x", "label_short") is None
        assert heuristics.length_problem("x" * 2001, "label") == ("long", "warning")

    def test_naming_styles(self):
        camel, snake = naming_styles(["userName", "user_id", "title", "URL"])

        assert camel == ["userName"]
        assert snake == ["user_id"]


class TestQualityScorer:
    """Test cases for QualityScorer"""

    @pytest.fixture
    def scorer(self) -> QualityScorer:
        return QualityScorer()

    def test_errors_and_warnings(self, scorer: QualityScorer):
        issues = [_issue(ERROR)] * 2 + [_issue(WARNING)] * 3

        score = scorer.score(10, issues)

        assert score.score == 74
        assert score.grade == "C"
        assert score.error_count == 2
        assert score.warning_count == 3
        assert score.passed

    def test_info_is_free(self, scorer: QualityScorer):
        assert scorer.score(1, [_issue(INFO)] * 20).score == 100

    def test_clamped_at_zero(self, scorer: QualityScorer):
        score = scorer.score(5, [_issue(ERROR)] * 15)

        assert score.score == 0
        assert score.grade == "F"
        assert not score.passed

    @pytest.mark.parametrize("value,grade", [(90, "A"), (89, "B"), (80, "B"), (70, "C"), (60, "D"), (59, "F")])
    def test_grade_boundaries(self, value: int, grade: str):
        assert QualityScorer.grade(value) == grade

    def test_overall_rounds_half_up(self):
        scores = [QualityScore(75, "C", 1, 0, 0), QualityScore(76, "C", 1, 0, 0)]

        assert QualityScorer.overall(scores) == 76
        assert QualityScorer.overall([]) == 0

    def test_recommendations_order(self, scorer: QualityScorer):
        result = HealthCheckResult()
        result.issues = [_issue(ERROR, "interpolation_unbalanced"), _issue(WARNING, "quality_untranslated")]
        result.summary.errors = 1
        result.summary.warnings = 1
        result.summary.total_issues = 2

        recommendations = scorer.recommendations(result)

        assert recommendations == [
            "Critical: fix errors immediately to prevent runtime issues",
            "Good translation health, minor issues to address",
            "Fix unbalanced interpolation brackets to prevent runtime errors",
            "Review and translate content marked as potentially untranslated",
        ]

    def test_describe_issue_type(self):
        assert describe_issue_type("file_missing") == "Translation files are missing for some languages"
        assert describe_issue_type("something_else") == "Unknown issue type"
