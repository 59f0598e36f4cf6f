"""Quality scoring system for translation files."""

from typing import Dict, Iterable, List, Sequence

from ..models.issues import ERROR, WARNING, HealthCheckResult, QualityScore, ValidationIssue


class QualityScorer:
    """
    Scores translation files from their health check issues.

    Scoring:
    - Start at 100
    - Each error: -10
    - Each warning: -2
    - Info issues don't count
    - Clamped to 0-100

    Grades:
    - A (90+), B (80+), C (70+), D (60+), F otherwise
    """

    ERROR_PENALTY = 10
    WARNING_PENALTY = 2

    def score(self, total_keys: int, issues: Iterable[ValidationIssue]) -> QualityScore:
        """
        Score one file.

        Args:
            total_keys: Number of flattened keys in the file
            issues: Issues found for the file

        Returns:
            QualityScore for the file
        """
        issues = list(issues)
        errors = sum(1 for issue in issues if issue.severity == ERROR)
        warnings = sum(1 for issue in issues if issue.severity == WARNING)

        value = 100 - errors * self.ERROR_PENALTY - warnings * self.WARNING_PENALTY
        value = max(0, min(100, value))

        return QualityScore(
            score=value,
            grade=self.grade(value),
            total_keys=total_keys,
            error_count=errors,
            warning_count=warnings,
        )

    @staticmethod
    def grade(score: float) -> str:
        if score >= 90:
            return "A"
        if score >= 80:
            return "B"
        if score >= 70:
            return "C"
        if score >= 60:
            return "D"
        return "F"

    @staticmethod
    def status(score: float) -> str:
        """Human-facing status label for an overall score."""
        if score >= 90:
            return "excellent"
        if score >= 80:
            return "good"
        if score >= 60:
            return "needs_attention"
        return "poor"

    @staticmethod
    def overall(scores: Sequence[QualityScore]) -> int:
        """Unweighted mean of per-file scores, rounded half up."""
        if not scores:
            return 0
        mean = sum(s.score for s in scores) / len(scores)
        return int(mean + 0.5)

    def recommendations(self, result: HealthCheckResult) -> List[str]:
        """Build the ordered recommendation list for a health check."""
        summary = result.summary
        recommendations = []

        if summary.errors > 0:
            recommendations.append(
                "Critical: fix errors immediately to prevent runtime issues"
            )
        if summary.warnings > 10:
            recommendations.append(
                "Consider addressing warnings to improve translation quality"
            )

        if summary.total_issues == 0:
            recommendations.append("Excellent! Your translations are in great health")
        elif summary.total_issues < 10:
            recommendations.append("Good translation health, minor issues to address")
        elif summary.total_issues < 50:
            recommendations.append("Moderate number of issues, consider a cleanup session")
        else:
            recommendations.append("Many issues found, recommend systematic cleanup")

        issue_types = {issue.type for issue in result.issues}
        for issue_type, text in TARGETED_RECOMMENDATIONS:
            if issue_type in issue_types:
                recommendations.append(text)

        return recommendations


# Checked in this order after the general recommendations
TARGETED_RECOMMENDATIONS = [
    (
        "interpolation_unbalanced",
        "Fix unbalanced interpolation brackets to prevent runtime errors",
    ),
    (
        "consistency_missing_key",
        "Run translation sync to add missing keys across languages",
    ),
    (
        "quality_untranslated",
        "Review and translate content marked as potentially untranslated",
    ),
    (
        "cross_language_missing_files",
        "Create the missing translation files or run sync to generate them",
    ),
]

ISSUE_DESCRIPTIONS: Dict[str, str] = {
    "file_missing": "Translation files are missing for some languages",
    "interpolation_unbalanced": "Interpolation brackets are not properly balanced",
    "interpolation_empty": "Empty interpolation placeholders found",
    "interpolation_malformed": "Malformed interpolation syntax detected",
    "consistency_missing_key": "Keys missing in some languages",
    "consistency_type_mismatch": "Value types differ between languages",
    "consistency_interpolation_mismatch": "Interpolation variables differ between languages",
    "consistency_orphaned_key": "Keys exist in target but not source language",
    "quality_untranslated": "Content appears to be untranslated",
    "quality_suspicious_content": "Suspicious placeholder or test content",
    "quality_html_content": "HTML content detected in translations",
    "quality_extremely_long": "Extremely long translation values",
    "quality_extremely_short": "Suspiciously short translation values",
    "structure_deeply_nested": "Deeply nested translation structure",
    "structure_inconsistent_naming": "Inconsistent naming conventions",
    "performance_large_namespace": "Large namespace files affecting performance",
    "performance_long_translation": "Very long individual translations",
    "pluralization_missing_forms": "Missing plural forms for language",
    "cross_language_missing_files": "Missing translation files across languages",
    "json_syntax_error": "JSON syntax errors in translation files",
    "file_unreadable": "Translation files that could not be read",
    "format_not_normalized": "Files not in sorted, 2-space indented form",
}


def describe_issue_type(issue_type: str) -> str:
    return ISSUE_DESCRIPTIONS.get(issue_type, "Unknown issue type")
