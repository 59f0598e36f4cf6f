"""Cross-language consistency and quality analysis of translation files."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..config import Config
from ..core.keypath import flatten_with_depth
from ..core.store import TranslationStore, serialize_document
from ..errors import I18nError, NotFoundError, ParseError
from ..models.issues import (
    ERROR,
    INFO,
    WARNING,
    FileHealth,
    HealthCheckResult,
    IssueLocation,
    ValidationIssue,
)
from .content_checks import ContentHeuristics, naming_styles
from .interpolation_validator import InterpolationValidator
from .plural_rules import PLURAL_KEY_PATTERN, expected_plural_forms, group_plural_keys
from .quality_scorer import QualityScorer, describe_issue_type

logger = logging.getLogger(__name__)

FlatKeys = Dict[str, Tuple[Any, List[str]]]

MAX_DEPTH = 5
LARGE_NAMESPACE = 500
LONG_TRANSLATION = 1000


def json_type(value: Any) -> str:
    """Name of a value's JSON type."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


class HealthChecker:
    """
    Produces diagnostics for a set of translation files.

    Every requested ``language x namespace`` file is checked on its own
    (interpolation, pluralization, content quality, structure, size) and
    against the same namespace in the default language. A file that can't
    be loaded is reported and treated as empty; it never aborts the run.
    """

    def __init__(
        self,
        config: Config,
        store: TranslationStore,
        heuristics: Optional[ContentHeuristics] = None,
    ):
        self.config = config
        self.store = store
        self.separator = config.key_separator
        self.interpolation = InterpolationValidator(
            config.interpolation_prefix, config.interpolation_suffix
        )
        self.heuristics = heuristics or ContentHeuristics()
        self.scorer = QualityScorer()

    def perform_health_check(
        self,
        languages: Optional[List[str]] = None,
        namespaces: Optional[List[str]] = None,
        detailed: bool = False,
    ) -> HealthCheckResult:
        """
        Run every check over the requested files.

        Args:
            languages: Languages to check (all configured if None)
            namespaces: Namespaces to check (all configured if None)
            detailed: Keep every issue in the per-file breakdown, not only errors

        Returns:
            HealthCheckResult with per-file scores, issues and recommendations
        """
        target_languages = languages or self.config.languages
        target_namespaces = namespaces or self.config.namespaces
        source_language = self.config.default_language
        result = HealthCheckResult()

        translations: Dict[Tuple[str, str], Dict[str, Any]] = {}
        for language in target_languages:
            for namespace in target_namespaces:
                try:
                    translations[(language, namespace)] = self.store.load(language, namespace).content
                except I18nError as e:
                    result.issues.append(self._file_missing_issue(language, namespace, e))
                    translations[(language, namespace)] = {}

        # Source files are needed for comparison even when not requested
        source_flats: Dict[str, FlatKeys] = {}
        for namespace in target_namespaces:
            if (source_language, namespace) in translations:
                content = translations[(source_language, namespace)]
            else:
                content = self._load_quietly(source_language, namespace)
            source_flats[namespace] = flatten_with_depth(content, self.separator)

        for language in target_languages:
            for namespace in target_namespaces:
                file_key = f"{language}/{namespace}"
                keys = flatten_with_depth(translations[(language, namespace)], self.separator)
                file_issues = self.check_file(
                    keys,
                    language,
                    namespace,
                    source_keys=source_flats[namespace] if language != source_language else None,
                )

                result.issues.extend(file_issues)
                result.files[file_key] = FileHealth(
                    key_count=len(keys),
                    issue_count=len(file_issues),
                    issues=file_issues if detailed else [i for i in file_issues if i.severity == ERROR],
                    quality_score=self.scorer.score(len(keys), file_issues),
                )

        result.issues.extend(
            self._check_cross_language(translations, target_languages, target_namespaces)
        )

        for issue in result.issues:
            result.summary.total_issues += 1
            if issue.severity == ERROR:
                result.summary.errors += 1
            elif issue.severity == WARNING:
                result.summary.warnings += 1
            elif issue.severity == INFO:
                result.summary.info += 1

        result.summary.score = self.scorer.overall(
            [health.quality_score for health in result.files.values()]
        )
        result.recommendations = self.scorer.recommendations(result)

        logger.info(
            "Health check: %d files, %d issues, score %d",
            len(result.files),
            result.summary.total_issues,
            result.summary.score,
        )
        return result

    def check_file(
        self,
        keys: FlatKeys,
        language: str,
        namespace: str,
        source_keys: Optional[FlatKeys] = None,
    ) -> List[ValidationIssue]:
        """
        Run the per-file checks.

        Args:
            keys: Flattened keys of the file (see ``flatten_with_depth``)
            language: File language
            namespace: File namespace
            source_keys: Flattened keys of the source-language file, or None
                when the file is itself in the source language
        """
        file_key = f"{language}/{namespace}"
        issues: List[ValidationIssue] = []

        for key, (value, _) in keys.items():
            if isinstance(value, str):
                issues.extend(self._check_interpolation(value, key, language, namespace, file_key))

        issues.extend(self._check_pluralization(keys, language, namespace, file_key))
        issues.extend(self._check_quality(keys, language, namespace, file_key))

        if source_keys is not None:
            issues.extend(
                self._check_consistency(source_keys, keys, language, namespace, file_key)
            )

        issues.extend(self._check_structure(keys, language, namespace, file_key))
        issues.extend(self._check_performance(keys, language, namespace, file_key))
        return issues

    def _load_quietly(self, language: str, namespace: str) -> Dict[str, Any]:
        try:
            return self.store.load(language, namespace).content
        except I18nError as e:
            logger.warning("Source file %s/%s unavailable: %s", language, namespace, e)
            return {}

    def _file_missing_issue(
        self, language: str, namespace: str, error: I18nError
    ) -> ValidationIssue:
        if isinstance(error, ParseError):
            message = f"Invalid JSON in translation file: {language}/{namespace}.json"
            suggestion = "Fix the JSON syntax of the translation file"
        elif isinstance(error, NotFoundError):
            message = f"Missing translation file: {language}/{namespace}.json"
            suggestion = "Create the missing translation file"
        else:
            message = f"Unreadable translation file: {language}/{namespace}.json"
            suggestion = "Check file permissions and retry"

        return ValidationIssue(
            type="file_missing",
            severity=ERROR,
            message=message,
            file=f"{language}/{namespace}",
            location=IssueLocation(language=language, namespace=namespace),
            suggestion=suggestion,
            details={"reason": error.code, "error": error.message},
        )

    def _check_interpolation(
        self, value: str, key: str, language: str, namespace: str, file_key: str
    ) -> List[ValidationIssue]:
        issues = []
        location = IssueLocation(language=language, namespace=namespace, key=key)

        for problem in self.interpolation.validate(value):
            if problem.error_type == "unbalanced":
                message = f'Unbalanced interpolation brackets in "{key}"'
                suggestion = (
                    f"Ensure all {self.interpolation.prefix}variable"
                    f"{self.interpolation.suffix} brackets are properly closed"
                )
            elif problem.error_type == "empty":
                message = f'Empty interpolation in "{key}"'
                suggestion = (
                    f"Remove empty {self.interpolation.prefix}{self.interpolation.suffix} "
                    "or add a variable name"
                )
            else:
                message = f'Potentially malformed interpolation in "{key}"'
                suggestion = (
                    f"Use {self.interpolation.prefix}variable{self.interpolation.suffix} "
                    "format for interpolation"
                )

            issues.append(
                ValidationIssue(
                    type=f"interpolation_{problem.error_type}",
                    severity=problem.severity,
                    message=message,
                    file=file_key,
                    location=location,
                    suggestion=suggestion,
                    details={"value": value, **problem.details},
                )
            )

        return issues

    def _check_pluralization(
        self, keys: FlatKeys, language: str, namespace: str, file_key: str
    ) -> List[ValidationIssue]:
        issues = []
        expected = expected_plural_forms(language)
        language_name = self.config.get_language_name(language)

        for base_key, forms in group_plural_keys(keys).items():
            missing = [form for form in expected if form not in forms]
            if not missing:
                continue
            issues.append(
                ValidationIssue(
                    type="pluralization_missing_forms",
                    severity=WARNING,
                    message=f'{language_name} pluralization incomplete for "{base_key}" in {namespace}',
                    file=file_key,
                    location=IssueLocation(language=language, namespace=namespace, key=base_key),
                    suggestion=f"{language_name} typically requires: {', '.join(expected)}",
                    details={"found": forms, "expected": expected, "missing": missing},
                )
            )

        return issues

    def _check_consistency(
        self,
        source_keys: FlatKeys,
        target_keys: FlatKeys,
        language: str,
        namespace: str,
        file_key: str,
    ) -> List[ValidationIssue]:
        issues = []
        source_language = self.config.default_language

        for key, (source_value, _) in source_keys.items():
            location = IssueLocation(language=language, namespace=namespace, key=key)

            if key not in target_keys:
                issues.append(
                    ValidationIssue(
                        type="consistency_missing_key",
                        severity=WARNING,
                        message=f'Key "{key}" exists in {source_language} but missing in {language}',
                        file=file_key,
                        location=location,
                        suggestion=f"Add missing key to {language}/{namespace}.json",
                        details={"source_value": source_value},
                    )
                )
                continue

            target_value = target_keys[key][0]
            source_type = json_type(source_value)
            target_type = json_type(target_value)
            if source_type != target_type:
                issues.append(
                    ValidationIssue(
                        type="consistency_type_mismatch",
                        severity=ERROR,
                        message=f'Type mismatch for "{key}" between {source_language} and {language}',
                        file=file_key,
                        location=location,
                        suggestion="Ensure the same type (string, object, etc.) in all languages",
                        details={"source_type": source_type, "target_type": target_type},
                    )
                )

            if isinstance(source_value, str) and isinstance(target_value, str):
                missing, extra = self.interpolation.compare(source_value, target_value)
                if missing or extra:
                    issues.append(
                        ValidationIssue(
                            type="consistency_interpolation_mismatch",
                            severity=ERROR,
                            message=(
                                f'Interpolation variables mismatch for "{key}" between '
                                f"{source_language} and {language}"
                            ),
                            file=file_key,
                            location=location,
                            suggestion="Ensure all interpolation variables match between languages",
                            details={
                                "source_vars": self.interpolation.extract_variables(source_value),
                                "target_vars": self.interpolation.extract_variables(target_value),
                                "missing": missing,
                                "extra": extra,
                                "source_value": source_value,
                                "target_value": target_value,
                            },
                        )
                    )

        for key, (target_value, _) in target_keys.items():
            if key in source_keys:
                continue
            issues.append(
                ValidationIssue(
                    type="consistency_orphaned_key",
                    severity=INFO,
                    message=f'Key "{key}" exists in {language} but not in {source_language}',
                    file=file_key,
                    location=IssueLocation(language=language, namespace=namespace, key=key),
                    suggestion=f"Consider removing orphaned key or adding it to {source_language}",
                    details={"target_value": target_value},
                )
            )

        return issues

    def _check_quality(
        self, keys: FlatKeys, language: str, namespace: str, file_key: str
    ) -> List[ValidationIssue]:
        issues = []
        check_untranslated = language != self.config.default_language
        language_name = self.config.get_language_name(language)

        for key, (value, _) in keys.items():
            if not isinstance(value, str):
                continue
            location = IssueLocation(language=language, namespace=namespace, key=key)

            if check_untranslated and self.heuristics.is_untranslated(value):
                issues.append(
                    ValidationIssue(
                        type="quality_untranslated",
                        severity=WARNING,
                        message=f'Potentially untranslated content in "{key}"',
                        file=file_key,
                        location=location,
                        suggestion=f"Translate to {language_name}",
                        details={"value": value},
                    )
                )

            if self.heuristics.has_suspicious_pattern(value):
                issues.append(
                    ValidationIssue(
                        type="quality_suspicious_content",
                        severity=INFO,
                        message=f'Suspicious content pattern in "{key}"',
                        file=file_key,
                        location=location,
                        suggestion="Review content for placeholder text or development artifacts",
                        details={"value": value},
                    )
                )

            if self.heuristics.contains_html(value):
                issues.append(
                    ValidationIssue(
                        type="quality_html_content",
                        severity=INFO,
                        message=f'HTML content detected in "{key}"',
                        file=file_key,
                        location=location,
                        suggestion="Ensure HTML is properly sanitized and consider using rich text components",
                        details={"value": value},
                    )
                )

            length_problem = self.heuristics.length_problem(value, key)
            if length_problem == ("long", WARNING):
                issues.append(
                    ValidationIssue(
                        type="quality_extremely_long",
                        severity=WARNING,
                        message=f'Extremely long translation in "{key}" ({len(value)} characters)',
                        file=file_key,
                        location=location,
                        suggestion="Consider breaking into smaller, manageable pieces",
                        details={"length": len(value)},
                    )
                )
            elif length_problem == ("short", INFO):
                issues.append(
                    ValidationIssue(
                        type="quality_extremely_short",
                        severity=INFO,
                        message=f'Very short translation in "{key}" ({len(value)} characters)',
                        file=file_key,
                        location=location,
                        suggestion="Verify this is intentionally brief",
                        details={"length": len(value)},
                    )
                )

        return issues

    def _check_structure(
        self, keys: FlatKeys, language: str, namespace: str, file_key: str
    ) -> List[ValidationIssue]:
        issues = []

        for key, (_, segments) in keys.items():
            if len(segments) > MAX_DEPTH:
                issues.append(
                    ValidationIssue(
                        type="structure_deeply_nested",
                        severity=INFO,
                        message=f'Deeply nested key "{key}" ({len(segments)} levels)',
                        file=file_key,
                        location=IssueLocation(language=language, namespace=namespace, key=key),
                        suggestion="Consider flattening deeply nested structures for better maintainability",
                        details={"depth": len(segments), "path": segments},
                    )
                )

        # Plural suffixes are i18next syntax, not a naming choice
        names = set()
        for _, segments in keys.values():
            for segment in segments:
                match = PLURAL_KEY_PATTERN.match(segment)
                names.add(match.group(1) if match else segment)
        camel, snake = naming_styles(sorted(names))
        if camel and snake:
            issues.append(
                ValidationIssue(
                    type="structure_inconsistent_naming",
                    severity=INFO,
                    message="Mixed naming conventions detected (camelCase and snake_case)",
                    file=file_key,
                    location=IssueLocation(language=language, namespace=namespace),
                    suggestion="Use consistent naming convention throughout the file",
                    details={
                        "camel_case_count": len(camel),
                        "snake_case_count": len(snake),
                        "camel_case_examples": camel[:5],
                        "snake_case_examples": snake[:5],
                    },
                )
            )

        return issues

    def _check_performance(
        self, keys: FlatKeys, language: str, namespace: str, file_key: str
    ) -> List[ValidationIssue]:
        issues = []

        if len(keys) > LARGE_NAMESPACE:
            issues.append(
                ValidationIssue(
                    type="performance_large_namespace",
                    severity=WARNING,
                    message=f"Large namespace with {len(keys)} keys",
                    file=file_key,
                    location=IssueLocation(language=language, namespace=namespace),
                    suggestion="Consider splitting large namespaces for better performance",
                    details={"key_count": len(keys)},
                )
            )

        for key, (value, _) in keys.items():
            if isinstance(value, str) and len(value) > LONG_TRANSLATION:
                issues.append(
                    ValidationIssue(
                        type="performance_long_translation",
                        severity=INFO,
                        message=f'Very long translation in "{key}" ({len(value)} characters)',
                        file=file_key,
                        location=IssueLocation(language=language, namespace=namespace, key=key),
                        suggestion="Consider breaking long translations into smaller parts",
                        details={"length": len(value)},
                    )
                )

        return issues

    def _check_cross_language(
        self,
        translations: Dict[Tuple[str, str], Dict[str, Any]],
        languages: List[str],
        namespaces: List[str],
    ) -> List[ValidationIssue]:
        issues = []

        for namespace in namespaces:
            available = [lang for lang in languages if translations.get((lang, namespace))]
            if len(available) == len(languages):
                continue
            missing = [lang for lang in languages if lang not in available]
            issues.append(
                ValidationIssue(
                    type="cross_language_missing_files",
                    severity=ERROR,
                    message=f'Namespace "{namespace}" missing in languages: {", ".join(missing)}',
                    location=IssueLocation(namespace=namespace),
                    suggestion="Create missing translation files",
                    details={
                        "namespace": namespace,
                        "missing_languages": missing,
                        "available_languages": available,
                    },
                )
            )

        return issues

    def perform_health_check_summary(
        self,
        languages: Optional[List[str]] = None,
        namespaces: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """Condensed health check for AI assistants."""
        result = self.perform_health_check(languages, namespaces, detailed=True)
        score = result.summary.score

        counts: Dict[str, int] = {}
        severities: Dict[str, str] = {}
        for issue in result.issues:
            counts[issue.type] = counts.get(issue.type, 0) + 1
            severities.setdefault(issue.type, issue.severity)
        top_types = sorted(counts.items(), key=lambda item: item[1], reverse=True)[:5]

        files = {}
        for file_key, health in result.files.items():
            severities_in_file = {issue.severity for issue in health.issues}
            if ERROR in severities_in_file:
                status = "error"
            elif WARNING in severities_in_file:
                status = "warning"
            else:
                status = "healthy"
            files[file_key] = {
                "score": health.quality_score.score,
                "grade": health.quality_score.grade,
                "key_count": health.key_count,
                "issue_count": health.issue_count,
                "status": status,
            }

        return {
            "overall": {
                "score": score,
                "grade": self.scorer.grade(score),
                "status": self.scorer.status(score),
                "total_issues": result.summary.total_issues,
                "critical_issues": result.summary.errors,
                "breakdown": {
                    "errors": result.summary.errors,
                    "warnings": result.summary.warnings,
                    "info": result.summary.info,
                },
            },
            "files": files,
            "top_issues": [
                {
                    "type": issue_type,
                    "severity": severities[issue_type],
                    "count": count,
                    "description": describe_issue_type(issue_type),
                }
                for issue_type, count in top_types
            ],
            "recommendations": result.recommendations[:3],
        }

    def validate_files(self, fix: bool = False) -> Dict[str, Any]:
        """
        Check that every existing translation file parses as a JSON object.

        Files that parse but are not in the canonical on-disk format (sorted
        keys, 2-space indent, trailing newline) are reported as info and
        rewritten when ``fix`` is set.
        """
        issues: List[ValidationIssue] = []
        fixed: List[str] = []
        total = 0
        valid = 0

        for language in self.config.languages:
            for namespace in self.config.namespaces:
                if not self.store.exists(language, namespace):
                    continue
                total += 1
                file_key = f"{language}/{namespace}"
                location = IssueLocation(language=language, namespace=namespace)

                try:
                    document = self.store.load(language, namespace)
                except I18nError as e:
                    issues.append(
                        ValidationIssue(
                            type="json_syntax_error" if isinstance(e, ParseError) else "file_unreadable",
                            severity=ERROR,
                            message=e.message,
                            file=file_key,
                            location=location,
                            suggestion="Fix JSON syntax errors",
                            details=e.details,
                        )
                    )
                    continue

                try:
                    raw = Path(document.path).read_text(encoding="utf-8")
                except (OSError, UnicodeDecodeError) as e:
                    issues.append(
                        ValidationIssue(
                            type="file_unreadable",
                            severity=ERROR,
                            message=f"Failed to re-read {document.path}: {e}",
                            file=file_key,
                            location=location,
                            suggestion="Check file permissions and encoding",
                        )
                    )
                    continue

                valid += 1
                if raw == serialize_document(document.content):
                    continue

                if fix:
                    self.store.save(language, namespace, document.content, make_backup=True)
                    fixed.append(f"Normalized formatting of {document.path}")
                else:
                    issues.append(
                        ValidationIssue(
                            type="format_not_normalized",
                            severity=INFO,
                            message=f"{file_key}.json is not sorted/indented canonically",
                            file=file_key,
                            location=location,
                            suggestion="Run validate_files with fix=true to normalize formatting",
                        )
                    )

        result: Dict[str, Any] = {
            "valid": valid == total,
            "issues": [issue.to_dict() for issue in issues],
            "total_files": total,
            "valid_files": valid,
        }
        if fix:
            result["fixed_issues"] = fixed
        return result
