"""Coverage, quality, usage and export reports over translation files."""

import csv
import io
import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Set, Tuple

import polib

from ..config import Config
from ..core.keypath import MISSING, flatten, get_value
from ..core.store import TranslationStore
from ..errors import I18nError, NotFoundError
from ..models.issues import ValidationIssue
from ..models.translation_file import TranslationDocument
from ..scanner.provider import ScanProvider
from ..validation.health_checker import HealthChecker

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("json", "csv", "gettext")
MISSING_KEY_FORMATS = ("detailed", "summary", "flat")


def percent(part: int, total: int) -> int:
    """Percentage rounded half up, 0 for an empty total."""
    if total <= 0:
        return 0
    return int(part * 100 / total + 0.5)


def has_translation(content: Dict[str, Any], key: str, separator: str) -> bool:
    value = get_value(content, key, separator)
    return value is not MISSING and value is not None and value != ""


@dataclass
class CoverageStats:
    total_keys: int
    translated_keys: int
    percentage: int
    missing_keys: Optional[List[str]] = None

    def to_dict(self) -> dict:
        data = {
            "total_keys": self.total_keys,
            "translated_keys": self.translated_keys,
            "percentage": self.percentage,
        }
        if self.missing_keys is not None:
            data["missing_keys"] = list(self.missing_keys)
        return data


@dataclass
class CoverageReport:
    """Translation coverage; keys are counted as ``namespace:key``."""

    overall: CoverageStats
    by_language: Dict[str, CoverageStats] = field(default_factory=dict)
    by_namespace: Dict[str, CoverageStats] = field(default_factory=dict)
    recommendations: List[str] = field(default_factory=list)
    generated_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> dict:
        return {
            "overall": self.overall.to_dict(),
            "by_language": {lang: stats.to_dict() for lang, stats in self.by_language.items()},
            "by_namespace": {ns: stats.to_dict() for ns, stats in self.by_namespace.items()},
            "recommendations": list(self.recommendations),
            "generated_at": self.generated_at,
        }


@dataclass
class QualityAnalysis:
    """Quality sub-scores derived from a detailed health check."""

    consistency_score: int
    completeness_score: int
    interpolation_score: int
    placeholder_score: int
    overall_score: int
    consistency_issues: List[dict] = field(default_factory=list)
    missing_translations: Dict[str, List[str]] = field(default_factory=dict)
    interpolation_mismatches: List[dict] = field(default_factory=list)
    malformed_placeholders: List[dict] = field(default_factory=list)
    generated_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> dict:
        return {
            "consistency": {"score": self.consistency_score, "issues": self.consistency_issues},
            "completeness": {
                "score": self.completeness_score,
                "missing_translations": self.missing_translations,
            },
            "interpolation": {
                "score": self.interpolation_score,
                "mismatches": self.interpolation_mismatches,
            },
            "placeholders": {"score": self.placeholder_score, "malformed": self.malformed_placeholders},
            "overall_score": self.overall_score,
            "generated_at": self.generated_at,
        }


@dataclass
class UsageAnalysis:
    """Keys defined in translation files versus keys used in code."""

    success: bool
    total_keys_in_files: int = 0
    used_keys: List[str] = field(default_factory=list)
    unused_keys: List[str] = field(default_factory=list)
    missing_keys: List[str] = field(default_factory=list)
    namespace_usage: Dict[str, Dict[str, int]] = field(default_factory=dict)
    files_covered: int = 0
    coverage_percentage: int = 0
    errors: List[str] = field(default_factory=list)
    generated_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "total_keys_in_files": self.total_keys_in_files,
            "used_keys": list(self.used_keys),
            "unused_keys": list(self.unused_keys),
            "missing_keys": list(self.missing_keys),
            "namespace_usage": self.namespace_usage,
            "files_covered": self.files_covered,
            "coverage_percentage": self.coverage_percentage,
            "errors": list(self.errors),
            "generated_at": self.generated_at,
        }


@dataclass
class MissingKeysReport:
    """Source keys absent from target files, as ``{language: {namespace: [keys]}}``."""

    source_language: str
    target_languages: List[str]
    missing: Dict[str, Dict[str, List[str]]] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)

    def formatted(self, output_format: str = "detailed") -> Any:
        if output_format == "summary":
            return {
                "summary": [
                    {
                        "language": language,
                        "total_missing": sum(len(keys) for keys in namespaces.values()),
                        "namespaces": len(namespaces),
                    }
                    for language, namespaces in self.missing.items()
                ],
                "total_languages": len(self.target_languages),
            }
        if output_format == "flat":
            return {
                language: [key for keys in namespaces.values() for key in keys]
                for language, namespaces in self.missing.items()
            }
        if output_format == "detailed":
            return self.missing
        raise ValueError(
            f"Unsupported format: {output_format}. Use one of {', '.join(MISSING_KEY_FORMATS)}"
        )


@dataclass
class ExportResult:
    format: str
    data: str
    filename: str

    def to_dict(self) -> dict:
        return {"format": self.format, "data": self.data, "filename": self.filename}


class AnalyticsEngine:
    """
    Builds reports from translation files.

    Usage figures need a ScanProvider; everything else works from the
    files alone.
    """

    def __init__(
        self,
        config: Config,
        store: TranslationStore,
        health_checker: HealthChecker,
        scan_provider: Optional[ScanProvider] = None,
    ):
        self.config = config
        self.store = store
        self.health_checker = health_checker
        self.scan_provider = scan_provider
        self.separator = config.key_separator

    def _load(
        self, languages: List[str], namespaces: List[str]
    ) -> Dict[Tuple[str, str], TranslationDocument]:
        documents, _ = self.store.load_all(languages, namespaces)
        return {(doc.language, doc.namespace): doc for doc in documents}

    def generate_coverage_report(
        self,
        languages: Optional[List[str]] = None,
        namespaces: Optional[List[str]] = None,
    ) -> CoverageReport:
        """
        Measure how many keys carry a non-empty value in each language.

        Args:
            languages: Languages to include (all configured if None)
            namespaces: Namespaces to include (all configured if None)

        Returns:
            CoverageReport with overall, per-language and per-namespace figures
        """
        target_languages = languages or self.config.languages
        target_namespaces = namespaces or self.config.namespaces
        documents = self._load(target_languages, target_namespaces)

        # Union of keys across languages, per namespace
        namespace_keys: Dict[str, List[str]] = {}
        for namespace in target_namespaces:
            keys: List[str] = []
            seen: Set[str] = set()
            for language in target_languages:
                doc = documents.get((language, namespace))
                if doc is None:
                    continue
                for key in flatten(doc.content, self.separator):
                    if key not in seen:
                        seen.add(key)
                        keys.append(key)
            namespace_keys[namespace] = keys

        def translated(language: str, namespace: str, key: str) -> bool:
            doc = documents.get((language, namespace))
            return doc is not None and has_translation(doc.content, key, self.separator)

        total = sum(len(keys) for keys in namespace_keys.values())

        fully_translated = sum(
            1
            for namespace, keys in namespace_keys.items()
            for key in keys
            if all(translated(language, namespace, key) for language in target_languages)
        )
        overall = CoverageStats(total, fully_translated, percent(fully_translated, total))

        by_language = {}
        for language in target_languages:
            missing = [
                f"{namespace}:{key}"
                for namespace, keys in namespace_keys.items()
                for key in keys
                if not translated(language, namespace, key)
            ]
            done = total - len(missing)
            by_language[language] = CoverageStats(total, done, percent(done, total), missing)

        by_namespace = {}
        for namespace, keys in namespace_keys.items():
            done = sum(
                1 for key in keys
                if all(translated(language, namespace, key) for language in target_languages)
            )
            by_namespace[namespace] = CoverageStats(len(keys), done, percent(done, len(keys)))

        return CoverageReport(
            overall=overall,
            by_language=by_language,
            by_namespace=by_namespace,
            recommendations=self._coverage_recommendations(overall, by_language, by_namespace),
        )

    @staticmethod
    def _coverage_recommendations(
        overall: CoverageStats,
        by_language: Dict[str, CoverageStats],
        by_namespace: Dict[str, CoverageStats],
    ) -> List[str]:
        recommendations = []

        if overall.percentage < 80:
            recommendations.append(
                f"Overall translation coverage is {overall.percentage}% - "
                "consider prioritizing translation completion"
            )
        for language, stats in by_language.items():
            if stats.percentage < 70:
                recommendations.append(
                    f"{language} translations are {stats.percentage}% complete - "
                    f"{len(stats.missing_keys or [])} keys missing"
                )
        for namespace, stats in by_namespace.items():
            if stats.percentage < 50:
                recommendations.append(
                    f"{namespace} namespace has low coverage ({stats.percentage}%) - "
                    "consider reviewing key usage"
                )

        if not recommendations:
            recommendations.append(
                "Translation coverage looks good! Consider running quality analysis "
                "for further improvements."
            )
        return recommendations

    def generate_quality_analysis(
        self,
        languages: Optional[List[str]] = None,
        namespaces: Optional[List[str]] = None,
    ) -> QualityAnalysis:
        """Turn a detailed health check into consistency, completeness, interpolation and placeholder scores."""
        result = self.health_checker.perform_health_check(languages, namespaces, detailed=True)
        issues = result.issues

        consistency = [i for i in issues if "consistency" in i.type]
        missing = [i for i in issues if i.type == "consistency_missing_key"]
        interpolation = [i for i in issues if "interpolation" in i.type]
        placeholders = [i for i in issues if "malformed" in i.type or "empty" in i.type]

        scores = [
            max(0, 100 - len(consistency) * 5),
            max(0, 100 - len(missing) * 2),
            max(0, 100 - len(interpolation) * 10),
            max(0, 100 - len(placeholders) * 8),
        ]

        return QualityAnalysis(
            consistency_score=scores[0],
            completeness_score=scores[1],
            interpolation_score=scores[2],
            placeholder_score=scores[3],
            overall_score=int(sum(scores) / len(scores) + 0.5),
            consistency_issues=[
                {
                    "key": issue.key or "unknown",
                    "issue": issue.message,
                    "languages": [issue.language] if issue.language else [],
                }
                for issue in consistency
            ],
            missing_translations=self._group_by_language(missing),
            interpolation_mismatches=self._group_by_key(interpolation),
            malformed_placeholders=[
                {
                    "key": issue.key or "unknown",
                    "language": issue.language or "unknown",
                    "issue": issue.message,
                }
                for issue in placeholders
            ],
        )

    @staticmethod
    def _group_by_language(issues: List[ValidationIssue]) -> Dict[str, List[str]]:
        grouped: Dict[str, List[str]] = {}
        for issue in issues:
            grouped.setdefault(issue.language or "unknown", []).append(issue.key or "unknown")
        return grouped

    @staticmethod
    def _group_by_key(issues: List[ValidationIssue]) -> List[dict]:
        grouped: Dict[str, Dict[str, List[str]]] = {}
        for issue in issues:
            by_language = grouped.setdefault(issue.key or "unknown", {})
            by_language.setdefault(issue.language or "unknown", []).append(issue.message)
        return [{"key": key, "languages": languages} for key, languages in grouped.items()]

    def generate_usage_analysis(self) -> UsageAnalysis:
        """
        Compare keys defined in translation files with keys used in code.

        Keys are compared as ``namespace:key``. Unused keys are defined but
        never referenced; missing keys are referenced but never defined.
        """
        if self.scan_provider is None:
            return UsageAnalysis(
                success=False,
                errors=[
                    "No code scanner configured; set I18N_SCANNER_EXTRACT_PATH to an "
                    "i18next-scanner output directory"
                ],
            )

        scan = self.scan_provider.scan()
        if not scan.success:
            return UsageAnalysis(success=False, errors=list(scan.errors))

        documents = self._load(self.config.languages, self.config.namespaces)
        defined: Dict[str, List[str]] = {}
        for (_, namespace), doc in documents.items():
            keys = defined.setdefault(namespace, [])
            for key in flatten(doc.content, self.separator):
                if key not in keys:
                    keys.append(key)

        file_keys = [f"{ns}:{key}" for ns, keys in defined.items() for key in keys]
        file_key_set = set(file_keys)
        used = scan.used_keys
        used_set = set(used)

        namespace_usage = {}
        for namespace in self.config.namespaces:
            ns_defined = defined.get(namespace, [])
            ns_used = set(scan.keys_by_namespace.get(namespace, []))
            namespace_usage[namespace] = {
                "keys_used": len(ns_used),
                "total_keys": len(ns_defined),
                "unused_keys": sum(1 for key in ns_defined if key not in ns_used),
            }

        used_and_defined = sum(1 for key in file_keys if key in used_set)
        return UsageAnalysis(
            success=True,
            total_keys_in_files=len(file_keys),
            used_keys=used,
            unused_keys=[key for key in file_keys if key not in used_set],
            missing_keys=[key for key in used if key not in file_key_set],
            namespace_usage=namespace_usage,
            files_covered=len(scan.affected_files),
            coverage_percentage=percent(used_and_defined, len(file_keys)),
            errors=list(scan.errors),
        )

    def get_missing_keys(
        self,
        source_language: Optional[str] = None,
        target_languages: Optional[List[str]] = None,
        namespaces: Optional[List[str]] = None,
    ) -> MissingKeysReport:
        """
        List source-language keys that target files lack.

        A target file that doesn't exist is missing every source key.
        """
        source_language = source_language or self.config.default_language
        if target_languages is None:
            target_languages = [lang for lang in self.config.languages if lang != source_language]
        report = MissingKeysReport(source_language=source_language, target_languages=target_languages)

        for namespace in namespaces or self.config.namespaces:
            try:
                source_keys = list(flatten(self.store.load(source_language, namespace).content, self.separator))
            except I18nError as e:
                logger.warning("Could not load source file %s/%s.json: %s", source_language, namespace, e)
                report.errors.append(f"Could not load source file {source_language}/{namespace}.json: {e}")
                continue

            for language in target_languages:
                try:
                    target_keys = flatten(self.store.load(language, namespace).content, self.separator)
                except NotFoundError:
                    target_keys = {}
                except I18nError as e:
                    report.errors.append(f"Could not load {language}/{namespace}.json: {e}")
                    continue

                missing = [key for key in source_keys if key not in target_keys]
                if missing:
                    report.missing.setdefault(language, {})[namespace] = missing

        return report

    def export_data(
        self,
        export_format: str = "json",
        languages: Optional[List[str]] = None,
        namespaces: Optional[List[str]] = None,
    ) -> ExportResult:
        """
        Export translations as JSON, CSV or a gettext ``.po`` file.

        Raises:
            ValueError: If the format isn't supported
        """
        if export_format not in EXPORT_FORMATS:
            raise ValueError(
                f"Unsupported export format: {export_format}. Use one of {', '.join(EXPORT_FORMATS)}"
            )

        target_languages = languages or self.config.languages
        target_namespaces = namespaces or self.config.namespaces
        documents = self._load(target_languages, target_namespaces)
        stamp = date.today().isoformat()

        if export_format == "json":
            data: Dict[str, Dict[str, Any]] = {}
            for (language, namespace), doc in documents.items():
                data.setdefault(language, {})[namespace] = doc.content
            return ExportResult(
                "json", json.dumps(data, indent=2, ensure_ascii=False), f"translations-{stamp}.json"
            )
        if export_format == "csv":
            return ExportResult("csv", self._to_csv(documents), f"translations-{stamp}.csv")
        return ExportResult("gettext", self._to_gettext(documents), f"translations-{stamp}.po")

    def _to_csv(self, documents: Dict[Tuple[str, str], TranslationDocument]) -> str:
        columns = []
        flat_by_column: Dict[str, Dict[str, Any]] = {}
        all_keys: Set[str] = set()
        for (language, namespace), doc in documents.items():
            column = f"{language}.{namespace}"
            columns.append(column)
            flat_by_column[column] = flatten(doc.content, self.separator)
            all_keys.update(flat_by_column[column])

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(["key"] + columns)
        for key in sorted(all_keys):
            row = [key]
            for column in columns:
                value = flat_by_column[column].get(key)
                if value is None:
                    row.append("")
                elif isinstance(value, str):
                    row.append(value)
                else:
                    row.append(json.dumps(value, ensure_ascii=False))
            writer.writerow(row)
        return buffer.getvalue()

    def _to_gettext(self, documents: Dict[Tuple[str, str], TranslationDocument]) -> str:
        language = self.config.default_language
        po = polib.POFile(wrapwidth=0)
        po.header = (
            "Translation file generated by i18next-mcp\n"
            f"Generated on: {datetime.now().isoformat()}"
        )
        po.metadata = {
            "Content-Type": "text/plain; charset=UTF-8",
            "Content-Transfer-Encoding": "8bit",
            "Language": language,
        }

        for (doc_language, namespace), doc in sorted(documents.items()):
            if doc_language != language:
                continue
            flat = flatten(doc.content, self.separator)
            for key in sorted(flat):
                value = flat[key]
                text = value if isinstance(value, str) else json.dumps(value, ensure_ascii=False)
                po.append(polib.POEntry(msgctxt=namespace, msgid=key, msgstr=text))

        return str(po)
