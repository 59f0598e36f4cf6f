"""Data models for health check diagnostics and quality scoring."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

ERROR = "error"
WARNING = "warning"
INFO = "info"


@dataclass(frozen=True)
class IssueLocation:
    """Where an issue was found."""

    language: Optional[str] = None
    namespace: Optional[str] = None
    key: Optional[str] = None

    def to_dict(self) -> dict:
        return {k: v for k, v in (
            ("language", self.language),
            ("namespace", self.namespace),
            ("key", self.key),
        ) if v is not None}


@dataclass(frozen=True)
class ValidationIssue:
    """A single diagnostic produced by the health checker."""

    type: str
    severity: str  # error, warning, info
    message: str
    file: Optional[str] = None
    location: Optional[IssueLocation] = None
    suggestion: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> Optional[str]:
        return self.location.key if self.location else None

    @property
    def language(self) -> Optional[str]:
        return self.location.language if self.location else None

    def to_dict(self) -> dict:
        data: Dict[str, Any] = {
            "type": self.type,
            "severity": self.severity,
            "message": self.message,
        }
        if self.file is not None:
            data["file"] = self.file
        if self.location is not None:
            data["location"] = self.location.to_dict()
        if self.suggestion is not None:
            data["suggestion"] = self.suggestion
        if self.details:
            data["details"] = self.details
        return data


@dataclass
class QualityScore:
    """Score of one translation file, derived from its issues."""

    score: int  # 0-100
    grade: str  # A-F
    total_keys: int
    error_count: int
    warning_count: int

    @property
    def passed(self) -> bool:
        return self.grade in ("A", "B", "C")

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "grade": self.grade,
            "total_keys": self.total_keys,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
        }


@dataclass
class FileHealth:
    """Health check results for a single ``language/namespace`` file."""

    key_count: int
    issue_count: int
    issues: List[ValidationIssue]
    quality_score: QualityScore

    def to_dict(self) -> dict:
        return {
            "key_count": self.key_count,
            "issue_count": self.issue_count,
            "issues": [issue.to_dict() for issue in self.issues],
            "quality_score": self.quality_score.to_dict(),
        }


@dataclass
class HealthSummary:
    total_issues: int = 0
    errors: int = 0
    warnings: int = 0
    info: int = 0
    score: int = 0

    def to_dict(self) -> dict:
        return {
            "total_issues": self.total_issues,
            "errors": self.errors,
            "warnings": self.warnings,
            "info": self.info,
            "score": self.score,
        }


@dataclass
class HealthCheckResult:
    """Aggregate result of one health check run."""

    summary: HealthSummary = field(default_factory=HealthSummary)
    files: Dict[str, FileHealth] = field(default_factory=dict)
    issues: List[ValidationIssue] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def issues_of_type(self, issue_type: str) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.type == issue_type]

    def to_dict(self) -> dict:
        return {
            "summary": self.summary.to_dict(),
            "files": {key: health.to_dict() for key, health in self.files.items()},
            "issues": [issue.to_dict() for issue in self.issues],
            "recommendations": list(self.recommendations),
            "timestamp": self.timestamp,
        }
