"""Data models for the translation server."""

from .translation_file import TranslationDocument
from .issues import (
    FileHealth,
    HealthCheckResult,
    HealthSummary,
    IssueLocation,
    QualityScore,
    ValidationIssue,
)
from .operations import (
    KeyAddition,
    KeyConflict,
    KeyRemoval,
    KeyRename,
    OperationEntry,
    OperationResult,
    SyncPlanEntry,
    SyncReport,
)

__all__ = [
    "TranslationDocument",
    "FileHealth",
    "HealthCheckResult",
    "HealthSummary",
    "IssueLocation",
    "QualityScore",
    "ValidationIssue",
    "KeyAddition",
    "KeyConflict",
    "KeyRemoval",
    "KeyRename",
    "OperationEntry",
    "OperationResult",
    "SyncPlanEntry",
    "SyncReport",
]
