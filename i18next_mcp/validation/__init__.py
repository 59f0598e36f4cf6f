"""Validation modules for translation health and quality."""

from .content_checks import ContentHeuristics
from .health_checker import HealthChecker
from .interpolation_validator import InterpolationValidator
from .quality_scorer import QualityScorer

__all__ = ["ContentHeuristics", "HealthChecker", "InterpolationValidator", "QualityScorer"]
