"""Code-scan collaborators."""

from .provider import ExtractedLocalesScanProvider, ScanProvider, ScanResult, StaticScanProvider

__all__ = ["ExtractedLocalesScanProvider", "ScanProvider", "ScanResult", "StaticScanProvider"]
