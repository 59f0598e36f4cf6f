"""
Sources of translation keys referenced by application code.

Extraction itself (running i18next-scanner or similar) happens outside this
package; providers only read its results.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from ..core.keypath import DEFAULT_SEPARATOR, flatten

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """Keys found in source code, grouped by namespace."""

    success: bool
    keys_by_namespace: Dict[str, List[str]] = field(default_factory=dict)
    affected_files: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def used_keys(self) -> List[str]:
        """Every used key as ``namespace:key``."""
        return [
            f"{namespace}:{key}"
            for namespace, keys in self.keys_by_namespace.items()
            for key in keys
        ]

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "used_keys": self.used_keys,
            "total_keys": len(self.used_keys),
            "keys_by_namespace": {ns: list(keys) for ns, keys in self.keys_by_namespace.items()},
            "affected_files": list(self.affected_files),
            "errors": list(self.errors),
        }


class ScanProvider(ABC):
    """Supplies the keys that application code actually uses."""

    @abstractmethod
    def scan(self) -> ScanResult:
        """Return the keys referenced by the code base."""


class StaticScanProvider(ScanProvider):
    """Wraps a precomputed ``{namespace: [keys]}`` mapping."""

    def __init__(self, keys_by_namespace: Dict[str, List[str]], affected_files: Optional[List[str]] = None):
        self.keys_by_namespace = keys_by_namespace
        self.affected_files = affected_files or []

    def scan(self) -> ScanResult:
        return ScanResult(
            success=True,
            keys_by_namespace={ns: list(keys) for ns, keys in self.keys_by_namespace.items()},
            affected_files=list(self.affected_files),
        )


class ExtractedLocalesScanProvider(ScanProvider):
    """
    Reads the output directory of an i18next-scanner extraction.

    The directory mirrors the locales tree (``<lang>/<namespace>.json``).
    A key counts as used when it appears in any language's extracted file.
    """

    def __init__(
        self,
        extract_path: Path,
        languages: List[str],
        namespaces: List[str],
        separator: str = DEFAULT_SEPARATOR,
    ):
        self.extract_path = Path(extract_path)
        self.languages = languages
        self.namespaces = namespaces
        self.separator = separator

    def scan(self) -> ScanResult:
        if not self.extract_path.is_dir():
            return ScanResult(
                success=False,
                errors=[f"Extraction output not found: {self.extract_path}"],
            )

        result = ScanResult(success=True)
        for namespace in self.namespaces:
            keys: List[str] = []
            for language in self.languages:
                file_path = self.extract_path / language / f"{namespace}.json"
                if not file_path.is_file():
                    continue
                try:
                    data = json.loads(file_path.read_text(encoding="utf-8"))
                except (OSError, json.JSONDecodeError) as e:
                    result.errors.append(f"Failed to read {file_path}: {e}")
                    continue
                if not isinstance(data, dict):
                    result.errors.append(f"{file_path} must contain a JSON object")
                    continue

                result.affected_files.append(str(file_path))
                for key in flatten(data, self.separator):
                    if key not in keys:
                        keys.append(key)

            if keys:
                result.keys_by_namespace[namespace] = keys

        logger.info(
            "Read %d used keys from %s", len(result.used_keys), self.extract_path
        )
        return result
