"""
Pytest configuration and fixtures
"""

import json
import pytest
from pathlib import Path
from typing import Any, Callable, Dict, Union

from i18next_mcp.config import Config
from i18next_mcp.core.store import TranslationStore
from i18next_mcp.management.key_manager import KeyManager
from i18next_mcp.reporting.analytics import AnalyticsEngine
from i18next_mcp.validation.health_checker import HealthChecker

EN_COMMON = {
    "greeting": "Hello {{name}}",
    "buttons": {"save": "Save", "cancel": "Cancel"},
}

ES_COMMON = {
    "greeting": "Hola {{name}}",
    "buttons": {"save": "Guardar", "cancel": "Cancelar"},
}

WriteTranslation = Callable[[str, str, Union[Dict[str, Any], str, bytes]], Path]


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Create a test configuration rooted in a temporary project."""
    return Config(
        project_root=str(tmp_path),
        locales_path="locales",
        languages=["en", "es"],
        namespaces=["common"],
        default_language="en",
        default_namespace="common",
        key_separator=".",
        backup_enabled=True,
        backup_path=".backups",
        scanner_extract_path=None,
        operation_timeout=10.0,
        log_level="WARNING",
    )


@pytest.fixture
def write_translation(config: Config) -> WriteTranslation:
    """Write a translation file; dicts are dumped as JSON, strings and bytes written verbatim."""

    def write(language: str, namespace: str, content: Union[Dict[str, Any], str, bytes]) -> Path:
        file_path = config.resolved_locales_path() / language / f"{namespace}.json"
        file_path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            file_path.write_bytes(content)
            return file_path
        text = content if isinstance(content, str) else json.dumps(content, indent=2)
        file_path.write_text(text, encoding="utf-8")
        return file_path

    return write


@pytest.fixture
def read_translation(config: Config) -> Callable[[str, str], Dict[str, Any]]:
    """Read a translation file straight from disk."""

    def read(language: str, namespace: str) -> Dict[str, Any]:
        file_path = config.resolved_locales_path() / language / f"{namespace}.json"
        return json.loads(file_path.read_text(encoding="utf-8"))

    return read


@pytest.fixture
def locales(write_translation: WriteTranslation) -> None:
    """Create a healthy en/es locales tree."""
    write_translation("en", "common", EN_COMMON)
    write_translation("es", "common", ES_COMMON)


@pytest.fixture
def store(config: Config) -> TranslationStore:
    return TranslationStore(config)


@pytest.fixture
def health_checker(config: Config, store: TranslationStore) -> HealthChecker:
    return HealthChecker(config, store)


@pytest.fixture
def key_manager(config: Config, store: TranslationStore) -> KeyManager:
    return KeyManager(config, store)


@pytest.fixture
def analytics(config: Config, store: TranslationStore, health_checker: HealthChecker) -> AnalyticsEngine:
    return AnalyticsEngine(config, store, health_checker)
