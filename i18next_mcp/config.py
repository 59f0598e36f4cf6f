"""Configuration management for the translation server."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
from dotenv import load_dotenv

from .errors import ConfigurationError

load_dotenv()


def _env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# JSON config files follow i18next naming; snake_case is accepted too
_FILE_KEYS = {
    "projectRoot": "project_root",
    "localesPath": "locales_path",
    "languages": "languages",
    "namespaces": "namespaces",
    "defaultLanguage": "default_language",
    "defaultNamespace": "default_namespace",
    "keySeparator": "key_separator",
    "scannerExtractPath": "scanner_extract_path",
    "operationTimeout": "operation_timeout",
}

# Which env var overrides which field when loading from a file
_ENV_OVERRIDES = {
    "project_root": ("I18N_PROJECT_ROOT",),
    "locales_path": ("I18N_LOCALES_DIR", "I18N_LOCALES_PATH"),
    "languages": ("I18N_LANGUAGES",),
    "namespaces": ("I18N_NAMESPACES",),
    "default_language": ("I18N_DEFAULT_LANGUAGE",),
    "default_namespace": ("I18N_DEFAULT_NAMESPACE",),
    "key_separator": ("I18N_KEY_SEPARATOR",),
    "backup_enabled": ("I18N_BACKUP_ENABLED",),
    "backup_path": ("I18N_BACKUP_PATH",),
    "scanner_extract_path": ("I18N_SCANNER_EXTRACT_PATH",),
    "operation_timeout": ("I18N_OPERATION_TIMEOUT",),
}


@dataclass
class Config:
    """Application configuration."""

    # Project layout
    project_root: str = field(
        default_factory=lambda: os.getenv("I18N_PROJECT_ROOT", os.getcwd())
    )
    locales_path: str = field(
        default_factory=lambda: os.getenv(
            "I18N_LOCALES_DIR", os.getenv("I18N_LOCALES_PATH", "public/locales")
        )
    )

    # i18next settings
    languages: List[str] = field(default_factory=lambda: _env_list("I18N_LANGUAGES", "en"))
    namespaces: List[str] = field(
        default_factory=lambda: _env_list("I18N_NAMESPACES", "translation")
    )
    default_language: str = field(
        default_factory=lambda: os.getenv("I18N_DEFAULT_LANGUAGE", "en")
    )
    default_namespace: str = field(
        default_factory=lambda: os.getenv("I18N_DEFAULT_NAMESPACE", "translation")
    )
    key_separator: str = field(default_factory=lambda: os.getenv("I18N_KEY_SEPARATOR", "."))
    interpolation_prefix: str = "{{"
    interpolation_suffix: str = "}}"

    # Backups
    backup_enabled: bool = field(default_factory=lambda: _env_bool("I18N_BACKUP_ENABLED", True))
    backup_path: str = field(
        default_factory=lambda: os.getenv("I18N_BACKUP_PATH", ".backups/i18n")
    )

    # Scanner output directory (i18next-scanner extraction), optional
    scanner_extract_path: Optional[str] = field(
        default_factory=lambda: os.getenv("I18N_SCANNER_EXTRACT_PATH") or None
    )

    # Watchdog for a single tool call, in seconds
    operation_timeout: float = field(
        default_factory=lambda: float(os.getenv("I18N_OPERATION_TIMEOUT", "30"))
    )

    log_level: str = field(default_factory=lambda: os.getenv("I18N_LOG_LEVEL", "INFO"))

    # Display names used in analyzer messages
    LANGUAGE_NAMES: dict = field(default_factory=lambda: {
        "en": "English",
        "es": "Spanish",
        "ca": "Catalan",
        "de": "German",
        "fr": "French",
        "it": "Italian",
        "pt": "Portuguese",
        "ro": "Romanian",
        "ru": "Russian",
        "pl": "Polish",
        "ja": "Japanese",
        "zh": "Chinese",
        "ar": "Arabic",
    })

    @classmethod
    def from_file(cls, path: str) -> "Config":
        """
        Build a configuration from a JSON file.

        Environment variables still take precedence over file values.

        Raises:
            ConfigurationError: If the file can't be read or parsed
        """
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Failed to load config from {path}", {"error": str(e)})

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a JSON object")

        values: Dict[str, Any] = {}
        for key, value in data.items():
            name = _FILE_KEYS.get(key, key)
            if name in ("interpolation", "backup") and isinstance(value, dict):
                continue
            if name in cls.__dataclass_fields__:
                values[name] = value

        interpolation = data.get("interpolation") or {}
        if interpolation.get("prefix"):
            values["interpolation_prefix"] = interpolation["prefix"]
        if interpolation.get("suffix"):
            values["interpolation_suffix"] = interpolation["suffix"]

        backup = data.get("backup") or {}
        if "enabled" in backup:
            values["backup_enabled"] = bool(backup["enabled"])
        if backup.get("path"):
            values["backup_path"] = backup["path"]

        # Env vars win over the file
        for name, env_names in _ENV_OVERRIDES.items():
            if any(os.getenv(env) for env in env_names):
                values.pop(name, None)

        return cls(**values)

    def resolved_project_root(self) -> Path:
        return Path(self.project_root).resolve()

    def resolved_locales_path(self) -> Path:
        return (self.resolved_project_root() / self.locales_path).resolve()

    def resolved_backup_path(self) -> Path:
        return (self.resolved_project_root() / self.backup_path).resolve()

    def resolved_scanner_path(self) -> Optional[Path]:
        if not self.scanner_extract_path:
            return None
        return (self.resolved_project_root() / self.scanner_extract_path).resolve()

    def get_language_name(self, code: str) -> str:
        return self.LANGUAGE_NAMES.get(code, code)

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []
        if not self.languages:
            errors.append("At least one language must be configured (I18N_LANGUAGES)")
        if not self.namespaces:
            errors.append("At least one namespace must be configured (I18N_NAMESPACES)")
        if self.default_language not in self.languages:
            errors.append(
                f"Default language '{self.default_language}' is not in languages: "
                f"{', '.join(self.languages)}"
            )
        if not self.key_separator:
            errors.append("Key separator must not be empty")
        if not self.interpolation_prefix or not self.interpolation_suffix:
            errors.append("Interpolation prefix and suffix must not be empty")
        if self.operation_timeout <= 0:
            errors.append("Operation timeout must be positive")
        return errors

    def validate_project(self) -> Dict[str, Any]:
        """Check that the configured directories and source files exist."""
        issues = []
        root = self.resolved_project_root()
        locales = self.resolved_locales_path()

        if not root.exists():
            issues.append(f"Project root does not exist: {root}")
        if not locales.exists():
            issues.append(f"Locales directory does not exist: {locales}")

        for language in self.languages:
            lang_dir = locales / language
            if not lang_dir.exists():
                issues.append(f"Language directory does not exist: {lang_dir}")

        for namespace in self.namespaces:
            file_path = locales / self.default_language / f"{namespace}.json"
            if not file_path.exists():
                issues.append(f"Required namespace file missing: {file_path}")

        return {"valid": not issues, "issues": issues}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_root": str(self.resolved_project_root()),
            "locales_path": str(self.resolved_locales_path()),
            "languages": list(self.languages),
            "namespaces": list(self.namespaces),
            "default_language": self.default_language,
            "default_namespace": self.default_namespace,
            "key_separator": self.key_separator,
            "interpolation": {
                "prefix": self.interpolation_prefix,
                "suffix": self.interpolation_suffix,
            },
            "backup": {
                "enabled": self.backup_enabled,
                "path": str(self.resolved_backup_path()),
            },
        }


CONFIG_FILE_NAME = "i18next-mcp.json"


def load_config(path: Optional[str] = None) -> Config:
    """
    Load the configuration.

    Uses ``path``, else ``I18N_CONFIG_FILE``, else ``i18next-mcp.json`` in
    the project root when present, else environment variables alone.
    """
    path = path or os.getenv("I18N_CONFIG_FILE")
    if path:
        return Config.from_file(path)

    config = Config()
    candidate = config.resolved_project_root() / CONFIG_FILE_NAME
    if candidate.is_file():
        return Config.from_file(str(candidate))
    return config
