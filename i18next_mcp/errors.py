"""Error types shared by the store, analyzer and key manager."""

from typing import Any, Dict, Optional


class I18nError(Exception):
    """Base error carrying a machine-readable code and optional details."""

    code = "I18N_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            data["details"] = self.details
        return data


class NotFoundError(I18nError):
    """A translation file does not exist. Sync logic treats it as empty."""

    code = "NOT_FOUND"


class ParseError(I18nError):
    """A translation file exists but is not a valid JSON object."""

    code = "PARSE_ERROR"


class StoreIOError(I18nError):
    """Reading or writing a translation file failed at the OS level."""

    code = "FILESYSTEM_ERROR"


class BusyError(I18nError):
    """Another load/save is already running for the same document."""

    code = "BUSY"


class OperationTimeoutError(I18nError):
    """A tool call exceeded the watchdog window."""

    code = "TIMEOUT"


class ConfigurationError(I18nError):
    code = "CONFIGURATION_ERROR"
