"""Async facade over the analyzer, key manager and reports."""

import asyncio
import logging
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .. import __version__
from ..config import Config
from ..core.store import TranslationStore
from ..errors import I18nError, OperationTimeoutError
from ..management.key_manager import KeyManager
from ..models.operations import KeyAddition, KeyRemoval, KeyRename
from ..reporting.analytics import AnalyticsEngine
from ..scanner.provider import ExtractedLocalesScanProvider, ScanProvider
from ..validation.health_checker import HealthChecker
from .requests import (
    AddKeyRequest,
    BatchRequest,
    EmptyRequest,
    ExportRequest,
    HealthCheckRequest,
    ListFilesRequest,
    MissingKeysRequest,
    RemoveKeyRequest,
    RenameKeyRequest,
    ScopeRequest,
    SyncAllMissingRequest,
    SyncFromSourceRequest,
    SyncMissingRequest,
    SyncNamespacesRequest,
    ValidateFilesRequest,
)

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT", bound=BaseModel)

CAPABILITIES = [
    "file_management",
    "validation",
    "project_info",
    "health_check",
    "analytics",
    "key_management",
    "sync",
    "export",
]


def failure(*errors: str, code: Optional[str] = None) -> Dict[str, Any]:
    result: Dict[str, Any] = {"success": False, "errors": list(errors)}
    if code:
        result["code"] = code
    return result


class ProjectService:
    """
    Runs every operation in a worker thread under a timeout.

    Each public coroutine takes raw tool arguments and always returns a
    JSON-serializable dict with a ``success`` flag; failures are reported
    in ``errors`` instead of being raised.
    """

    def __init__(self, config: Config, scan_provider: Optional[ScanProvider] = None):
        self.config = config
        self.store = TranslationStore(config)
        self.health_checker = HealthChecker(config, self.store)
        self.key_manager = KeyManager(config, self.store)

        scanner_path = config.resolved_scanner_path()
        if scan_provider is None and scanner_path is not None:
            scan_provider = ExtractedLocalesScanProvider(
                scanner_path, config.languages, config.namespaces, config.key_separator
            )
        self.analytics = AnalyticsEngine(config, self.store, self.health_checker, scan_provider)
        self.timeout = config.operation_timeout

    async def _call(
        self,
        name: str,
        model: Type[RequestT],
        arguments: Optional[Dict[str, Any]],
        handler: Callable[[RequestT], Dict[str, Any]],
    ) -> Dict[str, Any]:
        """
        Validate arguments, then run ``handler`` in a thread under the watchdog.

        Args:
            name: Operation name for logs and error messages
            model: Pydantic model the arguments must satisfy
            arguments: Raw tool arguments
            handler: Synchronous function producing the response dict

        Returns:
            The handler's response, or a failure dict
        """
        try:
            request = model(**(arguments or {}))
        except ValidationError as e:
            logger.warning("Invalid arguments for %s: %s", name, e)
            return failure(
                *(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()),
                code="INVALID_ARGUMENTS",
            )

        logger.debug("Running %s", name)
        try:
            return await asyncio.wait_for(asyncio.to_thread(handler, request), timeout=self.timeout)
        except asyncio.TimeoutError:
            error = OperationTimeoutError(
                f"{name} timed out after {self.timeout:g}s", {"timeout": self.timeout}
            )
            logger.error(error.message)
            return failure(error.message, code=error.code)
        except I18nError as e:
            logger.warning("%s failed: %s", name, e.message)
            return failure(e.message, code=e.code)
        except ValueError as e:
            logger.warning("%s failed: %s", name, e)
            return failure(str(e), code="INVALID_ARGUMENTS")
        except Exception as e:
            logger.exception("Unexpected error in %s", name)
            return failure(f"{name} failed: {e}", code="INTERNAL_ERROR")

    async def get_project_info(self, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        def run(_: EmptyRequest) -> Dict[str, Any]:
            return {
                "success": True,
                "config": self.config.to_dict(),
                "file_stats": self.store.file_stats(),
                "validation": self.config.validate_project(),
                "cache": self.store.cache_stats(),
                "server": {
                    "name": "i18next-mcp",
                    "version": __version__,
                    "capabilities": CAPABILITIES,
                },
            }

        return await self._call("get_project_info", EmptyRequest, arguments, run)

    async def health_check(self, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        def run(request: HealthCheckRequest) -> Dict[str, Any]:
            if request.summary:
                summary = self.health_checker.perform_health_check_summary(
                    request.languages, request.namespaces
                )
                return {"success": True, **summary}
            result = self.health_checker.perform_health_check(
                request.languages, request.namespaces, request.detailed
            )
            return {"success": True, **result.to_dict()}

        return await self._call("health_check", HealthCheckRequest, arguments, run)

    async def validate_files(self, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        def run(request: ValidateFilesRequest) -> Dict[str, Any]:
            return {"success": True, **self.health_checker.validate_files(fix=request.fix)}

        return await self._call("validate_files", ValidateFilesRequest, arguments, run)

    async def list_files(self, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        def run(request: ListFilesRequest) -> Dict[str, Any]:
            documents = self.store.list_files(request.language, request.namespace)
            return {
                "success": True,
                "files": [doc.to_dict() for doc in documents],
                "total": len(documents),
            }

        return await self._call("list_files", ListFilesRequest, arguments, run)

    async def coverage_report(self, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        def run(request: ScopeRequest) -> Dict[str, Any]:
            report = self.analytics.generate_coverage_report(request.languages, request.namespaces)
            return {"success": True, **report.to_dict()}

        return await self._call("coverage_report", ScopeRequest, arguments, run)

    async def quality_analysis(self, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        def run(request: ScopeRequest) -> Dict[str, Any]:
            analysis = self.analytics.generate_quality_analysis(request.languages, request.namespaces)
            return {"success": True, **analysis.to_dict()}

        return await self._call("quality_analysis", ScopeRequest, arguments, run)

    async def usage_analysis(self, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        def run(_: EmptyRequest) -> Dict[str, Any]:
            return self.analytics.generate_usage_analysis().to_dict()

        return await self._call("usage_analysis", EmptyRequest, arguments, run)

    async def export_data(self, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        def run(request: ExportRequest) -> Dict[str, Any]:
            result = self.analytics.export_data(request.format, request.languages, request.namespaces)
            return {"success": True, **result.to_dict()}

        return await self._call("export_data", ExportRequest, arguments, run)

    async def get_missing_keys(self, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        def run(request: MissingKeysRequest) -> Dict[str, Any]:
            report = self.analytics.get_missing_keys(
                request.source_language, request.target_languages, request.namespaces
            )
            return {
                "success": not report.errors,
                "source_language": report.source_language,
                "format": request.format,
                "missing_keys": report.formatted(request.format),
                "errors": report.errors,
            }

        return await self._call("get_missing_keys", MissingKeysRequest, arguments, run)

    async def sync_missing_keys(self, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        def run(request: SyncMissingRequest) -> Dict[str, Any]:
            report = self.key_manager.sync_missing_keys(
                source_language=request.source_language,
                target_languages=request.target_languages,
                namespaces=request.namespaces,
                placeholder=request.placeholder,
                copy_values=request.copy_values,
                dry_run=request.dry_run,
                create_backup=request.create_backup,
            )
            return report.to_dict()

        return await self._call("sync_missing_keys", SyncMissingRequest, arguments, run)

    async def sync_all_missing(self, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Sync every non-default language from the default language."""

        def run(request: SyncAllMissingRequest) -> Dict[str, Any]:
            report = self.key_manager.sync_missing_keys(
                source_language=self.config.default_language,
                namespaces=self.config.namespaces,
                placeholder=request.placeholder,
                dry_run=request.dry_run,
                create_backup=request.create_backup,
            )
            return report.to_dict()

        return await self._call("sync_all_missing", SyncAllMissingRequest, arguments, run)

    async def sync_from_source(self, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        def run(request: SyncFromSourceRequest) -> Dict[str, Any]:
            result = self.key_manager.sync_from_source(
                keys=request.keys,
                target_languages=request.target_languages,
                source_language=request.source_language,
                namespaces=request.namespaces,
                copy_values=request.copy_values,
                create_backup=request.create_backup,
            )
            return {
                **result.to_dict(),
                "summary": {
                    "synced": len(result.operations),
                    "skipped_existing": len(result.conflicts),
                    "keys": len(request.keys),
                    "target_languages": len(request.target_languages),
                },
            }

        return await self._call("sync_from_source", SyncFromSourceRequest, arguments, run)

    async def sync_namespaces(self, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        def run(request: SyncNamespacesRequest) -> Dict[str, Any]:
            result = self.key_manager.sync_keys(
                request.source_namespace,
                request.target_namespaces,
                language=request.language,
                copy_values=request.copy_values,
            )
            return result.to_dict()

        return await self._call("sync_namespaces", SyncNamespacesRequest, arguments, run)

    async def add_translation_key(self, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        def run(request: AddKeyRequest) -> Dict[str, Any]:
            return self.key_manager.add_key(to_addition(request)).to_dict()

        return await self._call("add_translation_key", AddKeyRequest, arguments, run)

    async def remove_translation_key(self, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        def run(request: RemoveKeyRequest) -> Dict[str, Any]:
            return self.key_manager.remove_key(to_removal(request)).to_dict()

        return await self._call("remove_translation_key", RemoveKeyRequest, arguments, run)

    async def rename_translation_key(self, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        def run(request: RenameKeyRequest) -> Dict[str, Any]:
            return self.key_manager.rename_key(to_rename(request)).to_dict()

        return await self._call("rename_translation_key", RenameKeyRequest, arguments, run)

    async def batch_key_operations(self, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        def run(request: BatchRequest) -> Dict[str, Any]:
            converters = {"add": to_addition, "remove": to_removal, "rename": to_rename}
            operations = [converters[op.type](op) for op in request.operations]
            result = self.key_manager.batch_operation(
                operations,
                create_backup=request.create_backup,
                continue_on_error=request.continue_on_error,
            )
            return result.to_dict()

        return await self._call("batch_key_operations", BatchRequest, arguments, run)


def to_addition(request: AddKeyRequest) -> KeyAddition:
    """Build a KeyAddition; with no explicit languages, target those given translations."""
    languages = request.languages
    if languages is None and request.translations:
        languages = list(request.translations)
    return KeyAddition(
        key=request.key,
        values=dict(request.translations),
        default_value=request.default_value,
        languages=languages,
        namespaces=request.namespaces,
        overwrite=request.overwrite,
    )


def to_removal(request: RemoveKeyRequest) -> KeyRemoval:
    return KeyRemoval(key=request.key, languages=request.languages, namespaces=request.namespaces)


def to_rename(request: RenameKeyRequest) -> KeyRename:
    return KeyRename(
        old_key=request.old_key,
        new_key=request.new_key,
        languages=request.languages,
        namespaces=request.namespaces,
        overwrite=request.overwrite,
    )
