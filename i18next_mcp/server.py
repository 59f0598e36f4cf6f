"""
i18next MCP server

Exposes translation health checks, coverage reports and key management for
an i18next project as MCP tools, so an AI assistant can inspect and update
``<locales>/<language>/<namespace>.json`` files.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from .config import load_config
from .logging_setup import setup_logging
from .services.project_service import ProjectService

logger = logging.getLogger(__name__)

_service: Optional[ProjectService] = None


def configure(service: ProjectService) -> None:
    """Install the service the tools delegate to."""
    global _service
    _service = service


def _get_service() -> ProjectService:
    """Return the configured service, building one from the environment on first use."""
    global _service
    if _service is None:
        _service = ProjectService(load_config())
    return _service


def _respond(result: Dict[str, Any]) -> str:
    return json.dumps(result, indent=2, ensure_ascii=False, default=str)


def _args(**kwargs: Any) -> Dict[str, Any]:
    """Drop unset optional arguments so request-model defaults apply."""
    return {key: value for key, value in kwargs.items() if value is not None}


mcp = FastMCP(
    "i18next-mcp",
    instructions=(
        "Manage i18next JSON translation files. Start with get_project_info, "
        "use health_check (summary=true for a quick overview) or get_missing_keys "
        "to find problems, then fix them with the sync and key tools. Preview "
        "bulk syncs with dry_run=true."
    ),
)


# ===================== PROJECT =====================


@mcp.tool()
async def get_project_info() -> str:
    """Show the i18n configuration, file statistics and project validation."""
    return _respond(await _get_service().get_project_info())


@mcp.tool()
async def list_files(language: Optional[str] = None, namespace: Optional[str] = None) -> str:
    """List translation files with size and last-modified time.

    Args:
        language: Only files of this language.
        namespace: Only files of this namespace.
    """
    return _respond(await _get_service().list_files(_args(language=language, namespace=namespace)))


@mcp.tool()
async def validate_files(fix: bool = False) -> str:
    """Check every translation file parses as a JSON object.

    Args:
        fix: Rewrite valid files into canonical form (sorted keys, 2-space indent).
    """
    return _respond(await _get_service().validate_files({"fix": fix}))


# ===================== ANALYSIS =====================


@mcp.tool()
async def health_check(
    languages: Optional[List[str]] = None,
    namespaces: Optional[List[str]] = None,
    detailed: bool = False,
    summary: bool = False,
) -> str:
    """Run the translation health check and score each file.

    Checks interpolation syntax, plural forms, consistency with the default
    language, content quality, structure and file presence.

    Args:
        languages: Languages to check. Defaults to all configured.
        namespaces: Namespaces to check. Defaults to all configured.
        detailed: Include warnings and info in the per-file breakdown.
        summary: Return a condensed overview instead of every issue.
    """
    return _respond(
        await _get_service().health_check(
            _args(languages=languages, namespaces=namespaces, detailed=detailed, summary=summary)
        )
    )


@mcp.tool()
async def coverage_report(
    languages: Optional[List[str]] = None, namespaces: Optional[List[str]] = None
) -> str:
    """Report the share of keys with a non-empty value, per language and namespace.

    Args:
        languages: Languages to include. Defaults to all configured.
        namespaces: Namespaces to include. Defaults to all configured.
    """
    return _respond(
        await _get_service().coverage_report(_args(languages=languages, namespaces=namespaces))
    )


@mcp.tool()
async def quality_analysis(
    languages: Optional[List[str]] = None, namespaces: Optional[List[str]] = None
) -> str:
    """Score consistency, completeness, interpolation and placeholders.

    Args:
        languages: Languages to include. Defaults to all configured.
        namespaces: Namespaces to include. Defaults to all configured.
    """
    return _respond(
        await _get_service().quality_analysis(_args(languages=languages, namespaces=namespaces))
    )


@mcp.tool()
async def usage_analysis() -> str:
    """Compare keys in translation files with keys extracted from source code.

    Needs I18N_SCANNER_EXTRACT_PATH pointing at an i18next-scanner output directory.
    """
    return _respond(await _get_service().usage_analysis())


@mcp.tool()
async def get_missing_keys(
    source_language: Optional[str] = None,
    target_languages: Optional[List[str]] = None,
    namespaces: Optional[List[str]] = None,
    format: str = "detailed",
) -> str:
    """List keys of the source language that other languages lack.

    Args:
        source_language: Reference language. Defaults to the default language.
        target_languages: Languages to check. Defaults to all others.
        namespaces: Namespaces to check. Defaults to all configured.
        format: "detailed" (by language and namespace), "summary" (counts) or "flat".
    """
    return _respond(
        await _get_service().get_missing_keys(
            _args(
                source_language=source_language,
                target_languages=target_languages,
                namespaces=namespaces,
                format=format,
            )
        )
    )


@mcp.tool()
async def export_data(
    format: str = "json",
    languages: Optional[List[str]] = None,
    namespaces: Optional[List[str]] = None,
) -> str:
    """Export translations.

    Args:
        format: "json", "csv" or "gettext" (.po of the default language).
        languages: Languages to export. Defaults to all configured.
        namespaces: Namespaces to export. Defaults to all configured.
    """
    return _respond(
        await _get_service().export_data(
            _args(format=format, languages=languages, namespaces=namespaces)
        )
    )


# ===================== SYNC =====================


@mcp.tool()
async def sync_missing_keys(
    source_language: Optional[str] = None,
    target_languages: Optional[List[str]] = None,
    namespaces: Optional[List[str]] = None,
    placeholder: str = "",
    copy_values: bool = True,
    dry_run: bool = False,
    create_backup: bool = True,
) -> str:
    """Add keys present in the source language to the target languages.

    Missing target files are created.

    Args:
        source_language: Reference language. Defaults to the default language.
        target_languages: Languages to fill. Defaults to all others.
        namespaces: Namespaces to sync. Defaults to all configured.
        placeholder: Value for added keys.
        copy_values: Without a placeholder, copy the source text (else use "").
        dry_run: Only report what would change.
        create_backup: Back up files before writing.
    """
    return _respond(
        await _get_service().sync_missing_keys(
            _args(
                source_language=source_language,
                target_languages=target_languages,
                namespaces=namespaces,
                placeholder=placeholder,
                copy_values=copy_values,
                dry_run=dry_run,
                create_backup=create_backup,
            )
        )
    )


@mcp.tool()
async def sync_all_missing(placeholder: str = "", dry_run: bool = False, create_backup: bool = True) -> str:
    """Bring every language up to the default language's key set.

    Args:
        placeholder: Value for added keys. Empty copies the source text.
        dry_run: Only report what would change.
        create_backup: Back up files before writing.
    """
    return _respond(
        await _get_service().sync_all_missing(
            {"placeholder": placeholder, "dry_run": dry_run, "create_backup": create_backup}
        )
    )


@mcp.tool()
async def sync_from_source(
    keys: List[str],
    target_languages: List[str],
    source_language: Optional[str] = None,
    namespaces: Optional[List[str]] = None,
    copy_values: bool = False,
    create_backup: bool = True,
) -> str:
    """Copy selected keys from the source language; existing keys are kept.

    Args:
        keys: Key paths to copy, e.g. ["auth.login.title"].
        target_languages: Languages to copy into.
        source_language: Reference language. Defaults to the default language.
        namespaces: Namespaces to look in. Defaults to all configured.
        copy_values: Copy the source text instead of "".
        create_backup: Back up files before writing.
    """
    return _respond(
        await _get_service().sync_from_source(
            _args(
                keys=keys,
                target_languages=target_languages,
                source_language=source_language,
                namespaces=namespaces,
                copy_values=copy_values,
                create_backup=create_backup,
            )
        )
    )


@mcp.tool()
async def sync_namespaces(
    source_namespace: str,
    target_namespaces: List[str],
    language: Optional[str] = None,
    copy_values: bool = False,
) -> str:
    """Copy keys missing from other namespaces of one language.

    Args:
        source_namespace: Namespace whose keys are the reference.
        target_namespaces: Namespaces to fill.
        language: Language to work in. Defaults to the default language.
        copy_values: Copy source values instead of "".
    """
    return _respond(
        await _get_service().sync_namespaces(
            _args(
                source_namespace=source_namespace,
                target_namespaces=target_namespaces,
                language=language,
                copy_values=copy_values,
            )
        )
    )


# ===================== KEYS =====================


@mcp.tool()
async def add_translation_key(
    key: str,
    translations: Optional[Dict[str, str]] = None,
    default_value: str = "",
    languages: Optional[List[str]] = None,
    namespaces: Optional[List[str]] = None,
    overwrite: bool = False,
) -> str:
    """Add a key to several languages at once.

    Nothing is written if the key already exists anywhere in scope, unless
    overwrite is set.

    Args:
        key: Key path, e.g. "dashboard.title".
        translations: Value per language, e.g. {"en": "Hello", "es": "Hola"}.
        default_value: Value for the default language when it has no translation.
        languages: Languages to add to. Defaults to those in translations, else all.
        namespaces: Namespaces to add to. Defaults to all configured.
        overwrite: Replace existing values.
    """
    return _respond(
        await _get_service().add_translation_key(
            _args(
                key=key,
                translations=translations,
                default_value=default_value,
                languages=languages,
                namespaces=namespaces,
                overwrite=overwrite,
            )
        )
    )


@mcp.tool()
async def remove_translation_key(
    key: str, languages: Optional[List[str]] = None, namespaces: Optional[List[str]] = None
) -> str:
    """Remove a key, pruning parent objects it leaves empty.

    Args:
        key: Key path to remove.
        languages: Languages to remove from. Defaults to all configured.
        namespaces: Namespaces to remove from. Defaults to all configured.
    """
    return _respond(
        await _get_service().remove_translation_key(
            _args(key=key, languages=languages, namespaces=namespaces)
        )
    )


@mcp.tool()
async def rename_translation_key(
    old_key: str,
    new_key: str,
    languages: Optional[List[str]] = None,
    namespaces: Optional[List[str]] = None,
    overwrite: bool = False,
) -> str:
    """Move a key's value to a new key path.

    Args:
        old_key: Current key path.
        new_key: New key path.
        languages: Languages to rename in. Defaults to all configured.
        namespaces: Namespaces to rename in. Defaults to all configured.
        overwrite: Replace values already stored at new_key.
    """
    return _respond(
        await _get_service().rename_translation_key(
            _args(
                old_key=old_key,
                new_key=new_key,
                languages=languages,
                namespaces=namespaces,
                overwrite=overwrite,
            )
        )
    )


@mcp.tool()
async def batch_key_operations(
    operations: List[Dict[str, Any]],
    create_backup: bool = False,
    continue_on_error: bool = False,
) -> str:
    """Run add/remove/rename operations in order.

    Args:
        operations: Items like {"type": "add", "key": "a.b", "translations": {"en": "x"}},
            {"type": "remove", "key": "a.c"} or {"type": "rename", "old_key": "a", "new_key": "b"}.
        create_backup: Back up every file once before starting.
        continue_on_error: Keep going after a failed operation.
    """
    return _respond(
        await _get_service().batch_key_operations(
            {
                "operations": operations,
                "create_backup": create_backup,
                "continue_on_error": continue_on_error,
            }
        )
    )


def main():
    config = load_config()
    setup_logging(config.log_level)
    configure(ProjectService(config))
    logger.info("Starting i18next MCP server for %s", config.resolved_locales_path())
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
