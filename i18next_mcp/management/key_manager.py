"""Add, remove, rename and sync translation keys across files."""

import logging
from typing import Any, Dict, List, Optional, Union

from ..config import Config
from ..core.keypath import MISSING, delete_value, flatten, get_value, set_value
from ..core.store import TranslationStore
from ..errors import I18nError, NotFoundError
from ..models.operations import (
    KeyAddition,
    KeyConflict,
    KeyRemoval,
    KeyRename,
    OperationEntry,
    OperationResult,
    SyncPlanEntry,
    SyncReport,
)

logger = logging.getLogger(__name__)

KeyOperation = Union[KeyAddition, KeyRemoval, KeyRename]


class KeyManager:
    """
    Applies key mutations to every targeted ``language x namespace`` file.

    Add and rename check every target for conflicts before writing anything.
    Everything else records per-file failures and carries on with the
    remaining files. Writes are not rolled back.
    """

    def __init__(self, config: Config, store: TranslationStore):
        self.config = config
        self.store = store
        self.separator = config.key_separator

    def _targets(self, languages: Optional[List[str]], namespaces: Optional[List[str]]):
        for language in languages or self.config.languages:
            for namespace in namespaces or self.config.namespaces:
                yield language, namespace

    def _check_conflicts(
        self, key: str, languages: Optional[List[str]], namespaces: Optional[List[str]]
    ) -> List[KeyConflict]:
        conflicts = []
        for language, namespace in self._targets(languages, namespaces):
            try:
                content = self.store.load(language, namespace).content
            except I18nError as e:
                # Unreadable files fail later, when the write is attempted
                logger.debug("Conflict check skipped %s/%s: %s", language, namespace, e)
                continue
            existing = get_value(content, key, self.separator)
            if existing is not MISSING:
                conflicts.append(
                    KeyConflict(key=key, language=language, namespace=namespace, existing_value=existing)
                )
        return conflicts

    def add_key(self, operation: KeyAddition) -> OperationResult:
        """
        Add a key to every target file.

        If the key already exists in any target and ``overwrite`` is off,
        nothing is written and all conflicts are returned.

        Args:
            operation: The key, its value(s) and the targets

        Returns:
            OperationResult with one entry per written file
        """
        result = OperationResult()

        conflicts = self._check_conflicts(operation.key, operation.languages, operation.namespaces)
        if conflicts and not operation.overwrite:
            result.success = False
            result.conflicts = conflicts
            logger.info("Add of %r blocked by %d conflicts", operation.key, len(conflicts))
            return result

        for language, namespace in self._targets(operation.languages, operation.namespaces):
            if language in operation.values:
                value = operation.values[language]
            elif operation.value is not None:
                value = operation.value
            elif language == self.config.default_language:
                value = operation.default_value
            else:
                value = ""

            try:
                content = self.store.load_or_empty(language, namespace).content
                self.store.save(language, namespace, set_value(content, operation.key, value, self.separator))
            except I18nError as e:
                logger.warning("Failed to add %r to %s/%s: %s", operation.key, language, namespace, e)
                result.add_error(f'Failed to add key "{operation.key}" to {language}/{namespace}: {e}')
                continue

            result.operations.append(
                OperationEntry(type="add", key=operation.key, language=language, namespace=namespace, value=value)
            )

        return result

    def remove_key(self, operation: KeyRemoval) -> OperationResult:
        """Delete a key (and parents it leaves empty) from every target file."""
        result = OperationResult()

        for language, namespace in self._targets(operation.languages, operation.namespaces):
            try:
                content = self.store.load(language, namespace).content
                if get_value(content, operation.key, self.separator) is MISSING:
                    continue
                self.store.save(language, namespace, delete_value(content, operation.key, self.separator))
            except NotFoundError:
                continue
            except I18nError as e:
                logger.warning("Failed to remove %r from %s/%s: %s", operation.key, language, namespace, e)
                result.add_error(f'Failed to remove key "{operation.key}" from {language}/{namespace}: {e}')
                continue

            result.operations.append(
                OperationEntry(type="remove", key=operation.key, language=language, namespace=namespace)
            )

        return result

    def rename_key(self, operation: KeyRename) -> OperationResult:
        """
        Move a key's value to a new path in every target file.

        Files where ``old_key`` is absent get an error entry and are skipped.
        The delete and the set happen in one save.
        """
        result = OperationResult()

        conflicts = self._check_conflicts(operation.new_key, operation.languages, operation.namespaces)
        if conflicts and not operation.overwrite:
            result.success = False
            result.conflicts = conflicts
            return result

        for language, namespace in self._targets(operation.languages, operation.namespaces):
            try:
                content = self.store.load(language, namespace).content
            except NotFoundError:
                result.errors.append(f'Key "{operation.old_key}" not found in {language}/{namespace}')
                continue
            except I18nError as e:
                result.add_error(
                    f'Failed to rename key "{operation.old_key}" to "{operation.new_key}" '
                    f"in {language}/{namespace}: {e}"
                )
                continue

            value = get_value(content, operation.old_key, self.separator)
            if value is MISSING:
                result.errors.append(f'Key "{operation.old_key}" not found in {language}/{namespace}')
                continue

            updated = delete_value(content, operation.old_key, self.separator)
            updated = set_value(updated, operation.new_key, value, self.separator)
            try:
                self.store.save(language, namespace, updated)
            except I18nError as e:
                logger.warning("Failed to rename %r in %s/%s: %s", operation.old_key, language, namespace, e)
                result.add_error(
                    f'Failed to rename key "{operation.old_key}" to "{operation.new_key}" '
                    f"in {language}/{namespace}: {e}"
                )
                continue

            result.operations.append(
                OperationEntry(
                    type="rename",
                    key=operation.old_key,
                    new_key=operation.new_key,
                    language=language,
                    namespace=namespace,
                    value=value,
                )
            )

        return result

    def sync_keys(
        self,
        source_namespace: str,
        target_namespaces: List[str],
        language: Optional[str] = None,
        copy_values: bool = False,
    ) -> OperationResult:
        """
        Copy keys of one namespace into other namespaces of the same language.

        Args:
            source_namespace: Namespace whose keys are the reference
            target_namespaces: Namespaces to fill
            language: Language to work in (default language if None)
            copy_values: Use the source value instead of ``""``
        """
        language = language or self.config.default_language
        result = OperationResult()

        try:
            source = flatten(self.store.load(language, source_namespace).content, self.separator)
        except NotFoundError:
            result.add_error(f'Source namespace "{source_namespace}" not found')
            return result
        except I18nError as e:
            result.add_error(f"Sync operation failed: {e}")
            return result

        for namespace in target_namespaces:
            try:
                content = self.store.load_or_empty(language, namespace).content
            except I18nError as e:
                result.add_error(f'Failed to load target namespace "{namespace}": {e}')
                continue

            existing = flatten(content, self.separator)
            entries = []
            for key, source_value in source.items():
                if key in existing:
                    continue
                value = source_value if copy_values else ""
                content = set_value(content, key, value, self.separator)
                entries.append(
                    OperationEntry(type="sync", key=key, language=language, namespace=namespace, value=value)
                )

            if not entries:
                continue
            try:
                self.store.save(language, namespace, content)
            except I18nError as e:
                result.add_error(f'Failed to save target namespace "{namespace}": {e}')
                continue
            result.operations.extend(entries)

        return result

    def sync_missing_keys(
        self,
        source_language: Optional[str] = None,
        target_languages: Optional[List[str]] = None,
        namespaces: Optional[List[str]] = None,
        placeholder: str = "",
        copy_values: bool = True,
        dry_run: bool = False,
        create_backup: bool = True,
    ) -> SyncReport:
        """
        Add keys present in the source language but missing from other languages.

        A missing target file is created holding every source key. A target
        that exists but can't be parsed is reported and left alone.

        Args:
            source_language: Reference language (default language if None)
            target_languages: Languages to fill (all others if None)
            namespaces: Namespaces to sync (all configured if None)
            placeholder: Value for added keys; when empty, the source string
                is used if ``copy_values`` is set, else ``""``
            copy_values: Fall back to the source string value
            dry_run: Only report what would be added
            create_backup: Back up existing target files before writing

        Returns:
            SyncReport listing one entry per target file with missing keys
        """
        source_language = source_language or self.config.default_language
        if target_languages is None:
            target_languages = [lang for lang in self.config.languages if lang != source_language]
        namespaces = namespaces or self.config.namespaces
        report = SyncReport(dry_run=dry_run, target_languages=target_languages, namespaces=namespaces)

        for namespace in namespaces:
            try:
                source_content = self.store.load(source_language, namespace).content
            except I18nError as e:
                report.errors.append(f"Failed to process {source_language}/{namespace}: {e}")
                continue
            source = flatten(source_content, self.separator)

            for language in target_languages:
                try:
                    content = self.store.load(language, namespace).content
                    creating = False
                except NotFoundError:
                    content = {}
                    creating = True
                except I18nError as e:
                    report.errors.append(f"Failed to process {language}/{namespace}: {e}")
                    continue

                existing = flatten(content, self.separator)
                missing = [key for key in source if key not in existing]
                if not missing:
                    continue

                if dry_run:
                    action = "preview"
                else:
                    action = "create_file" if creating else "sync"
                report.operations.append(
                    SyncPlanEntry(language=language, namespace=namespace, missing_keys=missing, action=action)
                )
                if dry_run:
                    continue

                for key in missing:
                    value = self._sync_value(source[key], placeholder, copy_values)
                    content = set_value(content, key, value, self.separator)
                try:
                    self.store.save(language, namespace, content, make_backup=create_backup)
                except I18nError as e:
                    report.errors.append(f"Failed to save {language}/{namespace}: {e}")

        logger.info(
            "Missing-key sync from %s: %d files, %d keys%s",
            source_language,
            len(report.operations),
            report.total_keys,
            " (dry run)" if dry_run else "",
        )
        return report

    @staticmethod
    def _sync_value(source_value: Any, placeholder: str, copy_values: bool) -> Any:
        if placeholder:
            return placeholder
        if copy_values and isinstance(source_value, str):
            return source_value
        return ""

    def sync_from_source(
        self,
        keys: List[str],
        target_languages: List[str],
        source_language: Optional[str] = None,
        namespaces: Optional[List[str]] = None,
        copy_values: bool = False,
        create_backup: bool = True,
    ) -> OperationResult:
        """
        Copy selected keys from the source language into target languages.

        Keys already present in a target are left untouched and reported as
        conflicts. Keys absent from the source are reported as errors.
        """
        source_language = source_language or self.config.default_language
        result = OperationResult()

        for namespace in namespaces or self.config.namespaces:
            try:
                source_content = self.store.load(source_language, namespace).content
            except I18nError as e:
                result.add_error(f"Failed to load source file {source_language}/{namespace}: {e}")
                continue

            values: Dict[str, Any] = {}
            for key in keys:
                source_value = get_value(source_content, key, self.separator)
                if source_value is MISSING:
                    result.add_error(f'Key "{key}" not found in source {source_language}/{namespace}')
                    continue
                values[key] = source_value if copy_values and isinstance(source_value, str) else ""

            if not values:
                continue

            for language in target_languages:
                try:
                    content = self.store.load_or_empty(language, namespace).content
                except I18nError as e:
                    result.add_error(f"Failed to load {language}/{namespace}: {e}")
                    continue

                entries = []
                for key, value in values.items():
                    existing = get_value(content, key, self.separator)
                    if existing is not MISSING:
                        result.conflicts.append(
                            KeyConflict(key=key, language=language, namespace=namespace, existing_value=existing)
                        )
                        continue
                    content = set_value(content, key, value, self.separator)
                    entries.append(
                        OperationEntry(type="sync", key=key, language=language, namespace=namespace, value=value)
                    )

                if not entries:
                    continue
                try:
                    self.store.save(language, namespace, content, make_backup=create_backup)
                except I18nError as e:
                    result.add_error(f"Failed to sync keys to {language}/{namespace}: {e}")
                    continue
                result.operations.extend(entries)

        return result

    def batch_operation(
        self,
        operations: List[KeyOperation],
        create_backup: bool = False,
        continue_on_error: bool = False,
    ) -> OperationResult:
        """
        Apply add/remove/rename operations in order.

        Args:
            operations: Operations to run sequentially
            create_backup: Take one checkpoint of all files before starting
            continue_on_error: Keep going after a failed operation

        Returns:
            Merged OperationResult of every operation that ran
        """
        result = OperationResult()

        if create_backup:
            try:
                self.store.create_checkpoint("batch-operation")
            except I18nError as e:
                result.add_error(f"Failed to create backup: {e}")
                if not continue_on_error:
                    return result

        handlers = {
            "add": self.add_key,
            "remove": self.remove_key,
            "rename": self.rename_key,
        }

        for index, operation in enumerate(operations):
            handler = handlers.get(operation.type)
            if handler is None:
                result.add_error(f"Batch operation {index} failed: unknown operation type {operation.type!r}")
                if not continue_on_error:
                    break
                continue

            step = handler(operation)
            result.merge(step)
            if not step.success and not continue_on_error:
                logger.info("Batch halted at operation %d (%s)", index, operation.type)
                break

        return result
