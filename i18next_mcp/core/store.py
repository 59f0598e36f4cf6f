"""File store for i18next translation documents."""

import json
import logging
import os
import shutil
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..config import Config
from ..errors import BusyError, NotFoundError, ParseError, StoreIOError
from ..models.translation_file import TranslationDocument
from .keypath import clone_tree, sort_keys

logger = logging.getLogger(__name__)

DocKey = Tuple[str, str]


def serialize_document(content: Dict[str, Any]) -> str:
    """Render content in the on-disk format: sorted keys, 2-space indent, trailing newline."""
    return json.dumps(sort_keys(content), indent=2, ensure_ascii=False) + "\n"


def _timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%dT%H-%M-%S-%f")


class TranslationStore:
    """
    Loads, caches and saves ``<locales>/<language>/<namespace>.json`` files.

    Readers always get a cloned snapshot, never the cached object. At most
    one load or save may run per ``(language, namespace)`` at a time; an
    overlapping attempt fails immediately with ``BusyError``.
    """

    def __init__(self, config: Config):
        self.config = config
        self.locales_path = config.resolved_locales_path()
        self.backup_path = config.resolved_backup_path()
        self._cache: Dict[DocKey, Tuple[int, int, TranslationDocument]] = {}
        self._in_flight: set = set()
        self._lock = threading.Lock()

    def get_file_path(self, language: str, namespace: str) -> Path:
        return self.locales_path / language / f"{namespace}.json"

    @contextmanager
    def _exclusive(self, language: str, namespace: str) -> Iterator[None]:
        key = (language, namespace)
        with self._lock:
            if key in self._in_flight:
                raise BusyError(
                    f"Operation already in progress for {language}/{namespace}",
                    {"language": language, "namespace": namespace},
                )
            self._in_flight.add(key)
        try:
            yield
        finally:
            with self._lock:
                self._in_flight.discard(key)

    def exists(self, language: str, namespace: str) -> bool:
        return self.get_file_path(language, namespace).is_file()

    def load(self, language: str, namespace: str) -> TranslationDocument:
        """
        Load a translation document.

        Args:
            language: Language code (directory name)
            namespace: Namespace (file name without ``.json``)

        Returns:
            A snapshot of the parsed document

        Raises:
            NotFoundError: If the file doesn't exist
            ParseError: If the file is not a UTF-8 encoded JSON object
            StoreIOError: If the file can't be read
            BusyError: If another operation holds this document
        """
        with self._exclusive(language, namespace):
            file_path = self.get_file_path(language, namespace)
            try:
                stats = file_path.stat()
            except FileNotFoundError:
                self.invalidate(language, namespace)
                raise NotFoundError(
                    f"Translation file not found: {file_path}",
                    {"language": language, "namespace": namespace, "path": str(file_path)},
                )
            except OSError as e:
                raise StoreIOError(f"Failed to stat translation file: {file_path}", {"error": str(e)})

            key = (language, namespace)
            cached = self._cache.get(key)
            if cached and cached[0] == stats.st_mtime_ns and cached[1] == stats.st_size:
                return cached[2].snapshot()

            try:
                raw = file_path.read_text(encoding="utf-8")
            except UnicodeDecodeError as e:
                raise ParseError(
                    f"Invalid UTF-8 in {file_path}",
                    {"error": str(e), "position": e.start},
                )
            except OSError as e:
                raise StoreIOError(f"Failed to load translation file: {file_path}", {"error": str(e)})

            try:
                content = json.loads(raw)
            except json.JSONDecodeError as e:
                raise ParseError(
                    f"Invalid JSON in {file_path}",
                    {"error": str(e), "line": e.lineno, "column": e.colno},
                )
            if not isinstance(content, dict):
                raise ParseError(
                    f"Translation file {file_path} must contain a JSON object",
                    {"found": type(content).__name__},
                )

            document = TranslationDocument(
                language=language,
                namespace=namespace,
                path=str(file_path),
                content=content,
                last_modified=stats.st_mtime,
                size=stats.st_size,
            )
            self._cache[key] = (stats.st_mtime_ns, stats.st_size, document)
            logger.debug("Loaded %s/%s (%d bytes)", language, namespace, stats.st_size)
            return document.snapshot()

    def load_or_empty(self, language: str, namespace: str) -> TranslationDocument:
        """Load a document, treating a missing file as an empty one."""
        try:
            return self.load(language, namespace)
        except NotFoundError:
            return TranslationDocument(
                language=language,
                namespace=namespace,
                path=str(self.get_file_path(language, namespace)),
            )

    def save(
        self,
        language: str,
        namespace: str,
        content: Dict[str, Any],
        make_backup: bool = True,
    ) -> TranslationDocument:
        """
        Write a translation document with recursively sorted keys.

        Args:
            language: Language code
            namespace: Namespace name
            content: Nested translation content
            make_backup: Copy the current file to the backup directory first

        Returns:
            Snapshot of the saved document
        """
        with self._exclusive(language, namespace):
            file_path = self.get_file_path(language, namespace)
            if make_backup:
                self.create_backup(language, namespace)

            sorted_content = sort_keys(clone_tree(content))
            text = serialize_document(sorted_content)
            tmp_path = file_path.with_name(f".{file_path.name}.tmp")
            try:
                file_path.parent.mkdir(parents=True, exist_ok=True)
                tmp_path.write_text(text, encoding="utf-8")
                os.replace(tmp_path, file_path)
                stats = file_path.stat()
            except OSError as e:
                tmp_path.unlink(missing_ok=True)
                raise StoreIOError(f"Failed to save translation file: {file_path}", {"error": str(e)})

            document = TranslationDocument(
                language=language,
                namespace=namespace,
                path=str(file_path),
                content=sorted_content,
                last_modified=stats.st_mtime,
                size=stats.st_size,
            )
            self._cache[(language, namespace)] = (stats.st_mtime_ns, stats.st_size, document)
            logger.info("Saved %s/%s (%d bytes)", language, namespace, stats.st_size)
            return document.snapshot()

    def create_backup(self, language: str, namespace: str) -> Optional[Path]:
        """Copy the current file into a timestamped backup directory."""
        if not self.config.backup_enabled:
            return None

        file_path = self.get_file_path(language, namespace)
        if not file_path.exists():
            return None

        backup_file = self.backup_path / _timestamp() / language / f"{namespace}.json"
        try:
            backup_file.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(file_path, backup_file)
        except OSError as e:
            raise StoreIOError(f"Failed to create backup for {file_path}", {"error": str(e)})

        logger.debug("Backed up %s to %s", file_path, backup_file)
        return backup_file

    def create_checkpoint(self, label: str = "checkpoint") -> Optional[Path]:
        """Copy every configured file that exists into one backup directory."""
        if not self.config.backup_enabled:
            return None

        checkpoint_dir = self.backup_path / f"{_timestamp()}-{label}"
        copied = 0
        try:
            for language in self.config.languages:
                for namespace in self.config.namespaces:
                    file_path = self.get_file_path(language, namespace)
                    if not file_path.exists():
                        continue
                    target = checkpoint_dir / language / f"{namespace}.json"
                    target.parent.mkdir(parents=True, exist_ok=True)
                    shutil.copy2(file_path, target)
                    copied += 1
        except OSError as e:
            raise StoreIOError(f"Failed to create checkpoint {checkpoint_dir}", {"error": str(e)})

        logger.info("Checkpoint %s: %d files", checkpoint_dir, copied)
        return checkpoint_dir

    def load_all(
        self,
        languages: Optional[List[str]] = None,
        namespaces: Optional[List[str]] = None,
    ) -> Tuple[List[TranslationDocument], Dict[str, str]]:
        """
        Load every ``language x namespace`` file, skipping failures.

        Returns:
            Tuple of (loaded documents, ``{"lang/ns": error message}``)
        """
        documents = []
        failures = {}
        for language in languages or self.config.languages:
            for namespace in namespaces or self.config.namespaces:
                try:
                    documents.append(self.load(language, namespace))
                except (NotFoundError, ParseError, StoreIOError) as e:
                    logger.warning("Failed to load %s/%s.json: %s", language, namespace, e)
                    failures[f"{language}/{namespace}"] = str(e)
        return documents, failures

    def list_files(
        self, language: Optional[str] = None, namespace: Optional[str] = None
    ) -> List[TranslationDocument]:
        documents, _ = self.load_all(
            [language] if language else None,
            [namespace] if namespace else None,
        )
        return documents

    def ensure_directory_structure(self) -> List[str]:
        """Create language directories and ``{}`` files for missing namespaces."""
        created = []
        try:
            self.locales_path.mkdir(parents=True, exist_ok=True)
            for language in self.config.languages:
                lang_dir = self.locales_path / language
                lang_dir.mkdir(parents=True, exist_ok=True)
                for namespace in self.config.namespaces:
                    file_path = lang_dir / f"{namespace}.json"
                    if not file_path.exists():
                        file_path.write_text("{}\n", encoding="utf-8")
                        created.append(f"{language}/{namespace}")
            if self.config.backup_enabled:
                self.backup_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreIOError("Failed to ensure directory structure", {"error": str(e)})

        if created:
            logger.info("Created %d empty translation files", len(created))
        return created

    def file_stats(self) -> Dict[str, Any]:
        documents, failures = self.load_all()
        by_language: Dict[str, int] = {}
        by_namespace: Dict[str, int] = {}
        for doc in documents:
            by_language[doc.language] = by_language.get(doc.language, 0) + 1
            by_namespace[doc.namespace] = by_namespace.get(doc.namespace, 0) + 1

        last_modified = max((doc.last_modified for doc in documents), default=None)
        return {
            "total_files": len(documents),
            "total_size": sum(doc.size for doc in documents),
            "last_modified": (
                datetime.fromtimestamp(last_modified).isoformat() if last_modified else None
            ),
            "files_by_language": by_language,
            "files_by_namespace": by_namespace,
            "unreadable_files": failures,
        }

    def invalidate(self, language: str, namespace: str) -> None:
        """Drop the cache entry after an external change."""
        self._cache.pop((language, namespace), None)

    def clear_cache(self) -> None:
        self._cache.clear()

    def cache_stats(self) -> Dict[str, Any]:
        keys = [f"{language}:{namespace}" for language, namespace in self._cache]
        return {"size": len(keys), "keys": keys}
