"""
Unit tests for the translation file store
"""

import os
import pytest

from i18next_mcp.config import Config
from i18next_mcp.core.store import TranslationStore, serialize_document
from i18next_mcp.errors import BusyError, NotFoundError, ParseError


class TestLoad:
    """Test cases for TranslationStore.load"""

    def test_load_existing_file(self, store: TranslationStore, locales):
        document = store.load("en", "common")

        assert document.language == "en"
        assert document.namespace == "common"
        assert document.file_key == "en/common"
        assert document.content["buttons"]["save"] == "Save"
        assert document.size > 0

    def test_missing_file_raises_not_found(self, store: TranslationStore):
        with pytest.raises(NotFoundError) as exc_info:
            store.load("fr", "common")

        assert exc_info.value.code == "NOT_FOUND"

    def test_invalid_json_raises_parse_error(self, store: TranslationStore, write_translation):
        write_translation("en", "common", '{"a": "x",}')

        with pytest.raises(ParseError) as exc_info:
            store.load("en", "common")

        assert "line" in exc_info.value.details

    def test_invalid_utf8_raises_parse_error(self, store: TranslationStore, write_translation):
        write_translation("en", "common", b'{"a": "\xff\xfe"}')

        with pytest.raises(ParseError) as exc_info:
            store.load("en", "common")

        assert exc_info.value.code == "PARSE_ERROR"
        assert exc_info.value.details["position"] == 7

    def test_non_object_root_raises_parse_error(self, store: TranslationStore, write_translation):
        write_translation("en", "common", '["a", "b"]')

        with pytest.raises(ParseError):
            store.load("en", "common")

    def test_load_returns_independent_snapshots(self, store: TranslationStore, locales):
        first = store.load("en", "common")
        first.content["buttons"]["save"] = "changed"

        second = store.load("en", "common")

        assert second.content["buttons"]["save"] == "Save"

    def test_external_change_is_picked_up(self, store: TranslationStore, write_translation):
        path = write_translation("en", "common", {"a": "x"})
        store.load("en", "common")

        write_translation("en", "common", {"a": "changed value"})
        stat = path.stat()
        os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))

        assert store.load("en", "common").content == {"a": "changed value"}

    def test_load_or_empty_for_missing_file(self, store: TranslationStore):
        document = store.load_or_empty("fr", "common")

        assert document.content == {}
        assert document.path.endswith(os.path.join("fr", "common.json"))

    def test_overlapping_operation_is_busy(self, store: TranslationStore, locales):
        with store._exclusive("en", "common"):
            with pytest.raises(BusyError):
                store.load("en", "common")

        # Released afterwards
        assert store.load("en", "common").content


class TestSave:
    """Test cases for TranslationStore.save"""

    def test_save_sorts_keys_recursively(self, store: TranslationStore):
        store.save("en", "common", {"b": {"z": "1", "a": "2"}, "a": "x"})

        raw = store.get_file_path("en", "common").read_text(encoding="utf-8")
        assert raw == '{\n  "a": "x",\n  "b": {\n    "a": "2",\n    "z": "1"\n  }\n}\n'

    def test_save_is_a_fixed_point(self, store: TranslationStore):
        store.save("en", "common", {"z": "last", "m": {"y": "2", "b": "1"}, "a": "first"})
        path = store.get_file_path("en", "common")
        first = path.read_bytes()

        store.save("en", "common", store.load("en", "common").content)

        assert path.read_bytes() == first
        assert first.decode("utf-8") == serialize_document(store.load("en", "common").content)

    def test_save_keeps_non_ascii(self, store: TranslationStore):
        store.save("es", "common", {"title": "Configuración"})

        raw = store.get_file_path("es", "common").read_text(encoding="utf-8")
        assert "Configuración" in raw

    def test_save_creates_missing_directories(self, store: TranslationStore):
        store.save("pt-BR", "common", {"a": "x"})

        assert store.exists("pt-BR", "common")

    def test_save_creates_backup_of_existing_file(self, store: TranslationStore, config: Config, locales):
        store.save("en", "common", {"a": "x"})

        backups = list(config.resolved_backup_path().glob("*/en/common.json"))
        assert len(backups) == 1
        assert "Hello {{name}}" in backups[0].read_text(encoding="utf-8")

    def test_backup_disabled(self, config: Config, locales):
        config.backup_enabled = False
        store = TranslationStore(config)

        store.save("en", "common", {"a": "x"})

        assert not config.resolved_backup_path().exists()

    def test_no_temp_file_left_behind(self, store: TranslationStore):
        store.save("en", "common", {"a": "x"})

        leftovers = [p.name for p in store.get_file_path("en", "common").parent.iterdir()]
        assert leftovers == ["common.json"]


class TestProjectFiles:
    """Test cases for multi-file helpers"""

    def test_load_all_reports_failures(self, store: TranslationStore, write_translation):
        write_translation("en", "common", {"a": "x"})
        write_translation("es", "common", "not json")

        documents, failures = store.load_all()

        assert [doc.file_key for doc in documents] == ["en/common"]
        assert list(failures) == ["es/common"]

    def test_file_stats(self, store: TranslationStore, locales):
        stats = store.file_stats()

        assert stats["total_files"] == 2
        assert stats["files_by_language"] == {"en": 1, "es": 1}
        assert stats["last_modified"] is not None

    def test_ensure_directory_structure(self, store: TranslationStore, write_translation):
        write_translation("en", "common", {"a": "x"})

        created = store.ensure_directory_structure()

        assert created == ["es/common"]
        assert store.load("es", "common").content == {}

    def test_checkpoint_copies_existing_files(self, store: TranslationStore, config: Config, locales):
        checkpoint = store.create_checkpoint("test")

        assert checkpoint is not None
        assert (checkpoint / "en" / "common.json").exists()
        assert (checkpoint / "es" / "common.json").exists()

    def test_cache_stats(self, store: TranslationStore, locales):
        store.load("en", "common")

        assert store.cache_stats() == {"size": 1, "keys": ["en:common"]}
        store.clear_cache()
        assert store.cache_stats()["size"] == 0

    def test_invalidate_drops_one_entry(self, store: TranslationStore, locales):
        store.load("en", "common")
        store.load("es", "common")

        store.invalidate("en", "common")

        assert store.cache_stats() == {"size": 1, "keys": ["es:common"]}

    def test_deleted_file_leaves_no_cache_entry(self, store: TranslationStore, locales, config: Config):
        store.load("en", "common")
        (config.resolved_locales_path() / "en" / "common.json").unlink()

        with pytest.raises(NotFoundError):
            store.load("en", "common")

        assert store.cache_stats()["size"] == 0
