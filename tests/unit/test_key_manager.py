"""
Unit tests for key management and sync
"""

import pytest

from i18next_mcp.core.store import TranslationStore
from i18next_mcp.errors import StoreIOError
from i18next_mcp.management.key_manager import KeyManager
from i18next_mcp.models.operations import KeyAddition, KeyRemoval, KeyRename


@pytest.fixture
def failing_es_save(store: TranslationStore, monkeypatch):
    """Make every save of es/common fail with an I/O error."""
    original_save = store.save

    def save(language, namespace, content, **kwargs):
        if (language, namespace) == ("es", "common"):
            raise StoreIOError("Failed to write es/common.json", {"error": "disk full"})
        return original_save(language, namespace, content, **kwargs)

    monkeypatch.setattr(store, "save", save)


class TestAddKey:
    """Test cases for KeyManager.add_key"""

    def test_add_to_all_targets(self, key_manager: KeyManager, locales, read_translation):
        result = key_manager.add_key(KeyAddition(key="dialog.title", default_value="Dialog"))

        assert result.success
        assert len(result.operations) == 2
        assert read_translation("en", "common")["dialog"] == {"title": "Dialog"}
        assert read_translation("es", "common")["dialog"] == {"title": ""}

    def test_add_with_per_language_values(self, key_manager: KeyManager, locales, read_translation):
        result = key_manager.add_key(
            KeyAddition(key="dialog.title", values={"en": "Dialog", "es": "Diálogo"})
        )

        assert result.success
        assert read_translation("es", "common")["dialog"]["title"] == "Diálogo"

    def test_add_creates_missing_file(self, key_manager: KeyManager, locales, read_translation):
        result = key_manager.add_key(KeyAddition(key="title", value="Titre", languages=["fr"]))

        assert result.success
        assert read_translation("fr", "common") == {"title": "Titre"}

    def test_conflict_blocks_every_write(self, key_manager: KeyManager, locales, write_translation, config):
        write_translation("fr", "common", {"dialog": {"title": "Dialogue"}})
        en_path = config.resolved_locales_path() / "en" / "common.json"
        es_path = config.resolved_locales_path() / "es" / "common.json"
        en_before = en_path.read_bytes()
        es_before = es_path.read_bytes()

        result = key_manager.add_key(
            KeyAddition(key="dialog.title", value="Dialog", languages=["en", "es", "fr"])
        )

        assert not result.success
        assert result.operations == []
        assert [(c.language, c.existing_value) for c in result.conflicts] == [("fr", "Dialogue")]
        assert en_path.read_bytes() == en_before
        assert es_path.read_bytes() == es_before

    def test_overwrite(self, key_manager: KeyManager, locales, read_translation):
        result = key_manager.add_key(
            KeyAddition(key="buttons.save", values={"en": "Store", "es": "Almacenar"}, overwrite=True)
        )

        assert result.success
        assert read_translation("en", "common")["buttons"]["save"] == "Store"
        assert read_translation("es", "common")["buttons"]["save"] == "Almacenar"

    def test_undecodable_target_is_reported(
        self, key_manager: KeyManager, locales, write_translation, read_translation
    ):
        write_translation("es", "common", b'{"a": "\xff\xfe"}')

        result = key_manager.add_key(KeyAddition(key="dialog.title", default_value="Dialog"))

        assert not result.success
        assert [op.language for op in result.operations] == ["en"]
        assert len(result.errors) == 1
        assert "es/common" in result.errors[0]
        assert read_translation("en", "common")["dialog"] == {"title": "Dialog"}


class TestRemoveKey:
    """Test cases for KeyManager.remove_key"""

    def test_remove_prunes_empty_parents(self, key_manager: KeyManager, write_translation, read_translation):
        write_translation("en", "common", {"a": {"b": "x"}, "c": "y"})
        write_translation("es", "common", {"a": {"b": "x-es"}, "c": "y-es"})

        result = key_manager.remove_key(KeyRemoval(key="a.b"))

        assert result.success
        assert len(result.operations) == 2
        assert read_translation("en", "common") == {"c": "y"}

    def test_remove_absent_key_is_noop(self, key_manager: KeyManager, locales):
        result = key_manager.remove_key(KeyRemoval(key="does.not.exist"))

        assert result.success
        assert result.operations == []
        assert result.errors == []

    def test_remove_skips_missing_files(self, key_manager: KeyManager, locales):
        result = key_manager.remove_key(KeyRemoval(key="greeting", languages=["en", "fr"]))

        assert result.success
        assert [op.language for op in result.operations] == ["en"]

    def test_save_failure_continues_with_other_files(
        self, key_manager: KeyManager, locales, failing_es_save, read_translation
    ):
        result = key_manager.remove_key(KeyRemoval(key="buttons.cancel"))

        assert not result.success
        assert [op.language for op in result.operations] == ["en"]
        assert len(result.errors) == 1
        assert "es/common" in result.errors[0]
        assert "cancel" not in read_translation("en", "common")["buttons"]
        assert read_translation("es", "common")["buttons"]["cancel"] == "Cancelar"


class TestRenameKey:
    """Test cases for KeyManager.rename_key"""

    def test_rename_moves_value(self, key_manager: KeyManager, locales, read_translation):
        result = key_manager.rename_key(KeyRename(old_key="buttons.save", new_key="actions.save"))

        assert result.success
        es = read_translation("es", "common")
        assert es["actions"] == {"save": "Guardar"}
        assert "save" not in es["buttons"]

    def test_rename_prunes_old_parent(self, key_manager: KeyManager, write_translation, read_translation):
        write_translation("en", "common", {"old": {"title": "Title"}})
        write_translation("es", "common", {"old": {"title": "Título"}})

        key_manager.rename_key(KeyRename(old_key="old.title", new_key="new.title"))

        assert read_translation("en", "common") == {"new": {"title": "Title"}}

    def test_rename_absent_old_key(self, key_manager: KeyManager, write_translation, read_translation):
        write_translation("en", "common", {"a": "x"})
        write_translation("es", "common", {"b": "y"})

        result = key_manager.rename_key(KeyRename(old_key="a", new_key="z"))

        assert result.success
        assert [op.language for op in result.operations] == ["en"]
        assert result.errors == ['Key "a" not found in es/common']
        assert read_translation("es", "common") == {"b": "y"}

    def test_rename_conflict(self, key_manager: KeyManager, locales, read_translation):
        result = key_manager.rename_key(KeyRename(old_key="buttons.save", new_key="buttons.cancel"))

        assert not result.success
        assert len(result.conflicts) == 2
        assert read_translation("en", "common")["buttons"]["save"] == "Save"

    def test_save_failure_continues_with_other_files(
        self, key_manager: KeyManager, locales, failing_es_save, read_translation
    ):
        result = key_manager.rename_key(KeyRename(old_key="greeting", new_key="welcome"))

        assert not result.success
        assert [op.language for op in result.operations] == ["en"]
        assert len(result.errors) == 1
        assert read_translation("en", "common")["welcome"] == "Hello {{name}}"
        assert read_translation("es", "common")["greeting"] == "Hola {{name}}"


class TestSyncMissingKeys:
    """Test cases for KeyManager.sync_missing_keys"""

    def test_sync_with_empty_values(self, key_manager: KeyManager, write_translation, read_translation):
        write_translation("en", "common", {"a": "A", "b": "B"})
        write_translation("es", "common", {"a": "A-es"})

        report = key_manager.sync_missing_keys(copy_values=False)

        assert report.success
        assert report.operations[0].missing_keys == ["b"]
        assert report.operations[0].action == "sync"
        assert read_translation("es", "common") == {"a": "A-es", "b": ""}

    def test_sync_copies_source_values(self, key_manager: KeyManager, write_translation, read_translation):
        write_translation("en", "common", {"a": "A", "b": "B"})
        write_translation("es", "common", {"a": "A-es"})

        key_manager.sync_missing_keys()

        assert read_translation("es", "common") == {"a": "A-es", "b": "B"}

    def test_sync_placeholder(self, key_manager: KeyManager, write_translation, read_translation):
        write_translation("en", "common", {"a": "A", "b": "B"})
        write_translation("es", "common", {})

        key_manager.sync_missing_keys(placeholder="[TODO]")

        assert read_translation("es", "common") == {"a": "[TODO]", "b": "[TODO]"}

    def test_dry_run_writes_nothing(self, key_manager: KeyManager, write_translation, read_translation):
        write_translation("en", "common", {"a": "A", "b": "B"})
        write_translation("es", "common", {"a": "A-es"})

        report = key_manager.sync_missing_keys(dry_run=True)

        assert report.dry_run
        assert report.operations[0].action == "preview"
        assert report.total_keys == 1
        assert read_translation("es", "common") == {"a": "A-es"}

    def test_missing_target_file_is_created(self, key_manager: KeyManager, write_translation, read_translation):
        write_translation("en", "common", {"a": {"b": "B"}})

        report = key_manager.sync_missing_keys(copy_values=False)

        assert report.operations[0].action == "create_file"
        assert read_translation("es", "common") == {"a": {"b": ""}}

    def test_unparseable_target_is_reported(self, key_manager: KeyManager, write_translation, config):
        write_translation("en", "common", {"a": "A"})
        es_path = write_translation("es", "common", "{oops")

        report = key_manager.sync_missing_keys()

        assert not report.success
        assert report.operations == []
        assert es_path.read_text(encoding="utf-8") == "{oops"

    def test_report_summary(self, key_manager: KeyManager, write_translation):
        write_translation("en", "common", {"a": "A", "b": "B"})
        write_translation("es", "common", {})

        data = key_manager.sync_missing_keys(dry_run=True).to_dict()

        assert data["summary"] == {
            "total_operations": 1,
            "total_keys_to_sync": 2,
            "target_languages": 1,
            "namespaces": 1,
        }


class TestSyncFromSource:
    """Test cases for KeyManager.sync_from_source"""

    def test_existing_keys_are_not_overwritten(self, key_manager: KeyManager, write_translation, read_translation):
        write_translation("en", "common", {"a": "A", "b": "B"})
        write_translation("es", "common", {"a": "A-es"})

        result = key_manager.sync_from_source(["a", "b"], ["es"])

        assert result.success
        assert [op.key for op in result.operations] == ["b"]
        assert [c.key for c in result.conflicts] == ["a"]
        assert read_translation("es", "common") == {"a": "A-es", "b": ""}

    def test_key_missing_from_source(self, key_manager: KeyManager, locales):
        result = key_manager.sync_from_source(["nope"], ["es"])

        assert not result.success
        assert "nope" in result.errors[0]


class TestSyncNamespaces:
    """Test cases for KeyManager.sync_keys"""

    def test_copy_keys_between_namespaces(self, key_manager: KeyManager, write_translation, read_translation):
        write_translation("en", "common", {"a": "A", "b": "B"})
        write_translation("en", "auth", {"a": "Auth A"})

        result = key_manager.sync_keys("common", ["auth"], copy_values=True)

        assert result.success
        assert read_translation("en", "auth") == {"a": "Auth A", "b": "B"}

    def test_missing_source_namespace(self, key_manager: KeyManager):
        result = key_manager.sync_keys("nowhere", ["auth"])

        assert not result.success
        assert result.errors == ['Source namespace "nowhere" not found']


class TestBatchOperation:
    """Test cases for KeyManager.batch_operation"""

    def test_runs_in_order(self, key_manager: KeyManager, locales, read_translation):
        result = key_manager.batch_operation([
            KeyAddition(key="temp.title", value="T"),
            KeyRename(old_key="temp.title", new_key="final.title"),
            KeyRemoval(key="greeting"),
        ])

        assert result.success
        en = read_translation("en", "common")
        assert en["final"] == {"title": "T"}
        assert "temp" not in en
        assert "greeting" not in en

    def test_stops_on_first_failure(self, key_manager: KeyManager, locales, read_translation):
        result = key_manager.batch_operation([
            KeyAddition(key="greeting", value="dup"),
            KeyAddition(key="never.added", value="x"),
        ])

        assert not result.success
        assert "never" not in read_translation("en", "common")

    def test_continue_on_error(self, key_manager: KeyManager, locales, read_translation):
        result = key_manager.batch_operation(
            [
                KeyAddition(key="greeting", value="dup"),
                KeyAddition(key="added.anyway", value="x"),
            ],
            continue_on_error=True,
        )

        assert not result.success
        assert read_translation("en", "common")["added"] == {"anyway": "x"}

    def test_checkpoint(self, key_manager: KeyManager, locales, config):
        key_manager.batch_operation([KeyRemoval(key="greeting")], create_backup=True)

        checkpoints = list(config.resolved_backup_path().glob("*-batch-operation"))
        assert len(checkpoints) == 1
