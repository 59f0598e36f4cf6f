"""
Integration tests for the command-line interface
"""

import json
import pytest
from pathlib import Path
from click.testing import CliRunner

from i18next_mcp.cli import cli


@pytest.fixture
def config_path(tmp_path: Path, monkeypatch) -> str:
    """Write an i18next-mcp.json pointing at the test locales."""
    for name in ("I18N_PROJECT_ROOT", "I18N_LOCALES_DIR", "I18N_LOCALES_PATH", "I18N_LANGUAGES", "I18N_NAMESPACES"):
        monkeypatch.delenv(name, raising=False)
    path = tmp_path / "i18next-mcp.json"
    path.write_text(json.dumps({
        "projectRoot": str(tmp_path),
        "localesPath": "locales",
        "languages": ["en", "es"],
        "namespaces": ["common"],
        "defaultLanguage": "en",
        "backup": {"path": ".backups"},
    }), encoding="utf-8")
    return str(path)


@pytest.fixture
def run(config_path: str):
    runner = CliRunner()

    def invoke(*args: str):
        return runner.invoke(cli, ["--config", config_path, "--log-level", "WARNING", *args])

    return invoke


class TestCli:
    """Test cases for CLI commands"""

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_info(self, run, locales):
        result = run("info")

        assert result.exit_code == 0
        assert "Languages" in result.output
        assert "en, es" in result.output

    def test_health(self, run, locales):
        result = run("health")

        assert result.exit_code == 0
        assert "Health Summary" in result.output

    def test_health_fail_under(self, run, write_translation):
        write_translation("en", "common", {"greeting": "Hi {{name"})
        write_translation("es", "common", {"greeting": "Hola {{name}}"})

        result = run("health", "--fail-under", "100")

        assert result.exit_code == 1

    def test_coverage(self, run, locales):
        result = run("coverage")

        assert result.exit_code == 0
        assert "100%" in result.output

    def test_missing(self, run, write_translation):
        write_translation("en", "common", {"a": "A", "b": "B"})
        write_translation("es", "common", {"a": "A-es"})

        result = run("missing")

        assert result.exit_code == 0
        assert "es/common:" in result.output
        assert "1 missing" in result.output

    def test_sync(self, run, write_translation, read_translation):
        write_translation("en", "common", {"a": "A", "b": "B"})
        write_translation("es", "common", {"a": "A-es"})

        result = run("sync", "--empty")

        assert result.exit_code == 0
        assert read_translation("es", "common") == {"a": "A-es", "b": ""}

    def test_sync_dry_run(self, run, write_translation, read_translation):
        write_translation("en", "common", {"a": "A", "b": "B"})
        write_translation("es", "common", {"a": "A-es"})

        result = run("sync", "--dry-run")

        assert result.exit_code == 0
        assert "Dry run" in result.output
        assert read_translation("es", "common") == {"a": "A-es"}

    def test_export_csv(self, run, locales, tmp_path: Path):
        output = tmp_path / "out.csv"

        result = run("export", "--format", "csv", "--output", str(output))

        assert result.exit_code == 0
        assert output.read_text(encoding="utf-8").startswith("key,en.common,es.common")
