"""Tests for the Typer CLI."""

import asyncio
import json

import pytest
from typer.testing import CliRunner

from sceneit_engine.cli import app
from sceneit_engine.storage.schemas import EventCreate, TransformationCreate

runner = CliRunner()


@pytest.fixture
def db_env(tmp_path, monkeypatch):
    monkeypatch.setenv("SCENEIT_DB_URL", f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}")
    monkeypatch.setenv("SCENEIT_STORAGE_BACKEND", "sql")
    monkeypatch.setenv("SCENEIT_SECRET_KEY", "test-secret")

    from sceneit_engine.common.config import get_settings
    from sceneit_engine.deps import reset_singletons
    get_settings.cache_clear()
    reset_singletons()
    yield
    get_settings.cache_clear()
    reset_singletons()


def _seed():
    from sceneit_engine.deps import get_storage, reset_singletons

    async def _run():
        storage = get_storage()
        await storage.init()
        await storage.append_transformation(TransformationCreate(
            session_id="s1", processing_time_ms=3000, opt_in=True, style_key="pure-form",
        ))
        await storage.append_events([
            EventCreate(session_id="s1", event_type="page_view"),
            EventCreate(session_id="s1", event_type="download"),
        ])
        await storage.close()

    asyncio.run(_run())
    reset_singletons()


class TestCLI:
    def test_styles(self):
        result = runner.invoke(app, ["styles"])
        assert result.exit_code == 0
        assert "coastal-modern" in result.output

    def test_init_db(self, db_env, tmp_path):
        result = runner.invoke(app, ["init-db"])
        assert result.exit_code == 0
        assert "Storage ready" in result.output
        assert (tmp_path / "cli.db").exists()

    def test_stats(self, db_env):
        _seed()
        result = runner.invoke(app, ["stats"])
        assert result.exit_code == 0
        assert "Transformations" in result.output
        assert "Funnel: 1 views" in result.output

    def test_export_json(self, db_env):
        _seed()
        result = runner.invoke(app, ["export", "events"])
        assert result.exit_code == 0
        rows = json.loads(result.output)
        assert sorted(r["event_type"] for r in rows) == ["download", "page_view"]

    def test_export_csv_to_file(self, db_env, tmp_path):
        _seed()
        out = tmp_path / "sessions.csv"
        result = runner.invoke(app, ["export", "sessions", "--format", "csv", "-o", str(out)])
        assert result.exit_code == 0
        lines = out.read_text().splitlines()
        assert lines[0] == "session_id,first_seen,last_seen,event_count,event_types"
        assert lines[1].startswith("s1,")

    def test_export_unknown_type(self, db_env):
        result = runner.invoke(app, ["export", "users"])
        assert result.exit_code == 1

    def test_export_unknown_format(self, db_env):
        result = runner.invoke(app, ["export", "events", "--format", "xml"])
        assert result.exit_code == 1

    def test_health_unreachable(self):
        result = runner.invoke(app, ["health", "--url", "http://127.0.0.1:9"])
        assert result.exit_code == 1
