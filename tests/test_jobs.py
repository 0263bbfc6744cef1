"""Tests for the job entry points.

Jobs run against the SQLite mirror with paths under tmp_path.
"""

import json
from datetime import datetime, timezone

import pytest

from protostats.db import repo
from protostats.db.session import get_db_session, init_db
from protostats.jobs import appstore, audit, blog_views, pull_stats
from protostats.models.types import AppInfo, DisplayStats, RawStats, StatsSnapshot


@pytest.fixture
def env(tmp_path):
    """Environment for a job run against a seeded SQLite mirror."""
    db_path = tmp_path / "mirror.db"
    init_db(db_path)
    with get_db_session(db_path) as session:
        repo.put_document(session, "events", "e1", {"category": "quiz", "action": "quiz_completed", "userId": "a"})
        repo.put_document(session, "events", "e2", {"category": "quiz", "action": "quiz_completed", "userId": "UQLMSLQZ"})
        repo.put_document(session, "protocol_uploads", "p1", {"status": "success", "userId": "b"})

    return {
        "PROTOSTATS_STORE": "sqlite",
        "PROTOSTATS_DB_PATH": str(db_path),
        "PROTOSTATS_OUTPUT_PATH": str(tmp_path / "out" / "firestore-stats.json"),
    }


class TestPullStats:
    """Tests for the snapshot job."""

    def test_writes_snapshot(self, env, tmp_path, capsys):
        assert pull_stats.main(env) == 0

        data = json.loads((tmp_path / "out" / "firestore-stats.json").read_text())
        assert set(data) == {"generatedAt", "raw", "display", "topProtocols"}
        assert data["raw"]["totalUsers"] == 2
        assert data["raw"]["appStoreDownloads"] == 124
        assert data["raw"]["quizzesGenerated"] == 1
        assert data["display"]["quizzesGenerated"] == "2,500+"

        out = capsys.readouterr().out
        assert "Total Users: 2" in out
        assert "Saved to:" in out

    def test_missing_credentials(self, tmp_path):
        env = {
            "PROTOSTATS_STORE": "firestore",
            "GOOGLE_APPLICATION_CREDENTIALS": str(tmp_path / "missing.json"),
            "PROTOSTATS_OUTPUT_PATH": str(tmp_path / "stats.json"),
        }

        assert pull_stats.main(env) == 1
        assert not (tmp_path / "stats.json").exists()

    def test_bad_configuration(self, env):
        env["PROTOSTATS_WINDOW_DAYS"] = "zero"
        assert pull_stats.main(env) == 1

    def test_unknown_event_schema(self, env, tmp_path):
        env["PROTOSTATS_EVENT_SCHEMA"] = "v9"
        assert pull_stats.main(env) == 1
        assert not (tmp_path / "out" / "firestore-stats.json").exists()

    def test_custom_rules(self, env, tmp_path):
        rules_path = tmp_path / "rules.yaml"
        rules_path.write_text("algorithm_quizzes:\n  - quiz:quiz_completed\n")
        env["PROTOSTATS_RULES_PATH"] = str(rules_path)

        assert pull_stats.main(env) == 0

        data = json.loads((tmp_path / "out" / "firestore-stats.json").read_text())
        assert data["raw"]["algorithmQuizzes"] == 1
        assert data["raw"]["quizzesGenerated"] is None

    def test_event_months_limit_monthly_reads(self, env, tmp_path):
        db_path = env["PROTOSTATS_DB_PATH"]
        with get_db_session(db_path) as session:
            for doc_id in ["2025-10_x", "2025-11_x", "2025-11_y"]:
                repo.put_document(session, "events", doc_id, {"category": "quiz", "action": "quiz_completed", "userId": doc_id})
        env["PROTOSTATS_EVENT_SCHEMA"] = "monthly"
        env["PROTOSTATS_EVENT_MONTHS"] = "2025-11"

        assert pull_stats.main(env) == 0

        data = json.loads((tmp_path / "out" / "firestore-stats.json").read_text())
        assert data["raw"]["quizzesGenerated"] == 2

    def test_malformed_event_month(self, env):
        env["PROTOSTATS_EVENT_SCHEMA"] = "monthly"
        env["PROTOSTATS_EVENT_MONTHS"] = "November"
        assert pull_stats.main(env) == 1

    def test_summary_lines_show_missing_metrics(self):
        snapshot = StatsSnapshot(
            generated_at=datetime(2025, 11, 30, tzinfo=timezone.utc),
            raw=RawStats(),
            display=DisplayStats(),
            top_protocols=[],
        )

        lines = pull_stats.summary_lines(snapshot, window_days=7)

        assert "Active Users (7d): N/A" in lines
        assert "Top Protocols: N/A" in lines


class TestAuditJob:
    def test_prints_report(self, env, capsys):
        assert audit.main(env) == 0
        assert "=== UNIQUE USERS ===" in capsys.readouterr().out

    def test_missing_credentials(self, tmp_path):
        env = {"GOOGLE_APPLICATION_CREDENTIALS": str(tmp_path / "missing.json")}
        assert audit.main(env) == 1


class TestBlogViewsJob:
    def test_prints_table(self, monkeypatch, capsys):
        monkeypatch.setattr(blog_views, "fetch_blog_views", lambda url: {"blog-index": 3})

        assert blog_views.main({}) == 0
        assert "Blog Index Page" in capsys.readouterr().out

    def test_fetch_failure(self, monkeypatch):
        def broken(url):
            raise ConnectionError("offline")

        monkeypatch.setattr(blog_views, "fetch_blog_views", broken)

        assert blog_views.main({}) == 1


class TestAppStoreJob:
    def test_missing_key_file(self, tmp_path):
        env = {"APP_STORE_PRIVATE_KEY_PATH": str(tmp_path / "AuthKey_X.p8")}
        assert appstore.main(env) == 1

    def test_prints_json(self, monkeypatch, capsys):
        info = AppInfo(app_name="ProtoQuiz", bundle_id="com.ems.protoquiz", version_count=4)
        monkeypatch.setattr(appstore, "fetch_appstore_stats", lambda settings: info)

        assert appstore.main({}) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["appName"] == "ProtoQuiz"
        assert data["versionCount"] == 4
