"""Tests for the adr-sync command line."""

import json

import pytest

from adr_sync import cli
from adr_sync.core.client import ConfluenceAPIError
from helpers import FakeConfluenceClient, page_dict, status_body


@pytest.fixture
def fake(monkeypatch):
    client = FakeConfluenceClient(
        pages=[
            page_dict("1003", "ADR-003: Use X", status_body("Draft")),
            page_dict("1004", "ADR-004: Reserved Range", status_body("Accepted")),
            page_dict("1005", "ADR-005: Team rituals", status_body("Onboarding")),
        ]
    )
    monkeypatch.setattr(cli, "ConfluenceClient", lambda config: client)
    return client


@pytest.fixture(autouse=True)
def environment(tmp_path, monkeypatch):
    """Credentials in env, no config files, logging left alone."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("ADR_SYNC_CONFIG", raising=False)
    monkeypatch.delenv("ADR_PAGE_SIZE", raising=False)
    monkeypatch.setattr(cli, "SECRETS_ENV_FILE", tmp_path / "missing.env")
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)
    monkeypatch.setenv("ATLASSIAN_SITE", "example.atlassian.net")
    monkeypatch.setenv("ATLASSIAN_EMAIL", "dev@example.com")
    monkeypatch.setenv("ATLASSIAN_API_TOKEN", "secret-token")
    monkeypatch.setenv("ADR_SPACE_KEY", "CE")
    monkeypatch.setenv("ADR_PARENT_PAGE_ID", "31859277900")


class TestSync:
    def test_sync_prints_progress_and_tally(self, fake, capsys):
        assert cli.main(["sync"]) == cli.EXIT_OK

        out = capsys.readouterr().out
        lines = out.splitlines()
        assert lines[0] == "Syncing ADR status indicators..."
        assert lines[1] == "Found 2 ADR pages"
        assert "ADR-003: Use X  ->  Draft" in out
        assert 'non-standard status "Onboarding", skipping' in out
        assert "Reserved Range" not in out
        assert "Updated: 1" in out
        assert fake.stored("1003", "emoji-title-published")["value"] == "draft"

    def test_second_sync_is_unchanged(self, fake, capsys):
        cli.main(["sync"])
        capsys.readouterr()
        fake.writes.clear()

        assert cli.main(["sync"]) == cli.EXIT_OK

        assert "(unchanged)" in capsys.readouterr().out
        assert fake.writes == []

    def test_dry_run_writes_nothing(self, fake, capsys):
        assert cli.main(["sync", "--dry-run"]) == cli.EXIT_OK

        out = capsys.readouterr().out
        assert out.startswith("DRY RUN")
        assert "Would update: 1" in out
        assert fake.writes == []

    def test_json_output(self, fake, capsys):
        assert cli.main(["sync", "--format", "json"]) == cli.EXIT_OK

        data = json.loads(capsys.readouterr().out)
        assert data["counts"]["updated"] == 1
        assert data["counts"]["skipped_non_standard"] == 1

    def test_partial_exits_2(self, fake, capsys):
        fake.failures[("create_property", "emoji-title-draft")] = (
            ConfluenceAPIError(500, "boom")
        )

        assert cli.main(["sync"]) == cli.EXIT_INCOMPLETE
        assert "partial update" in capsys.readouterr().out

    def test_collector_failure_exits_1_without_output(self, fake, capsys):
        fake.failures[("search_content", None)] = ConfluenceAPIError(
            401, "Unauthorized"
        )

        assert cli.main(["sync"]) == cli.EXIT_FATAL

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "ERROR: API error (401): Unauthorized" in captured.err


class TestConfiguration:
    def test_missing_credentials(self, fake, monkeypatch, capsys):
        monkeypatch.delenv("ATLASSIAN_API_TOKEN")

        assert cli.main(["sync"]) == cli.EXIT_FATAL

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Atlassian API token not found" in captured.err

    def test_missing_parent(self, fake, monkeypatch, capsys):
        monkeypatch.delenv("ADR_PARENT_PAGE_ID")
        assert cli.main(["sync"]) == cli.EXIT_FATAL
        assert "ADR parent page id not found" in capsys.readouterr().err

    def test_parent_id_with_query_text_is_rejected(self, fake, capsys):
        assert cli.main(["--parent-id", "1 OR space = HR", "sync"]) == (
            cli.EXIT_FATAL
        )
        assert "invalid parent_page_id" in capsys.readouterr().err
        assert fake.calls == []

    def test_cli_flags_override_env(self, fake, monkeypatch):
        monkeypatch.delenv("ADR_SPACE_KEY")
        assert cli.main(["--space", "ENG", "--parent-id", "42", "sync"]) == 0
        assert 'space = "ENG"' in fake.calls[0][1]
        assert "ancestor = 42" in fake.calls[0][1]

    def test_yaml_config(self, fake, tmp_path, monkeypatch, capsys):
        monkeypatch.delenv("ADR_SPACE_KEY")
        config_dir = tmp_path / ".adr_sync"
        config_dir.mkdir()
        (config_dir / "config.yml").write_text(
            "adr:\n  space_key: YAML\n  property_value: codepoint\n"
        )

        assert cli.main(["sync"]) == cli.EXIT_OK

        assert 'space = "YAML"' in fake.calls[0][1]
        assert fake.stored("1003", "emoji-title-draft")["value"] == "1f5d2"

    def test_broken_yaml(self, fake, tmp_path, capsys):
        config_dir = tmp_path / ".adr_sync"
        config_dir.mkdir()
        (config_dir / "config.yml").write_text("adr:\n  page_size: 0\n")

        assert cli.main(["sync"]) == cli.EXIT_FATAL
        assert "Configuration error" in capsys.readouterr().err

    def test_unparseable_yaml(self, fake, tmp_path, capsys):
        config_dir = tmp_path / ".adr_sync"
        config_dir.mkdir()
        (config_dir / "config.yml").write_text("adr: [\n")

        assert cli.main(["sync"]) == cli.EXIT_FATAL
        assert "Configuration error" in capsys.readouterr().err


class TestReport:
    def test_markdown(self, fake, capsys):
        assert cli.main(["report"]) == cli.EXIT_OK

        out = capsys.readouterr().out
        assert out.startswith("# ADR Status Report")
        assert "ADR-003" in out
        assert "ADR-004" not in out
        assert "**Next available ADR number:** ADR-006" in out
        assert fake.writes == []

    def test_json(self, fake, capsys):
        assert cli.main(["report", "--format", "json"]) == cli.EXIT_OK

        data = json.loads(capsys.readouterr().out)
        assert [e["id"] for e in data] == ["ADR-003", "ADR-005"]
        assert data[0]["url"] == (
            "https://example.atlassian.net/wiki/spaces/CE/pages/1003"
        )


class TestIndicator:
    def test_set_from_status(self, fake, capsys):
        assert cli.main(["indicator", "set", "1003", "Approved"]) == cli.EXIT_OK

        data = json.loads(capsys.readouterr().out)
        assert data["indicator"] == "accepted"
        assert [p["outcome"] for p in data["properties"]] == ["created", "created"]
        assert fake.stored("1003", "emoji-title-draft")["value"] == "accepted"

    def test_set_from_code(self, fake, capsys):
        assert cli.main(["indicator", "set", "1003", "postponed"]) == cli.EXIT_OK
        assert json.loads(capsys.readouterr().out)["indicator"] == "postponed"

    def test_set_unknown_status(self, fake, capsys):
        assert cli.main(["indicator", "set", "1003", "Onboarding"]) == cli.EXIT_FATAL
        assert "not a standard ADR status" in capsys.readouterr().err
        assert fake.writes == []

    def test_show(self, fake, capsys):
        fake.set_property("1003", "emoji-title-published", "draft", version=3)

        assert cli.main(["indicator", "show", "1003"]) == cli.EXIT_OK

        data = json.loads(capsys.readouterr().out)
        assert data["indicator"] == "draft"
        assert data["properties"] == [
            {"key": "emoji-title-published", "value": "draft", "version": 3}
        ]

    def test_show_nothing_stored(self, fake, capsys):
        assert cli.main(["indicator", "show", "1003"]) == cli.EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert data["indicator"] is None
        assert data["properties"] == []

    def test_remove(self, fake, capsys):
        fake.set_property("1003", "emoji-title-draft", "draft")

        assert cli.main(["indicator", "remove", "1003"]) == cli.EXIT_OK

        data = json.loads(capsys.readouterr().out)
        assert data["deleted"] == ["emoji-title-draft"]
        assert data["missing"] == ["emoji-title-published"]
        assert fake.stored("1003", "emoji-title-draft") is None


def test_version(capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--version"])
    assert exc_info.value.code == 0
    assert "adr-sync version" in capsys.readouterr().out


def test_command_required(capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main([])
    assert exc_info.value.code == 2

