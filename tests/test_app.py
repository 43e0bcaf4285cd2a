"""
Tests for the command-line interface.
"""

import json

import pytest

from conftest import FakeTransport
from profilefinder import __version__
from profilefinder.adapters import PRIORITY
from profilefinder.app import EXIT_TIMEOUT, build_parser, main
from profilefinder.adapters.gravatar import gravatar_url
from profilefinder.config import Settings
from profilefinder.errors import ResolutionTimeout
from profilefinder.logger import get_logger
from profilefinder.profile import ProfileRecord

EMAIL = "jane@example.com"


@pytest.fixture
def cli_env(monkeypatch, tmp_path):
    """Point the CLI at a scripted transport and a temporary database."""
    settings = Settings(db_path=str(tmp_path / "profiles.db"))
    transport = FakeTransport(existing=["gravatar.com/avatar/"])
    monkeypatch.setattr("profilefinder.app.get_settings", lambda: settings)
    monkeypatch.setattr("profilefinder.app.configure_logger", lambda s: get_logger())
    monkeypatch.setattr("profilefinder.adapters.HttpTransport.from_settings", lambda s: transport)
    return settings


class TestParser:
    def test_resolve_arguments(self):
        args = build_parser().parse_args(["resolve", EMAIL, "--timeout", "5", "--save"])
        assert args.email == EMAIL
        assert args.timeout == 5.0
        assert args.save is True
        assert args.db is None

    def test_version(self, capsys):
        assert main(["--version"]) == 0
        assert capsys.readouterr().out.strip() == __version__

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage:" in capsys.readouterr().out


class TestResolveCommand:
    """Test `profilefinder resolve`."""

    def test_prints_json(self, cli_env, capsys):
        assert main(["resolve", EMAIL]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data == {"gravatar": ProfileRecord(portrait_url=gravatar_url(EMAIL)).to_dict()}

    def test_timeout_prints_partial_to_stderr(self, cli_env, monkeypatch, capsys):
        seen = {}

        def timed_out(self, email, timeout=None):
            seen["timeout"] = timeout
            raise ResolutionTimeout(
                "timed out",
                partial={"gravatar": ProfileRecord(portrait_url="https://example.com/a.png")},
                pending=["vimeo", "rapleaf"],
            )

        monkeypatch.setattr("profilefinder.app.ResolutionEngine.resolve", timed_out)

        assert main(["resolve", EMAIL, "--timeout", "2"]) == EXIT_TIMEOUT

        captured = capsys.readouterr()
        assert seen["timeout"] == 2.0
        assert captured.out == ""
        assert "still pending: vimeo, rapleaf" in captured.err
        assert '"portrait_url": "https://example.com/a.png"' in captured.err

    def test_save_then_history(self, cli_env, capsys):
        assert main(["resolve", EMAIL, "--save"]) == 0
        resolved = json.loads(capsys.readouterr().out)

        assert main(["history", EMAIL]) == 0
        captured = capsys.readouterr()
        assert json.loads(captured.out) == resolved
        assert "Resolved at" in captured.err


class TestHistoryCommand:
    def test_missing_database(self, cli_env, capsys):
        assert main(["history", EMAIL]) == 1
        assert "Database not found" in capsys.readouterr().err

    def test_unknown_email(self, cli_env, capsys):
        main(["resolve", EMAIL, "--save"])
        capsys.readouterr()

        assert main(["history", "other@example.com"]) == 1
        assert "No stored profiles" in capsys.readouterr().err


class TestAdaptersCommand:
    def test_lists_every_source_in_order(self, cli_env, capsys):
        assert main(["adapters"]) == 0

        lines = capsys.readouterr().out.strip().splitlines()
        assert len(lines) == len(PRIORITY)
        assert lines[0].split()[1] == "gravatar"
        assert "disabled: missing credentials: key" in lines[1]
        assert "conglomerator" in lines[PRIORITY.index("rapleaf")]
