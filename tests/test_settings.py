"""Tests for configuration and the command line entry point."""

from pathlib import Path
from unittest.mock import patch

import pytest

from librarian.application.cli import build_parser, main
from librarian.infrastructure.config.settings import (
    ConfigurationError, LibrarianSettings, check_docs_root_exists, get_settings,
)


class TestGetSettings:
    """Tests for get_settings."""

    def test_defaults(self, monkeypatch):
        """Without overrides the defaults apply."""
        monkeypatch.delenv("LIBRARIAN_DOCS_ROOT", raising=False)
        monkeypatch.delenv("LIBRARIAN_PORT", raising=False)

        with patch("librarian.infrastructure.config.settings.load_dotenv"):
            settings = get_settings()

        assert settings.docs_root == Path("./docs")
        assert settings.port == 8000
        assert settings.session_ttl_seconds == 3600

    def test_environment_overrides(self, monkeypatch):
        """LIBRARIAN_* variables are read and coerced."""
        monkeypatch.setenv("LIBRARIAN_DOCS_ROOT", "/srv/docs")
        monkeypatch.setenv("LIBRARIAN_PORT", "9100")
        monkeypatch.setenv("LIBRARIAN_SESSION_TTL_SECONDS", "0")

        with patch("librarian.infrastructure.config.settings.load_dotenv"):
            settings = get_settings()

        assert settings.docs_root == Path("/srv/docs")
        assert settings.port == 9100
        assert settings.session_ttl_seconds == 0

    def test_argument_beats_environment(self, monkeypatch):
        """An explicit docs root wins over the environment."""
        monkeypatch.setenv("LIBRARIAN_DOCS_ROOT", "/srv/docs")

        with patch("librarian.infrastructure.config.settings.load_dotenv"):
            settings = get_settings(docs_root="/tmp/other")

        assert settings.docs_root == Path("/tmp/other")

    def test_none_overrides_ignored(self, monkeypatch):
        """Unset command line options keep the resolved value."""
        monkeypatch.setenv("LIBRARIAN_HOST", "0.0.0.0")

        with patch("librarian.infrastructure.config.settings.load_dotenv"):
            settings = get_settings(host=None, port=9000)

        assert settings.host == "0.0.0.0"
        assert settings.port == 9000

    def test_missing_docs_root(self, tmp_path):
        """A missing root fails fast."""
        settings = LibrarianSettings(docs_root=tmp_path / "missing")

        with pytest.raises(ConfigurationError):
            check_docs_root_exists(settings)

        check_docs_root_exists(LibrarianSettings(docs_root=tmp_path))


class TestCli:
    """Tests for the librarian command."""

    def test_parser(self):
        args = build_parser().parse_args(["--docs-root", "/d", "--port", "9001", "--log-format", "console"])

        assert args.docs_root == "/d"
        assert args.port == 9001
        assert args.log_format == "console"

    def test_main_runs_server(self, docs_root):
        """The app is served with the resolved host and port."""
        with patch("librarian.application.cli.uvicorn.run") as run, \
                patch("librarian.application.cli.setup_logging"):
            code = main(["--docs-root", str(docs_root), "--port", "9002"])

        assert code == 0
        assert run.call_args.kwargs["port"] == 9002
        assert run.call_args.kwargs["host"] == "127.0.0.1"

    def test_main_refuses_missing_root(self, tmp_path):
        """A missing docs root exits without serving."""
        with patch("librarian.application.cli.uvicorn.run") as run, \
                patch("librarian.application.cli.setup_logging"):
            code = main(["--docs-root", str(tmp_path / "missing")])

        assert code == 1
        run.assert_not_called()

    def test_docs_root_option_beats_environment(self, monkeypatch, docs_root):
        """--docs-root on the command line wins over LIBRARIAN_DOCS_ROOT."""
        monkeypatch.setenv("LIBRARIAN_DOCS_ROOT", "/srv/missing")

        with patch("librarian.application.cli.uvicorn.run") as run, \
                patch("librarian.application.cli.setup_logging"), \
                patch("librarian.application.cli.create_app") as create_app:
            code = main(["--docs-root", str(docs_root)])

        assert code == 0
        assert create_app.call_args.args[0].docs_root == docs_root
        run.assert_called_once()
