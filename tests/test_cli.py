"""Tests for the vitrine CLI."""

from click.testing import CliRunner

from vitrine.auth.tokens import verify_admin_token
from vitrine.cli import cli
from vitrine.config import get_settings


class TestTokenCommand:
    def test_issues_verifiable_token(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SECRET_KEY", "cli-secret")
        monkeypatch.setenv("VITRINE_CONFIG", str(tmp_path / "absent.yaml"))
        get_settings.cache_clear()
        try:
            result = CliRunner().invoke(cli, ["token", "--subject", "ops"])
        finally:
            get_settings.cache_clear()

        assert result.exit_code == 0, result.output
        payload = verify_admin_token(result.output.strip(), "cli-secret")
        assert payload["sub"] == "ops"


class TestSecretCommand:
    def test_writes_env_file(self, tmp_path):
        env_path = tmp_path / ".env"
        env_path.write_text("DEBUG=true\nSECRET_KEY=old\n")

        result = CliRunner().invoke(cli, ["secret", "--write", str(env_path)])

        assert result.exit_code == 0
        content = env_path.read_text()
        assert "DEBUG=true" in content
        assert "SECRET_KEY=old" not in content
        assert content.count("SECRET_KEY=") == 1
