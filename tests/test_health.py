"""Basic health check tests."""

from typer.testing import CliRunner

from zipparents import __version__
from zipparents.main import app as cli

runner = CliRunner()


def test_import_zipparents():
    """Test that the zipparents package can be imported."""
    import zipparents
    assert zipparents.__version__ == "1.0.0"


def test_settings_loaded():
    from zipparents.config import get_settings

    settings = get_settings()
    assert settings.supabase_url == "https://test.supabase.co"
    assert settings.profile_photo_bucket == "profile-photos"
    assert settings.onboarding_redirect == "/feed"


def test_health_endpoint(api):
    response = api.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "version": __version__}


class TestCli:
    def test_health_command(self):
        result = runner.invoke(cli, ["health"])
        assert result.exit_code == 0
        assert "All checks passed" in result.stdout

    def test_version_command(self):
        result = runner.invoke(cli, ["version"])
        assert __version__ in result.stdout

    def test_distance(self):
        result = runner.invoke(cli, ["distance", "10001", "10002"])
        assert result.exit_code == 0
        assert "miles" in result.stdout

    def test_distance_unknown_zip(self):
        result = runner.invoke(cli, ["distance", "10001", "99999"])
        assert result.exit_code == 1
