import pytest
from click.testing import CliRunner

from downloads_api.cli import cli
from tests.consts import TEST_EMAIL, TEST_PREFIX, TEST_PUBLIC_URL


@pytest.fixture
def local_env(monkeypatch, tmp_path):
    monkeypatch.setenv("DEPLOYMENT_MODE", "local-dev")
    monkeypatch.setenv("STORAGE_DIR", str(tmp_path))
    monkeypatch.delenv("PUBLIC_BUCKET_URL", raising=False)
    monkeypatch.delenv("R2_PUBLIC_URL", raising=False)
    return tmp_path


def test_show_config(local_env):
    result = CliRunner().invoke(cli, ["show-config"])

    assert result.exit_code == 0
    assert "Deployment Mode: local-dev" in result.output
    assert "not set, serving directly" in result.output


def test_resolve__prints_latest_key(local_env, monkeypatch):
    pages = local_env / TEST_PREFIX
    pages.mkdir()
    (pages / "download_20.html").write_text("<p>20</p>")
    (pages / "download_100.html").write_text("<p>100</p>")
    monkeypatch.setenv("PUBLIC_BUCKET_URL", TEST_PUBLIC_URL)

    result = CliRunner().invoke(cli, ["resolve", "--email", TEST_EMAIL])

    assert result.exit_code == 0
    assert f"{TEST_PREFIX}download_100.html" in result.output
    assert f"{TEST_PUBLIC_URL}/{TEST_PREFIX}download_100.html" in result.output


def test_resolve__nothing_found(local_env):
    result = CliRunner().invoke(cli, ["resolve", "--email", TEST_EMAIL])

    assert result.exit_code == 1
    assert f"No generated download pages found for email {TEST_EMAIL}" in result.output
