import pytest
from pydantic import ValidationError

from downloads_api.config.settings import Settings, get_settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("PUBLIC_BUCKET_URL", raising=False)
    monkeypatch.delenv("R2_PUBLIC_URL", raising=False)
    monkeypatch.delenv("DEPLOYMENT_MODE", raising=False)

    settings = Settings()

    assert settings.deployment_mode == "local-dev"
    assert settings.public_bucket_url is None
    assert settings.listing_limit == 1000


def test_public_url_from_environment(monkeypatch):
    monkeypatch.delenv("PUBLIC_BUCKET_URL", raising=False)
    monkeypatch.setenv("R2_PUBLIC_URL", "https://pub.example.r2.dev/")

    settings = Settings()

    assert settings.public_bucket_url == "https://pub.example.r2.dev"


def test_blank_public_url_means_unset():
    assert Settings(public_bucket_url="   ").public_bucket_url is None


@pytest.mark.parametrize("legacy, expected", [("local-mock", "local-dev"), ("cloud", "aws-prod")])
def test_legacy_deployment_modes(legacy, expected):
    assert Settings(deployment_mode=legacy).deployment_mode == expected


def test_invalid_deployment_mode():
    with pytest.raises(ValidationError):
        Settings(deployment_mode="production")


def test_listing_limit_bounds():
    with pytest.raises(ValidationError):
        Settings(listing_limit=1001)


def test_aws_mock_defaults(monkeypatch):
    for name in ("AWS_ENDPOINT_URL", "AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(deployment_mode="aws-mock")

    assert settings.aws_endpoint_url == "http://localhost:5000"
    assert settings.aws_access_key_id == "mock"
    assert settings.get_environment_dict()["AWS_ENDPOINT_URL"] == "http://localhost:5000"


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
