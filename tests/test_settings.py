# =============================================================================
# tests/test_settings.py - Environment and SSM configuration
# =============================================================================

from unittest.mock import MagicMock, patch

from app.config.settings import Settings


def test_defaults(monkeypatch):
    for name in ("PRESIGNED_URL_EXPIRATION", "MAX_UPLOAD_SIZE_MB", "UPLOAD_RATE_LIMIT",
                 "ORPHAN_SWEEP_GRACE_SECONDS", "CORS_ORIGINS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings()

    assert settings.PRESIGNED_URL_EXPIRATION == 360
    assert settings.max_upload_size_bytes == 10 * 1024 * 1024
    assert settings.UPLOAD_RATE_LIMIT == "30/minute"
    assert settings.ORPHAN_SWEEP_GRACE_SECONDS == 3600
    assert settings.cors_origins_list == ["*"]
    assert settings.LOG_LEVEL == "INFO"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("S3_ENDPOINT_URL", "https://s3.example.com/")
    monkeypatch.delenv("S3_PUBLIC_BASE_URL", raising=False)
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test,")
    monkeypatch.setenv("MAX_UPLOAD_SIZE_MB", "2")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings()

    assert settings.S3_ENDPOINT_URL == "https://s3.example.com"
    assert settings.S3_PUBLIC_BASE_URL == "https://s3.example.com"
    assert settings.cors_origins_list == ["http://a.test", "http://b.test"]
    assert settings.max_upload_size_bytes == 2 * 1024 * 1024
    assert settings.LOG_LEVEL == "DEBUG"


def test_sweep_grace_never_shorter_than_presign_lifetime(monkeypatch):
    monkeypatch.setenv("PRESIGNED_URL_EXPIRATION", "900")
    monkeypatch.setenv("ORPHAN_SWEEP_GRACE_SECONDS", "60")

    assert Settings().ORPHAN_SWEEP_GRACE_SECONDS == 900


def test_secrets_from_ssm(monkeypatch):
    monkeypatch.setenv("USE_SSM", "true")
    monkeypatch.setenv("SSM_PREFIX", "/media/prod/")
    values = {
        "/media/prod/DATABASE_URL": "postgresql://media@db/media",
        "/media/prod/S3_ACCESS_KEY_ID": "ssm-key",
        "/media/prod/S3_SECRET_ACCESS_KEY": "ssm-secret",
    }
    ssm = MagicMock()
    ssm.get_parameter.side_effect = lambda Name, WithDecryption: {"Parameter": {"Value": values[Name]}}

    with patch("app.config.settings.boto3.client", return_value=ssm) as client_factory:
        settings = Settings()

    client_factory.assert_called_once()
    assert client_factory.call_args.args == ("ssm",)
    assert settings.DATABASE_URL == "postgresql://media@db/media"
    assert settings.S3_ACCESS_KEY_ID == "ssm-key"
    assert settings.S3_SECRET_ACCESS_KEY == "ssm-secret"
