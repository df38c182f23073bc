# src/downloads_api/config/settings.py
from typing import Optional
from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """
    Single source of truth for all application settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    Usage:
        from downloads_api.config.settings import get_settings
        settings = get_settings()
        bucket_name = settings.s3_bucket_name
    """

    # Application Settings
    app_name: str = Field(
        default="downloads-api",
        description="Application name"
    )

    # Deployment Mode
    deployment_mode: str = Field(
        default="local-dev",
        validation_alias=AliasChoices("deployment_mode", "DEPLOYMENT_MODE"),
        description="Deployment mode: local-dev, aws-mock, or aws-prod"
    )

    # AWS Core Settings
    aws_region: str = Field(
        default="us-east-1",
        alias="AWS_DEFAULT_REGION"
    )

    aws_access_key_id: Optional[str] = Field(
        default=None,
        alias="AWS_ACCESS_KEY_ID"
    )

    aws_secret_access_key: Optional[str] = Field(
        default=None,
        alias="AWS_SECRET_ACCESS_KEY"
    )

    aws_endpoint_url: Optional[str] = Field(
        default=None,
        alias="AWS_ENDPOINT_URL"
    )

    # Bucket Configuration
    s3_bucket_name: str = Field(
        default="generated-pages",
        description="Bucket holding the generated download pages"
    )

    public_bucket_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("public_bucket_url", "PUBLIC_BUCKET_URL", "R2_PUBLIC_URL"),
        description="Public base URL of the bucket; when set, requests are redirected there"
    )

    listing_limit: int = Field(
        default=1000,
        ge=1,
        le=1000,
        description="Maximum number of objects listed per lookup"
    )

    # Storage Configuration
    storage_dir: str = Field(
        default="storage",
        description="Local storage directory (local-dev mode)"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator("deployment_mode", mode="before")
    @classmethod
    def normalize_deployment_mode(cls, v):
        """Normalize deployment mode values for backwards compatibility."""
        if v:
            mode_mapping = {
                "local-mock": "local-dev",
                "cloud": "aws-prod",
            }
            return mode_mapping.get(v, v)
        return v

    @field_validator("deployment_mode")
    @classmethod
    def validate_deployment_mode(cls, v):
        """Validate deployment mode is one of the allowed values."""
        valid_modes = ["local-dev", "aws-mock", "aws-prod"]
        if v not in valid_modes:
            raise ValueError(f"Invalid deployment_mode: {v}. Must be one of {valid_modes}")
        return v

    @field_validator("public_bucket_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        """Empty strings mean "not configured"; a trailing slash is dropped."""
        if v is None:
            return None
        v = v.strip().rstrip("/")
        return v or None

    @model_validator(mode="after")
    def set_mock_defaults(self):
        """Point aws-mock mode at the local moto server unless told otherwise."""
        if self.deployment_mode == "aws-mock":
            if self.aws_endpoint_url is None:
                self.aws_endpoint_url = "http://localhost:5000"
            if self.aws_access_key_id is None:
                self.aws_access_key_id = "mock"
            if self.aws_secret_access_key is None:
                self.aws_secret_access_key = "mock"
        return self

    @property
    def uses_s3(self) -> bool:
        return self.deployment_mode in ["aws-mock", "aws-prod"]

    def get_environment_dict(self) -> dict:
        """Get configuration as a dictionary suitable for docker-compose or subprocess.

        Returns:
            Dictionary of environment variables
        """
        env_dict = {
            'DEPLOYMENT_MODE': self.deployment_mode,
            'S3_BUCKET_NAME': self.s3_bucket_name,
            'AWS_DEFAULT_REGION': self.aws_region,
            'PUBLIC_BUCKET_URL': self.public_bucket_url or '',
            'LISTING_LIMIT': str(self.listing_limit),
            'STORAGE_DIR': self.storage_dir,
            'LOG_LEVEL': self.log_level,
        }

        # Only include AWS credentials for mock mode
        if self.deployment_mode == 'aws-mock':
            env_dict.update({
                'AWS_ENDPOINT_URL': self.aws_endpoint_url or '',
                'AWS_ACCESS_KEY_ID': self.aws_access_key_id or 'mock',
                'AWS_SECRET_ACCESS_KEY': self.aws_secret_access_key or 'mock',
            })

        return env_dict

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=(".env", ".env.local-dev", ".env.aws-mock", ".env.aws-prod"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
