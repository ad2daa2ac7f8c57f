"""
Runtime configuration for the Lambda functions.

All values come from environment variables set by the CloudFormation template.
They are resolved once per container and handed to the components that need
them, so nothing else in the package reads ``os.environ`` directly.
"""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

DEFAULT_MAX_UPLOAD_FILES = 50
DEFAULT_MAX_UPLOAD_SIZE_MB = 50


def _get_env(environ, *names):
    """Return the first non-blank value among ``names``."""
    for name in names:
        value = environ.get(name)
        if value is not None and value.strip():
            return value.strip()
    return None


def _get_int(environ, name, default):
    value = _get_env(environ, name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


@dataclass(frozen=True)
class Settings:
    bucket_name: str | None
    region: str | None = None
    environment: str = "production"
    max_upload_files: int = DEFAULT_MAX_UPLOAD_FILES
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_SIZE_MB * 1024 * 1024
    log_level: str = "INFO"

    @property
    def is_production(self):
        return self.environment.lower() == "production"

    @classmethod
    def from_env(cls, environ=None):
        """
        Build the settings from the process environment.

        ``BUCKET_NAME`` and ``AWS_REGION`` are the names Lambda and the deploy
        template provide; ``S3_BUCKET_NAME`` and ``AWS_REGION_NAME`` are still
        accepted for stacks deployed with the older template.
        """
        environ = os.environ if environ is None else environ
        return cls(
            bucket_name=_get_env(environ, "BUCKET_NAME", "S3_BUCKET_NAME"),
            region=_get_env(environ, "AWS_REGION", "AWS_REGION_NAME"),
            environment=_get_env(environ, "ENVIRONMENT_NAME") or "production",
            max_upload_files=_get_int(environ, "MAX_UPLOAD_FILES", DEFAULT_MAX_UPLOAD_FILES),
            max_upload_bytes=_get_int(environ, "MAX_UPLOAD_SIZE_MB", DEFAULT_MAX_UPLOAD_SIZE_MB) * 1024 * 1024,
            log_level=(_get_env(environ, "LOG_LEVEL") or "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings():
    """Settings for this container, read on first use and then reused."""
    settings = Settings.from_env()
    logging.getLogger("pdf_tools").setLevel(settings.log_level)
    return settings
