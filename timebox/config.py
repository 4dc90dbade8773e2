"""
Environment-driven settings and logging setup for the timebox worker and
CLI.
"""

import logging
import os
from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class TimeboxSettings(BaseModel):
    """Runtime settings, read from environment variables by from_env()."""

    temporal_address: str = "localhost:7233"
    task_queue: str = "timebox-task-queue"
    store: Literal["local", "minio"] = "local"
    data_dir: str = "timebox_data"
    directory_path: str = "~/.config/timebox/directory.yaml"
    minio_endpoint: str = "localhost:9000"
    minio_access_key: str = Field("minioadmin", repr=False)
    minio_secret_key: str = Field("minioadmin", repr=False)
    minio_bucket: str = "timebox-users"
    sync_interval_minutes: Optional[int] = None

    @field_validator("sync_interval_minutes", mode="before")
    @classmethod
    def positive_interval_or_none(cls, v: Any) -> Optional[int]:
        """An unset, non-numeric or non-positive interval disables the
        periodic directory sync."""
        if v is None or v == "":
            return None
        try:
            minutes = int(v)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring invalid sync interval: {v!r}")
            return None
        if minutes <= 0:
            logger.warning(f"Ignoring non-positive sync interval: {minutes}")
            return None
        return minutes

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "TimeboxSettings":
        env = os.environ if environ is None else environ
        mapping = {
            "temporal_address": "TEMPORAL_ADDRESS",
            "task_queue": "TIMEBOX_TASK_QUEUE",
            "store": "TIMEBOX_STORE",
            "data_dir": "TIMEBOX_DATA_DIR",
            "directory_path": "TIMEBOX_DIRECTORY_PATH",
            "minio_endpoint": "MINIO_ENDPOINT",
            "minio_access_key": "MINIO_ROOT_USER",
            "minio_secret_key": "MINIO_ROOT_PASSWORD",
            "minio_bucket": "TIMEBOX_BUCKET",
            "sync_interval_minutes": "TIMEBOX_SYNC_INTERVAL_MINUTES",
        }
        values = {
            field: env[variable]
            for field, variable in mapping.items()
            if env.get(variable)
        }
        return cls(**values)


def setup_logging(level: Optional[str] = None) -> None:
    """Configure logging from LOG_LEVEL and LOG_FORMAT."""
    log_level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    numeric_level = getattr(logging, log_level, None)
    if not isinstance(numeric_level, int):
        print(f"Invalid log level: {log_level}, defaulting to INFO")
        numeric_level = logging.INFO

    log_format = os.environ.get("LOG_FORMAT", DEFAULT_LOG_FORMAT)
    logging.basicConfig(
        level=numeric_level,
        format=log_format,
        force=True,
    )
    logger.info(
        "Logging configured",
        extra={"log_level": log_level, "numeric_level": numeric_level},
    )


def build_document_repository(settings: TimeboxSettings):
    """Instantiate the document store selected by ``settings.store``."""
    if settings.store == "minio":
        from timebox.repos.minio.user_document import (
            MinioUserDocumentRepository,
        )

        return MinioUserDocumentRepository(
            endpoint=settings.minio_endpoint,
            access_key=settings.minio_access_key,
            secret_key=settings.minio_secret_key,
            bucket_name=settings.minio_bucket,
        )

    from timebox.repos.local.user_document import LocalUserDocumentRepository

    return LocalUserDocumentRepository(base_path=settings.data_dir)
