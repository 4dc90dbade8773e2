"""
Minio implementation of UserDocumentRepository.
"""

import io
import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from minio import Minio
from minio.error import S3Error

from timebox.repositories import UserDocumentRepository

logger = logging.getLogger(__name__)


class MinioUserDocumentRepository(UserDocumentRepository):
    """
    Stores each principal's document as a JSON object in a Minio bucket,
    using the document key as the object name.

    Minio has no partial updates, so a merge upsert reads the stored object,
    applies the shallow merge and writes the whole object back.
    """

    def __init__(
        self,
        endpoint: Optional[str] = None,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        secure: bool = False,
        bucket_name: Optional[str] = None,
    ):
        self._endpoint = endpoint or os.environ.get(
            "MINIO_ENDPOINT", "localhost:9000"
        )
        self._access_key = access_key or os.environ.get(
            "MINIO_ROOT_USER", "minioadmin"
        )
        self._secret_key = secret_key or os.environ.get(
            "MINIO_ROOT_PASSWORD", "minioadmin"
        )
        self._secure = secure
        self._bucket_name = bucket_name or os.environ.get(
            "TIMEBOX_BUCKET", "timebox-users"
        )

        self._client: Optional[Minio] = None
        logger.debug(
            "MinioUserDocumentRepository initialized",
            extra={
                "endpoint": self._endpoint,
                "bucket_name": self._bucket_name,
            },
        )

    async def _get_client(self) -> Minio:
        """Lazily initialize and return the Minio client."""
        if self._client is None:
            logger.debug(
                "Creating new Minio client instance",
                extra={"endpoint": self._endpoint, "secure": self._secure},
            )
            client = Minio(
                self._endpoint,
                access_key=self._access_key,
                secret_key=self._secret_key,
                secure=self._secure,
            )
            try:
                if not client.bucket_exists(self._bucket_name):
                    logger.info(
                        "Creating user documents bucket",
                        extra={"bucket_name": self._bucket_name},
                    )
                    client.make_bucket(self._bucket_name)
            except S3Error as e:
                logger.error(
                    f"Error checking or creating Minio bucket: {e}",
                    extra={
                        "bucket_name": self._bucket_name,
                        "error_code": e.code,
                    },
                )
                raise
            self._client = client
        return self._client

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Retrieve a user document from Minio."""
        client = await self._get_client()
        logger.debug(
            "Fetching user document from Minio",
            extra={"key": key, "bucket": self._bucket_name},
        )
        try:
            response = client.get_object(self._bucket_name, key)
            try:
                data = response.read()
            finally:
                response.close()
                response.release_conn()
        except S3Error as e:
            if e.code == "NoSuchKey":
                logger.debug(
                    "User document not found in Minio", extra={"key": key}
                )
                return None
            logger.error(
                f"Error fetching user document from Minio: {e}",
                extra={"key": key, "error_code": e.code},
            )
            raise

        document = json.loads(data.decode("utf-8"))
        if not isinstance(document, dict):
            raise ValueError(f"User document '{key}' is not a JSON object")
        return document

    async def upsert(
        self, key: str, document: Dict[str, Any], merge: bool = True
    ) -> None:
        """Write a user document to Minio, creating it when absent."""
        client = await self._get_client()

        stored = document
        if merge:
            existing = await self.get(key)
            if existing is not None:
                stored = {**existing, **document}

        payload = json.dumps(stored, ensure_ascii=False).encode("utf-8")
        logger.debug(
            "Writing user document to Minio",
            extra={
                "key": key,
                "merge": merge,
                "payload_size_bytes": len(payload),
            },
        )
        try:
            client.put_object(
                self._bucket_name,
                key,
                io.BytesIO(payload),
                len(payload),
                content_type="application/json",
                metadata={
                    "saved_at": datetime.now(timezone.utc).isoformat(),
                },
            )
        except S3Error as e:
            logger.error(
                f"Error writing user document to Minio: {e}",
                extra={"key": key, "error_code": e.code},
                exc_info=True,
            )
            raise
        logger.info(
            "User document persisted to Minio",
            extra={"key": key, "bucket": self._bucket_name},
        )
