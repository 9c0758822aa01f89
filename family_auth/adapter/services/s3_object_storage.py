"""
S3-compatible object storage (MinIO in the family deployment).

Two boto3 clients are used: one against the internal endpoint for listing,
and one against the public endpoint so presigned URLs are reachable from
devices outside the server's network.
"""

import logging
from dataclasses import dataclass
from typing import List

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from family_auth.app.services.object_storage import (
    DOWNLOAD_URL_EXPIRY_SECONDS,
    MAX_UPLOAD_BYTES,
    UPLOAD_URL_EXPIRY_SECONDS,
    IObjectStorage,
    ObjectStorageError,
    PresignedPost,
    StoredObject,
)

logger = logging.getLogger(__name__)


@dataclass
class ObjectStorageSettings:
    """Configuration for the S3-compatible bucket."""

    endpoint: str = ""
    public_endpoint: str = ""
    bucket_name: str = ""
    access_key_id: str = ""
    secret_access_key: str = ""
    region: str = "us-east-1"

    @classmethod
    def from_config(cls, config) -> "ObjectStorageSettings":
        return cls(
            endpoint=config.S3_ENDPOINT or "",
            public_endpoint=config.S3_PUBLIC_ENDPOINT or config.S3_ENDPOINT or "",
            bucket_name=config.S3_BUCKET_NAME or "",
            access_key_id=config.S3_ACCESS_KEY_ID or "",
            secret_access_key=config.S3_SECRET_ACCESS_KEY or "",
            region=config.S3_REGION or "us-east-1",
        )

    @property
    def is_configured(self) -> bool:
        return bool(
            self.endpoint and self.bucket_name and self.access_key_id and self.secret_access_key
        )


class S3ObjectStorage(IObjectStorage):
    """boto3 implementation of the object storage interface"""

    def __init__(self, settings: ObjectStorageSettings):
        self.settings = settings
        self._internal_client = None
        self._signer_client = None

    def _make_client(self, endpoint: str):
        if not self.settings.is_configured:
            raise ObjectStorageError("Object storage is not configured")

        return boto3.client(
            "s3",
            endpoint_url=endpoint,
            region_name=self.settings.region,
            aws_access_key_id=self.settings.access_key_id,
            aws_secret_access_key=self.settings.secret_access_key,
            # MinIO needs path-style addressing and SigV4
            config=Config(signature_version="s3v4", s3={"addressing_style": "path"}),
        )

    def _internal(self):
        if self._internal_client is None:
            self._internal_client = self._make_client(self.settings.endpoint)
        return self._internal_client

    def _signer(self):
        if self._signer_client is None:
            self._signer_client = self._make_client(self.settings.public_endpoint)
        return self._signer_client

    def list_objects(self) -> List[StoredObject]:
        objects: List[StoredObject] = []
        try:
            paginator = self._internal().get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.settings.bucket_name):
                for item in page.get("Contents", []):
                    objects.append(
                        StoredObject(
                            key=item.get("Key", ""),
                            size=item.get("Size", 0),
                            last_modified=item.get("LastModified"),
                        )
                    )
        except (BotoCoreError, ClientError) as e:
            raise ObjectStorageError(f"Failed to list objects: {e}") from e
        return objects

    def create_presigned_post(self, key: str, content_type: str) -> PresignedPost:
        try:
            presigned = self._signer().generate_presigned_post(
                Bucket=self.settings.bucket_name,
                Key=key,
                Fields={"Content-Type": content_type},
                Conditions=[
                    ["content-length-range", 0, MAX_UPLOAD_BYTES],
                    ["starts-with", "$Content-Type", content_type],
                ],
                ExpiresIn=UPLOAD_URL_EXPIRY_SECONDS,
            )
        except (BotoCoreError, ClientError) as e:
            raise ObjectStorageError(f"Failed to presign upload: {e}") from e
        return PresignedPost(url=presigned["url"], fields=dict(presigned["fields"]))

    def create_download_url(self, key: str) -> str:
        try:
            return self._signer().generate_presigned_url(
                "get_object",
                Params={"Bucket": self.settings.bucket_name, "Key": key},
                ExpiresIn=DOWNLOAD_URL_EXPIRY_SECONDS,
            )
        except (BotoCoreError, ClientError) as e:
            raise ObjectStorageError(f"Failed to presign download: {e}") from e
