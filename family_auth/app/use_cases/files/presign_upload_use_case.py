"""
Presign Upload Use Case

Builds a scoped object key for an upload and presigns a POST policy for it.
"""

import asyncio
import logging
import re
import uuid
from urllib.parse import quote

from family_auth.app.services.object_storage import IObjectStorage, ObjectStorageError
from family_auth.libs.result import Error, Result, Return
from .dtos import PresignUploadCommand, PresignUploadResponse

logger = logging.getLogger(__name__)

ALLOWED_SCOPES = ("task-attachment", "file-manager", "profile-photo")
MAX_FILE_NAME_LENGTH = 180
MAX_CONTENT_TYPE_LENGTH = 255
FILE_ACCESS_PATH = "/api/mobile/files"


def sanitize_file_name(value: str) -> str:
    """Trim, flatten path separators, collapse whitespace and cap the length"""
    cleaned = re.sub(r"[/\\]+", "_", value.strip())
    cleaned = re.sub(r"\s+", " ", cleaned)
    return cleaned[:MAX_FILE_NAME_LENGTH]


def build_object_key(scope: str, file_name: str) -> str:
    return f"{scope}--{uuid.uuid4()}--{file_name}"


class PresignUploadUseCase:
    """
    Use case for presigning a mobile upload.

    Business Rules:
    - Scope must be one of ALLOWED_SCOPES
    - Content type must be non-empty and at most 255 characters
    - File name must be non-empty after sanitizing
    - Object key is "{scope}--{uuid4}--{sanitized file name}"
    """

    def __init__(self, storage: IObjectStorage):
        self.storage = storage

    async def execute(self, command: PresignUploadCommand) -> Result[PresignUploadResponse]:
        if command.scope not in ALLOWED_SCOPES:
            return Return.err(Error("INVALID_SCOPE", "Invalid scope"))

        content_type = (command.content_type or "").strip()
        if not content_type or len(content_type) > MAX_CONTENT_TYPE_LENGTH:
            return Return.err(Error("INVALID_CONTENT_TYPE", "Invalid content type"))

        file_name = sanitize_file_name(command.filename or "")
        if not file_name:
            return Return.err(Error("INVALID_FILE_NAME", "Invalid file name"))

        key = build_object_key(command.scope, file_name)

        try:
            presigned = await asyncio.to_thread(
                self.storage.create_presigned_post, key, content_type
            )
        except ObjectStorageError:
            logger.exception("Error creating presigned upload")
            return Return.err(
                Error("UPLOAD_SIGNATURE_FAILED", "Failed to generate upload signature")
            )

        return Return.ok(
            PresignUploadResponse(
                upload_url=presigned.url,
                fields=presigned.fields,
                object_key=key,
                access_url=f"{FILE_ACCESS_PATH}/{quote(key, safe='')}",
            )
        )
