"""
Get Download URL Use Case

Returns a presigned download URL as data rather than a redirect, since the
mobile image components do not reliably follow redirects to presigned URLs.
"""

import asyncio
import logging

from family_auth.app.services.object_storage import IObjectStorage, ObjectStorageError
from family_auth.libs.result import Error, Result, Return
from .dtos import DownloadUrlResponse

logger = logging.getLogger(__name__)


class GetDownloadUrlUseCase:
    def __init__(self, storage: IObjectStorage):
        self.storage = storage

    async def execute(self, key: str) -> Result[DownloadUrlResponse]:
        if not key:
            return Return.err(Error("FILENAME_MISSING", "Filename missing"))

        try:
            url = await asyncio.to_thread(self.storage.create_download_url, key)
        except ObjectStorageError:
            logger.exception("Error generating signed download URL")
            return Return.err(Error("FILE_UNAVAILABLE", "File unavailable"))

        return Return.ok(DownloadUrlResponse(url=url))
