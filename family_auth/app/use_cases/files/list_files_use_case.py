"""
List Files Use Case
"""

import asyncio
import logging

from family_auth.app.services.object_storage import IObjectStorage, ObjectStorageError
from family_auth.libs.result import Error, Result, Return
from .dtos import FileEntry, FileListResponse

logger = logging.getLogger(__name__)


class ListFilesUseCase:
    """Lists every stored object for the mobile file browser"""

    def __init__(self, storage: IObjectStorage):
        self.storage = storage

    async def execute(self) -> Result[FileListResponse]:
        try:
            objects = await asyncio.to_thread(self.storage.list_objects)
        except ObjectStorageError:
            logger.exception("Error listing files")
            return Return.err(Error("FILE_LIST_FAILED", "Failed to list files"))

        return Return.ok(
            FileListResponse(
                files=[
                    FileEntry(key=obj.key, size=obj.size, last_modified=obj.last_modified)
                    for obj in objects
                ]
            )
        )
