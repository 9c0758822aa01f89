"""
File Use Cases

Mobile file listing, presigned uploads and presigned downloads.
"""

from .list_files_use_case import ListFilesUseCase
from .presign_upload_use_case import (
    ALLOWED_SCOPES,
    PresignUploadUseCase,
    build_object_key,
    sanitize_file_name,
)
from .get_download_url_use_case import GetDownloadUrlUseCase
from .dtos import (
    DownloadUrlResponse,
    FileEntry,
    FileListResponse,
    PresignUploadCommand,
    PresignUploadResponse,
)

__all__ = [
    # Use Cases
    "ListFilesUseCase",
    "PresignUploadUseCase",
    "GetDownloadUrlUseCase",
    "ALLOWED_SCOPES",
    "build_object_key",
    "sanitize_file_name",
    # DTOs
    "PresignUploadCommand",
    "FileEntry",
    "FileListResponse",
    "PresignUploadResponse",
    "DownloadUrlResponse",
]
