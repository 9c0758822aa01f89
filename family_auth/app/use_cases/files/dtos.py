"""
File Use Case DTOs (Data Transfer Objects)
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Command DTOs
# ============================================================================


class PresignUploadCommand(BaseModel):
    """Validated intent to upload one file"""

    filename: Optional[str] = None
    content_type: Optional[str] = None
    scope: Optional[str] = None


# ============================================================================
# Response DTOs
# ============================================================================


class FileEntry(CamelModel):
    key: str
    size: int = 0
    last_modified: Optional[datetime] = None


class FileListResponse(CamelModel):
    files: List[FileEntry] = Field(default_factory=list)


class PresignUploadResponse(CamelModel):
    """Everything a client needs to POST a file straight to object storage"""

    upload_url: str
    fields: Dict[str, str]
    method: str = "POST"
    object_key: str
    access_url: str


class DownloadUrlResponse(CamelModel):
    url: str
