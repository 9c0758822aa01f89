from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

MAX_UPLOAD_BYTES = 10 * 1024 * 1024
UPLOAD_URL_EXPIRY_SECONDS = 600
DOWNLOAD_URL_EXPIRY_SECONDS = 3600


class ObjectStorageError(Exception):
    """An object storage call failed or storage is not configured"""


@dataclass
class StoredObject:
    key: str
    size: int = 0
    last_modified: Optional[datetime] = None


@dataclass
class PresignedPost:
    url: str
    fields: Dict[str, str] = field(default_factory=dict)


class IObjectStorage(ABC):
    """Object storage interface - application layer"""

    @abstractmethod
    def list_objects(self) -> List[StoredObject]:
        """List every object in the bucket"""
        pass

    @abstractmethod
    def create_presigned_post(self, key: str, content_type: str) -> PresignedPost:
        """
        Presign a browser-style POST upload for key.

        The policy limits the body to MAX_UPLOAD_BYTES, requires the
        Content-Type to start with content_type and expires after
        UPLOAD_URL_EXPIRY_SECONDS.
        """
        pass

    @abstractmethod
    def create_download_url(self, key: str) -> str:
        """Presign a GET URL for key valid for DOWNLOAD_URL_EXPIRY_SECONDS"""
        pass
