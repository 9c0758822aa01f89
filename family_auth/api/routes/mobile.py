from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from family_auth.api.error import ClientError, ServerError
from family_auth.api.utils.responses import no_store_json
from family_auth.app.services.device_auth_gate import DeviceAuthContext
from family_auth.app.services.identity_provider import IdentitySettings
from family_auth.app.services.object_storage import IObjectStorage
from family_auth.app.use_cases.files import (
    GetDownloadUrlUseCase,
    ListFilesUseCase,
    PresignUploadCommand,
    PresignUploadUseCase,
)
from family_auth.app.use_cases.mobile import GetMobileConfigUseCase
from family_auth.depends import get_identity_settings, get_object_storage, require_device

router = APIRouter(prefix="/mobile", tags=["Mobile"])


class PresignRequest(BaseModel):
    filename: Optional[str] = None
    content_type: Optional[str] = Field(default=None, alias="contentType")
    scope: Optional[str] = None


@router.get("/config", status_code=status.HTTP_200_OK)
async def get_mobile_config(
    device: DeviceAuthContext = Depends(require_device),
    settings: IdentitySettings = Depends(get_identity_settings),
):
    """
    Mobile Config Discovery

    Raises:
        - 401 Unauthorized: Device not activated
        - 503 Service Unavailable: Identity app not configured
    """
    result = GetMobileConfigUseCase(settings).execute()
    if result.is_err():
        raise ClientError(result.error, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return no_store_json(result.value)


@router.get("/files", status_code=status.HTTP_200_OK)
async def list_files(
    device: DeviceAuthContext = Depends(require_device),
    storage: IObjectStorage = Depends(get_object_storage),
):
    """
    List stored files.

    Raises:
        - 401 Unauthorized: Device not activated
        - 500 Internal Server Error: Storage failure
    """
    result = await ListFilesUseCase(storage).execute()
    if result.is_err():
        raise ServerError(result.error)
    return no_store_json(result.value)


@router.post("/files/presign", status_code=status.HTTP_200_OK)
async def presign_upload(
    request: PresignRequest,
    device: DeviceAuthContext = Depends(require_device),
    storage: IObjectStorage = Depends(get_object_storage),
):
    """
    Presign a direct upload to object storage.

    Raises:
        - 400 Bad Request: Invalid scope, file name or content type
        - 401 Unauthorized: Device not activated
        - 500 Internal Server Error: Signing failed
    """
    command = PresignUploadCommand(
        filename=request.filename, content_type=request.content_type, scope=request.scope
    )
    result = await PresignUploadUseCase(storage).execute(command)

    if result.is_err():
        error = result.error
        if error.code in ("INVALID_SCOPE", "INVALID_CONTENT_TYPE", "INVALID_FILE_NAME"):
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        raise ServerError(error)

    return no_store_json(result.value)


@router.get("/files/{filename:path}", status_code=status.HTTP_200_OK)
async def get_download_url(
    filename: str,
    device: DeviceAuthContext = Depends(require_device),
    storage: IObjectStorage = Depends(get_object_storage),
):
    """
    Presigned download URL for one stored file, returned as JSON.

    Raises:
        - 401 Unauthorized: Device not activated
        - 404 Not Found: File unavailable
    """
    result = await GetDownloadUrlUseCase(storage).execute(filename)

    if result.is_err():
        error = result.error
        if error.code == "FILENAME_MISSING":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)

    return no_store_json(result.value)
