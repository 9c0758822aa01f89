from typing import Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel

NO_STORE_HEADERS = {"Cache-Control": "no-store"}


def no_store_json(model: BaseModel, status_code: int = 200) -> JSONResponse:
    """Serialize a response DTO with its camelCase aliases and no-store caching"""
    return JSONResponse(
        status_code=status_code,
        content=model.model_dump(mode="json", by_alias=True, exclude_none=True),
        headers=dict(NO_STORE_HEADERS),
    )


def client_ip(request) -> Optional[str]:
    """Client address as seen by the first proxy, falling back to the socket peer"""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded
    if request.client is not None:
        return request.client.host
    return None
