import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from family_auth.adapter.services.instant_admin_client import InstantAdminClient
from family_auth.adapter.services.s3_object_storage import ObjectStorageSettings, S3ObjectStorage
from family_auth.adapter.stores.memory_store import InMemoryKeyValueStore
from family_auth.adapter.stores.redis_store import RedisKeyValueStore
from family_auth.app.services.identity_provider import IdentitySettings
from family_auth.app.services.rate_limiter import ParentElevationRateLimiter, RateLimitSettings
from .error import ClientError, ServerError
from .middleware import DeviceAuthMiddleware, RequestLoggingMiddleware
from .utils.responses import NO_STORE_HEADERS

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error = exc.base_error
    logger.warning(f"Client error: {error.code} ({exc.status_code})")
    headers = dict(NO_STORE_HEADERS)
    headers.update(exc.headers)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": error.message, "code": error.code},
        headers=headers,
    )


async def handle_server_error(request: Request, exc: ServerError):
    error = exc.base_error
    logger.error(f"Server error: {error.code}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": error.message, "code": error.code},
        headers=dict(NO_STORE_HEADERS),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    logger.warning(f"Invalid request body for {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request body"},
        headers=dict(NO_STORE_HEADERS),
    )


def build_key_value_store(config):
    if config.CACHE_BACKEND == "redis":
        return RedisKeyValueStore(config.REDIS_URL)
    return InMemoryKeyValueStore()


def create_app(ApplicationConfig) -> FastAPI:
    engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with app.state.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        yield
        await app.state.identity_provider.close()
        close_store = getattr(app.state.key_value_store, "close", None)
        if close_store is not None:
            await close_store()
        await app.state.engine.dispose()

    app = FastAPI(title="Family Organizer Auth", version="0.1.0", lifespan=lifespan)

    app.state.config = ApplicationConfig
    app.state.engine = engine
    app.state.session_factory = sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    app.state.key_value_store = build_key_value_store(ApplicationConfig)
    app.state.rate_limiter = ParentElevationRateLimiter(
        app.state.key_value_store, RateLimitSettings.from_config(ApplicationConfig)
    )
    app.state.identity_provider = InstantAdminClient(IdentitySettings.from_config(ApplicationConfig))
    app.state.object_storage = S3ObjectStorage(ObjectStorageSettings.from_config(ApplicationConfig))

    # Last added runs first: CORS -> request logging -> device auth
    app.add_middleware(DeviceAuthMiddleware, config=ApplicationConfig)
    if ApplicationConfig.ENABLE_LOGGING_MIDDLEWARE:
        app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from family_auth.api.routes import device, health_check, mobile, mobile_device, principal

    prefix = ApplicationConfig.API_PREFIX
    app.include_router(health_check.router, tags=["Health"])
    app.include_router(device.router, prefix=prefix)
    app.include_router(mobile_device.router, prefix=prefix)
    app.include_router(principal.router, prefix=prefix)
    app.include_router(mobile.router, prefix=prefix)

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    return app
