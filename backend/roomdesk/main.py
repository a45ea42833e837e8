from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from roomdesk.api.routes import (
    events,
    faculty,
    health,
    notifications,
    profiles,
    recording_checks,
    room_filters,
    rooms,
    shift_blocks,
    shifts,
)
from roomdesk.core.config import get_settings
from roomdesk.core.exceptions import AppError
from roomdesk.core.middleware import RequestSizeLimitMiddleware, RequestTimingMiddleware, SecurityHeadersMiddleware
from roomdesk.db.bootstrap import ensure_runtime_schema_compatibility

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    ensure_runtime_schema_compatibility()
    yield


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "details": exc.details},
    )


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)

app.add_middleware(RequestTimingMiddleware)
app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
app.add_middleware(SecurityHeadersMiddleware, settings=settings)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(rooms.router, prefix=f"{settings.api_prefix}/rooms", tags=["rooms"])
app.include_router(profiles.router, prefix=f"{settings.api_prefix}/profiles", tags=["profiles"])
app.include_router(room_filters.router, prefix=f"{settings.api_prefix}/room-filters", tags=["room-filters"])
app.include_router(shifts.router, prefix=f"{settings.api_prefix}/shifts", tags=["shifts"])
app.include_router(shift_blocks.router, prefix=f"{settings.api_prefix}/shift-blocks", tags=["shift-blocks"])
app.include_router(events.router, prefix=f"{settings.api_prefix}/events", tags=["events"])
app.include_router(faculty.router, prefix=f"{settings.api_prefix}/faculty", tags=["faculty"])
app.include_router(notifications.router, prefix=settings.api_prefix, tags=["notifications"])
app.include_router(
    recording_checks.router,
    prefix=f"{settings.api_prefix}/recording-checks",
    tags=["recording-checks"],
)
