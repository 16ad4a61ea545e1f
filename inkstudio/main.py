# inkstudio/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from inkstudio.config import settings
from inkstudio.db import init_db
from inkstudio.errors import (
    AvailabilityUnavailableError,
    BookingConflictError,
    InvalidOverrideError,
    OffGridSlotError,
)
from inkstudio.routers import appointments_routes, artists_routes, auth_routes, users_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

app.include_router(auth_routes.router)
app.include_router(users_routes.router)
app.include_router(artists_routes.router)
app.include_router(appointments_routes.router)


@app.exception_handler(AvailabilityUnavailableError)
async def availability_unavailable_handler(request: Request, exc: AvailabilityUnavailableError):
    # never answer "no slots" when the records could not be read
    return JSONResponse(status_code=503, content={"detail": "Availability temporarily unavailable"})


@app.exception_handler(BookingConflictError)
async def booking_conflict_handler(request: Request, exc: BookingConflictError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(InvalidOverrideError)
async def invalid_override_handler(request: Request, exc: InvalidOverrideError):
    logger.warning(f"Malformed date override on {request.url.path}: {exc}")
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(OffGridSlotError)
async def off_grid_slot_handler(request: Request, exc: OffGridSlotError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.get("/health")
def health_check():
    return {"status": "ok"}
