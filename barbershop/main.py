"""
This module contains the main FastAPI application for the reservation service.
"""
import logging
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import FastAPI, BackgroundTasks, Depends, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import config
from .catalog import BARBERS, SERVICE_CATALOG
from .db import close_db, get_db_session, init_db
from .errors import PersistenceFailure, ReservationNotFound, ValidationError
from .lifecycle import cancel_reservation, create_reservation, update_reservation
from .models import ReservationCommand, ReservationOut, ReservationStatus, ReservationUpdate
from .repository import ReservationRepository
from .slots import get_available_slots

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(api_app: FastAPI):
    """
    Asynchronous context manager for the lifespan of the FastAPI application.
    It prepares the reservation store on startup and releases its connections on shutdown.

    Args:
        api_app (FastAPI): The FastAPI application instance.
    """
    await init_db()
    yield
    await close_db()

app = FastAPI(title="Barbershop Reservation API", version=config.APP_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


def get_repository(db: AsyncSession = Depends(get_db_session)) -> ReservationRepository:
    """
    Dependency that provides the reservation repository bound to the request session.
    """
    return ReservationRepository(db)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """
    Reports malformed bodies and query parameters as 400 with field level details.
    """
    errors = [
        {
            "field": str(error["loc"][-1]) if error["loc"] else None,
            "location": str(error["loc"][0]) if error["loc"] else None,
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"success": False, "errors": errors})


@app.exception_handler(ValidationError)
async def validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"success": False, "errors": exc.errors})


@app.exception_handler(ReservationNotFound)
async def not_found_handler(request: Request, exc: ReservationNotFound):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"success": False, "message": "Reservation not found"},
    )


@app.exception_handler(PersistenceFailure)
async def persistence_handler(request: Request, exc: PersistenceFailure):
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Internal server error"},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = "Route not found" if exc.status_code == status.HTTP_404_NOT_FOUND else exc.detail
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Internal server error"},
    )


@app.get("/health")
async def health():
    """
    Health check endpoint.
    """
    return {
        "success": True,
        "message": "Server is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/api")
async def api_info():
    """
    Describes the API and its main endpoints.
    """
    return {
        "success": True,
        "message": "Barbershop Reservation API",
        "version": config.APP_VERSION,
        "endpoints": {
            "health": "/health",
            "reservations": "/api/reservations",
            "availableSlots": "/api/available-slots",
            "barbers": "/api/barbers",
            "services": "/api/services",
        },
    }


@app.post("/api/reservations", status_code=status.HTTP_201_CREATED)
async def create(
    command: ReservationCommand,
    background_tasks: BackgroundTasks,
    repository: ReservationRepository = Depends(get_repository),
):
    """
    Creates a new reservation in the pending state. The confirmation email is queued in the
    background once the response is sent.

    Args:
        command (ReservationCommand): The reservation details.
        background_tasks (BackgroundTasks): The background tasks manager.
        repository (ReservationRepository): The reservation store.

    Returns:
        dict: The created reservation.
    """
    reservation = await create_reservation(repository, command, background_tasks)
    return {
        "success": True,
        "message": "Reservation created successfully",
        "data": ReservationOut.dump(reservation),
    }


@app.get("/api/reservations")
async def list_reservations(
    reservation_status: Optional[ReservationStatus] = Query(None, alias="status"),
    day: Optional[date] = Query(None, alias="date"),
    repository: ReservationRepository = Depends(get_repository),
):
    """
    Lists reservations, latest appointment first.

    Args:
        reservation_status (ReservationStatus | None): Only reservations with this status.
        day (date | None): Only reservations on this day.
        repository (ReservationRepository): The reservation store.

    Returns:
        dict: The number of reservations and the reservations.
    """
    reservations = await repository.find_all(status=reservation_status, appointment_date=day)
    return {
        "success": True,
        "count": len(reservations),
        "data": [ReservationOut.dump(r) for r in reservations],
    }


@app.get("/api/reservations/{reservation_id}")
async def get_reservation(reservation_id: str, repository: ReservationRepository = Depends(get_repository)):
    """
    Retrieves a reservation by its ID.
    """
    reservation = await repository.find_by_id(reservation_id)
    if reservation is None:
        raise ReservationNotFound(reservation_id)
    return {"success": True, "data": ReservationOut.dump(reservation)}


@app.put("/api/reservations/{reservation_id}")
async def update(
    reservation_id: str,
    changes: ReservationUpdate,
    repository: ReservationRepository = Depends(get_repository),
):
    """
    Applies a partial update to a reservation.
    """
    reservation = await update_reservation(repository, reservation_id, changes)
    return {
        "success": True,
        "message": "Reservation updated successfully",
        "data": ReservationOut.dump(reservation),
    }


@app.delete("/api/reservations/{reservation_id}")
async def cancel(
    reservation_id: str,
    background_tasks: BackgroundTasks,
    repository: ReservationRepository = Depends(get_repository),
):
    """
    Cancels a reservation. The record is kept with the cancelled status.
    """
    reservation = await cancel_reservation(repository, reservation_id, background_tasks)
    return {
        "success": True,
        "message": "Reservation cancelled successfully",
        "data": ReservationOut.dump(reservation),
    }


@app.get("/api/available-slots")
async def available_slots(
    barber_id: Optional[str] = Query(None, alias="barberId"),
    day: Optional[date] = Query(None, alias="date"),
    repository: ReservationRepository = Depends(get_repository),
):
    """
    Returns the free slots of a barber on a day, for the booking form's time picker.

    Args:
        barber_id (str): The identifier of the barber.
        day (date): The day to look up.
        repository (ReservationRepository): The reservation store.

    Returns:
        dict: The day, the barber and the free ``HH:MM:SS`` slots.
    """
    if not barber_id or day is None:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": "Barber ID and date are required"},
        )
    slots = await get_available_slots(repository, barber_id, day)
    return {
        "success": True,
        "date": day.isoformat(),
        "barberId": barber_id,
        "availableSlots": slots,
    }


@app.get("/api/barbers")
async def list_barbers():
    return {"success": True, "data": BARBERS}


@app.get("/api/services")
async def list_services():
    return {
        "success": True,
        "data": [
            {"serviceType": name, "price": float(offering.price), "duration": offering.duration}
            for name, offering in SERVICE_CATALOG.items()
        ],
    }
