"""
This module contains the persistence operations for reservations.
"""
import logging
from datetime import date
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .errors import PersistenceFailure
from .models import Reservation

logger = logging.getLogger(__name__)


class ReservationRepository:
    """
    Stores and loads reservations through an async session.

    Args:
        session (AsyncSession): The database session, one per request.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert(self, reservation: Reservation) -> Reservation:
        self.session.add(reservation)
        await self._commit(reservation)
        logger.info(f"Inserted reservation {reservation.id}")
        return reservation

    async def find_by_id(self, reservation_id: str) -> Optional[Reservation]:
        try:
            return await self.session.get(Reservation, reservation_id)
        except SQLAlchemyError as exc:
            logger.error(f"Failed to load reservation {reservation_id}: {exc}")
            raise PersistenceFailure("Failed to load reservation") from exc

    async def find_all(
        self,
        status: Optional[str | Iterable[str]] = None,
        appointment_date: Optional[date] = None,
        barber_id: Optional[str] = None,
    ) -> list[Reservation]:
        """
        Lists reservations matching every given filter, latest appointment first.

        Args:
            status (str | Iterable[str] | None): A status, or a collection of accepted statuses.
            appointment_date (date | None): Only reservations on this day.
            barber_id (str | None): Only reservations with this barber.

        Returns:
            list[Reservation]: Ordered by date then time, descending.
        """
        query = select(Reservation)
        if status is not None:
            if isinstance(status, str):
                query = query.where(Reservation.status == status)
            else:
                query = query.where(Reservation.status.in_(list(status)))
        if appointment_date is not None:
            query = query.where(Reservation.appointment_date == appointment_date)
        if barber_id is not None:
            query = query.where(Reservation.barber_id == barber_id)
        query = query.order_by(Reservation.appointment_date.desc(), Reservation.appointment_time.desc())

        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as exc:
            logger.error(f"Failed to list reservations: {exc}")
            raise PersistenceFailure("Failed to list reservations") from exc
        return list(result.scalars().all())

    async def update(self, reservation_id: str, patch: dict) -> Optional[Reservation]:
        """
        Overwrites the given fields of a reservation.

        Returns:
            Reservation | None: The updated reservation, or None if the id is unknown.
        """
        reservation = await self.find_by_id(reservation_id)
        if reservation is None:
            return None
        for field, value in patch.items():
            setattr(reservation, field, value)
        await self._commit(reservation)
        logger.info(f"Updated reservation {reservation_id}: {sorted(patch)}")
        return reservation

    async def _commit(self, reservation: Reservation):
        try:
            await self.session.commit()
            await self.session.refresh(reservation)
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error(f"Failed to store reservation: {exc}")
            raise PersistenceFailure("Failed to store reservation") from exc
