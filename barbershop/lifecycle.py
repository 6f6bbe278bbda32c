"""
This module contains the reservation lifecycle: creation, cancellation and generic updates,
together with the notifications each of them triggers.

Statuses move pending -> confirmed -> completed, and pending or confirmed -> cancelled.
Completed and cancelled are terminal.
"""
import logging
from typing import Optional

from fastapi import BackgroundTasks
from pydantic.alias_generators import to_camel

from .catalog import derive_pricing
from .errors import NotificationFailure, ReservationNotFound, ValidationError
from .models import Reservation, ReservationCommand, ReservationUpdate
from .notifications import NotificationMessage, cancellation_message, confirmation_message
from .repository import ReservationRepository
from .worker import dispatch_notification

logger = logging.getLogger(__name__)

TRANSITIONS = {
    "pending": frozenset({"confirmed", "cancelled"}),
    "confirmed": frozenset({"completed", "cancelled"}),
    "completed": frozenset(),
    "cancelled": frozenset(),
}

NULLABLE_FIELDS = {"notes"}


def transition_allowed(current: str, target: str) -> bool:
    """
    Tells whether the modelled lifecycle allows moving from one status to another.
    """
    return target in TRANSITIONS.get(current, ())


def notify(channel: str, message: NotificationMessage):
    """
    Best effort delivery: a failure to queue the notification is logged, never raised.
    """
    try:
        dispatch_notification(channel, message)
    except NotificationFailure as exc:
        logger.warning(f"Notification to {message['recipient']} dropped: {exc}")


def schedule_notification(background_tasks: Optional[BackgroundTasks], channel: str, message: NotificationMessage):
    """
    Hands the notification to the background tasks of the request, so it is queued after the
    response is sent. Without background tasks it is queued right away.
    """
    if background_tasks is None:
        notify(channel, message)
    else:
        background_tasks.add_task(notify, channel, message)


async def create_reservation(
    repository: ReservationRepository,
    command: ReservationCommand,
    background_tasks: Optional[BackgroundTasks] = None,
) -> Reservation:
    """
    Creates a pending reservation and sends the booking confirmation.

    Args:
        repository (ReservationRepository): The reservation store.
        command (ReservationCommand): The validated booking request.
        background_tasks (BackgroundTasks | None): Where to schedule the confirmation email.

    Returns:
        Reservation: The stored reservation.
    """
    price, duration = derive_pricing(command.service_type, command.price, command.duration)
    reservation = Reservation(
        **command.model_dump(exclude={"price", "duration"}),
        price=price,
        duration=duration,
        status="pending",
    )
    await repository.insert(reservation)
    logger.info(
        f"Reservation {reservation.id} created for barber {reservation.barber_id} "
        f"on {reservation.appointment_date} at {reservation.appointment_time}"
    )

    schedule_notification(background_tasks, "email", confirmation_message(reservation))
    return reservation


async def cancel_reservation(
    repository: ReservationRepository,
    reservation_id: str,
    background_tasks: Optional[BackgroundTasks] = None,
) -> Reservation:
    """
    Cancels a reservation and notifies the customer.

    Cancelling a reservation that is already cancelled returns it unchanged and sends nothing.

    Raises:
        ReservationNotFound: If no reservation has the given id.
    """
    reservation = await repository.find_by_id(reservation_id)
    if reservation is None:
        raise ReservationNotFound(reservation_id)
    if reservation.status == "cancelled":
        logger.info(f"Reservation {reservation_id} is already cancelled")
        return reservation

    previous = reservation.status
    reservation = await repository.update(reservation_id, {"status": "cancelled"})
    if reservation is None:
        raise ReservationNotFound(reservation_id)
    logger.info(f"Reservation {reservation_id} cancelled (was {previous})")

    schedule_notification(background_tasks, "email", cancellation_message(reservation))
    return reservation


async def update_reservation(
    repository: ReservationRepository, reservation_id: str, changes: ReservationUpdate
) -> Reservation:
    """
    Overwrites the supplied fields of a reservation.

    A new service type re-derives price and duration unless those are supplied too. Status
    changes are applied as given; a change outside the modelled lifecycle is only logged.

    Raises:
        ReservationNotFound: If no reservation has the given id.
        ValidationError: If a required field is explicitly set to null.
    """
    current = await repository.find_by_id(reservation_id)
    if current is None:
        raise ReservationNotFound(reservation_id)

    patch = changes.model_dump(exclude_unset=True)
    errors = [
        {"field": to_camel(field), "message": "Field may not be null"}
        for field, value in patch.items()
        if value is None and field not in NULLABLE_FIELDS
    ]
    if errors:
        raise ValidationError(errors)

    if "service_type" in patch:
        patch["price"], patch["duration"] = derive_pricing(
            patch["service_type"], patch.get("price"), patch.get("duration")
        )

    target = patch.get("status")
    if target is not None and target != current.status and not transition_allowed(current.status, target):
        logger.warning(f"Reservation {reservation_id} moved from {current.status} to {target} outside the lifecycle")

    reservation = await repository.update(reservation_id, patch)
    if reservation is None:
        raise ReservationNotFound(reservation_id)
    return reservation
