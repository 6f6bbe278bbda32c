"""
This module contains the data models for the reservation service.
"""
import re
import uuid
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Literal, ClassVar, Optional

from alchemical import Model
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel
from sqlalchemy import Column, Date, DateTime, Integer, Numeric, String, Text, Time

from .catalog import ServiceType

ReservationStatus = Literal["pending", "confirmed", "completed", "cancelled"]

# Statuses that occupy a slot on the grid
BLOCKING_STATUSES = ("pending", "confirmed")

EMAIL_PATTERN = r"^[\w\.\+-]+@[\w\.-]+\.\w+$"
TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]:[0-5][0-9]$")


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Reservation(Model):
    """
    Represents a reservation in the database.

    Attributes:
        id (str): The UUID primary key of the reservation.
        customer_name (str): The name of the customer.
        customer_email (str): The email address the notifications are sent to.
        customer_phone (str): The phone number of the customer.
        barber_id (str): The identifier of the barber.
        barber_name (str): The barber name at the time of booking.
        service_type (ServiceType): The booked service.
        appointment_date (date): The day of the appointment.
        appointment_time (time): The slot on the appointment day.
        duration (int): The appointment length in minutes.
        price (Decimal): The price of the appointment.
        status (ReservationStatus): The lifecycle status of the reservation.
        notes (str): Optional free text from the customer.
    """
    __tablename__ = "reservations"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    customer_name = Column(String(100), nullable=False)
    customer_email = Column(String(255), nullable=False, index=True)
    customer_phone = Column(String(32), nullable=False)
    barber_id = Column(String(64), nullable=False, index=True)
    barber_name = Column(String(100), nullable=False)
    service_type: ClassVar[ServiceType] = Column(String(20), nullable=False)
    appointment_date = Column(Date, nullable=False, index=True)
    appointment_time = Column(Time, nullable=False)
    duration = Column(Integer, nullable=False, default=30)
    price = Column(Numeric(10, 2), nullable=False)
    status: ClassVar[ReservationStatus] = Column(String(12), nullable=False, default="pending", index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)


def _parse_slot_time(value):
    if isinstance(value, time):
        return value
    if not isinstance(value, str) or not TIME_PATTERN.match(value.strip()):
        raise ValueError("Time must be in HH:MM:SS format")
    return value.strip().zfill(8)


class ReservationFields(BaseModel):
    """Shared configuration for the camelCase request bodies."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    @field_validator("customer_email", check_fields=False)
    @classmethod
    def normalize_email(cls, value):
        return value.lower() if value is not None else value

    @field_validator("appointment_time", mode="before", check_fields=False)
    @classmethod
    def check_time_format(cls, value):
        if value is None:
            return value
        return _parse_slot_time(value)


class ReservationCommand(ReservationFields):
    """
    Represents the command for creating a reservation.

    ``price`` and ``duration`` are derived from the service type when they are omitted.
    """
    customer_name: str = Field(..., min_length=2, max_length=100, description="Name of the customer")
    customer_email: str = Field(..., pattern=EMAIL_PATTERN, description="Email address of the customer")
    customer_phone: str = Field(..., min_length=1, max_length=32, description="Phone number of the customer")
    barber_id: str = Field(..., min_length=1, max_length=64, description="Identifier of the barber")
    barber_name: str = Field(..., min_length=1, max_length=100, description="Name of the barber")
    service_type: ServiceType = Field(..., description="The booked service")
    appointment_date: date = Field(..., description="Day of the appointment, YYYY-MM-DD")
    appointment_time: time = Field(..., description="Slot of the appointment, HH:MM:SS")
    duration: Optional[int] = Field(None, gt=0, le=480, description="Length in minutes")
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2, description="Price of the service")
    notes: Optional[str] = Field(None, max_length=2000)


class ReservationUpdate(ReservationFields):
    """
    Represents a partial update of a reservation. Only the fields present in the body are applied.
    """
    customer_name: Optional[str] = Field(None, min_length=2, max_length=100)
    customer_email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    customer_phone: Optional[str] = Field(None, min_length=1, max_length=32)
    barber_id: Optional[str] = Field(None, min_length=1, max_length=64)
    barber_name: Optional[str] = Field(None, min_length=1, max_length=100)
    service_type: Optional[ServiceType] = None
    appointment_date: Optional[date] = None
    appointment_time: Optional[time] = None
    duration: Optional[int] = Field(None, gt=0, le=480)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    status: Optional[ReservationStatus] = None
    notes: Optional[str] = Field(None, max_length=2000)


class ReservationOut(BaseModel):
    """
    Represents a reservation as returned by the API.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    barber_id: str
    barber_name: str
    service_type: str
    appointment_date: date
    appointment_time: time
    duration: int
    price: Decimal
    status: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_serializer("appointment_time")
    def serialize_time(self, value: time) -> str:
        return value.strftime("%H:%M:%S")

    @field_serializer("price")
    def serialize_price(self, value: Decimal) -> float:
        return float(value)

    @classmethod
    def dump(cls, reservation: Reservation) -> dict:
        """Serializes an ORM reservation to a camelCase JSON-ready dict."""
        return cls.model_validate(reservation).model_dump(mode="json", by_alias=True)
