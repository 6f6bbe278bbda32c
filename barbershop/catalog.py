"""
This module contains the fixed service table and the barber roster offered by the shop.
"""
from decimal import Decimal
from typing import Literal, NamedTuple

ServiceType = Literal["haircut", "shave", "beard-trim", "full-service"]


class ServiceOffering(NamedTuple):
    """
    Price and length of a bookable service.

    Attributes:
        price (Decimal): The price charged for the service.
        duration (int): The length of the appointment in minutes.
    """
    price: Decimal
    duration: int


SERVICE_CATALOG: dict[str, ServiceOffering] = {
    "haircut": ServiceOffering(Decimal("25.00"), 30),
    "shave": ServiceOffering(Decimal("15.00"), 20),
    "beard-trim": ServiceOffering(Decimal("20.00"), 25),
    "full-service": ServiceOffering(Decimal("45.00"), 60),
}

# Static roster served to the booking form
BARBERS = [
    {
        "id": "123e4567-e89b-12d3-a456-426614174000",
        "name": "John Smith",
        "specialties": ["haircut", "beard-trim"],
        "rating": 4.8,
        "image": "https://i.pravatar.cc/150?img=12",
    },
    {
        "id": "223e4567-e89b-12d3-a456-426614174001",
        "name": "Mike Johnson",
        "specialties": ["full-service", "shave"],
        "rating": 4.9,
        "image": "https://i.pravatar.cc/150?img=13",
    },
    {
        "id": "323e4567-e89b-12d3-a456-426614174002",
        "name": "David Brown",
        "specialties": ["haircut", "full-service"],
        "rating": 4.7,
        "image": "https://i.pravatar.cc/150?img=14",
    },
]


def derive_pricing(service_type: str, price=None, duration=None) -> tuple[Decimal, int]:
    """
    Resolves the price and duration for a service, keeping any explicit override.

    Args:
        service_type (str): One of the keys of ``SERVICE_CATALOG``.
        price (Decimal | None): Caller supplied price, used as is when given.
        duration (int | None): Caller supplied duration in minutes, used as is when given.

    Returns:
        tuple[Decimal, int]: The price and duration to store.
    """
    offering = SERVICE_CATALOG[service_type]
    return (
        offering.price if price is None else price,
        offering.duration if duration is None else duration,
    )
