"""
Booking records, the conflict rule and the booking lifecycle.

Status lifecycle:
- Pending -> Approved   (head of department)
- Pending -> Rejected   (head of department)
- Pending -> Cancelled  (owner)

Approved, Rejected and Cancelled are terminal. Asking for a transition out
of a terminal state leaves the booking as it is.
"""

import logging
import random
import string
import time
from datetime import date, datetime
from enum import Enum
from typing import Callable, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from catalog import Venue

logger = logging.getLogger(__name__)

PRIVILEGED_ROLE = "hod"


class BookingStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"


# statuses that free the slot again
INACTIVE_STATUSES = (BookingStatus.CANCELLED, BookingStatus.REJECTED)


class Booking(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    venue_id: str
    venue_name: str
    booking_date: date = Field(alias="date")
    time_slot: str
    booker_name: str
    department: str
    purpose: str
    attendees: Optional[int] = None
    contact_email: Optional[str] = None
    booked_by: str
    status: BookingStatus = BookingStatus.PENDING
    created_at: datetime

    @property
    def is_active(self) -> bool:
        return self.status not in INACTIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status != BookingStatus.PENDING


# ================== ERRORS ==================
class BookingError(Exception):
    """Base class for booking rule violations."""


class SlotUnavailable(BookingError):
    pass


class BookingNotFound(BookingError):
    pass


class PermissionDenied(BookingError):
    pass


# ================== HELPERS ==================
def generate_booking_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"booking_{int(time.time() * 1000)}_{suffix}"


def new_booking(
    venue: Venue,
    booking_date: date,
    time_slot: str,
    booker_name: str,
    department: str,
    purpose: str,
    booked_by: str,
    attendees: Optional[int] = None,
    contact_email: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> Booking:
    return Booking(
        id=generate_booking_id(),
        venue_id=venue.id,
        venue_name=venue.name,
        booking_date=booking_date,
        time_slot=time_slot,
        booker_name=booker_name,
        department=department,
        purpose=purpose,
        attendees=attendees,
        contact_email=contact_email,
        booked_by=booked_by,
        status=BookingStatus.PENDING,
        created_at=created_at or datetime.now(),
    )


def is_time_slot_booked(
    bookings: Iterable[Booking], venue_id: str, booking_date: date, time_slot: str
) -> bool:
    return any(
        b.venue_id == venue_id
        and b.booking_date == booking_date
        and b.time_slot == time_slot
        and b.is_active
        for b in bookings
    )


def can_approve(role: str) -> bool:
    return role == PRIVILEGED_ROLE


def can_cancel(username: str, booking: Booking) -> bool:
    return booking.booked_by == username


def can_delete(username: str, role: str, booking: Booking) -> bool:
    return booking.booked_by == username or role == PRIVILEGED_ROLE


# ================== SERIALIZATION ==================
_booking_list = TypeAdapter(List[Booking])


def dump_bookings(bookings: List[Booking]) -> str:
    return _booking_list.dump_json(bookings, by_alias=True).decode("utf-8")


def load_bookings(raw: Optional[str]) -> List[Booking]:
    """Parse the stored blob; anything absent or unreadable counts as no bookings."""
    if not raw:
        return []
    try:
        return _booking_list.validate_json(raw)
    except ValidationError as e:
        logger.warning("Discarding unreadable booking data: %s", e.errors()[:1])
        return []


# ================== STORE ==================
class BookingStore:
    """
    Owns the booking list.

    ``on_change`` is called with the full list after every mutation that
    actually changed something; it is how the list gets mirrored to storage.
    """

    def __init__(
        self,
        bookings: Optional[Iterable[Booking]] = None,
        on_change: Optional[Callable[[List[Booking]], None]] = None,
    ):
        self._bookings: List[Booking] = list(bookings or [])
        self._on_change = on_change

    def __len__(self):
        return len(self._bookings)

    def all(self) -> List[Booking]:
        return list(self._bookings)

    def for_owner(self, username: str) -> List[Booking]:
        return [b for b in self._bookings if b.booked_by == username]

    def get(self, booking_id: str) -> Booking:
        for b in self._bookings:
            if b.id == booking_id:
                return b
        raise BookingNotFound(f"Booking {booking_id} not found")

    def is_booked(self, venue_id: str, booking_date: date, time_slot: str) -> bool:
        return is_time_slot_booked(self._bookings, venue_id, booking_date, time_slot)

    def add(self, booking: Booking) -> Booking:
        if self.is_booked(booking.venue_id, booking.booking_date, booking.time_slot):
            raise SlotUnavailable(
                "This time slot is already booked. Please select another time."
            )
        self._bookings.append(booking)
        logger.info(
            "Booking %s created: %s %s %s by %s",
            booking.id, booking.venue_id, booking.booking_date, booking.time_slot, booking.booked_by,
        )
        self._changed()
        return booking

    def cancel(self, booking_id: str, username: str) -> Booking:
        booking = self.get(booking_id)
        if not can_cancel(username, booking):
            raise PermissionDenied("Only the requester can cancel this booking")
        return self._transition(booking, BookingStatus.CANCELLED)

    def approve(self, booking_id: str, role: str) -> Booking:
        booking = self.get(booking_id)
        if not can_approve(role):
            raise PermissionDenied("Only a head of department can approve bookings")
        return self._transition(booking, BookingStatus.APPROVED)

    def reject(self, booking_id: str, role: str) -> Booking:
        booking = self.get(booking_id)
        if not can_approve(role):
            raise PermissionDenied("Only a head of department can reject bookings")
        return self._transition(booking, BookingStatus.REJECTED)

    def delete(self, booking_id: str, username: str, role: str) -> Booking:
        booking = self.get(booking_id)
        if not can_delete(username, role, booking):
            raise PermissionDenied("Not allowed to delete this booking")
        self._bookings = [b for b in self._bookings if b.id != booking_id]
        logger.info("Booking %s deleted by %s", booking_id, username)
        self._changed()
        return booking

    def _transition(self, booking: Booking, status: BookingStatus) -> Booking:
        if booking.is_terminal:
            logger.debug("Booking %s already %s, ignoring %s", booking.id, booking.status.value, status.value)
            return booking

        updated = booking.model_copy(update={"status": status})
        self._bookings = [updated if b.id == booking.id else b for b in self._bookings]
        logger.info("Booking %s: %s -> %s", booking.id, booking.status.value, status.value)
        self._changed()
        return updated

    def _changed(self):
        if self._on_change is not None:
            self._on_change(self.all())
