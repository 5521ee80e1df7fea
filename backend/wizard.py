"""
Step-by-step booking selection: venue, then date, then time slot, then the
booking form.

Choosing an earlier step throws away everything chosen after it. Any
operation that fails raises WizardError and leaves the wizard untouched.
"""

import logging
from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ValidationError

from bookings import Booking, BookingStore, new_booking
from catalog import Venue, get_time_slot, get_venue

logger = logging.getLogger(__name__)

SLOT_TAKEN_MESSAGE = "This time slot is already booked. Please select another time."
INCOMPLETE_MESSAGE = "Please fill in all required fields."
TEXT_FIELDS = ("booker_name", "department", "purpose")


class WizardStep(str, Enum):
    NO_VENUE = "no_venue"
    VENUE_CHOSEN = "venue_chosen"
    DATE_CHOSEN = "date_chosen"
    SLOT_CHOSEN = "slot_chosen"
    SUBMITTED = "submitted"


class WizardError(Exception):
    pass


class BookingForm(BaseModel):
    booker_name: str = ""
    department: str = ""
    purpose: str = ""
    attendees: Optional[int] = None
    contact_email: Optional[str] = None


class SelectionWizard:
    def __init__(self, booker_name: str = "", department: str = ""):
        self.venue: Optional[Venue] = None
        self.selected_date: Optional[date] = None
        self.time_slot: Optional[str] = None
        self.show_form = False
        self.form = BookingForm(booker_name=booker_name, department=department)
        self._submitted = False

    @property
    def step(self) -> WizardStep:
        if self.venue is None:
            return WizardStep.NO_VENUE
        if self.selected_date is None:
            return WizardStep.VENUE_CHOSEN
        if self.time_slot is not None and self.show_form:
            return WizardStep.SLOT_CHOSEN
        if self._submitted:
            return WizardStep.SUBMITTED
        return WizardStep.DATE_CHOSEN

    def select_venue(self, venue_id: str):
        venue = get_venue(venue_id)
        if venue is None:
            raise WizardError(f"Unknown venue: {venue_id}")

        self.venue = venue
        self.selected_date = None
        self.time_slot = None
        self.show_form = False
        self._submitted = False

    def select_date(self, value: date, today: date):
        if self.venue is None:
            raise WizardError("Please select a venue first.")
        if value < today:
            raise WizardError("Past dates cannot be booked.")

        self.selected_date = value
        self.time_slot = None
        self.show_form = False
        self._submitted = False

    def select_time_slot(self, slot_id: str, store: BookingStore):
        if self.venue is None or self.selected_date is None:
            raise WizardError("Please select a venue and a date first.")
        if get_time_slot(slot_id) is None:
            raise WizardError(f"Unknown time slot: {slot_id}")
        if store.is_booked(self.venue.id, self.selected_date, slot_id):
            raise WizardError(SLOT_TAKEN_MESSAGE)

        self.time_slot = slot_id
        self.show_form = True
        self._submitted = False

    def update_form(self, **fields):
        # a cleared text field is an empty one
        for name in TEXT_FIELDS:
            if name in fields and fields[name] is None:
                fields[name] = ""
        try:
            self.form = BookingForm.model_validate({**self.form.model_dump(), **fields})
        except ValidationError as e:
            raise WizardError(f"Invalid booking details: {e.errors()[0]['msg']}")

    def close_form(self):
        self.show_form = False
        self.time_slot = None

    def submit(
        self,
        store: BookingStore,
        username: str,
        today: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> Booking:
        form = self.form
        if (
            self.venue is None
            or self.selected_date is None
            or self.time_slot is None
            or not form.purpose.strip()
        ):
            raise WizardError(INCOMPLETE_MESSAGE)
        # the day may have turned since the date was picked
        if today is not None and self.selected_date < today:
            raise WizardError("Past dates cannot be booked.")
        if form.attendees is not None and not 1 <= form.attendees <= self.venue.capacity:
            raise WizardError(
                f"Attendees must be between 1 and {self.venue.capacity} for {self.venue.name}."
            )

        booking = store.add(new_booking(
            venue=self.venue,
            booking_date=self.selected_date,
            time_slot=self.time_slot,
            booker_name=form.booker_name.strip() or username,
            department=form.department.strip(),
            purpose=form.purpose.strip(),
            booked_by=username,
            attendees=form.attendees,
            contact_email=form.contact_email,
            created_at=now,
        ))

        self.form = form.model_copy(update={"purpose": ""})
        self.show_form = False
        self.time_slot = None
        self._submitted = True
        logger.debug("Wizard for %s submitted %s", username, booking.id)
        return booking

    def snapshot(self) -> dict:
        return {
            "step": self.step.value,
            "venue_id": self.venue.id if self.venue else None,
            "date": self.selected_date.isoformat() if self.selected_date else None,
            "time_slot": self.time_slot,
            "show_form": self.show_form,
            "form": self.form.model_dump(),
        }
