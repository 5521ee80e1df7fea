from datetime import date

import pytest

from bookings import BookingStatus, BookingStore
from wizard import INCOMPLETE_MESSAGE, SLOT_TAKEN_MESSAGE, SelectionWizard, WizardError, WizardStep

TODAY = date(2024, 3, 1)
DAY = date(2024, 3, 10)


@pytest.fixture
def store():
    return BookingStore()


@pytest.fixture
def wizard():
    return SelectionWizard(booker_name="Dr. Rajesh Kumar", department="Computer Science")


def walk(wizard, store, slot="9-10", purpose="Board Meeting"):
    wizard.select_venue("auditorium")
    wizard.select_date(DAY, TODAY)
    wizard.select_time_slot(slot, store)
    wizard.update_form(purpose=purpose)


def test_steps_in_order(wizard, store):
    assert wizard.step == WizardStep.NO_VENUE
    wizard.select_venue("auditorium")
    assert wizard.step == WizardStep.VENUE_CHOSEN
    wizard.select_date(DAY, TODAY)
    assert wizard.step == WizardStep.DATE_CHOSEN
    wizard.select_time_slot("9-10", store)
    assert wizard.step == WizardStep.SLOT_CHOSEN
    assert wizard.show_form


def test_date_needs_venue(wizard):
    with pytest.raises(WizardError):
        wizard.select_date(DAY, TODAY)
    assert wizard.step == WizardStep.NO_VENUE


def test_unknown_venue_keeps_state(wizard, store):
    walk(wizard, store)
    with pytest.raises(WizardError):
        wizard.select_venue("gym")
    assert wizard.step == WizardStep.SLOT_CHOSEN


def test_today_is_selectable_past_is_not(wizard):
    wizard.select_venue("auditorium")
    wizard.select_date(TODAY, TODAY)
    assert wizard.selected_date == TODAY

    with pytest.raises(WizardError):
        wizard.select_date(date(2024, 2, 29), TODAY)
    assert wizard.selected_date == TODAY


def test_new_date_clears_slot_and_form(wizard, store):
    walk(wizard, store)
    wizard.select_date(date(2024, 3, 11), TODAY)
    assert wizard.time_slot is None
    assert not wizard.show_form
    assert wizard.step == WizardStep.DATE_CHOSEN


def test_taken_slot_is_refused(wizard, store):
    walk(wizard, store)
    wizard.submit(store, "rkumar")

    other = SelectionWizard()
    other.select_venue("auditorium")
    other.select_date(DAY, TODAY)
    with pytest.raises(WizardError, match=SLOT_TAKEN_MESSAGE):
        other.select_time_slot("9-10", store)
    assert other.step == WizardStep.DATE_CHOSEN

    other.select_time_slot("10-11", store)
    assert other.step == WizardStep.SLOT_CHOSEN


def test_unknown_slot(wizard, store):
    wizard.select_venue("auditorium")
    wizard.select_date(DAY, TODAY)
    with pytest.raises(WizardError):
        wizard.select_time_slot("18-19", store)


def test_submit_creates_pending_booking(wizard, store):
    walk(wizard, store)
    booking = wizard.submit(store, "rkumar")

    assert len(store) == 1
    assert booking.status == BookingStatus.PENDING
    assert booking.venue_name == "Main Auditorium"
    assert booking.booker_name == "Dr. Rajesh Kumar"
    assert booking.booked_by == "rkumar"

    assert wizard.step == WizardStep.SUBMITTED
    assert wizard.time_slot is None
    assert not wizard.show_form
    assert wizard.form.purpose == ""
    assert wizard.form.department == "Computer Science"
    assert wizard.selected_date == DAY


@pytest.mark.parametrize("purpose", ["", "   "])
def test_submit_without_purpose_changes_nothing(wizard, store, purpose):
    walk(wizard, store, purpose=purpose)
    with pytest.raises(WizardError, match=INCOMPLETE_MESSAGE):
        wizard.submit(store, "rkumar")
    assert len(store) == 0
    assert wizard.step == WizardStep.SLOT_CHOSEN


def test_submit_without_slot(wizard, store):
    wizard.select_venue("auditorium")
    wizard.select_date(DAY, TODAY)
    wizard.update_form(purpose="Board Meeting")
    with pytest.raises(WizardError):
        wizard.submit(store, "rkumar")
    assert len(store) == 0


def test_close_form_drops_slot(wizard, store):
    walk(wizard, store)
    wizard.close_form()
    assert wizard.step == WizardStep.DATE_CHOSEN
    with pytest.raises(WizardError):
        wizard.submit(store, "rkumar")


def test_blank_name_falls_back_to_user(wizard, store):
    walk(wizard, store)
    wizard.update_form(booker_name="  ", attendees=40, contact_email="rk@geeta.edu.in")
    booking = wizard.submit(store, "rkumar")
    assert booking.booker_name == "rkumar"
    assert booking.attendees == 40
    assert booking.contact_email == "rk@geeta.edu.in"


def test_cleared_text_fields_become_empty(wizard, store):
    walk(wizard, store)
    wizard.update_form(purpose=None, booker_name=None, department=None)
    assert wizard.form.purpose == ""
    assert wizard.form.booker_name == ""

    with pytest.raises(WizardError, match=INCOMPLETE_MESSAGE):
        wizard.submit(store, "rkumar")
    assert len(store) == 0
    assert wizard.step == WizardStep.SLOT_CHOSEN


def test_invalid_form_value_keeps_form(wizard, store):
    walk(wizard, store)
    with pytest.raises(WizardError):
        wizard.update_form(attendees="many")
    assert wizard.form.purpose == "Board Meeting"
    assert wizard.form.attendees is None


def test_submit_refuses_date_that_has_passed(wizard, store):
    walk(wizard, store)
    with pytest.raises(WizardError, match="Past dates"):
        wizard.submit(store, "rkumar", today=date(2024, 3, 11))
    assert len(store) == 0
    assert wizard.step == WizardStep.SLOT_CHOSEN

    booking = wizard.submit(store, "rkumar", today=DAY)
    assert booking.booking_date == DAY
