from fastapi import FastAPI, HTTPException, Form, Depends, Response, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.concurrency import run_in_threadpool
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from pydantic import BaseModel
from datetime import date
from typing import Dict, List, Optional
import logging

from auth import (
    SessionUser,
    USER_TYPES,
    clear_session_flags,
    get_current_user,
    set_session_flags,
)
from bookings import (
    Booking,
    BookingError,
    BookingNotFound,
    BookingStore,
    PermissionDenied,
    SlotUnavailable,
    can_approve,
    dump_bookings,
    load_bookings,
)
from catalog import TIME_SLOTS, VENUES, TimeSlot, Venue, format_date, get_venue, week_dates
from config import settings
from notifications import notify_approver, send_booking_confirmation
from storage import Base, KeyValueStorage
from wizard import SelectionWizard, WizardError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# ================== DATABASE ==================
engine = create_engine(settings.DATABASE_URL, connect_args={"check_same_thread": False})
SessionLocal = sessionmaker(bind=engine)

Base.metadata.create_all(engine)


def build_store(storage: KeyValueStorage, key: str = settings.STORAGE_KEY) -> BookingStore:
    bookings = load_bookings(storage.get_item(key))
    logger.info("Loaded %d bookings from storage", len(bookings))
    return BookingStore(
        bookings,
        on_change=lambda items: storage.set_item(key, dump_bookings(items)),
    )


store = build_store(KeyValueStorage(SessionLocal))
wizards: Dict[str, SelectionWizard] = {}


def get_store() -> BookingStore:
    return store


def get_wizard(user: SessionUser = Depends(get_current_user)) -> SelectionWizard:
    if user.username not in wizards:
        wizards[user.username] = SelectionWizard(booker_name=user.username)
    return wizards[user.username]


def today() -> date:
    return date.today()


def http_error(e: Exception) -> HTTPException:
    if isinstance(e, BookingNotFound):
        return HTTPException(status.HTTP_404_NOT_FOUND, str(e))
    if isinstance(e, PermissionDenied):
        return HTTPException(status.HTTP_403_FORBIDDEN, str(e))
    if isinstance(e, SlotUnavailable):
        return HTTPException(status.HTTP_409_CONFLICT, str(e))
    return HTTPException(status.HTTP_400_BAD_REQUEST, str(e))


# ================== SCHEMAS ==================
class VenueChoice(BaseModel):
    venue_id: str


class DateChoice(BaseModel):
    date: date


class SlotChoice(BaseModel):
    time_slot_id: str


class FormUpdate(BaseModel):
    booker_name: Optional[str] = None
    department: Optional[str] = None
    purpose: Optional[str] = None
    attendees: Optional[int] = None
    contact_email: Optional[str] = None


# ================== APP ==================
app = FastAPI(title=f"{settings.UNIVERSITY_NAME} Venue Booking System")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# ================== SESSION ==================
LOGIN_PAGE = """
<html>
<body>
    <h2>{university} Venue Booking</h2>
    <form method="post" action="/login">
        <input name="username" placeholder="User name" required>
        <select name="user_type">
            <option value="faculty">Faculty</option>
            <option value="hod">Head of Department</option>
        </select>
        <button type="submit">Sign in</button>
    </form>
</body>
</html>
"""


@app.get("/login", response_class=HTMLResponse)
def login_page():
    return LOGIN_PAGE.format(university=settings.UNIVERSITY_NAME)


@app.post("/login")
def login(response: Response, username: str = Form(...), user_type: str = Form(...)):
    username = username.strip()
    if not username or user_type not in USER_TYPES:
        raise HTTPException(400, "Invalid user name or user type")
    set_session_flags(response, username, user_type)
    logger.info("%s signed in as %s", username, user_type)
    return {"ok": True, "username": username, "user_type": user_type}


@app.get("/logout")
def logout():
    response = RedirectResponse(url="/login", status_code=status.HTTP_303_SEE_OTHER)
    clear_session_flags(response)
    return response


@app.get("/api/me", response_model=SessionUser)
def me(user: SessionUser = Depends(get_current_user)):
    return user


# ================== CATALOG ==================
@app.get("/api/venues", response_model=List[Venue])
def get_venues():
    return VENUES


@app.get("/api/time-slots", response_model=List[TimeSlot])
def get_time_slots():
    return TIME_SLOTS


@app.get("/api/calendar")
def calendar():
    current = today()
    return [
        {"date": d.isoformat(), "label": format_date(d), "is_today": d == current}
        for d in week_dates(current)
    ]


@app.get("/api/availability")
def availability(venue_id: str, date: date, bookings: BookingStore = Depends(get_store)):
    if get_venue(venue_id) is None:
        raise HTTPException(404, "Venue not found")
    return [
        {
            "id": slot.id,
            "time": slot.time,
            "period": slot.period,
            "booked": bookings.is_booked(venue_id, date, slot.id),
        }
        for slot in TIME_SLOTS
    ]


# ================== WIZARD ==================
@app.get("/api/wizard")
def wizard_state(wizard: SelectionWizard = Depends(get_wizard)):
    return wizard.snapshot()


@app.post("/api/wizard/venue")
def wizard_venue(choice: VenueChoice, wizard: SelectionWizard = Depends(get_wizard)):
    try:
        wizard.select_venue(choice.venue_id)
    except WizardError as e:
        raise http_error(e)
    return wizard.snapshot()


@app.post("/api/wizard/date")
def wizard_date(choice: DateChoice, wizard: SelectionWizard = Depends(get_wizard)):
    try:
        wizard.select_date(choice.date, today())
    except WizardError as e:
        raise http_error(e)
    return wizard.snapshot()


@app.post("/api/wizard/slot")
def wizard_slot(
    choice: SlotChoice,
    wizard: SelectionWizard = Depends(get_wizard),
    bookings: BookingStore = Depends(get_store),
):
    try:
        wizard.select_time_slot(choice.time_slot_id, bookings)
    except WizardError as e:
        raise http_error(e)
    return wizard.snapshot()


@app.put("/api/wizard/form")
def wizard_form(update: FormUpdate, wizard: SelectionWizard = Depends(get_wizard)):
    try:
        wizard.update_form(**update.model_dump(exclude_unset=True))
    except WizardError as e:
        raise http_error(e)
    return wizard.snapshot()


@app.post("/api/wizard/form/close")
def wizard_close_form(wizard: SelectionWizard = Depends(get_wizard)):
    wizard.close_form()
    return wizard.snapshot()


@app.post("/api/wizard/submit", response_model=Booking, status_code=status.HTTP_201_CREATED)
async def wizard_submit(
    user: SessionUser = Depends(get_current_user),
    wizard: SelectionWizard = Depends(get_wizard),
    bookings: BookingStore = Depends(get_store),
):
    try:
        booking = wizard.submit(bookings, user.username, today=today())
    except (WizardError, BookingError) as e:
        raise http_error(e)

    await send_booking_confirmation(booking, settings)
    await run_in_threadpool(notify_approver, booking, settings)
    return booking


# ================== BOOKINGS ==================
@app.get("/api/bookings/mine", response_model=List[Booking])
def my_bookings(
    user: SessionUser = Depends(get_current_user),
    bookings: BookingStore = Depends(get_store),
):
    return bookings.for_owner(user.username)


@app.get("/api/bookings", response_model=List[Booking])
def all_bookings(
    user: SessionUser = Depends(get_current_user),
    bookings: BookingStore = Depends(get_store),
):
    if not can_approve(user.user_type):
        raise HTTPException(403, "Only a head of department can list all bookings")
    return bookings.all()


@app.post("/api/bookings/{booking_id}/cancel", response_model=Booking)
def cancel_booking(
    booking_id: str,
    user: SessionUser = Depends(get_current_user),
    bookings: BookingStore = Depends(get_store),
):
    try:
        return bookings.cancel(booking_id, user.username)
    except BookingError as e:
        raise http_error(e)


@app.post("/api/bookings/{booking_id}/approve", response_model=Booking)
def approve_booking(
    booking_id: str,
    user: SessionUser = Depends(get_current_user),
    bookings: BookingStore = Depends(get_store),
):
    try:
        return bookings.approve(booking_id, user.user_type)
    except BookingError as e:
        raise http_error(e)


@app.post("/api/bookings/{booking_id}/reject", response_model=Booking)
def reject_booking(
    booking_id: str,
    user: SessionUser = Depends(get_current_user),
    bookings: BookingStore = Depends(get_store),
):
    try:
        return bookings.reject(booking_id, user.user_type)
    except BookingError as e:
        raise http_error(e)


@app.delete("/api/bookings/{booking_id}")
def delete_booking(
    booking_id: str,
    user: SessionUser = Depends(get_current_user),
    bookings: BookingStore = Depends(get_store),
):
    try:
        bookings.delete(booking_id, user.username, user.user_type)
    except BookingError as e:
        raise http_error(e)
    return {"ok": True}
