from datetime import date, timedelta
from typing import List, Optional

from pydantic import BaseModel


class Venue(BaseModel):
    id: str
    name: str
    description: str
    capacity: int
    location: str
    features: List[str]
    category: str

    model_config = {"frozen": True}


class TimeSlot(BaseModel):
    id: str
    time: str
    period: str

    model_config = {"frozen": True}


# ================== VENUES ==================
VENUES = [
    Venue(
        id="auditorium",
        name="Main Auditorium",
        description="Large capacity auditorium perfect for conferences, seminars, and major events",
        capacity=500,
        location="Main Building, Ground Floor",
        features=["Air Conditioning", "Projector", "Sound System", "Stage", "Microphones"],
        category="Auditorium",
    ),
    Venue(
        id="e-block-seminar",
        name="E Block Seminar Hall",
        description="Modern seminar hall ideal for workshops, presentations, and departmental meetings",
        capacity=100,
        location="E Block, 2nd Floor",
        features=["Air Conditioning", "Projector", "Whiteboard", "Wi-Fi", "Video Conferencing"],
        category="Seminar Hall",
    ),
    Venue(
        id="d-block-seminar",
        name="D Block Seminar Hall",
        description="Versatile seminar hall suitable for training sessions and academic events",
        capacity=80,
        location="D Block, 1st Floor",
        features=["Air Conditioning", "Smart Board", "Audio System", "Wi-Fi"],
        category="Seminar Hall",
    ),
]

# ================== TIME SLOTS ==================
# 09:00 - 18:00, one hour each
TIME_SLOTS = [
    TimeSlot(
        id=f"{hour}-{hour + 1}",
        time=f"{hour:02d}:00 - {hour + 1:02d}:00",
        period="AM" if hour < 12 else "PM",
    )
    for hour in range(9, 18)
]

_VENUES_BY_ID = {v.id: v for v in VENUES}
_SLOTS_BY_ID = {s.id: s for s in TIME_SLOTS}


def get_venue(venue_id: str) -> Optional[Venue]:
    return _VENUES_BY_ID.get(venue_id)


def get_time_slot(slot_id: str) -> Optional[TimeSlot]:
    return _SLOTS_BY_ID.get(slot_id)


def week_dates(today: date) -> List[date]:
    """Seven calendar days starting with today."""
    return [today + timedelta(days=i) for i in range(7)]


def format_date(value: date) -> str:
    # Sunday, 10 March 2024
    return f"{value.strftime('%A')}, {value.day} {value.strftime('%B %Y')}"
