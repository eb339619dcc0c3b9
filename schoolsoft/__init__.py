"""Client library for the SchoolSoft mobile app API."""

from .client import Client, UserSession
from .models import (
    Lesson,
    Lunch,
    LunchMenu,
    Occasion,
    Org,
    SchoolListing,
    ScheduleDay,
    ScheduleWeek,
    Token,
    User,
    UserType,
    Weekday,
)
from .schedule import Schedule, build_schedule, find_next_lesson

__all__ = [
    "Client",
    "UserSession",
    "Lesson",
    "Lunch",
    "LunchMenu",
    "Occasion",
    "Org",
    "SchoolListing",
    "ScheduleDay",
    "ScheduleWeek",
    "Token",
    "User",
    "UserType",
    "Weekday",
    "Schedule",
    "build_schedule",
    "find_next_lesson",
]
