"""Data models for SchoolSoft users, schedules and lunch menus."""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime, time, timedelta
from enum import IntEnum
from typing import Any, Optional
from uuid import UUID


def _json_dict(items: list[tuple[str, Any]]) -> dict[str, Any]:
    """``asdict`` factory writing dates and datetimes in ISO 8601."""
    return {
        key: value.isoformat() if isinstance(value, (date, datetime)) else value
        for key, value in items
    }


class Weekday(IntEnum):
    """Day of the week, encoded the way SchoolSoft sends ``dayId``."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6


class UserType(IntEnum):
    """The kind of account that logged in."""

    STUDENT = 1
    PARENT = 2
    TEACHER = 3

    @property
    def path(self) -> str:
        """Name used in API paths, e.g. ``/api/lessons/student/1``."""
        return self.name.lower()


@dataclass
class Occasion:
    """A recurring weekly timetable slot with its resolved weeks."""

    id: int
    uuid: UUID
    start_time: time
    end_time: time
    subject_name: str
    room_name: str
    week_day: Weekday
    weeks: list[int] = field(default_factory=list)  # ascending, 1-53

    def __post_init__(self) -> None:
        if any(not 1 <= week <= 53 for week in self.weeks):
            raise ValueError(f"Weeks must be within 1-53, got {self.weeks}")

    def to_lesson(self) -> "Lesson":
        return Lesson(
            start=self.start_time,
            end=self.end_time,
            name=self.subject_name,
            room=self.room_name
        )


@dataclass(frozen=True)
class Lesson:
    """A placed instance of an occasion on one specific day."""

    start: time
    end: time
    name: str
    room: str


@dataclass
class ScheduleDay:
    """One calendar date and the lessons placed on it, in insertion order."""

    date: date
    lessons: list[Lesson] = field(default_factory=list)

    @property
    def weekday(self) -> Weekday:
        return Weekday(self.date.weekday())

    def sorted_lessons(self) -> list[Lesson]:
        """Lessons ordered by start time (insertion order is not chronological)."""
        return sorted(self.lessons, key=lambda lesson: (lesson.start, lesson.end))


@dataclass
class ScheduleWeek:
    """One ISO week of the schedule with a day container per weekday."""

    year: int
    week: int
    days: list[ScheduleDay]

    def __post_init__(self) -> None:
        if len(self.days) != 7:
            raise ValueError(f"A week needs 7 days, got {len(self.days)}")

    @classmethod
    def empty(cls, year: int, week: int) -> "ScheduleWeek":
        """Create a week without lessons for ISO ``year``/``week``.

        Args:
            year: ISO year.
            week: ISO week number within that year.

        Returns:
            ScheduleWeek whose days are dated Monday through Sunday.
        """
        monday = date.fromisocalendar(year, week, 1)
        days = [ScheduleDay(monday + timedelta(days=offset)) for offset in range(7)]
        return cls(year=year, week=week, days=days)

    @property
    def first_day(self) -> date:
        return self.days[0].date

    def day(self, weekday: Weekday) -> ScheduleDay:
        return self.days[Weekday(weekday)]

    @property
    def monday(self) -> ScheduleDay:
        return self.days[Weekday.MONDAY]

    @property
    def tuesday(self) -> ScheduleDay:
        return self.days[Weekday.TUESDAY]

    @property
    def wednesday(self) -> ScheduleDay:
        return self.days[Weekday.WEDNESDAY]

    @property
    def thursday(self) -> ScheduleDay:
        return self.days[Weekday.THURSDAY]

    @property
    def friday(self) -> ScheduleDay:
        return self.days[Weekday.FRIDAY]

    @property
    def saturday(self) -> ScheduleDay:
        return self.days[Weekday.SATURDAY]

    @property
    def sunday(self) -> ScheduleDay:
        return self.days[Weekday.SUNDAY]


@dataclass(frozen=True)
class SkippedPlacement:
    """An occasion week that had no slot in the schedule."""

    occasion_id: int
    subject_name: str
    week: int
    slot_count: int

    def __str__(self) -> str:
        return (
            f"Occasion {self.occasion_id} ({self.subject_name}) recurs in week "
            f"{self.week} but the schedule only has {self.slot_count} weeks"
        )


@dataclass(frozen=True)
class Token:
    """A session token, valid for roughly three hours after it is issued.

    The token is refreshed with the app key received at login. Time checks
    take the current time as an argument so that the caller decides which
    clock to trust.
    """

    token: str
    expires: datetime

    SAFETY_MARGIN = timedelta(minutes=1)

    def expires_in(self, now: datetime) -> timedelta:
        return self.expires - now

    def is_expired(self, now: datetime) -> bool:
        return self.expires < now

    def is_valid(self, now: datetime) -> bool:
        return not self.is_expired(now)

    def is_safe(self, now: datetime) -> bool:
        """True if more than a minute is left before the token expires."""
        return self.expires_in(now) > self.SAFETY_MARGIN


@dataclass
class Org:
    """An organization (school) the user belongs to."""

    id: int
    name: str
    blogger: bool
    school_type: int
    leisure_school: int
    school_class: str  # "class" on the wire
    token_login: str  # browser login url, not the token endpoint


@dataclass
class User:
    """A logged in SchoolSoft user, as described by the login response."""

    id: int
    name: str
    user_type: UserType
    app_key: str
    orgs: list[Org]
    picture_url: str = ""
    is_of_age: bool = False

    @property
    def org(self) -> Org:
        """The organization API calls are made against (always the first one)."""
        if not self.orgs:
            raise ValueError(f"User {self.id} does not belong to any organization")
        return self.orgs[0]


@dataclass
class LoginMethods:
    """Login methods available per user type. The app API needs method 4."""

    student: list[int] = field(default_factory=list)
    teacher: list[int] = field(default_factory=list)
    parent: list[int] = field(default_factory=list)

    APP_LOGIN = 4

    def supports_app(self, user_type: UserType) -> bool:
        methods = {
            UserType.STUDENT: self.student,
            UserType.TEACHER: self.teacher,
            UserType.PARENT: self.parent,
        }[user_type]
        return self.APP_LOGIN in methods

    def to_dict(self) -> dict[str, Any]:
        return asdict(self, dict_factory=_json_dict)


@dataclass
class SchoolListing:
    """An entry of the public school directory."""

    name: str
    url: str
    url_name: str  # the school's path segment, used when logging in
    login_methods: LoginMethods

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict with ``login_methods`` nested as a dict."""
        return asdict(self, dict_factory=_json_dict)


@dataclass
class Lunch:
    """The food served on one day."""

    date: date
    food: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self, dict_factory=_json_dict)


@dataclass
class LunchMenu:
    """A week's lunch menu, Monday through Friday."""

    week: int
    created_at: datetime
    category: str
    monday: Lunch
    tuesday: Lunch
    wednesday: Lunch
    thursday: Lunch
    friday: Lunch

    @property
    def days(self) -> list[Lunch]:
        return [self.monday, self.tuesday, self.wednesday, self.thursday, self.friday]

    def on(self, day: date) -> Optional[Lunch]:
        """Return the lunch served on ``day``, if it is part of this menu."""
        for lunch in self.days:
            if lunch.date == day:
                return lunch
        return None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict; ``created_at`` and every lunch date are ISO strings."""
        return asdict(self, dict_factory=_json_dict)
