"""iCalendar transformer for SchoolSoft schedules."""

import hashlib
import logging
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from icalendar import Calendar, Event

from schoolsoft.models import Lesson
from schoolsoft.schedule import Schedule
from .base import BaseTransformer

logger = logging.getLogger(__name__)


class ICalTransformer(BaseTransformer):
    """Transformer that converts a schedule to iCalendar format.

    Every placed lesson becomes its own event. Occasions in SchoolSoft skip
    arbitrary weeks, so the calendar does not use recurrence rules.
    """

    DEFAULT_TIMEZONE = ZoneInfo("Europe/Stockholm")
    UID_DOMAIN = "schoolsoft.se"

    def __init__(self, timezone: Optional[ZoneInfo] = None, calendar_name: str = "Schedule") -> None:
        """Initialize the iCalendar transformer.

        Args:
            timezone: Timezone the lesson times are given in.
            calendar_name: Value of the calendar's X-WR-CALNAME.
        """
        self._calendar: Optional[Calendar] = None
        self._timezone = timezone or self.DEFAULT_TIMEZONE
        self._calendar_name = calendar_name

    def _generate_uid(self, day: date, lesson: Lesson, occurrence: int) -> str:
        """Generate a stable identifier for a lesson on a given day.

        Args:
            day: Date the lesson takes place.
            lesson: The lesson.
            occurrence: How many identical lessons came before it that day.

        Returns:
            Unique identifier string.
        """
        unique_string = (
            f"{day.isoformat()}-{lesson.start}-{lesson.end}-"
            f"{lesson.name}-{lesson.room}-{occurrence}"
        )
        return hashlib.md5(unique_string.encode()).hexdigest() + f"@{self.UID_DOMAIN}"

    def transform(
        self,
        schedule: Schedule,
        start_date: date,
        end_date: date
    ) -> Calendar:
        """Transform the lessons of a schedule into an iCalendar calendar.

        Args:
            schedule: Populated schedule.
            start_date: First day to include.
            end_date: Last day to include.

        Returns:
            iCalendar Calendar object.
        """
        self._calendar = Calendar()
        self._calendar.add("prodid", "-//SchoolSoft Schedule to iCal//schoolsoft2ical//SV")
        self._calendar.add("version", "2.0")
        self._calendar.add("calscale", "GREGORIAN")
        self._calendar.add("method", "PUBLISH")
        self._calendar.add("x-wr-calname", self._calendar_name)
        self._calendar.add("x-wr-timezone", str(self._timezone))

        stamp = datetime.now(self._timezone)
        seen: dict[tuple, int] = {}
        count = 0

        for schedule_day, lesson in self.placed_lessons(schedule, start_date, end_date):
            key = (schedule_day.date, lesson)
            occurrence = seen.get(key, 0)
            seen[key] = occurrence + 1

            ical_event = Event()
            ical_event.add("uid", self._generate_uid(schedule_day.date, lesson, occurrence))
            ical_event.add(
                "dtstart",
                datetime.combine(schedule_day.date, lesson.start, tzinfo=self._timezone)
            )
            ical_event.add(
                "dtend",
                datetime.combine(schedule_day.date, lesson.end, tzinfo=self._timezone)
            )
            ical_event.add("dtstamp", stamp)
            ical_event.add("summary", lesson.name)

            if lesson.room:
                ical_event.add("location", lesson.room)

            self._calendar.add_component(ical_event)
            count += 1

        logger.info("Exported %d lessons between %s and %s", count, start_date, end_date)
        return self._calendar

    def save(self, output_path: str) -> None:
        """Save the calendar to an .ics file.

        Args:
            output_path: Path to the output file.

        Raises:
            RuntimeError: If transform() hasn't been called yet.
        """
        if self._calendar is None:
            raise RuntimeError("No calendar data. Call transform() first.")

        with open(output_path, "wb") as f:
            f.write(self._calendar.to_ical())
