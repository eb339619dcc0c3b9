"""Reconstruction of a dated calendar from resolved occasions.

A schedule covers one school year: 26 weeks of one calendar year and the
remaining 26 or 27 weeks of the year before it. Slot ``i`` holds ISO week
``i + 1``, so a week number from an occasion maps directly onto a slot.

If the anchor date is in the first half of its year, the school year started
last autumn: slots 0-25 are weeks 1-26 of the anchor year and the remaining
slots are weeks 27 and up of the previous year. Otherwise the school year
runs into next year: slots 0-25 are weeks 1-26 of the next year and the
remaining slots weeks 27 and up of the anchor year.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from .errors import OccasionError
from .models import Lesson, Occasion, ScheduleDay, ScheduleWeek, SkippedPlacement, Weekday
from .occasion import parse_occasions, parse_occasions_partial

logger = logging.getLogger(__name__)

FRONT_WEEKS = 26
FIRST_HALF_DAYS = 365 // 2


def iso_weeks_in_year(year: int) -> int:
    """Number of ISO weeks (52 or 53) in ``year``."""
    # December 28th always falls in the last ISO week of its year
    return date(year, 12, 28).isocalendar()[1]


def week_plan(anchor: date) -> list[tuple[int, int]]:
    """ISO ``(year, week)`` pairs for every slot of a schedule anchored at ``anchor``.

    Args:
        anchor: The reference "today" of the schedule.

    Returns:
        52 or 53 pairs; the length follows the ISO week count of the year
        that provides the back half.
    """
    if anchor.timetuple().tm_yday < FIRST_HALF_DAYS:
        front_year, back_year = anchor.year, anchor.year - 1
    else:
        front_year, back_year = anchor.year + 1, anchor.year

    plan = [(front_year, week) for week in range(1, FRONT_WEEKS + 1)]
    plan.extend(
        (back_year, week)
        for week in range(FRONT_WEEKS + 1, iso_weeks_in_year(back_year) + 1)
    )
    return plan


@dataclass
class Schedule:
    """The full schedule of a school year, indexed by ISO week number minus one.

    A schedule is built once from a complete occasion list and is read-only
    afterwards.
    """

    anchor: date
    weeks: list[ScheduleWeek]
    skipped: list[SkippedPlacement] = field(default_factory=list)
    errors: list[OccasionError] = field(default_factory=list)

    @classmethod
    def empty(cls, anchor: date) -> "Schedule":
        """Allocate a schedule without lessons around ``anchor``."""
        weeks = [ScheduleWeek.empty(year, week) for year, week in week_plan(anchor)]
        return cls(anchor=anchor, weeks=weeks)

    @classmethod
    def from_json(cls, data: str, anchor: date, partial: bool = False) -> "Schedule":
        """Build a schedule from the body of the lessons endpoint.

        Args:
            data: JSON array of occasion records.
            anchor: Reference date of the schedule.
            partial: Keep going past records that cannot be resolved and
                collect their errors in ``errors`` instead of raising.

        Returns:
            Populated schedule.

        Raises:
            ScheduleParseError: If the body is not a JSON array.
            OccasionError: For the first bad record unless ``partial`` is set.
        """
        if partial:
            occasions, errors = parse_occasions_partial(data)
        else:
            occasions, errors = parse_occasions(data), []

        schedule = build_schedule(anchor, occasions)
        schedule.errors.extend(errors)
        return schedule

    def __len__(self) -> int:
        return len(self.weeks)

    def populate(self, occasions: Iterable[Occasion]) -> None:
        """Place a lesson for every week each occasion recurs on.

        Weeks without a slot are skipped, logged and recorded in ``skipped``.
        """
        for occasion in occasions:
            lesson = occasion.to_lesson()
            for week in occasion.weeks:
                if not 1 <= week <= len(self.weeks):
                    skip = SkippedPlacement(
                        occasion_id=occasion.id,
                        subject_name=occasion.subject_name,
                        week=week,
                        slot_count=len(self.weeks),
                    )
                    logger.warning("%s", skip)
                    self.skipped.append(skip)
                    continue

                self.weeks[week - 1].day(occasion.week_day).lessons.append(lesson)

    def week_at(self, index: int) -> ScheduleWeek:
        """Return the week in slot ``index`` (0-based).

        Raises:
            IndexError: If the slot does not exist.
        """
        if not 0 <= index < len(self.weeks):
            raise IndexError(
                f"Week index {index} is outside the schedule (0-{len(self.weeks) - 1})"
            )
        return self.weeks[index]

    @staticmethod
    def day_of(week: ScheduleWeek, weekday: Weekday) -> ScheduleDay:
        """Return the day container of ``week`` for ``weekday``."""
        return week.day(weekday)

    def day_for(self, day: date) -> Optional[ScheduleDay]:
        """Return the day container for a calendar date, if the schedule covers it."""
        iso_year, iso_week, iso_weekday = day.isocalendar()
        if iso_week > len(self.weeks):
            return None
        week = self.weeks[iso_week - 1]
        if week.year != iso_year:
            return None
        return week.day(Weekday(iso_weekday - 1))

    @property
    def first_day(self) -> date:
        return min(week.first_day for week in self.weeks)

    @property
    def last_day(self) -> date:
        return max(week.first_day for week in self.weeks) + timedelta(days=6)

    def iter_days(self, start: date, end: date) -> Iterable[ScheduleDay]:
        """Yield the covered days from ``start`` to ``end`` inclusive, in date order."""
        current = max(start, self.first_day)
        last = min(end, self.last_day)
        while current <= last:
            schedule_day = self.day_for(current)
            if schedule_day is not None:
                yield schedule_day
            current += timedelta(days=1)


def build_schedule(anchor: date, occasions: Iterable[Occasion]) -> Schedule:
    """Allocate a schedule for ``anchor`` and place every occasion in it."""
    schedule = Schedule.empty(anchor)
    schedule.populate(occasions)
    logger.debug(
        "Built schedule of %d weeks from %s to %s",
        len(schedule), schedule.first_day, schedule.last_day
    )
    return schedule


def find_next_lesson(
    schedule: Schedule,
    now: datetime
) -> Optional[tuple[ScheduleDay, Lesson]]:
    """Find the first lesson that starts at or after ``now``.

    Args:
        schedule: Populated schedule.
        now: Naive local datetime to search from.

    Returns:
        The day and lesson, or None if no lesson is left in the schedule.
    """
    for schedule_day in schedule.iter_days(now.date(), schedule.last_day):
        for lesson in schedule_day.sorted_lessons():
            if datetime.combine(schedule_day.date, lesson.start) >= now:
                return schedule_day, lesson
    return None
