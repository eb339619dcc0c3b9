"""Abstract base class for schedule transformers."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Iterator

from schoolsoft.models import Lesson, ScheduleDay
from schoolsoft.schedule import Schedule


class BaseTransformer(ABC):
    """Abstract base class defining the interface for schedule transformers.

    Extend this class to export a schedule to other formats (e.g. iCalendar,
    CSV or a calendar API).
    """

    @staticmethod
    def placed_lessons(
        schedule: Schedule,
        start_date: date,
        end_date: date
    ) -> Iterator[tuple[ScheduleDay, Lesson]]:
        """Yield every lesson between two dates, chronologically.

        Args:
            schedule: Populated schedule.
            start_date: First day to include.
            end_date: Last day to include.
        """
        for schedule_day in schedule.iter_days(start_date, end_date):
            for lesson in schedule_day.sorted_lessons():
                yield schedule_day, lesson

    @abstractmethod
    def transform(
        self,
        schedule: Schedule,
        start_date: date,
        end_date: date
    ) -> Any:
        """Transform the lessons of a schedule into the target format.

        Args:
            schedule: Populated schedule to transform.
            start_date: First day to include.
            end_date: Last day to include.

        Returns:
            Transformed data in the target format.
        """
        pass

    @abstractmethod
    def save(self, output_path: str) -> None:
        """Save the transformed data to a file.

        Args:
            output_path: Path to the output file.
        """
        pass
