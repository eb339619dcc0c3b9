"""Resolution of raw occasion records into :class:`Occasion` values.

An occasion record describes a weekly lesson and the weeks it recurs on with
three week range strings. The final week set is computed with a mask over
weeks 1-53: base weeks are set, excluded weeks cleared, and included weeks
set again, so an included week always wins over an exclusion.
"""

import logging
import re
from datetime import time
from typing import Any, Iterator
from uuid import UUID

from .errors import OccasionError, ScheduleParseError, WeekRangeError
from .models import Occasion, Weekday
from .parsing import load_json, parse_timestamp
from .weeks import parse_week_range

logger = logging.getLogger(__name__)

MAX_WEEK = 53

_UUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)


class WeekMask:
    """Boolean flags for weeks 1-53. Slot 0 is unused and never set."""

    def __init__(self) -> None:
        self._flags = [False] * (MAX_WEEK + 1)

    def set(self, week: int, value: bool) -> None:
        if not 1 <= week <= MAX_WEEK:
            raise IndexError(week)
        self._flags[week] = value

    def weeks(self) -> list[int]:
        return [week for week, flag in enumerate(self._flags) if flag]


def _field(record: dict[str, Any], name: str, occasion_id: Any) -> Any:
    try:
        return record[name]
    except KeyError:
        raise OccasionError(name, None, "field is missing", occasion_id) from None


def _apply(
    mask: WeekMask,
    record: dict[str, Any],
    name: str,
    value: bool,
    occasion_id: Any
) -> None:
    raw = _field(record, name, occasion_id)
    if raw is None:
        raw = ""
    if not isinstance(raw, str):
        raise OccasionError(name, raw, "expected a string", occasion_id)

    try:
        for week in parse_week_range(raw):
            mask.set(week, value)
    except WeekRangeError as e:
        raise OccasionError(name, raw, str(e), occasion_id) from e
    except IndexError as e:
        raise OccasionError(
            name, raw, f"week {e.args[0]} is outside 1-{MAX_WEEK}", occasion_id
        ) from e


def resolve_weeks(record: dict[str, Any], occasion_id: Any = None) -> list[int]:
    """Combine base, excluded and included weeks into an ascending list."""
    mask = WeekMask()
    _apply(mask, record, "weeksString", True, occasion_id)
    _apply(mask, record, "excludingWeeksString", False, occasion_id)
    _apply(mask, record, "includingWeeksString", True, occasion_id)
    return mask.weeks()


def _parse_text(record: dict[str, Any], name: str, occasion_id: Any) -> str:
    raw = _field(record, name, occasion_id)
    if raw is None:
        return ""
    if not isinstance(raw, str):
        raise OccasionError(name, raw, "expected a string", occasion_id)
    return raw


def _parse_uuid(raw: Any, occasion_id: Any) -> UUID:
    if not isinstance(raw, str) or not _UUID_PATTERN.match(raw):
        raise OccasionError("guid", raw, "not a canonical uuid", occasion_id)
    return UUID(raw)


def _parse_weekday(raw: Any, occasion_id: Any) -> Weekday:
    if isinstance(raw, bool) or not isinstance(raw, int) or not 0 <= raw <= 6:
        raise OccasionError("dayId", raw, "weekday must be an integer 0-6", occasion_id)
    return Weekday(raw)


def _parse_time_of_day(record: dict[str, Any], name: str, occasion_id: Any) -> time:
    raw = _field(record, name, occasion_id)
    try:
        return parse_timestamp(raw).time()
    except ValueError as e:
        raise OccasionError(name, raw, str(e), occasion_id) from e


def resolve_occasion(record: dict[str, Any]) -> Occasion:
    """Turn one raw occasion record into an :class:`Occasion`.

    Args:
        record: Decoded JSON object from the lessons endpoint.

    Returns:
        The resolved occasion. Its ``weeks`` may be empty.

    Raises:
        OccasionError: If any field is missing or invalid.
    """
    if not isinstance(record, dict):
        raise OccasionError("<record>", record, "expected a JSON object")

    raw_id = _field(record, "id", None)
    if isinstance(raw_id, bool) or not isinstance(raw_id, int):
        raise OccasionError("id", raw_id, "expected an integer")

    return Occasion(
        id=raw_id,
        uuid=_parse_uuid(_field(record, "guid", raw_id), raw_id),
        start_time=_parse_time_of_day(record, "startTime", raw_id),
        end_time=_parse_time_of_day(record, "endTime", raw_id),
        subject_name=_parse_text(record, "subjectName", raw_id),
        room_name=_parse_text(record, "roomName", raw_id),
        week_day=_parse_weekday(_field(record, "dayId", raw_id), raw_id),
        weeks=resolve_weeks(record, raw_id),
    )


def _records(data: str) -> Iterator[Any]:
    raw = load_json(data, ScheduleParseError)
    if not isinstance(raw, list):
        raise ScheduleParseError("Expected a list of occasions")
    yield from raw


def parse_occasions(data: str) -> list[Occasion]:
    """Resolve every record of a lessons response, failing on the first error.

    Raises:
        ScheduleParseError: If the body is not a JSON array.
        OccasionError: For the first record that cannot be resolved.
    """
    return [resolve_occasion(record) for record in _records(data)]


def parse_occasions_partial(data: str) -> tuple[list[Occasion], list[OccasionError]]:
    """Resolve the records that can be resolved and collect the errors of the rest.

    Raises:
        ScheduleParseError: If the body is not a JSON array.
    """
    occasions: list[Occasion] = []
    errors: list[OccasionError] = []
    for record in _records(data):
        try:
            occasions.append(resolve_occasion(record))
        except OccasionError as e:
            logger.warning("Skipping occasion: %s", e)
            errors.append(e)
    return occasions, errors
