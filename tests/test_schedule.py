"""Tests for schedule reconstruction and lookups."""

import json
from datetime import date, datetime, time

import pytest

from schoolsoft.errors import OccasionError
from schoolsoft.models import Weekday
from schoolsoft.occasion import resolve_occasion
from schoolsoft.schedule import (
    Schedule,
    build_schedule,
    find_next_lesson,
    iso_weeks_in_year,
    week_plan,
)
from tests.fakes import make_occasion

SPRING_ANCHOR = date(2024, 4, 1)
AUTUMN_ANCHOR = date(2024, 9, 1)


def occasion(**overrides):
    return resolve_occasion(make_occasion(**overrides))


def lesson_count(schedule):
    return sum(len(day.lessons) for week in schedule.weeks for day in week.days)


class TestWeekPlan:
    def test_iso_weeks_in_year(self):
        assert iso_weeks_in_year(2023) == 52
        assert iso_weeks_in_year(2024) == 52
        assert iso_weeks_in_year(2020) == 53
        assert iso_weeks_in_year(2026) == 53

    def test_first_half_anchor(self):
        plan = week_plan(SPRING_ANCHOR)
        assert len(plan) == 52
        assert plan[0] == (2024, 1)
        assert plan[25] == (2024, 26)
        assert plan[26] == (2023, 27)
        assert plan[51] == (2023, 52)

    def test_second_half_anchor(self):
        plan = week_plan(AUTUMN_ANCHOR)
        assert len(plan) == 52
        assert plan[0] == (2025, 1)
        assert plan[26] == (2024, 27)

    def test_half_year_boundary(self):
        # 2024-06-29 is day 181 of the year, 2024-06-30 day 182
        assert week_plan(date(2024, 6, 29))[0] == (2024, 1)
        assert week_plan(date(2024, 6, 30))[0] == (2025, 1)

    def test_back_half_with_53_weeks(self):
        plan = week_plan(date(2021, 3, 1))
        assert len(plan) == 53
        assert plan[52] == (2020, 53)

        plan = week_plan(date(2026, 10, 19))
        assert len(plan) == 53
        assert plan[52] == (2026, 53)


class TestScheduleLayout:
    def test_slot_dates_first_half(self):
        schedule = Schedule.empty(SPRING_ANCHOR)
        assert schedule.week_at(10).monday.date == date(2024, 3, 11)
        assert schedule.week_at(40).monday.date == date(2023, 10, 9)

    def test_slot_dates_second_half(self):
        schedule = Schedule.empty(AUTUMN_ANCHOR)
        assert schedule.week_at(10).monday.date == date(2025, 3, 10)
        assert schedule.week_at(40).monday.date == date(2024, 10, 7)

    def test_week_53_slot(self):
        schedule = Schedule.empty(date(2021, 3, 1))
        assert len(schedule) == 53
        assert schedule.week_at(52).monday.date == date(2020, 12, 28)

    def test_days_run_monday_to_sunday(self):
        week = Schedule.empty(SPRING_ANCHOR).week_at(13)
        assert [day.weekday for day in week.days] == list(Weekday)
        assert week.sunday.date == date(2024, 4, 7)
        for previous, current in zip(week.days, week.days[1:]):
            assert (current.date - previous.date).days == 1

    def test_slot_holds_iso_week(self):
        schedule = Schedule.empty(AUTUMN_ANCHOR)
        for index, week in enumerate(schedule.weeks):
            assert week.monday.date.isocalendar()[1] == index + 1
            assert week.week == index + 1

    def test_week_at_out_of_range(self):
        schedule = Schedule.empty(SPRING_ANCHOR)
        with pytest.raises(IndexError):
            schedule.week_at(52)
        with pytest.raises(IndexError):
            schedule.week_at(-1)

    def test_covered_range(self):
        schedule = Schedule.empty(SPRING_ANCHOR)
        assert schedule.first_day == date(2023, 7, 3)
        assert schedule.last_day == date(2024, 6, 30)

    def test_day_of(self):
        schedule = Schedule.empty(SPRING_ANCHOR)
        week = schedule.week_at(14)
        assert Schedule.day_of(week, Weekday.WEDNESDAY).date == date(2024, 4, 10)


class TestBuildSchedule:
    def test_sample_placement(self, sample_occasion):
        schedule = build_schedule(SPRING_ANCHOR, [resolve_occasion(sample_occasion)])

        assert lesson_count(schedule) == 37
        assert schedule.skipped == []

        monday = schedule.week_at(2).monday
        assert monday.date == date(2024, 1, 15)
        assert len(monday.lessons) == 1
        lesson = monday.lessons[0]
        assert lesson.start == time(8, 20)
        assert lesson.end == time(9, 30)
        assert lesson.room == "IKSU"

        assert schedule.week_at(33).monday.date == date(2023, 8, 21)
        assert len(schedule.week_at(33).monday.lessons) == 1

    def test_lessons_only_on_listed_weeks(self):
        schedule = build_schedule(SPRING_ANCHOR, [occasion(weeksString="3-5")])
        for index, week in enumerate(schedule.weeks):
            for day in week.days:
                expected = 1 if index in (2, 3, 4) and day.weekday == Weekday.MONDAY else 0
                assert len(day.lessons) == expected

    def test_unlisted_weeks_stay_empty(self, sample_occasion):
        schedule = build_schedule(SPRING_ANCHOR, [resolve_occasion(sample_occasion)])
        assert schedule.week_at(9).monday.lessons == []
        assert schedule.week_at(13).monday.lessons == []
        assert schedule.week_at(2).tuesday.lessons == []

    def test_occasion_without_weeks(self):
        schedule = build_schedule(SPRING_ANCHOR, [occasion(weeksString="")])
        assert lesson_count(schedule) == 0

    def test_week_beyond_schedule_is_skipped(self):
        schedule = build_schedule(SPRING_ANCHOR, [occasion(weeksString="52-53")])

        assert len(schedule) == 52
        assert lesson_count(schedule) == 1
        assert len(schedule.weeks[51].monday.lessons) == 1
        assert len(schedule.skipped) == 1
        skipped = schedule.skipped[0]
        assert skipped.occasion_id == 36505
        assert skipped.week == 53
        assert skipped.slot_count == 52

    def test_skipped_week_is_logged(self, caplog):
        build_schedule(SPRING_ANCHOR, [occasion(weeksString="53")])
        assert "week 53" in caplog.text

    def test_week_53_placed_when_slot_exists(self):
        schedule = build_schedule(date(2021, 3, 1), [occasion(weeksString="53")])
        assert schedule.skipped == []
        assert schedule.week_at(52).monday.date == date(2020, 12, 28)
        assert len(schedule.week_at(52).monday.lessons) == 1

    def test_same_input_same_schedule(self, sample_occasion):
        occasions = [resolve_occasion(sample_occasion), occasion(id=2, dayId=2)]
        assert build_schedule(SPRING_ANCHOR, occasions) == build_schedule(SPRING_ANCHOR, occasions)

    def test_occasion_order_does_not_change_days(self):
        first = occasion(id=1, startTime="1970-01-01 10:00:00.0")
        second = occasion(id=2, startTime="1970-01-01 08:20:00.0")
        a = build_schedule(SPRING_ANCHOR, [first, second])
        b = build_schedule(SPRING_ANCHOR, [second, first])
        for week_a, week_b in zip(a.weeks, b.weeks):
            for day_a, day_b in zip(week_a.days, week_b.days):
                assert day_a.sorted_lessons() == day_b.sorted_lessons()

    def test_lessons_keep_insertion_order(self):
        late = occasion(id=1, startTime="1970-01-01 10:00:00.0")
        early = occasion(id=2, startTime="1970-01-01 08:00:00.0")
        monday = build_schedule(SPRING_ANCHOR, [late, early]).week_at(2).monday
        assert [lesson.start for lesson in monday.lessons] == [time(10), time(8)]
        assert [lesson.start for lesson in monday.sorted_lessons()] == [time(8), time(10)]


class TestFromJson:
    def test_strict(self, sample_occasion):
        schedule = Schedule.from_json(json.dumps([sample_occasion]), SPRING_ANCHOR)
        assert lesson_count(schedule) == 37
        assert schedule.errors == []

    def test_strict_raises(self):
        data = json.dumps([make_occasion(), make_occasion(id=2, dayId=8)])
        with pytest.raises(OccasionError):
            Schedule.from_json(data, SPRING_ANCHOR)

    def test_partial(self):
        data = json.dumps([make_occasion(), make_occasion(id=2, dayId=8)])
        schedule = Schedule.from_json(data, SPRING_ANCHOR, partial=True)
        assert lesson_count(schedule) == 37
        assert len(schedule.errors) == 1
        assert schedule.errors[0].occasion_id == 2


class TestQueries:
    @pytest.fixture
    def schedule(self, sample_occasion):
        return build_schedule(SPRING_ANCHOR, [resolve_occasion(sample_occasion)])

    def test_day_for(self, schedule):
        day = schedule.day_for(date(2024, 4, 8))
        assert day is not None
        assert day.date == date(2024, 4, 8)
        assert len(day.lessons) == 1

    def test_day_for_uncovered_date(self, schedule):
        assert schedule.day_for(date(2022, 1, 3)) is None
        assert schedule.day_for(date(2024, 9, 2)) is None

    def test_iter_days(self, schedule):
        days = list(schedule.iter_days(date(2024, 4, 8), date(2024, 4, 14)))
        assert [day.date for day in days] == [date(2024, 4, d) for d in range(8, 15)]

    def test_iter_days_is_clamped(self, schedule):
        days = list(schedule.iter_days(date(2020, 1, 1), date(2030, 1, 1)))
        assert days[0].date == date(2023, 7, 3)
        assert days[-1].date == date(2024, 6, 30)
        assert len(days) == 52 * 7

    def test_next_lesson_skips_missing_week(self, schedule):
        # Week 14 is not part of the occasion's weeks
        day, lesson = find_next_lesson(schedule, datetime(2024, 4, 1, 8, 0))
        assert day.date == date(2024, 4, 8)
        assert lesson.start == time(8, 20)

    def test_next_lesson_at_start_time(self, schedule):
        day, _ = find_next_lesson(schedule, datetime(2024, 4, 8, 8, 20))
        assert day.date == date(2024, 4, 8)

    def test_next_lesson_after_start_time(self, schedule):
        day, _ = find_next_lesson(schedule, datetime(2024, 4, 8, 8, 21))
        assert day.date == date(2024, 4, 15)

    def test_next_lesson_is_earliest_of_day(self):
        late = occasion(id=1, startTime="1970-01-01 13:00:00.0", subjectName="Late")
        early = occasion(id=2, startTime="1970-01-01 09:00:00.0", subjectName="Early")
        schedule = build_schedule(SPRING_ANCHOR, [late, early])
        _, lesson = find_next_lesson(schedule, datetime(2024, 4, 8, 7, 0))
        assert lesson.name == "Early"

    def test_no_lesson_left(self, schedule):
        assert find_next_lesson(schedule, datetime(2024, 6, 11, 0, 0)) is None

    def test_empty_schedule(self):
        assert find_next_lesson(Schedule.empty(SPRING_ANCHOR), datetime(2024, 4, 1)) is None
