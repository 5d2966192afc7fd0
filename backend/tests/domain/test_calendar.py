from canteen_booking.domain.calendar import SlotCalendar, is_bookable, meal_for_time, slot_meal
from canteen_booking.models import Meal, WorkingPeriod

BREAKFAST = WorkingPeriod(meal=Meal.BREAKFAST, start="08:00", end="10:00")
LUNCH = WorkingPeriod(meal=Meal.LUNCH, start="12:00", end="14:30")
# lunch ends exactly where dinner starts
ADJACENT = (
    WorkingPeriod(meal=Meal.LUNCH, start="12:00", end="13:30"),
    WorkingPeriod(meal=Meal.DINNER, start="13:30", end="15:00"),
)


def _calendar(periods, start_date, start_time, end_date, end_time, duration) -> SlotCalendar:  # type: ignore[no-untyped-def]
    return SlotCalendar(
        periods=tuple(periods),
        start_date=start_date,
        start_time=start_time,
        end_date=end_date,
        end_time=end_time,
        duration=duration,
    )


def test_meal_for_time_uses_half_open_periods() -> None:
    periods = (BREAKFAST, LUNCH)
    assert meal_for_time(periods, 8 * 60) == Meal.BREAKFAST
    assert meal_for_time(periods, 9 * 60 + 59) == Meal.BREAKFAST
    assert meal_for_time(periods, 10 * 60) is None
    assert meal_for_time(periods, 13 * 60) == Meal.LUNCH


def test_thirty_minute_slots_within_one_day() -> None:
    slots = list(_calendar([BREAKFAST], "2025-12-10", "08:00", "2025-12-10", "09:00", 30))
    assert [(s.start_time, s.meal) for s in slots] == [("08:00", Meal.BREAKFAST), ("08:30", Meal.BREAKFAST)]


def test_sixty_minute_slots_start_on_the_hour_only() -> None:
    slots = list(_calendar([BREAKFAST], "2025-12-10", "00:00", "2025-12-10", "23:59", 60))
    assert [s.start_time for s in slots] == ["08:00", "09:00"]
    assert all(s.duration == 60 for s in slots)


def test_sixty_minute_slot_rejected_when_second_half_leaves_the_meal() -> None:
    periods = [WorkingPeriod(meal=Meal.BREAKFAST, start="08:00", end="09:30")]
    slots = list(_calendar(periods, "2025-12-10", "00:00", "2025-12-10", "23:59", 60))
    assert [s.start_time for s in slots] == ["08:00"]


def test_sixty_minute_slot_rejected_across_adjacent_meals() -> None:
    slots = list(_calendar(ADJACENT, "2025-12-10", "12:00", "2025-12-10", "15:00", 60))
    assert [(s.start_time, s.meal) for s in slots] == [("12:00", Meal.LUNCH), ("14:00", Meal.DINNER)]


def test_gap_between_meals_is_skipped() -> None:
    slots = list(_calendar([BREAKFAST, LUNCH], "2025-12-10", "09:30", "2025-12-10", "12:30", 30))
    assert [s.start_time for s in slots] == ["09:30", "12:00"]


def test_unaligned_start_is_rounded_up_to_the_grid() -> None:
    thirty = list(_calendar([BREAKFAST], "2025-12-10", "08:15", "2025-12-10", "09:30", 30))
    sixty = list(_calendar([BREAKFAST], "2025-12-10", "08:15", "2025-12-10", "10:00", 60))
    assert [s.start_time for s in thirty] == ["08:30", "09:00"]
    assert [s.start_time for s in sixty] == ["09:00"]


def test_multi_day_range_clips_first_and_last_day() -> None:
    slots = list(_calendar([BREAKFAST], "2025-12-10", "09:00", "2025-12-12", "08:30", 30))
    assert [(s.date, s.start_time) for s in slots] == [
        ("2025-12-10", "09:00"),
        ("2025-12-10", "09:30"),
        ("2025-12-11", "08:00"),
        ("2025-12-11", "08:30"),
        ("2025-12-11", "09:00"),
        ("2025-12-11", "09:30"),
        ("2025-12-12", "08:00"),
    ]


def test_interior_day_ends_at_2359() -> None:
    late = [WorkingPeriod(meal=Meal.DINNER, start="22:00", end="23:59")]
    slots = list(_calendar(late, "2025-12-10", "00:00", "2025-12-11", "00:00", 30))
    assert [s.start_time for s in slots] == ["22:00", "22:30", "23:00"]


def test_range_without_meal_overlap_is_empty() -> None:
    assert list(_calendar([BREAKFAST], "2025-12-10", "15:00", "2025-12-10", "20:00", 30)) == []


def test_end_before_start_is_empty() -> None:
    assert list(_calendar([BREAKFAST], "2025-12-12", "00:00", "2025-12-10", "23:59", 30)) == []


def test_calendar_is_restartable() -> None:
    calendar = _calendar([BREAKFAST], "2025-12-10", "08:00", "2025-12-10", "10:00", 30)
    assert list(calendar) == list(calendar)
    assert len(list(calendar)) == 4


def test_is_bookable_follows_containment_rule() -> None:
    periods = (BREAKFAST,)
    assert is_bookable(periods, "09:30", 30)
    assert not is_bookable(periods, "09:30", 60)
    assert is_bookable(periods, "09:00", 60)
    assert not is_bookable(periods, "10:00", 30)
    assert slot_meal(periods, 8 * 60 + 30, 60) is None
