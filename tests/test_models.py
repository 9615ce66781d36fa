import pytest

from coursetime.models import (Calendar, CatalogError, Course, Room, Schedule, validate_catalog,
                               SOLVED, EXHAUSTED, TIME_LIMIT, CANCELLED, LAB, THEORY, CLASSROOM)


# -----------------------------
# Calendar
# -----------------------------
def test_default_calendar_blocks_friday_exam_window():
    cal = Calendar()
    assert (cal.num_days, cal.slots_per_day) == (5, 8)
    assert cal.is_blocked(4, 4) and cal.is_blocked(4, 5)
    assert not cal.is_blocked(3, 4)
    assert cal.open_slot_count() == 38
    assert cal.day_name(4) == "Friday"
    assert cal.hour_label(4) == "13:20"
    assert cal.problems() == []


def test_block_starts_keep_blocks_inside_the_day():
    cal = Calendar(num_days=2, slots_per_day=4, blocked=frozenset(), day_names=None, hour_labels=None)
    assert list(cal.block_starts(3)) == [(0, 0), (0, 1), (1, 0), (1, 1)]
    assert list(cal.block_starts(5)) == []


def test_calendar_without_labels_falls_back():
    cal = Calendar(num_days=2, slots_per_day=3, blocked=frozenset(), day_names=None, hour_labels=None)
    assert cal.day_name(1) == "Day 2"
    assert cal.hour_label(0) == "Slot 1"


@pytest.mark.parametrize("kwargs, fragment", [
    ({'num_days': 0, 'blocked': frozenset(), 'day_names': None}, "num_days"),
    ({'slots_per_day': 0, 'blocked': frozenset(), 'hour_labels': None}, "slots_per_day"),
    ({'theory_daily_cap': 0}, "theory_daily_cap"),
    ({'blocked': frozenset({(9, 0)})}, "outside the grid"),
    ({'num_days': 3, 'blocked': frozenset()}, "day names"),
])
def test_calendar_problems(kwargs, fragment):
    problems = Calendar(**kwargs).problems()
    assert any(fragment in p for p in problems)


# -----------------------------
# Schedule
# -----------------------------
def test_schedule_status_flags():
    assert Schedule(SOLVED).ok
    assert not Schedule(EXHAUSTED).ok and not Schedule(EXHAUSTED).aborted
    assert Schedule(TIME_LIMIT).aborted and Schedule(CANCELLED).aborted


def test_slots_of_returns_copy():
    sched = Schedule(SOLVED, {'C1': [(0, 0, 'R1')]})
    slots = sched.slots_of('C1')
    slots.append((0, 1, 'R1'))
    assert sched.slots_of('C1') == [(0, 0, 'R1')]
    assert sched.slots_of('missing') == []


def test_course_is_immutable():
    c = Course('C1', 'I1', 2)
    with pytest.raises(Exception):
        c.duration = 3


# -----------------------------
# validate_catalog
# -----------------------------
def test_valid_catalog_passes():
    validate_catalog([Course('C1', 'I1', 2, THEORY, 'Y1', 10)], [Room('R1', 20, CLASSROOM)], Calendar())


@pytest.mark.parametrize("course, room, fragment", [
    (Course('C1', 'I1', 0), Room('R1', 10), "duration"),
    (Course('C1', 'I1', 1, headcount=-1), Room('R1', 10), "headcount"),
    (Course('C1', 'I1', 1, category='Seminar'), Room('R1', 10), "unknown category 'Seminar'"),
    (Course('C1', 'I1', 1), Room('R1', -5), "capacity"),
    (Course('C1', 'I1', 1), Room('R1', 5, 'Gym'), "unknown category 'Gym'"),
])
def test_malformed_records_rejected(course, room, fragment):
    with pytest.raises(CatalogError) as exc:
        validate_catalog([course], [room])
    assert any(fragment in p for p in exc.value.problems)


def test_duplicates_and_registries_reported_together():
    courses = [Course('C1', 'I1', 1, cohort='Y1'), Course('C1', 'ghost', 1, cohort='Y9')]
    rooms = [Room('R1', 10), Room('R1', 10, LAB)]
    with pytest.raises(CatalogError) as exc:
        validate_catalog(courses, rooms, instructors={'I1'}, cohorts={'Y1'})
    text = str(exc.value)
    assert "course C1: duplicate id" in text
    assert "room R1: duplicate id" in text
    assert "unknown instructor 'ghost'" in text
    assert "unknown cohort 'Y9'" in text


def test_catalog_error_is_value_error():
    assert issubclass(CatalogError, ValueError)
    assert CatalogError("bad").problems == ["bad"]


@pytest.mark.parametrize("course, room, fragment", [
    (Course('C1', 'I1', True, cohort='Y1'), Room('R1', 10), "duration"),
    (Course('C1', 'I1', 1, cohort='Y1', headcount=False), Room('R1', 10), "headcount"),
    (Course('C1', 'I1', 1, cohort='Y1'), Room('R1', True), "capacity"),
])
def test_bool_counts_rejected(course, room, fragment):
    with pytest.raises(CatalogError) as exc:
        validate_catalog([course], [room])
    assert any(fragment in p for p in exc.value.problems)


@pytest.mark.parametrize("course, fragment", [
    (Course('C1', 'I1', 1), "cohort id is empty"),
    (Course('C1', '  ', 1, cohort='Y1'), "instructor id is empty"),
])
def test_blank_references_rejected(course, fragment):
    with pytest.raises(CatalogError) as exc:
        validate_catalog([course], [Room('R1', 10)])
    assert any(fragment in p for p in exc.value.problems)
