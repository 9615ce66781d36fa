import io
import json

import pytest

from coursetime.algorithms.backtracking import solve
from coursetime.io_utils import (
    load_courses, load_rooms, load_calendar, load_catalog_json,
    save_schedule_csv, schedule_frame, timetable_grid, save_grid_csv
)
from coursetime.models import Calendar, CatalogError, Course, Room, Schedule, LAB, THEORY, SOLVED
from coursetime.sample_data import demo_catalog

COURSES_CSV = """id,name,instructor,duration,category,cohort,headcount
CS101,Intro to CS,Dr. Smith,3,Theory,1,50
CS101L,Intro Lab,Asst. John,2,Lab,1,30
"""

ROOMS_CSV = """id,capacity,category
A-101,60,Classroom
L-01,40,Lab
"""


def test_load_courses_from_text_buffer():
    courses = load_courses(io.StringIO(COURSES_CSV))
    assert courses == [
        Course('CS101', 'Dr. Smith', 3, THEORY, '1', 50, name='Intro to CS'),
        Course('CS101L', 'Asst. John', 2, LAB, '1', 30, name='Intro Lab'),
    ]


def test_load_rooms_from_bytes_buffer():
    rooms = load_rooms(io.BytesIO(ROOMS_CSV.encode('utf-8')))
    assert rooms == [Room('A-101', 60, 'Classroom'), Room('L-01', 40, LAB)]


def test_load_from_path(tmp_path):
    path = tmp_path / 'rooms.csv'
    path.write_text(ROOMS_CSV)
    assert [r.id for r in load_rooms(path)] == ['A-101', 'L-01']


def test_bad_integer_names_the_line():
    bad = COURSES_CSV.replace("CS101L,Intro Lab,Asst. John,2", "CS101L,Intro Lab,Asst. John,two")
    with pytest.raises(CatalogError) as exc:
        load_courses(io.StringIO(bad))
    assert "line 3" in str(exc.value)


def test_missing_column_rejected():
    with pytest.raises(CatalogError):
        load_courses(io.StringIO("id,duration\nC1,2\n"))


def test_unsupported_source():
    with pytest.raises(TypeError):
        load_rooms(42)


def test_catalog_json_with_calendar():
    data = {
        'courses': [{'id': 'C1', 'instructor': 'I1', 'duration': 2, 'category': 'Theory',
                     'cohort': 'Y1', 'headcount': 10}],
        'rooms': [{'id': 'R1', 'capacity': 20, 'category': 'Classroom'}],
        'calendar': {'num_days': 3, 'slots_per_day': 6, 'blocked': [[2, 5]], 'theory_daily_cap': 3},
    }
    courses, rooms, cal = load_catalog_json(io.StringIO(json.dumps(data)))
    assert courses[0].duration == 2 and rooms[0].capacity == 20
    assert cal.num_days == 3 and cal.slots_per_day == 6
    assert cal.blocked == frozenset({(2, 5)})
    assert cal.theory_daily_cap == 3
    assert cal.day_names is None and cal.hour_labels is None
    assert cal.problems() == []


def test_calendar_json_defaults():
    cal = load_calendar(io.StringIO("{}"))
    assert cal == Calendar()


def test_save_schedule_csv(tmp_path):
    sched = Schedule(SOLVED, {'C1': [(0, 0, 'R1'), (0, 1, 'R1')]})
    path = tmp_path / 'schedule.csv'
    save_schedule_csv(str(path), sched)
    assert path.read_text().splitlines() == ['course_id,day,hour,room_id', 'C1,0,0,R1', 'C1,0,1,R1']


def test_schedule_frame_and_grid(tmp_path):
    courses, rooms = demo_catalog()
    cal = Calendar()
    sched = solve(courses, rooms, cal)
    df = schedule_frame(sched, courses, cal)
    assert len(df) == sum(c.duration for c in courses)
    assert set(df['day_name']) <= set(cal.day_names)

    grid = timetable_grid(sched, courses, cal)
    assert grid.shape == (cal.slots_per_day, cal.num_days)
    assert grid.loc['13:20', 'Friday'] == 'EXAM BLOCK'
    first_lab = sched.placements['CS101L'][0]
    assert 'CS101L (L-01)' in grid.iat[first_lab[1], first_lab[0]]

    year_one = timetable_grid(sched, courses, cal, cohort='1')
    cells = ' '.join(year_one.values.ravel())
    assert 'CS101' in cells and 'CS202' not in cells

    path = tmp_path / 'grid.csv'
    save_grid_csv(str(path), grid)
    assert path.read_text().startswith('hour,Monday')


# -----------------------------
# Malformed numbers and calendars
# -----------------------------
def _catalog(course_extra=None, room_capacity=10, calendar=None):
    course = {'id': 'C', 'instructor': 'I', 'duration': 2, 'cohort': 'Y1', 'headcount': 5}
    course.update(course_extra or {})
    data = {'courses': [course], 'rooms': [{'id': 'R', 'capacity': room_capacity}]}
    if calendar is not None:
        data['calendar'] = calendar
    return io.StringIO(json.dumps(data))


@pytest.mark.parametrize("field, value", [
    ('duration', 2.7),
    ('headcount', 10.9),
    ('duration', True),
    ('headcount', "3.5"),
    ('duration', "two"),
])
def test_fractional_or_non_numeric_counts_rejected(field, value):
    with pytest.raises(CatalogError) as exc:
        load_catalog_json(_catalog({field: value}))
    assert f"{field} must be an integer" in str(exc.value)


def test_whole_number_floats_accepted():
    courses, _, _ = load_catalog_json(_catalog({'duration': 2.0, 'headcount': "7"}))
    assert (courses[0].duration, courses[0].headcount) == (2, 7)


@pytest.mark.parametrize("blocked", [[[4]], [[4, 4, 4]], [["a", 1]], [4], 7])
def test_malformed_blocked_entries_rejected(blocked):
    with pytest.raises(CatalogError):
        load_catalog_json(_catalog(calendar={'blocked': blocked}))


def test_invalid_json_is_a_catalog_error():
    with pytest.raises(CatalogError):
        load_catalog_json(io.StringIO("{not json"))
    with pytest.raises(CatalogError):
        load_calendar(io.StringIO("[1, 2"))


def test_missing_cohort_rejected():
    with pytest.raises(CatalogError) as exc:
        load_courses(io.StringIO("id,instructor,duration\nC1,I1,2\n"))
    assert "missing column 'cohort'" in str(exc.value)
    with pytest.raises(CatalogError):
        load_catalog_json(io.StringIO(json.dumps({
            'courses': [{'id': 'C', 'instructor': 'I', 'duration': 1}], 'rooms': []})))


def test_year_column_is_a_cohort():
    courses = load_courses(io.StringIO("id,instructor,duration,year\nC1,I1,2,3\n"))
    assert courses[0].cohort == '3'
