import csv
import io
import json
import os
from typing import Any, Dict, IO, Iterable, List, Optional, Tuple, Union

import pandas as pd

from .models import Calendar, CatalogError, Course, Room, Schedule, THEORY, CLASSROOM

TextOrPath = Union[str, os.PathLike, IO]


def _open_text(src: TextOrPath):
    """Return a text-mode file handle and a flag indicating whether to close it.

    Accepts a filesystem path, a text IO object, or a BytesIO buffer.
    """
    if isinstance(src, (str, os.PathLike)):
        f = open(src, 'r', newline='', encoding='utf-8')
        return f, True
    if isinstance(src, io.BytesIO):
        src.seek(0)
        f = io.TextIOWrapper(src, encoding='utf-8', newline='')
        return f, True
    if hasattr(src, 'read'):
        if hasattr(src, 'seek'):
            src.seek(0)
        return src, False
    raise TypeError("Unsupported input type; expected path or file-like object")


def _int(value: Any, what: str, where: str) -> int:
    """Whole numbers only; 2.7 or "2.7" is rejected rather than truncated."""
    bad = CatalogError(f"{where}: {what} must be an integer (got {value!r})")
    if isinstance(value, bool):
        raise bad
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            value = float(text)
        except ValueError:
            raise bad
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise bad


def _blocked_from(entries: Any) -> frozenset:
    if not isinstance(entries, (list, tuple)):
        raise CatalogError(f"calendar: blocked must be a list of [day, hour] pairs (got {entries!r})")
    slots = set()
    for i, entry in enumerate(entries):
        if not isinstance(entry, (list, tuple)) or len(entry) != 2:
            raise CatalogError(f"calendar: blocked[{i}] must be a [day, hour] pair (got {entry!r})")
        slots.add((_int(entry[0], 'day', f"calendar blocked[{i}]"), _int(entry[1], 'hour', f"calendar blocked[{i}]")))
    return frozenset(slots)


def _load_json(f, what: str):
    try:
        return json.load(f)
    except json.JSONDecodeError as e:
        raise CatalogError(f"{what}: not valid JSON ({e})")


def _course_from(row: Dict[str, Any], where: str) -> Course:
    try:
        cid = str(row['id']).strip()
        instructor = str(row['instructor']).strip()
    except KeyError as e:
        raise CatalogError(f"{where}: missing column {e.args[0]!r}")
    cohort = row.get('cohort', row.get('year'))
    if cohort is None:
        raise CatalogError(f"{where}: missing column 'cohort'")
    return Course(
        id=cid,
        instructor=instructor,
        duration=_int(row.get('duration', row.get('hours')), 'duration', where),
        category=str(row.get('category') or THEORY).strip(),
        cohort=str(cohort).strip(),
        headcount=_int(row.get('headcount', row.get('students', 0)), 'headcount', where),
        name=str(row.get('name') or '').strip(),
    )


def _room_from(row: Dict[str, Any], where: str) -> Room:
    try:
        rid = str(row['id']).strip()
    except KeyError as e:
        raise CatalogError(f"{where}: missing column {e.args[0]!r}")
    return Room(
        id=rid,
        capacity=_int(row.get('capacity'), 'capacity', where),
        category=str(row.get('category') or CLASSROOM).strip(),
    )


def load_courses(src: TextOrPath) -> List[Course]:
    """CSV with id,instructor,duration,category,cohort,headcount[,name]."""
    courses: List[Course] = []
    f, should_close = _open_text(src)
    try:
        for lineno, row in enumerate(csv.DictReader(f), start=2):
            courses.append(_course_from(row, f"courses line {lineno}"))
    finally:
        if should_close:
            f.close()
    return courses


def load_rooms(src: TextOrPath) -> List[Room]:
    """CSV with id,capacity,category."""
    rooms: List[Room] = []
    f, should_close = _open_text(src)
    try:
        for lineno, row in enumerate(csv.DictReader(f), start=2):
            rooms.append(_room_from(row, f"rooms line {lineno}"))
    finally:
        if should_close:
            f.close()
    return rooms


def calendar_from_dict(data: Dict[str, Any]) -> Calendar:
    defaults = Calendar()
    num_days = _int(data.get('num_days', defaults.num_days), 'num_days', 'calendar')
    slots_per_day = _int(data.get('slots_per_day', defaults.slots_per_day), 'slots_per_day', 'calendar')
    day_names = data.get('day_names')
    hour_labels = data.get('hour_labels')
    # default labels only fit the default grid
    if day_names is None and num_days == defaults.num_days:
        day_names = defaults.day_names
    if hour_labels is None and slots_per_day == defaults.slots_per_day:
        hour_labels = defaults.hour_labels
    blocked = data.get('blocked')
    return Calendar(
        num_days=num_days,
        slots_per_day=slots_per_day,
        blocked=defaults.blocked if blocked is None else _blocked_from(blocked),
        theory_daily_cap=_int(data.get('theory_daily_cap', defaults.theory_daily_cap), 'theory_daily_cap', 'calendar'),
        day_names=day_names,
        hour_labels=hour_labels,
    )


def load_calendar(src: TextOrPath) -> Calendar:
    f, should_close = _open_text(src)
    try:
        return calendar_from_dict(_load_json(f, 'calendar'))
    finally:
        if should_close:
            f.close()


def load_catalog_json(src: TextOrPath) -> Tuple[List[Course], List[Room], Calendar]:
    """{"courses": [...], "rooms": [...], "calendar": {...}}; calendar is optional."""
    f, should_close = _open_text(src)
    try:
        data = _load_json(f, 'catalog')
    finally:
        if should_close:
            f.close()
    courses = [_course_from(row, f"courses[{i}]") for i, row in enumerate(data.get('courses', []))]
    rooms = [_room_from(row, f"rooms[{i}]") for i, row in enumerate(data.get('rooms', []))]
    calendar = calendar_from_dict(data.get('calendar') or {})
    return courses, rooms, calendar


def save_schedule_csv(path: str, schedule: Schedule):
    with open(path, 'w', newline='') as f:
        w = csv.writer(f)
        w.writerow(['course_id', 'day', 'hour', 'room_id'])
        for course_id, slots in schedule.placements.items():
            for day, hour, room_id in slots:
                w.writerow([course_id, day, hour, room_id])


def schedule_frame(schedule: Schedule, courses: Iterable[Course], calendar: Calendar) -> pd.DataFrame:
    by_id = {c.id: c for c in courses}
    rows = []
    for course_id, slots in schedule.placements.items():
        course = by_id[course_id]
        for day, hour, room_id in slots:
            rows.append({
                'course_id': course_id,
                'day': day,
                'day_name': calendar.day_name(day),
                'hour': hour,
                'hour_label': calendar.hour_label(hour),
                'room_id': room_id,
                'instructor': course.instructor,
                'cohort': course.cohort,
                'category': course.category,
            })
    columns = ['course_id', 'day', 'day_name', 'hour', 'hour_label', 'room_id', 'instructor', 'cohort', 'category']
    return pd.DataFrame(rows, columns=columns).sort_values(['day', 'hour', 'room_id'], ignore_index=True)


def timetable_grid(schedule: Schedule, courses: Iterable[Course], calendar: Calendar,
                   cohort: Optional[str] = None) -> pd.DataFrame:
    """Hour x day table of "<course> (<room>)" cells, optionally for one cohort."""
    df = schedule_frame(schedule, courses, calendar)
    if cohort is not None:
        df = df[df['cohort'] == cohort]
    days = [calendar.day_name(d) for d in range(calendar.num_days)]
    hours = [calendar.hour_label(h) for h in range(calendar.slots_per_day)]
    grid = pd.DataFrame('', index=hours, columns=days)
    for (day, hour), cell in df.groupby(['day', 'hour']):
        grid.iat[hour, day] = " / ".join(f"{c} ({r})" for c, r in zip(cell['course_id'], cell['room_id']))
    for day, hour in calendar.blocked:
        grid.iat[hour, day] = 'EXAM BLOCK'
    return grid


def save_grid_csv(path: str, grid: pd.DataFrame):
    grid.to_csv(path, index_label='hour')
