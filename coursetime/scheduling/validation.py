from collections import Counter
from typing import Dict

from ..models import Calendar, Course, Room, Schedule, LAB, THEORY


def complete_ok(courses: Dict[str, Course], sched: Schedule) -> bool:
    return set(sched.placements) == set(courses)


def contiguity_ok(courses: Dict[str, Course], sched: Schedule) -> bool:
    for cid, slots in sched.placements.items():
        if not slots:
            return False
        if cid not in courses or len(slots) != courses[cid].duration:
            return False
        days = {d for d, _, _ in slots}
        rooms = {r for _, _, r in slots}
        if len(days) != 1 or len(rooms) != 1:
            return False
        hours = sorted(h for _, h, _ in slots)
        if hours != list(range(hours[0], hours[0] + len(hours))):
            return False
    return True


def rooms_ok(sched: Schedule) -> bool:
    used = set()
    for slots in sched.placements.values():
        for key in slots:
            if key in used:
                return False
            used.add(key)
    return True


def _owner_ok(courses: Dict[str, Course], sched: Schedule, attr: str) -> bool:
    used = set()
    for cid, slots in sched.placements.items():
        owner = getattr(courses[cid], attr)
        for d, h, _ in slots:
            if (owner, d, h) in used:
                return False
            used.add((owner, d, h))
    return True


def instructors_ok(courses: Dict[str, Course], sched: Schedule) -> bool:
    return _owner_ok(courses, sched, 'instructor')


def cohorts_ok(courses: Dict[str, Course], sched: Schedule) -> bool:
    return _owner_ok(courses, sched, 'cohort')


def blocked_ok(calendar: Calendar, sched: Schedule) -> bool:
    return not any(calendar.is_blocked(d, h) for slots in sched.placements.values() for d, h, _ in slots)


def capacity_ok(courses: Dict[str, Course], rooms: Dict[str, Room], sched: Schedule) -> bool:
    for cid, slots in sched.placements.items():
        for _, _, rid in slots:
            if rid not in rooms or rooms[rid].capacity < courses[cid].headcount:
                return False
    return True


def categories_ok(courses: Dict[str, Course], rooms: Dict[str, Room], sched: Schedule) -> bool:
    for cid, slots in sched.placements.items():
        for _, _, rid in slots:
            if rid not in rooms:
                return False
            is_lab_room = rooms[rid].category == LAB
            if (courses[cid].category == LAB) != is_lab_room:
                return False
    return True


def theory_load_ok(courses: Dict[str, Course], calendar: Calendar, sched: Schedule) -> bool:
    """Replay placements in search order; a theory block needs the instructor
    below the daily cap on that day before it lands."""
    per_day: Counter = Counter()
    for cid, slots in sched.placements.items():
        if not slots:
            return False
        course = courses[cid]
        day = slots[0][0]
        if course.category == THEORY and per_day[(course.instructor, day)] >= calendar.theory_daily_cap:
            return False
        for d, _, _ in slots:
            per_day[(course.instructor, d)] += 1
    return True


def check_schedule(courses: Dict[str, Course], rooms: Dict[str, Room], calendar: Calendar,
                   sched: Schedule) -> Dict[str, bool]:
    return {
        'complete': complete_ok(courses, sched),
        'contiguous': contiguity_ok(courses, sched),
        'rooms': rooms_ok(sched),
        'instructors': instructors_ok(courses, sched),
        'cohorts': cohorts_ok(courses, sched),
        'blocked': blocked_ok(calendar, sched),
        'capacity': capacity_ok(courses, rooms, sched),
        'categories': categories_ok(courses, rooms, sched),
        'theory_load': theory_load_ok(courses, calendar, sched),
    }
