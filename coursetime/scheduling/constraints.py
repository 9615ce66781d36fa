from typing import Optional

from ..models import Calendar, Course, Room, LAB, THEORY
from ..occupancy import OccupancyIndex


def rejection_reason(index: OccupancyIndex, calendar: Calendar, course: Course,
                     day: int, hour: int, room: Room) -> Optional[str]:
    """Name of the first hard constraint that rules out this single slot, or None.

    Checks run in a fixed order and stop at the first failure. The daily
    theory cap only counts slots already committed, so offsets of the block
    currently being tried never count against their own course.
    """
    if index.room_taken(day, hour, room.id):
        return 'room_taken'
    if calendar.is_blocked(day, hour):
        return 'blocked'
    if index.instructor_busy(course.instructor, day, hour):
        return 'instructor_busy'
    if index.cohort_busy(course.cohort, day, hour):
        return 'cohort_busy'
    if room.capacity < course.headcount:
        return 'capacity'
    if course.category == LAB and room.category != LAB:
        return 'category'
    if course.category == THEORY and room.category == LAB:
        return 'category'
    if course.category == THEORY:
        if index.instructor_day_load(course.instructor, day) >= calendar.theory_daily_cap:
            return 'theory_daily_cap'
    return None


def feasible(index: OccupancyIndex, calendar: Calendar, course: Course,
             day: int, hour: int, room: Room) -> bool:
    return rejection_reason(index, calendar, course, day, hour, room) is None
