from collections import Counter, defaultdict
from typing import Dict, Iterable, Set, Tuple

from .models import Course, Slot


class OccupancyIndex:
    """Room, instructor and cohort usage of the slots committed so far.

    The three maps only ever change together through commit/release.
    """

    def __init__(self):
        self.room_grid: Dict[Tuple[int, int, str], str] = {}
        self.instructor_load: Dict[str, Set[Slot]] = defaultdict(set)
        self.cohort_load: Dict[str, Set[Slot]] = defaultdict(set)
        self._instructor_day: Counter = Counter()
        self._courses: Dict[str, Course] = {}

    def __len__(self):
        return len(self.room_grid)

    def room_taken(self, day: int, hour: int, room_id: str) -> bool:
        return (day, hour, room_id) in self.room_grid

    def instructor_busy(self, instructor: str, day: int, hour: int) -> bool:
        return (day, hour) in self.instructor_load.get(instructor, ())

    def cohort_busy(self, cohort: str, day: int, hour: int) -> bool:
        return (day, hour) in self.cohort_load.get(cohort, ())

    def instructor_day_load(self, instructor: str, day: int) -> int:
        return self._instructor_day[(instructor, day)]

    def commit(self, course: Course, room_id: str, block: Iterable[Slot]):
        for day, hour in block:
            key = (day, hour, room_id)
            assert key not in self.room_grid, f"room slot {key} already holds {self.room_grid[key]}"
            assert not self.instructor_busy(course.instructor, day, hour), \
                f"instructor {course.instructor} double booked at {(day, hour)}"
            assert not self.cohort_busy(course.cohort, day, hour), \
                f"cohort {course.cohort} double booked at {(day, hour)}"
            self.room_grid[key] = course.id
            self.instructor_load[course.instructor].add((day, hour))
            self.cohort_load[course.cohort].add((day, hour))
            self._instructor_day[(course.instructor, day)] += 1
        self._courses[course.id] = course

    def release(self, course: Course, room_id: str, block: Iterable[Slot]):
        for day, hour in block:
            key = (day, hour, room_id)
            assert self.room_grid.get(key) == course.id, f"room slot {key} is not held by {course.id}"
            del self.room_grid[key]
            self._discard(self.instructor_load, course.instructor, (day, hour))
            self._discard(self.cohort_load, course.cohort, (day, hour))
            self._instructor_day[(course.instructor, day)] -= 1
            if not self._instructor_day[(course.instructor, day)]:
                del self._instructor_day[(course.instructor, day)]

    @staticmethod
    def _discard(load: Dict[str, Set[Slot]], owner: str, slot: Slot):
        slots = load.get(owner)
        assert slots is not None and slot in slots, f"{owner} does not hold {slot}"
        slots.remove(slot)
        if not slots:
            del load[owner]

    def check_consistency(self):
        """Rebuild the per-instructor and per-cohort maps from the room grid and compare."""
        instructors: Dict[str, Set[Slot]] = defaultdict(set)
        cohorts: Dict[str, Set[Slot]] = defaultdict(set)
        per_day: Counter = Counter()
        for (day, hour, room_id), course_id in self.room_grid.items():
            course = self._courses[course_id]
            assert (day, hour) not in instructors[course.instructor], \
                f"instructor {course.instructor} appears twice at {(day, hour)}"
            assert (day, hour) not in cohorts[course.cohort], \
                f"cohort {course.cohort} appears twice at {(day, hour)}"
            instructors[course.instructor].add((day, hour))
            cohorts[course.cohort].add((day, hour))
            per_day[(course.instructor, day)] += 1
        assert {k: v for k, v in self.instructor_load.items() if v} == dict(instructors), \
            "instructor load out of sync with room grid"
        assert {k: v for k, v in self.cohort_load.items() if v} == dict(cohorts), \
            "cohort load out of sync with room grid"
        assert +self._instructor_day == per_day, "instructor day counts out of sync with room grid"
