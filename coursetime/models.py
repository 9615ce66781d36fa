from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple

THEORY = 'Theory'
LAB = 'Lab'
CLASSROOM = 'Classroom'

COURSE_CATEGORIES = (THEORY, LAB)
ROOM_CATEGORIES = (CLASSROOM, LAB)

DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
HOURS = ["08:30", "09:30", "10:30", "11:30", "13:20", "14:20", "15:20", "16:20"]

# Friday 13:20-15:10 is reserved for exams
FRIDAY_EXAM_BLOCK = frozenset({(4, 4), (4, 5)})

# search outcomes
SOLVED = 'solved'
EXHAUSTED = 'exhausted'
TIME_LIMIT = 'time_limit'
NODE_LIMIT = 'node_limit'
CANCELLED = 'cancelled'
ABORTED = (TIME_LIMIT, NODE_LIMIT, CANCELLED)

Slot = Tuple[int, int]
Placement = Tuple[int, int, str]  # (day, hour, room_id)


class CatalogError(ValueError):
    """Input catalog or calendar rejected before search."""

    def __init__(self, problems):
        if isinstance(problems, str):
            problems = [problems]
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


@dataclass(frozen=True)
class Course:
    id: str
    instructor: str
    duration: int  # consecutive hour slots
    category: str = THEORY
    cohort: str = ''
    headcount: int = 0
    name: str = ''


@dataclass(frozen=True)
class Room:
    id: str
    capacity: int
    category: str = CLASSROOM


@dataclass(frozen=True)
class Calendar:
    num_days: int = 5
    slots_per_day: int = 8
    blocked: FrozenSet[Slot] = FRIDAY_EXAM_BLOCK
    theory_daily_cap: int = 4
    day_names: Optional[Tuple[str, ...]] = tuple(DAYS)
    hour_labels: Optional[Tuple[str, ...]] = tuple(HOURS)

    def __post_init__(self):
        object.__setattr__(self, 'blocked', frozenset((int(d), int(h)) for d, h in self.blocked))
        for name in ('day_names', 'hour_labels'):
            labels = getattr(self, name)
            if labels is not None:
                object.__setattr__(self, name, tuple(labels))

    def is_blocked(self, day: int, hour: int) -> bool:
        return (day, hour) in self.blocked

    def block_starts(self, duration: int) -> Iterator[Slot]:
        """Candidate block starts, day-major, each ending within the day."""
        for day in range(self.num_days):
            for start in range(self.slots_per_day - duration + 1):
                yield day, start

    def open_slot_count(self) -> int:
        inside = {(d, h) for d, h in self.blocked
                  if 0 <= d < self.num_days and 0 <= h < self.slots_per_day}
        return self.num_days * self.slots_per_day - len(inside)

    def day_name(self, day: int) -> str:
        if self.day_names and day < len(self.day_names):
            return self.day_names[day]
        return f"Day {day + 1}"

    def hour_label(self, hour: int) -> str:
        if self.hour_labels and hour < len(self.hour_labels):
            return self.hour_labels[hour]
        return f"Slot {hour + 1}"

    def problems(self) -> List[str]:
        found = []
        if self.num_days < 1:
            found.append(f"calendar: num_days must be >= 1 (got {self.num_days})")
        if self.slots_per_day < 1:
            found.append(f"calendar: slots_per_day must be >= 1 (got {self.slots_per_day})")
        if self.theory_daily_cap < 1:
            found.append(f"calendar: theory_daily_cap must be >= 1 (got {self.theory_daily_cap})")
        for d, h in sorted(self.blocked):
            if not (0 <= d < self.num_days and 0 <= h < self.slots_per_day):
                found.append(f"calendar: blocked slot ({d}, {h}) is outside the grid")
        if self.day_names is not None and len(self.day_names) != self.num_days:
            found.append(f"calendar: {len(self.day_names)} day names for {self.num_days} days")
        if self.hour_labels is not None and len(self.hour_labels) != self.slots_per_day:
            found.append(f"calendar: {len(self.hour_labels)} hour labels for {self.slots_per_day} slots")
        return found


@dataclass
class Schedule:
    status: str
    # course_id -> [(day, hour, room_id), ...], empty unless solved
    placements: Dict[str, List[Placement]] = field(default_factory=dict)
    nodes: int = 0
    elapsed_s: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status == SOLVED

    @property
    def aborted(self) -> bool:
        return self.status in ABORTED

    def slots_of(self, course_id: str) -> List[Placement]:
        return list(self.placements.get(course_id, []))


def _is_count(value) -> bool:
    # bool is an int subclass but never a valid count
    return isinstance(value, int) and not isinstance(value, bool)


def validate_catalog(courses: Iterable[Course], rooms: Iterable[Room], calendar: Optional[Calendar] = None,
                     instructors: Optional[Iterable[str]] = None, cohorts: Optional[Iterable[str]] = None) -> None:
    """Raise CatalogError listing every malformed record.

    `instructors` and `cohorts` are optional registries; when given, a course
    referring to anything outside them is rejected.
    """
    problems: List[str] = []
    known_instructors = set(instructors) if instructors is not None else None
    known_cohorts = set(cohorts) if cohorts is not None else None

    seen = set()
    for c in courses:
        if c.id in seen:
            problems.append(f"course {c.id}: duplicate id")
        seen.add(c.id)
        if not _is_count(c.duration) or c.duration < 1:
            problems.append(f"course {c.id}: duration must be an integer >= 1 (got {c.duration!r})")
        if not _is_count(c.headcount) or c.headcount < 0:
            problems.append(f"course {c.id}: headcount must be an integer >= 0 (got {c.headcount!r})")
        if c.category not in COURSE_CATEGORIES:
            problems.append(f"course {c.id}: unknown category {c.category!r}")
        if not str(c.instructor).strip():
            problems.append(f"course {c.id}: instructor id is empty")
        if not str(c.cohort).strip():
            problems.append(f"course {c.id}: cohort id is empty")
        if known_instructors is not None and c.instructor not in known_instructors:
            problems.append(f"course {c.id}: unknown instructor {c.instructor!r}")
        if known_cohorts is not None and c.cohort not in known_cohorts:
            problems.append(f"course {c.id}: unknown cohort {c.cohort!r}")

    seen = set()
    for r in rooms:
        if r.id in seen:
            problems.append(f"room {r.id}: duplicate id")
        seen.add(r.id)
        if not _is_count(r.capacity) or r.capacity < 0:
            problems.append(f"room {r.id}: capacity must be an integer >= 0 (got {r.capacity!r})")
        if r.category not in ROOM_CATEGORIES:
            problems.append(f"room {r.id}: unknown category {r.category!r}")

    if calendar is not None:
        problems.extend(calendar.problems())
    if problems:
        raise CatalogError(problems)
