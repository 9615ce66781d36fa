import logging
import threading
import time
from typing import Callable, Dict, Iterable, List, Optional

from ..models import (Calendar, Course, Placement, Room, Schedule, validate_catalog,
                      SOLVED, EXHAUSTED, TIME_LIMIT, NODE_LIMIT, CANCELLED)
from ..occupancy import OccupancyIndex
from ..scheduling.constraints import feasible
from .ordering import most_constrained_first

logger = logging.getLogger(__name__)

ProgressFn = Callable[[int, int], None]


class SearchParams:
    def __init__(self, time_limit=None, max_nodes=None, progress_every=1000):
        self.time_limit = time_limit  # seconds, None for unbounded
        self.max_nodes = max_nodes
        self.progress_every = progress_every


class _Abort(Exception):
    def __init__(self, status: str):
        super().__init__(status)
        self.status = status


class BacktrackingSearch:
    """Depth-first placement of courses into contiguous (day, hour, room) blocks.

    Courses are taken most-constrained first. For each one, days are tried in
    ascending order, then start hours, then rooms in catalog order; the first
    block whose every slot passes the constraint check is committed and the
    next course is attempted. A dead end rolls the block back and moves on to
    the next candidate. Returns the first complete timetable in that order.
    """

    def __init__(self, courses: Iterable[Course], rooms: Iterable[Room], calendar: Optional[Calendar] = None,
                 params: Optional[SearchParams] = None, cancel_event: Optional[threading.Event] = None,
                 progress: Optional[ProgressFn] = None):
        self.courses: List[Course] = most_constrained_first(courses)
        self.rooms: List[Room] = list(rooms)
        self.calendar = calendar if calendar is not None else Calendar()
        self.params = params if params is not None else SearchParams()
        self.cancel_event = cancel_event
        self.progress = progress
        self.index = OccupancyIndex()
        self.placements: Dict[str, List[Placement]] = {}
        self.nodes = 0
        self._deadline = None

    def run(self) -> Schedule:
        self.index = OccupancyIndex()
        self.placements = {}
        self.nodes = 0
        # monotonic clock so wall-clock adjustments don't move the deadline
        start = time.perf_counter()
        self._deadline = start + self.params.time_limit if self.params.time_limit else None
        logger.info("Searching %d courses over %d rooms (%d days x %d slots)", len(self.courses),
                    len(self.rooms), self.calendar.num_days, self.calendar.slots_per_day)
        try:
            status = SOLVED if self._solve(0) else EXHAUSTED
        except _Abort as abort:
            status = abort.status
        elapsed = time.perf_counter() - start

        if status == SOLVED:
            self.index.check_consistency()
            placements = {cid: list(slots) for cid, slots in self.placements.items()}
        else:
            if status == EXHAUSTED:
                assert len(self.index) == 0, "rollback left committed slots behind"
            placements = {}
        logger.info("Search %s after %d nodes in %.3fs", status, self.nodes, elapsed)
        return Schedule(status=status, placements=placements, nodes=self.nodes, elapsed_s=elapsed)

    def _enter(self, depth: int):
        self.nodes += 1
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise _Abort(CANCELLED)
        if self._deadline is not None and time.perf_counter() >= self._deadline:
            raise _Abort(TIME_LIMIT)
        if self.params.max_nodes is not None and self.nodes > self.params.max_nodes:
            raise _Abort(NODE_LIMIT)
        every = self.params.progress_every
        if every and self.nodes % every == 0:
            logger.debug("%d nodes, depth %d/%d", self.nodes, depth, len(self.courses))
            if self.progress is not None:
                self.progress(self.nodes, depth)

    def _solve(self, pos: int) -> bool:
        self._enter(pos)
        if pos >= len(self.courses):
            return True
        course = self.courses[pos]
        for day, start in self.calendar.block_starts(course.duration):
            block = [(day, start + i) for i in range(course.duration)]
            for room in self.rooms:
                if not all(feasible(self.index, self.calendar, course, d, h, room) for d, h in block):
                    continue
                self.index.commit(course, room.id, block)
                self.placements[course.id] = [(d, h, room.id) for d, h in block]
                if self._solve(pos + 1):
                    return True
                self.index.release(course, room.id, block)
                del self.placements[course.id]
        return False


def solve(courses: Iterable[Course], rooms: Iterable[Room], calendar: Optional[Calendar] = None,
          params: Optional[SearchParams] = None, **kwargs) -> Schedule:
    """Validate the catalog, then search in the calling thread."""
    courses, rooms = list(courses), list(rooms)
    calendar = calendar if calendar is not None else Calendar()
    validate_catalog(courses, rooms, calendar)
    return BacktrackingSearch(courses, rooms, calendar, params, **kwargs).run()
