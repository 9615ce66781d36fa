"""Run a timetable search off the caller's thread.

The search is exponential in the worst case, so interactive callers submit it
here and get a handle back immediately. Each submission gets its own engine
and occupancy index; nothing mutable is shared between searches.
"""
import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable, Iterable, Optional

from .algorithms.backtracking import BacktrackingSearch, ProgressFn, SearchParams
from .models import Calendar, Course, Room, Schedule, validate_catalog

logger = logging.getLogger(__name__)


class SearchHandle:
    def __init__(self, future: Future, cancel_event: threading.Event):
        self._future = future
        self._cancel_event = cancel_event

    def result(self, timeout: Optional[float] = None) -> Schedule:
        return self._future.result(timeout)

    def done(self) -> bool:
        return self._future.done()

    def cancel(self):
        """Ask the search to stop; it finishes with status 'cancelled'."""
        self._cancel_event.set()

    def add_done_callback(self, fn: Callable[[Schedule], None],
                          on_error: Optional[Callable[[BaseException], None]] = None):
        """Call `fn` with the finished Schedule.

        A search that raised (a broken occupancy invariant, a failing progress
        callback) never produces a Schedule; its exception goes to `on_error`,
        or is logged when no `on_error` is given. `result()` re-raises it.
        """
        def _deliver(fut: Future):
            error = fut.exception()
            if error is None:
                fn(fut.result())
            elif on_error is not None:
                on_error(error)
            else:
                logger.error("Search failed; on_done not called", exc_info=error)

        self._future.add_done_callback(_deliver)


def submit_search(courses: Iterable[Course], rooms: Iterable[Room], calendar: Optional[Calendar] = None,
                  params: Optional[SearchParams] = None, executor: Optional[Executor] = None,
                  on_done: Optional[Callable[[Schedule], None]] = None,
                  on_error: Optional[Callable[[BaseException], None]] = None,
                  progress: Optional[ProgressFn] = None) -> SearchHandle:
    # validation faults surface here, in the caller's thread
    courses, rooms = list(courses), list(rooms)
    calendar = calendar if calendar is not None else Calendar()
    validate_catalog(courses, rooms, calendar)

    cancel_event = threading.Event()
    engine = BacktrackingSearch(courses, rooms, calendar, params, cancel_event=cancel_event, progress=progress)
    if executor is None:
        own = ThreadPoolExecutor(max_workers=1, thread_name_prefix='coursetime-search')
        future = own.submit(engine.run)
        own.shutdown(wait=False)
    else:
        future = executor.submit(engine.run)
    handle = SearchHandle(future, cancel_event)
    if on_done is not None or on_error is not None:
        handle.add_done_callback(on_done or (lambda sched: None), on_error)
    return handle
