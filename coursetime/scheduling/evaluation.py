from typing import Dict

from ..graph_build import build_conflict_graph, clique_load_bound
from ..models import Calendar, Course, Room, Schedule
from .validation import check_schedule


def summary(courses: Dict[str, Course], rooms: Dict[str, Room], calendar: Calendar, sched: Schedule) -> str:
    G = build_conflict_graph(courses.values())
    lb = clique_load_bound(G)
    open_slots = calendar.open_slot_count()
    warning = ""
    if lb > open_slots:
        warning = (
            f"Warning: clique load bound={lb} > open slots={open_slots}; no timetable can exist.\n"
        )
    text = (
        f"Status: {sched.status}  Nodes: {sched.nodes}  Elapsed: {sched.elapsed_s:.3f}s\n"
        f"Courses: {len(courses)}  Rooms: {len(rooms)}  Conflict edges: {G.number_of_edges()}\n"
        f"Open slots: {open_slots}  Clique load bound: {lb}\n"
    )
    if sched.ok:
        checks = check_schedule(courses, rooms, calendar, sched)
        text += "  ".join(f"Valid ({name}): {flag}" for name, flag in checks.items()) + "\n"
    return text + warning
