import argparse
import logging
import sys
from dataclasses import replace

from coursetime.io_utils import (
    load_courses, load_rooms, load_calendar, load_catalog_json,
    save_schedule_csv, timetable_grid, save_grid_csv
)
from coursetime.models import Calendar, CatalogError, SOLVED, EXHAUSTED
from coursetime.algorithms.backtracking import SearchParams
from coursetime.runner import submit_search
from coursetime.sample_data import demo_catalog
from coursetime.scheduling.evaluation import summary


def parse_slot(text: str):
    try:
        day, hour = text.split(':')
        return int(day), int(hour)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected DAY:HOUR, got {text!r}")


def build_calendar(args, base: Calendar) -> Calendar:
    cal = base
    if args.calendar:
        cal = load_calendar(args.calendar)
    changes = {}
    if args.days is not None:
        changes['num_days'] = args.days
        changes['day_names'] = cal.day_names if args.days == cal.num_days else None
    if args.slots is not None:
        changes['slots_per_day'] = args.slots
        changes['hour_labels'] = cal.hour_labels if args.slots == cal.slots_per_day else None
    if args.block:
        changes['blocked'] = frozenset(args.block)
    if args.no_block:
        changes['blocked'] = frozenset()
    if args.theory_cap is not None:
        changes['theory_daily_cap'] = args.theory_cap
    return replace(cal, **changes) if changes else cal


def main(argv=None):
    p = argparse.ArgumentParser(description="CourseTime – weekly course timetabling by backtracking")
    # Input modes
    p.add_argument('--demo', action='store_true', help='Use the built-in department catalog')
    p.add_argument('--catalog', type=str, help='JSON with courses, rooms and optional calendar')
    p.add_argument('--courses', type=str, help='courses.csv with id,instructor,duration,category,cohort,headcount')
    p.add_argument('--rooms', type=str, help='rooms.csv with id,capacity,category')

    # Calendar
    p.add_argument('--calendar', type=str, help='Calendar JSON (num_days, slots_per_day, blocked, theory_daily_cap)')
    p.add_argument('--days', type=int, default=None)
    p.add_argument('--slots', type=int, default=None, help='Hour slots per day')
    p.add_argument('--block', type=parse_slot, action='append', help='Blocked DAY:HOUR (repeatable, 0-based)')
    p.add_argument('--no_block', action='store_true', help='Clear the blocked window')
    p.add_argument('--theory_cap', type=int, default=None, help='Max theory hours per instructor per day')

    # Search
    p.add_argument('--time_limit', type=float, default=60.0, help='Search time cap (seconds, 0 = none)')
    p.add_argument('--max_nodes', type=int, default=None)

    # Output
    p.add_argument('--out_schedule', type=str, default='schedule.csv')
    p.add_argument('--out_grid', type=str, default=None, help='Optional hour x day grid CSV')
    p.add_argument('--cohort', type=str, default=None, help='Restrict the grid to one cohort')
    p.add_argument('--verbose', '-v', action='store_true')
    args = p.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(asctime)s %(name)s %(levelname)s %(message)s')

    try:
        base = Calendar()
        if args.demo:
            courses, rooms = demo_catalog()
        elif args.catalog:
            courses, rooms, base = load_catalog_json(args.catalog)
        elif args.courses and args.rooms:
            courses, rooms = load_courses(args.courses), load_rooms(args.rooms)
        else:
            raise SystemExit("Provide --demo, --catalog, or --courses with --rooms")
        calendar = build_calendar(args, base)

        params = SearchParams(time_limit=args.time_limit or None, max_nodes=args.max_nodes)
        handle = submit_search(courses, rooms, calendar, params)
    except CatalogError as e:
        raise SystemExit(f"Invalid input: {e}")

    try:
        sched = handle.result()
    except KeyboardInterrupt:
        handle.cancel()
        sched = handle.result()

    print(summary({c.id: c for c in courses}, {r.id: r for r in rooms}, calendar, sched))

    if sched.status == SOLVED:
        save_schedule_csv(args.out_schedule, sched)
        print(f"Saved: {args.out_schedule}")
        if args.out_grid:
            save_grid_csv(args.out_grid, timetable_grid(sched, courses, calendar, cohort=args.cohort))
            print(f"Saved: {args.out_grid}")
        return 0
    if sched.status == EXHAUSTED:
        print("Could not find a valid schedule. Try relaxing constraints.")
        return 1
    print(f"Search aborted ({sched.status}); no schedule produced.")
    return 2


if __name__ == '__main__':
    sys.exit(main())
