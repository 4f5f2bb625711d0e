"""
Command-line interface for planning training cycles.

Reads a cycle definition from a JSON file, validates it and generates or
regenerates its schedule through the CyclePlanner, persisting via whichever
DAL the environment selects. Also prints resolved set targets and the
weekly set-goal report for a stored cycle.
"""
import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from ascend.config import settings
from ascend.core.models import Cycle
from ascend.core.orchestrator import CycleNotFoundError, CyclePlanner, CycleValidationError
from ascend.data_access.dal import DataAccessLayer
from ascend.data_access.json_dal import JsonDal
from ascend.infra import log_utils


def _get_dal() -> DataAccessLayer:
    """Select the appropriate DAL based on environment settings."""
    if settings.DATABASE_URL and settings.ENVIRONMENT == "production":
        from ascend.data_access.postgres_dal import PostgresDal

        try:
            return PostgresDal()
        except Exception as e:
            log_utils.log_message(
                f"Postgres DAL init failed: {e}. Falling back to JSON.", "WARN"
            )
    return JsonDal()


def _load_cycle_file(path: str) -> Cycle:
    return Cycle.model_validate(json.loads(Path(path).read_text(encoding="utf-8")))


def _print_workouts(workouts) -> None:
    for w in workouts:
        when = f" {w.scheduled_date.isoformat()}" if w.scheduled_date else ""
        rfem = f" RFEM {w.rfem}" if w.rfem is not None else ""
        print(
            f"#{w.sequence_number} week {w.week_number} day {w.day_in_week}{when} "
            f"group {w.group_id}{rfem} ({len(w.scheduled_sets)} sets)"
        )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Plan Ascend training cycles.")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("validate", help="Validate a cycle definition file.")
    p.add_argument("cycle_file")

    p = sub.add_parser("create", help="Validate, store and schedule a new cycle.")
    p.add_argument("cycle_file")

    p = sub.add_parser("edit", help="Store an edited cycle and regenerate its schedule.")
    p.add_argument("cycle_file")
    p.add_argument("--mode", choices=["continue", "restart"], default="continue")

    p = sub.add_parser("targets", help="Show set targets for one workout of a stored cycle.")
    p.add_argument("cycle_id")
    p.add_argument("--workout", type=int, required=True, help="Sequence number (1-based).")

    p = sub.add_parser("report", help="Compare weekly set goals with the schedule.")
    p.add_argument("cycle_id")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Parses CLI arguments and runs the requested planning command."""
    args = _build_parser().parse_args(argv)
    log_utils.log_message(f"Planner CLI invoked for '{args.command}'.", "INFO")
    planner = CyclePlanner(_get_dal())

    try:
        if args.command == "validate":
            result = planner.validate(_load_cycle_file(args.cycle_file))
            for error in result.errors:
                print(f"ERROR: {error}")
            for warning in result.warnings:
                print(f"WARNING: {warning}")
            print("valid" if result.valid else "invalid")
            return 0 if result.valid else 1

        if args.command == "create":
            _print_workouts(planner.create_cycle(_load_cycle_file(args.cycle_file)))
            return 0

        if args.command == "edit":
            _print_workouts(planner.edit_cycle(_load_cycle_file(args.cycle_file), args.mode))
            return 0

        if args.command == "targets":
            workouts = planner.dal.get_workouts(args.cycle_id)
            workout = next((w for w in workouts if w.sequence_number == args.workout), None)
            if workout is None:
                print(f"No workout #{args.workout} in cycle {args.cycle_id}", file=sys.stderr)
                return 1
            for t in planner.resolve_targets(workout):
                label = "warmup" if t.is_warmup else "set"
                value = "max" if t.go_to_max else ("skip" if t.skipped else t.target)
                weight = f" @ {t.weight:g}" if t.weight is not None else ""
                print(f"{t.exercise_id} {label}: {value}{weight}")
            return 0

        if args.command == "report":
            for status in planner.set_goal_report(args.cycle_id):
                weeks = ", ".join(f"w{w}={n}" for w, n in status.sets_per_week.items())
                print(f"{status.exercise_type}: goal {status.weekly_goal}/week ({weeks})")
            return 0
    except CycleValidationError as e:
        for error in e.result.errors:
            print(f"ERROR: {error}", file=sys.stderr)
        return 1
    except (CycleNotFoundError, ValidationError, OSError, json.JSONDecodeError) as e:
        log_utils.log_message(f"Planner CLI failed: {e}", "ERROR")
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    return 2


if __name__ == "__main__":
    sys.exit(main())
