import argparse
import sys

from StepDown.StepDown import StepDown
from StepDown.errors import PreferenceError
from StepDown.invocation.sorter import INVOCATION_STRATEGIES
from StepDown.preferences import DEFAULT_CONFIG_PATH, STARTPOINT_STRATEGIES, load_preferences
from StepDown.utils import set_verbosity


def get_parser():
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        description="StepDown: reorder the methods of Java classes so callers come before their callees"
    )
    parser.add_argument(
        "paths", nargs="+",
        help="Java source files or directories to sort"
    )
    parser.add_argument(
        "--config_path", type=str, default=DEFAULT_CONFIG_PATH,
        help="Path to the YAML preference file"
    )
    parser.add_argument(
        "--priorities", type=str, default=None,
        help="Ordering priorities joined by '#', e.g. INVOCATION#ACCESS_LEVEL#SOURCE_POSITION#LEXICAL"
    )
    parser.add_argument(
        "--invocation_strategy", type=str, default=None, choices=list(INVOCATION_STRATEGIES),
        help="Traversal of the call graph: depth-first or breadth-first"
    )
    parser.add_argument(
        "--startpoint_strategy", type=str, default=None, choices=list(STARTPOINT_STRATEGIES),
        help="Working list order: heuristic or user (source position)"
    )
    parser.add_argument(
        "--no_before_after", action='store_true',
        help="Append methods in traversal order instead of the before/after aware insertion"
    )
    parser.add_argument(
        "--cluster_getter_setter", action='store_true',
        help="Keep matching getters and setters together"
    )
    parser.add_argument(
        "--cluster_overloaded", action='store_true',
        help="Keep overloaded methods together"
    )
    parser.add_argument(
        "--dry_run", action='store_true',
        help="Compute the orderings without writing any file"
    )
    parser.add_argument(
        "--random", action='store_true',
        help="Shuffle the methods randomly (evaluation baseline)"
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Random seed used with --random"
    )
    parser.add_argument(
        "--report", type=str, default=None,
        help="Path of a JSON report with metrics and final orderings"
    )
    parser.add_argument(
        "--no_progress", action='store_true',
        help="Do not display the progress bar"
    )
    parser.add_argument(
        "--verbose", action='store_true',
        help="Log the comparator trace at DEBUG level"
    )
    return parser


def main(argv=None):
    """Main entry point for StepDown."""
    parser = get_parser()
    args = parser.parse_args(argv)
    set_verbosity(args.verbose)

    try:
        preferences = load_preferences(args.config_path).replace(
            ordering_priorities=args.priorities,
            invocation_strategy=args.invocation_strategy,
            startpoint_strategy=args.startpoint_strategy,
            respect_before_after=False if args.no_before_after else None,
            cluster_getter_setter=True if args.cluster_getter_setter else None,
            cluster_overloaded=True if args.cluster_overloaded else None,
        )
    except PreferenceError as e:
        print(f"Invalid preferences: {e}", file=sys.stderr)
        return 2

    step_down = StepDown(
        preferences=preferences,
        dry_run=args.dry_run,
        random_order=args.random,
        seed=args.seed,
        show_progress=not args.no_progress
    )
    metrics = step_down.run(args.paths, report_path=args.report)

    print("\n" + "="*60)
    print("StepDown Completed" + (" (interrupted)" if step_down.interrupted else ""))
    print("="*60)
    print(f"Sorted {metrics.units_seen} compilation units, {metrics.units_changed} changed")
    if step_down.has_failures:
        print(f"{metrics.units_failed} units failed")
    if args.report:
        print(f"Report saved to: {args.report}")
    print("="*60)

    return 1 if step_down.has_failures or step_down.interrupted else 0


if __name__=="__main__":
    sys.exit(main())
