"""List class tabs or dump one parsed class as JSON or a table.

Standalone CLI script around the Apps Script endpoint. Reads only; saving
sessions is left to the dashboard.

Run with: python scripts/class_report.py --list
Class:    python scripts/class_report.py --class "Tuesday 4PM"
Table:    python scripts/class_report.py --class "Tuesday 4PM" --table
Date:     python scripts/class_report.py --class "Tuesday 4PM" --table --date 5/1/2024
To file:  python scripts/class_report.py --class "Tuesday 4PM" --output data/tuesday.json

Configuration comes from .env (APPS_SCRIPT_URL, LOG_LEVEL, LOG_JSON).

Exit codes:
  0 = success (JSON or table on stdout, or file written for --output)
  1 = error (message on stderr)
"""

import argparse
import json
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Add project root to path for src imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.classbook.client import AppsScriptClient, load_class_data  # noqa: E402
from src.classbook.config import get_config  # noqa: E402
from src.classbook.logging import setup_logging  # noqa: E402
from src.classbook.models import ClassData, ClassDateEntry  # noqa: E402
from src.classbook.roster import group_by_coach  # noqa: E402
from src.classbook.session import SAVED_FIELDS  # noqa: E402


def _log(msg: str) -> None:
    """Write diagnostic messages to stderr so stdout stays clean for JSON."""
    print(msg, file=sys.stderr)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments using argparse."""
    parser = argparse.ArgumentParser(
        description="List class tabs or dump a parsed class as JSON or table.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    target_group = parser.add_mutually_exclusive_group(required=True)
    target_group.add_argument(
        "--list",
        action="store_true",
        help="Print the class tab names, one per line.",
    )
    target_group.add_argument(
        "--class",
        dest="class_name",
        type=str,
        help="Class tab to fetch and parse.",
    )

    parser.add_argument(
        "--table",
        action="store_true",
        help="Output a human-readable table for one date instead of JSON.",
    )
    parser.add_argument(
        "--date",
        type=str,
        default=None,
        help="Date block to show with --table (default: latest).",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write the JSON to this file instead of stdout.",
    )
    return parser.parse_args(argv)


def _format_table(data: ClassData, entry: ClassDateEntry) -> str:
    """Format one date block as a table: Field | student | student | ...

    A coach line above the header shows which students each coach has.
    """
    if not data.students:
        return "(no students in this class)"

    headers = ["Field", *[s.name for s in data.students]]
    rows = [
        [field.value, *[entry.progress_for(s.name).get(field) for s in data.students]]
        for field in SAVED_FIELDS
    ]

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    coach_line = " | ".join(
        f"{coach}: {', '.join(s.name for s in students)}"
        for coach, students in group_by_coach(data.students)
    )
    title = f"{entry.date} (rows {entry.row_start + 1}-{entry.row_end + 1})"
    header_line = " | ".join(h.ljust(widths[i]) for i, h in enumerate(headers))
    separator = "-+-".join("-" * w for w in widths)
    row_lines = [
        " | ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)) for row in rows
    ]

    return "\n".join([title, coach_line, header_line, separator, *row_lines])


def main(args: argparse.Namespace) -> int:
    config = get_config()
    setup_logging(json_output=config.log_json, log_level=config.log_level)
    client = AppsScriptClient.from_config(config)

    if args.list:
        for name in client.list_classes():
            print(name)
        return 0

    _log(f"class_report: loading {args.class_name!r}")
    data = load_class_data(client, args.class_name)
    if data is None:
        _log("  ERROR: class data could not be loaded")
        return 1

    _log(f"  {len(data.students)} students, {len(data.dates)} dates")

    if args.table:
        entry = data.find_date(args.date) if args.date else None
        if entry is None and args.date:
            _log(f"  ERROR: no date block {args.date!r}")
            return 1
        if entry is None:
            if not data.dates:
                print("(no sessions recorded)")
                return 0
            entry = data.dates[0]
        print(_format_table(data, entry))
        return 0

    output = json.dumps(data.model_dump(by_alias=True), indent=2, ensure_ascii=False)
    if args.output:
        output_file = Path(args.output)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(output, encoding="utf-8")
        _log(f"  wrote {output_file}")
    else:
        print(output)
    return 0


if __name__ == "__main__":
    args = _parse_args()
    try:
        sys.exit(main(args))
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
