#!/usr/bin/env python3
"""SchoolSoft schedule to iCalendar converter.

Logs in to SchoolSoft, rebuilds the school year schedule from the user's
lessons, prints the next lesson and writes the schedule to an iCalendar
(.ics) file.
"""

import argparse
import getpass
import logging
import sys
from datetime import date, datetime
from typing import Optional

from schoolsoft import Client, find_next_lesson
from schoolsoft.config import Settings, get_settings
from schoolsoft.errors import SchoolSoftError
from transformer import ICalTransformer


def parse_date(date_str: str) -> date:
    """Parse date string in YYYY-MM-DD format."""
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Invalid date format: '{date_str}'. Expected YYYY-MM-DD."
        )


def get_credentials(settings: Settings, args: argparse.Namespace) -> tuple[str, str, str]:
    """Collect school, username and password.

    Command line flags win over settings; anything still missing is
    prompted for.

    Returns:
        Tuple of (school, username, password).
    """
    school = args.school or settings.school
    username = args.username or settings.username
    password = settings.password

    if not (school and username and password):
        print("SchoolSoft Authentication")
        print("-" * 30)

    if not school:
        school = input("School: ").strip()
    if not username:
        username = input("Username: ").strip()
    if not password:
        password = getpass.getpass("Password: ")

    for label, value in (("School", school), ("Username", username), ("Password", password)):
        if not value:
            print(f"Error: {label} cannot be empty.", file=sys.stderr)
            sys.exit(1)

    return school, username, password


def list_schools(client: Client) -> None:
    for school in client.schools():
        print(f"{school.url_name:<30} {school.name}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Export a SchoolSoft schedule to iCalendar format.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 schoolsoft2iCal.py --school carlwahren --username jane
  python3 schoolsoft2iCal.py --school carlwahren --start-date 2024-08-19 --end-date 2025-06-13 -o year.ics
  python3 schoolsoft2iCal.py --list-schools
        """
    )

    parser.add_argument(
        "--school",
        help="The school's url name (see --list-schools)"
    )

    parser.add_argument(
        "--username",
        help="SchoolSoft username"
    )

    parser.add_argument(
        "--list-schools",
        action="store_true",
        help="Print the SchoolSoft school directory and exit"
    )

    parser.add_argument(
        "--anchor-date",
        type=parse_date,
        default=None,
        help="Date the school year is computed from (format: YYYY-MM-DD). Default: today"
    )

    parser.add_argument(
        "--start-date",
        type=parse_date,
        default=None,
        help="First day to export (format: YYYY-MM-DD). Default: today"
    )

    parser.add_argument(
        "--end-date",
        type=parse_date,
        default=None,
        help="Last day to export (format: YYYY-MM-DD). Default: end of the schedule"
    )

    parser.add_argument(
        "-o", "--output",
        default="schedule.ics",
        help="Output file path (default: schedule.ics)"
    )

    parser.add_argument(
        "--partial",
        action="store_true",
        help="Skip lessons SchoolSoft sends in an unreadable format instead of failing"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    settings = get_settings()
    client = Client(
        base_url=settings.base_url,
        device_id=settings.device_id,
        timeout=settings.timeout
    )

    try:
        if args.list_schools:
            list_schools(client)
            return

        # Ensure output file has .ics extension
        output_path = args.output
        if not output_path.lower().endswith(".ics"):
            output_path = f"{output_path}.ics"

        now = datetime.now(settings.timezone).replace(tzinfo=None)
        anchor = args.anchor_date or now.date()

        school, username, password = get_credentials(settings, args)

        session = client.login(username, password, school)
        print(f"Logged in as {session.user.name}")

        schedule = session.get_schedule(anchor, partial=args.partial)

        for error in schedule.errors:
            print(f"Warning: {error}", file=sys.stderr)

        next_lesson = find_next_lesson(schedule, now)
        if next_lesson:
            day, lesson = next_lesson
            print(
                f"Next lesson: {lesson.name} in {lesson.room or '-'}, "
                f"{day.date:%A %Y-%m-%d} {lesson.start:%H:%M}-{lesson.end:%H:%M}"
            )
        else:
            print("No upcoming lessons in this school year.")

        start_date = args.start_date or now.date()
        end_date = args.end_date or schedule.last_day

        if start_date > end_date:
            print("Error: Start date must not be after end date.", file=sys.stderr)
            sys.exit(1)

        transformer = ICalTransformer(timezone=settings.timezone)
        transformer.transform(schedule, start_date, end_date)
        transformer.save(output_path)

        print(f"Schedule saved to: {output_path}")
        print(f"Period: {start_date} to {end_date}")

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        sys.exit(130)
    except SchoolSoftError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"Error: Could not write calendar: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
