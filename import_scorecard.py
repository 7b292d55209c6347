"""cricket-scorecard-import – CLI tool for importing cricket scorecard exports."""

import argparse
import logging
import sys
from pathlib import Path

from scorecard.importer import ScorecardImporter, StorageError
from scorecard.matching import ACCEPT_THRESHOLD
from scorecard.reader import read_scorecard_text
from scorecard.reporter import print_summary, write_csv_report, write_html_report
from scorecard.store import DEFAULT_DB_PATH, get_connection, init_database


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        description='Import a cricket scorecard export into the match database.',
        prog='import_scorecard.py',
    )
    parser.add_argument(
        '--db', type=Path, default=DEFAULT_DB_PATH,
        help=f'Path to the sqlite database (default: {DEFAULT_DB_PATH})',
    )
    parser.add_argument(
        '--csv', type=Path,
        help='Path to the scorecard export to import',
    )
    parser.add_argument(
        '--match-id', type=int,
        help='Import into this match instead of correlating by date and teams',
    )
    parser.add_argument(
        '--imported-by',
        help='Identifier of the importing user',
    )
    parser.add_argument(
        '--threshold', type=float, default=ACCEPT_THRESHOLD,
        help=f'Minimum score for accepting a player match (default: {ACCEPT_THRESHOLD})',
    )
    parser.add_argument(
        '--output', type=Path,
        help='Path for the player resolution report (CSV)',
    )
    parser.add_argument(
        '--html', action='store_true',
        help='Also write an HTML report next to --output',
    )
    parser.add_argument(
        '--summary', action='store_true',
        help='Print a summary to stdout',
    )
    parser.add_argument(
        '--list', action='store_true',
        help='List stored scorecards',
    )
    parser.add_argument(
        '--pending', action='store_true',
        help='List matches without a scorecard',
    )
    parser.add_argument(
        '--delete', type=int, metavar='SCORECARD_ID',
        help='Delete a scorecard and clear its match reference',
    )
    parser.add_argument(
        '--verbose', '-v', action='store_true',
        help='Enable debug logging',
    )
    return parser


def run_import(importer: ScorecardImporter, args: argparse.Namespace) -> int:
    """Import a single export and write the requested reports."""
    csv_text = read_scorecard_text(args.csv)
    try:
        result = importer.import_scorecard(csv_text, args.match_id, args.imported_by)
    except StorageError as exc:
        result = exc.result

    if args.output:
        write_csv_report(result, args.output)
        if args.html:
            write_html_report(result, args.output.with_suffix('.html'), args.csv.name)

    if args.summary or not result.success:
        print_summary(result, args.csv.name)

    return 0 if result.success else 1


def main() -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s: %(message)s',
    )

    if not (args.csv or args.list or args.pending or args.delete is not None):
        parser.error('One of --csv, --list, --pending or --delete is required.')

    if args.html and not args.output:
        parser.error('--html requires --output.')

    conn = get_connection(args.db)
    init_database(conn)
    importer = ScorecardImporter(conn, threshold=args.threshold)

    status = 0
    try:
        if args.delete is not None:
            if importer.delete_scorecard(args.delete):
                logging.info("Scorecard %d deleted.", args.delete)
            else:
                logging.warning("Scorecard %d not found.", args.delete)
                status = 1

        if args.csv:
            status = run_import(importer, args)

        if args.list:
            for scorecard in importer.get_all_scorecards():
                first = scorecard.first_innings
                second = scorecard.second_innings
                print(
                    f"{scorecard.id:>5}  match {scorecard.match_id:>5}  "
                    f"{first.batting_team} {first.total.runs} - "
                    f"{second.batting_team} {second.total.runs}  "
                    f"({scorecard.imported_at:%Y-%m-%d %H:%M})"
                )

        if args.pending:
            for match in importer.get_matches_without_scorecards():
                print(
                    f"{match.id:>5}  {match.match_date:%Y-%m-%d}  "
                    f"{match.team1.short_name} vs {match.team2.short_name}"
                )
    finally:
        conn.close()

    sys.exit(status)


if __name__ == '__main__':
    main()
