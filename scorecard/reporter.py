"""Report generation for scorecard imports (CSV, HTML, summary)."""

import csv
import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from scorecard import ImportResult, PlayerResolution

log = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / 'templates'

CSV_COLUMNS = [
    'Innings',
    'Role',
    'Player_Name',
    'Team',
    'Player_ID',
    'Match_Type',
    'Confidence',
]


def _resolution_to_row(resolution: PlayerResolution) -> dict:
    """Convert a PlayerResolution to a flat dict for CSV/HTML output."""
    return {
        'Innings': str(resolution.innings),
        'Role': resolution.role,
        'Player_Name': resolution.player_name,
        'Team': resolution.team,
        'Player_ID': str(resolution.player_id) if resolution.player_id is not None else '',
        'Match_Type': resolution.match_type,
        'Confidence': f'{resolution.confidence:.4f}',
    }


def write_csv_report(result: ImportResult, output_path: Path) -> None:
    """Write the player resolutions of an import as a CSV report.

    Uses UTF-8 with BOM (utf-8-sig) and semicolon delimiter for
    compatibility with Excel.

    Args:
        result: Import result.
        output_path: Path for the output CSV file.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', newline='', encoding='utf-8-sig') as f:
        writer = csv.DictWriter(
            f, fieldnames=CSV_COLUMNS, delimiter=';', extrasaction='ignore',
        )
        writer.writeheader()
        for resolution in result.resolutions:
            writer.writerow(_resolution_to_row(resolution))

    log.info("CSV report written: %s (%d rows)", output_path, len(result.resolutions))


def _compute_stats(result: ImportResult) -> dict:
    """Compute summary counts for an import."""
    types = [r.match_type for r in result.resolutions]
    return {
        'total': result.players_matched + result.players_unmatched,
        'matched': result.players_matched,
        'unmatched': result.players_unmatched,
        'exact': types.count('exact'),
        'fuzzy': types.count('fuzzy'),
    }


def write_html_report(
    result: ImportResult,
    output_path: Path,
    source_name: str = '',
) -> None:
    """Write an import result as an HTML report using Jinja2.

    Args:
        result: Import result.
        output_path: Path for the output HTML file.
        source_name: Name of the imported file (for the report title).
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=True,
    )
    template = env.get_template('report.html')

    html = template.render(
        source_name=source_name,
        result=result,
        rows=[_resolution_to_row(r) for r in result.resolutions],
        stats=_compute_stats(result),
        columns=CSV_COLUMNS,
    )

    output_path.write_text(html, encoding='utf-8')
    log.info("HTML report written: %s", output_path)


def print_summary(result: ImportResult, source_name: str = '') -> None:
    """Print a summary of an import to stdout."""
    stats = _compute_stats(result)

    print(f"\n=== Scorecard import: {source_name} ===")
    print(f"Status:                    {'OK' if result.success else 'FAILED'}")
    print(f"Match ID:                  {result.match_id if result.match_id is not None else '-'}")
    print(f"Scorecard ID:              {result.scorecard_id if result.scorecard_id is not None else '-'}")
    print(f"Players total:             {stats['total']:>5}")
    print(f"  - exact:                 {stats['exact']:>5}")
    print(f"  - fuzzy:                 {stats['fuzzy']:>5}")
    print(f"  - unmatched:             {stats['unmatched']:>5}")
    for name in result.unmatched_players:
        print(f"      {name}")
    if result.errors:
        print("---")
        for error in result.errors:
            print(f"Error: {error}")
    print()
