"""Scorecard export reader: encoding detection and grid tokenizing."""

import logging
import re
from pathlib import Path

log = logging.getLogger(__name__)

# Matches any sequence of whitespace (including Unicode whitespace like U+2006)
_WHITESPACE_RE = re.compile(r'\s+')


def detect_encoding(path: Path) -> str:
    """Detect file encoding by checking for BOM bytes.

    Args:
        path: Path to the scorecard export.

    Returns:
        Encoding string suitable for open().
    """
    with open(path, 'rb') as f:
        bom = f.read(2)
    if bom == b'\xff\xfe':
        return 'utf-16-le'
    return 'utf-8-sig'


def normalize_whitespace(value: str) -> str:
    """Collapse whitespace runs into a single space and strip the ends."""
    return _WHITESPACE_RE.sub(' ', value).strip()


def split_cells(line: str) -> list[str]:
    """Split one line on commas, keeping commas inside double quotes.

    Quotes only toggle quoted mode and are dropped from the cell text;
    escaped quotes are not supported. Whitespace inside a cell is folded
    to single spaces.
    """
    cells: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == ',' and not in_quotes:
            cells.append(normalize_whitespace(''.join(current)))
            current = []
        else:
            current.append(char)
    cells.append(normalize_whitespace(''.join(current)))
    return cells


def tokenize(text: str) -> list[list[str]]:
    """Turn a raw scorecard export into rows of trimmed cells.

    Produces exactly one row per line, blank lines included (as ``['']``).

    Args:
        text: Raw export content.

    Returns:
        List of rows, each a list of cell strings.
    """
    return [split_cells(line) for line in text.split('\n')]


def read_scorecard_text(path: str | Path) -> str:
    """Read a scorecard export from disk.

    Handles UTF-16LE (with BOM) and UTF-8 encoded files automatically
    and normalizes Windows line endings.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is empty.
    """
    path = Path(path)
    encoding = detect_encoding(path)

    with open(path, 'r', encoding=encoding) as f:
        content = f.read()

    # Strip BOM if present
    content = content.lstrip('\ufeff').replace('\r\n', '\n')
    if not content.strip():
        raise ValueError(f"File {path} is empty.")

    log.info("Read %d lines from %s", content.count('\n') + 1, path)
    return content
