"""Ledger reader for wallet-exported transaction CSVs.

The parser is deliberately simpler than RFC 4180: a quote character toggles
"inside quotes" state and is dropped from the value, and doubled quotes are
not treated as escapes. Parsing never fails on a malformed row; only reading
the file can fail, and that is reported as :class:`LedgerReadError` before
any parsing starts.
"""

from __future__ import annotations

from os import PathLike
from pathlib import Path

from .errors import LedgerReadError
from .logging_setup import get_logger
from .models import Record

_logger = get_logger("btc_cost_basis.ledger")


def split_line(line: str, *, delimiter: str = ",", quote: str = '"') -> list[str]:
    """Split one line into field values, honoring quoted delimiters."""

    values: list[str] = []
    current: list[str] = []
    in_quotes = False
    for ch in line:
        if ch == quote:
            in_quotes = not in_quotes
        elif ch == delimiter and not in_quotes:
            values.append("".join(current))
            current = []
        else:
            current.append(ch)
    values.append("".join(current))
    return values


def parse_records(text: str, *, delimiter: str = ",", quote: str = '"') -> list[Record]:
    """Parse ledger text into records keyed by the header row.

    - The first non-blank line is the header; every following line is a row.
      Blank lines are skipped, except that a line holding only whitespace
      delimiters (e.g. tabs in tab-separated text) is a row of empty values.
    - Rows shorter than the header are padded with ``""``; extra trailing
      values are dropped.
    - Header names are split with the same quoting rules as data rows.
    """

    lines = [ln.rstrip("\r") for ln in text.split("\n")]
    start = next((i for i, ln in enumerate(lines) if ln.strip()), None)
    if start is None:
        return []

    headers = split_line(lines[start], delimiter=delimiter, quote=quote)
    records: list[Record] = []
    for line in lines[start + 1 :]:
        if not line.strip() and delimiter not in line:
            continue
        values = split_line(line, delimiter=delimiter, quote=quote)
        records.append(
            {h: (values[i] if i < len(values) else "") for i, h in enumerate(headers)}
        )
    return records


def load_ledger_text(path: str | PathLike[str]) -> str:
    """Return the contents of a UTF-8 ledger file (a leading BOM is dropped).

    Raises
    ------
    LedgerReadError
        When the file does not exist, is not a regular file, cannot be
        opened, or is not valid UTF-8.
    """

    p = Path(path)
    if not p.is_file():
        raise LedgerReadError(str(path), "CSV file not found")
    try:
        return p.read_text(encoding="utf-8-sig")
    except PermissionError as e:
        raise LedgerReadError(str(path), "Permission denied") from e
    except UnicodeDecodeError as e:
        raise LedgerReadError(str(path), f"CSV file is not valid UTF-8 ({e.reason})") from e
    except OSError as e:
        raise LedgerReadError(str(path), f"Failed to read CSV file ({e.strerror or e})") from e


def read_ledger(
    path: str | PathLike[str], *, delimiter: str = ",", quote: str = '"'
) -> list[Record]:
    """Read a ledger file from disk and parse it into records."""

    records = parse_records(load_ledger_text(path), delimiter=delimiter, quote=quote)
    _logger.debug("ledger:read path=%s records=%d", path, len(records))
    return records


__all__ = ["load_ledger_text", "parse_records", "read_ledger", "split_line"]
