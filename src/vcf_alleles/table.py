"""Delimited table reading, filtering and writing for the ``table`` command."""

import csv
import operator
import re
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import TextIO

Row = dict[str, str]

OPERATORS: dict[str, Callable] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<=": operator.le,
    ">=": operator.ge,
    "<": operator.lt,
    ">": operator.gt,
}

FILTER_PATTERN = re.compile(r"^\s*(?P<column>[^!<>=\s]+)\s*(?P<op>==|!=|<=|>=|<|>)\s*(?P<value>.*?)\s*$")


class TableFormatError(ValueError):
    """Raised when a table's format cannot be determined or a filter is invalid."""

    pass


def detect_format(path: Path | None, force: str | None = None) -> str:
    """Decide whether a table is TSV or CSV.

    Forced formats win, then the file extension, then a first line with
    more than three tab separated fields.
    """
    if force in ("tsv", "csv"):
        return force
    if path is None:
        return "tsv"
    if path.suffix.lower() == ".tsv":
        return "tsv"
    if path.suffix.lower() == ".csv":
        return "csv"

    with open(path, encoding="utf-8") as f:
        first_line = f.readline()
    if len(first_line.rstrip("\r\n").split("\t")) > 3:
        return "tsv"
    raise TableFormatError(f"Unable to determine format of {path}")


def read_rows(stream: TextIO, fmt: str) -> list[Row]:
    delimiter = "\t" if fmt == "tsv" else ","
    return list(csv.DictReader(stream, delimiter=delimiter))


def read_table(path: Path | None, stream: TextIO | None = None, force: str | None = None) -> list[Row]:
    """Read a table from a file, or from ``stream`` when no path is given."""
    fmt = detect_format(path, force)
    if path is None:
        return read_rows(stream, fmt)
    with open(path, encoding="utf-8", newline="") as f:
        return read_rows(f, fmt)


def _coerce(value: str) -> float | str:
    try:
        return float(value)
    except ValueError:
        return value


def parse_filter(expression: str) -> Callable[[Row], bool]:
    """Compile a 'COLUMN OP VALUE' expression into a row predicate.

    Values compare numerically when both sides parse as numbers.
    """
    match = FILTER_PATTERN.match(expression)
    if not match:
        raise TableFormatError(f"Invalid filter expression: '{expression}'")

    column = match.group("column")
    compare = OPERATORS[match.group("op")]
    expected = match.group("value").strip("'\"")

    def predicate(row: Row) -> bool:
        if column not in row:
            raise TableFormatError(f"Filter refers to unknown column '{column}'")
        left, right = _coerce(row[column] or ""), _coerce(expected)
        if type(left) is not type(right):
            left, right = str(row[column]), expected
        return compare(left, right)

    return predicate


def filter_rows(rows: Iterable[Row], expressions: list[str]) -> list[Row]:
    predicates = [parse_filter(e) for e in expressions]
    return [row for row in rows if all(p(row) for p in predicates)]


def select_columns(rows: Iterable[Row], columns: Iterable[str]) -> list[Row]:
    keep = set(columns)
    return [{k: v for k, v in row.items() if k in keep} for row in rows]


def exclude_columns(rows: Iterable[Row], columns: Iterable[str]) -> list[Row]:
    drop = set(columns)
    return [{k: v for k, v in row.items() if k not in drop} for row in rows]


def split_column_list(value: str | None) -> list[str]:
    if not value:
        return []
    return [c.strip() for c in value.split(",") if c.strip()]


def write_delimited(rows: list[Row], out: TextIO, delimiter: str) -> None:
    """Write rows with a header line taken from the first row's keys."""
    if not rows:
        return
    writer = csv.writer(out, delimiter=delimiter, lineterminator="\n")
    writer.writerow(list(rows[0].keys()))
    for row in rows:
        writer.writerow([str(v) for v in row.values()])
