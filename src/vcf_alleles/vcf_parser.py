"""VCF parsing functionality."""

import logging
import re
from collections.abc import Iterator
from pathlib import Path

from .variant import InfoValue, Variant

logger = logging.getLogger(__name__)

MANDATORY_COLUMNS = ("CHROM", "POS", "ID", "REF", "ALT")

POSITION_PATTERN = re.compile(r"^\d+$", re.ASCII)
INT_PATTERN = re.compile(r"^[-+]?\d+$", re.ASCII)
FLOAT_PATTERN = re.compile(r"^[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?$|^[-+]?(inf|nan)$", re.IGNORECASE)


class MalformedRecord(ValueError):
    """Raised when a VCF data line cannot be parsed.

    Attributes:
        line: The offending line
        column: 0-based index of the offending column
    """

    def __init__(self, message: str, line: str, column: int):
        super().__init__(f"{message} (column {column + 1})")
        self.line = line
        self.column = column


def parse_info_value(token: str) -> InfoValue:
    """Decide the type of a raw INFO value token.

    Comma separated tokens become lists of strings; integers and floats are
    converted; anything else stays a string.
    """
    if "," in token:
        return token.split(",")
    if INT_PATTERN.match(token):
        return int(token)
    if FLOAT_PATTERN.match(token):
        return float(token)
    return token


def parse_info(field: str) -> dict[str, InfoValue]:
    """Parse a semicolon separated INFO column.

    Entries without '=' are flags and are stored as True.
    """
    info: dict[str, InfoValue] = {}
    if not field or field == ".":
        return info

    for entry in field.split(";"):
        if not entry:
            continue
        key, sep, value = entry.partition("=")
        if not sep or not key:
            info[key or entry] = True
        else:
            info[key] = parse_info_value(value)
    return info


def parse_variant_line(line: str) -> Variant:
    """Parse one tab separated VCF data line into a Variant.

    Raises:
        MalformedRecord: If a mandatory column is missing or unparseable
    """
    line = line.rstrip("\r\n")
    fields = line.split("\t")

    if len(fields) < len(MANDATORY_COLUMNS):
        raise MalformedRecord(
            f"Expected at least {len(MANDATORY_COLUMNS)} columns, found {len(fields)}",
            line,
            len(fields),
        )

    contig = fields[0]
    if not contig or contig == ".":
        raise MalformedRecord("Missing contig", line, 0)

    if not POSITION_PATTERN.match(fields[1]) or int(fields[1]) < 1:
        raise MalformedRecord(f"Invalid position '{fields[1]}'", line, 1)
    position = int(fields[1])

    reference = fields[3]
    if not reference or reference == ".":
        raise MalformedRecord("Missing reference allele", line, 3)

    if not fields[4] or fields[4] == ".":
        raise MalformedRecord("Missing alternate allele", line, 4)
    alternates = fields[4].split(",")
    if any(not alt for alt in alternates):
        raise MalformedRecord(f"Empty alternate allele in '{fields[4]}'", line, 4)

    quality = None
    if len(fields) > 5 and fields[5] not in ("", "."):
        if not FLOAT_PATTERN.match(fields[5]):
            raise MalformedRecord(f"Invalid quality '{fields[5]}'", line, 5)
        quality = float(fields[5])

    filters = []
    if len(fields) > 6 and fields[6] not in ("", "."):
        filters = fields[6].split(";")

    raw_info = fields[7] if len(fields) > 7 and fields[7] else None
    info = parse_info(raw_info) if raw_info else {}

    format_keys = []
    if len(fields) > 8 and fields[8] not in ("", "."):
        format_keys = fields[8].split(":")

    genotypes = []
    for sample_number, sample_field in enumerate(fields[9:], start=1):
        values = sample_field.split(":")
        if len(values) > len(format_keys):
            logger.warning(
                "%s:%d sample %d has %d values for %d FORMAT keys, extra values dropped",
                contig, position, sample_number, len(values), len(format_keys),
            )
        genotypes.append(dict(zip(format_keys, values, strict=False)))

    return Variant(
        contig=contig,
        position=position,
        reference=reference,
        alternates=alternates,
        id=fields[2] if fields[2] not in ("", ".") else None,
        quality=quality,
        filters=filters,
        info=info,
        format_keys=format_keys,
        genotypes=genotypes,
        raw_info=raw_info,
    )


class VCFHeaderParser:
    """Parser for VCF header information."""

    def parse_format_fields(self, header_lines: list[str]) -> dict[str, dict[str, str]]:
        """Parse FORMAT field definitions from header lines."""
        return self._parse_definitions(header_lines, re.compile(r'##FORMAT=<(.+)>'))

    def parse_sample_names(self, header_lines: list[str]) -> list[str]:
        """Return the sample names declared on the #CHROM line."""
        for line in header_lines:
            if line.startswith("#CHROM"):
                return line.rstrip("\r\n").split("\t")[9:]
        return []

    def _parse_definitions(
        self, header_lines: list[str], pattern: re.Pattern
    ) -> dict[str, dict[str, str]]:
        fields = {}
        for line in header_lines:
            match = pattern.match(line)
            if match:
                field_def = self._parse_field_definition(match.group(1))
                if field_def:
                    fields[field_def['ID']] = {
                        k: v for k, v in field_def.items() if k != 'ID'
                    }
        return fields

    def _parse_field_definition(self, field_string: str) -> dict[str, str] | None:
        """Parse a field definition string like 'ID=AC,Number=A,Type=Integer,Description="..."'"""
        field_def = {}

        # Handle quoted descriptions that may contain commas
        parts = []
        current_part = ""
        in_quotes = False

        for char in field_string:
            if char == '"':
                in_quotes = not in_quotes
                current_part += char
            elif char == ',' and not in_quotes:
                parts.append(current_part)
                current_part = ""
            else:
                current_part += char

        if current_part:
            parts.append(current_part)

        for part in parts:
            if '=' in part:
                key, value = part.split('=', 1)
                if key == 'Description' and value.startswith('"') and value.endswith('"'):
                    value = value[1:-1]
                field_def[key] = value

        return field_def if 'ID' in field_def else None


class VCFReader:
    """Streaming reader for plain text VCF files.

    Malformed data lines are logged and collected in ``errors`` rather than
    stopping the iteration.
    """

    def __init__(self, vcf_path: Path | str):
        self.vcf_path = Path(vcf_path)
        self.header_lines: list[str] = []
        self.errors: list[tuple[int, MalformedRecord]] = []
        self._handle = None
        self._first_record: tuple[int, str] | None = None
        self._line_number = 0
        self._header_parser = VCFHeaderParser()

    def open(self) -> None:
        if self._handle is not None:
            return
        self.header_lines = []
        self._first_record = None
        self._line_number = 0
        self._handle = open(self.vcf_path, encoding="utf-8")
        for line in self._handle:
            self._line_number += 1
            if line.startswith("#"):
                self.header_lines.append(line.rstrip("\r\n"))
            elif line.strip():
                self._first_record = (self._line_number, line)
                break

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def __enter__(self) -> "VCFReader":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def sample_names(self) -> list[str]:
        self.open()
        return self._header_parser.parse_sample_names(self.header_lines)

    @property
    def format_definitions(self) -> dict[str, dict[str, str]]:
        self.open()
        return self._header_parser.parse_format_fields(self.header_lines)

    def _lines(self) -> Iterator[tuple[int, str]]:
        if self._first_record is not None:
            yield self._first_record
            self._first_record = None
        for line in self._handle:
            self._line_number += 1
            if line.strip() and not line.startswith("#"):
                yield self._line_number, line

    def __iter__(self) -> Iterator[Variant]:
        owned = self._handle is None
        self.open()
        try:
            for line_number, line in self._lines():
                try:
                    yield parse_variant_line(line)
                except MalformedRecord as e:
                    logger.warning("Skipping malformed record on line %d: %s", line_number, e)
                    self.errors.append((line_number, e))
        finally:
            if owned:
                self.close()
