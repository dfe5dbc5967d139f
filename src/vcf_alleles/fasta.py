"""Indexed FASTA access and base sequence helpers.

Only indexed FASTA files are supported; pyfaidx builds the .fai index on
first open when it is missing. Coordinates are 1-based and inclusive:

    ReferenceFasta("hg38.fa").bases_at("chr1", 1000, 2000)
"""

import logging
import threading
from collections.abc import Iterator
from functools import lru_cache
from pathlib import Path

from pyfaidx import Fasta

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SIZE = 100
LINE_WIDTH = 80

# IUPAC complements; N, W and S are their own complement
COMPLEMENTS = {
    "A": "T", "T": "A", "C": "G", "G": "C",
    "R": "Y", "Y": "R", "K": "M", "M": "K",
    "B": "V", "V": "B", "D": "H", "H": "D",
    "W": "W", "S": "S", "N": "N",
}
COMPLEMENTS.update({k.lower(): v.lower() for k, v in list(COMPLEMENTS.items())})


class OutOfRangeError(IndexError):
    """Raised when a sequence lookup falls outside the reference."""

    pass


def reverse_complement(bases: str) -> str:
    """Reverse complement a base sequence.

    IUPAC ambiguity codes are complemented, case is preserved and symbols
    that are not nucleotide codes are dropped.
    """
    return "".join(COMPLEMENTS[b] for b in reversed(bases) if b in COMPLEMENTS)


def format_fasta(contig: str, sequence: str, width: int = LINE_WIDTH) -> str:
    """Render a sequence as a FASTA entry wrapped at ``width`` columns."""
    lines = [f">{contig}"]
    lines.extend(sequence[i:i + width] for i in range(0, len(sequence), width))
    return "\n".join(lines) + "\n"


def bracket(seq: str, start: int, end: int | None = None) -> str:
    """Highlight bases of ``seq`` by surrounding them with brackets.

    Args:
        seq: Sequence to display
        start: 0-based offset of the first highlighted base
        end: 0-based exclusive end, defaults to a single base
    """
    if end is None:
        end = start + 1
    return f"{seq[:start]}[{seq[start:end]}]{seq[end:]}"


class ReferenceFasta:
    """Read-only access to an indexed FASTA reference.

    Recently fetched ranges are memoized since batch comparisons tend to
    query the same region repeatedly. Safe to share between threads.
    """

    def __init__(self, fasta_path: Path | str, cache_size: int = DEFAULT_CACHE_SIZE):
        self.fasta_path = Path(fasta_path)
        if not self.fasta_path.exists():
            raise FileNotFoundError(f"FASTA file not found: {self.fasta_path}")

        self._fasta = Fasta(str(self.fasta_path), as_raw=True, sequence_always_upper=True)
        self._lock = threading.Lock()
        self._cached_fetch = lru_cache(maxsize=cache_size)(self._fetch)
        logger.info("Opened reference %s (%d contigs)", self.fasta_path, len(self.contigs))

    @property
    def contigs(self) -> list[str]:
        return list(self._fasta.keys())

    def contig_length(self, contig: str) -> int:
        if contig not in self._fasta:
            raise OutOfRangeError(f"Unknown contig: {contig}")
        return len(self._fasta[contig])

    def fetch(self, contig: str, start: int, end: int) -> str:
        """Return the bases over a 1-based inclusive range.

        Raises:
            OutOfRangeError: If the contig is unknown or the range falls
                outside it
        """
        return self._cached_fetch(contig, start, end)

    bases_at = fetch

    def _fetch(self, contig: str, start: int, end: int) -> str:
        length = self.contig_length(contig)
        if start < 1 or end < start or end > length:
            raise OutOfRangeError(
                f"Range {contig}:{start}-{end} outside contig of length {length}"
            )
        with self._lock:
            return str(self._fasta[contig][start - 1:end])

    def each_sequence(self) -> Iterator[tuple[str, str]]:
        """Yield (name, bases) for every sequence in the file."""
        for record in self._fasta:
            with self._lock:
                bases = str(record[:])
            yield record.name, bases

    def close(self) -> None:
        self._fasta.close()

    def __enter__(self) -> "ReferenceFasta":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
