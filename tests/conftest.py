"""Pytest configuration and fixtures for vcf-alleles tests."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent))

from fixtures.vcf_generator import (  # noqa: E402
    make_trio_vcf_file,
    make_vcf_with_malformed_record,
)

# chr1 positions 1-11: T T T C A C A C A G G
REPEAT_SEQUENCE = "TTTCACACAGG"


class DictSequenceProvider:
    """In-memory sequence provider with 1-based inclusive coordinates."""

    def __init__(self, sequences: dict[str, str]):
        self.sequences = sequences
        self.calls: list[tuple[str, int, int]] = []

    def fetch(self, contig: str, start: int, end: int) -> str:
        self.calls.append((contig, start, end))
        return self.sequences[contig][start - 1:end]


@pytest.fixture
def repeat_provider() -> DictSequenceProvider:
    return DictSequenceProvider({"chr1": REPEAT_SEQUENCE})


@pytest.fixture
def fasta_file(tmp_path) -> Path:
    """Small FASTA with a 70bp and a 128bp contig, wrapped at 60 columns."""
    path = tmp_path / "ref.fa"
    contigs = {
        "chr1": REPEAT_SEQUENCE + "ACGT" * 14 + "ACG",
        "chr2": "GATTACA" * 14 + "NNNNN" + "acgtr" * 5,
    }
    lines = []
    for name, seq in contigs.items():
        lines.append(f">{name}")
        lines.extend(seq[i:i + 60] for i in range(0, len(seq), 60))
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def trio_vcf(tmp_path) -> Path:
    return make_trio_vcf_file(tmp_path)


@pytest.fixture
def malformed_vcf(tmp_path) -> Path:
    return make_vcf_with_malformed_record(tmp_path)
