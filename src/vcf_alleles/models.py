"""Data models for alleles derived from VCF variants."""

from dataclasses import dataclass
from enum import Enum


class AlleleType(Enum):
    """Kind of change an alternate allele makes to the reference."""

    SNP = "snp"
    INSERTION = "insertion"
    DELETION = "deletion"
    COMPLEX = "complex"


class Convention(Enum):
    """Positional convention used to describe an allele."""

    NATIVE = "native"
    ANNOVAR = "annovar"

    @classmethod
    def from_string(cls, value: str) -> "Convention":
        value_lower = value.strip().lower()
        for convention in cls:
            if convention.value == value_lower:
                return convention
        raise ValueError(
            f"Unknown convention: '{value}'. Valid values: "
            f"{', '.join(c.value for c in cls)}"
        )


@dataclass(frozen=True)
class Allele:
    """One alternate allele of a variant after trimming shared bases.

    ``start`` and ``end`` are 1-based and inclusive. For insertions they
    collapse to the single anchor position dictated by ``convention``.
    """

    index: int
    type: AlleleType
    start: int
    end: int
    alt: str
    inserted_bases: str = ""
    deleted_bases: str = ""
    convention: Convention = Convention.NATIVE
    degenerate: bool = False

    @property
    def observed(self) -> str:
        """Bases observed in place of the reference, '-' for deletions."""
        if self.type is AlleleType.DELETION:
            return "-"
        if self.type is AlleleType.INSERTION:
            return self.inserted_bases
        return self.inserted_bases or self.alt.upper()

    @property
    def length(self) -> int:
        """Number of bases inserted or deleted (1 for SNPs)."""
        if self.type is AlleleType.INSERTION:
            return len(self.inserted_bases)
        if self.type is AlleleType.DELETION:
            return len(self.deleted_bases)
        return self.end - self.start + 1

    def __str__(self) -> str:
        return f"{self.index}:{self.type.value}@{self.start}-{self.end}:{self.observed}"


@dataclass(frozen=True)
class AlleleMatch:
    """Outcome of comparing a variant against an external allele description.

    ``index`` is the first matching allele in declaration order (1-based) or
    None when nothing matched. ``count`` is the number of alleles that matched.
    """

    index: int | None = None
    count: int = 0

    @property
    def ambiguous(self) -> bool:
        return self.count > 1

    def __bool__(self) -> bool:
        return self.index is not None
