"""Variant records and the operations that compare and split their alleles."""

import logging
from dataclasses import dataclass, field

from .genotypes.calls import GT_KEY, MISSING, count_allele, recode_gt, reorder_genotype
from .models import Allele, AlleleMatch, Convention
from .normalizer import trim_allele

logger = logging.getLogger(__name__)

InfoValue = str | int | float | bool | list[str]

AD_KEY = "AD"


class MissingFieldError(KeyError):
    """Raised when a target field order omits keys a variant carries."""

    def __init__(self, missing: list[str]):
        super().__init__(
            f"Canonical order is missing observed format keys: {', '.join(missing)}"
        )
        self.missing = missing


@dataclass
class Variant:
    """One VCF record: a reference and one or more alternates at a position.

    Alleles are derived on first access and cached for the lifetime of the
    instance. The only mutating operation is ``reorder_fields``.
    """

    contig: str
    position: int
    reference: str
    alternates: list[str]
    id: str | None = None
    quality: float | None = None
    filters: list[str] = field(default_factory=list)
    info: dict[str, InfoValue] = field(default_factory=dict)
    format_keys: list[str] = field(default_factory=list)
    genotypes: list[dict[str, str]] = field(default_factory=list)
    raw_info: str | None = None

    _allele_cache: dict[Convention, list[Allele]] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def alleles_for(self, convention: Convention) -> list[Allele]:
        """Return the trimmed alleles in the given convention."""
        if convention not in self._allele_cache:
            self._allele_cache[convention] = [
                trim_allele(self.position, self.reference, alt, index, convention)
                for index, alt in enumerate(self.alternates, start=1)
            ]
        return self._allele_cache[convention]

    @property
    def alleles(self) -> list[Allele]:
        return self.alleles_for(Convention.NATIVE)

    @property
    def annovar_alleles(self) -> list[Allele]:
        return self.alleles_for(Convention.ANNOVAR)

    def allele(self, index: int, convention: Convention = Convention.NATIVE) -> Allele:
        """Return the allele with the given 1-based index."""
        if not 1 <= index <= len(self.alternates):
            raise ValueError(
                f"Allele index {index} out of range for {len(self.alternates)} alternates"
            )
        return self.alleles_for(convention)[index - 1]

    @property
    def is_multiallelic(self) -> bool:
        return len(self.alternates) > 1

    def match_annovar(self, contig: str, position: int, observed: str) -> AlleleMatch:
        """Find the alleles equivalent to an Annovar style description.

        Alleles whose Annovar rendering equals ``(position, observed)`` on the
        same contig match. Only when none does are native renderings tried.
        The first matching allele in declaration order wins; ``count`` reports
        how many matched in that pass. Degenerate alleles never match.
        """
        if contig != self.contig:
            return AlleleMatch()

        query = (position, observed.upper())
        matched = []
        for alleles in (self.annovar_alleles, self.alleles):
            matched = [
                allele.index
                for allele in alleles
                if not allele.degenerate and (allele.start, allele.observed) == query
            ]
            if matched:
                break

        if len(matched) > 1:
            logger.debug(
                "Ambiguous match for %s:%d %s against alleles %s",
                contig, position, observed, matched,
            )
        return AlleleMatch(index=matched[0] if matched else None, count=len(matched))

    def equals_annovar(self, contig: str, position: int, observed: str) -> int | None:
        """Return the index of the first allele matching the description, or None."""
        return self.match_annovar(contig, position, observed).index

    def dosage(self, sample_index: int = 0, allele_index: int = 1) -> int | None:
        """Count copies of an allele in one sample's genotype.

        Returns:
            Number of occurrences, or None when the genotype is uncalled

        Raises:
            IndexError: If the sample index is out of range
            ValueError: If the allele index does not exist in this record
        """
        if not 0 <= allele_index <= len(self.alternates):
            raise ValueError(
                f"Allele index {allele_index} out of range for {len(self.alternates)} alternates"
            )
        if not 0 <= sample_index < len(self.genotypes):
            raise IndexError(
                f"Sample index {sample_index} out of range for {len(self.genotypes)} samples"
            )
        genotype = self.genotypes[sample_index]
        return count_allele(genotype.get(GT_KEY), allele_index)

    def dosages(self, allele_index: int = 1) -> list[int | None]:
        """Dosage of an allele for every sample, in sample order."""
        return [self.dosage(i, allele_index) for i in range(len(self.genotypes))]

    def reorder_fields(self, canonical_order: list[str]) -> None:
        """Reorder FORMAT keys and every sample's values in place.

        Repeated keys in ``canonical_order`` count once, at their first position.

        Raises:
            MissingFieldError: If an observed key is not in ``canonical_order``.
                The variant is left unchanged.
        """
        canonical_order = list(dict.fromkeys(canonical_order))
        observed = list(self.format_keys)
        for genotype in self.genotypes:
            observed.extend(k for k in genotype if k not in observed)

        missing = [key for key in observed if key not in canonical_order]
        if missing:
            raise MissingFieldError(missing)

        format_keys = [key for key in canonical_order if key in observed]
        genotypes = [reorder_genotype(g, format_keys) for g in self.genotypes]

        self.format_keys = format_keys
        self.genotypes = genotypes

    def decompose(self) -> list["Variant"]:
        """Split this record into one biallelic record per alternate.

        GT values are recoded so the kept alternate is 1 and all other
        alternates are 0. AD is reduced to the reference and kept alternate
        depths when it carries one depth per allele.
        """
        records = []
        for index, alt in enumerate(self.alternates, start=1):
            genotypes = []
            for genotype in self.genotypes:
                split = dict(genotype)
                if GT_KEY in split:
                    split[GT_KEY] = recode_gt(split[GT_KEY], index)
                if AD_KEY in split:
                    depths = split[AD_KEY].split(",")
                    if len(depths) == len(self.alternates) + 1:
                        split[AD_KEY] = f"{depths[0]},{depths[index]}"
                genotypes.append(split)

            records.append(
                Variant(
                    contig=self.contig,
                    position=self.position,
                    reference=self.reference,
                    alternates=[alt],
                    id=self.id,
                    quality=self.quality,
                    filters=list(self.filters),
                    info=dict(self.info),
                    format_keys=list(self.format_keys),
                    genotypes=genotypes,
                    raw_info=self.raw_info,
                )
            )
        return records

    def format_string(self) -> str:
        return ":".join(self.format_keys) if self.format_keys else MISSING

    def genotype_string(self, sample_index: int) -> str:
        genotype = self.genotypes[sample_index]
        return ":".join(genotype.get(key, MISSING) for key in self.format_keys)

    def info_string(self) -> str:
        if self.raw_info is not None:
            return self.raw_info
        if not self.info:
            return MISSING

        parts = []
        for key, value in self.info.items():
            if value is True:
                parts.append(key)
            elif isinstance(value, list):
                parts.append(f"{key}={','.join(value)}")
            else:
                parts.append(f"{key}={value}")
        return ";".join(parts)

    def to_line(self) -> str:
        """Serialise the record as a tab separated VCF data line."""
        if self.quality is None:
            qual = MISSING
        elif self.quality.is_integer():
            qual = str(int(self.quality))
        else:
            qual = str(self.quality)

        columns = [
            self.contig,
            str(self.position),
            self.id or MISSING,
            self.reference,
            ",".join(self.alternates) or MISSING,
            qual,
            ";".join(self.filters) or MISSING,
            self.info_string(),
        ]
        if self.format_keys or self.genotypes:
            columns.append(self.format_string())
            columns.extend(self.genotype_string(i) for i in range(len(self.genotypes)))
        return "\t".join(columns)

    def __str__(self) -> str:
        return f"{self.contig}:{self.position} {self.reference}>{','.join(self.alternates)}"
