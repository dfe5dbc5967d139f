"""Allele trimming and normalization.

Two trimming conventions are supported:

- native: VCF style, the suffix is trimmed first and one shared anchor base
  is always kept, so indels are reported next to their left anchor.
- annovar: convert2annovar style, the full shared prefix is trimmed first,
  then the shared suffix, leaving zero-anchor alleles ('-' for deletions).

Left alignment against a reference follows the vt algorithm
(Tan et al., 2015).
"""

import logging
from typing import Protocol

from .models import Allele, AlleleType, Convention

logger = logging.getLogger(__name__)


class SequenceProvider(Protocol):
    """Protocol for reference sequence access."""

    def fetch(self, contig: str, start: int, end: int) -> str:
        """Fetch reference bases for a 1-based inclusive region."""
        ...


def _common_suffix_length(a: str, b: str, keep: int) -> int:
    n = 0
    limit = min(len(a), len(b)) - keep
    while n < limit and a[-1 - n] == b[-1 - n]:
        n += 1
    return n


def _common_prefix_length(a: str, b: str, keep: int) -> int:
    n = 0
    limit = min(len(a), len(b)) - keep
    while n < limit and a[n] == b[n]:
        n += 1
    return n


def trim_allele(
    position: int,
    ref: str,
    alt: str,
    index: int = 1,
    convention: Convention = Convention.NATIVE,
) -> Allele:
    """Derive the trimmed representation of one alternate allele.

    Args:
        position: 1-based position of the first reference base
        ref: Reference bases
        alt: Alternate bases
        index: 1-based index of the alternate within its record
        convention: Positional convention to report the allele in

    Returns:
        Allele with type, span and inserted/deleted bases
    """
    ref_upper = ref.upper()
    alt_upper = alt.upper()

    if ref_upper == alt_upper:
        return Allele(
            index=index,
            type=AlleleType.SNP,
            start=position,
            end=position,
            alt=alt,
            convention=convention,
            degenerate=True,
        )

    if convention is Convention.ANNOVAR:
        return _trim_annovar(position, ref_upper, alt_upper, alt, index)
    return _trim_native(position, ref_upper, alt_upper, alt, index)


def _trim_native(position: int, ref: str, alt: str, original: str, index: int) -> Allele:
    suffix = _common_suffix_length(ref, alt, keep=1)
    if suffix:
        ref, alt = ref[:-suffix], alt[:-suffix]

    offset = _common_prefix_length(ref, alt, keep=1)
    ref, alt = ref[offset:], alt[offset:]
    start = position + offset

    if len(ref) == 1 and len(alt) == 1:
        return Allele(index, AlleleType.SNP, start, start, original,
                      inserted_bases=alt, deleted_bases=ref)

    if ref[0] == alt[0]:
        if len(ref) == 1:
            return Allele(index, AlleleType.INSERTION, start, start, original,
                          inserted_bases=alt[1:])
        if len(alt) == 1:
            deleted = ref[1:]
            return Allele(index, AlleleType.DELETION, start + 1, start + len(deleted),
                          original, deleted_bases=deleted)

    return Allele(index, AlleleType.COMPLEX, start, start + len(ref) - 1, original,
                  inserted_bases=alt, deleted_bases=ref)


def _trim_annovar(position: int, ref: str, alt: str, original: str, index: int) -> Allele:
    prefix = _common_prefix_length(ref, alt, keep=0)
    ref, alt = ref[prefix:], alt[prefix:]

    suffix = _common_suffix_length(ref, alt, keep=0)
    if suffix:
        ref, alt = ref[:-suffix], alt[:-suffix]

    start = position + prefix
    annovar = Convention.ANNOVAR

    if not ref:
        # zero-width: annovar reports the base preceding the insertion
        return Allele(index, AlleleType.INSERTION, start - 1, start - 1, original,
                      inserted_bases=alt, convention=annovar)
    if not alt:
        return Allele(index, AlleleType.DELETION, start, start + len(ref) - 1, original,
                      deleted_bases=ref, convention=annovar)
    if len(ref) == 1 and len(alt) == 1:
        return Allele(index, AlleleType.SNP, start, start, original,
                      inserted_bases=alt, deleted_bases=ref, convention=annovar)
    return Allele(index, AlleleType.COMPLEX, start, start + len(ref) - 1, original,
                  inserted_bases=alt, deleted_bases=ref, convention=annovar)


def normalize_variant(
    contig: str,
    pos: int,
    ref: str,
    alts: list[str],
    reference_genome: SequenceProvider | None = None
) -> tuple[int, str, list[str]]:
    """
    Normalize a VCF entry per vt algorithm (Tan et al., 2015).

    Achieves two properties:
    1. Left-alignment: position is leftmost possible
    2. Parsimony: alleles are minimally represented

    Args:
        contig: Contig name
        pos: 1-based position
        ref: Reference allele
        alts: List of alternative alleles
        reference_genome: Optional sequence provider for left-extension

    Returns:
        Tuple of (normalized_pos, normalized_ref, normalized_alts)
    """
    if not ref or not alts:
        return pos, ref, alts

    alleles = [ref.upper()] + [a.upper() for a in alts]

    changed = True
    while changed:
        changed = False

        if all(len(a) > 0 for a in alleles):
            last_bases = {a[-1] for a in alleles}
            if len(last_bases) == 1:
                new_alleles = [a[:-1] for a in alleles]

                if any(len(a) == 0 for a in new_alleles):
                    if reference_genome is not None and pos > 1:
                        pos -= 1
                        left_base = reference_genome.fetch(contig, pos, pos)
                        alleles = [left_base.upper() + a for a in new_alleles]
                        changed = True
                    else:
                        break
                else:
                    alleles = new_alleles
                    changed = True

    while (len({a[0] for a in alleles if len(a) > 0}) == 1 and
           all(len(a) >= 2 for a in alleles)):
        alleles = [a[1:] for a in alleles]
        pos += 1

    logger.debug("Normalized %s:%d to %s>%s", contig, pos, alleles[0], ",".join(alleles[1:]))
    return pos, alleles[0], alleles[1:]
