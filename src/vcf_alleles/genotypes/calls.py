"""Genotype call parsing, allele counting and subfield reordering.

GT values are slash (unphased) or pipe (phased) separated allele indices,
where '.' marks an uncalled allele. Haploid calls have a single index.
"""

import re

GT_KEY = "GT"
MISSING = "."

_GT_SEPARATOR = re.compile(r"[/|]")


def parse_gt(gt: str | None) -> list[int | None] | None:
    """Split a GT value into allele indices.

    Args:
        gt: Genotype string (e.g., "0/1", "1|2", "./.")

    Returns:
        List of allele indices with None for uncalled components,
        or None when the GT value itself is absent or unparseable
    """
    if gt is None or gt == "" or gt == MISSING:
        return None

    alleles: list[int | None] = []
    for component in _GT_SEPARATOR.split(gt):
        if component == MISSING:
            alleles.append(None)
        elif component.isascii() and component.isdigit():
            alleles.append(int(component))
        else:
            return None
    return alleles


def is_phased(gt: str) -> bool:
    return "|" in gt


def count_allele(gt: str | None, allele_index: int) -> int | None:
    """Count occurrences of an allele index within one genotype.

    Any uncalled component makes the whole count unknown (None); it is never
    reported as a partial count.
    """
    alleles = parse_gt(gt)
    if alleles is None or any(a is None for a in alleles):
        return None
    return sum(1 for a in alleles if a == allele_index)


def recode_gt(gt: str, keep_index: int) -> str:
    """Recode a multi-allelic GT for a biallelic record of one alternate.

    The kept alternate becomes 1, every other alternate becomes 0 and
    uncalled components stay '.'. The original separators are preserved.
    """
    if gt in ("", MISSING):
        return gt

    parts = re.split(r"([/|])", gt)
    recoded = []
    for part in parts:
        if part in ("/", "|", MISSING):
            recoded.append(part)
        elif part.isascii() and part.isdigit():
            recoded.append("1" if int(part) == keep_index else "0")
        else:
            recoded.append(part)
    return "".join(recoded)


def reorder_genotype(genotype: dict[str, str], order: list[str]) -> dict[str, str]:
    """Return a copy of a genotype mapping with keys in the given order.

    Keys of ``order`` that the genotype does not carry are skipped.
    """
    return {key: genotype[key] for key in order if key in genotype}
