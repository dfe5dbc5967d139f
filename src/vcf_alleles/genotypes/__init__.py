"""Genotype call handling."""

from .calls import (
    GT_KEY,
    count_allele,
    is_phased,
    parse_gt,
    recode_gt,
    reorder_genotype,
)

__all__ = [
    "GT_KEY",
    "count_allele",
    "is_phased",
    "parse_gt",
    "recode_gt",
    "reorder_genotype",
]
