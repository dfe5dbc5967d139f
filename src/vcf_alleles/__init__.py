"""Allele normalization, equivalence and genotype tools for VCF records."""

from .models import Allele, AlleleMatch, AlleleType, Convention
from .normalizer import normalize_variant, trim_allele
from .variant import MissingFieldError, Variant
from .vcf_parser import MalformedRecord, VCFReader, parse_variant_line

__version__ = "0.1.0"

__all__ = [
    "Allele",
    "AlleleMatch",
    "AlleleType",
    "Convention",
    "MalformedRecord",
    "MissingFieldError",
    "VCFReader",
    "Variant",
    "normalize_variant",
    "parse_variant_line",
    "trim_allele",
]
