"""Sample metadata and pedigree loading."""

from .pedigree import Individual, Pedigree, PedigreeError, Pedigrees
from .sample_info import (
    Consanguinity,
    DecodeError,
    Ethnicity,
    SampleInfo,
    SampleInfoError,
    SampleType,
    Sex,
    decode_consanguinity,
    decode_ethnicity,
    decode_sample_type,
    decode_sex,
    parse_sample_info,
    read_sample_info,
)

__all__ = [
    "Consanguinity",
    "DecodeError",
    "Ethnicity",
    "Individual",
    "Pedigree",
    "PedigreeError",
    "Pedigrees",
    "SampleInfo",
    "SampleInfoError",
    "SampleType",
    "Sex",
    "decode_consanguinity",
    "decode_ethnicity",
    "decode_sample_type",
    "decode_sex",
    "parse_sample_info",
    "read_sample_info",
]
