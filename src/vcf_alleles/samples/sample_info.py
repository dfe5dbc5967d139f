"""Sample metadata sheets in the MGHA sample information format.

Each row is tab separated with a fixed column order (``COLUMNS``). Comment
lines, the header line and blank lines are ignored. Coded columns (sex,
sample type, consanguinity, ethnicity) are decoded into enums by the
``decode_*`` functions, which raise DecodeError on unknown codes.
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

COLUMNS = [
    "Sample_ID", "Batch", "Cohort", "Fastq_Files", "Prioritised_Genes", "Sex",
    "Sample_Type", "Consanguinity", "Variants_File", "Pedigree_File", "Ethnicity",
    "VariantCall_Group", "DNA_Concentration", "DNA_Quantity", "DNA_Quality",
    "DNA_Date", "Capture_Date", "Sequencing_Date", "Mean_Coverage",
    "Duplicate_Percentage", "Machine_ID", "Hospital_Centre", "Sequencing_Contact",
    "Pipeline_Contact",
]

FILE_TYPE_ENDINGS = {
    "bam": "bam",
    "fastq": "fastq.gz",
    "coverage": "exoncoverage.txt",
    "vcf": "vcf",
}

# Spreadsheet exports of the legacy sheet leave a non-breaking space (byte 0xA0)
# inside gene category codes.
LEGACY_EXCEL_ARTIFACT = "\xa0"


class DecodeError(ValueError):
    """Raised when a coded metadata value is not recognised."""

    pass


class SampleInfoError(ValueError):
    """Raised when a sample row cannot be parsed."""

    pass


class Sex(Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class SampleType(Enum):
    NORMAL = "normal"
    TUMOR = "tumor"


class Consanguinity(Enum):
    NOT_CONSANGUINEOUS = "not_consanguineous"
    CONSANGUINEOUS = "consanguineous"
    SUSPECTED = "suspected"
    UNKNOWN = "unknown"


class Ethnicity(Enum):
    UNKNOWN = "unknown"
    EUROPEAN = "european"
    AFRICAN = "african"


def _decode(value: str | None, codes: dict[str, Enum], default: Enum, label: str):
    if value is None or not value.strip():
        return default
    try:
        return codes[value.strip()]
    except KeyError:
        raise DecodeError(f"Bad {label} value [{value}] specified") from None


def decode_sex(value: str | None) -> Sex:
    return _decode(value, {"1": Sex.MALE, "2": Sex.FEMALE}, Sex.FEMALE, "sex")


def decode_sample_type(value: str | None) -> SampleType:
    return _decode(
        value, {"1": SampleType.NORMAL, "2": SampleType.TUMOR}, SampleType.NORMAL, "sample type"
    )


def decode_consanguinity(value: str | None) -> Consanguinity:
    codes = {
        "0": Consanguinity.NOT_CONSANGUINEOUS,
        "1": Consanguinity.CONSANGUINEOUS,
        "2": Consanguinity.SUSPECTED,
        "3": Consanguinity.UNKNOWN,
        "8": Consanguinity.UNKNOWN,
    }
    return _decode(value, codes, Consanguinity.NOT_CONSANGUINEOUS, "consanguinity")


def decode_ethnicity(value: str | None) -> Ethnicity:
    codes = {"0": Ethnicity.UNKNOWN, "1": Ethnicity.EUROPEAN, "2": Ethnicity.AFRICAN}
    return _decode(value, codes, Ethnicity.UNKNOWN, "ethnicity")


def parse_date(value: str | None) -> date | None:
    """Parse a yyyymmdd date."""
    if not value:
        return None
    return datetime.strptime(value, "%Y%m%d").date()


def _split_list(value: str | None) -> list[str]:
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]


def _to_float(value: str | None) -> float | None:
    if value is None or not value.strip():
        return None
    return float(value)


def parse_gene_categories(value: str | None, legacy_excel: bool = False) -> dict[str, int]:
    """Invert a 'category:GENE,GENE category:GENE' list to gene -> category.

    Args:
        value: Raw Prioritised_Genes cell
        legacy_excel: Strip the stray non-breaking space that the legacy
            spreadsheet export leaves in category codes
    """
    categories: dict[str, int] = {}
    if not value or not value.strip():
        return categories

    for group in value.split(" "):
        if not group:
            continue
        code, sep, genes = group.partition(":")
        if not sep:
            raise DecodeError(f"Bad gene category entry [{group}]")
        if legacy_excel:
            code = code.replace(LEGACY_EXCEL_ARTIFACT, "")
        code = code.strip(" \t")
        if not (code.isascii() and code.isdigit()):
            raise DecodeError(f"Bad gene category code [{code}]")
        category = int(code)
        for gene in _split_list(genes):
            categories[gene] = category
    return categories


@dataclass
class SampleInfo:
    """Metadata about a sample."""

    sample: str
    batch: str | None = None
    target: str | None = None
    pedigree: str | None = None
    sex: Sex = Sex.FEMALE
    sample_type: SampleType = SampleType.NORMAL
    consanguinity: Consanguinity = Consanguinity.NOT_CONSANGUINEOUS
    ethnicity: Ethnicity = Ethnicity.UNKNOWN
    gene_categories: dict[str, int] = field(default_factory=dict)
    files: dict[str, list[str]] = field(default_factory=dict)
    dna_concentration_ng: float | None = None
    dna_quality: float | None = None
    dna_quantity: float | None = None
    mean_coverage: float | None = None
    dna_dates: list[date] = field(default_factory=list)
    capture_dates: list[date] = field(default_factory=list)
    sequencing_dates: list[date] = field(default_factory=list)
    machine_ids: list[str] = field(default_factory=list)
    institution: str | None = None
    sequencing_contact: str | None = None
    analysis_contact: str | None = None

    def index_file_types(self) -> None:
        """Group the sample's files by type using their file endings."""
        all_files = self.files.get("all", [])
        for file_type, ending in FILE_TYPE_ENDINGS.items():
            matching = [f for f in all_files if f.endswith(ending)]
            if matching:
                self.files[file_type] = matching

    def to_tsv(self) -> str:
        files = [f for key, values in self.files.items() if key != "all" for f in values]
        by_category: dict[int, list[str]] = {}
        for gene, category in self.gene_categories.items():
            by_category.setdefault(category, []).append(gene)
        genes = " ".join(f"{c}:{','.join(g)}" for c, g in sorted(by_category.items()))
        return "\t".join([self.sample, self.target or "", ",".join(files), genes, self.sex.name])

    def __str__(self) -> str:
        return f"{self.sample}({self.sex.name})"


def _sample_from_row(fields: dict[str, str | None], legacy_excel: bool) -> SampleInfo:
    info = SampleInfo(
        sample=fields["Sample_ID"],
        batch=fields.get("Batch"),
        target=fields.get("Cohort"),
        pedigree=fields.get("Pedigree_File"),
        sex=decode_sex(fields.get("Sex")),
        sample_type=decode_sample_type(fields.get("Sample_Type")),
        consanguinity=decode_consanguinity(fields.get("Consanguinity")),
        ethnicity=decode_ethnicity(fields.get("Ethnicity")),
        gene_categories=parse_gene_categories(fields.get("Prioritised_Genes"), legacy_excel),
        dna_concentration_ng=_to_float(fields.get("DNA_Concentration")),
        dna_quality=_to_float(fields.get("DNA_Quality")),
        dna_quantity=_to_float(fields.get("DNA_Quantity")),
        mean_coverage=_to_float(fields.get("Mean_Coverage")),
        dna_dates=[parse_date(d) for d in _split_list(fields.get("DNA_Date"))],
        capture_dates=[parse_date(d) for d in _split_list(fields.get("Capture_Date"))],
        sequencing_dates=[parse_date(d) for d in _split_list(fields.get("Sequencing_Date"))],
        machine_ids=_split_list(fields.get("Machine_ID")),
        institution=fields.get("Hospital_Centre"),
        sequencing_contact=fields.get("Sequencing_Contact"),
        analysis_contact=fields.get("Pipeline_Contact"),
    )
    info.files["all"] = _split_list(fields.get("Fastq_Files"))
    info.index_file_types()
    return info


def _is_data_line(line: str) -> bool:
    stripped = line.strip()
    return bool(stripped) and not stripped.startswith("#") and not stripped.lower().startswith("sample_id")


def read_sample_info(text: str, legacy_excel: bool = False) -> dict[str, SampleInfo]:
    """Parse sample sheet text into SampleInfo objects keyed by sample name."""
    lines = [line for line in text.splitlines() if _is_data_line(line)]
    reader = csv.DictReader(io.StringIO("\n".join(lines)), fieldnames=COLUMNS, delimiter="\t")

    samples: dict[str, SampleInfo] = {}
    for line_count, fields in enumerate(reader, start=1):
        logger.debug("Found sample %s", fields["Sample_ID"])
        try:
            info = _sample_from_row(fields, legacy_excel)
        except ValueError as e:
            raise SampleInfoError(
                f"Error parsing meta data for sample {fields['Sample_ID']} on line {line_count}: {e}"
            ) from e
        samples[info.sample] = info
    return samples


def parse_sample_info(path: Path | str, legacy_excel: bool = False) -> dict[str, SampleInfo]:
    """Parse a sample sheet file into SampleInfo objects keyed by sample name."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Sample sheet not found: {path}")
    samples = read_sample_info(path.read_text(encoding="utf-8"), legacy_excel=legacy_excel)
    logger.info("Loaded %d samples from %s", len(samples), path)
    return samples
