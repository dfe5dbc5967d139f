"""vcf-alleles: allele normalization, matching and genotype tools for VCF records."""

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, TextIO

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import ConfigValidationError, ToolConfig, load_config
from .fasta import OutOfRangeError, ReferenceFasta
from .models import Convention
from .normalizer import normalize_variant
from .table import (
    TableFormatError,
    exclude_columns,
    filter_rows,
    read_table,
    select_columns,
    split_column_list,
    write_delimited,
)
from .variant import MissingFieldError, Variant
from .vcf_parser import VCFReader

logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    if value:
        print(__version__)
        raise typer.Exit()


app = typer.Typer(
    name="vcf-alleles", help="Normalize, compare and decompose alleles of VCF records"
)
console = Console()


@app.callback()
def main_callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version", callback=version_callback, is_eager=True, help="Show version and exit"
        ),
    ] = None,
) -> None:
    pass


def setup_logging(verbose: bool, quiet: bool, default_level: str = "INFO") -> None:
    """Configure logging based on verbosity flags."""
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, default_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    logging.getLogger("vcf_alleles").setLevel(level)


def _load_tool_config(config_file: Path | None) -> ToolConfig:
    if config_file is None:
        return ToolConfig()
    try:
        return load_config(config_file)
    except (FileNotFoundError, ConfigValidationError) as e:
        console.print(f"[red]Error loading config: {e}[/red]")
        raise typer.Exit(1) from None


def _require_file(path: Path, label: str) -> None:
    if not path.exists():
        console.print(f"[red]Error: {label} not found: {path}[/red]")
        raise typer.Exit(1)


@contextmanager
def _output(path: Path | None):
    if path is None:
        yield sys.stdout
    else:
        with open(path, "w", encoding="utf-8") as f:
            yield f


def _write_header(out: TextIO, reader: VCFReader) -> None:
    for line in reader.header_lines:
        out.write(line + "\n")


def _report_skipped(reader: VCFReader) -> None:
    if reader.errors:
        console.print(f"[yellow]⊘[/yellow] Skipped {len(reader.errors)} malformed record(s)")


ConfigOption = Annotated[
    Path | None, typer.Option("--config", help="TOML configuration file")
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")]
QuietOption = Annotated[bool, typer.Option("--quiet", "-q", help="Only log warnings and errors")]


@app.command()
def alleles(
    vcf_path: Annotated[Path, typer.Argument(help="Path to VCF file")],
    convention: Annotated[
        str | None, typer.Option("--convention", help="native or annovar")
    ] = None,
    reference: Annotated[
        Path | None, typer.Option("--reference", "-r", help="Indexed FASTA for left alignment")
    ] = None,
    left_align: Annotated[
        bool, typer.Option("--left-align", help="Left align records against the reference")
    ] = False,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """List the trimmed alleles of every record."""
    config = _load_tool_config(config_file)
    setup_logging(verbose, quiet, config.log_level)
    _require_file(vcf_path, "VCF file")

    try:
        chosen = Convention.from_string(convention) if convention else config.convention_enum
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None

    reference = reference or config.reference
    if left_align and reference is None:
        console.print("[red]Error: --left-align requires --reference[/red]")
        raise typer.Exit(1)
    if left_align:
        _require_file(reference, "Reference FASTA")

    fasta = ReferenceFasta(reference, config.fasta_cache_size) if left_align else None

    table = Table(title=f"Alleles ({chosen.value})")
    for column in ("Contig", "Pos", "Index", "Type", "Start", "End", "Observed"):
        table.add_column(column)

    try:
        with VCFReader(vcf_path) as reader:
            for variant in reader:
                if fasta is not None:
                    pos, ref, alts = normalize_variant(
                        variant.contig, variant.position, variant.reference,
                        variant.alternates, fasta,
                    )
                    variant = Variant(variant.contig, pos, ref, alts)
                for allele in variant.alleles_for(chosen):
                    table.add_row(
                        variant.contig, str(variant.position), str(allele.index),
                        allele.type.value, str(allele.start), str(allele.end), allele.observed,
                    )
    except OutOfRangeError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None
    finally:
        if fasta is not None:
            fasta.close()

    console.print(table)
    _report_skipped(reader)


@app.command()
def match(
    vcf_path: Annotated[Path, typer.Argument(help="Path to VCF file")],
    contig: Annotated[str, typer.Argument(help="Contig of the query")],
    position: Annotated[int, typer.Argument(help="Annovar start position of the query")],
    observed: Annotated[str, typer.Argument(help="Observed bases, '-' for deletions")],
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """Find records whose alleles are equivalent to an Annovar description."""
    config = _load_tool_config(config_file)
    setup_logging(verbose, quiet, config.log_level)
    _require_file(vcf_path, "VCF file")

    found = 0
    with VCFReader(vcf_path) as reader:
        for variant in reader:
            result = variant.match_annovar(contig, position, observed)
            if not result:
                continue
            found += 1
            note = f" [yellow](ambiguous: {result.count} alleles)[/yellow]" if result.ambiguous else ""
            console.print(f"[green]✓[/green] {variant} allele {result.index}{note}")

    if not found:
        console.print(f"No match for {contig}:{position} {observed}")
    _report_skipped(reader)


@app.command()
def dosage(
    vcf_path: Annotated[Path, typer.Argument(help="Path to VCF file")],
    allele: Annotated[int, typer.Option("--allele", "-a", help="Allele index to count")] = 1,
    sample: Annotated[
        list[str] | None, typer.Option("--sample", "-s", help="Sample(s) to report")
    ] = None,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output TSV")] = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """Write per-sample allele dosage as a TSV ('.' for uncalled genotypes)."""
    config = _load_tool_config(config_file)
    setup_logging(verbose, quiet, config.log_level)
    _require_file(vcf_path, "VCF file")

    with VCFReader(vcf_path) as reader, _output(output) as out:
        names = reader.sample_names
        wanted = sample or names
        unknown = [s for s in wanted if s not in names]
        if unknown:
            console.print(f"[red]Error: Unknown sample(s): {', '.join(unknown)}[/red]")
            raise typer.Exit(1)

        out.write("\t".join(["CHROM", "POS", "REF", "ALT", "ALLELE", *wanted]) + "\n")
        for variant in reader:
            if allele > len(variant.alternates):
                logger.warning("%s has no allele %d, skipping", variant, allele)
                continue
            values = []
            for name in wanted:
                column = names.index(name)
                if column >= len(variant.genotypes):
                    logger.warning("%s has no genotype column for %s", variant, name)
                    values.append(".")
                    continue
                count = variant.dosage(column, allele)
                values.append("." if count is None else str(count))
            out.write("\t".join([
                variant.contig, str(variant.position), variant.reference,
                ",".join(variant.alternates), str(allele), *values,
            ]) + "\n")

    _report_skipped(reader)


@app.command()
def reorder(
    vcf_path: Annotated[Path, typer.Argument(help="Path to VCF file")],
    order: Annotated[
        str | None, typer.Option("--order", help="Comma separated canonical FORMAT order")
    ] = None,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output VCF")] = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """Rewrite per-sample FORMAT fields in a canonical order."""
    config = _load_tool_config(config_file)
    setup_logging(verbose, quiet, config.log_level)
    _require_file(vcf_path, "VCF file")

    canonical = split_column_list(order) or config.canonical_format
    untouched = 0

    with VCFReader(vcf_path) as reader, _output(output) as out:
        _write_header(out, reader)
        for variant in reader:
            try:
                variant.reorder_fields(canonical)
            except MissingFieldError as e:
                untouched += 1
                logger.warning("%s left unchanged: %s", variant, e)
            out.write(variant.to_line() + "\n")

    if untouched:
        console.print(f"[yellow]⊘[/yellow] {untouched} record(s) left in original order")
    _report_skipped(reader)


@app.command()
def decompose(
    vcf_path: Annotated[Path, typer.Argument(help="Path to VCF file")],
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output VCF")] = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """Split multi-allelic records into biallelic records."""
    config = _load_tool_config(config_file)
    setup_logging(verbose, quiet, config.log_level)
    _require_file(vcf_path, "VCF file")

    with VCFReader(vcf_path) as reader, _output(output) as out:
        _write_header(out, reader)
        for variant in reader:
            for record in variant.decompose():
                out.write(record.to_line() + "\n")

    _report_skipped(reader)


@app.command("table")
def show_table(
    file: Annotated[Path | None, typer.Argument(help="File to display, stdin when omitted")] = None,
    tsv: Annotated[bool, typer.Option("--tsv", help="Force TSV format")] = False,
    csv_format: Annotated[bool, typer.Option("--csv", help="Force CSV format")] = False,
    columns: Annotated[
        str | None, typer.Option("--columns", "-c", help="Columns to show")
    ] = None,
    exclude: Annotated[
        str | None, typer.Option("--exclude", "-x", help="Columns to exclude")
    ] = None,
    filters: Annotated[
        list[str] | None,
        typer.Option("--filter", help="Row filter such as 'DP>10' (repeatable)"),
    ] = None,
    rows: Annotated[int | None, typer.Option("-n", help="Only read the first N rows, before filtering")] = None,
    ofmt: Annotated[str, typer.Option("--ofmt", help="Output format: txt, csv or tsv")] = "txt",
) -> None:
    """Display a TSV or CSV file as a table."""
    if ofmt not in ("txt", "csv", "tsv"):
        console.print(f"[red]Error: Unknown output format: {ofmt}[/red]")
        raise typer.Exit(1)
    if file is not None:
        _require_file(file, "File")

    force = "tsv" if tsv else "csv" if csv_format else None
    try:
        data = read_table(file, stream=sys.stdin, force=force)
        if rows is not None:
            data = data[:rows]
        if filters:
            data = filter_rows(data, filters)
    except TableFormatError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None

    if columns:
        data = select_columns(data, split_column_list(columns))
    if exclude:
        data = exclude_columns(data, split_column_list(exclude))

    if ofmt == "csv":
        write_delimited(data, sys.stdout, ",")
    elif ofmt == "tsv":
        write_delimited(data, sys.stdout, "\t")
    elif data:
        table = Table()
        for column in data[0]:
            table.add_column(column)
        for row in data:
            table.add_row(*(str(v) for v in row.values()))
        console.print(table)


if __name__ == "__main__":
    app()
