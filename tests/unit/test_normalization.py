"""Tests for allele trimming under the native and Annovar conventions."""

import pytest
from vcf_alleles.models import AlleleType, Convention
from vcf_alleles.normalizer import normalize_variant, trim_allele

NATIVE = Convention.NATIVE
ANNOVAR = Convention.ANNOVAR


class TestNativeTrimming:
    """Test VCF style, left-anchored trimming."""

    @pytest.mark.parametrize(
        "pos,ref,alt,exp_type,exp_start,exp_end,exp_ins,exp_del",
        [
            (10, "A", "G", AlleleType.SNP, 10, 10, "G", "A"),
            (20, "CAG", "C", AlleleType.DELETION, 21, 22, "", "AG"),
            (100, "A", "AT", AlleleType.INSERTION, 100, 100, "T", ""),
            (100, "ACG", "ACGT", AlleleType.INSERTION, 102, 102, "T", ""),
            (10, "GATC", "GTTC", AlleleType.SNP, 11, 11, "T", "A"),
            (10, "ACGT", "ACAT", AlleleType.SNP, 12, 12, "A", "G"),
            (10, "ACGT", "AGCT", AlleleType.COMPLEX, 11, 12, "GC", "CG"),
            (10, "AC", "AGT", AlleleType.COMPLEX, 11, 11, "GT", "C"),
        ],
    )
    def test_native_cases(self, pos, ref, alt, exp_type, exp_start, exp_end, exp_ins, exp_del):
        allele = trim_allele(pos, ref, alt, convention=NATIVE)

        assert allele.type is exp_type
        assert (allele.start, allele.end) == (exp_start, exp_end)
        assert allele.inserted_bases == exp_ins
        assert allele.deleted_bases == exp_del

    def test_suffix_trim_keeps_anchor_base(self):
        """Repeat expansions keep the first base as the anchor."""
        allele = trim_allele(40503520, "ACTGCTG", "ACTGCTGCTGCTGCTG", convention=NATIVE)

        assert allele.type is AlleleType.INSERTION
        assert allele.start == allele.end == 40503520
        assert allele.inserted_bases == "CTGCTGCTG"

    def test_multi_base_deletion_span(self):
        allele = trim_allele(40503520, "ACTGCTG", "A", convention=NATIVE)

        assert allele.type is AlleleType.DELETION
        assert (allele.start, allele.end) == (40503521, 40503526)
        assert allele.deleted_bases == "CTGCTG"
        assert allele.observed == "-"

    def test_case_insensitive(self):
        allele = trim_allele(20, "cag", "C", convention=NATIVE)

        assert allele.type is AlleleType.DELETION
        assert allele.deleted_bases == "AG"


class TestAnnovarTrimming:
    """Test convert2annovar style trimming."""

    @pytest.mark.parametrize(
        "pos,ref,alt,exp_type,exp_start,exp_end,exp_obs",
        [
            (10, "A", "G", AlleleType.SNP, 10, 10, "G"),
            (20, "CAG", "C", AlleleType.DELETION, 21, 22, "-"),
            (100, "A", "AT", AlleleType.INSERTION, 100, 100, "T"),
            (40503520, "ACTGCTG", "ACTGCTGCTGCTGCTG", AlleleType.INSERTION,
             40503526, 40503526, "CTGCTGCTG"),
            (40503520, "ACTGCTG", "A", AlleleType.DELETION, 40503521, 40503526, "-"),
            (10, "ACGT", "ACAT", AlleleType.SNP, 12, 12, "A"),
            (10, "ACGT", "AGCT", AlleleType.COMPLEX, 11, 12, "GC"),
            (100, "T", "AT", AlleleType.INSERTION, 99, 99, "A"),
        ],
    )
    def test_annovar_cases(self, pos, ref, alt, exp_type, exp_start, exp_end, exp_obs):
        allele = trim_allele(pos, ref, alt, convention=ANNOVAR)

        assert allele.type is exp_type
        assert (allele.start, allele.end) == (exp_start, exp_end)
        assert allele.observed == exp_obs
        assert allele.convention is ANNOVAR

    def test_deletion_keeps_deleted_bases(self):
        allele = trim_allele(20, "CAG", "C", convention=ANNOVAR)
        assert allele.deleted_bases == "AG"
        assert allele.length == 2


class TestDegenerateAlleles:
    """An alternate equal to the reference is flagged, not rejected."""

    @pytest.mark.parametrize("convention", [NATIVE, ANNOVAR])
    def test_identical_alleles(self, convention):
        allele = trim_allele(50, "ACG", "ACG", index=2, convention=convention)

        assert allele.degenerate is True
        assert allele.type is AlleleType.SNP
        assert allele.start == allele.end == 50
        assert allele.index == 2

    def test_identical_ignoring_case(self):
        assert trim_allele(50, "acg", "ACG").degenerate is True

    def test_real_allele_not_degenerate(self):
        assert trim_allele(50, "A", "G").degenerate is False


class TestVTNormalization:
    """Test vt-style left-alignment and parsimony."""

    @pytest.mark.parametrize(
        "pos,ref,alt,exp_pos,exp_ref,exp_alt",
        [
            (10, "A", "G", 10, "A", "G"),
            (10, "GATC", "GTTC", 11, "A", "T"),
            (10, "ATCG", "TTCG", 10, "A", "T"),
            (10, "ACGT", "ACAT", 12, "G", "A"),
        ],
    )
    def test_normalization_cases(self, pos, ref, alt, exp_pos, exp_ref, exp_alt):
        result_pos, result_ref, result_alts = normalize_variant("chr1", pos, ref, [alt])

        assert result_pos == exp_pos
        assert result_ref == exp_ref
        assert result_alts == [exp_alt]

    def test_left_align_deletion_in_repeat(self, repeat_provider):
        """Deleting CA from a CACACA repeat moves to the leftmost copy."""
        pos, ref, alts = normalize_variant("chr1", 7, "ACA", ["A"], repeat_provider)

        assert (pos, ref, alts) == (3, "TCA", ["T"])
        assert ("chr1", 6, 6) in repeat_provider.calls

    def test_left_align_insertion_in_repeat(self, repeat_provider):
        pos, ref, alts = normalize_variant("chr1", 9, "A", ["ACA"], repeat_provider)

        assert (pos, ref, alts) == (3, "T", ["TCA"])

    def test_without_reference_stops_at_anchor(self):
        pos, ref, alts = normalize_variant("chr1", 7, "ACA", ["A"])

        assert (pos, ref, alts) == (7, "ACA", ["A"])

    def test_empty_input(self):
        """Empty REF or ALT returns unchanged."""
        assert normalize_variant("chr1", 100, "", ["G"]) == (100, "", ["G"])
        assert normalize_variant("chr1", 100, "A", []) == (100, "A", [])
