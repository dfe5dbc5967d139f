"""Property-based tests for allele trimming and equivalence."""

from hypothesis import given, settings
from hypothesis import strategies as st

from vcf_alleles.models import Convention
from vcf_alleles.normalizer import trim_allele
from vcf_alleles.variant import Variant

bases = st.text(alphabet="ACGTacgt", min_size=1, max_size=8)
positions = st.integers(min_value=1, max_value=10_000_000)
conventions = st.sampled_from([Convention.NATIVE, Convention.ANNOVAR])


class TestTrimmingProperties:
    """Invariants of a single trimmed allele."""

    @given(pos=positions, ref=bases, alt=bases, convention=conventions)
    @settings(max_examples=100)
    def test_start_not_after_end(self, pos, ref, alt, convention):
        allele = trim_allele(pos, ref, alt, convention=convention)
        assert allele.start <= allele.end

    @given(pos=positions, ref=bases, alt=bases, convention=conventions)
    @settings(max_examples=100)
    def test_length_change_preserved(self, pos, ref, alt, convention):
        allele = trim_allele(pos, ref, alt, convention=convention)
        assert len(alt) - len(ref) == len(allele.inserted_bases) - len(allele.deleted_bases)

    @given(pos=positions, ref=bases, alt=bases, convention=conventions)
    @settings(max_examples=100)
    def test_trimming_is_deterministic(self, pos, ref, alt, convention):
        assert trim_allele(pos, ref, alt, convention=convention) == trim_allele(
            pos, ref, alt, convention=convention
        )

    @given(pos=positions, ref=bases)
    @settings(max_examples=50)
    def test_identical_alleles_degenerate(self, pos, ref):
        allele = trim_allele(pos, ref, ref.swapcase())
        assert allele.degenerate is True
        assert allele.start == allele.end == pos


class TestEquivalenceProperties:
    """Every non-degenerate allele is found again from either of its renderings."""

    @given(
        pos=positions,
        ref=bases,
        alts=st.lists(bases, min_size=1, max_size=4),
        convention=conventions,
    )
    @settings(max_examples=100)
    def test_self_match(self, pos, ref, alts, convention):
        variant = Variant(contig="chr1", position=pos, reference=ref, alternates=alts)

        for allele in variant.alleles_for(convention):
            if allele.degenerate:
                continue
            found = variant.equals_annovar("chr1", allele.start, allele.observed)
            assert found is not None
            if convention is Convention.ANNOVAR:
                assert found <= allele.index

    @given(pos=positions, ref=bases, alts=st.lists(bases, min_size=1, max_size=4))
    @settings(max_examples=50)
    def test_match_count_covers_index(self, pos, ref, alts):
        variant = Variant(contig="chr1", position=pos, reference=ref, alternates=alts)

        for allele in variant.annovar_alleles:
            if allele.degenerate:
                continue
            result = variant.match_annovar("chr1", allele.start, allele.observed)
            assert result.count >= 1
            assert result.ambiguous == (result.count > 1)
