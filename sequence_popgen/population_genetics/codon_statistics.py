"""
Codon-level polymorphism statistics for coding alignments.

Sequences are read in frame from the first column, three columns per codon
site. Only complete codon sites (no gap or unresolved symbol in any sequence)
enter the synonymous/non-synonymous statistics. `stopflag=True` additionally
skips codon sites where any sequence carries a stop codon.
"""

import logging
from itertools import combinations

from sequence_popgen.config import DEFAULT_GENETIC_CODE
from sequence_popgen.core import codon_tools
from sequence_popgen.core.containers import as_container

logger = logging.getLogger(__name__)


def _codon_sites(psc, genetic_code, complete_only: bool = True, stopflag: bool = True):
    """Yields the codon lists of the sites retained under the completeness/stop filters."""
    table = codon_tools.get_genetic_code(genetic_code)
    psc = as_container(psc)
    for codon_index, codons in psc.iter_codon_sites():
        if complete_only and not codon_tools.is_complete_codon_site(codons):
            continue
        if stopflag and codon_tools.has_stop_codon(codons, table):
            logger.debug("Codon site %d holds a stop codon; skipped.", codon_index + 1)
            continue
        yield codons


def stop_codon_site_number(psc, genetic_code=DEFAULT_GENETIC_CODE) -> int:
    """
    Number of codon sites where at least one sequence carries a stop codon.

    Args:
        psc: A PolymorphismSequenceContainer or anything `as_container` accepts.
        genetic_code: A Bio.Data.CodonTable table, NCBI table id or table name.
                      Defaults to SEQUENCE_POPGEN_GENETIC_CODE (standard code).

    Raises:
        InconsistentContainerError: If the genetic code is None or unknown, or the alignment
                                    length is not a multiple of 3.
    """
    table = codon_tools.get_genetic_code(genetic_code)
    return sum(1 for codons in _codon_sites(psc, table, complete_only=False, stopflag=False)
               if codon_tools.has_stop_codon(codons, table))


def mono_site_polymorphic_codon_number(psc, genetic_code=DEFAULT_GENETIC_CODE, stopflag: bool = True) -> int:
    """Number of complete codon sites where exactly one of the three positions is polymorphic."""
    return sum(1 for codons in _codon_sites(psc, genetic_code, stopflag=stopflag)
               if codon_tools.is_mono_site_polymorphic(codons))


def synonymous_polymorphic_codon_number(psc, genetic_code=DEFAULT_GENETIC_CODE, stopflag: bool = True) -> int:
    """Number of polymorphic complete codon sites whose codons all encode the same amino acid."""
    table = codon_tools.get_genetic_code(genetic_code)
    return sum(1 for codons in _codon_sites(psc, table, stopflag=stopflag)
               if codon_tools.is_synonymous_polymorphic(codons, table))


def non_synonymous_polymorphic_codon_number(psc, genetic_code=DEFAULT_GENETIC_CODE, stopflag: bool = True) -> int:
    """Number of polymorphic complete codon sites where at least two codons encode different amino acids."""
    table = codon_tools.get_genetic_code(genetic_code)
    return sum(1 for codons in _codon_sites(psc, table, stopflag=stopflag)
               if codon_tools.is_polymorphic_codon_site(codons)
               and not codon_tools.is_synonymous_polymorphic(codons, table))


def _site_pi(codons: list[str], table, minchange: bool) -> tuple[float, float]:
    """Mean synonymous and non-synonymous differences over all pairs of sequences at a codon site."""
    n = len(codons)
    if n < 2:
        return 0.0, 0.0
    syn, nonsyn = 0.0, 0.0
    for codon1, codon2 in combinations(codons, 2):
        if codon1 == codon2:
            continue
        s, ns = codon_tools.synonymous_differences(codon1, codon2, table, minchange)
        syn += s
        nonsyn += ns
    pairs = n * (n - 1) / 2.0
    return syn / pairs, nonsyn / pairs


def pi_synonymous(psc, genetic_code=DEFAULT_GENETIC_CODE, stopflag: bool = True, minchange: bool = False) -> float:
    """
    Synonymous nucleotide diversity, summed over codon sites.

    At each codon site the synonymous differences between every pair of
    sequences are averaged; codons differing at several positions are resolved
    over the mutational pathways avoiding stop codons (or, with `minchange`,
    over those with the fewest non-synonymous steps). Gaps are excluded.
    """
    table = codon_tools.get_genetic_code(genetic_code)
    return sum((_site_pi(codons, table, minchange)[0]
                for codons in _codon_sites(psc, table, stopflag=stopflag)
                if codon_tools.is_polymorphic_codon_site(codons)), 0.0)


def pi_non_synonymous(psc, genetic_code=DEFAULT_GENETIC_CODE, stopflag: bool = True, minchange: bool = False) -> float:
    """Non-synonymous nucleotide diversity, summed over codon sites (see pi_synonymous)."""
    table = codon_tools.get_genetic_code(genetic_code)
    return sum((_site_pi(codons, table, minchange)[1]
                for codons in _codon_sites(psc, table, stopflag=stopflag)
                if codon_tools.is_polymorphic_codon_site(codons)), 0.0)


def mean_synonymous_sites_number(psc, genetic_code=DEFAULT_GENETIC_CODE, ratio: float = 1.0, stopflag: bool = True) -> float:
    """
    Number of synonymous sites in the alignment.

    Each codon site contributes the mean, over sequences, of the number of
    synonymous positions of its codon. A position is x% synonymous when x% of
    its possible substitutions are; transitions are weighted by `ratio`
    (the transition/transversion ratio, 1 when both are equally likely).
    """
    table = codon_tools.get_genetic_code(genetic_code)
    return sum((codon_tools.mean_synonymous_positions(codons, table, ratio)
                for codons in _codon_sites(psc, table, stopflag=stopflag)), 0.0)


def mean_non_synonymous_sites_number(psc, genetic_code=DEFAULT_GENETIC_CODE, ratio: float = 1.0, stopflag: bool = True) -> float:
    """Number of non-synonymous sites in the alignment (3 per codon site minus the synonymous ones)."""
    table = codon_tools.get_genetic_code(genetic_code)
    return sum((3.0 - codon_tools.mean_synonymous_positions(codons, table, ratio)
                for codons in _codon_sites(psc, table, stopflag=stopflag)), 0.0)
