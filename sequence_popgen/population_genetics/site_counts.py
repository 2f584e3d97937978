"""
Site-level polymorphism counts over an aligned DNA sample.

`include_gaps` selects the gap policy used by a call: when False (the
default) gaps, N and other unresolved symbols are dropped from every site
before states are counted; when True every distinct symbol is a state.
"""

import logging
from collections import Counter

import numpy as np

from sequence_popgen.core.containers import as_container
from sequence_popgen.core.sequence_utils import STRONG_BASES, WEAK_BASES, is_resolved, is_transition, is_transversion
from sequence_popgen.exceptions import UndefinedStatisticError

logger = logging.getLogger(__name__)


def site_states(site, include_gaps: bool = False) -> Counter:
    """
    Counts the states observed at one site.

    Args:
        site: The symbols of the site, one per sequence (any iterable of characters).
        include_gaps: Whether gaps and unresolved symbols count as states.

    Returns:
        A Counter mapping each state to the number of sequences carrying it.
    """
    return Counter(str(s) for s in site if include_gaps or is_resolved(str(s)))


def mutation_count(site, include_gaps: bool = False) -> int:
    """Number of distinct states minus one (0 when no state is observed)."""
    return max(len(site_states(site, include_gaps)) - 1, 0)


def singleton_count(site, include_gaps: bool = False) -> int:
    """Number of distinct states observed in exactly one sequence."""
    return sum(1 for count in site_states(site, include_gaps).values() if count == 1)


def is_polymorphic(site, include_gaps: bool = False) -> bool:
    return len(site_states(site, include_gaps)) >= 2


def is_parsimony_informative(site, include_gaps: bool = False) -> bool:
    """At least two states, each observed at least twice."""
    return sum(1 for count in site_states(site, include_gaps).values() if count >= 2) >= 2


def is_triplet(site, include_gaps: bool = False) -> bool:
    return len(site_states(site, include_gaps)) >= 3


def _count_sites(psc, predicate, include_gaps: bool) -> int:
    psc = as_container(psc)
    return sum(1 for _, site in psc.iter_sites() if predicate(site, include_gaps))


def polymorphic_site_number(psc, include_gaps: bool = False) -> int:
    """
    Computes the number of polymorphic (segregating) sites, S.

    Args:
        psc: A PolymorphismSequenceContainer or anything `as_container` accepts.
        include_gaps: Whether gaps count as a state. Counting them can only add states,
                      so the result with include_gaps=True is never smaller.

    Raises:
        InconsistentContainerError: If the sequences have different lengths.
    """
    return _count_sites(psc, is_polymorphic, include_gaps)


def parsimony_informative_site_number(psc, include_gaps: bool = False) -> int:
    return _count_sites(psc, is_parsimony_informative, include_gaps)


def triplet_number(psc, include_gaps: bool = False) -> int:
    """Number of sites showing at least three distinct states."""
    return _count_sites(psc, is_triplet, include_gaps)


def count_singleton(psc, include_gaps: bool = False) -> int:
    """Total number of singleton states over all sites."""
    psc = as_container(psc)
    return sum(singleton_count(site, include_gaps) for _, site in psc.iter_sites())


def total_number_mutations(psc, include_gaps: bool = False) -> int:
    """
    Counts the total number of mutations, eta, under the infinite-sites model.

    A site with k states contributes k - 1 mutations.
    """
    psc = as_container(psc)
    return sum(mutation_count(site, include_gaps) for _, site in psc.iter_sites())


def gc_content(psc) -> float:
    """
    Mean G+C content of the alignment over all resolved nucleotides.

    Raises:
        UndefinedStatisticError: If the alignment holds no resolved nucleotide.
    """
    psc = as_container(psc)
    values, counts = np.unique(psc.matrix, return_counts=True)
    tally = dict(zip(values.tolist(), counts.tolist()))
    resolved = sum(tally.get(base, 0) for base in "ACGT")
    if resolved == 0:
        raise UndefinedStatisticError("GC content is undefined for an alignment without resolved nucleotides.")
    return (tally.get("G", 0) + tally.get("C", 0)) / resolved


def gc_polymorphism(psc) -> tuple[int, int]:
    """
    Counts GC alleles at polymorphic sites mixing strong (G/C) and weak (A/T) states.

    Sites that are only G vs C or only A vs T are not informative about GC
    polymorphism and are skipped, as are sites holding gaps.

    Returns:
        A tuple (number of G/C alleles, total number of alleles) over the retained sites.
    """
    psc = as_container(psc)
    gc_alleles, total_alleles = 0, 0
    for _, site in psc.iter_sites(complete_only=True):
        states = site_states(site)
        if len(states) < 2:
            continue
        if set(states) <= STRONG_BASES or set(states) <= WEAK_BASES:
            continue
        gc_alleles += sum(count for state, count in states.items() if state in STRONG_BASES)
        total_alleles += sum(states.values())
    return gc_alleles, total_alleles


# --- Haplotypes (Depaulis & Veuille 1998) ---

def _haplotypes(psc, include_gaps: bool) -> Counter:
    psc = as_container(psc)
    matrix = psc.matrix
    if not include_gaps and matrix.size:
        complete = psc.resolved_mask().all(axis=0)
        logger.debug("Ignoring %d incomplete columns when comparing haplotypes.", int((~complete).sum()))
        matrix = matrix[:, complete]
    return Counter("".join(row) for row in matrix)


def number_of_haplotypes(psc, include_gaps: bool = False) -> int:
    """
    Number of distinct haplotypes in the sample (Depaulis & Veuille K).

    With include_gaps=False, columns holding a gap or unresolved symbol in any
    sequence are ignored before haplotypes are compared.
    """
    return len(_haplotypes(psc, include_gaps))


def haplotype_diversity(psc, include_gaps: bool = False) -> float:
    """
    Haplotype diversity, H = n / (n - 1) * (1 - sum(f_i^2)) (Depaulis & Veuille 1998).

    Raises:
        UndefinedStatisticError: If fewer than two sequences are available.
    """
    haplotypes = _haplotypes(psc, include_gaps)
    n = sum(haplotypes.values())
    if n < 2:
        raise UndefinedStatisticError("Haplotype diversity requires at least two sequences.")
    homozygosity = sum((count / n) ** 2 for count in haplotypes.values())
    return n / (n - 1) * (1.0 - homozygosity)


# --- Transitions / transversions ---

def _biallelic_complete_sites(psc):
    psc = as_container(psc)
    for _, site in psc.iter_sites(complete_only=True):
        states = site_states(site)
        if len(states) == 2:
            yield tuple(states)


def number_of_transitions(psc) -> int:
    """Number of complete biallelic sites whose two states differ by a transition."""
    return sum(1 for a, b in _biallelic_complete_sites(psc) if is_transition(a, b))


def number_of_transversions(psc) -> int:
    """Number of complete biallelic sites whose two states differ by a transversion."""
    return sum(1 for a, b in _biallelic_complete_sites(psc) if is_transversion(a, b))


def transitions_transversions_ratio(psc) -> float:
    """
    Ratio of transitions to transversions over complete biallelic sites.

    Raises:
        UndefinedStatisticError: If no transversion is observed.
    """
    psc = as_container(psc)
    transversions = number_of_transversions(psc)
    if transversions == 0:
        raise UndefinedStatisticError("Transition/transversion ratio is undefined without transversions.")
    return number_of_transitions(psc) / transversions
