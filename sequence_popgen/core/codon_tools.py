"""
Codon-level helpers built on Biopython's genetic code tables.

Codons are 3-character DNA strings. Functions that look at a *codon site*
take the list of codons observed at that site, one per sequence.
"""

from itertools import permutations

from Bio.Data import CodonTable

from sequence_popgen.config import DNA_STATES
from sequence_popgen.core.sequence_utils import is_resolved, is_transition
from sequence_popgen.exceptions import InconsistentContainerError

STOP = "*"


def get_genetic_code(code) -> CodonTable.CodonTable:
    """
    Resolves a genetic code argument into a Biopython DNA codon table.

    Args:
        code: A CodonTable instance, an NCBI table id (e.g. 1 for the standard code,
              2 for vertebrate mitochondrial) or a table name (e.g. "Standard").

    Returns:
        The unambiguous DNA codon table.

    Raises:
        InconsistentContainerError: If no genetic code was given or it is unknown.
    """
    if code is None:
        raise InconsistentContainerError("A genetic code is required for codon-level statistics.")
    if isinstance(code, CodonTable.CodonTable):
        return code
    try:
        if isinstance(code, int):
            return CodonTable.unambiguous_dna_by_id[code]
        return CodonTable.unambiguous_dna_by_name[str(code)]
    except KeyError:
        raise InconsistentContainerError(f"Unknown genetic code: {code!r}") from None


def is_complete_codon(codon: str) -> bool:
    return len(codon) == 3 and all(is_resolved(base) for base in codon)


def translate_codon(codon: str, table: CodonTable.CodonTable) -> str:
    """Returns the one-letter amino acid, or '*' for a stop codon."""
    if codon in table.stop_codons:
        return STOP
    try:
        return table.forward_table[codon]
    except KeyError:
        raise ValueError(f"Invalid codon: {codon}. Cannot translate non-standard codons.") from None


def is_stop(codon: str, table: CodonTable.CodonTable) -> bool:
    return codon in table.stop_codons


def synonymous_positions(codon: str, table: CodonTable.CodonTable, ratio: float = 1.0) -> float:
    """
    Number of synonymous positions of a codon (between 0 and 3).

    For each of the 3 positions the 3 possible substitutions are weighted
    `ratio` for a transition and 1 for a transversion; the synonymous weight is
    divided by the total weight (ratio + 2). Changes to a stop codon are never
    synonymous.

    Args:
        codon: A complete codon (A, C, G, T only), not a stop codon.
        table: The genetic code.
        ratio: Transition/transversion ratio.
    """
    amino_acid = translate_codon(codon, table)
    synonymous = 0.0
    for pos in range(3):
        for base in DNA_STATES:
            if base == codon[pos]:
                continue
            mutant = codon[:pos] + base + codon[pos + 1:]
            if is_stop(mutant, table):
                continue
            if translate_codon(mutant, table) == amino_acid:
                synonymous += ratio if is_transition(codon[pos], base) else 1.0
    return synonymous / (ratio + 2.0)


def mean_synonymous_positions(codons: list[str], table: CodonTable.CodonTable, ratio: float = 1.0) -> float:
    """Mean number of synonymous positions over the codons of a site."""
    if not codons:
        return 0.0
    return sum(synonymous_positions(codon, table, ratio) for codon in codons) / len(codons)


def _pathway_changes(codon1: str, codon2: str, table: CodonTable.CodonTable) -> list[tuple[int, int, bool]]:
    """(synonymous steps, non-synonymous steps, passes through a stop) for every mutational pathway."""
    differing = [pos for pos in range(3) if codon1[pos] != codon2[pos]]
    pathways = []
    for order in permutations(differing):
        current = codon1
        syn, nonsyn, through_stop = 0, 0, False
        for step, pos in enumerate(order):
            following = current[:pos] + codon2[pos] + current[pos + 1:]
            if step < len(order) - 1 and is_stop(following, table):
                through_stop = True
            if translate_codon(current, table) == translate_codon(following, table):
                syn += 1
            else:
                nonsyn += 1
            current = following
        pathways.append((syn, nonsyn, through_stop))
    return pathways


def synonymous_differences(codon1: str, codon2: str, table: CodonTable.CodonTable,
                           minchange: bool = False) -> tuple[float, float]:
    """
    Synonymous and non-synonymous differences between two complete codons.

    When the codons differ at more than one position, the counts are averaged
    over all mutational pathways that avoid intermediate stop codons (Nei &
    Gojobori 1986). With `minchange`, only the pathways with the fewest
    non-synonymous steps are averaged.

    Returns:
        A tuple (synonymous, non_synonymous) summing to the number of differences.
    """
    if codon1 == codon2:
        return 0.0, 0.0
    pathways = _pathway_changes(codon1, codon2, table)
    usable = [p for p in pathways if not p[2]] or pathways
    if minchange:
        fewest = min(p[1] for p in usable)
        usable = [p for p in usable if p[1] == fewest]
    syn = sum(p[0] for p in usable) / len(usable)
    nonsyn = sum(p[1] for p in usable) / len(usable)
    return syn, nonsyn


# --- Codon site classification ---

def is_complete_codon_site(codons: list[str]) -> bool:
    return all(is_complete_codon(codon) for codon in codons)


def has_stop_codon(codons: list[str], table: CodonTable.CodonTable) -> bool:
    return any(is_stop(codon, table) for codon in codons)


def is_polymorphic_codon_site(codons: list[str]) -> bool:
    return len(set(codons)) > 1


def is_mono_site_polymorphic(codons: list[str]) -> bool:
    """True when exactly one of the three positions varies among the codons."""
    if not codons:
        return False
    varying = sum(1 for pos in range(3) if len({codon[pos] for codon in codons}) > 1)
    return varying == 1


def is_synonymous_polymorphic(codons: list[str], table: CodonTable.CodonTable) -> bool:
    """True for a polymorphic codon site whose codons all encode the same amino acid."""
    if not is_polymorphic_codon_site(codons):
        return False
    return len({translate_codon(codon, table) for codon in set(codons)}) == 1
