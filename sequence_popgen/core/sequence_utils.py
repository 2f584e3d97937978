import re

from sequence_popgen.config import DNA_STATES, GAP_CHARACTER

PURINES = frozenset("AG")
PYRIMIDINES = frozenset("CT")
STRONG_BASES = frozenset("GC")  # G/C
WEAK_BASES = frozenset("AT")    # A/T

_RESOLVED = frozenset(DNA_STATES)
_VALID_SYMBOLS = re.compile(r"[ACGTURYKMSWBDHVNX?.\-]*")


def normalize_sequence(sequence: str) -> str:
    """
    Upper-cases an aligned DNA sequence and maps RNA/alternative symbols onto the DNA alphabet.

    'U' becomes 'T' and '.' (a common "same as above"/gap marker) becomes the gap character.

    Args:
        sequence: The aligned sequence.

    Returns:
        The normalized sequence.

    Raises:
        ValueError: If the sequence contains symbols outside the IUPAC nucleotide alphabet.
    """
    sequence = str(sequence).upper()
    if not _VALID_SYMBOLS.fullmatch(sequence):
        raise ValueError("Invalid characters in DNA sequence. Only IUPAC nucleotide codes, gaps and '?' are allowed.")
    return sequence.replace("U", "T").replace(".", GAP_CHARACTER)


def is_resolved(symbol: str) -> bool:
    """True for the four nucleotides; gaps, N, '?' and ambiguity codes are unresolved."""
    return symbol in _RESOLVED


def is_gap(symbol: str) -> bool:
    """True for the alignment gap only; N and '?' are missing data, not indels."""
    return symbol == GAP_CHARACTER


def is_transition(base1: str, base2: str) -> bool:
    """
    Tells whether a substitution between two different nucleotides is a transition.

    Transitions are purine <-> purine (A/G) or pyrimidine <-> pyrimidine (C/T) changes.
    """
    if base1 == base2:
        return False
    return {base1, base2} <= PURINES or {base1, base2} <= PYRIMIDINES


def is_transversion(base1: str, base2: str) -> bool:
    if base1 == base2 or not (is_resolved(base1) and is_resolved(base2)):
        return False
    return not is_transition(base1, base2)
