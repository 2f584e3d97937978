from .containers import PolymorphismSequenceContainer, as_container
from .codon_tools import get_genetic_code
from .file_parsers import read_alignment, read_fasta

__all__ = [
    "PolymorphismSequenceContainer",
    "as_container",
    "get_genetic_code",
    "read_alignment",
    "read_fasta",
]
