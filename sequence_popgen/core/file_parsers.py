from Bio import AlignIO, SeqIO

from sequence_popgen.core.containers import PolymorphismSequenceContainer
from sequence_popgen.exceptions import DataSourceError


def read_fasta(filepath: str) -> dict[str, str]:
    """
    Reads a FASTA formatted file and returns a dictionary of sequences.

    Args:
        filepath: The path to the FASTA file.

    Returns:
        A dictionary where keys are sequence identifiers (first word of the header)
        and values are the corresponding sequences.

    Raises:
        DataSourceError: If the file cannot be opened.
    """
    try:
        with open(filepath, "r") as handle:
            return {record.id: str(record.seq) for record in SeqIO.parse(handle, "fasta")}
    except OSError as e:
        raise DataSourceError(f"Cannot read FASTA file {filepath}: {e}") from e


def read_alignment(filepath: str, file_format: str = "fasta") -> PolymorphismSequenceContainer:
    """
    Reads an alignment file into a PolymorphismSequenceContainer.

    Args:
        filepath: Path to the alignment.
        file_format: Any format understood by Bio.AlignIO ("fasta", "phylip", "clustal", "nexus", ...).

    Raises:
        DataSourceError: If the file cannot be opened.
        InconsistentContainerError: If the sequences do not all have the same length.
    """
    try:
        with open(filepath, "r") as handle:
            if file_format == "fasta":
                # AlignIO rejects ragged FASTA with a bare ValueError; let the container report it.
                records = list(SeqIO.parse(handle, "fasta"))
            else:
                records = list(AlignIO.read(handle, file_format))
    except OSError as e:
        raise DataSourceError(f"Cannot read alignment file {filepath}: {e}") from e
    return PolymorphismSequenceContainer.from_records(records)
