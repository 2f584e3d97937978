"""
Aligned sequence containers used by the statistics engine.

A PolymorphismSequenceContainer is a read-only matrix of aligned nucleotides:
one row per sequence, one column per site. It can be built from plain
strings, a ``{name: sequence}`` mapping, Biopython ``SeqRecord`` objects or a
``Bio.Align.MultipleSeqAlignment``.
"""

from collections.abc import Iterable, Iterator, Mapping

import numpy as np
from Bio.Align import MultipleSeqAlignment
from Bio.SeqRecord import SeqRecord

from sequence_popgen.config import DNA_STATES, GAP_CHARACTER
from sequence_popgen.core.sequence_utils import normalize_sequence
from sequence_popgen.exceptions import InconsistentContainerError


class PolymorphismSequenceContainer:
    """
    An alignment of DNA sequences of identical length.

    Attributes:
        names (tuple[str, ...]): Sequence identifiers, in input order.
        matrix (np.ndarray): Array of shape (n_sequences, n_sites) holding single upper-case characters.
    """

    def __init__(self, sequences: Iterable[str], names: Iterable[str] | None = None):
        """
        Args:
            sequences: Aligned sequences.
            names: Optional identifiers, one per sequence. Defaults to "seq1", "seq2", ...

        Raises:
            InconsistentContainerError: If the sequences do not all have the same length,
                                        or if the number of names does not match.
            ValueError: If a sequence contains non-nucleotide symbols.
        """
        sequences = [normalize_sequence(seq) for seq in sequences]
        names = [f"seq{i + 1}" for i in range(len(sequences))] if names is None else [str(n) for n in names]
        if len(names) != len(sequences):
            raise InconsistentContainerError(
                f"Got {len(names)} names for {len(sequences)} sequences."
            )
        lengths = {len(seq) for seq in sequences}
        if len(lengths) > 1:
            raise InconsistentContainerError(
                f"Sequences in an alignment must have the same length, found lengths {sorted(lengths)}."
            )
        self.names = tuple(names)
        n_sites = lengths.pop() if lengths else 0
        if sequences:
            self.matrix = np.array([list(seq) for seq in sequences], dtype="<U1").reshape(len(sequences), n_sites)
        else:
            self.matrix = np.empty((0, 0), dtype="<U1")
        self.matrix.setflags(write=False)

    @classmethod
    def from_mapping(cls, sequences: Mapping[str, str]) -> "PolymorphismSequenceContainer":
        return cls(list(sequences.values()), names=list(sequences.keys()))

    @classmethod
    def from_records(cls, records: Iterable[SeqRecord]) -> "PolymorphismSequenceContainer":
        """Builds a container from Biopython SeqRecords (or a MultipleSeqAlignment)."""
        records = list(records)
        return cls([str(rec.seq) for rec in records], names=[rec.id for rec in records])

    def __len__(self) -> int:
        return self.n_sites

    def __repr__(self):
        return f"PolymorphismSequenceContainer({self.n_sequences} sequences x {self.n_sites} sites)"

    @property
    def n_sequences(self) -> int:
        return self.matrix.shape[0]

    @property
    def n_sites(self) -> int:
        return self.matrix.shape[1]

    def sequence(self, name: str) -> str:
        return "".join(self.matrix[self.names.index(name)])

    def to_mapping(self) -> dict[str, str]:
        return {name: "".join(row) for name, row in zip(self.names, self.matrix)}

    def site(self, position: int) -> np.ndarray:
        """Returns the column at 0-based `position`."""
        return self.matrix[:, position]

    def resolved_mask(self) -> np.ndarray:
        """Boolean matrix, True where the symbol is one of A, C, G, T."""
        return np.isin(self.matrix, DNA_STATES)

    def gap_mask(self) -> np.ndarray:
        """Boolean matrix, True where the symbol is the alignment gap."""
        return self.matrix == GAP_CHARACTER

    def iter_sites(self, complete_only: bool = False) -> Iterator[tuple[int, np.ndarray]]:
        """
        Iterates over sites as (0-based position, column) pairs.

        Args:
            complete_only: If True, sites holding any gap or unresolved symbol are skipped.
        """
        complete = self.resolved_mask().all(axis=0) if complete_only else None
        for position in range(self.n_sites):
            if complete is not None and not complete[position]:
                continue
            yield position, self.matrix[:, position]

    def iter_codon_sites(self) -> Iterator[tuple[int, list[str]]]:
        """
        Iterates over codon sites as (0-based codon index, one codon string per sequence).

        Raises:
            InconsistentContainerError: If the alignment length is not a multiple of 3.
        """
        if self.n_sites % 3 != 0:
            raise InconsistentContainerError(
                f"Alignment length ({self.n_sites}) is not a multiple of 3; cannot read codon sites."
            )
        for codon_index in range(self.n_sites // 3):
            block = self.matrix[:, 3 * codon_index:3 * codon_index + 3]
            yield codon_index, ["".join(row) for row in block]

    def select(self, names: Iterable[str]) -> "PolymorphismSequenceContainer":
        """Returns a new container holding the named sequences, in the given order."""
        names = list(names)
        missing = [name for name in names if name not in self.names]
        if missing:
            raise KeyError(f"Sequences not found in container: {missing}")
        rows = [self.names.index(name) for name in names]
        return PolymorphismSequenceContainer(["".join(self.matrix[i]) for i in rows], names=names)

    def split(self, outgroup_names: Iterable[str]) -> tuple["PolymorphismSequenceContainer", "PolymorphismSequenceContainer"]:
        """
        Splits the alignment into (ingroup, outgroup) containers.

        Args:
            outgroup_names: Identifiers of the outgroup sequences.
        """
        outgroup_names = list(outgroup_names)
        excluded = set(outgroup_names)
        ingroup_names = [name for name in self.names if name not in excluded]
        return self.select(ingroup_names), self.select(outgroup_names)


def as_container(data) -> PolymorphismSequenceContainer:
    """
    Coerces supported alignment representations into a PolymorphismSequenceContainer.

    Accepts an existing container (returned unchanged), a Bio.Align.MultipleSeqAlignment,
    a mapping of name -> sequence, or an iterable of strings / SeqRecords.

    Raises:
        InconsistentContainerError: If the sequences have different lengths.
        TypeError: For unsupported inputs.
    """
    if isinstance(data, PolymorphismSequenceContainer):
        return data
    if isinstance(data, MultipleSeqAlignment):
        return PolymorphismSequenceContainer.from_records(data)
    if isinstance(data, Mapping):
        return PolymorphismSequenceContainer.from_mapping(data)
    if isinstance(data, str):
        raise TypeError("A single string is not an alignment; pass a list of sequences.")
    if isinstance(data, Iterable):
        items = list(data)
        if items and all(isinstance(item, SeqRecord) for item in items):
            return PolymorphismSequenceContainer.from_records(items)
        return PolymorphismSequenceContainer([str(item) for item in items])
    raise TypeError(f"Cannot build an alignment container from {type(data).__name__}.")
