# sequence_popgen/data_management/data_structures.py

"""
In-memory model of a multi-locus genotype dataset.

    DataSet
      groups:         Group -> Individual -> MultilocusGenotype -> MonolocusGenotype
      analyzed_loci:  AnalyzedLoci -> LocusInfo -> AlleleInfo

A MonolocusGenotype holds allele *keys*: the position of each allele in the
registry of its LocusInfo. Keys are therefore only meaningful together with
their locus.
"""

from dataclasses import dataclass, field

import pandas as pd

from sequence_popgen.exceptions import RegistryLookupError

UNKNOWN_PLOIDY = "unknown"


@dataclass(frozen=True)
class AlleleInfo:
    """An allele label as called by the genotyping software (e.g. "152")."""
    id: str


@dataclass
class LocusInfo:
    """
    A locus and its allele registry.

    Attributes:
        name (str): Locus (marker) name.
        ploidy (str): Ploidy label; GeneMapper exports do not state it.
        alleles (list[AlleleInfo]): Registered alleles; the list index is the allele key.
    """
    name: str
    ploidy: str = UNKNOWN_PLOIDY
    alleles: list[AlleleInfo] = field(default_factory=list)

    @property
    def number_of_alleles(self) -> int:
        return len(self.alleles)

    def add_allele_info(self, allele: AlleleInfo) -> int:
        """Registers an allele and returns its key. An already registered label keeps its key."""
        for key, known in enumerate(self.alleles):
            if known.id == allele.id:
                return key
        self.alleles.append(allele)
        return len(self.alleles) - 1

    def get_allele_info_key(self, allele_id: str) -> int:
        for key, known in enumerate(self.alleles):
            if known.id == allele_id:
                return key
        raise RegistryLookupError(f"Allele '{allele_id}' is not registered for locus '{self.name}'.")

    def get_allele_info_by_key(self, key: int) -> AlleleInfo:
        if not 0 <= key < len(self.alleles):
            raise RegistryLookupError(f"No allele with key {key} for locus '{self.name}'.")
        return self.alleles[key]


@dataclass
class AnalyzedLoci:
    """Ordered registry of the loci of a dataset. A slot is None until its locus is set."""
    loci: list[LocusInfo | None] = field(default_factory=list)

    @classmethod
    def with_size(cls, number_of_loci: int) -> "AnalyzedLoci":
        return cls(loci=[None] * number_of_loci)

    @property
    def number_of_loci(self) -> int:
        return len(self.loci)

    @property
    def locus_names(self) -> list[str | None]:
        return [locus.name if locus is not None else None for locus in self.loci]

    def set_locus_info(self, position: int, locus: LocusInfo):
        if not 0 <= position < len(self.loci):
            raise IndexError(f"Locus position {position} out of range (0..{len(self.loci) - 1}).")
        self.loci[position] = locus

    def get_locus_info_position(self, name: str) -> int:
        for position, locus in enumerate(self.loci):
            if locus is not None and locus.name == name:
                return position
        raise RegistryLookupError(f"Locus '{name}' is not registered.")

    def get_locus_info_by_name(self, name: str) -> LocusInfo:
        return self.loci[self.get_locus_info_position(name)]

    def add_allele_info_by_locus_name(self, name: str, allele: AlleleInfo) -> int:
        return self.get_locus_info_by_name(name).add_allele_info(allele)


@dataclass(frozen=True)
class MonolocusGenotype:
    """Genotype at one locus: the sorted, distinct allele keys observed."""
    allele_keys: tuple[int, ...]

    @classmethod
    def from_keys(cls, keys) -> "MonolocusGenotype":
        return cls(allele_keys=tuple(sorted(set(keys))))

    @property
    def is_homozygous(self) -> bool:
        return len(self.allele_keys) == 1


@dataclass
class MultilocusGenotype:
    """One slot per analyzed locus; None marks a missing genotype."""
    slots: list[MonolocusGenotype | None]

    @classmethod
    def empty(cls, number_of_loci: int) -> "MultilocusGenotype":
        return cls(slots=[None] * number_of_loci)

    def set_monolocus_genotype(self, locus_position: int, genotype: MonolocusGenotype):
        if not 0 <= locus_position < len(self.slots):
            raise IndexError(f"Locus position {locus_position} out of range (0..{len(self.slots) - 1}).")
        self.slots[locus_position] = genotype

    def is_missing(self, locus_position: int) -> bool:
        return self.slots[locus_position] is None

    @property
    def number_of_non_missing(self) -> int:
        return sum(1 for slot in self.slots if slot is not None)


@dataclass
class Individual:
    id: str
    genotype: MultilocusGenotype | None = None

    @property
    def has_genotype(self) -> bool:
        return self.genotype is not None


@dataclass
class Group:
    """A group (population) of individuals."""
    id: int
    name: str | None = None
    individuals: list[Individual] = field(default_factory=list)

    def get_individual_position(self, individual_id: str) -> int:
        for position, individual in enumerate(self.individuals):
            if individual.id == individual_id:
                return position
        raise RegistryLookupError(f"Individual '{individual_id}' not found in group {self.id}.")

    def get_individual_by_id(self, individual_id: str) -> Individual:
        return self.individuals[self.get_individual_position(individual_id)]


@dataclass
class DataSet:
    """
    Groups of genotyped individuals and the loci they are genotyped at.

    The locus registry is set once; individuals' genotypes are sized after it.
    """
    groups: list[Group] = field(default_factory=list)
    analyzed_loci: AnalyzedLoci | None = None

    # --- Groups ---

    def add_empty_group(self, group_id: int) -> Group:
        if any(group.id == group_id for group in self.groups):
            raise ValueError(f"Group {group_id} already exists in the dataset.")
        group = Group(id=group_id)
        self.groups.append(group)
        return group

    def get_group_position(self, group_id: int) -> int:
        for position, group in enumerate(self.groups):
            if group.id == group_id:
                return position
        raise RegistryLookupError(f"Group {group_id} not found in the dataset.")

    def get_group_by_id(self, group_id: int) -> Group:
        return self.groups[self.get_group_position(group_id)]

    @property
    def number_of_groups(self) -> int:
        return len(self.groups)

    # --- Individuals ---

    def add_individual_to_group(self, group_position: int, individual: Individual):
        group = self.groups[group_position]
        if any(known.id == individual.id for known in group.individuals):
            raise ValueError(f"Individual '{individual.id}' already exists in group {group.id}.")
        group.individuals.append(individual)

    def get_individual_position_in_group(self, group_id: int, individual_id: str) -> int:
        return self.get_group_by_id(group_id).get_individual_position(individual_id)

    def get_individual_by_id_from_group(self, group_id: int, individual_id: str) -> Individual:
        return self.get_group_by_id(group_id).get_individual_by_id(individual_id)

    def init_individual_genotype_in_group(self, group_id: int, individual_position: int):
        """
        Gives an individual an empty MultilocusGenotype, one missing slot per analyzed locus.

        Raises:
            ValueError: If no loci are registered yet, or the individual already has a genotype.
        """
        if self.analyzed_loci is None:
            raise ValueError("Analyzed loci must be set before genotypes are initialised.")
        individual = self.get_group_by_id(group_id).individuals[individual_position]
        if individual.has_genotype:
            raise ValueError(f"Individual '{individual.id}' already has a genotype.")
        individual.genotype = MultilocusGenotype.empty(self.analyzed_loci.number_of_loci)

    def set_individual_monolocus_genotype_in_group(self, group_id: int, individual_position: int,
                                                  locus_position: int, genotype: MonolocusGenotype):
        individual = self.get_group_by_id(group_id).individuals[individual_position]
        if not individual.has_genotype:
            raise ValueError(f"Individual '{individual.id}' has no genotype storage; initialise it first.")
        individual.genotype.set_monolocus_genotype(locus_position, genotype)

    # --- Loci ---

    def set_analyzed_loci(self, analyzed_loci: AnalyzedLoci):
        if self.analyzed_loci is not None:
            raise ValueError("Analyzed loci are already registered for this dataset.")
        self.analyzed_loci = analyzed_loci

    def get_locus_info_by_name(self, name: str) -> LocusInfo:
        if self.analyzed_loci is None:
            raise RegistryLookupError(f"Locus '{name}' is not registered: the dataset has no loci.")
        return self.analyzed_loci.get_locus_info_by_name(name)

    # --- Views ---

    def genotypes_frame(self, separator: str = "/") -> pd.DataFrame:
        """
        Flattens the dataset into one row per individual.

        Columns are 'Group', 'Individual' and one column per locus holding the
        allele labels joined by `separator` (None where the genotype is missing).
        """
        locus_names = self.analyzed_loci.locus_names if self.analyzed_loci is not None else []
        records = []
        for group in self.groups:
            for individual in group.individuals:
                record = {"Group": group.id, "Individual": individual.id}
                for position, locus_name in enumerate(locus_names):
                    slot = individual.genotype.slots[position] if individual.has_genotype else None
                    if slot is None:
                        record[locus_name] = None
                    else:
                        locus = self.analyzed_loci.loci[position]
                        record[locus_name] = separator.join(locus.get_allele_info_by_key(k).id for k in slot.allele_keys)
                records.append(record)
        return pd.DataFrame(records, columns=["Group", "Individual", *locus_names])
