# sequence_popgen/data_management/io_handlers.py

import logging

import pandas as pd

from sequence_popgen.config import ALLELE_COLUMN_TOKEN, DEFAULT_DELIMITER, MARKER_COLUMN, SAMPLE_NAME_COLUMN
from sequence_popgen.exceptions import DataSourceError, MissingColumnError
from .data_structures import AlleleInfo, AnalyzedLoci, DataSet, Individual, LocusInfo, MonolocusGenotype

logger = logging.getLogger(__name__)

GROUP_ID = 0


def read_genotype_table(source, sep: str = DEFAULT_DELIMITER) -> pd.DataFrame:
    """
    Reads a delimited genotype table with every cell kept as a string.

    Args:
        source: A path or a readable text stream.
        sep (str): Column delimiter. Defaults to tab.

    Returns:
        pd.DataFrame: The table, in file row order. Empty cells are empty strings.

    Raises:
        DataSourceError: If the source cannot be opened or parsed.
    """
    try:
        table = pd.read_csv(source, sep=sep, dtype=str, keep_default_na=False)
    except (OSError, UnicodeDecodeError, pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise DataSourceError(f"Cannot read genotype table from {source!r}: {e}") from e
    logger.debug("Genotype table R x C: %d x %d", table.shape[0], table.shape[1])
    return table


def rename_duplicate_samples(table: pd.DataFrame) -> pd.DataFrame:
    """
    Makes (Sample Name, Marker) pairs unique.

    The k-th repeat (k >= 1, in row order) of a pair has its sample name
    rewritten to '<name>_<k>'. If that name is already used at the same
    marker, k is increased until it is free. Returns a new DataFrame.
    """
    table = table.copy()
    occurrence = table.groupby([SAMPLE_NAME_COLUMN, MARKER_COLUMN], sort=False).cumcount()
    repeated = occurrence > 0
    if not repeated.any():
        return table
    taken = set(zip(table[SAMPLE_NAME_COLUMN], table[MARKER_COLUMN]))
    for index in table.index[repeated]:
        old, marker = table.at[index, SAMPLE_NAME_COLUMN], table.at[index, MARKER_COLUMN]
        k = int(occurrence[index])
        while (f"{old}_{k}", marker) in taken:
            k += 1
        new = f"{old}_{k}"
        taken.add((new, marker))
        logger.info("Duplicate sample '%s' at marker '%s' renamed to '%s'.", old, marker, new)
        table.at[index, SAMPLE_NAME_COLUMN] = new
    return table


def allele_columns(columns) -> list[str]:
    """Columns holding allele calls: every column whose name contains 'Allele'."""
    return [col for col in columns if ALLELE_COLUMN_TOKEN in col]


def _labels(cells) -> list[str]:
    labels = []
    for cell in cells:
        label = str(cell).strip()
        if label:
            labels.append(label)
    return labels


def read_genemapper_export(source, dataset: DataSet | None = None, sep: str = DEFAULT_DELIMITER) -> DataSet:
    """
    Imports a GeneMapper genotype table export into a DataSet.

    All samples go into one group (id 0). Each distinct marker becomes a
    locus whose allele registry holds every distinct allele label called for
    it. Each row sets the genotype of its sample at its marker to the set of
    allele keys found in its 'Allele' columns; rows without any call leave the
    locus missing.

    Args:
        source: A path or a readable text stream.
        dataset (DataSet, optional): Destination dataset. A new one is created if omitted;
                                     it must not already hold loci or a group 0.
        sep (str): Column delimiter. Defaults to tab.

    Returns:
        DataSet: The populated dataset.

    Raises:
        DataSourceError: If the source cannot be read.
        MissingColumnError: If 'Sample Name' or 'Marker' is missing. The dataset is left untouched.
    """
    table = read_genotype_table(source, sep=sep)
    missing = [col for col in (SAMPLE_NAME_COLUMN, MARKER_COLUMN) if col not in table.columns]
    if missing:
        raise MissingColumnError(f"Genotype table is missing required column(s): {missing}")

    table = rename_duplicate_samples(table)
    sample_names = list(pd.unique(table[SAMPLE_NAME_COLUMN]))
    markers = list(pd.unique(table[MARKER_COLUMN]))
    allele_cols = allele_columns(table.columns)
    logger.debug("Sample Name nbr: %d", len(sample_names))
    logger.debug("Marker nbr: %d", len(markers))

    if dataset is None:
        dataset = DataSet()

    # Loci
    analyzed_loci = AnalyzedLoci.with_size(len(markers))
    for position, marker in enumerate(markers):
        locus = LocusInfo(name=marker)
        marker_rows = table[table[MARKER_COLUMN] == marker]
        logger.debug("marker %s: %d rows", marker, len(marker_rows))
        for col in allele_cols:
            for label in _labels(marker_rows[col]):
                locus.add_allele_info(AlleleInfo(label))
        analyzed_loci.set_locus_info(position, locus)
    dataset.set_analyzed_loci(analyzed_loci)

    # Individuals
    dataset.add_empty_group(GROUP_ID)
    group_position = dataset.get_group_position(GROUP_ID)
    for name in sample_names:
        dataset.add_individual_to_group(group_position, Individual(id=name))

    # Genotypes
    for _, row in table.iterrows():
        name, marker = row[SAMPLE_NAME_COLUMN], row[MARKER_COLUMN]
        locus = dataset.get_locus_info_by_name(marker)
        keys = [locus.get_allele_info_key(label) for label in _labels(row[col] for col in allele_cols)]
        individual_position = dataset.get_individual_position_in_group(GROUP_ID, name)
        if not dataset.get_individual_by_id_from_group(GROUP_ID, name).has_genotype:
            dataset.init_individual_genotype_in_group(GROUP_ID, individual_position)
        if keys:
            dataset.set_individual_monolocus_genotype_in_group(
                GROUP_ID, individual_position,
                dataset.analyzed_loci.get_locus_info_position(marker),
                MonolocusGenotype.from_keys(keys),
            )
    return dataset


class GeneMapperCsvExport:
    """Reader for the tab-delimited table exported by GeneMapper."""

    format_name = "GeneMapper® csv export"
    format_description = (
        "GeneMapper® is a flexible genotyping software package that provides DNA sizing "
        "and quality allele calls for all Applied Biosystems electrophoresis-based genotyping systems."
    )

    def __init__(self, sep: str = DEFAULT_DELIMITER):
        self.sep = sep

    def read(self, source, dataset: DataSet | None = None) -> DataSet:
        return read_genemapper_export(source, dataset=dataset, sep=self.sep)
