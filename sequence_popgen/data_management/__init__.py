from .data_structures import (
    AlleleInfo,
    AnalyzedLoci,
    DataSet,
    Group,
    Individual,
    LocusInfo,
    MonolocusGenotype,
    MultilocusGenotype,
)
from .io_handlers import GeneMapperCsvExport, read_genemapper_export
