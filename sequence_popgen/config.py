# sequence_popgen/config.py

import logging
import os

# --- Logging ---
LOG_LEVEL = os.environ.get("SEQUENCE_POPGEN_LOG_LEVEL", "WARNING").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# --- Alphabet ---
DNA_STATES = ("A", "C", "G", "T")
GAP_CHARACTER = "-"

# --- Genetic code ---
# NCBI translation table id (1 = standard code). See Bio.Data.CodonTable for the others.
DEFAULT_GENETIC_CODE = int(os.environ.get("SEQUENCE_POPGEN_GENETIC_CODE", 1))

# --- GeneMapper export ---
DEFAULT_DELIMITER = "\t"
SAMPLE_NAME_COLUMN = "Sample Name"
MARKER_COLUMN = "Marker"
ALLELE_COLUMN_TOKEN = "Allele"  # matched anywhere in the column name


def configure_logging(level: str | int | None = None) -> None:
    """
    Installs a basic stream handler for scripts and notebooks.

    The library itself never calls this; applications decide how records are emitted.

    Args:
        level: Logging level name or number. Defaults to SEQUENCE_POPGEN_LOG_LEVEL.
    """
    logging.basicConfig(level=level if level is not None else LOG_LEVEL, format=LOG_FORMAT)
