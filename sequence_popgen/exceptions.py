"""
Exceptions raised by sequence_popgen.

Every class also derives from the closest built-in exception so callers can
catch either the package error or the usual Python one (e.g. ``OSError`` for
an unreadable export, ``LookupError`` for an unknown locus).
"""


class PopulationGeneticsError(Exception):
    """Base class for exceptions in this package."""
    pass


class DataSourceError(PopulationGeneticsError, OSError):
    """Raised when an input file or stream cannot be opened or read."""
    pass


class MissingColumnError(PopulationGeneticsError, KeyError):
    """Raised when a required column is absent from a table header."""

    def __str__(self):
        # KeyError quotes its message; keep it readable.
        return str(self.args[0]) if self.args else ""


class InconsistentContainerError(PopulationGeneticsError, ValueError):
    """Raised for sequences of unequal length or a missing genetic code."""
    pass


class UndefinedStatisticError(PopulationGeneticsError, ArithmeticError):
    """Raised when a statistic has a zero/negative denominator or too few polymorphic sites."""
    pass


class RegistryLookupError(PopulationGeneticsError, LookupError):
    """Raised when an individual, group, locus or allele is not registered in a DataSet."""
    pass
