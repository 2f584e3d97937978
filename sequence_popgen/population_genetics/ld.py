"""
Linkage disequilibrium between pairs of biallelic sites of an alignment.

The pairwise functions all start from an LDContainer (see generate_ld_container):
complete biallelic sites recoded 1 for the majority allele and 0 for the
minority allele. Pairs are enumerated as (i, j) with i < j in alignment order,
so the vectors returned by pairwise_d, pairwise_distances1, ... line up.

Regressions express distances in kilobases.
"""

import logging
from dataclasses import dataclass

import numpy as np
from scipy import stats

from sequence_popgen.core.containers import as_container
from sequence_popgen.exceptions import UndefinedStatisticError
from sequence_popgen.population_genetics.site_counts import site_states

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LDContainer:
    """
    Biallelic sites recoded for linkage disequilibrium analysis.

    Attributes:
        matrix: uint8 array (n_sequences, n_sites); 1 = majority allele, 0 = minority allele.
        positions: 1-based alignment positions of the retained sites.
        gap_counts: int array (n_sequences, alignment_length + 1); gap_counts[s, k] is the
                    number of gaps sequence s carries in alignment columns [0, k).
    """
    matrix: np.ndarray
    positions: np.ndarray
    gap_counts: np.ndarray

    @property
    def n_sequences(self) -> int:
        return self.matrix.shape[0]

    @property
    def n_sites(self) -> int:
        return self.matrix.shape[1]


def generate_ld_container(psc, keep_singletons: bool = True, min_frequency: float = 0.0) -> LDContainer:
    """
    Builds the LD container of an alignment.

    Only complete sites (no gap or unresolved symbol) with exactly two alleles
    are kept. The more frequent allele is coded 1 and the other 0; when both
    alleles are equally frequent, the allele of the first sequence is coded 1.

    Args:
        psc: A PolymorphismSequenceContainer or anything `as_container` accepts.
        keep_singletons: If False, sites whose minor allele is carried by a single sequence are dropped.
        min_frequency: Sites whose minor allele frequency is below this threshold are dropped.

    Returns:
        An LDContainer.
    """
    psc = as_container(psc)
    n = psc.n_sequences
    columns, positions = [], []
    for position, site in psc.iter_sites(complete_only=True):
        states = site_states(site)
        if len(states) != 2:
            continue
        # Counter keeps first-encountered order: `first` is the allele of sequence 1.
        (first, first_count), (second, second_count) = states.items()
        minor_count = min(first_count, second_count)
        if not keep_singletons and minor_count == 1:
            continue
        if minor_count / n < min_frequency:
            continue
        major = first if first_count >= second_count else second
        columns.append((site == major).astype(np.uint8))
        positions.append(position + 1)

    matrix = np.column_stack(columns) if columns else np.zeros((n, 0), dtype=np.uint8)
    gap_counts = np.zeros((n, psc.n_sites + 1), dtype=np.int64)
    if n:
        gap_counts[:, 1:] = np.cumsum(psc.gap_mask(), axis=1)
    logger.debug("LD container: kept %d of %d sites.", len(positions), psc.n_sites)
    return LDContainer(matrix=matrix, positions=np.array(positions, dtype=np.int64), gap_counts=gap_counts)


def _ld_container(psc, keep_singletons: bool, min_frequency: float) -> LDContainer:
    if isinstance(psc, LDContainer):
        return psc
    return generate_ld_container(psc, keep_singletons, min_frequency)


def _pair_indices(ld: LDContainer) -> tuple[np.ndarray, np.ndarray]:
    return np.triu_indices(ld.n_sites, k=1)


def _pair_frequencies(ld: LDContainer) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """(p1, p2, p11) for every pair: frequencies of allele 1 at each site and of the 1-1 haplotype."""
    i, j = _pair_indices(ld)
    x = ld.matrix.astype(np.float64)
    n = ld.n_sequences
    p = x.mean(axis=0) if n else np.zeros(ld.n_sites)
    p11 = (x.T @ x) / n if n else np.zeros((ld.n_sites, ld.n_sites))
    return p[i], p[j], p11[i, j]


# --- Pairwise measures ---

def calculate_d(p1, p2, p11):
    """D = p11 - p1 p2 (Lewontin & Kojima 1960)."""
    return np.asarray(p11, dtype=np.float64) - np.asarray(p1, dtype=np.float64) * np.asarray(p2, dtype=np.float64)


def calculate_d_prime(d, p1, p2):
    """
    D' = D / Dmax (Lewontin 1964).

    Dmax is min(p1 (1 - p2), (1 - p1) p2) when D > 0 and min(p1 p2, (1 - p1)(1 - p2))
    otherwise. D' keeps the sign of D and is 0 when D is 0.
    """
    d, p1, p2 = (np.asarray(v, dtype=np.float64) for v in (d, p1, p2))
    d_max = np.where(d > 0,
                     np.minimum(p1 * (1 - p2), (1 - p1) * p2),
                     np.minimum(p1 * p2, (1 - p1) * (1 - p2)))
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(d == 0, 0.0, d / d_max)


def calculate_r_squared(d, p1, p2):
    """r^2 = D^2 / (p1 (1 - p1) p2 (1 - p2)) (Hill & Robertson 1968)."""
    d, p1, p2 = (np.asarray(v, dtype=np.float64) for v in (d, p1, p2))
    denominator = p1 * (1 - p1) * p2 * (1 - p2)
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(d == 0, 0.0, d * d / denominator)


def pairwise_d(psc, keep_singletons: bool = True, min_frequency: float = 0.0) -> np.ndarray:
    """D for every pair of retained sites, in (i < j) order."""
    p1, p2, p11 = _pair_frequencies(_ld_container(psc, keep_singletons, min_frequency))
    return calculate_d(p1, p2, p11)


def pairwise_d_prime(psc, keep_singletons: bool = True, min_frequency: float = 0.0) -> np.ndarray:
    """D' for every pair of retained sites, in (i < j) order."""
    p1, p2, p11 = _pair_frequencies(_ld_container(psc, keep_singletons, min_frequency))
    return calculate_d_prime(calculate_d(p1, p2, p11), p1, p2)


def pairwise_r2(psc, keep_singletons: bool = True, min_frequency: float = 0.0) -> np.ndarray:
    """r^2 for every pair of retained sites, in (i < j) order."""
    p1, p2, p11 = _pair_frequencies(_ld_container(psc, keep_singletons, min_frequency))
    return calculate_r_squared(calculate_d(p1, p2, p11), p1, p2)


# --- Distances ---

def pairwise_distances1(psc, keep_singletons: bool = True, min_frequency: float = 0.0) -> np.ndarray:
    """Distance in alignment columns between the two sites of every pair."""
    ld = _ld_container(psc, keep_singletons, min_frequency)
    i, j = _pair_indices(ld)
    return (ld.positions[j] - ld.positions[i]).astype(np.float64)


def pairwise_distances2(psc, keep_singletons: bool = True, min_frequency: float = 0.0) -> np.ndarray:
    """
    Gap-adjusted distance between the two sites of every pair.

    For each sequence the gaps lying between the two sites are not counted;
    the distance is then averaged over sequences.
    """
    ld = _ld_container(psc, keep_singletons, min_frequency)
    i, j = _pair_indices(ld)
    if ld.n_sequences == 0:
        return np.zeros(len(i))
    start, end = ld.positions[i] - 1, ld.positions[j] - 1
    gaps_between = ld.gap_counts[:, end] - ld.gap_counts[:, start]
    return ((end - start)[np.newaxis, :] - gaps_between).mean(axis=0).astype(np.float64)


def _distances(psc, distance1: bool, keep_singletons: bool, min_frequency: float) -> np.ndarray:
    if distance1:
        return pairwise_distances1(psc, keep_singletons, min_frequency)
    return pairwise_distances2(psc, keep_singletons, min_frequency)


# --- Means ---

def _mean(values: np.ndarray, statistic: str) -> float:
    if len(values) == 0:
        raise UndefinedStatisticError(f"Mean {statistic} is undefined: fewer than two biallelic sites were retained.")
    return float(np.mean(values))


def mean_d(psc, keep_singletons: bool = True, min_frequency: float = 0.0) -> float:
    return _mean(pairwise_d(psc, keep_singletons, min_frequency), "D")


def mean_d_prime(psc, keep_singletons: bool = True, min_frequency: float = 0.0) -> float:
    return _mean(pairwise_d_prime(psc, keep_singletons, min_frequency), "D'")


def mean_r2(psc, keep_singletons: bool = True, min_frequency: float = 0.0) -> float:
    return _mean(pairwise_r2(psc, keep_singletons, min_frequency), "r^2")


def mean_distance1(psc, keep_singletons: bool = True, min_frequency: float = 0.0) -> float:
    return _mean(pairwise_distances1(psc, keep_singletons, min_frequency), "distance")


def mean_distance2(psc, keep_singletons: bool = True, min_frequency: float = 0.0) -> float:
    return _mean(pairwise_distances2(psc, keep_singletons, min_frequency), "distance")


# --- Regressions on distance (kb) ---

def _slope_from_one(distance_kb: np.ndarray, values: np.ndarray, statistic: str) -> float:
    """Least-squares slope a of values = 1 + a * distance."""
    denominator = float(np.dot(distance_kb, distance_kb))
    if len(values) == 0 or denominator == 0:
        raise UndefinedStatisticError(f"Regression of {statistic} on distance needs at least one pair at non-zero distance.")
    return float(np.dot(distance_kb, values - 1.0)) / denominator


def _linear_fit(distance_kb: np.ndarray, values: np.ndarray, statistic: str) -> tuple[float, float]:
    if len(values) < 2 or np.ptp(distance_kb) == 0:
        raise UndefinedStatisticError(f"Linear regression of {statistic} on distance needs at least two distinct distances.")
    fit = stats.linregress(distance_kb, values)
    return float(fit.slope), float(fit.intercept)


def origin_regression_d(psc, distance1: bool = False, keep_singletons: bool = True, min_frequency: float = 0.0) -> float:
    """
    Slope a of the regression |D| = 1 + a * distance, in |D| per kb.

    Args:
        psc: A PolymorphismSequenceContainer, an LDContainer, or anything `as_container` accepts.
        distance1: Use the raw distance (True) or the gap-adjusted distance (False).
        keep_singletons: If False, sites with a singleton minor allele are dropped.
        min_frequency: Minor allele frequency threshold.
    """
    ld = _ld_container(psc, keep_singletons, min_frequency)
    return _slope_from_one(_distances(ld, distance1, keep_singletons, min_frequency) / 1000.0,
                           np.abs(pairwise_d(ld)), "|D|")


def origin_regression_d_prime(psc, distance1: bool = False, keep_singletons: bool = True, min_frequency: float = 0.0) -> float:
    """Slope a of the regression |D'| = 1 + a * distance, in |D'| per kb."""
    ld = _ld_container(psc, keep_singletons, min_frequency)
    return _slope_from_one(_distances(ld, distance1, keep_singletons, min_frequency) / 1000.0,
                           np.abs(pairwise_d_prime(ld)), "|D'|")


def origin_regression_r2(psc, distance1: bool = False, keep_singletons: bool = True, min_frequency: float = 0.0) -> float:
    """Slope a of the regression r^2 = 1 + a * distance, in r^2 per kb."""
    ld = _ld_container(psc, keep_singletons, min_frequency)
    return _slope_from_one(_distances(ld, distance1, keep_singletons, min_frequency) / 1000.0,
                           pairwise_r2(ld), "r^2")


def linear_regression_d(psc, distance1: bool = False, keep_singletons: bool = True,
                        min_frequency: float = 0.0) -> tuple[float, float]:
    """
    Ordinary least squares fit of |D| = a * distance + b.

    Returns:
        A tuple (slope a in |D| per kb, intercept b).
    """
    ld = _ld_container(psc, keep_singletons, min_frequency)
    return _linear_fit(_distances(ld, distance1, keep_singletons, min_frequency) / 1000.0,
                       np.abs(pairwise_d(ld)), "|D|")


def linear_regression_d_prime(psc, distance1: bool = False, keep_singletons: bool = True,
                              min_frequency: float = 0.0) -> tuple[float, float]:
    """(slope, intercept) of |D'| = a * distance + b."""
    ld = _ld_container(psc, keep_singletons, min_frequency)
    return _linear_fit(_distances(ld, distance1, keep_singletons, min_frequency) / 1000.0,
                       np.abs(pairwise_d_prime(ld)), "|D'|")


def linear_regression_r2(psc, distance1: bool = False, keep_singletons: bool = True,
                         min_frequency: float = 0.0) -> tuple[float, float]:
    """(slope, intercept) of r^2 = a * distance + b."""
    ld = _ld_container(psc, keep_singletons, min_frequency)
    return _linear_fit(_distances(ld, distance1, keep_singletons, min_frequency) / 1000.0,
                       pairwise_r2(ld), "r^2")


def inverse_regression_r2(psc, distance1: bool = False, keep_singletons: bool = True, min_frequency: float = 0.0) -> float:
    """
    Fits r^2 = 1 / (1 + a * distance), the expectation r^2 = 1 / (1 + 4Nr).

    The model is linearized as 1/r^2 - 1 = a * distance and fitted through the
    origin. Pairs with r^2 = 0 cannot be inverted and are left out.

    Returns:
        a, per kb.
    """
    ld = _ld_container(psc, keep_singletons, min_frequency)
    r2 = pairwise_r2(ld)
    distance_kb = _distances(ld, distance1, keep_singletons, min_frequency) / 1000.0
    usable = r2 > 0
    if not usable.all():
        logger.debug("Inverse regression: %d pairs with r^2 = 0 left out.", int((~usable).sum()))
    distance_kb, r2 = distance_kb[usable], r2[usable]
    denominator = float(np.dot(distance_kb, distance_kb))
    if len(r2) == 0 or denominator == 0:
        raise UndefinedStatisticError("Inverse regression of r^2 needs at least one linked pair at non-zero distance.")
    return float(np.dot(distance_kb, 1.0 / r2 - 1.0)) / denominator
