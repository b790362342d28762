"""Signal-distance metrics between radio fingerprints.

Fingerprints are sparse: each one only holds readings for the radio sources
that were heard at that spot, so the metrics below pair readings by source
identity instead of comparing dense vectors position by position.

For fingerprints a and b, the squared signal distance is

    D²(a, b) = Σ_{(r, s) : src(r) = src(s)} (rssi(r) - rssi(s))²

where the sum runs over every pair of readings (r in a, s in b) that share
a radio source. Duplicate readings of a source contribute every cross pair.

**Missing source handling:**
Sources present in only one of the fingerprints contribute nothing. If the
two fingerprints share no source at all the distance is 0.0, i.e. they are
indistinguishable by signal content and other library entries decide the
ranking.

Author: Navigation Engineer
Date: 2024
"""

from typing import Sequence, Tuple

import numpy as np

from .types import Fingerprint

SQEUCLIDEAN = "sqeuclidean"
NO_MEAN_SQEUCLIDEAN = "no_mean_sqeuclidean"

SUPPORTED_METRICS = (SQEUCLIDEAN, NO_MEAN_SQEUCLIDEAN)


def _check_pair(a: Fingerprint, b: Fingerprint) -> None:
    if a is None or b is None:
        raise ValueError("Both fingerprints must be provided (got None)")


def _matched_pairs(a: Fingerprint, b: Fingerprint) -> Tuple[np.ndarray, np.ndarray]:
    """
    Collect RSSI values of every reading pair sharing a radio source.

    Returns:
        Tuple (rssi_a, rssi_b) of equal-length arrays, one element per
        matched pair, in the reading order of ``a``.
    """
    other = b.rssi_by_source()
    rssi_a = []
    rssi_b = []
    for reading in a.readings:
        for value in other.get(reading.source.identity, ()):
            rssi_a.append(reading.rssi)
            rssi_b.append(value)
    return np.asarray(rssi_a, dtype=float), np.asarray(rssi_b, dtype=float)


def shared_source_count(a: Fingerprint, b: Fingerprint) -> int:
    """
    Number of reading pairs in ``a`` and ``b`` that share a radio source.

    Args:
        a: First fingerprint.
        b: Second fingerprint.

    Returns:
        Count of matched pairs (0 if the fingerprints are disjoint).
    """
    _check_pair(a, b)
    other = b.rssi_by_source()
    return sum(len(other.get(r.source.identity, ())) for r in a.readings)


def sqr_signal_distance(a: Fingerprint, b: Fingerprint) -> float:
    """
    Compute the squared signal distance D²(a, b).

    The result is symmetric in its arguments and always >= 0.

    Args:
        a: First fingerprint (e.g., query).
        b: Second fingerprint (e.g., library entry).

    Returns:
        Sum of squared RSSI differences over matched source pairs, in dBm².
        0.0 when the fingerprints share no radio source.

    Raises:
        ValueError: If either fingerprint is None.

    Examples:
        >>> q = Fingerprint.from_rssi({"AP1": -51.0})
        >>> r = Fingerprint.from_rssi({"AP1": -50.0, "AP2": -80.0})
        >>> sqr_signal_distance(q, r)
        1.0
    """
    _check_pair(a, b)
    rssi_a, rssi_b = _matched_pairs(a, b)
    if rssi_a.size == 0:
        return 0.0
    diff = rssi_a - rssi_b
    return float(np.dot(diff, diff))


def signal_distance(a: Fingerprint, b: Fingerprint) -> float:
    """Signal distance D(a, b), the square root of :func:`sqr_signal_distance`."""
    return float(np.sqrt(sqr_signal_distance(a, b)))


def no_mean_sqr_signal_distance(a: Fingerprint, b: Fingerprint) -> float:
    """
    Squared signal distance after removing each side's mean RSSI.

    The mean of each fingerprint is taken over the matched pairs only, so
    a constant gain offset between two receivers (e.g., different phone
    models) does not contribute to the distance:

        D²₀(a, b) = Σ ((rssi(r) - μ_a) - (rssi(s) - μ_b))²

    Args:
        a: First fingerprint.
        b: Second fingerprint.

    Returns:
        Mean-removed squared distance in dBm². 0.0 when the fingerprints
        share no radio source.

    Raises:
        ValueError: If either fingerprint is None.

    Examples:
        >>> q = Fingerprint.from_rssi({"AP1": -50.0, "AP2": -60.0})
        >>> r = Fingerprint.from_rssi({"AP1": -45.0, "AP2": -55.0})
        >>> no_mean_sqr_signal_distance(q, r)  # same pattern, 5 dB offset
        0.0
    """
    _check_pair(a, b)
    rssi_a, rssi_b = _matched_pairs(a, b)
    if rssi_a.size == 0:
        return 0.0
    diff = (rssi_a - rssi_a.mean()) - (rssi_b - rssi_b.mean())
    return float(np.dot(diff, diff))


def no_mean_signal_distance(a: Fingerprint, b: Fingerprint) -> float:
    """Square root of :func:`no_mean_sqr_signal_distance`."""
    return float(np.sqrt(no_mean_sqr_signal_distance(a, b)))


_METRIC_FUNCTIONS = {
    SQEUCLIDEAN: sqr_signal_distance,
    NO_MEAN_SQEUCLIDEAN: no_mean_sqr_signal_distance,
}


def check_metric(metric: str) -> None:
    """Raise ValueError if ``metric`` is not a supported metric name."""
    if metric not in _METRIC_FUNCTIONS:
        raise ValueError(
            f"Unsupported metric: '{metric}'. "
            f"Use one of {', '.join(repr(m) for m in SUPPORTED_METRICS)}."
        )


def pairwise_sqr_signal_distances(
    query: Fingerprint,
    library: Sequence[Fingerprint],
    metric: str = SQEUCLIDEAN,
) -> np.ndarray:
    """
    Compute squared signal distances from ``query`` to every library entry.

    Args:
        query: Query fingerprint.
        library: Reference fingerprints, length M.
        metric: 'sqeuclidean' (plain) or 'no_mean_sqeuclidean'
                (mean-removed).

    Returns:
        Array of shape (M,), element i is the distance to ``library[i]``.

    Raises:
        ValueError: If the metric is not supported or query or library
                    is None.

    Examples:
        >>> q = Fingerprint.from_rssi({"AP1": -51.0})
        >>> lib = [Fingerprint.from_rssi({"AP1": v}) for v in (-50.0, -70.0, -60.0)]
        >>> pairwise_sqr_signal_distances(q, lib)
        array([  1., 361.,  81.])
    """
    check_metric(metric)
    if query is None:
        raise ValueError("query fingerprint must not be None")
    if library is None:
        raise ValueError("fingerprint library must not be None")

    fn = _METRIC_FUNCTIONS[metric]
    distances = np.zeros(len(library))
    for i, reference in enumerate(library):
        distances[i] = fn(query, reference)
    return distances
