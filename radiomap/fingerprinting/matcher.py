"""Nearest-neighbor matching of radio fingerprints.

This module ranks a library of located fingerprints (the radio map) by
signal similarity to a query fingerprint whose position is unknown. Only
the readings take part in the comparison; positions are carried along
untouched for the caller (e.g., a position estimator) to use.

Key rules:
    - NN rule:   i* = argmin_i D²(z, f_i), first entry wins on ties
    - k-NN rule: K(z) = first k entries of the library after a stable
                 ascending sort on D²(z, f_i)

The search is a brute-force scan over the whole library. Signal space has
no natural metric tree without assuming a source layout, so callers that
need spatial pruning (floor, zone, previous fix) filter the library before
calling in.

Every operation is available both as a module-level function taking the
library explicitly and as a FingerprintMatcher method bound to a library.

Author: Navigation Engineer
Date: 2024
"""

import numbers
import warnings
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .distance import (
    SQEUCLIDEAN,
    check_metric,
    pairwise_sqr_signal_distances,
    shared_source_count,
)
from .types import Fingerprint, LocatedFingerprint


def _check_query(query: Fingerprint) -> None:
    if query is None:
        raise ValueError("query fingerprint must not be None")
    if not isinstance(query, Fingerprint):
        raise TypeError(f"query must be a Fingerprint, got {type(query).__name__}")


def _check_library(library: Sequence[LocatedFingerprint]) -> List[LocatedFingerprint]:
    """Validate library entries and return them as a list in library order."""
    if library is None:
        raise ValueError("fingerprint library must not be None")

    entries = list(library)
    for i, entry in enumerate(entries):
        if not isinstance(entry, LocatedFingerprint):
            raise TypeError(
                f"library entry {i} must be a LocatedFingerprint, "
                f"got {type(entry).__name__}"
            )
    return entries


def _check_k(k: int, n_entries: int) -> None:
    if isinstance(k, bool) or not isinstance(k, numbers.Integral):
        raise TypeError(f"k must be an integer, got {type(k).__name__}")
    if k < 1:
        raise ValueError(f"k must be >= 1, got k={k}")
    if k > n_entries:
        raise ValueError(
            f"k={k} exceeds number of library fingerprints M={n_entries}. "
            f"Use k <= {n_entries}."
        )


def _ranked_distances(
    query: Fingerprint, entries: List[LocatedFingerprint], metric: str
) -> np.ndarray:
    distances = pairwise_sqr_signal_distances(query, entries, metric=metric)

    # All-zero distances usually mean nothing overlapped, not a perfect match.
    if entries and not np.any(distances):
        if not any(shared_source_count(query, entry) for entry in entries):
            warnings.warn(
                "Query fingerprint shares no radio source with any library "
                "fingerprint; results follow library order.",
                UserWarning,
            )
    return distances


def find_nearest_to(
    query: Fingerprint,
    library: Sequence[LocatedFingerprint],
    metric: str = SQEUCLIDEAN,
) -> LocatedFingerprint:
    """
    Find the library fingerprint closest in signal space to ``query``.

    Implements the NN decision rule:
        i* = argmin_{i=1..M} D²(z, f_i)

    Args:
        query: Query fingerprint z (readings only).
        library: Located fingerprints f_1..f_M, in library order.
        metric: 'sqeuclidean' or 'no_mean_sqeuclidean'.

    Returns:
        Nearest library entry. On ties, the entry appearing first in the
        library.

    Raises:
        ValueError: If query or library is None, the library is empty, or
                    the metric is not supported.
        TypeError: If query or a library entry has the wrong type.

    Examples:
        >>> library = [
        ...     LocatedFingerprint.from_rssi({"AP1": -50.0}, position=[0.0, 0.0]),
        ...     LocatedFingerprint.from_rssi({"AP1": -70.0}, position=[10.0, 0.0]),
        ... ]
        >>> query = Fingerprint.from_rssi({"AP1": -51.0})
        >>> find_nearest_to(query, library).position
        array([0., 0.])
    """
    _check_query(query)
    entries = _check_library(library)
    check_metric(metric)
    if not entries:
        raise ValueError("fingerprint library is empty; no nearest fingerprint exists")

    distances = _ranked_distances(query, entries, metric)

    # np.argmin returns the first occurrence of the minimum
    i_star = int(np.argmin(distances))
    return entries[i_star]


def find_k_nearest_with_distances(
    query: Fingerprint,
    library: Sequence[LocatedFingerprint],
    k: int,
    nearest_fingerprints: Optional[List[LocatedFingerprint]] = None,
    nearest_sqr_distances: Optional[List[float]] = None,
    metric: str = SQEUCLIDEAN,
) -> Tuple[List[LocatedFingerprint], List[float]]:
    """
    Find the k library fingerprints closest to ``query`` and their distances.

    Implements the k-NN selection:
        K(z) = indices of the k smallest D²(z, f_i)

    using a stable sort, so entries with equal distance keep library order.

    Output lists may be supplied by the caller to be reused across calls.
    They must be supplied together; both are cleared before being filled
    and are returned as-is. When neither is supplied, new lists are built.

    Args:
        query: Query fingerprint z.
        library: Located fingerprints f_1..f_M.
        k: Number of neighbors, 1 <= k <= M.
        nearest_fingerprints: Optional output list for the fingerprints.
        nearest_sqr_distances: Optional output list for the squared
                               signal distances.
        metric: 'sqeuclidean' or 'no_mean_sqeuclidean'.

    Returns:
        Tuple (fingerprints, sqr_distances), both of length k and ordered
        from closest to farthest.

    Raises:
        ValueError: If query or library is None, k is out of range, only
                    one output list is supplied, or the metric is not
                    supported.
        TypeError: If k is not an integer or an argument has the wrong type.

    Examples:
        >>> fps, d2 = find_k_nearest_with_distances(query, library, k=2)
        >>> d2
        [1.0, 81.0]
    """
    _check_query(query)
    entries = _check_library(library)
    _check_k(k, len(entries))
    check_metric(metric)
    if (nearest_fingerprints is None) != (nearest_sqr_distances is None):
        raise ValueError(
            "nearest_fingerprints and nearest_sqr_distances must be supplied together"
        )

    distances = _ranked_distances(query, entries, metric)
    k_indices = np.argsort(distances, kind="stable")[:k]

    if nearest_fingerprints is None:
        nearest_fingerprints = []
        nearest_sqr_distances = []
    else:
        nearest_fingerprints.clear()
        nearest_sqr_distances.clear()

    for i in k_indices:
        nearest_fingerprints.append(entries[i])
        nearest_sqr_distances.append(float(distances[i]))

    return nearest_fingerprints, nearest_sqr_distances


def find_k_nearest_to(
    query: Fingerprint,
    library: Sequence[LocatedFingerprint],
    k: int,
    metric: str = SQEUCLIDEAN,
) -> List[LocatedFingerprint]:
    """
    Find the k library fingerprints closest to ``query``.

    Same selection as :func:`find_k_nearest_with_distances`, without the
    distances.

    Returns:
        List of k located fingerprints ordered from closest to farthest.

    Examples:
        >>> [fp.position.tolist() for fp in find_k_nearest_to(query, library, k=2)]
        [[0.0, 0.0], [0.0, 10.0]]
    """
    nearest, _ = find_k_nearest_with_distances(query, library, k, metric=metric)
    return nearest


class FingerprintMatcher:
    """Nearest-neighbor matcher bound to a fingerprint library.

    The matcher keeps a reference to the caller's library and never copies
    or mutates it, so changes the caller makes between calls are seen by
    later queries. It holds no other state and can be shared across
    threads as long as the library is not modified during a call.

    Attributes:
        fingerprints: Library of located fingerprints searched by queries.
        metric: Signal distance metric ('sqeuclidean' or
                'no_mean_sqeuclidean').

    Example:
        >>> matcher = FingerprintMatcher(library)
        >>> nearest = matcher.find_nearest_to(query)
        >>> top3 = matcher.find_k_nearest_to(query, k=3)
        >>> top3, d2 = matcher.find_k_nearest_with_distances(query, k=3)
    """

    def __init__(
        self, fingerprints: Sequence[LocatedFingerprint], metric: str = SQEUCLIDEAN
    ):
        """
        Initialize matcher.

        Args:
            fingerprints: Library of located fingerprints.
            metric: Signal distance metric.

        Raises:
            ValueError: If fingerprints is None or the metric is not supported.
        """
        if fingerprints is None:
            raise ValueError("fingerprint library must not be None")
        check_metric(metric)
        self._fingerprints = fingerprints
        self._metric = metric

    @property
    def fingerprints(self) -> Sequence[LocatedFingerprint]:
        return self._fingerprints

    @property
    def metric(self) -> str:
        return self._metric

    def find_nearest_to(self, query: Fingerprint) -> LocatedFingerprint:
        """Nearest library fingerprint to ``query``. See :func:`find_nearest_to`."""
        return find_nearest_to(query, self._fingerprints, metric=self._metric)

    def find_k_nearest_to(self, query: Fingerprint, k: int) -> List[LocatedFingerprint]:
        """k nearest library fingerprints. See :func:`find_k_nearest_to`."""
        return find_k_nearest_to(query, self._fingerprints, k, metric=self._metric)

    def find_k_nearest_with_distances(
        self,
        query: Fingerprint,
        k: int,
        nearest_fingerprints: Optional[List[LocatedFingerprint]] = None,
        nearest_sqr_distances: Optional[List[float]] = None,
    ) -> Tuple[List[LocatedFingerprint], List[float]]:
        """k nearest fingerprints with distances. See :func:`find_k_nearest_with_distances`."""
        return find_k_nearest_with_distances(
            query,
            self._fingerprints,
            k,
            nearest_fingerprints=nearest_fingerprints,
            nearest_sqr_distances=nearest_sqr_distances,
            metric=self._metric,
        )

    def __repr__(self) -> str:
        return (
            f"FingerprintMatcher(n_fingerprints={len(self._fingerprints)}, "
            f"metric='{self._metric}')"
        )
