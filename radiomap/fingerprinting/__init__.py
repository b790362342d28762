"""Radio fingerprint matching for indoor positioning.

This module implements nearest-neighbor search over a library (radio map)
of located fingerprints, using a signal distance over sparse, source-keyed
RSSI readings.

Main components:
    - WifiAccessPoint, Beacon: Radio sources identified by BSSID / beacon ids
    - RssiReading, Fingerprint, LocatedFingerprint: Immutable value types
    - sqr_signal_distance and variants: Signal-space distance metrics
    - FingerprintMatcher, find_nearest_to, find_k_nearest_to: NN / k-NN search
    - validate_library: Library quality checks
    - generate_survey_library, simulate_query: Synthetic surveys

Example usage:
    >>> from radiomap.fingerprinting import (
    ...     Fingerprint,
    ...     FingerprintMatcher,
    ...     LocatedFingerprint,
    ... )
    >>> library = [
    ...     LocatedFingerprint.from_rssi({"AP1": -50.0}, position=[0.0, 0.0]),
    ...     LocatedFingerprint.from_rssi({"AP1": -70.0}, position=[10.0, 0.0]),
    ...     LocatedFingerprint.from_rssi({"AP1": -60.0}, position=[0.0, 10.0]),
    ... ]
    >>> matcher = FingerprintMatcher(library)
    >>> query = Fingerprint.from_rssi({"AP1": -51.0})
    >>> matcher.find_nearest_to(query).position
    array([0., 0.])
    >>> fps, d2 = matcher.find_k_nearest_with_distances(query, k=2)
    >>> d2
    [1.0, 81.0]

Author: Navigation Engineer
Date: 2024
"""

from .distance import (
    NO_MEAN_SQEUCLIDEAN,
    SQEUCLIDEAN,
    SUPPORTED_METRICS,
    no_mean_signal_distance,
    no_mean_sqr_signal_distance,
    pairwise_sqr_signal_distances,
    shared_source_count,
    signal_distance,
    sqr_signal_distance,
)
from .library import print_library_summary, validate_library
from .matcher import (
    FingerprintMatcher,
    find_k_nearest_to,
    find_k_nearest_with_distances,
    find_nearest_to,
)
from .simulation import generate_survey_library, log_distance_rssi, simulate_query
from .sources import Beacon, RadioSource, RadioSourceType, WifiAccessPoint
from .types import Fingerprint, LocatedFingerprint, Location, RssiReading

__all__ = [
    # Radio sources
    "RadioSource",
    "RadioSourceType",
    "WifiAccessPoint",
    "Beacon",
    # Core types
    "RssiReading",
    "Fingerprint",
    "LocatedFingerprint",
    "Location",
    # Distance metrics
    "SQEUCLIDEAN",
    "NO_MEAN_SQEUCLIDEAN",
    "SUPPORTED_METRICS",
    "sqr_signal_distance",
    "signal_distance",
    "no_mean_sqr_signal_distance",
    "no_mean_signal_distance",
    "shared_source_count",
    "pairwise_sqr_signal_distances",
    # Nearest-neighbor search
    "FingerprintMatcher",
    "find_nearest_to",
    "find_k_nearest_to",
    "find_k_nearest_with_distances",
    # Library checks
    "validate_library",
    "print_library_summary",
    # Simulation
    "log_distance_rssi",
    "generate_survey_library",
    "simulate_query",
]
