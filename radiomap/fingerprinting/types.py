"""Type definitions and data structures for fingerprint-based localization.

This module defines the value types handed to the fingerprint matcher:
RSSI readings, fingerprints (readings without a known position) and
located fingerprints (readings collected at a surveyed position).

All types are immutable once constructed and validate their fields in
``__post_init__``.

Author: Navigation Engineer
Date: 2024
"""

import math
import warnings
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .sources import RadioSource, WifiAccessPoint, as_sources


# Type alias for clarity and documentation
Location = np.ndarray  # Shape (d,), d=2 (x, y) or d=3 (x, y, z)


@dataclass(frozen=True)
class RssiReading:
    """
    Received signal strength reading from a single radio source.

    Attributes:
        source: Radio source the reading was received from.
        rssi: Received signal strength in dBm.
        rssi_std: Optional standard deviation of the RSSI in dBm (> 0).

    Examples:
        >>> ap = WifiAccessPoint(bssid="AP1", frequency=2.4e9)
        >>> reading = RssiReading(source=ap, rssi=-50.0)
    """

    source: RadioSource
    rssi: float
    rssi_std: Optional[float] = None

    def __post_init__(self) -> None:
        """Validate reading fields."""
        if not isinstance(self.source, RadioSource):
            raise TypeError(
                f"source must be a RadioSource, got {type(self.source).__name__}"
            )
        if not math.isfinite(self.rssi):
            raise ValueError(f"rssi must be finite, got {self.rssi}")
        if self.rssi_std is not None and not self.rssi_std > 0.0:
            raise ValueError(f"rssi_std must be > 0, got {self.rssi_std}")

        if self.rssi > 0.0:
            warnings.warn(
                f"RSSI of {self.rssi} dBm from {self.source.identity} is positive; "
                f"received power is normally below 0 dBm.",
                UserWarning,
            )

    def has_same_source(self, other: "RssiReading") -> bool:
        """Return True if ``other`` was received from the same radio source."""
        return self.source.is_same_source(other.source)


@dataclass(frozen=True)
class Fingerprint:
    """
    Collection of RSSI readings measured at one (unknown) position.

    Readings are kept in the order given. A radio source is normally
    measured once per fingerprint, but duplicates are tolerated and each
    duplicate reading is compared independently by the distance metrics.

    Attributes:
        readings: Readings composing the fingerprint. Any sequence is
                  accepted and stored as a tuple; empty is allowed.

    Examples:
        >>> ap1 = WifiAccessPoint("AP1", 2.4e9)
        >>> ap2 = WifiAccessPoint("AP2", 2.4e9)
        >>> fp = Fingerprint(readings=[RssiReading(ap1, -50.0), RssiReading(ap2, -62.0)])
        >>> len(fp)
        2

        >>> # Shorthand for Wi-Fi readings keyed by BSSID
        >>> fp = Fingerprint.from_rssi({"AP1": -50.0, "AP2": -62.0})
    """

    readings: Tuple[RssiReading, ...]

    def __post_init__(self) -> None:
        """Validate readings and store them as an immutable tuple."""
        if self.readings is None:
            raise ValueError("readings must not be None (use an empty sequence)")

        readings = tuple(self.readings)
        for reading in readings:
            if not isinstance(reading, RssiReading):
                raise TypeError(
                    f"readings must contain RssiReading objects, "
                    f"got {type(reading).__name__}"
                )
        object.__setattr__(self, "readings", readings)

    @classmethod
    def from_rssi(
        cls, rssi_by_bssid: Mapping[str, float], frequency: float = 2.4e9, **kwargs
    ) -> "Fingerprint":
        """
        Build a fingerprint from a ``{bssid: rssi}`` mapping of Wi-Fi readings.

        Args:
            rssi_by_bssid: RSSI in dBm keyed by access point BSSID.
            frequency: Carrier frequency assigned to every access point (Hz).
            **kwargs: Extra fields for the concrete class (e.g., ``position``
                      for LocatedFingerprint).

        Returns:
            New instance of ``cls``.
        """
        readings = [
            RssiReading(WifiAccessPoint(bssid=bssid, frequency=frequency), float(rssi))
            for bssid, rssi in rssi_by_bssid.items()
        ]
        return cls(readings=readings, **kwargs)

    def __len__(self) -> int:
        return len(self.readings)

    def __iter__(self) -> Iterator[RssiReading]:
        return iter(self.readings)

    @property
    def sources(self) -> List[RadioSource]:
        """Distinct radio sources in first-seen order."""
        seen = {}
        for reading in self.readings:
            seen.setdefault(reading.source.identity, reading.source)
        return list(seen.values())

    @property
    def mean_rssi(self) -> float:
        """Mean RSSI over all readings (NaN if the fingerprint is empty)."""
        if not self.readings:
            return float("nan")
        return float(np.mean([r.rssi for r in self.readings]))

    def rssi_by_source(self) -> Dict[object, List[float]]:
        """Group RSSI values by source identity, keeping duplicates."""
        grouped: Dict[object, List[float]] = {}
        for reading in self.readings:
            grouped.setdefault(reading.source.identity, []).append(reading.rssi)
        return grouped

    def to_feature_vector(self, sources: Sequence[RadioSource]) -> np.ndarray:
        """
        Convert to a dense RSS feature vector over a fixed list of sources.

        Missing sources are NaN. Duplicate readings of the same source are
        averaged.

        Args:
            sources: Ordered radio sources defining the vector layout (N,).

        Returns:
            Array of shape (N,).

        Examples:
            >>> fp = Fingerprint.from_rssi({"AP1": -50.0, "AP3": -70.0})
            >>> aps = [WifiAccessPoint(b, 2.4e9) for b in ("AP1", "AP2", "AP3")]
            >>> fp.to_feature_vector(aps)
            array([-50.,  nan, -70.])
        """
        grouped = self.rssi_by_source()
        vector = np.full(len(sources), np.nan)
        for j, source in enumerate(as_sources(sources)):
            values = grouped.get(source.identity)
            if values:
                vector[j] = np.mean(values)
        return vector


@dataclass(frozen=True, eq=False)
class LocatedFingerprint(Fingerprint):
    """
    Fingerprint recorded at a known position (reference point).

    Located fingerprints make up the library (radio map) that query
    fingerprints are matched against. Equality is object identity, since
    two surveys with identical readings at the same spot are still
    distinct library entries.

    Attributes:
        readings: Readings composing the fingerprint.
        position: Reference point coordinates, shape (2,) or (3,).
        position_covariance: Optional position uncertainty, shape (d, d)
                              where d matches the position dimension.

    Examples:
        >>> rp = LocatedFingerprint.from_rssi(
        ...     {"AP1": -50.0, "AP2": -70.0}, position=np.array([0.0, 0.0])
        ... )
        >>> rp.dimensions
        2

    Notes:
        - Position and covariance are stored as read-only float arrays.
        - A 2D position requires a 2x2 covariance; 3D requires 3x3.
    """

    position: Location = None
    position_covariance: Optional[np.ndarray] = field(default=None)

    # Library entries compare by identity, not by readings.
    __eq__ = object.__eq__
    __hash__ = object.__hash__

    def __post_init__(self) -> None:
        """Validate position and covariance consistency."""
        super().__post_init__()

        if self.position is None:
            raise ValueError("position must not be None")

        position = np.array(self.position, dtype=float)
        if position.ndim != 1 or position.shape[0] not in (2, 3):
            raise ValueError(
                f"position must be a 2D or 3D vector, got shape {position.shape}"
            )
        if not np.all(np.isfinite(position)):
            raise ValueError("position contains non-finite values (not allowed)")
        position.flags.writeable = False
        object.__setattr__(self, "position", position)

        if self.position_covariance is not None:
            covariance = np.array(self.position_covariance, dtype=float)
            d = position.shape[0]
            if covariance.shape != (d, d):
                raise ValueError(
                    f"position_covariance must be ({d}, {d}) for a {d}D position, "
                    f"got shape {covariance.shape}"
                )
            covariance.flags.writeable = False
            object.__setattr__(self, "position_covariance", covariance)

    @property
    def dimensions(self) -> int:
        """Dimensionality (d) of the position (2 or 3)."""
        return self.position.shape[0]

    @property
    def is_2d(self) -> bool:
        return self.dimensions == 2

    def __repr__(self) -> str:
        """Readable string representation."""
        cov_str = ", with covariance" if self.position_covariance is not None else ""
        return (
            f"LocatedFingerprint("
            f"position={self.position.tolist()}, "
            f"n_readings={len(self.readings)}{cov_str})"
        )
