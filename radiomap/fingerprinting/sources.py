"""Radio source definitions for fingerprint-based localization.

A radio source is any identifiable transmitter whose signal strength can be
recorded in a fingerprint. Fingerprint matching only needs to know whether
two readings come from the same source, so every source kind exposes a
hashable ``identity`` and nothing else is required by the matcher.

Two source kinds are provided:
    - WifiAccessPoint: identified by its BSSID (MAC address).
    - Beacon: Bluetooth LE beacon identified by its identifier list
      (e.g., iBeacon UUID / major / minor).

Author: Navigation Engineer
Date: 2024
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Hashable, Optional, Sequence, Tuple, Union


class RadioSourceType(Enum):
    """Enumeration of supported radio source kinds.

    Attributes:
        WIFI_ACCESS_POINT: IEEE 802.11 access point.
        BEACON: Bluetooth LE beacon.
    """

    WIFI_ACCESS_POINT = "wifi_access_point"
    BEACON = "beacon"


class RadioSource(ABC):
    """Abstract base class for anything with a radio source identity.

    Subclasses must provide ``source_type`` and ``identity``. Two sources
    are considered the same transmitter if and only if their identities
    are equal. The identity includes the source type, so a Wi-Fi BSSID can
    never be confused with a beacon identifier.
    """

    @property
    @abstractmethod
    def source_type(self) -> RadioSourceType:
        """Kind of radio source."""

    @property
    @abstractmethod
    def identity(self) -> Hashable:
        """Hashable key identifying this transmitter."""

    def is_same_source(self, other: "RadioSource") -> bool:
        """Return True if ``other`` refers to the same transmitter."""
        if not isinstance(other, RadioSource):
            return False
        return self.identity == other.identity


@dataclass(frozen=True)
class WifiAccessPoint(RadioSource):
    """
    Wi-Fi access point.

    Attributes:
        bssid: Basic service set identifier (typically the MAC address).
               Equality and hashing use the BSSID only.
        frequency: Carrier frequency in Hz (must be >= 0).
        ssid: Optional network name. Informational only.

    Examples:
        >>> ap = WifiAccessPoint(bssid="00:11:22:33:44:55", frequency=2.4e9)
        >>> ap == WifiAccessPoint("00:11:22:33:44:55", 5.0e9, ssid="lab")
        True
    """

    bssid: str
    frequency: float = field(compare=False)
    ssid: Optional[str] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        """Validate access point fields."""
        if not isinstance(self.bssid, str) or not self.bssid:
            raise ValueError(f"bssid must be a non-empty string, got {self.bssid!r}")
        if self.frequency is None:
            raise ValueError("frequency must not be None")
        if not self.frequency >= 0.0:
            raise ValueError(f"frequency must be >= 0 Hz, got {self.frequency}")

    @property
    def source_type(self) -> RadioSourceType:
        return RadioSourceType.WIFI_ACCESS_POINT

    @property
    def identity(self) -> Tuple[str, str]:
        return (self.source_type.value, self.bssid)


BeaconIdentifier = Union[str, int]


@dataclass(frozen=True)
class Beacon(RadioSource):
    """
    Bluetooth LE beacon.

    Attributes:
        identifiers: Ordered beacon identifiers (e.g., UUID, major, minor).
                     Stored as a tuple; equality and hashing use them only.
        transmitted_power: Calibrated transmitted power in dBm (RSSI
                           expected at 1 m).
        frequency: Carrier frequency in Hz (default 2.4 GHz).
        bluetooth_address: Optional MAC address of the beacon.
        beacon_type_code: Beacon layout type code.
        manufacturer: Bluetooth SIG manufacturer code.
        service_uuid: 16-bit service UUID, or -1 if not applicable.
        bluetooth_name: Optional advertised device name.

    Examples:
        >>> b = Beacon(identifiers=["f7826da6-4fa2-4e98-8024-bc5b71e0893e", 1, 7],
        ...            transmitted_power=-59.0)
        >>> b.id2
        1
    """

    DEFAULT_FREQUENCY = 2.4e9

    identifiers: Tuple[BeaconIdentifier, ...]
    transmitted_power: float = field(compare=False)
    frequency: float = field(default=DEFAULT_FREQUENCY, compare=False)
    bluetooth_address: Optional[str] = field(default=None, compare=False)
    beacon_type_code: int = field(default=0, compare=False)
    manufacturer: int = field(default=0, compare=False)
    service_uuid: int = field(default=-1, compare=False)
    bluetooth_name: Optional[str] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        """Validate beacon fields and freeze the identifier list."""
        if self.identifiers is None:
            raise ValueError("identifiers must not be None")
        if isinstance(self.identifiers, (str, bytes)):
            raise TypeError("identifiers must be a sequence of identifiers, not a string")

        identifiers = tuple(self.identifiers)
        if len(identifiers) == 0:
            raise ValueError("identifiers must contain at least one identifier")
        try:
            hash(identifiers)
        except TypeError as e:
            raise TypeError(f"identifiers must be hashable, got {identifiers!r}") from e
        object.__setattr__(self, "identifiers", identifiers)

        if self.frequency is None:
            raise ValueError("frequency must not be None")
        if not self.frequency >= 0.0:
            raise ValueError(f"frequency must be >= 0 Hz, got {self.frequency}")

    @property
    def source_type(self) -> RadioSourceType:
        return RadioSourceType.BEACON

    @property
    def identity(self) -> Tuple[str, Tuple[BeaconIdentifier, ...]]:
        return (self.source_type.value, self.identifiers)

    def get_identifier(self, i: int) -> Optional[BeaconIdentifier]:
        """Return the i-th identifier, or None if it does not exist."""
        if i < 0 or i >= len(self.identifiers):
            return None
        return self.identifiers[i]

    @property
    def id1(self) -> Optional[BeaconIdentifier]:
        return self.get_identifier(0)

    @property
    def id2(self) -> Optional[BeaconIdentifier]:
        return self.get_identifier(1)

    @property
    def id3(self) -> Optional[BeaconIdentifier]:
        return self.get_identifier(2)


def as_sources(items: Sequence[RadioSource]) -> Tuple[RadioSource, ...]:
    """Validate and freeze a sequence of radio sources."""
    sources = tuple(items)
    for source in sources:
        if not isinstance(source, RadioSource):
            raise TypeError(f"Expected RadioSource, got {type(source).__name__}")
    return sources
