"""Unit tests for radiomap.fingerprinting.distance module.

Tests the source-keyed signal distances used by the matcher, including
the zero-overlap policy and duplicated sources.

Author: Navigation Engineer
Date: 2024
"""

import numpy as np
import pytest

from radiomap.fingerprinting import (
    Beacon,
    Fingerprint,
    LocatedFingerprint,
    RssiReading,
    WifiAccessPoint,
    no_mean_signal_distance,
    no_mean_sqr_signal_distance,
    pairwise_sqr_signal_distances,
    shared_source_count,
    signal_distance,
    sqr_signal_distance,
)


def wifi(bssid):
    return WifiAccessPoint(bssid=bssid, frequency=2.4e9)


class TestSqrSignalDistance:
    """Test suite for sqr_signal_distance()."""

    def test_single_source(self):
        """Test squared distance for one shared access point."""
        a = Fingerprint.from_rssi({"AP1": -51.0})
        b = Fingerprint.from_rssi({"AP1": -50.0})

        assert sqr_signal_distance(a, b) == pytest.approx(1.0)

    def test_multiple_sources(self):
        """Test squared distance summed over shared access points."""
        a = Fingerprint.from_rssi({"AP1": -50.0, "AP2": -60.0, "AP3": -70.0})
        b = Fingerprint.from_rssi({"AP1": -52.0, "AP2": -58.0, "AP3": -72.0})

        assert sqr_signal_distance(a, b) == pytest.approx(12.0)
        assert signal_distance(a, b) == pytest.approx(np.sqrt(12.0))

    def test_partial_overlap_ignores_unshared(self):
        """Test that sources heard by one side only contribute nothing."""
        a = Fingerprint.from_rssi({"AP1": -50.0, "AP2": -60.0})
        b = Fingerprint.from_rssi({"AP1": -53.0, "AP3": -90.0})

        assert sqr_signal_distance(a, b) == pytest.approx(9.0)

    def test_no_shared_source_is_zero(self):
        """Test that disjoint fingerprints have zero distance."""
        a = Fingerprint.from_rssi({"AP1": -50.0})
        b = Fingerprint.from_rssi({"AP2": -90.0})

        assert sqr_signal_distance(a, b) == 0.0
        assert signal_distance(a, b) == 0.0

    def test_empty_fingerprint_is_zero(self):
        """Test that an empty fingerprint has zero distance to anything."""
        a = Fingerprint(readings=[])
        b = Fingerprint.from_rssi({"AP1": -50.0})

        assert sqr_signal_distance(a, b) == 0.0
        assert sqr_signal_distance(a, a) == 0.0

    def test_identical_is_zero(self):
        """Test that identical fingerprints have zero distance."""
        a = Fingerprint.from_rssi({"AP1": -50.0, "AP2": -61.5})

        assert sqr_signal_distance(a, Fingerprint(readings=a.readings)) == 0.0

    def test_symmetric(self):
        """Test that the distance does not depend on argument order."""
        a = Fingerprint.from_rssi({"AP1": -50.0, "AP2": -60.0, "AP4": -80.0})
        b = Fingerprint.from_rssi({"AP2": -65.0, "AP1": -41.0, "AP3": -75.0})

        assert sqr_signal_distance(a, b) == pytest.approx(sqr_signal_distance(b, a))
        assert no_mean_sqr_signal_distance(a, b) == pytest.approx(
            no_mean_sqr_signal_distance(b, a)
        )

    def test_duplicate_sources_compare_every_pair(self):
        """Test that duplicated sources contribute every cross pair."""
        ap = wifi("AP1")
        a = Fingerprint(readings=[RssiReading(ap, -50.0), RssiReading(ap, -54.0)])
        b = Fingerprint(readings=[RssiReading(ap, -52.0)])

        # (−50+52)² + (−54+52)² = 8
        assert sqr_signal_distance(a, b) == pytest.approx(8.0)
        assert shared_source_count(a, b) == 2

        c = Fingerprint(readings=[RssiReading(ap, -51.0), RssiReading(ap, -53.0)])
        # 1 + 9 + 9 + 1
        assert sqr_signal_distance(a, c) == pytest.approx(20.0)
        assert shared_source_count(a, c) == 4

    def test_source_identity_not_frequency(self):
        """Test that readings pair by BSSID regardless of frequency or SSID."""
        a = Fingerprint(readings=[RssiReading(WifiAccessPoint("AP1", 2.4e9), -50.0)])
        b = Fingerprint(readings=[RssiReading(WifiAccessPoint("AP1", 5.0e9, ssid="x"), -56.0)])

        assert sqr_signal_distance(a, b) == pytest.approx(36.0)

    def test_wifi_and_beacon_never_pair(self):
        """Test that a Wi-Fi AP and a beacon with the same id do not match."""
        a = Fingerprint(readings=[RssiReading(wifi("1"), -50.0)])
        b = Fingerprint(readings=[RssiReading(Beacon(identifiers=["1"], transmitted_power=-59.0), -70.0)])

        assert shared_source_count(a, b) == 0
        assert sqr_signal_distance(a, b) == 0.0

    def test_located_fingerprint_ignores_position(self):
        """Test that positions do not affect the signal distance."""
        a = LocatedFingerprint.from_rssi({"AP1": -50.0}, position=[0.0, 0.0])
        b = LocatedFingerprint.from_rssi({"AP1": -50.0}, position=[100.0, 100.0])

        assert sqr_signal_distance(a, b) == 0.0

    def test_none_error(self):
        """Test that None arguments raise ValueError."""
        a = Fingerprint.from_rssi({"AP1": -50.0})

        with pytest.raises(ValueError, match="must be provided"):
            sqr_signal_distance(a, None)
        with pytest.raises(ValueError, match="must be provided"):
            sqr_signal_distance(None, a)


class TestNoMeanSignalDistance:
    """Test suite for no_mean_sqr_signal_distance()."""

    def test_constant_offset_removed(self):
        """Test that a constant RSSI offset yields zero distance."""
        a = Fingerprint.from_rssi({"AP1": -50.0, "AP2": -60.0, "AP3": -75.0})
        b = Fingerprint.from_rssi({"AP1": -57.0, "AP2": -67.0, "AP3": -82.0})

        assert no_mean_sqr_signal_distance(a, b) == pytest.approx(0.0)
        assert sqr_signal_distance(a, b) == pytest.approx(3 * 49.0)

    def test_pattern_difference(self):
        """Test the mean-removed distance on a differing pattern."""
        a = Fingerprint.from_rssi({"AP1": -50.0, "AP2": -60.0})
        b = Fingerprint.from_rssi({"AP1": -60.0, "AP2": -60.0})

        # a centred: (5, -5); b centred: (0, 0) -> 25 + 25
        assert no_mean_sqr_signal_distance(a, b) == pytest.approx(50.0)
        assert no_mean_signal_distance(a, b) == pytest.approx(np.sqrt(50.0))

    def test_mean_over_shared_sources_only(self):
        """Test that unshared readings do not shift the means."""
        a = Fingerprint.from_rssi({"AP1": -50.0, "AP2": -60.0, "AP9": -20.0})
        b = Fingerprint.from_rssi({"AP1": -55.0, "AP2": -65.0, "AP8": -99.0})

        assert no_mean_sqr_signal_distance(a, b) == pytest.approx(0.0)

    def test_no_shared_source_is_zero(self):
        """Test that disjoint fingerprints have zero mean-removed distance."""
        a = Fingerprint.from_rssi({"AP1": -50.0})
        b = Fingerprint.from_rssi({"AP2": -90.0})

        assert no_mean_sqr_signal_distance(a, b) == 0.0

    def test_single_shared_source_is_zero(self):
        """Test that one shared source carries no pattern information."""
        a = Fingerprint.from_rssi({"AP1": -50.0})
        b = Fingerprint.from_rssi({"AP1": -90.0})

        assert no_mean_sqr_signal_distance(a, b) == pytest.approx(0.0)


class TestPairwiseSqrSignalDistances:
    """Test suite for pairwise_sqr_signal_distances()."""

    def test_library_order(self):
        """Test that distances come back in library order."""
        query = Fingerprint.from_rssi({"AP1": -51.0})
        library = [Fingerprint.from_rssi({"AP1": v}) for v in (-50.0, -70.0, -60.0)]

        distances = pairwise_sqr_signal_distances(query, library)

        np.testing.assert_array_almost_equal(distances, [1.0, 361.0, 81.0])

    def test_no_mean_metric(self):
        """Test the mean-removed metric through the pairwise helper."""
        query = Fingerprint.from_rssi({"AP1": -50.0, "AP2": -60.0})
        library = [
            Fingerprint.from_rssi({"AP1": -40.0, "AP2": -50.0}),
            Fingerprint.from_rssi({"AP1": -60.0, "AP2": -60.0}),
        ]

        distances = pairwise_sqr_signal_distances(query, library, metric="no_mean_sqeuclidean")

        np.testing.assert_array_almost_equal(distances, [0.0, 50.0])

    def test_empty_library(self):
        """Test that an empty library gives an empty array."""
        query = Fingerprint.from_rssi({"AP1": -51.0})

        assert pairwise_sqr_signal_distances(query, []).shape == (0,)

    def test_invalid_metric_error(self):
        """Test that an unsupported metric raises ValueError."""
        query = Fingerprint.from_rssi({"AP1": -51.0})

        with pytest.raises(ValueError, match="Unsupported metric"):
            pairwise_sqr_signal_distances(query, [], metric="euclidean")

    def test_none_query_error(self):
        """Test that a None query raises ValueError."""
        with pytest.raises(ValueError, match="query fingerprint must not be None"):
            pairwise_sqr_signal_distances(None, [])

    def test_none_library_error(self):
        """Test that a None library raises ValueError."""
        query = Fingerprint.from_rssi({"AP1": -51.0})

        with pytest.raises(ValueError, match="library must not be None"):
            pairwise_sqr_signal_distances(query, None)
