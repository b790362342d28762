"""Unit tests for radiomap.fingerprinting.library module.

Tests library validation and summary printing.

Author: Navigation Engineer
Date: 2024
"""

import pytest

from radiomap.fingerprinting import (
    Fingerprint,
    LocatedFingerprint,
    RssiReading,
    WifiAccessPoint,
    print_library_summary,
    validate_library,
)


@pytest.fixture
def sample_library():
    """Create a small valid 2D library."""
    return [
        LocatedFingerprint.from_rssi({"AP1": -50.0, "AP2": -60.0}, position=[0.0, 0.0]),
        LocatedFingerprint.from_rssi({"AP1": -60.0, "AP2": -50.0}, position=[5.0, 0.0]),
        LocatedFingerprint.from_rssi({"AP1": -70.0, "AP3": -55.0}, position=[0.0, 5.0]),
        LocatedFingerprint.from_rssi({"AP2": -65.0, "AP3": -45.0}, position=[5.0, 5.0]),
    ]


class TestValidateLibrary:
    """Test suite for validate_library()."""

    def test_valid_library(self, sample_library):
        """Test that a clean library validates without warnings."""
        result = validate_library(sample_library)

        assert result["valid"]
        assert result["errors"] == []
        assert result["warnings"] == []
        stats = result["stats"]
        assert stats["n_fingerprints"] == 4
        assert stats["n_sources"] == 3
        assert stats["dimensions"] == [2]
        assert stats["readings_per_fingerprint_min"] == 2
        assert stats["rssi_min"] == -70.0
        assert stats["rssi_max"] == -45.0

    def test_empty_library_error(self):
        """Test that an empty library is invalid."""
        result = validate_library([])

        assert not result["valid"]
        assert "Library is empty" in result["errors"]

    def test_none_library_error(self):
        """Test that None raises ValueError."""
        with pytest.raises(ValueError, match="library must not be None"):
            validate_library(None)

    def test_unlocated_entry_error(self, sample_library):
        """Test that unlocated entries are reported as errors."""
        result = validate_library(sample_library + [Fingerprint.from_rssi({"AP1": -50.0})])

        assert not result["valid"]
        assert any("Entry 4" in e for e in result["errors"])

    def test_mixed_dimensions_error(self, sample_library):
        """Test that mixing 2D and 3D positions is an error."""
        library = sample_library + [
            LocatedFingerprint.from_rssi({"AP1": -50.0}, position=[0.0, 0.0, 3.0])
        ]

        result = validate_library(library)

        assert not result["valid"]
        assert any("Mixed position dimensionality" in e for e in result["errors"])

    def test_quality_warnings(self):
        """Test warnings for empty, duplicated and small libraries."""
        ap = WifiAccessPoint("AP1", 2.4e9)
        library = [
            LocatedFingerprint(readings=[], position=[0.0, 0.0]),
            LocatedFingerprint(
                readings=[RssiReading(ap, -50.0), RssiReading(ap, -52.0)],
                position=[0.0, 0.0],
            ),
        ]

        result = validate_library(library)

        assert result["valid"]
        warnings = " ".join(result["warnings"])
        assert "only 2 fingerprint(s)" in warnings
        assert "no readings" in warnings
        assert "duplicated sources" in warnings
        assert "duplicate position" in warnings

    def test_strict_rssi_range(self, sample_library):
        """Test that strict mode flags very weak RSSI values."""
        library = sample_library + [
            LocatedFingerprint.from_rssi({"AP1": -130.0}, position=[9.0, 9.0])
        ]

        assert any("-120 dBm" in w for w in validate_library(library)["warnings"])
        assert validate_library(library, strict=False)["warnings"] == []


class TestPrintLibrarySummary:
    """Test suite for print_library_summary()."""

    def test_summary_output(self, sample_library, capsys):
        """Test that the summary prints key statistics."""
        print_library_summary(sample_library)

        out = capsys.readouterr().out
        assert "Fingerprint Library Summary" in out
        assert "Fingerprints:     4" in out
        assert "Radio Sources:    3" in out
        assert "Dimension 0: [0.00, 5.00]" in out

    def test_summary_reports_errors(self, capsys):
        """Test that validation errors are printed."""
        print_library_summary([])

        out = capsys.readouterr().out
        assert "ERROR: Library is empty" in out

    def test_summary_from_iterator(self, sample_library, capsys):
        """Test that a single-pass iterable still reports position bounds."""
        print_library_summary(iter(sample_library))

        out = capsys.readouterr().out
        assert "Fingerprints:     4" in out
        assert "Dimension 1: [0.00, 5.00]" in out
