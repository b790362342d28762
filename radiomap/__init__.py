"""Radio-map modules for fingerprint-based indoor positioning.

This package contains reusable components for matching radio fingerprints:
- fingerprinting: Radio sources, readings, located fingerprints and the
  nearest-neighbor signal matcher
"""

__version__ = "0.1.0"
