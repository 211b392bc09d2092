"""Diagnostics package.

- validate_reference: optional (requires ephemeris extras + a JPL SPK kernel;
  plotting additionally needs the diagnostics extras)
"""

__all__ = ["validate_reference"]
