"""Compact ephemeris decoding and SSB body positions.

Comparing against a full JPL kernel needs the optional extra:
  pip install "moonephem[ephemeris]"
"""

def require_ephemeris():
    """Raise a clear error if ephemeris extras aren't installed."""
    try:
        import jplephem  # noqa: F401
    except ImportError as e:
        raise RuntimeError('Reference ephemeris support requires: pip install "moonephem[ephemeris]"') from e
