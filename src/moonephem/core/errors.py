class MoonephemError(Exception):
    """Base error."""

class LayoutError(MoonephemError):
    """Raised when series metadata does not describe a usable buffer layout."""

class UnknownSeriesError(MoonephemError, KeyError):
    """Raised when a series kind is absent from the store's metadata."""

class OutOfRangeError(MoonephemError, ValueError):
    """Raised when a Julian Date falls outside a series' covered intervals."""

class TooFewSamplesError(MoonephemError, ValueError):
    """Raised when bracket detection is given fewer than 4 samples."""

class NoPeakFoundError(MoonephemError, ValueError):
    """Raised when re-sampling a bracket reveals no local maximum."""
