"""
moonephem.search.peaks
----------------------
Local-maximum detection and refinement over a sampled "quality" function.

The search is generic over the sampled object type T (a date record, a
distance record, a bare float ...). Each object is reduced to a domain value
(e.g. a Julian Date) and a quality (higher is better). To find minima, negate
the quantity in the quality function.

Refinement only subdivides brackets that already show a local maximum:
every round samples 1/4, 2/4, 3/4 of the bracket and keeps the sub-bracket(s)
around the new maxima, halving the bracket width. Quality evaluations per
bracket are therefore about 3 * log2(initial_width / target_width).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, Iterable, List, Sequence, TypeVar

from ..core.errors import NoPeakFoundError, TooFewSamplesError

log = logging.getLogger(__name__)

T = TypeVar("T")

MIN_SAMPLES = 4


@dataclass(frozen=True)
class QualitySample(Generic[T]):
    obj: T
    value: float
    quality: float


@dataclass(frozen=True)
class QualitySampleRange(Generic[T]):
    """Three samples with peak.quality >= both bounds."""
    lower_bound: QualitySample[T]
    peak: QualitySample[T]
    upper_bound: QualitySample[T]

    @property
    def width(self) -> float:
        return self.upper_bound.value - self.lower_bound.value


@dataclass(frozen=True)
class PeakObject(Generic[T]):
    peak: T
    closest_source: T   # the originally sampled object nearest the peak
    quality: float
    value: float


def to_samples(
    objects: Iterable[T],
    get_value: Callable[[T], float],
    get_quality: Callable[[T], float],
) -> List[QualitySample[T]]:
    return [QualitySample(obj=o, value=get_value(o), quality=get_quality(o)) for o in objects]


def sample_range(
    values: Iterable[float],
    get_quality: Callable[[T], float],
    create_object: Callable[[float], T],
) -> List[QualitySample[T]]:
    """Materializes an object at each domain value and scores it."""
    samples = []
    for v in values:
        obj = create_object(v)
        samples.append(QualitySample(obj=obj, value=v, quality=get_quality(obj)))
    return samples


def find_brackets(samples: Sequence[QualitySample[T]]) -> List[QualitySampleRange[T]]:
    """
    Slides a window of three over samples ordered by domain value and emits
    every window whose middle quality is >= both neighbours. The result may be
    empty (monotone input).
    """
    if len(samples) < MIN_SAMPLES:
        raise TooFewSamplesError(f"Too few samples: need at least {MIN_SAMPLES}, got {len(samples)}")

    ranges = []
    for lower, mid, upper in zip(samples, samples[1:], samples[2:]):
        if mid.quality >= lower.quality and mid.quality >= upper.quality:
            ranges.append(QualitySampleRange(lower_bound=lower, peak=mid, upper_bound=upper))
    return ranges


def refine(
    bracket: QualitySampleRange[T],
    get_quality: Callable[[T], float],
    create_object: Callable[[float], T],
    target_width: float,
) -> QualitySample[T]:
    """
    Narrows a bracket until its width is below target_width and returns the
    peak sample of the final bracket. If a round reveals several sub-brackets,
    each is refined and the best result wins (the earliest one on ties).

    Raises NoPeakFoundError when a round's five points show no local maximum.
    """
    if not target_width > 0:
        raise ValueError("target_width must be positive")

    # Depth-first, left to right, so ties resolve the same as nested recursion.
    pending = [bracket]
    finished: List[QualitySample[T]] = []
    while pending:
        current = pending.pop()
        width = current.width
        if width < target_width:
            finished.append(current.peak)
            continue

        lower = current.lower_bound.value
        mid_samples = sample_range(
            (lower + (p * width) / 4 for p in (1, 2, 3)),
            get_quality,
            create_object,
        )
        points = [current.lower_bound, *mid_samples, current.upper_bound]

        sub_brackets = find_brackets(points)
        if not sub_brackets:
            raise NoPeakFoundError(
                f"No peak found refining [{lower}, {current.upper_bound.value}] "
                f"(qualities {[s.quality for s in points]})"
            )
        if len(sub_brackets) > 1:
            log.debug("bracket [%s, %s] split into %d peaks", lower, current.upper_bound.value, len(sub_brackets))
        pending.extend(reversed(sub_brackets))

    best = finished[0]
    for s in finished[1:]:
        if s.quality > best.quality:
            best = s
    return best


def get_unrefined_peaks(
    objects: Sequence[T],
    get_value: Callable[[T], float],
    get_quality: Callable[[T], float],
) -> List[PeakObject[T]]:
    """Coarse peaks: the best original sample of each bracket, no extra sampling."""
    brackets = find_brackets(to_samples(objects, get_value, get_quality))
    return [
        PeakObject(peak=b.peak.obj, closest_source=b.peak.obj, quality=b.peak.quality, value=b.peak.value)
        for b in brackets
    ]


def get_peaks(
    objects: Sequence[T],
    get_value: Callable[[T], float],
    get_quality: Callable[[T], float],
    create_object: Callable[[float], T],
    target_width: float,
) -> List[PeakObject[T]]:
    """Peaks refined until their bracket is narrower than target_width (domain units)."""
    brackets = find_brackets(to_samples(objects, get_value, get_quality))
    peaks = []
    for b in brackets:
        refined = refine(b, get_quality, create_object, target_width)
        peaks.append(
            PeakObject(peak=refined.obj, closest_source=b.peak.obj, quality=refined.quality, value=refined.value)
        )
    log.debug("refined %d peaks from %d samples", len(peaks), len(objects))
    return peaks
