"""
Priority bands for progressive prefetching.

After the current slide, neighbours are swept in alternating bands so that
nearby slides get a low-resolution image quickly while the closest ones are
upgraded to full resolution before distant low-resolution work begins.
"""

import dataclasses
from typing import Iterator, List, Tuple

from slide_models import ResourceState


@dataclasses.dataclass(frozen=True)
class Band:
    """A contiguous range of circular distances fetched at one tier."""
    tier: ResourceState
    start: int
    end: int


# Order matters: these boundaries do not overlap per tier.
BANDS = (
    Band(ResourceState.LOW, 1, 10),
    Band(ResourceState.HIGH, 1, 3),
    Band(ResourceState.LOW, 11, 15),
    Band(ResourceState.HIGH, 4, 9),
    Band(ResourceState.LOW, 16, 20),
    Band(ResourceState.HIGH, 10, 20),
)


def max_distance(count: int) -> int:
    """Largest meaningful circular distance in a sequence of ``count`` slides."""
    return count // 2


def slides_at_distance(center: int, distance: int, count: int) -> List[int]:
    """Slide indices ``distance`` steps from ``center``: forward first, then backward."""
    if distance == 0:
        return [center]
    forward = (center + distance) % count
    backward = (center - distance + count) % count
    if forward == backward:
        return [forward]
    return [forward, backward]


def clamp_band(band: Band, count: int) -> Tuple[int, int]:
    """Return the band's (start, end) clamped to the circular maximum.

    Only the end is clamped; the start is left unclamped, so a band lying
    wholly beyond the circular maximum yields an empty range (start > end)
    and never revisits the farthest distance.
    """
    limit = max_distance(count)
    return band.start, min(band.end, limit)


def plan_bands(center: int, count: int) -> Iterator[Tuple[ResourceState, int]]:
    """Yield (tier, slide_index) pairs in priority order, excluding the current slide."""
    if count <= 1:
        return
    for band in BANDS:
        start, end = clamp_band(band, count)
        for distance in range(start, end + 1):
            for index in slides_at_distance(center, distance, count):
                yield band.tier, index
