from __future__ import annotations

import math
from typing import Iterable, List

from .classify import filter_running
from .models import DistanceHistogram, HistogramBin, NormalizedActivity
from .units import METERS_PER_KM, METERS_PER_MILE, format_range_km, format_range_miles, meters_to_miles

MAX_BINS = 50


def generate_histogram(activities: Iterable[NormalizedActivity], use_miles: bool = True) -> DistanceHistogram:
    """Bucket running distances into 1 mi (or 1 km) bins.

    Runs past the last bin land in it; empty bins after the last populated
    one are dropped.
    """
    runs = filter_running(activities)
    if not runs:
        return DistanceHistogram(bins=[])

    width = METERS_PER_MILE if use_miles else METERS_PER_KM
    max_distance = max(0.0, max(run.distance for run in runs))
    num_bins = min(int(math.ceil(max_distance / width)) + 1, MAX_BINS)

    bins: List[HistogramBin] = []
    for i in range(num_bins):
        start, end = i * width, (i + 1) * width
        bins.append(HistogramBin(range=format_range_miles(start, end), range_km=format_range_km(start, end)))

    for run in runs:
        index = max(0, int(math.floor(run.distance / width)))
        index = min(index, num_bins - 1)
        bins[index].count += 1
        bins[index].distance += run.distance
        bins[index].distance_miles += meters_to_miles(run.distance)

    while bins and bins[-1].count == 0:
        bins.pop()
    return DistanceHistogram(bins=bins)
