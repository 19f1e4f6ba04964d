from typing import Iterable, List

from .models import NormalizedActivity

RUNNING_SPORT_TYPES = frozenset({"Run", "VirtualRun", "TrailRun"})


def is_running_activity(sport_type: str) -> bool:
    return sport_type in RUNNING_SPORT_TYPES


def filter_running(activities: Iterable[NormalizedActivity]) -> List[NormalizedActivity]:
    return [a for a in activities if is_running_activity(a.sport_type)]
