import math
from typing import Iterable, List, Tuple

from yoga.domain.models import FilterState, SortField, VideoEntry


def rounded_minutes(seconds: float) -> int:
    """Rounds to the nearest whole minute, halves away from zero."""
    return int(math.floor(seconds / 60 + 0.5))


def passes_filters(video: VideoEntry, filters: FilterState) -> bool:
    if filters.name and filters.name.lower() not in video.name.lower():
        return False
    minutes = rounded_minutes(video.duration)
    # Unknown duration can never satisfy a bound
    if filters.min_enabled and (video.duration <= 0 or minutes < filters.min_minutes):
        return False
    if filters.max_enabled and (video.duration <= 0 or minutes > filters.max_minutes):
        return False
    if filters.tags:
        query = filters.tags.lower()
        if not any(query in tag.lower() for tag in video.tags):
            return False
    return True


def _sort_key(field: SortField):
    if field == SortField.DURATION:
        return lambda v: v.duration
    if field == SortField.AGE:
        return lambda v: v.mod_time
    return lambda v: v.name.lower()


def apply_filters_and_sort(
    videos: Iterable[VideoEntry],
    filters: FilterState,
    sort_field: SortField = SortField.NAME,
    ascending: bool = True,
) -> List[VideoEntry]:
    """Returns the filtered videos in display order. Ties keep input order."""
    filtered = [v for v in videos if passes_filters(v, filters)]
    return sorted(filtered, key=_sort_key(sort_field), reverse=not ascending)


def toggle_sort(current: SortField, ascending: bool, target: SortField) -> Tuple[SortField, bool]:
    if current == target:
        return current, not ascending
    return target, True


def _parse_bound(value: str, label: str) -> Tuple[bool, int]:
    value = (value or "").strip()
    if not value:
        return False, 0
    try:
        minutes = int(value)
    except ValueError:
        raise ValueError(f"invalid {label} minutes: {value!r}")
    if minutes < 0:
        raise ValueError(f"{label} minutes must be positive")
    return True, minutes


def parse_filter_inputs(name: str = "", min_minutes: str = "", max_minutes: str = "", tags: str = "") -> FilterState:
    """Validates raw filter form values.

    Raises ValueError for non-numeric or negative bounds and for min > max.
    """
    min_enabled, min_value = _parse_bound(min_minutes, "min")
    max_enabled, max_value = _parse_bound(max_minutes, "max")
    if min_enabled and max_enabled and min_value > max_value:
        raise ValueError("min minutes cannot exceed max minutes")
    return FilterState(
        name=(name or "").strip(),
        min_enabled=min_enabled,
        min_minutes=min_value,
        max_enabled=max_enabled,
        max_minutes=max_value,
        tags=(tags or "").strip(),
    )


def describe_filters(filters: FilterState) -> str:
    parts = []
    if filters.name:
        parts.append(f'name contains "{filters.name}"')
    if filters.tags:
        parts.append(f'tags contain "{filters.tags}"')
    if filters.min_enabled:
        parts.append(f">={filters.min_minutes} min")
    if filters.max_enabled:
        parts.append(f"<={filters.max_minutes} min")
    return ", ".join(parts) if parts else "(none)"
