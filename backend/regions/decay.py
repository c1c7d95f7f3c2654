from __future__ import annotations

MAX_OPACITY = 0.9
MIN_OPACITY = 0.4
FULL_DECAY_YEARS = 10

HIGHLIGHT_OPACITY = 1.0


def recency_opacity(last_visited_year: int, current_year: int) -> float:
    """
    Fill opacity for a region last visited in `last_visited_year`.

    0.9 for a visit this year, fading linearly to 0.4 once the visit is
    `FULL_DECAY_YEARS` or more in the past. Years in the future count as this year.
    """
    delta = max(0, int(current_year) - int(last_visited_year))
    fraction = min(1.0, delta / float(FULL_DECAY_YEARS))
    return MAX_OPACITY - (MAX_OPACITY - MIN_OPACITY) * fraction
