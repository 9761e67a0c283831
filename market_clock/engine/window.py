"""Trading-window membership and next-event countdown.

All arithmetic happens in minutes since local midnight (0-1439). A window
whose end is numerically earlier than its start spans midnight.
"""

from datetime import datetime, time

from market_clock.core.time_utils import MINUTES_PER_DAY, minute_of_day
from market_clock.core.types import EVENT_PRIORITY, EventKind, ExchangeDefinition, WindowEvaluation


def in_window(now_min: int, start_min: int, end_min: int) -> bool:
    """Half-open membership test that understands midnight-crossing windows."""

    if end_min < start_min:
        return now_min >= start_min or now_min < end_min
    return start_min <= now_min < end_min


def forward_distance(now_min: int, boundary_min: int) -> int:
    """Minutes until ``boundary_min`` strictly after ``now_min``, wrapping past midnight."""

    distance = boundary_min - now_min
    if distance <= 0:
        distance += MINUTES_PER_DAY
    return distance


def _candidates(definition: ExchangeDefinition, is_open: bool, is_lunch: bool) -> dict[EventKind, int]:
    candidates: dict[EventKind, int] = {}
    lunch = definition.lunch_break
    if not is_open:
        candidates[EventKind.OPEN] = minute_of_day(definition.open_time)
        return candidates

    candidates[EventKind.CLOSE] = minute_of_day(definition.close_time)
    if lunch is not None:
        if is_lunch:
            candidates[EventKind.LUNCH_END] = minute_of_day(lunch.end)
        else:
            candidates[EventKind.LUNCH_START] = minute_of_day(lunch.start)
    return candidates


def evaluate(definition: ExchangeDefinition, local_wall: datetime | time) -> WindowEvaluation:
    """Classify a local wall-clock reading and count down to the next boundary.

    Boundaries are chosen at minute granularity; the seconds of ``local_wall``
    only shorten the countdown, so ``minutes_to_next`` reaches 0 during the
    final minute before an event.
    """

    now_min = minute_of_day(local_wall)
    open_min = minute_of_day(definition.open_time)
    close_min = minute_of_day(definition.close_time)

    is_open = in_window(now_min, open_min, close_min)
    is_lunch = False
    if is_open and definition.lunch_break is not None:
        is_lunch = in_window(
            now_min,
            minute_of_day(definition.lunch_break.start),
            minute_of_day(definition.lunch_break.end),
        )

    distances = {
        kind: forward_distance(now_min, boundary)
        for kind, boundary in _candidates(definition, is_open, is_lunch).items()
    }
    # Ties fall back to EVENT_PRIORITY order.
    next_event = min(distances, key=lambda kind: (distances[kind], EVENT_PRIORITY.index(kind)))

    seconds_to_next = distances[next_event] * 60 - local_wall.second
    return WindowEvaluation(
        is_open=is_open,
        is_lunch_break=is_lunch,
        minutes_to_next=seconds_to_next // 60,
        seconds_to_next=seconds_to_next,
        next_event=next_event,
    )
