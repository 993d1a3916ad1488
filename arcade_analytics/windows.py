import logging
from datetime import datetime, timedelta, timezone
from typing import Tuple

from .events import TimeWindow, WindowKind, as_utc

logger = logging.getLogger(__name__)

LAST30_SPAN = timedelta(days=30)
# Windows are inclusive at both ends, so a preceding window stops one tick
# before the next one starts.
TICK = timedelta(microseconds=1)


def _month_start(moment: datetime, tz) -> datetime:
    local = moment.astimezone(tz)
    return local.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _previous_month_start(month_start: datetime) -> datetime:
    return (month_start - timedelta(days=1)).replace(day=1)


def _utc(moment: datetime) -> datetime:
    return moment.astimezone(timezone.utc)


def resolve_windows(
    kind: WindowKind, now: datetime, tz=timezone.utc
) -> Tuple[TimeWindow, TimeWindow]:
    """Return the (current, comparison) windows for ``kind`` as of ``now``.

    Month boundaries are taken in ``tz``. The returned datetimes are UTC.
    ``now`` is always passed in by the caller; nothing here reads the clock.
    """
    kind = WindowKind(kind)
    now = as_utc(now)

    if kind is WindowKind.LAST30:
        current_start = now - LAST30_SPAN
        current = TimeWindow(current_start, now, kind)
        comparison = TimeWindow(
            current_start - LAST30_SPAN, current_start - TICK, kind
        )
    elif kind is WindowKind.THIS_MONTH:
        this_month = _month_start(now, tz)
        last_month = _previous_month_start(this_month)
        current = TimeWindow(_utc(this_month), now, kind)
        comparison = TimeWindow(_utc(last_month), _utc(this_month) - TICK, kind)
    else:
        this_month = _month_start(now, tz)
        last_month = _previous_month_start(this_month)
        month_before = _previous_month_start(last_month)
        current = TimeWindow(_utc(last_month), _utc(this_month) - TICK, kind)
        comparison = TimeWindow(
            _utc(month_before), _utc(last_month) - TICK, kind
        )

    logger.debug(
        f"Resolved {kind.value}: current {current.start.isoformat()} .. "
        f"{current.end.isoformat()}, comparison {comparison.start.isoformat()} .. "
        f"{comparison.end.isoformat()}"
    )
    return current, comparison
