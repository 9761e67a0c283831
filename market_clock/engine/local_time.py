"""Conversion between the KST reference clock and an exchange's wall clock."""

from datetime import datetime, timedelta

from market_clock.core.time_utils import KST, KST_OFFSET_HOURS, hours_to_minutes, to_kst
from market_clock.core.types import ExchangeDefinition
from market_clock.engine.offset import effective_offset


def kst_difference_minutes(offset: float) -> int:
    """Minutes the KST clock runs ahead of a clock at ``offset`` hours."""

    return hours_to_minutes(KST_OFFSET_HOURS - offset)


def to_local(definition: ExchangeDefinition, kst_instant: datetime) -> datetime:
    """Return the exchange's naive local wall-clock reading at ``kst_instant``."""

    kst_wall = to_kst(kst_instant).replace(tzinfo=None)
    offset = effective_offset(definition, kst_instant).offset
    return kst_wall - timedelta(minutes=kst_difference_minutes(offset))


def to_kst_from_local(local_wall: datetime, offset: float) -> datetime:
    """Inverse of ``to_local`` for a known offset; returns an aware KST datetime."""

    kst_wall = local_wall.replace(tzinfo=None) + timedelta(minutes=kst_difference_minutes(offset))
    return kst_wall.replace(tzinfo=KST)
