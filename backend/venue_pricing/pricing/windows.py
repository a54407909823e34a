"""Time-window matching for pricing rules."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from venue_pricing.pricing.errors import ConfigurationError
from venue_pricing.pricing.types import (
    HierarchyLevel,
    PricingRule,
    TimeWindow,
    WindowType,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class WindowMatch:
    """Outcome of scanning a rule's windows for one hour."""

    is_active: bool
    price_per_hour: Decimal | None = None
    window: TimeWindow | None = None


NO_MATCH = WindowMatch(is_active=False)


def parse_clock(value: str) -> int:
    """Convert ``HH:MM`` to minutes since midnight."""

    hours, sep, minutes = value.partition(":")
    if not sep:
        raise ConfigurationError(f"Invalid time of day: {value!r}")
    try:
        hour_value = int(hours)
        minute_value = int(minutes)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid time of day: {value!r}") from exc
    # 24:00 is the only valid hour-24 value; it closes a window at midnight.
    if not (0 <= hour_value <= 24 and 0 <= minute_value < 60) or (
        hour_value == 24 and minute_value
    ):
        raise ConfigurationError(f"Invalid time of day: {value!r}")
    return hour_value * 60 + minute_value


@lru_cache(maxsize=64)
def zone_for(timezone: str) -> ZoneInfo:
    """Look up an IANA zone, reporting unknown names as configuration errors."""

    try:
        return ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown timezone: {timezone!r}") from exc


def local_clock(hour: datetime, timezone: str) -> tuple[int, int]:
    """Return (minutes since local midnight, weekday with 0 = Sunday)."""

    local = hour.astimezone(zone_for(timezone))
    return local.hour * 60 + local.minute, local.isoweekday() % 7


def in_clock_range(minute_of_day: int, start: int, end: int) -> bool:
    """Half-open clock range check that wraps past midnight when end < start."""

    if end < start:
        return minute_of_day >= start or minute_of_day < end
    return start <= minute_of_day < end


def window_matches(
    window: TimeWindow,
    hour: datetime,
    *,
    anchor: datetime,
    timezone: str,
) -> bool:
    """Decide whether a single window applies at ``hour``.

    Raises:
        ConfigurationError: the window lacks the bounds its type requires.
    """

    if window.window_type is WindowType.DURATION_BASED:
        if window.start_minute is None or window.end_minute is None:
            raise ConfigurationError("Duration window requires start_minute and end_minute")
        elapsed = int((hour - anchor).total_seconds() // 60)
        return window.start_minute <= elapsed < window.end_minute

    if not window.start_time or not window.end_time:
        raise ConfigurationError("Absolute window requires start_time and end_time")
    start = parse_clock(window.start_time)
    end = parse_clock(window.end_time)
    minute_of_day, weekday = local_clock(hour, timezone)
    if window.days_of_week and weekday not in window.days_of_week:
        return False
    return in_clock_range(minute_of_day, start, end)


def _is_grace_window(rule: PricingRule, window: TimeWindow, is_event_booking: bool) -> bool:
    return (
        not is_event_booking
        and rule.applies_to_level is HierarchyLevel.EVENT
        and window.price_per_hour == 0
    )


def match_rule(
    rule: PricingRule,
    hour: datetime,
    *,
    timezone: str,
    is_event_booking: bool,
) -> WindowMatch:
    """Return the first window of ``rule`` that applies at ``hour``.

    The caller has already checked the rule's effective range. Windows are
    scanned in declared order; overlapping windows are not merged and the
    earlier one wins. Zero-priced event windows only apply to event bookings.
    """

    for index, window in enumerate(rule.time_windows):
        if _is_grace_window(rule, window, is_event_booking):
            continue
        try:
            matched = window_matches(
                window, hour, anchor=rule.effective_from, timezone=timezone
            )
        except ConfigurationError as exc:
            logger.warning(
                "Skipping window %s of rule %s: %s", index, rule.id, exc
            )
            continue
        if matched:
            return WindowMatch(
                is_active=True, price_per_hour=window.price_per_hour, window=window
            )
    return NO_MATCH


__all__ = [
    "NO_MATCH",
    "WindowMatch",
    "in_clock_range",
    "local_clock",
    "match_rule",
    "parse_clock",
    "window_matches",
    "zone_for",
]
