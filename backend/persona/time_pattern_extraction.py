"""
Time-Pattern Extraction

Derives booking and browsing temporal habits from event timestamps:

1. booking_time - weekday and time band bookings are made in
2. browsing_time - hour browsing sessions start, mean session length
3. seasonal_preference - season the user searches in most
4. planning_horizon - days between booking and check-in
5. personal_events - calendar events likely to trigger a trip, by month

Each sub-extractor works only on its own input sequence and returns an
empty-state record when that sequence is empty or absent. Records whose
timestamps cannot be parsed are skipped from the affected aggregate only.

Timestamps are normalized to UTC before bucketing.
"""

import logging
from typing import Any, List, Mapping, Optional, Sequence

import pandas as pd

from backend.persona.metric_primitives import (
    days_between,
    distribution_of,
    field_value,
    mean,
    modal_label,
    parse_timestamp,
    round_half_up,
)
from backend.persona.models import (
    BookingTimePattern,
    BrowsingTimePattern,
    PersonalEventAnalysis,
    PlanningHorizon,
    SeasonalFactors,
    SeasonalPreference,
    TimePatternReport,
)

logger = logging.getLogger(__name__)


# Declared order doubles as the tie-break order for modal labels
WEEKDAYS = ('Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday')
TIME_BANDS = ('morning', 'afternoon', 'evening', 'night')
SEASONS = ('spring', 'summer', 'fall', 'winter')
HOUR_LABELS = tuple(f"{hour:02d}:00" for hour in range(24))

SPONTANEOUS_MAX_DAYS = 14     # mean < 14 days
MODERATE_PLANNER_MAX_DAYS = 60  # 14 <= mean < 60 days

# Substrings of a calendar title or description that suggest a trip
TRAVEL_TRIGGER_KEYWORDS = (
    'vacation', 'holiday', 'trip', 'travel', 'flight', 'hotel',
    'wedding', 'anniversary', 'birthday', 'graduation', 'reunion',
    'conference', 'business trip', 'offsite', 'retreat',
)

SEASONAL_FACTORS = {
    'spring': (
        ['Mild temperatures', 'Blooming flowers', 'Occasional rain'],
        ['Shoulder season prices', 'Less crowded attractions', 'Pack layers for changing weather'],
    ),
    'summer': (
        ['Warm temperatures', 'Long daylight hours', 'Peak tourism'],
        ['Higher prices', 'Advanced booking recommended', 'Heat management'],
    ),
    'fall': (
        ['Cooling temperatures', 'Fall foliage', 'Harvest season'],
        ['Shoulder season prices', 'Less crowded attractions', 'Pack layers for changing weather'],
    ),
    'winter': (
        ['Cold temperatures', 'Possible snow', 'Holiday season'],
        ['Winter activities', 'Holiday pricing variations', 'Weather-appropriate clothing'],
    ),
}


def _identity(label: str) -> str:
    return label


def _timestamps(records: Sequence[Any], field_name: str) -> pd.DatetimeIndex:
    """Parsed timestamps of `field_name`, skipping records that do not parse."""
    stamps = []
    for record in records:
        ts = parse_timestamp(field_value(record, field_name))
        if ts is None:
            logger.debug("Skipping record with unparseable %s", field_name)
            continue
        stamps.append(ts)
    return pd.DatetimeIndex(stamps)


def time_band_for_hour(hour: int) -> str:
    """morning 05-12, afternoon 12-17, evening 17-22, night 22-05"""
    if 5 <= hour < 12:
        return 'morning'
    if 12 <= hour < 17:
        return 'afternoon'
    if 17 <= hour < 22:
        return 'evening'
    return 'night'


def season_for_month(month: int) -> str:
    """Northern-hemisphere season for a calendar month (1-12)."""
    if 3 <= month <= 5:
        return 'spring'
    if 6 <= month <= 8:
        return 'summer'
    if 9 <= month <= 11:
        return 'fall'
    return 'winter'


def planning_style(average_days: int) -> str:
    if average_days < SPONTANEOUS_MAX_DAYS:
        return 'Spontaneous'
    if average_days < MODERATE_PLANNER_MAX_DAYS:
        return 'Moderate Planner'
    return 'Advance Planner'


def detect_booking_patterns(bookings: Optional[Sequence[Mapping[str, Any]]]) -> BookingTimePattern:
    """Modal weekday and time band of booking timestamps."""
    stamps = _timestamps(bookings or [], 'booking_date')
    if len(stamps) == 0:
        return BookingTimePattern()

    # pandas dayofweek is Monday=0; shift so Sunday leads
    day_labels = [WEEKDAYS[(day + 1) % 7] for day in stamps.dayofweek]
    band_labels = [time_band_for_hour(hour) for hour in stamps.hour]

    day_distribution = distribution_of(day_labels, _identity, categories=WEEKDAYS)
    time_distribution = distribution_of(band_labels, _identity, categories=TIME_BANDS)

    return BookingTimePattern(
        preferred_day_of_week=modal_label(day_distribution),
        preferred_time_of_day=modal_label(time_distribution),
        day_distribution=day_distribution,
        time_distribution=time_distribution,
    )


def analyze_browsing_hours(sessions: Optional[Sequence[Mapping[str, Any]]]) -> BrowsingTimePattern:
    """Modal session start hour and mean session duration in minutes."""
    starts: List[pd.Timestamp] = []
    durations: List[float] = []

    for session in sessions or []:
        started = parse_timestamp(field_value(session, 'start_time'))
        if started is None:
            logger.debug("Skipping session with unparseable start_time")
            continue
        starts.append(started)

        ended = parse_timestamp(field_value(session, 'end_time'))
        if ended is not None and ended >= started:
            durations.append((ended - started).total_seconds() / 60.0)

    if not starts:
        return BrowsingTimePattern()

    hour_labels = [HOUR_LABELS[hour] for hour in pd.DatetimeIndex(starts).hour]
    hourly_distribution = distribution_of(hour_labels, _identity, categories=HOUR_LABELS)

    preferred_hour = HOUR_LABELS.index(modal_label(hourly_distribution))
    average_minutes = mean(durations)

    return BrowsingTimePattern(
        preferred_browsing_time=f"{preferred_hour:02d}:00 - {(preferred_hour + 1) % 24:02d}:00",
        preferred_hour=preferred_hour,
        average_session_minutes=round(average_minutes, 1) if average_minutes is not None else 0.0,
        hourly_distribution=hourly_distribution,
    )


def detect_seasonal_trends(searches: Optional[Sequence[Mapping[str, Any]]]) -> SeasonalPreference:
    """Season searched in most often."""
    stamps = _timestamps(searches or [], 'date')
    if len(stamps) == 0:
        return SeasonalPreference()

    season_labels = [season_for_month(month) for month in stamps.month]
    seasonal_distribution = distribution_of(season_labels, _identity, categories=SEASONS)

    return SeasonalPreference(
        preferred_season=modal_label(seasonal_distribution),
        seasonal_distribution=seasonal_distribution,
    )


def calculate_planning_window(bookings: Optional[Sequence[Mapping[str, Any]]]) -> PlanningHorizon:
    """
    How far ahead of check-in the user books.

    Each booking contributes its booking-to-check-in gap rounded to whole
    days; the style is decided on the rounded mean.
    """
    windows: List[int] = []

    for booking in bookings or []:
        booked_at = parse_timestamp(field_value(booking, 'booking_date'))
        check_in = parse_timestamp(field_value(booking, 'check_in'))
        if booked_at is None or check_in is None:
            continue
        days = round_half_up(days_between(booked_at, check_in))
        if days < 0:
            logger.debug("Skipping booking with check-in before booking date")
            continue
        windows.append(days)

    if not windows:
        return PlanningHorizon()

    average_days = round_half_up(mean(windows))

    return PlanningHorizon(
        average_planning_days=average_days,
        planning_style=planning_style(average_days),
        shortest_planning_days=min(windows),
        longest_planning_days=max(windows),
    )


def is_travel_trigger(event: Any) -> bool:
    """True when the event title or description mentions a travel keyword."""
    for name in ('title', 'description'):
        text = field_value(event, name)
        if isinstance(text, str) and any(keyword in text.lower() for keyword in TRAVEL_TRIGGER_KEYWORDS):
            return True
    return False


def detect_personal_events(calendar_events: Optional[Sequence[Mapping[str, Any]]]) -> PersonalEventAnalysis:
    """
    Calendar events that may trigger travel, and the month they cluster in.

    Every matching event is counted; only those with a parseable date are
    grouped by month. Months are listed in first-seen order, which also
    settles ties for the peak month.
    """
    triggers = [event for event in calendar_events or [] if is_travel_trigger(event)]
    if not triggers:
        return PersonalEventAnalysis()

    month_labels = []
    for event in triggers:
        ts = parse_timestamp(field_value(event, 'date'))
        if ts is None:
            logger.debug("Calendar event with unparseable date left out of monthly grouping")
            continue
        month_labels.append(f"{ts.year:04d}-{ts.month:02d}")

    events_by_month = distribution_of(month_labels, _identity)
    peak_month = modal_label(events_by_month)

    return PersonalEventAnalysis(
        potential_travel_event_count=len(triggers),
        peak_travel_month=peak_month,
        peak_event_count=int(events_by_month[peak_month].count) if peak_month else 0,
        events_by_month=events_by_month,
    )


def extract_time_patterns(activity: Optional[Mapping[str, Any]]) -> TimePatternReport:
    """
    Extract all time patterns from an activity bundle.

    Args:
        activity: {'bookings': [...], 'sessions': [...], 'searches': [...],
            'calendar_events': [...]};
            any key may be missing, the bundle itself may be None

    Returns:
        TimePatternReport with every sub-record populated or empty
    """
    activity = activity or {}
    bookings = activity.get('bookings') or []

    return TimePatternReport(
        booking_time=detect_booking_patterns(bookings),
        browsing_time=analyze_browsing_hours(activity.get('sessions') or []),
        seasonal_preference=detect_seasonal_trends(activity.get('searches') or []),
        planning_horizon=calculate_planning_window(bookings),
        personal_events=detect_personal_events(activity.get('calendar_events') or []),
    )


def get_seasonal_factors(start_date: Any) -> Optional[SeasonalFactors]:
    """
    Seasonal context for a trip starting on `start_date`.

    Returns None when the date cannot be parsed.
    """
    ts = parse_timestamp(start_date)
    if ts is None:
        return None

    season = season_for_month(ts.month)
    characteristics, considerations = SEASONAL_FACTORS[season]

    return SeasonalFactors(
        season=season.capitalize(),
        characteristics=list(characteristics),
        travel_considerations=list(considerations),
    )
