"""
Decision-Pattern Extraction

Derives higher-order behavioral traits by correlating searches, property
views and bookings:

1. impulsivity - how quickly searches turn into bookings
2. price_vs_quality - whether bookings trade price for rating or vice versa
3. uniqueness - appetite for unusual property types and new places
4. risk_tolerance - new destinations, low ratings, last-minute and long stays

Every sub-score is on the 0-100 scale (price_vs_quality on -100..100) and
every blend weight is a named constant below. Categories are decided on the
rounded score. Each analysis returns its empty state when there are no
bookings.
"""

import logging
from typing import Any, List, Mapping, Optional, Tuple

import pandas as pd

from backend.persona.metric_primitives import (
    clamped_weighted_score,
    days_between,
    field_value,
    hours_between,
    is_number,
    label_for_score,
    mean,
    parse_timestamp,
    percentage,
    round_half_up,
)
from backend.persona.models import (
    DecisionPatternReport,
    ImpulsivityAnalysis,
    PriceQualityAnalysis,
    RiskToleranceAnalysis,
    UniquenessAnalysis,
)

logger = logging.getLogger(__name__)


# ==================== Impulsivity ====================

RELATED_SEARCH_WINDOW_HOURS = 24.0
QUICK_DECISION_HOURS = 1.0
IMPULSIVITY_BASELINE = 100.0
DELIBERATION_DAY_PENALTY = 20.0     # points lost per day between search and booking
QUICK_DECISION_RATE_WEIGHT = 0.5

IMPULSIVITY_THRESHOLDS = [(70, 'Highly Impulsive'), (40, 'Moderately Impulsive')]
IMPULSIVITY_DEFAULT = 'Planned Decision Maker'

# ==================== Price vs Quality ====================

CONTEMPORARY_VIEW_WINDOW_DAYS = 7.0

# ==================== Uniqueness ====================

UNUSUAL_PROPERTY_TYPES = (
    'treehouse', 'castle', 'cave', 'igloo', 'lighthouse', 'container', 'boat', 'dome',
)
COMMON_PROPERTY_TYPES = ('hotel', 'apartment', 'resort', 'villa')

TYPE_UNIQUENESS_WEIGHT = 0.3
UNUSUAL_RATIO_WEIGHT = 0.4
DESTINATION_DIVERSITY_WEIGHT = 0.2
SEARCH_DIVERSITY_WEIGHT = 0.1

UNIQUENESS_THRESHOLDS = [(70, 'Novelty Seeker'), (40, 'Moderate Explorer')]
UNIQUENESS_DEFAULT = 'Comfort Seeker'

# ==================== Risk Tolerance ====================

LOW_RATING_THRESHOLD = 4.0
LAST_MINUTE_MAX_DAYS = 7
LONG_STAY_MIN_DAYS = 14

NEW_DESTINATION_WEIGHT = 0.4
LOW_RATING_WEIGHT = 0.3
LAST_MINUTE_WEIGHT = 0.2
LONG_STAY_WEIGHT = 0.1

RISK_TOLERANCE_THRESHOLDS = [(70, 'High Risk Tolerance'), (40, 'Moderate Risk Tolerance')]
RISK_TOLERANCE_DEFAULT = 'Low Risk Tolerance'


def _records(choices: Mapping[str, Any], key: str) -> List[Any]:
    return list(choices.get(key) or [])


def _text(value: Any) -> Optional[str]:
    """Lower-cased, stripped string, or None for blanks and non-strings."""
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip().lower()


def price_quality_preference(score: int) -> str:
    if score > 50:
        return 'Strongly Quality-Focused'
    if score > 20:
        return 'Quality-Focused'
    if score < -50:
        return 'Strongly Price-Focused'
    if score < -20:
        return 'Price-Focused'
    return 'Balanced Price-Quality'


def calculate_impulsivity_score(choices: Mapping[str, Any]) -> ImpulsivityAnalysis:
    """
    How quickly searching turns into booking.

    A search is related to a booking when it precedes the booking and either
    targets the same property or falls within 24 hours of it. The earliest
    related search starts the decision clock.

    Bookings with no related search are left out of the mean decision time
    but still count in the quick-decision rate denominator. When no booking
    has a related search there is nothing to time and the empty state is
    returned.
    """
    bookings = _records(choices, 'bookings')
    if not bookings:
        return ImpulsivityAnalysis()

    searches: List[Tuple[Any, pd.Timestamp]] = []
    for search in _records(choices, 'searches'):
        searched_at = parse_timestamp(field_value(search, 'date'))
        if searched_at is not None:
            searches.append((search, searched_at))

    decision_hours: List[float] = []
    quick_decisions = 0

    for booking in bookings:
        booked_at = parse_timestamp(field_value(booking, 'booking_date'))
        if booked_at is None:
            logger.debug("Skipping booking with unparseable booking_date")
            continue

        property_id = field_value(booking, 'property_id')
        related = [
            searched_at
            for search, searched_at in searches
            if searched_at <= booked_at and (
                (property_id is not None and field_value(search, 'property_id') == property_id)
                or hours_between(searched_at, booked_at) < RELATED_SEARCH_WINDOW_HOURS
            )
        ]
        if not related:
            continue

        hours = hours_between(min(related), booked_at)
        decision_hours.append(hours)
        if hours < QUICK_DECISION_HOURS:
            quick_decisions += 1

    if not decision_hours:
        return ImpulsivityAnalysis()

    average_hours = mean(decision_hours)
    quick_rate = percentage(quick_decisions, len(bookings))

    score = clamped_weighted_score([
        (IMPULSIVITY_BASELINE, 1.0),
        (average_hours / 24.0, -DELIBERATION_DAY_PENALTY),
        (quick_rate, QUICK_DECISION_RATE_WEIGHT),
    ])

    return ImpulsivityAnalysis(
        score=score.display,
        category=label_for_score(score.display, IMPULSIVITY_THRESHOLDS, IMPULSIVITY_DEFAULT),
        average_decision_hours=round(average_hours, 1),
        quick_decision_percentage=round(quick_rate, 1),
        raw_score=score.raw,
    )


def analyze_price_quality_tradeoff(choices: Mapping[str, Any]) -> PriceQualityAnalysis:
    """
    Compare each booking with the properties viewed within a week of it.

    Price and rating both above the contemporaneous mean is a quality choice;
    both below is a price choice. Score = (quality - price) / comparisons * 100.
    """
    bookings = _records(choices, 'bookings')
    viewed_properties = _records(choices, 'viewed_properties')
    if not bookings or not viewed_properties:
        return PriceQualityAnalysis()

    views: List[Tuple[pd.Timestamp, float, float]] = []
    for view in viewed_properties:
        viewed_at = parse_timestamp(field_value(view, 'view_date'))
        price = field_value(view, 'price')
        rating = field_value(view, 'rating')
        if viewed_at is None or not is_number(price) or not is_number(rating):
            continue
        views.append((viewed_at, float(price), float(rating)))

    quality_over_price = 0
    price_over_quality = 0

    for booking in bookings:
        booked_at = parse_timestamp(field_value(booking, 'booking_date'))
        price = field_value(booking, 'price')
        rating = field_value(booking, 'rating')
        if booked_at is None or not is_number(price) or not is_number(rating):
            continue

        contemporary = [
            (view_price, view_rating)
            for viewed_at, view_price, view_rating in views
            if abs(days_between(viewed_at, booked_at)) < CONTEMPORARY_VIEW_WINDOW_DAYS
        ]
        if not contemporary:
            continue

        average_price = mean(view_price for view_price, _ in contemporary)
        average_rating = mean(view_rating for _, view_rating in contemporary)

        if price > average_price and rating > average_rating:
            quality_over_price += 1
        elif price < average_price and rating < average_rating:
            price_over_quality += 1

    score = round_half_up(percentage(
        quality_over_price - price_over_quality,
        quality_over_price + price_over_quality,
    ))

    return PriceQualityAnalysis(
        preference=price_quality_preference(score),
        score=score,
        quality_choices=quality_over_price,
        price_choices=price_over_quality,
    )


def calculate_uniqueness_seeking(choices: Mapping[str, Any]) -> UniquenessAnalysis:
    """
    Appetite for novelty across property types, destinations and searches.

    Blend: 0.3 type uniqueness + 0.4 unusual-type ratio
           + 0.2 destination diversity + 0.1 search-term diversity
    """
    bookings = _records(choices, 'bookings')
    if not bookings:
        return UniquenessAnalysis()
    searches = _records(choices, 'searches')

    property_types = set()
    destinations = set()
    unusual_count = 0
    common_count = 0

    for booking in bookings:
        property_type = _text(field_value(booking, 'property_type'))
        if property_type:
            property_types.add(property_type)
            if any(unusual in property_type for unusual in UNUSUAL_PROPERTY_TYPES):
                unusual_count += 1
            elif any(common in property_type for common in COMMON_PROPERTY_TYPES):
                common_count += 1

        destination = _text(field_value(booking, 'destination'))
        if destination:
            destinations.add(destination)

    search_terms = {
        term for term in (_text(field_value(search, 'search_term')) for search in searches) if term
    }

    total_bookings = len(bookings)
    type_uniqueness = min(100.0, percentage(len(property_types), total_bookings))
    unusual_ratio = percentage(unusual_count, total_bookings)
    destination_diversity = min(100.0, percentage(len(destinations), total_bookings))
    search_diversity = min(100.0, percentage(len(search_terms), len(searches)))

    score = clamped_weighted_score([
        (type_uniqueness, TYPE_UNIQUENESS_WEIGHT),
        (unusual_ratio, UNUSUAL_RATIO_WEIGHT),
        (destination_diversity, DESTINATION_DIVERSITY_WEIGHT),
        (search_diversity, SEARCH_DIVERSITY_WEIGHT),
    ])

    return UniquenessAnalysis(
        score=score.display,
        category=label_for_score(score.display, UNIQUENESS_THRESHOLDS, UNIQUENESS_DEFAULT),
        unusual_property_percentage=round(unusual_ratio, 1),
        common_property_percentage=round(percentage(common_count, total_bookings), 1),
        property_type_diversity=len(property_types),
        raw_score=score.raw,
    )


def assess_risk_tolerance(choices: Mapping[str, Any]) -> RiskToleranceAnalysis:
    """
    Willingness to accept uncertainty when booking.

    Blend: 0.4 new-destination rate + 0.3 low-rating (<4.0) rate
           + 0.2 last-minute (<=7 days ahead) rate + 0.1 long-stay (>=14 nights) rate
    """
    bookings = _records(choices, 'bookings')
    if not bookings:
        return RiskToleranceAnalysis()

    visited_destinations = set()
    new_destination_count = 0
    low_rating_count = 0
    last_minute_count = 0
    long_stay_count = 0

    for booking in bookings:
        destination = _text(field_value(booking, 'destination'))
        if destination and destination not in visited_destinations:
            new_destination_count += 1
            visited_destinations.add(destination)

        rating = field_value(booking, 'rating')
        if is_number(rating) and rating < LOW_RATING_THRESHOLD:
            low_rating_count += 1

        booked_at = parse_timestamp(field_value(booking, 'booking_date'))
        check_in = parse_timestamp(field_value(booking, 'check_in'))
        check_out = parse_timestamp(field_value(booking, 'check_out'))

        if booked_at is not None and check_in is not None:
            if round_half_up(days_between(booked_at, check_in)) <= LAST_MINUTE_MAX_DAYS:
                last_minute_count += 1

        if check_in is not None and check_out is not None:
            if round_half_up(days_between(check_in, check_out)) >= LONG_STAY_MIN_DAYS:
                long_stay_count += 1

    total_bookings = len(bookings)
    new_destination_rate = percentage(new_destination_count, total_bookings)
    low_rating_rate = percentage(low_rating_count, total_bookings)
    last_minute_rate = percentage(last_minute_count, total_bookings)
    long_stay_rate = percentage(long_stay_count, total_bookings)

    score = clamped_weighted_score([
        (new_destination_rate, NEW_DESTINATION_WEIGHT),
        (low_rating_rate, LOW_RATING_WEIGHT),
        (last_minute_rate, LAST_MINUTE_WEIGHT),
        (long_stay_rate, LONG_STAY_WEIGHT),
    ])

    return RiskToleranceAnalysis(
        score=score.display,
        category=label_for_score(score.display, RISK_TOLERANCE_THRESHOLDS, RISK_TOLERANCE_DEFAULT),
        new_destination_percentage=round(new_destination_rate, 1),
        low_rating_booking_percentage=round(low_rating_rate, 1),
        last_minute_booking_percentage=round(last_minute_rate, 1),
        long_stay_percentage=round(long_stay_rate, 1),
        raw_score=score.raw,
    )


def extract_decision_patterns(choices: Optional[Mapping[str, Any]]) -> DecisionPatternReport:
    """
    Extract all decision-pattern analyses.

    Args:
        choices: {'bookings': [...], 'searches': [...], 'viewed_properties': [...]};
            any key may be missing

    Returns:
        DecisionPatternReport with every sub-record populated or empty
    """
    choices = choices or {}

    return DecisionPatternReport(
        impulsivity=calculate_impulsivity_score(choices),
        price_vs_quality=analyze_price_quality_tradeoff(choices),
        uniqueness=calculate_uniqueness_seeking(choices),
        risk_tolerance=assess_risk_tolerance(choices),
    )
