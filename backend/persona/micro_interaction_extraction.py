"""
Micro-Interaction Extraction

Derives engagement intensity from UI telemetry:

1. hover - dwell time per element type
2. scroll - depth and speed, mapped to a reading behavior
3. image_engagement - how long photos hold attention
4. price_sensitivity - how often the price filter is adjusted

Missing durations count as zero seconds. Averages over optional fields
(scroll depth, scroll speed, filter prices) use only the records that
report the field.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Sequence

from backend.persona.metric_primitives import (
    argmax_label,
    distribution_of,
    field_value,
    is_number,
    label_for_score,
    mean,
    numeric_values,
    percentage,
)
from backend.persona.models import (
    HoverAnalysis,
    ImageEngagement,
    MicroInteractionReport,
    PriceSensitivity,
    ScrollAnalysis,
)

logger = logging.getLogger(__name__)


DEEP_SCROLL_DEPTH = 80.0      # percent
FAST_SCROLL_SPEED = 1000.0    # pixels per second

# Reading behavior by (deep, fast)
SCROLL_BEHAVIORS = {
    (True, True): 'Rapid Deep Reader',
    (True, False): 'Thorough Reader',
    (False, True): 'Quick Scanner',
    (False, False): 'Casual Browser',
}

IMAGE_ENGAGEMENT_THRESHOLDS = [(5.0, 'High'), (2.0, 'Medium')]
PRICE_SENSITIVITY_THRESHOLDS = [(60.0, 'High'), (30.0, 'Medium')]


def _seconds(record: Any) -> float:
    """Non-negative duration in seconds; missing or invalid counts as 0."""
    duration = field_value(record, 'duration')
    if not is_number(duration) or duration < 0:
        return 0.0
    return float(duration)


def _element_type(record: Any) -> str:
    return field_value(record, 'element_type') or 'unknown'


def calculate_average_hover_time(hovers: Optional[Sequence[Mapping[str, Any]]]) -> HoverAnalysis:
    """
    Average hover dwell and the element type holding attention longest.

    Returns an empty HoverAnalysis (average_time and most_viewed_element_type
    None) when there are no hovers.
    """
    hovers = list(hovers or [])
    if not hovers:
        return HoverAnalysis()

    seconds_by_type: Dict[str, float] = {}
    for hover in hovers:
        element_type = _element_type(hover)
        seconds_by_type[element_type] = seconds_by_type.get(element_type, 0.0) + _seconds(hover)

    total_seconds = sum(seconds_by_type.values())

    return HoverAnalysis(
        average_time=round(total_seconds / len(hovers), 1),
        most_viewed_element_type=argmax_label(seconds_by_type),
        element_breakdown=distribution_of(hovers, _element_type, weight=_seconds),
    )


def analyze_scroll_patterns(scrolls: Optional[Sequence[Mapping[str, Any]]]) -> ScrollAnalysis:
    """Mean scroll depth and speed, and the reading behavior they imply."""
    scrolls = list(scrolls or [])
    if not scrolls:
        return ScrollAnalysis()

    depth = mean(numeric_values(scrolls, 'depth_percentage'))
    speed = mean(numeric_values(scrolls, 'pixels_per_second'))

    depth = round(depth, 1) if depth is not None else None
    speed = round(speed, 1) if speed is not None else None

    # A metric nobody reported cannot push the user over a threshold
    deep = depth is not None and depth > DEEP_SCROLL_DEPTH
    fast = speed is not None and speed > FAST_SCROLL_SPEED

    return ScrollAnalysis(
        scroll_depth=depth,
        scroll_speed=speed,
        scroll_behavior=SCROLL_BEHAVIORS[(deep, fast)],
    )


def calculate_image_view_time(image_views: Optional[Sequence[Mapping[str, Any]]]) -> ImageEngagement:
    """Mean photo view time, distinct photos seen, and engagement level."""
    image_views = list(image_views or [])
    if not image_views:
        return ImageEngagement()

    average_view_time = round(sum(_seconds(view) for view in image_views) / len(image_views), 1)
    unique_images = {
        field_value(view, 'image_id')
        for view in image_views
        if field_value(view, 'image_id') is not None
    }

    return ImageEngagement(
        average_view_time=average_view_time,
        total_images_viewed=len(unique_images),
        visual_engagement_level=label_for_score(average_view_time, IMAGE_ENGAGEMENT_THRESHOLDS, 'Low'),
    )


def analyze_price_sensitivity(price_filters: Optional[Sequence[Mapping[str, Any]]]) -> PriceSensitivity:
    """
    Price elasticity: share of consecutive filter applications that changed
    the min or max price.

    A single filter has no adjacent pair, so elasticity and sensitivity stay
    None while the average range is still reported.
    """
    price_filters = list(price_filters or [])
    if not price_filters:
        return PriceSensitivity()

    changes = 0
    for previous, current in zip(price_filters, price_filters[1:]):
        if (field_value(previous, 'min_price') != field_value(current, 'min_price')
                or field_value(previous, 'max_price') != field_value(current, 'max_price')):
            changes += 1

    average_min = mean(numeric_values(price_filters, 'min_price'))
    average_max = mean(numeric_values(price_filters, 'max_price'))

    elasticity: Optional[float] = None
    sensitivity: Optional[str] = None
    if len(price_filters) > 1:
        elasticity = round(percentage(changes, len(price_filters) - 1), 1)
        sensitivity = label_for_score(elasticity, PRICE_SENSITIVITY_THRESHOLDS, 'Low')

    return PriceSensitivity(
        price_elasticity=elasticity,
        price_sensitivity=sensitivity,
        average_min_price=round(average_min, 2) if average_min is not None else None,
        average_max_price=round(average_max, 2) if average_max is not None else None,
        filter_count=len(price_filters),
    )


def extract_micro_interactions(interactions: Optional[Mapping[str, Any]]) -> MicroInteractionReport:
    """
    Extract all micro-interaction metrics.

    Args:
        interactions: {'hovers': [...], 'scrolls': [...], 'image_views': [...],
            'price_filters': [...]}; any key may be missing

    Returns:
        MicroInteractionReport with every sub-record populated or empty
    """
    interactions = interactions or {}

    return MicroInteractionReport(
        hover=calculate_average_hover_time(interactions.get('hovers')),
        scroll=analyze_scroll_patterns(interactions.get('scrolls')),
        image_engagement=calculate_image_view_time(interactions.get('image_views')),
        price_sensitivity=analyze_price_sensitivity(interactions.get('price_filters')),
    )
