"""
Pytest Configuration and Fixtures

Shared fixtures for all tests:
- Sample event logs (raw behavioral history)
- Trait scores
- Archetype catalogs
- Test utilities
"""

from typing import Any, Dict, Mapping

import pytest

from backend.core.config import Settings
from backend.persona.archetype_catalog import ArchetypeCatalog, TraitScore, get_default_catalog
from backend.persona.metric_primitives import CategoryShare


# Event log fixtures

@pytest.fixture
def sample_event_log() -> Dict[str, Any]:
    """One user's history: three bookings, a few sessions, searches, UI events and calendar entries"""
    return {
        'bookings': [
            {
                'booking_date': '2024-01-07T09:30:00',
                'check_in': '2024-01-20',
                'check_out': '2024-01-23',
                'price': 320.0,
                'rating': 4.8,
                'property_type': 'Treehouse',
                'destination': 'Oslo',
                'property_id': 'p-100',
            },
            {
                'booking_date': '2024-03-10T10:15:00',
                'check_in': '2024-03-15',
                'check_out': '2024-03-18',
                'price': 280.0,
                'rating': 4.6,
                'property_type': 'Castle',
                'destination': 'Edinburgh',
                'property_id': 'p-200',
            },
            {
                'booking_date': '2024-07-14T20:00:00',
                'check_in': '2024-08-01',
                'check_out': '2024-08-05',
                'price': 410.0,
                'rating': 4.9,
                'property_type': 'Igloo',
                'destination': 'Rovaniemi',
                'property_id': 'p-300',
            },
        ],
        'sessions': [
            {'start_time': '2024-01-06T21:10:00', 'end_time': '2024-01-06T21:40:00'},
            {'start_time': '2024-03-09T21:05:00', 'end_time': '2024-03-09T21:25:00'},
            {'start_time': '2024-07-13T09:00:00'},
        ],
        'searches': [
            {'date': '2024-01-07T08:45:00', 'property_id': 'p-100', 'search_term': 'treehouse norway'},
            {'date': '2024-03-10T09:00:00', 'property_id': 'p-200', 'search_term': 'castle stay'},
            {'date': '2024-07-14T19:30:00', 'property_id': 'p-300', 'search_term': 'igloo lapland'},
        ],
        'hovers': [
            {'duration': 2.0, 'element_type': 'photo'},
            {'duration': 4.0, 'element_type': 'price'},
            {'duration': 3.0, 'element_type': 'photo'},
        ],
        'scrolls': [
            {'depth_percentage': 90, 'pixels_per_second': 400},
            {'depth_percentage': 85, 'pixels_per_second': 500},
        ],
        'image_views': [
            {'image_id': 'img-1', 'duration': 6.0},
            {'image_id': 'img-2', 'duration': 4.0},
            {'image_id': 'img-1', 'duration': 6.0},
        ],
        'price_filters': [
            {'min_price': 100, 'max_price': 300},
            {'min_price': 100, 'max_price': 300},
            {'min_price': 150, 'max_price': 400},
        ],
        'viewed_properties': [
            {'view_date': '2024-01-06T20:00:00', 'price': 200.0, 'rating': 4.2, 'property_id': 'p-101'},
            {'view_date': '2024-01-06T20:05:00', 'price': 240.0, 'rating': 4.4, 'property_id': 'p-102'},
            {'view_date': '2024-07-13T18:00:00', 'price': 300.0, 'rating': 4.5, 'property_id': 'p-301'},
        ],
        'calendar_events': [
            {'date': '2024-06-22', 'title': 'Cousin wedding', 'description': 'Bergen'},
            {'date': '2024-06-30', 'title': 'Dentist'},
            {'date': '2024-07-28', 'title': 'Team offsite'},
        ],
    }


# Trait fixtures

@pytest.fixture
def explorer_traits() -> TraitScore:
    """Open, calm, introverted: levels high/low/low/low/low"""
    return TraitScore(
        openness=80,
        conscientiousness=30,
        extraversion=20,
        agreeableness=40,
        neuroticism=15,
    )


# Catalog fixtures

@pytest.fixture
def default_catalog() -> ArchetypeCatalog:
    return get_default_catalog()


@pytest.fixture
def twin_catalog_records():
    """Two archetypes with identical requirements (tie-break checks)"""
    return [
        {
            'name': 'First Twin',
            'required_traits': {'openness': 'high'},
            'description': 'Declared first',
            'recommended_properties': ['Cabin'],
        },
        {
            'name': 'Second Twin',
            'required_traits': {'openness': 'high'},
            'description': 'Declared second',
            'recommended_properties': ['Loft'],
        },
    ]


# Settings fixtures

@pytest.fixture
def sequential_settings() -> Settings:
    return Settings(parallel_extractors=False, fallback_trait_score=50.0)


@pytest.fixture
def parallel_settings() -> Settings:
    return Settings(parallel_extractors=True, fallback_trait_score=50.0)


# Utility functions

def assert_percentages_sum_to_100(distribution: Mapping[str, CategoryShare]):
    """Assert a non-empty distribution's percentages sum to 100 (within 0.1)"""
    assert distribution, "distribution is empty"
    total = sum(share.percentage for share in distribution.values())
    assert abs(total - 100.0) <= 0.1, f"Percentages sum to {total}, not 100"
