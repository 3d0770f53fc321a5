"""
Persona Engine Data Models

Dataclasses for the event log the engine reads and the reports it produces.

Every report record has an empty state (label and score fields None,
distributions empty) so a BehavioralProfile is always structurally complete,
even when the user has no history at all.
"""

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional

from backend.persona.metric_primitives import CategoryShare

Record = Dict[str, Any]


# ==================== Event Log ====================

@dataclass(frozen=True)
class EventLog:
    """
    Raw behavioral history for one user, supplied by the caller.

    Record fields (snake_case):
        bookings:          booking_date, check_in, check_out, price, rating,
                           property_type, destination, property_id
        sessions:          start_time, end_time
        searches:          date, property_id, search_term
        hovers:            duration (seconds), element_type
        scrolls:           depth_percentage, pixels_per_second
        image_views:       image_id, duration (seconds)
        price_filters:     min_price, max_price
        viewed_properties: view_date, price, rating, property_id
        calendar_events:   date, title, description
    """
    bookings: List[Record] = field(default_factory=list)
    sessions: List[Record] = field(default_factory=list)
    searches: List[Record] = field(default_factory=list)
    hovers: List[Record] = field(default_factory=list)
    scrolls: List[Record] = field(default_factory=list)
    image_views: List[Record] = field(default_factory=list)
    price_filters: List[Record] = field(default_factory=list)
    viewed_properties: List[Record] = field(default_factory=list)
    calendar_events: List[Record] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Optional[Mapping[str, Any]]) -> "EventLog":
        """Build from a plain mapping; missing or null sequences become empty."""
        payload = payload or {}
        return cls(**{f.name: list(payload.get(f.name) or []) for f in fields(cls)})

    def activity(self) -> Dict[str, List[Record]]:
        """Bundle for the time-pattern extractor."""
        return {
            'bookings': self.bookings,
            'sessions': self.sessions,
            'searches': self.searches,
            'calendar_events': self.calendar_events,
        }

    def interactions(self) -> Dict[str, List[Record]]:
        """Bundle for the micro-interaction extractor."""
        return {
            'hovers': self.hovers,
            'scrolls': self.scrolls,
            'image_views': self.image_views,
            'price_filters': self.price_filters,
        }

    def choices(self) -> Dict[str, List[Record]]:
        """Bundle for the decision-pattern extractor."""
        return {
            'bookings': self.bookings,
            'searches': self.searches,
            'viewed_properties': self.viewed_properties,
        }


# ==================== Time Patterns ====================

@dataclass
class BookingTimePattern:
    """When bookings are made (weekday and time band)"""
    preferred_day_of_week: Optional[str] = None
    preferred_time_of_day: Optional[str] = None
    day_distribution: Dict[str, CategoryShare] = field(default_factory=dict)
    time_distribution: Dict[str, CategoryShare] = field(default_factory=dict)

    @property
    def has_data(self) -> bool:
        return self.preferred_day_of_week is not None


@dataclass
class BrowsingTimePattern:
    """When browsing sessions start and how long they last"""
    preferred_browsing_time: Optional[str] = None   # "09:00 - 10:00"
    preferred_hour: Optional[int] = None
    average_session_minutes: Optional[float] = None
    hourly_distribution: Dict[str, CategoryShare] = field(default_factory=dict)

    @property
    def has_data(self) -> bool:
        return self.preferred_hour is not None


@dataclass
class SeasonalPreference:
    """Season searched most often"""
    preferred_season: Optional[str] = None
    seasonal_distribution: Dict[str, CategoryShare] = field(default_factory=dict)

    @property
    def has_data(self) -> bool:
        return self.preferred_season is not None


@dataclass
class PlanningHorizon:
    """Days between booking and check-in"""
    average_planning_days: Optional[int] = None
    planning_style: Optional[str] = None
    shortest_planning_days: Optional[int] = None
    longest_planning_days: Optional[int] = None

    @property
    def has_data(self) -> bool:
        return self.average_planning_days is not None


@dataclass
class PersonalEventAnalysis:
    """Calendar events that may trigger travel, grouped by month ("YYYY-MM")"""
    potential_travel_event_count: int = 0
    peak_travel_month: Optional[str] = None
    peak_event_count: int = 0
    events_by_month: Dict[str, CategoryShare] = field(default_factory=dict)

    @property
    def has_data(self) -> bool:
        return self.potential_travel_event_count > 0


@dataclass
class TimePatternReport:
    booking_time: BookingTimePattern = field(default_factory=BookingTimePattern)
    browsing_time: BrowsingTimePattern = field(default_factory=BrowsingTimePattern)
    seasonal_preference: SeasonalPreference = field(default_factory=SeasonalPreference)
    planning_horizon: PlanningHorizon = field(default_factory=PlanningHorizon)
    personal_events: PersonalEventAnalysis = field(default_factory=PersonalEventAnalysis)


# ==================== Micro-Interactions ====================

@dataclass
class HoverAnalysis:
    """Hover dwell time; element_breakdown counts are summed seconds"""
    average_time: Optional[float] = None  # seconds
    most_viewed_element_type: Optional[str] = None
    element_breakdown: Dict[str, CategoryShare] = field(default_factory=dict)

    @property
    def has_data(self) -> bool:
        return self.average_time is not None


@dataclass
class ScrollAnalysis:
    scroll_depth: Optional[float] = None   # mean depth percentage
    scroll_speed: Optional[float] = None   # mean pixels per second
    scroll_behavior: Optional[str] = None

    @property
    def has_data(self) -> bool:
        return self.scroll_behavior is not None


@dataclass
class ImageEngagement:
    average_view_time: Optional[float] = None  # seconds
    total_images_viewed: int = 0
    visual_engagement_level: Optional[str] = None

    @property
    def has_data(self) -> bool:
        return self.average_view_time is not None


@dataclass
class PriceSensitivity:
    price_elasticity: Optional[float] = None  # % of adjacent filter pairs that changed
    price_sensitivity: Optional[str] = None
    average_min_price: Optional[float] = None
    average_max_price: Optional[float] = None
    filter_count: int = 0

    @property
    def has_data(self) -> bool:
        return self.filter_count > 0


@dataclass
class MicroInteractionReport:
    hover: HoverAnalysis = field(default_factory=HoverAnalysis)
    scroll: ScrollAnalysis = field(default_factory=ScrollAnalysis)
    image_engagement: ImageEngagement = field(default_factory=ImageEngagement)
    price_sensitivity: PriceSensitivity = field(default_factory=PriceSensitivity)


# ==================== Decision Patterns ====================

@dataclass
class ImpulsivityAnalysis:
    score: Optional[int] = None          # 0-100, rounded
    category: Optional[str] = None
    average_decision_hours: Optional[float] = None
    quick_decision_percentage: Optional[float] = None
    raw_score: Optional[float] = None    # unrounded, for comparisons

    @property
    def has_data(self) -> bool:
        return self.score is not None


@dataclass
class PriceQualityAnalysis:
    preference: Optional[str] = None
    score: Optional[int] = None          # -100 (price) .. 100 (quality)
    quality_choices: int = 0
    price_choices: int = 0

    @property
    def has_data(self) -> bool:
        return self.preference is not None


@dataclass
class UniquenessAnalysis:
    score: Optional[int] = None
    category: Optional[str] = None
    unusual_property_percentage: Optional[float] = None
    common_property_percentage: Optional[float] = None
    property_type_diversity: int = 0
    raw_score: Optional[float] = None

    @property
    def has_data(self) -> bool:
        return self.score is not None


@dataclass
class RiskToleranceAnalysis:
    score: Optional[int] = None
    category: Optional[str] = None
    new_destination_percentage: Optional[float] = None
    low_rating_booking_percentage: Optional[float] = None
    last_minute_booking_percentage: Optional[float] = None
    long_stay_percentage: Optional[float] = None
    raw_score: Optional[float] = None

    @property
    def has_data(self) -> bool:
        return self.score is not None


@dataclass
class DecisionPatternReport:
    impulsivity: ImpulsivityAnalysis = field(default_factory=ImpulsivityAnalysis)
    price_vs_quality: PriceQualityAnalysis = field(default_factory=PriceQualityAnalysis)
    uniqueness: UniquenessAnalysis = field(default_factory=UniquenessAnalysis)
    risk_tolerance: RiskToleranceAnalysis = field(default_factory=RiskToleranceAnalysis)


# ==================== Composite Profile ====================

@dataclass
class BehavioralProfile:
    """Composite of the three extractor reports for one user"""
    time_patterns: TimePatternReport = field(default_factory=TimePatternReport)
    micro_interactions: MicroInteractionReport = field(default_factory=MicroInteractionReport)
    decision_patterns: DecisionPatternReport = field(default_factory=DecisionPatternReport)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ==================== Classification ====================

@dataclass
class ArchetypeMatch:
    """One archetype's score and the factors that produced it"""
    archetype: str
    score: int
    description: str
    factors: List[str] = field(default_factory=list)
    recommended_properties: List[str] = field(default_factory=list)


@dataclass
class ClassificationResult:
    primary_archetype: str
    match_score: int
    primary_description: str
    recommended_properties: List[str]
    top_archetypes: List[ArchetypeMatch]   # top 3, score desc, catalog order on ties
    trait_levels: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ==================== Seasonal Context ====================

@dataclass
class SeasonalFactors:
    """Seasonal context for a trip start date"""
    season: str
    characteristics: List[str] = field(default_factory=list)
    travel_considerations: List[str] = field(default_factory=list)
